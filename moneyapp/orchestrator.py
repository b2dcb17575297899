"""
Main Orchestrator for MoneyApp Core

This module ties together all the components:
1. Composition root: settings -> credential store -> token manager ->
   API client -> domain services -> dashboard poller
2. Dashboard flow: binds the dashboard poller to presentation code

DESIGN DECISION: Components never read settings or globals themselves.
create_app_components() reads Settings once and passes plain values into
constructors, so every component can be built by hand in tests.

Presentation code never polls properties for changes. It subscribes to
the session channel (sign-in / sign-out) and the poller channel
(dashboard results and errors).
"""

from dataclasses import dataclass
from typing import Callable, Optional

import httpx

from moneyapp.config import Settings, get_settings
from moneyapp.events import EventChannel, SessionEvent, SessionState
from moneyapp.models.finance import DashboardSummary, Money
from moneyapp.observability import ActivityLogger, configure_logging
from moneyapp.polling import PollEvent, PollingController
from moneyapp.services.accounts import AccountsService
from moneyapp.services.api import HttpApiClient
from moneyapp.services.auth import AuthService
from moneyapp.services.credentials import (
    CredentialStoreInterface,
    KeyringCredentialStore,
    SessionPreferences,
    TokenManager,
)
from moneyapp.services.home import HomeService
from moneyapp.services.onboarding import OnboardingService
from moneyapp.services.transactions import TransactionsService


# =============================================================================
# COMPOSITION ROOT
# =============================================================================

@dataclass
class AppComponents:
    """Everything one running app instance needs, wired together."""
    settings: Settings
    activity: ActivityLogger
    session_events: EventChannel[SessionEvent]
    credential_store: CredentialStoreInterface
    preferences: SessionPreferences
    token_manager: TokenManager
    api_client: HttpApiClient
    auth: AuthService
    home: HomeService
    onboarding: OnboardingService
    accounts: AccountsService
    transactions: TransactionsService
    dashboard_poller: PollingController[DashboardSummary]

    def dashboard_flow(self) -> "DashboardFlow":
        return DashboardFlow(
            self.dashboard_poller,
            session_events=self.session_events,
            activity=self.activity,
        )

    async def aclose(self) -> None:
        """Stop polling and release the HTTP connection pool."""
        self.dashboard_poller.stop()
        await self.dashboard_poller.wait_stopped()
        await self.api_client.aclose()


def create_app_components(
    settings: Optional[Settings] = None,
    credential_store: Optional[CredentialStoreInterface] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    preferences: Optional[SessionPreferences] = None,
    setup_logging: bool = True,
) -> AppComponents:
    """
    Build the app's object graph.

    Args:
        settings: Defaults to get_settings()
        credential_store: Defaults to the OS keychain under the configured
                          service name
        transport: httpx transport override (tests pass a MockTransport)
        preferences: Defaults to the JSON file in the user config dir
        setup_logging: Configure structlog from the app settings
    """
    settings = settings or get_settings()
    app_settings = settings.app
    api_settings = settings.api
    store_settings = settings.secure_store
    polling_settings = settings.polling

    if setup_logging:
        configure_logging(app_settings)

    activity = ActivityLogger()
    activity.set_custom_value("app_environment", app_settings.app_environment)
    activity.set_custom_value("build", api_settings.build)

    session_events: EventChannel[SessionEvent] = EventChannel("session")
    credential_store = credential_store or KeyringCredentialStore(store_settings.service_name)
    preferences = preferences or SessionPreferences(store_settings.resolved_preferences_path)

    token_manager = TokenManager(
        credential_store,
        access_token_key=store_settings.access_token_key,
        refresh_token_key=store_settings.refresh_token_key,
        preferences=preferences,
        session_events=session_events,
        activity=activity,
    )
    api_client = HttpApiClient(
        api_settings.base_url,
        token_manager=token_manager,
        timeout_seconds=api_settings.timeout_seconds,
        user_agent=api_settings.user_agent,
        transport=transport,
        activity=activity,
    )

    home = HomeService(
        api_client,
        token_manager,
        activity=activity,
        recent_limit=polling_settings.recent_transactions_limit,
    )
    dashboard_poller: PollingController[DashboardSummary] = PollingController(
        home.refresh_all_data,
        interval_seconds=polling_settings.interval_seconds,
        fire_immediately=polling_settings.fire_immediately,
        activity=activity,
        name="dashboard",
    )

    return AppComponents(
        settings=settings,
        activity=activity,
        session_events=session_events,
        credential_store=credential_store,
        preferences=preferences,
        token_manager=token_manager,
        api_client=api_client,
        auth=AuthService(api_client, token_manager, activity=activity),
        home=home,
        onboarding=OnboardingService(api_client, token_manager, activity=activity),
        accounts=AccountsService(api_client, token_manager, activity=activity),
        transactions=TransactionsService(api_client, token_manager, activity=activity),
        dashboard_poller=dashboard_poller,
    )


# =============================================================================
# DASHBOARD FLOW
# =============================================================================

class DashboardFlow:
    """
    Presentation-facing state for the home dashboard.

    Flow:
    1. activate() when the dashboard becomes visible -> polling starts
    2. Every poll result replaces ``summary``; every failure sets
       ``error_message`` (a short user-safe text) and keeps the last
       good summary
    3. deactivate() when the dashboard is hidden -> polling stops
    4. Signing out (logout or a rejected session) deactivates the flow
       and drops the summary
    """

    def __init__(
        self,
        poller: PollingController[DashboardSummary],
        session_events: Optional[EventChannel[SessionEvent]] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        self._poller = poller
        self._activity = activity or ActivityLogger()
        self._summary: Optional[DashboardSummary] = None
        self._error_message: Optional[str] = None

        self._unsubscribers: list[Callable[[], None]] = [
            poller.channel.subscribe(self._on_poll),
        ]
        if session_events is not None:
            self._unsubscribers.append(session_events.subscribe(self._on_session))

    @property
    def summary(self) -> Optional[DashboardSummary]:
        return self._summary

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def show_error(self) -> bool:
        return self._error_message is not None

    @property
    def is_polling(self) -> bool:
        return self._poller.is_running

    @property
    def total_balance_text(self) -> str:
        if self._summary is None:
            return Money.zero().formatted_amount
        return self._summary.total_balance.formatted_amount

    @property
    def monthly_spending_text(self) -> str:
        if self._summary is None:
            return Money.zero().formatted_amount
        return self._summary.monthly_spending.formatted_amount

    def activate(self) -> None:
        self._activity.log_user_action("dashboard_activated")
        self._poller.start()

    def deactivate(self) -> None:
        self._poller.stop()

    async def refresh(self) -> PollEvent[DashboardSummary]:
        """Pull-to-refresh: one immediate iteration outside the cadence."""
        self._activity.log_user_action("dashboard_refreshed")
        return await self._poller.poll_once()

    def dismiss_error(self) -> None:
        self._error_message = None

    def close(self) -> None:
        """Deactivate and detach from all channels."""
        self.deactivate()
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    def _on_poll(self, event: PollEvent[DashboardSummary]) -> None:
        if event.succeeded:
            self._summary = event.result
            self._error_message = None
        else:
            self._error_message = event.message

    def _on_session(self, event: SessionEvent) -> None:
        if event.state == SessionState.SIGNED_OUT:
            self.deactivate()
            self._summary = None
            self._error_message = None
