"""Tests for the composition root and DashboardFlow."""

import asyncio
from datetime import datetime, timezone

import pytest

from moneyapp.config import Settings
from moneyapp.events import SessionChangeReason
from moneyapp.orchestrator import AppComponents, create_app_components

from tests.conftest import BASE_URL, account_payload, auth_payload, transaction_payload


async def wait_until(predicate, timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def components(monkeypatch, backend, credential_store, preferences) -> AppComponents:
    monkeypatch.delenv("MONEYAPP_API_BUILD", raising=False)
    monkeypatch.setenv("MONEYAPP_API_RELEASE_BASE_URL", BASE_URL)
    monkeypatch.setenv("MONEYAPP_POLLING_INTERVAL_SECONDS", "0.05")
    return create_app_components(
        settings=Settings(),
        credential_store=credential_store,
        transport=backend.transport,
        preferences=preferences,
        setup_logging=False,
    )


@pytest.fixture
def dashboard_backend(backend):
    now = datetime.now(timezone.utc)
    backend.add("GET", "/api/accounts/", json={
        "accounts": [account_payload(1, 100.0), account_payload(2, 50.0)],
    })
    backend.add("GET", "/api/transactions/recent", json={
        "transactions": [transaction_payload(1, -30.0, now)],
    })
    return backend


class TestCreateAppComponents:
    """Tests for object graph wiring."""

    def test_services_share_one_session(self, components):
        """Test every service sees the same token manager and client."""
        assert components.auth._token_manager is components.token_manager
        assert components.home._api is components.api_client
        assert components.transactions._token_manager is components.token_manager
        assert components.dashboard_poller.name == "dashboard"
        assert components.dashboard_poller.interval_seconds == 0.05

    def test_build_flag_resolved_only_by_composition_root(
        self, monkeypatch, backend, credential_store, preferences
    ):
        """Test the build flag reaches the client as a resolved base URL."""
        monkeypatch.setenv("MONEYAPP_API_BUILD", "debug")
        monkeypatch.setenv("MONEYAPP_API_DEBUG_BASE_URL", "http://localhost:9000")
        components = create_app_components(
            settings=Settings(),
            credential_store=credential_store,
            transport=backend.transport,
            preferences=preferences,
            setup_logging=False,
        )

        assert components.api_client.base_url == "http://localhost:9000"

        # Changing the environment later does not move an existing client
        monkeypatch.setenv("MONEYAPP_API_BUILD", "release")
        assert components.api_client.base_url == "http://localhost:9000"

    def test_login_uses_configured_keys(self, components, backend, credential_store):
        """Test tokens land under the configured keychain keys."""
        backend.add("POST", "/api/auth/login", json=auth_payload())

        asyncio.run(components.auth.login("john.doe@example.com", "secret"))

        assert sorted(credential_store.keys()) == ["jwt_access_token", "jwt_refresh_token"]
        assert str(backend.requests[0].url) == f"{BASE_URL}/api/auth/login"

    def test_aclose_stops_polling(self, components, dashboard_backend):
        """Test aclose() stops the poller."""
        async def run():
            components.dashboard_poller.start()
            await components.aclose()
            return components.dashboard_poller.is_running

        assert asyncio.run(run()) is False


class TestDashboardFlow:
    """Tests for the presentation-facing dashboard state."""

    def test_defaults_before_first_result(self, components):
        """Test the flow shows zero totals before any data arrives."""
        flow = components.dashboard_flow()

        assert flow.summary is None
        assert flow.total_balance_text == "$0.00"
        assert flow.monthly_spending_text == "$0.00"
        assert flow.show_error is False

    def test_refresh_populates_summary(self, components, dashboard_backend):
        """Test a manual refresh fills in the dashboard."""
        flow = components.dashboard_flow()

        asyncio.run(flow.refresh())

        assert flow.total_balance_text == "$150.00"
        assert flow.monthly_spending_text == "$30.00"
        assert len(flow.summary.recent_transactions) == 1

    def test_failure_sets_error_and_keeps_summary(self, components, dashboard_backend):
        """Test a failed refresh shows a message but keeps the last data."""
        flow = components.dashboard_flow()
        asyncio.run(flow.refresh())
        dashboard_backend.add("GET", "/api/accounts/", status=503)

        asyncio.run(flow.refresh())

        assert flow.show_error is True
        assert flow.error_message == "Server error (503). Please try again later."
        assert flow.total_balance_text == "$150.00"

        flow.dismiss_error()
        assert flow.show_error is False

    def test_activate_polls_until_deactivated(self, components, dashboard_backend):
        """Test activate() starts the poller and deactivate() stops it."""
        flow = components.dashboard_flow()

        async def run():
            flow.activate()
            await wait_until(lambda: flow.summary is not None)
            polling = flow.is_polling
            flow.deactivate()
            await components.dashboard_poller.wait_stopped()
            return polling

        assert asyncio.run(run()) is True
        assert flow.is_polling is False

    def test_sign_out_deactivates_flow(self, components, dashboard_backend):
        """Test logout stops polling and drops the summary."""
        flow = components.dashboard_flow()

        async def run():
            await components.token_manager.save_tokens("a1")
            flow.activate()
            await wait_until(lambda: flow.summary is not None)
            await components.token_manager.clear_tokens(SessionChangeReason.LOGOUT)
            await components.dashboard_poller.wait_stopped()

        asyncio.run(run())

        assert flow.is_polling is False
        assert flow.summary is None
        assert flow.total_balance_text == "$0.00"

    def test_rejected_session_during_polling(self, components, backend):
        """Test a 401 while polling ends the session and the flow."""
        backend.add("GET", "/api/accounts/", status=401)
        backend.add("GET", "/api/transactions/recent", json={"transactions": []})
        flow = components.dashboard_flow()

        async def run():
            await components.token_manager.save_tokens("stale")
            flow.activate()
            await wait_until(lambda: not flow.is_polling)
            await components.dashboard_poller.wait_stopped()
            return await components.token_manager.is_authenticated()

        assert asyncio.run(run()) is False
        assert flow.summary is None

    def test_close_detaches_from_poller(self, components, dashboard_backend):
        """Test a closed flow ignores further poll results."""
        flow = components.dashboard_flow()
        flow.close()

        asyncio.run(components.dashboard_poller.poll_once())

        assert flow.summary is None
