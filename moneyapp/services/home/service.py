"""
Home Dashboard Service

Builds the DashboardSummary from two independent fetches (recent
transactions and the account list), issued concurrently.

Totals:
- total_balance: sum of every account's balance
- monthly_spending: sum of |amount| over transactions dated on or after
  the start of the current calendar month with a negative amount

CRITICAL: If either fetch fails the whole summary fails with that error.
There is no partial dashboard.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from moneyapp.models.activity import ActivityEventBuilder
from moneyapp.models.finance import (
    AccountListResponse,
    AccountSummary,
    DashboardSummary,
    Money,
    Transaction,
    TransactionListResponse,
)
from moneyapp.observability import ActivityLogger
from moneyapp.services.api import AccountEndpoints, ApiClientInterface, TransactionEndpoints
from moneyapp.services.base import DomainService
from moneyapp.services.credentials import TokenManagerInterface


DEFAULT_RECENT_LIMIT = 5


def _local_now() -> datetime:
    # Naive wall-clock time; a fixed UTC offset would be wrong for the
    # first of the month whenever daylight saving changed since then
    return datetime.now()


def start_of_month(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


class HomeService(DomainService):
    """Dashboard data for the home screen."""

    def __init__(
        self,
        api_client: ApiClientInterface,
        token_manager: TokenManagerInterface,
        activity: Optional[ActivityLogger] = None,
        recent_limit: int = DEFAULT_RECENT_LIMIT,
        currency: str = "USD",
        now: Callable[[], datetime] = _local_now,
    ):
        """
        Args:
            api_client: Backend access.
            token_manager: Session owner, cleared on 401.
            activity: Observability sink.
            recent_limit: How many recent transactions the dashboard shows.
            currency: Currency the dashboard totals are reported in.
            now: Clock used to find the current month. Returns naive local
                 wall-clock time, or an aware time whose tzinfo is a real
                 zone such as a zoneinfo.ZoneInfo.
        """
        super().__init__(api_client, token_manager, activity)
        self._recent_limit = recent_limit
        self._currency = currency
        self._now = now

    async def get_dashboard_summary(self) -> DashboardSummary:
        transactions, accounts = await asyncio.gather(
            self.get_recent_transactions(self._recent_limit),
            self.get_account_summaries(),
        )

        summary = DashboardSummary(
            total_balance=self.calculate_total_balance(accounts),
            monthly_spending=self.calculate_monthly_spending(transactions),
            recent_transactions=transactions,
            account_summaries=accounts,
        )
        self._activity.log(
            ActivityEventBuilder.dashboard_refreshed(len(accounts), len(transactions))
        )
        return summary

    async def get_recent_transactions(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[Transaction]:
        response: TransactionListResponse = await self._request(
            TransactionEndpoints.RECENT, TransactionListResponse
        )
        return response.to_domain()[:limit]

    async def get_account_summaries(self) -> list[AccountSummary]:
        response: AccountListResponse = await self._request(
            AccountEndpoints.LIST, AccountListResponse
        )
        return response.to_domain()

    async def refresh_all_data(self) -> DashboardSummary:
        """Re-fetch everything. There is no conditional or delta fetch."""
        return await self.get_dashboard_summary()

    refresh_dashboard = refresh_all_data

    # =========================================================================
    # CALCULATIONS
    # =========================================================================

    def calculate_total_balance(self, accounts: list[AccountSummary]) -> Money:
        total = sum((account.balance.amount for account in accounts), Decimal("0"))
        return Money(amount=total, currency=self._currency)

    def calculate_monthly_spending(self, transactions: list[Transaction]) -> Money:
        month_start = start_of_month(self._now())
        total = sum(
            (
                abs(tx.amount.amount)
                for tx in transactions
                if tx.amount.amount < 0 and _on_or_after(tx.date, month_start)
            ),
            Decimal("0"),
        )
        return Money(amount=total, currency=self._currency)


def _on_or_after(moment: datetime, boundary: datetime) -> bool:
    # Naive timestamps are taken as local wall-clock time
    if moment.tzinfo is None and boundary.tzinfo is not None:
        boundary = boundary.replace(tzinfo=None)
    elif moment.tzinfo is not None and boundary.tzinfo is None:
        moment = moment.astimezone().replace(tzinfo=None)
    return moment >= boundary
