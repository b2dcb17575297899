"""
Transactions Service

Transaction history, the recent-transactions feed, spending summaries
and the category catalogue.
"""

from moneyapp.models.finance import (
    CategoriesResponse,
    SpendingSummaryResponse,
    Transaction,
    TransactionListResponse,
)
from moneyapp.services.api import TransactionEndpoints
from moneyapp.services.base import DomainService


DEFAULT_SUMMARY_DAYS = 30


class TransactionsService(DomainService):
    """Operations on ``/api/transactions/*``."""

    async def list_transactions(self) -> list[Transaction]:
        response: TransactionListResponse = await self._request(
            TransactionEndpoints.LIST, TransactionListResponse
        )
        return response.to_domain()

    async def get_recent_transactions(self, limit: int = 5) -> list[Transaction]:
        """Newest transactions first, at most ``limit`` of them."""
        if limit < 0:
            raise ValueError("limit must be >= 0")
        response: TransactionListResponse = await self._request(
            TransactionEndpoints.RECENT, TransactionListResponse
        )
        return response.to_domain()[:limit]

    async def get_spending_summary(self, days: int = DEFAULT_SUMMARY_DAYS) -> SpendingSummaryResponse:
        """
        Spending and income aggregated over the last ``days`` days.

        Raises:
            ValueError: If days is not positive
            ApiError: If the request fails
        """
        if days <= 0:
            raise ValueError("days must be positive")
        return await self._request(
            TransactionEndpoints.SUMMARY,
            SpendingSummaryResponse,
            params={"days": days},
        )

    async def get_categories(self) -> CategoriesResponse:
        return await self._request(TransactionEndpoints.CATEGORIES, CategoriesResponse)
