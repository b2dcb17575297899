"""Transactions service package."""

from moneyapp.services.transactions.service import (
    DEFAULT_SUMMARY_DAYS,
    TransactionsService,
)

__all__ = [
    "DEFAULT_SUMMARY_DAYS",
    "TransactionsService",
]
