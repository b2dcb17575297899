"""Accounts service package."""

from moneyapp.services.accounts.service import AccountsService

__all__ = ["AccountsService"]
