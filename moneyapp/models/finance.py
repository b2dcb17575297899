"""
Finance Data Models for MoneyApp

Two families of models live here:

1. WIRE models (``*Response`` / ``*Request``) mirror the backend's JSON
   bodies field for field. They are what the API client decodes into.
2. DOMAIN models (Money, AccountSummary, Transaction, DashboardSummary)
   are what the rest of the app works with.

DESIGN DECISION: Domain records are frozen. They are plain values with no
identity beyond their ``id`` field and no back-references, so they can be
shared between the poller, subscribers and tests without copying.

Money amounts are Decimal, never float.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


# =============================================================================
# DOMAIN MODELS
# =============================================================================

class Money(BaseModel):
    """An amount in a single currency."""
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(
        ...,
        description="Signed amount; negative for outflows"
    )
    currency: str = Field(
        default="USD",
        min_length=3,
        max_length=3,
        description="ISO-4217 currency code"
    )

    @property
    def formatted_amount(self) -> str:
        """Human-readable amount, e.g. ``$1,234.50`` or ``-12.00 CAD``."""
        quantized = abs(self.amount).quantize(Decimal("0.01"))
        sign = "-" if self.amount < 0 else ""
        symbol = CURRENCY_SYMBOLS.get(self.currency.upper())
        if symbol:
            return f"{sign}{symbol}{quantized:,.2f}"
        return f"{sign}{quantized:,.2f} {self.currency.upper()}"

    @classmethod
    def zero(cls, currency: str = "USD") -> "Money":
        return cls(amount=Decimal("0"), currency=currency)


class AccountSummary(BaseModel):
    """A linked bank account as shown on the dashboard."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str
    balance: Money
    last_synced: Optional[datetime] = None


class Transaction(BaseModel):
    """A single posted transaction."""
    model_config = ConfigDict(frozen=True)

    id: str
    amount: Money
    description: str
    date: datetime
    category: Optional[str] = None
    account_id: str


class DashboardSummary(BaseModel):
    """
    Everything the home dashboard shows, computed from one
    accounts fetch and one recent-transactions fetch.
    """
    model_config = ConfigDict(frozen=True)

    total_balance: Money
    monthly_spending: Money
    recent_transactions: list[Transaction] = Field(default_factory=list)
    account_summaries: list[AccountSummary] = Field(default_factory=list)


# =============================================================================
# WIRE MODELS - accounts
# =============================================================================

class AccountResponse(BaseModel):
    """Account as returned by ``/api/accounts/``."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    type: str
    subtype: Optional[str] = None
    mask: Optional[str] = None
    current_balance: Optional[Decimal] = None
    available_balance: Optional[Decimal] = None
    currency_code: str = "USD"
    last_updated: Optional[datetime] = None

    def to_domain(self) -> AccountSummary:
        return AccountSummary(
            id=str(self.id),
            name=self.name,
            type=self.type,
            balance=Money(
                amount=self.current_balance if self.current_balance is not None else Decimal("0"),
                currency=self.currency_code,
            ),
            last_synced=self.last_updated,
        )


class AccountListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    accounts: list[AccountResponse] = Field(default_factory=list)

    def to_domain(self) -> list[AccountSummary]:
        return [account.to_domain() for account in self.accounts]


class LinkTokenResponse(BaseModel):
    """Short-lived token used to open the bank-linking flow."""
    model_config = ConfigDict(extra="ignore")

    link_token: str
    expiration: Optional[datetime] = None


class PublicTokenExchangeRequest(BaseModel):
    """Body for exchanging a bank-link public token for linked accounts."""

    public_token: str = Field(..., min_length=1)
    institution_id: Optional[str] = None
    institution_name: Optional[str] = None


class PublicTokenExchangeResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    accounts_linked: int = Field(default=0, ge=0)
    message: Optional[str] = None


class AccountSyncInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    account_id: int
    status: str
    last_synced: Optional[datetime] = None
    error: Optional[str] = None


class SyncAccountsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    synced_accounts: list[AccountSyncInfo] = Field(default_factory=list)
    message: Optional[str] = None


class SyncStatusResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    is_syncing: bool = False
    last_sync: Optional[datetime] = None
    accounts: list[AccountSyncInfo] = Field(default_factory=list)


# =============================================================================
# WIRE MODELS - transactions
# =============================================================================

class AccountInfo(BaseModel):
    """Minimal account reference embedded in a transaction."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: Optional[str] = None


class TransactionResponse(BaseModel):
    """Transaction as returned by ``/api/transactions/``."""
    model_config = ConfigDict(extra="ignore")

    id: int
    amount: Decimal
    currency_code: str = "USD"
    name: str
    merchant_name: Optional[str] = None
    date: datetime
    primary_category: Optional[str] = None
    pending: bool = False
    account: AccountInfo

    def to_domain(self) -> Transaction:
        return Transaction(
            id=str(self.id),
            amount=Money(amount=self.amount, currency=self.currency_code),
            description=self.name,
            date=self.date,
            category=self.primary_category,
            account_id=str(self.account.id),
        )


class TransactionListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    transactions: list[TransactionResponse] = Field(default_factory=list)
    total: Optional[int] = None

    def to_domain(self) -> list[Transaction]:
        return [transaction.to_domain() for transaction in self.transactions]


class CategorySpending(BaseModel):
    model_config = ConfigDict(extra="ignore")

    category: str
    amount: Decimal
    transaction_count: int = 0


class DailySpending(BaseModel):
    model_config = ConfigDict(extra="ignore")

    date: datetime
    amount: Decimal


class SpendingSummaryResponse(BaseModel):
    """Aggregated spending for the last ``period_days`` days."""
    model_config = ConfigDict(extra="ignore")

    period_days: int = 30
    total_spending: Decimal = Decimal("0")
    total_income: Decimal = Decimal("0")
    currency_code: str = "USD"
    by_category: list[CategorySpending] = Field(default_factory=list)
    daily: list[DailySpending] = Field(default_factory=list)


class CategoriesResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    categories: list[str] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)
