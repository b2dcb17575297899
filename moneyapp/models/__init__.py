"""
Data Models Package

This package contains all Pydantic models used by MoneyApp Core.
All data crossing the API boundary must conform to these schemas.
"""

from moneyapp.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)
from moneyapp.models.auth import (
    ONBOARDING_STEPS,
    AuthResult,
    DeviceTokenRequest,
    LoginRequest,
    OnboardingCompletion,
    OnboardingStep,
    RefreshTokenRequest,
    RegisterRequest,
    RegistrationResponse,
    SuccessResponse,
    User,
)
from moneyapp.models.finance import (
    AccountInfo,
    AccountListResponse,
    AccountResponse,
    AccountSummary,
    AccountSyncInfo,
    CategoriesResponse,
    CategorySpending,
    DailySpending,
    DashboardSummary,
    LinkTokenResponse,
    Money,
    PublicTokenExchangeRequest,
    PublicTokenExchangeResponse,
    SpendingSummaryResponse,
    SyncAccountsResponse,
    SyncStatusResponse,
    Transaction,
    TransactionListResponse,
    TransactionResponse,
)

__all__ = [
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
    # Auth models
    "ONBOARDING_STEPS",
    "AuthResult",
    "DeviceTokenRequest",
    "LoginRequest",
    "OnboardingCompletion",
    "OnboardingStep",
    "RefreshTokenRequest",
    "RegisterRequest",
    "RegistrationResponse",
    "SuccessResponse",
    "User",
    # Finance models
    "AccountInfo",
    "AccountListResponse",
    "AccountResponse",
    "AccountSummary",
    "AccountSyncInfo",
    "CategoriesResponse",
    "CategorySpending",
    "DailySpending",
    "DashboardSummary",
    "LinkTokenResponse",
    "Money",
    "PublicTokenExchangeRequest",
    "PublicTokenExchangeResponse",
    "SpendingSummaryResponse",
    "SyncAccountsResponse",
    "SyncStatusResponse",
    "Transaction",
    "TransactionListResponse",
    "TransactionResponse",
]
