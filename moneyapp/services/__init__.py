"""Services package."""

from moneyapp.services.credentials import (
    CredentialStoreError,
    CredentialStoreInterface,
    InMemoryCredentialStore,
    KeyringCredentialStore,
    SessionPreferences,
    TokenManager,
    TokenManagerInterface,
)
from moneyapp.services.api import (
    ApiClientInterface,
    ApiError,
    ApiErrorKind,
    HttpApiClient,
    user_message_for,
)
from moneyapp.services.base import DomainService
from moneyapp.services.auth import (
    AuthError,
    AuthErrorKind,
    AuthService,
)
from moneyapp.services.home import HomeService
from moneyapp.services.onboarding import OnboardingService
from moneyapp.services.accounts import AccountsService
from moneyapp.services.transactions import TransactionsService

__all__ = [
    # Credential storage
    "CredentialStoreError",
    "CredentialStoreInterface",
    "InMemoryCredentialStore",
    "KeyringCredentialStore",
    "SessionPreferences",
    "TokenManager",
    "TokenManagerInterface",
    # API client
    "ApiClientInterface",
    "ApiError",
    "ApiErrorKind",
    "HttpApiClient",
    "user_message_for",
    # Domain services
    "AccountsService",
    "AuthError",
    "AuthErrorKind",
    "AuthService",
    "DomainService",
    "HomeService",
    "OnboardingService",
    "TransactionsService",
]
