"""
Credential Storage Package

Provides the abstract secure-store interface and its keychain and
in-memory implementations, the token manager built on top of them, and
the non-secret session preferences.
"""

from moneyapp.services.credentials.interface import (
    CredentialStoreError,
    CredentialStoreInterface,
)
from moneyapp.services.credentials.keyring_store import KeyringCredentialStore
from moneyapp.services.credentials.memory_store import InMemoryCredentialStore
from moneyapp.services.credentials.preferences import (
    LAST_LOGIN_KEY,
    USER_ID_KEY,
    SessionPreferences,
)
from moneyapp.services.credentials.token_manager import (
    DEFAULT_ACCESS_TOKEN_KEY,
    DEFAULT_REFRESH_TOKEN_KEY,
    TokenManager,
    TokenManagerInterface,
)

__all__ = [
    # Interfaces
    "CredentialStoreInterface",
    "TokenManagerInterface",
    # Exceptions
    "CredentialStoreError",
    # Implementations
    "InMemoryCredentialStore",
    "KeyringCredentialStore",
    "TokenManager",
    # Preferences
    "LAST_LOGIN_KEY",
    "USER_ID_KEY",
    "SessionPreferences",
    # Constants
    "DEFAULT_ACCESS_TOKEN_KEY",
    "DEFAULT_REFRESH_TOKEN_KEY",
]
