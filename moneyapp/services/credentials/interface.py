"""
Abstract Secure Credential Store Interface

DESIGN DECISION: We define an abstract interface for secret storage.
This allows us to:
1. Use the OS keychain (via keyring) in the app
2. Use in-memory storage for testing
3. Keep token management decoupled from the storage backend

The interface is intentionally tiny: string secrets addressed by key,
scoped by a service namespace chosen at construction time.
"""

from abc import ABC, abstractmethod
from typing import Optional


class CredentialStoreInterface(ABC):
    """
    Abstract interface for secure key/value storage of string secrets.

    All implementations must be safe to call concurrently.
    """

    @abstractmethod
    async def save(self, key: str, value: str) -> None:
        """
        Store ``value`` under ``key``, replacing any existing value in full.

        Raises:
            CredentialStoreError: If the backend could not persist the value
        """
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """
        Retrieve the value stored under ``key``.

        Returns:
            The value, or None if nothing is stored. Never raises.
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Remove ``key``. Deleting an absent key is a no-op and never raises.
        """
        pass


class CredentialStoreError(Exception):
    """The secure storage backend failed."""

    user_message = "We couldn't access secure storage on this device. Please try again."
