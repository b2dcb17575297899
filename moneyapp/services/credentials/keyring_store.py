"""
OS Keychain Credential Store

DESIGN DECISION: We use the ``keyring`` library because it fronts every
platform's native secret store (macOS Keychain, Windows Credential
Locker, Secret Service on Linux) behind one API, and persists beyond
process lifetime.

Semantics:
- save is an upsert: delete the existing item, then write the new one
- get on a missing key returns None
- delete on a missing key is a no-op
- every item is scoped by ``service_name`` so different apps' secrets
  do not collide

keyring calls are blocking, so they run in a worker thread. A per-store
asyncio.Lock serializes them so a delete-then-set pair can never
interleave with another call on the same store.
"""

import asyncio
from typing import Optional

import keyring
import structlog
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from moneyapp.services.credentials.interface import (
    CredentialStoreError,
    CredentialStoreInterface,
)


class KeyringCredentialStore(CredentialStoreInterface):
    """Credential store backed by the OS keychain via keyring."""

    def __init__(
        self,
        service_name: str,
        backend: Optional[KeyringBackend] = None,
    ):
        """
        Args:
            service_name: Namespace for all items written by this store.
            backend: keyring backend to use. Defaults to the platform's
                     recommended backend (``keyring.get_keyring()``).
        """
        if not service_name:
            raise ValueError("service_name must not be empty")
        self._service_name = service_name
        self._backend = backend
        self._lock = asyncio.Lock()
        self._logger = structlog.get_logger("moneyapp.credentials")

    @property
    def service_name(self) -> str:
        return self._service_name

    def _get_backend(self) -> KeyringBackend:
        """Get or resolve the keyring backend."""
        if self._backend is None:
            self._backend = keyring.get_keyring()
        return self._backend

    def _delete_quietly(self, key: str) -> None:
        try:
            self._get_backend().delete_password(self._service_name, key)
        except PasswordDeleteError:
            # Nothing stored under this key
            pass

    @retry(
        retry=retry_if_exception_type(KeyringError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _replace(self, key: str, value: str) -> None:
        self._delete_quietly(key)
        self._get_backend().set_password(self._service_name, key, value)

    async def save(self, key: str, value: str) -> None:
        async with self._lock:
            try:
                await asyncio.to_thread(self._replace, key, value)
            except KeyringError as e:
                self._logger.error(
                    "credential_save_failed",
                    service=self._service_name,
                    key=key,
                    error_type=type(e).__name__,
                )
                raise CredentialStoreError(f"Failed to save credential {key!r}: {e}") from e

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            try:
                return await asyncio.to_thread(
                    self._get_backend().get_password, self._service_name, key
                )
            except KeyringError as e:
                # Unreadable is reported as absent; the caller re-authenticates
                self._logger.warning(
                    "credential_read_failed",
                    service=self._service_name,
                    key=key,
                    error_type=type(e).__name__,
                )
                return None

    async def delete(self, key: str) -> None:
        async with self._lock:
            try:
                await asyncio.to_thread(self._delete_quietly, key)
            except KeyringError as e:
                self._logger.warning(
                    "credential_delete_failed",
                    service=self._service_name,
                    key=key,
                    error_type=type(e).__name__,
                )
