"""In-memory credential store for tests and previews."""

import asyncio
from typing import Optional

from moneyapp.services.credentials.interface import CredentialStoreInterface


class InMemoryCredentialStore(CredentialStoreInterface):
    """
    Dict-backed credential store.

    Nothing survives the process. Items are keyed by (service_name, key)
    so one dict can stand in for several namespaces.
    """

    def __init__(self, service_name: str = "in-memory"):
        self._service_name = service_name
        self._items: dict[tuple[str, str], str] = {}
        self._lock = asyncio.Lock()

    @property
    def service_name(self) -> str:
        return self._service_name

    async def save(self, key: str, value: str) -> None:
        async with self._lock:
            self._items.pop((self._service_name, key), None)
            self._items[(self._service_name, key)] = value

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            return self._items.get((self._service_name, key))

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._items.pop((self._service_name, key), None)

    def keys(self) -> list[str]:
        """Stored keys in this namespace (test helper)."""
        return [key for service, key in self._items if service == self._service_name]
