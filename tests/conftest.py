"""
Pytest configuration and fixtures

No test touches the network or the real OS keychain:
- HTTP goes through httpx.MockTransport backed by FakeBackend
- keyring is replaced by MemoryKeyring
"""

import errno
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional, Union

import httpx
import pytest
from keyring.backend import KeyringBackend
from keyring.errors import KeyringError, PasswordDeleteError

from moneyapp.events import EventChannel, SessionEvent
from moneyapp.services.api import HttpApiClient
from moneyapp.services.credentials import (
    InMemoryCredentialStore,
    SessionPreferences,
    TokenManager,
)


BASE_URL = "https://api.test"


# =============================================================================
# KEYRING DOUBLES
# =============================================================================

class MemoryKeyring(KeyringBackend):
    """keyring backend that keeps passwords in a dict."""

    priority = 1

    def __init__(self):
        super().__init__()
        self.passwords: dict[tuple[str, str], str] = {}
        self.set_calls = 0

    def get_password(self, service, username):
        return self.passwords.get((service, username))

    def set_password(self, service, username, password):
        self.set_calls += 1
        self.passwords[(service, username)] = password

    def delete_password(self, service, username):
        if (service, username) not in self.passwords:
            raise PasswordDeleteError("not found")
        del self.passwords[(service, username)]


class FlakyKeyring(MemoryKeyring):
    """Fails the first ``failures`` writes, then behaves."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures

    def set_password(self, service, username, password):
        if self.failures > 0:
            self.failures -= 1
            self.set_calls += 1
            raise KeyringError("keychain locked")
        super().set_password(service, username, password)


class BrokenKeyring(MemoryKeyring):
    """Every operation fails."""

    def __init__(self):
        super().__init__()
        self.calls = 0

    def get_password(self, service, username):
        self.calls += 1
        raise KeyringError("keychain unavailable")

    def set_password(self, service, username, password):
        self.calls += 1
        raise KeyringError("keychain unavailable")

    def delete_password(self, service, username):
        self.calls += 1
        raise KeyringError("keychain unavailable")


# =============================================================================
# FAKE BACKEND
# =============================================================================

Handler = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """
    Route table for httpx.MockTransport.

    Unrouted requests get a 404. Every request is recorded.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        status: int = 200,
        json: Any = None,
        content: Optional[bytes] = None,
        handler: Optional[Handler] = None,
        error: Optional[Union[type, Exception]] = None,
    ) -> None:
        if handler is None:
            handler = _make_handler(status, json, content, error)
        self.routes[(method, path)] = handler

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        return handler(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def _make_handler(status, json, content, error) -> Handler:
    def handler(request: httpx.Request) -> httpx.Response:
        if error is not None:
            if isinstance(error, type):
                raise error("simulated failure", request=request)
            raise error
        if content is not None:
            return httpx.Response(status, content=content)
        if json is not None:
            return httpx.Response(status, json=json)
        return httpx.Response(status)
    return handler


def connect_error(errno_value: int) -> httpx.ConnectError:
    """ConnectError caused by an OS socket error, as httpx raises it."""
    error = httpx.ConnectError(os.strerror(errno_value))
    error.__cause__ = OSError(errno_value, os.strerror(errno_value))
    return error


def offline_error() -> httpx.ConnectError:
    return connect_error(errno.ENETUNREACH)


# =============================================================================
# PAYLOADS
# =============================================================================

def user_payload(user_id: int = 42, **overrides: Any) -> dict:
    payload = {
        "id": user_id,
        "email": "john.doe@example.com",
        "first_name": "John",
        "last_name": "Doe",
        "is_active": True,
        "created_at": "2025-01-20T10:00:00Z",
        "device_token": None,
        "has_completed_onboarding": False,
    }
    payload.update(overrides)
    return payload


def auth_payload(
    access_token: str = "access-1",
    refresh_token: Optional[str] = "refresh-1",
    user_id: int = 42,
    is_first_login: bool = False,
) -> dict:
    payload = {
        "access_token": access_token,
        "user": user_payload(user_id),
        "is_first_login": is_first_login,
    }
    if refresh_token is not None:
        payload["refresh_token"] = refresh_token
    return payload


def account_payload(account_id: int, balance: Optional[float], name: str = "Checking") -> dict:
    return {
        "id": account_id,
        "name": name,
        "type": "depository",
        "subtype": "checking",
        "current_balance": balance,
        "currency_code": "USD",
        "last_updated": "2025-08-01T12:00:00Z",
    }


def transaction_payload(
    transaction_id: int,
    amount: float,
    date: datetime,
    name: str = "Coffee Shop",
    category: Optional[str] = "FOOD_AND_DRINK",
) -> dict:
    return {
        "id": transaction_id,
        "amount": amount,
        "currency_code": "USD",
        "name": name,
        "date": date.isoformat(),
        "primary_category": category,
        "pending": False,
        "account": {"id": 1, "name": "Checking"},
    }


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def memory_keyring() -> MemoryKeyring:
    """In-memory keyring backend"""
    return MemoryKeyring()


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    """In-memory credential store"""
    return InMemoryCredentialStore(service_name="com.moneyapp.test")


@pytest.fixture
def preferences(tmp_path: Path) -> SessionPreferences:
    """File-backed preferences in a temp dir"""
    return SessionPreferences(tmp_path / "preferences.json")


@pytest.fixture
def session_events() -> EventChannel[SessionEvent]:
    """Session event channel"""
    return EventChannel("session")


@pytest.fixture
def token_manager(credential_store, preferences, session_events) -> TokenManager:
    """Token manager over the in-memory store"""
    return TokenManager(
        credential_store,
        preferences=preferences,
        session_events=session_events,
    )


@pytest.fixture
def backend() -> FakeBackend:
    """Fake MoneyApp backend"""
    return FakeBackend()


@pytest.fixture
def api_client(backend, token_manager) -> HttpApiClient:
    """API client wired to the fake backend"""
    return HttpApiClient(BASE_URL, token_manager=token_manager, transport=backend.transport)


@pytest.fixture
def fixed_now() -> datetime:
    """A mid-month moment in UTC"""
    return datetime(2025, 8, 15, 12, 0, tzinfo=timezone.utc)
