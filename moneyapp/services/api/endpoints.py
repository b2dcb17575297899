"""
Backend endpoint catalogue.

Paths are relative to the configured base URL. ``requires_auth`` marks
endpoints whose 401 means the session is gone (as opposed to login and
register, where 401 means wrong credentials).
"""

from dataclasses import dataclass
from enum import Enum


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class Endpoint:
    method: HttpMethod
    path: str
    requires_auth: bool = True


class AuthEndpoints:
    LOGIN = Endpoint(HttpMethod.POST, "/api/auth/login", requires_auth=False)
    REGISTER = Endpoint(HttpMethod.POST, "/api/auth/register", requires_auth=False)
    LOGOUT = Endpoint(HttpMethod.POST, "/api/auth/logout")
    REFRESH = Endpoint(HttpMethod.POST, "/api/auth/refresh", requires_auth=False)
    ME = Endpoint(HttpMethod.GET, "/api/auth/me")
    DEVICE_TOKEN = Endpoint(HttpMethod.POST, "/api/auth/device-token")


class AccountEndpoints:
    LIST = Endpoint(HttpMethod.GET, "/api/accounts/")
    LINK_TOKEN = Endpoint(HttpMethod.POST, "/api/accounts/link/token")
    LINK_EXCHANGE = Endpoint(HttpMethod.POST, "/api/accounts/link/exchange")
    SYNC = Endpoint(HttpMethod.POST, "/api/accounts/sync")
    SYNC_STATUS = Endpoint(HttpMethod.GET, "/api/accounts/sync/status")


class TransactionEndpoints:
    LIST = Endpoint(HttpMethod.GET, "/api/transactions/")
    RECENT = Endpoint(HttpMethod.GET, "/api/transactions/recent")
    SUMMARY = Endpoint(HttpMethod.GET, "/api/transactions/summary")
    CATEGORIES = Endpoint(HttpMethod.GET, "/api/transactions/categories")


class UserEndpoints:
    COMPLETE_ONBOARDING = Endpoint(HttpMethod.POST, "/api/user/onboarding/complete")
