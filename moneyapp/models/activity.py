"""
Activity Models for MoneyApp

Notable session events (sign in, sign out, token changes, dashboard
refreshes, API failures) are recorded as ActivityEvent objects and
written to the structured log by the ActivityLogger.

DESIGN DECISION: Events carry user-safe descriptions and machine-readable
details only. Tokens, passwords and raw response bodies never go into an
event.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class ActivityEventType(str, Enum):
    """Types of events we record."""
    # Session
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    REGISTRATION_SUCCEEDED = "registration_succeeded"
    REGISTRATION_FAILED = "registration_failed"
    LOGOUT = "logout"
    SESSION_EXPIRED = "session_expired"
    TOKENS_SAVED = "tokens_saved"
    TOKENS_CLEARED = "tokens_cleared"

    # Dashboard
    DASHBOARD_REFRESHED = "dashboard_refreshed"
    POLL_FAILED = "poll_failed"

    # User interaction
    USER_ACTION = "user_action"

    # System events
    API_ERROR = "api_error"
    SYSTEM_ERROR = "system_error"


class ActivitySeverity(str, Enum):
    """Severity level for activity events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ActivityEvent(BaseModel):
    """A single recorded event."""

    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )
    event_type: ActivityEventType
    severity: ActivitySeverity = ActivitySeverity.INFO
    category: str = Field(
        default="General",
        description="Feature area the event belongs to (Auth, Home, Polling, ...)"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    error_kind: Optional[str] = None
    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "category": self.category,
            "description": self.description,
            "details": self.details,
            "error_kind": self.error_kind,
            "is_user_action": self.is_user_action,
        }


class ActivityEventBuilder:
    """
    Helper class to build activity events with common patterns.

    Usage:
        event = ActivityEventBuilder.login_succeeded(user_id=42)
        event = ActivityEventBuilder.poll_failed("dashboard", "offline", 3)
    """

    @staticmethod
    def login_succeeded(user_id: int, is_first_login: bool = False) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGIN_SUCCEEDED,
            category="Auth",
            description="User signed in",
            details={"user_id": user_id, "is_first_login": is_first_login},
            is_user_action=True,
        )

    @staticmethod
    def login_failed(error_kind: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGIN_FAILED,
            severity=ActivitySeverity.WARNING,
            category="Auth",
            description="Sign in failed",
            error_kind=error_kind,
            is_user_action=True,
        )

    @staticmethod
    def registration_succeeded(user_id: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REGISTRATION_SUCCEEDED,
            category="Auth",
            description="New account registered",
            details={"user_id": user_id},
            is_user_action=True,
        )

    @staticmethod
    def registration_failed(error_kind: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.REGISTRATION_FAILED,
            severity=ActivitySeverity.WARNING,
            category="Auth",
            description="Registration failed",
            error_kind=error_kind,
            is_user_action=True,
        )

    @staticmethod
    def logout(server_acknowledged: bool) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.LOGOUT,
            category="Auth",
            description="User signed out",
            details={"server_acknowledged": server_acknowledged},
            is_user_action=True,
        )

    @staticmethod
    def session_expired(path: Optional[str]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.SESSION_EXPIRED,
            severity=ActivitySeverity.WARNING,
            category="Auth",
            description="Server rejected the session token",
            details={"path": path},
            error_kind="unauthorized",
        )

    @staticmethod
    def tokens_saved(has_refresh_token: bool) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TOKENS_SAVED,
            severity=ActivitySeverity.DEBUG,
            category="Auth",
            description="Session tokens stored",
            details={"has_refresh_token": has_refresh_token},
        )

    @staticmethod
    def tokens_cleared(reason: str) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.TOKENS_CLEARED,
            category="Auth",
            description="Session tokens removed",
            details={"reason": reason},
        )

    @staticmethod
    def dashboard_refreshed(account_count: int, transaction_count: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.DASHBOARD_REFRESHED,
            severity=ActivitySeverity.DEBUG,
            category="Home",
            description="Dashboard data refreshed",
            details={
                "account_count": account_count,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def poll_failed(poller: str, error_kind: str, iteration: int) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.POLL_FAILED,
            severity=ActivitySeverity.WARNING,
            category="Polling",
            description=f"Polling iteration failed for {poller}",
            details={"poller": poller, "iteration": iteration},
            error_kind=error_kind,
        )

    @staticmethod
    def api_error(method: str, path: str, error_kind: str, status_code: Optional[int]) -> ActivityEvent:
        return ActivityEvent(
            event_type=ActivityEventType.API_ERROR,
            severity=ActivitySeverity.ERROR if error_kind in {"server", "decoding"} else ActivitySeverity.WARNING,
            category="Network",
            description=f"{method} {path} failed",
            details={"method": method, "path": path, "status_code": status_code},
            error_kind=error_kind,
        )
