"""
Event channel and session events

Presentation code learns about session changes and poll results by
subscribing to an EventChannel instead of observing mutable properties.
"""

import inspect
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Generic, TypeVar, Union

import structlog


T = TypeVar("T")

Subscriber = Callable[[T], Union[None, Awaitable[None]]]


class SessionState(str, Enum):
    """Authentication session state. The cycle has no terminal state."""
    SIGNED_OUT = "signed_out"
    SIGNED_IN = "signed_in"


class SessionChangeReason(str, Enum):
    LOGIN = "login"
    REGISTRATION = "registration"
    TOKEN_REFRESH = "token_refresh"
    LOGOUT = "logout"
    SESSION_EXPIRED = "session_expired"
    REFRESH_FAILED = "refresh_failed"
    CLEARED = "cleared"


@dataclass
class SessionEvent:
    """Published on every SignedOut <-> SignedIn transition."""
    state: SessionState
    reason: SessionChangeReason
    occurred_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_signed_in(self) -> bool:
        return self.state == SessionState.SIGNED_IN


class EventChannel(Generic[T]):
    """
    Minimal publish/subscribe channel.

    Subscribers may be plain functions or coroutine functions. They are
    called in subscription order. A subscriber that raises is logged and
    skipped; the publisher and the remaining subscribers are unaffected.
    """

    def __init__(self, name: str = "events"):
        self._name = name
        self._subscribers: list[Subscriber] = []
        self._logger = structlog.get_logger("moneyapp.events")

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register ``callback``.

        Returns a function that removes the subscription; calling it
        twice is harmless.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    async def publish(self, event: T) -> None:
        # Copy so subscribers can unsubscribe while being notified
        for callback in list(self._subscribers):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self._logger.warning(
                    "subscriber_failed",
                    channel=self._name,
                    subscriber=getattr(callback, "__qualname__", repr(callback)),
                    error_type=type(e).__name__,
                    error=str(e),
                )

