"""
Token Manager

Persists the session's access token (and optional refresh token) in the
secure credential store, and owns the session state machine:

    SignedOut --(tokens saved)--> SignedIn --(tokens cleared)--> SignedOut

DESIGN DECISION: All token reads and writes go through one asyncio.Lock,
so concurrent login/logout/refresh calls can never interleave a partial
write (e.g. a new access token next to a stale refresh token).

``is_authenticated`` only checks that an access token is present. It does
not validate expiry or signature; the server's 401 is the authority.
"""

from abc import ABC, abstractmethod
import asyncio
from datetime import datetime, timezone
from typing import Optional

from moneyapp.events import EventChannel, SessionChangeReason, SessionEvent, SessionState
from moneyapp.models.activity import ActivityEventBuilder
from moneyapp.observability import ActivityLogger
from moneyapp.services.credentials.interface import CredentialStoreInterface
from moneyapp.services.credentials.preferences import (
    LAST_LOGIN_KEY,
    USER_ID_KEY,
    SessionPreferences,
)


DEFAULT_ACCESS_TOKEN_KEY = "jwt_access_token"
DEFAULT_REFRESH_TOKEN_KEY = "jwt_refresh_token"


class TokenManagerInterface(ABC):
    """Abstract interface for session token persistence."""

    @abstractmethod
    async def save_tokens(
        self,
        access_token: str,
        refresh_token: Optional[str] = None,
        reason: SessionChangeReason = SessionChangeReason.LOGIN,
    ) -> None:
        """
        Store the access token, and the refresh token when one is given.

        An omitted refresh token leaves any previously stored one untouched.
        """
        pass

    @abstractmethod
    async def get_access_token(self) -> Optional[str]:
        pass

    @abstractmethod
    async def get_refresh_token(self) -> Optional[str]:
        pass

    @abstractmethod
    async def clear_tokens(
        self,
        reason: SessionChangeReason = SessionChangeReason.CLEARED,
    ) -> bool:
        """
        Delete both tokens and the session bookkeeping. Idempotent.

        Returns:
            True if a session was active before the call
        """
        pass

    async def is_authenticated(self) -> bool:
        return await self.get_access_token() is not None

    async def invalidate_session(
        self,
        reason: SessionChangeReason = SessionChangeReason.SESSION_EXPIRED,
    ) -> bool:
        """End the session because the server rejected it."""
        return await self.clear_tokens(reason)

    async def record_login(self, user_id: int) -> None:
        """Remember who signed in and when. Optional for implementations."""
        return None


class TokenManager(TokenManagerInterface):
    """Token manager backed by a CredentialStoreInterface."""

    def __init__(
        self,
        store: CredentialStoreInterface,
        access_token_key: str = DEFAULT_ACCESS_TOKEN_KEY,
        refresh_token_key: str = DEFAULT_REFRESH_TOKEN_KEY,
        preferences: Optional[SessionPreferences] = None,
        session_events: Optional[EventChannel[SessionEvent]] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        """
        Args:
            store: Secure store the tokens are written to.
            access_token_key: Credential key for the access token.
            refresh_token_key: Credential key for the refresh token.
            preferences: Non-secret bookkeeping cleared with the tokens.
                         In-memory when omitted.
            session_events: Channel receiving SessionEvents on every
                            SignedOut <-> SignedIn transition.
            activity: Observability sink.
        """
        self._store = store
        self._access_token_key = access_token_key
        self._refresh_token_key = refresh_token_key
        self._preferences = preferences or SessionPreferences()
        self._session_events = session_events or EventChannel("session")
        self._activity = activity or ActivityLogger()
        self._lock = asyncio.Lock()

    @property
    def session_events(self) -> EventChannel[SessionEvent]:
        return self._session_events

    @property
    def preferences(self) -> SessionPreferences:
        return self._preferences

    async def save_tokens(
        self,
        access_token: str,
        refresh_token: Optional[str] = None,
        reason: SessionChangeReason = SessionChangeReason.LOGIN,
    ) -> None:
        if not access_token:
            raise ValueError("access_token must not be empty")

        async with self._lock:
            was_signed_in = await self._store.get(self._access_token_key) is not None
            await self._store.save(self._access_token_key, access_token)
            if refresh_token is not None:
                await self._store.save(self._refresh_token_key, refresh_token)

        self._activity.log(ActivityEventBuilder.tokens_saved(refresh_token is not None))

        # Publish outside the lock; subscribers may read tokens
        if not was_signed_in:
            await self._session_events.publish(
                SessionEvent(state=SessionState.SIGNED_IN, reason=reason)
            )

    async def get_access_token(self) -> Optional[str]:
        async with self._lock:
            return await self._store.get(self._access_token_key)

    async def get_refresh_token(self) -> Optional[str]:
        async with self._lock:
            return await self._store.get(self._refresh_token_key)

    async def clear_tokens(
        self,
        reason: SessionChangeReason = SessionChangeReason.CLEARED,
    ) -> bool:
        async with self._lock:
            was_signed_in = await self._store.get(self._access_token_key) is not None
            await self._store.delete(self._access_token_key)
            await self._store.delete(self._refresh_token_key)
            self._preferences.remove(USER_ID_KEY, LAST_LOGIN_KEY)

        self._activity.log(ActivityEventBuilder.tokens_cleared(reason.value))

        if was_signed_in:
            await self._session_events.publish(
                SessionEvent(state=SessionState.SIGNED_OUT, reason=reason)
            )
        return was_signed_in

    async def record_login(self, user_id: int) -> None:
        self._preferences.set(USER_ID_KEY, str(user_id))
        self._preferences.set(LAST_LOGIN_KEY, datetime.now(timezone.utc).isoformat())
        self._activity.set_user_identifier(str(user_id))

    async def session_state(self) -> SessionState:
        if await self.is_authenticated():
            return SessionState.SIGNED_IN
        return SessionState.SIGNED_OUT
