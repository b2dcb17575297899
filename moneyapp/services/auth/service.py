"""
Authentication Service

Login, registration, logout and token refresh against ``/api/auth/*``.

DESIGN DECISION: This is the one layer that re-interprets API errors into
business meaning:

    unauthorized            -> invalid_credentials
    forbidden               -> account_locked
    409 on register         -> email_already_exists
    429 on login            -> too_many_attempts
    network/timeout/offline -> passed through unchanged (as ApiError)
    anything else           -> login_failed / registration_failed

Transport errors are never re-interpreted so offline and timeout handling
stays uniform across the app.

CRITICAL: logout() always clears local tokens, even when the server call
fails. The error (if any) is raised only after the tokens are gone.
"""

from enum import Enum
from typing import Optional

from moneyapp.events import SessionChangeReason, SessionState
from moneyapp.models.activity import ActivityEventBuilder
from moneyapp.models.auth import (
    AuthResult,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    RegistrationResponse,
    SuccessResponse,
    User,
)
from moneyapp.services.api import ApiError, ApiErrorKind, AuthEndpoints
from moneyapp.services.base import DomainService


class AuthErrorKind(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    REGISTRATION_FAILED = "registration_failed"
    LOGIN_FAILED = "login_failed"
    TOO_MANY_ATTEMPTS = "too_many_attempts"
    SESSION_EXPIRED = "session_expired"


_AUTH_MESSAGES = {
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid email or password. Please check your credentials and try again.",
    AuthErrorKind.ACCOUNT_LOCKED: "Your account has been temporarily locked. Please try again in 15 minutes.",
    AuthErrorKind.EMAIL_ALREADY_EXISTS: "An account with this email already exists. Please sign in instead.",
    AuthErrorKind.REGISTRATION_FAILED: "Registration failed. Please check your information and try again.",
    AuthErrorKind.LOGIN_FAILED: "Sign in failed. Please try again.",
    AuthErrorKind.TOO_MANY_ATTEMPTS: "Too many login attempts. Please wait before trying again.",
    AuthErrorKind.SESSION_EXPIRED: "Your session has expired. Please sign in again.",
}


class AuthError(Exception):
    """An authentication failure with business meaning."""

    def __init__(self, kind: AuthErrorKind, cause: Optional[ApiError] = None):
        self.kind = kind
        self.cause = cause
        super().__init__(kind.value)

    @property
    def user_message(self) -> str:
        return _AUTH_MESSAGES[self.kind]

    @property
    def status_code(self) -> Optional[int]:
        return self.cause.status_code if self.cause is not None else None


class AuthService(DomainService):
    """Session lifecycle operations."""

    # =========================================================================
    # LOGIN / REGISTRATION
    # =========================================================================

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Sign in and persist the returned tokens.

        Raises:
            AuthError: For credential, lockout and other login failures
            ApiError: For transport failures (network, timeout, offline)
        """
        request = LoginRequest(email=email, password=password)
        try:
            result: AuthResult = await self._request(AuthEndpoints.LOGIN, AuthResult, body=request)
        except ApiError as e:
            error = self._map_login_error(e)
            self._activity.log(ActivityEventBuilder.login_failed(_kind_of(error)))
            raise error from e

        await self._start_session(result, SessionChangeReason.LOGIN)
        self._activity.log(
            ActivityEventBuilder.login_succeeded(result.user.id, result.is_first_login)
        )
        return result

    async def register(self, request: RegisterRequest) -> AuthResult:
        """
        Create an account and start a session for it.

        When the backend's register response carries no access token, the
        new credentials are used to log in.
        """
        try:
            response: RegistrationResponse = await self._request(
                AuthEndpoints.REGISTER, RegistrationResponse, body=request
            )
        except ApiError as e:
            error = self._map_registration_error(e)
            self._activity.log(ActivityEventBuilder.registration_failed(_kind_of(error)))
            raise error from e

        result = response.to_auth_result()
        if result is None:
            result = await self.login(request.email, request.password)
        else:
            await self._start_session(result, SessionChangeReason.REGISTRATION)

        self._activity.log(ActivityEventBuilder.registration_succeeded(result.user.id))
        return result

    async def _start_session(self, result: AuthResult, reason: SessionChangeReason) -> None:
        await self._token_manager.save_tokens(result.access_token, result.refresh_token, reason)
        await self._token_manager.record_login(result.user.id)

    # =========================================================================
    # LOGOUT / REFRESH
    # =========================================================================

    async def logout(self) -> None:
        """
        Notify the backend and end the local session.

        Local tokens are cleared whatever the server call does; its error
        is re-raised afterwards.
        """
        acknowledged = False
        try:
            await self._api.post(AuthEndpoints.LOGOUT.path, SuccessResponse)
            acknowledged = True
        except ApiError as e:
            self._activity.log_warning(
                "logout_not_acknowledged", category="Auth", error_kind=e.kind.value
            )
            raise
        finally:
            await self._token_manager.clear_tokens(SessionChangeReason.LOGOUT)
            self._activity.clear_user_identifier()
            self._activity.log(ActivityEventBuilder.logout(acknowledged))

    async def refresh_session(self) -> AuthResult:
        """
        Exchange the stored refresh token for a new session.

        Raises:
            AuthError: session_expired on any failure, after the session
                       has been cleared
        """
        refresh_token = await self._token_manager.get_refresh_token()
        if refresh_token is None:
            await self._token_manager.clear_tokens(SessionChangeReason.REFRESH_FAILED)
            raise AuthError(AuthErrorKind.SESSION_EXPIRED)

        try:
            result: AuthResult = await self._request(
                AuthEndpoints.REFRESH,
                AuthResult,
                body=RefreshTokenRequest(refresh_token=refresh_token),
            )
        except ApiError as e:
            await self._token_manager.clear_tokens(SessionChangeReason.REFRESH_FAILED)
            raise AuthError(AuthErrorKind.SESSION_EXPIRED, cause=e) from e

        await self._token_manager.save_tokens(
            result.access_token,
            result.refresh_token,
            SessionChangeReason.TOKEN_REFRESH,
        )
        return result

    # =========================================================================
    # SESSION QUERIES
    # =========================================================================

    async def current_user(self) -> User:
        return await self._request(AuthEndpoints.ME, User)

    async def session_state(self) -> SessionState:
        if await self._token_manager.is_authenticated():
            return SessionState.SIGNED_IN
        return SessionState.SIGNED_OUT

    # =========================================================================
    # ERROR MAPPING
    # =========================================================================

    def _map_login_error(self, error: ApiError) -> Exception:
        if error.status_code == 429:
            return AuthError(AuthErrorKind.TOO_MANY_ATTEMPTS, cause=error)
        if error.is_transport:
            return error
        if error.kind == ApiErrorKind.UNAUTHORIZED:
            return AuthError(AuthErrorKind.INVALID_CREDENTIALS, cause=error)
        if error.kind == ApiErrorKind.FORBIDDEN:
            return AuthError(AuthErrorKind.ACCOUNT_LOCKED, cause=error)
        return AuthError(AuthErrorKind.LOGIN_FAILED, cause=error)

    def _map_registration_error(self, error: ApiError) -> Exception:
        if error.status_code == 409:
            return AuthError(AuthErrorKind.EMAIL_ALREADY_EXISTS, cause=error)
        if error.is_transport:
            return error
        if error.kind == ApiErrorKind.UNAUTHORIZED:
            return AuthError(AuthErrorKind.INVALID_CREDENTIALS, cause=error)
        if error.kind == ApiErrorKind.FORBIDDEN:
            return AuthError(AuthErrorKind.ACCOUNT_LOCKED, cause=error)
        return AuthError(AuthErrorKind.REGISTRATION_FAILED, cause=error)


def _kind_of(error: Exception) -> str:
    kind = getattr(error, "kind", None)
    return kind.value if kind is not None else type(error).__name__
