"""
API Errors

Every failure of an API call surfaces as exactly one ApiError with a
kind from a closed set:

    transport-class: network, timeout, offline
    protocol-class:  unauthorized, forbidden, not_found, server(code)
    local-class:     invalid_url, encoding, decoding

CRITICAL: user_message is the only text ever shown to the end user.
Raw exception text and backend bodies stay in the logs.
"""

from enum import Enum
from typing import Optional


GENERIC_USER_MESSAGE = "Something went wrong. Please try again."


class ApiErrorKind(str, Enum):
    NETWORK = "network"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    SERVER = "server"
    DECODING = "decoding"
    ENCODING = "encoding"
    INVALID_URL = "invalid_url"
    TIMEOUT = "timeout"
    OFFLINE = "offline"


TRANSPORT_KINDS = frozenset({
    ApiErrorKind.NETWORK,
    ApiErrorKind.TIMEOUT,
    ApiErrorKind.OFFLINE,
})

PROTOCOL_KINDS = frozenset({
    ApiErrorKind.UNAUTHORIZED,
    ApiErrorKind.FORBIDDEN,
    ApiErrorKind.NOT_FOUND,
    ApiErrorKind.SERVER,
})

LOCAL_KINDS = frozenset({
    ApiErrorKind.INVALID_URL,
    ApiErrorKind.ENCODING,
    ApiErrorKind.DECODING,
})

_USER_MESSAGES = {
    ApiErrorKind.NETWORK: "Unable to connect to the server. Please check your internet connection.",
    ApiErrorKind.UNAUTHORIZED: "Your session has expired. Please log in again.",
    ApiErrorKind.FORBIDDEN: "You don't have permission to perform this action.",
    ApiErrorKind.NOT_FOUND: "The requested information could not be found.",
    ApiErrorKind.SERVER: "Server error ({code}). Please try again later.",
    ApiErrorKind.DECODING: "There was a problem processing the server response.",
    ApiErrorKind.ENCODING: "There was a problem with your request.",
    ApiErrorKind.INVALID_URL: "Invalid request. Please try again.",
    ApiErrorKind.TIMEOUT: "The request timed out. Please try again.",
    ApiErrorKind.OFFLINE: "No internet connection. Please check your network settings.",
}


class ApiError(Exception):
    """
    Failure of a single API call.

    Attributes:
        kind: Which of the closed error kinds occurred
        status_code: HTTP status when the server responded, else None
        path: Endpoint path the call was made against
    """

    def __init__(
        self,
        kind: ApiErrorKind,
        status_code: Optional[int] = None,
        path: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        if kind == ApiErrorKind.SERVER and status_code is None:
            raise ValueError("server errors must carry a status code")
        self.kind = kind
        self.status_code = status_code
        self.path = path
        self.detail = detail
        super().__init__(detail or self._describe())

    def _describe(self) -> str:
        text = self.kind.value
        if self.status_code is not None:
            text = f"{text} ({self.status_code})"
        if self.path:
            text = f"{text} at {self.path}"
        return text

    @classmethod
    def server(cls, status_code: int, path: Optional[str] = None) -> "ApiError":
        return cls(ApiErrorKind.SERVER, status_code=status_code, path=path)

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self.kind].format(code=self.status_code)

    @property
    def is_transport(self) -> bool:
        return self.kind in TRANSPORT_KINDS

    @property
    def is_protocol(self) -> bool:
        return self.kind in PROTOCOL_KINDS

    @property
    def is_local(self) -> bool:
        return self.kind in LOCAL_KINDS

    def __repr__(self) -> str:
        return f"ApiError(kind={self.kind.value!r}, status_code={self.status_code!r}, path={self.path!r})"


def user_message_for(error: BaseException) -> str:
    """Short, user-presentable text for any error."""
    message = getattr(error, "user_message", None)
    if isinstance(message, str) and message:
        return message
    return GENERIC_USER_MESSAGE
