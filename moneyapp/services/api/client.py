"""
HTTP API Client

Generic typed request/response exchange against one configured base URL.

Every call runs the same steps, strictly in order:
1. Resolve the path against the base URL (failure -> invalid_url)
2. Set Content-Type (POST) or Accept (GET) and the User-Agent
3. Read the access token and, when present, set the Bearer header
4. Encode the body, if any (failure -> encoding, nothing is sent)
5. Send, then map the outcome to a result or exactly one ApiError

DESIGN DECISION: The client never retries and never touches tokens.
A 401 is reported as ``unauthorized``; clearing the session is a
domain-service decision (see DomainService).

CRITICAL: Authorization headers and request bodies are never logged.
"""

import errno
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional

import httpx

from moneyapp.models.activity import ActivityEventBuilder
from moneyapp.observability import ActivityLogger
from moneyapp.services.api.endpoints import HttpMethod
from moneyapp.services.api.errors import ApiError, ApiErrorKind
from moneyapp.services.api.serialization import (
    DecodingError,
    EncodingError,
    decode_payload,
    encode_body,
)
from moneyapp.services.credentials.token_manager import TokenManagerInterface


DEFAULT_USER_AGENT = "moneyapp-core/1.0"

# errno values meaning the device itself has no usable network
OFFLINE_ERRNOS = frozenset({errno.ENETUNREACH, errno.ENETDOWN})


def _no_network_route(exc: BaseException) -> bool:
    """
    True if a connect failure means the device is offline.

    DNS failures and refused connections mean the host is unreachable,
    not that the device is, and are reported as ``network``.
    """
    seen = set()
    current: Optional[BaseException] = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, OSError) and current.errno in OFFLINE_ERRNOS:
            return True
        current = current.__cause__ or current.__context__
    return False


_STATUS_ERRORS = {
    401: ApiErrorKind.UNAUTHORIZED,
    403: ApiErrorKind.FORBIDDEN,
    404: ApiErrorKind.NOT_FOUND,
    408: ApiErrorKind.TIMEOUT,
}


@dataclass(frozen=True)
class ApiRequest:
    """A fully prepared request, built before anything is sent."""
    method: HttpMethod
    path: str
    url: str
    body: Optional[bytes]
    headers: Mapping[str, str]

    @property
    def is_authenticated(self) -> bool:
        return "Authorization" in self.headers

    def __repr__(self) -> str:
        # Headers may carry the bearer token
        return f"ApiRequest(method={self.method.value!r}, url={self.url!r})"


class ApiClientInterface(ABC):
    """
    Abstract interface for the backend API.

    Both methods raise ApiError and nothing else.
    """

    @abstractmethod
    async def get(
        self,
        path: str,
        response_model: Any,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        pass

    @abstractmethod
    async def post(
        self,
        path: str,
        response_model: Any,
        body: Any = None,
    ) -> Any:
        pass


class HttpApiClient(ApiClientInterface):
    """ApiClientInterface implementation on top of httpx."""

    def __init__(
        self,
        base_url: str,
        token_manager: Optional[TokenManagerInterface] = None,
        timeout_seconds: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        activity: Optional[ActivityLogger] = None,
    ):
        """
        Args:
            base_url: Origin all endpoint paths are relative to.
            token_manager: Source of the bearer token. Without one, no
                           Authorization header is ever sent.
            timeout_seconds: Per-request timeout.
            user_agent: User-Agent header value.
            transport: httpx transport override (tests pass a MockTransport).
            activity: Observability sink.
        """
        self._base_url = base_url.rstrip("/")
        self._token_manager = token_manager
        self._timeout = timeout_seconds
        self._user_agent = user_agent
        self._transport = transport
        self._activity = activity or ActivityLogger()
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the underlying httpx client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    async def get(
        self,
        path: str,
        response_model: Any,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        request = await self.build_request(HttpMethod.GET, path)
        return await self.send(request, response_model, params=params)

    async def post(
        self,
        path: str,
        response_model: Any,
        body: Any = None,
    ) -> Any:
        request = await self.build_request(HttpMethod.POST, path, body)
        return await self.send(request, response_model)

    # =========================================================================
    # REQUEST CONSTRUCTION
    # =========================================================================

    def resolve_url(self, path: str) -> str:
        """
        Resolve ``path`` against the base URL.

        Raises:
            ApiError: invalid_url when the result is not an http(s) URL
        """
        try:
            url = httpx.URL(self._base_url).join(path)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise ApiError(ApiErrorKind.INVALID_URL, path=path, detail=str(e)) from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ApiError(ApiErrorKind.INVALID_URL, path=path)
        return str(url)

    async def build_request(
        self,
        method: HttpMethod,
        path: str,
        body: Any = None,
    ) -> ApiRequest:
        url = self.resolve_url(path)

        headers = {"User-Agent": self._user_agent}
        if method == HttpMethod.POST:
            headers["Content-Type"] = "application/json"
        else:
            headers["Accept"] = "application/json"

        token = None
        if self._token_manager is not None:
            token = await self._token_manager.get_access_token()
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"

        content = None
        if body is not None:
            try:
                content = encode_body(body)
            except EncodingError as e:
                self._report(method, path, ApiErrorKind.ENCODING, None)
                raise ApiError(ApiErrorKind.ENCODING, path=path, detail=str(e)) from e

        return ApiRequest(
            method=method,
            path=path,
            url=url,
            body=content,
            headers=MappingProxyType(headers),
        )

    # =========================================================================
    # EXCHANGE
    # =========================================================================

    async def send(
        self,
        request: ApiRequest,
        response_model: Any,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Execute a prepared request and map its outcome."""
        self._activity.log_debug(
            "api_request",
            category="Network",
            method=request.method.value,
            path=request.path,
            authenticated=request.is_authenticated,
        )

        try:
            response = await self._get_client().request(
                request.method.value,
                request.url,
                content=request.body,
                headers=dict(request.headers),
                params=dict(params) if params else None,
            )
        except httpx.TimeoutException as e:
            raise self._transport_error(request, ApiErrorKind.TIMEOUT, e) from e
        except httpx.ConnectError as e:
            kind = ApiErrorKind.OFFLINE if _no_network_route(e) else ApiErrorKind.NETWORK
            raise self._transport_error(request, kind, e) from e
        except httpx.NetworkError as e:
            # Connection dropped after it was established
            raise self._transport_error(request, ApiErrorKind.OFFLINE, e) from e
        except httpx.HTTPError as e:
            # Malformed responses, protocol violations, redirect loops
            raise self._transport_error(request, ApiErrorKind.NETWORK, e) from e

        return self._handle_response(request, response, response_model)

    def _handle_response(
        self,
        request: ApiRequest,
        response: httpx.Response,
        response_model: Any,
    ) -> Any:
        status = response.status_code

        if 200 <= status < 300:
            try:
                return decode_payload(response.content, response_model)
            except DecodingError as e:
                self._report(request.method, request.path, ApiErrorKind.DECODING, status)
                raise ApiError(
                    ApiErrorKind.DECODING,
                    status_code=status,
                    path=request.path,
                    detail=str(e),
                ) from e

        if 500 <= status < 600:
            self._report(request.method, request.path, ApiErrorKind.SERVER, status)
            raise ApiError.server(status, path=request.path)

        kind = _STATUS_ERRORS.get(status, ApiErrorKind.NETWORK)
        self._report(request.method, request.path, kind, status)
        raise ApiError(kind, status_code=status, path=request.path)

    def _transport_error(
        self,
        request: ApiRequest,
        kind: ApiErrorKind,
        cause: Exception,
    ) -> ApiError:
        self._report(request.method, request.path, kind, None)
        return ApiError(kind, path=request.path, detail=type(cause).__name__)

    def _report(
        self,
        method: HttpMethod,
        path: str,
        kind: ApiErrorKind,
        status_code: Optional[int],
    ) -> None:
        self._activity.log(
            ActivityEventBuilder.api_error(method.value, path, kind.value, status_code)
        )
