"""
Domain Service Base

Every domain service talks to the backend through an ApiClientInterface
and shares one TokenManager. This base class owns the single piece of
session policy that sits between them:

CRITICAL: A 401 from an endpoint that requires authentication means the
session is gone. The service clears it (exactly once per 401) and then
re-raises the ApiError unchanged. A 401 from login or register means bad
credentials and leaves the session alone.
"""

from typing import Any, Mapping, Optional

from moneyapp.events import SessionChangeReason
from moneyapp.models.activity import ActivityEventBuilder
from moneyapp.observability import ActivityLogger
from moneyapp.services.api import ApiClientInterface, ApiError, ApiErrorKind, Endpoint, HttpMethod
from moneyapp.services.credentials import TokenManagerInterface


class DomainService:
    """Shared plumbing for the Auth, Home, Onboarding, Accounts and Transactions services."""

    def __init__(
        self,
        api_client: ApiClientInterface,
        token_manager: TokenManagerInterface,
        activity: Optional[ActivityLogger] = None,
    ):
        self._api = api_client
        self._token_manager = token_manager
        self._activity = activity or ActivityLogger()

    async def _request(
        self,
        endpoint: Endpoint,
        response_model: Any,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        try:
            if endpoint.method == HttpMethod.GET:
                return await self._api.get(endpoint.path, response_model, params=params)
            return await self._api.post(endpoint.path, response_model, body=body)
        except ApiError as e:
            if e.kind == ApiErrorKind.UNAUTHORIZED and endpoint.requires_auth:
                await self._session_rejected(e)
            raise

    async def _session_rejected(self, error: ApiError) -> None:
        cleared = await self._token_manager.invalidate_session(SessionChangeReason.SESSION_EXPIRED)
        if cleared:
            self._activity.log(ActivityEventBuilder.session_expired(error.path))
