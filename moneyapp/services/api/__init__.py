"""
API Client Package

Typed HTTP access to the MoneyApp backend: endpoint catalogue, JSON wire
format, the closed error taxonomy, and the httpx-based client.
"""

from moneyapp.services.api.client import (
    DEFAULT_USER_AGENT,
    ApiClientInterface,
    ApiRequest,
    HttpApiClient,
)
from moneyapp.services.api.endpoints import (
    AccountEndpoints,
    AuthEndpoints,
    Endpoint,
    HttpMethod,
    TransactionEndpoints,
    UserEndpoints,
)
from moneyapp.services.api.errors import (
    GENERIC_USER_MESSAGE,
    ApiError,
    ApiErrorKind,
    user_message_for,
)
from moneyapp.services.api.serialization import (
    DecodingError,
    EncodingError,
    decode_payload,
    encode_body,
)

__all__ = [
    # Interface
    "ApiClientInterface",
    # Implementation
    "HttpApiClient",
    "ApiRequest",
    "DEFAULT_USER_AGENT",
    # Endpoints
    "AccountEndpoints",
    "AuthEndpoints",
    "Endpoint",
    "HttpMethod",
    "TransactionEndpoints",
    "UserEndpoints",
    # Errors
    "ApiError",
    "ApiErrorKind",
    "GENERIC_USER_MESSAGE",
    "user_message_for",
    # Wire format
    "DecodingError",
    "EncodingError",
    "decode_payload",
    "encode_body",
]
