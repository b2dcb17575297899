"""
JSON wire format.

The backend speaks snake_case JSON with ISO-8601 dates. Our models are
snake_case too, so conversion only has to catch stray camelCase keys in
both directions. Keys that are not camelCase (ALL_CAPS category codes,
free-text labels) pass through untouched.
"""

import re
from functools import lru_cache
from typing import Any, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic.alias_generators import to_snake
from pydantic_core import PydanticSerializationError, from_json, to_json, to_jsonable_python


_CAMEL_CASE = re.compile(r"^[a-z][a-z0-9]*(?:[A-Z][a-z0-9]*)+$")


class EncodingError(ValueError):
    """Request body could not be turned into JSON."""
    pass


class DecodingError(ValueError):
    """Response body did not match the expected type."""
    pass


def snake_key(key: Any) -> Any:
    if isinstance(key, str) and _CAMEL_CASE.match(key):
        return to_snake(key)
    return key


def convert_keys(value: Any) -> Any:
    """Recursively rewrite camelCase mapping keys to snake_case."""
    if isinstance(value, dict):
        return {snake_key(k): convert_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [convert_keys(item) for item in value]
    return value


def encode_body(body: Any) -> bytes:
    """
    Encode a request body.

    Args:
        body: A pydantic model or any value pydantic-core can make
              JSON-able (dicts, lists, dates, Decimals, enums, ...)

    Raises:
        EncodingError: If the body cannot be serialized
    """
    try:
        if isinstance(body, BaseModel):
            data = body.model_dump(mode="json", exclude_none=True)
        else:
            data = to_jsonable_python(body)
        return to_json(convert_keys(data))
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise EncodingError(f"Cannot encode {type(body).__name__}: {e}") from e


@lru_cache(maxsize=128)
def _adapter(response_model: Any) -> TypeAdapter:
    return TypeAdapter(response_model)


def decode_payload(content: bytes, response_model: Optional[Any]) -> Any:
    """
    Decode a response body into ``response_model``.

    ``response_model`` may be a pydantic model or any type a TypeAdapter
    accepts (``list[Model]``, ``dict[str, Decimal]``, ...). None means the
    caller does not want the payload; nothing is parsed.

    Raises:
        DecodingError: If the body is not JSON or does not validate
    """
    if response_model is None:
        return None
    try:
        payload = from_json(content) if content.strip() else None
        return _adapter(response_model).validate_python(convert_keys(payload))
    except (ValidationError, ValueError) as e:
        raise DecodingError(f"Cannot decode response as {response_model!r}: {e}") from e
