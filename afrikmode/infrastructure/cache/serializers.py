"""Serializers: the encode/decode contract between CacheService and backends."""

import json
from typing import Any, Protocol

from afrikmode.domain.exceptions import CacheSerializationError


class Serializer(Protocol):
    """Converts cached values to text payloads and back."""

    def dumps(self, value: Any) -> str:
        """Encode value; raise CacheSerializationError if it cannot be encoded."""
        ...

    def loads(self, payload: str) -> Any:
        """Decode payload; raise CacheSerializationError if it is malformed."""
        ...


class JsonSerializer:
    """JSON payloads, the format storefront services already exchange.

    Tuples come back as lists and dict keys as strings, as with any JSON
    round trip.
    """

    def dumps(self, value: Any) -> str:
        try:
            return json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise CacheSerializationError(str(e)) from e

    def loads(self, payload: str) -> Any:
        try:
            return json.loads(payload)
        except (json.JSONDecodeError, TypeError) as e:
            raise CacheSerializationError(str(e)) from e
