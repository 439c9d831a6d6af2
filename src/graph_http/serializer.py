# src/graph_http/serializer.py
"""
Разбор тела ошибки сервиса.

Сервис отвечает на ошибки телом вида:

    {"error": {"code": "itemNotFound", "message": "...",
               "innerError": {"request-id": "...", "date": "..."}}}

Если тело пустое или не разбирается - это не ошибка, а None.
"""

import json
import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from .core.exceptions import ErrorPayload

logger = logging.getLogger(__name__)


@runtime_checkable
class Serializer(Protocol):
    """Capability the provider uses to read structured error bodies."""

    def deserialize_error_body(self, body: bytes) -> Optional[ErrorPayload]:
        ...


class JSONSerializer:
    """
    JSON реализация Serializer.

    Example:
        >>> serializer = JSONSerializer()
        >>> payload = serializer.deserialize_error_body(
        ...     b'{"error": {"code": "itemNotFound", "message": "Not here"}}'
        ... )
        >>> payload.code
        'itemNotFound'
        >>> serializer.deserialize_error_body(b"") is None
        True
    """

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def deserialize_error_body(self, body: bytes) -> Optional[ErrorPayload]:
        if not body or not body.strip():
            return None

        try:
            document = json.loads(body.decode(self.encoding))
        except (UnicodeDecodeError, ValueError) as e:
            logger.debug("Error body is not valid JSON: %s", e)
            return None

        if not isinstance(document, dict):
            return None

        # {"error": {...}} или сразу {...}
        error = document.get("error", document)
        if not isinstance(error, dict):
            return None
        if "code" not in error and "message" not in error:
            return None

        return ErrorPayload(
            code=_as_text(error.get("code")),
            message=_as_text(error.get("message")),
            throw_site=_as_text(error.get("throwSite")) or None,
            inner_error=_as_mapping(error.get("innerError") or error.get("innererror")),
        )


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_mapping(value: Any) -> Mapping[str, Any]:
    if isinstance(value, dict):
        return MappingProxyType(dict(value))
    return MappingProxyType({})
