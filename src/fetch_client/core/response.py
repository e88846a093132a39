"""
Response result and body conversion.

Conversion is gated on the effective response type, on the response
declaring a body (content-type or non-zero content-length) and on the
request method.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping, Optional

from requests.structures import CaseInsensitiveDict

from .config import ResponseType

logger = logging.getLogger(__name__)

# Methods whose responses never carry a meaningful body
BODYLESS_METHODS = frozenset({'HEAD', 'OPTIONS'})


class ResponseKind(str, Enum):
    """How the response was obtained."""
    BASIC = "basic"
    CORS = "cors"
    DEFAULT = "default"
    ERROR = "error"
    OPAQUE = "opaque"
    OPAQUE_REDIRECT = "opaqueredirect"


@dataclass(frozen=True)
class ResponseResult:
    """
    Uniform result of one request.

    Attributes:
        body: Converted body (None when no conversion happened)
        headers: All response headers (case-insensitive, transport casing)
        status: HTTP status code
        status_text: HTTP reason phrase
        redirected: Whether the response followed a redirect
        type: ResponseKind of the response
        original: Untouched transport response handle
    """
    body: Any
    headers: Mapping[str, str]
    status: int
    status_text: str
    redirected: bool = False
    type: ResponseKind = ResponseKind.BASIC
    original: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400

    def with_body(self, body: Any) -> 'ResponseResult':
        return replace(self, body=body)

    def with_headers(self, headers: Mapping[str, str]) -> 'ResponseResult':
        return replace(self, headers=CaseInsensitiveDict(headers))

    @classmethod
    def from_response(cls, response: Any, body: Any = None) -> 'ResponseResult':
        """Build a result from a ResponseLike handle."""
        return cls(
            body=body,
            headers=CaseInsensitiveDict(response.headers.items()),
            status=response.status,
            status_text=response.status_text,
            redirected=response.redirected,
            type=response.type,
            original=response,
        )


def declares_body(headers: Mapping[str, str]) -> bool:
    """
    Check whether response headers announce a body.

    A body is assumed only with a content-type header or a non-zero
    content-length header. Chunked responses without content-type and
    204 responses count as bodyless.
    """
    if headers.get('content-type'):
        return True
    content_length = headers.get('content-length')
    if content_length is None:
        return False
    try:
        return int(content_length) > 0
    except ValueError:
        return False


def should_convert(response_type: Optional[ResponseType], method: str,
                   headers: Mapping[str, str]) -> bool:
    """
    Decide whether the body must be converted.

    Args:
        response_type: Effective response type (None = unrecognized value)
        method: Final request method
        headers: Response headers (case-insensitive lookups)
    """
    if response_type is None or response_type is ResponseType.NONE:
        return False
    if method.upper() in BODYLESS_METHODS:
        return False
    return declares_body(headers)


async def convert_body(response: Any, response_type: Optional[ResponseType]) -> Any:
    """
    Read the body of ``response`` according to ``response_type``.

    Reader errors (malformed JSON, undecodable text, ...) propagate
    unchanged. An unrecognized type reads nothing and returns None.
    """
    if response_type is ResponseType.JSON:
        return await response.json()
    if response_type is ResponseType.TEXT:
        return await response.text()
    if response_type is ResponseType.ARRAY_BUFFER:
        return await response.array_buffer()
    if response_type is ResponseType.BLOB:
        return await response.blob()
    if response_type is ResponseType.FORM_DATA:
        return await response.form_data()
    if response_type is ResponseType.STREAM:
        return response.stream()
    return None


def resolve_response_type(call_value: Any, default_value: Any, explicit: bool) -> Optional[ResponseType]:
    """
    Effective response type for one call.

    The per-call value wins whenever it was passed, even when it is None
    or "none". Returns None for an unrecognized value.
    """
    raw = call_value if explicit else default_value
    response_type = ResponseType.coerce(raw)
    if response_type is None:
        logger.warning("Unrecognized response type %r, body will not be converted", raw)
    return response_type
