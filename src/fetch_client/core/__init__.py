"""Core components of Fetch Client."""

from .config import UNSET, ResponseType, RequestOptions, FetchClientConfig
from .store import ConfigStore
from .body import Blob, FormData, BodyKind, classify_body, normalize_body
from .response import ResponseKind, ResponseResult
from .exceptions import (
    FetchClientException,
    FetchResponseError,
    ConfigurationError,
    BodyUsedError,
)
from .transport import Transport, BaseResponse, HTTPXTransport, HTTPXResponse
from .requests_transport import RequestsTransport, RequestsResponse
from .fetch_client import FetchClient, join_url
from .settings import FetchClientSettings, load_from_env

__all__ = [
    "UNSET",
    "ResponseType",
    "RequestOptions",
    "FetchClientConfig",
    "ConfigStore",
    "Blob",
    "FormData",
    "BodyKind",
    "classify_body",
    "normalize_body",
    "ResponseKind",
    "ResponseResult",
    "FetchClientException",
    "FetchResponseError",
    "ConfigurationError",
    "BodyUsedError",
    "Transport",
    "BaseResponse",
    "HTTPXTransport",
    "HTTPXResponse",
    "RequestsTransport",
    "RequestsResponse",
    "FetchClient",
    "join_url",
    "FetchClientSettings",
    "load_from_env",
]
