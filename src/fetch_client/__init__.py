"""Fetch Client - configurable fetch-style HTTP client for asyncio."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.fetch_client import FetchClient
from .core.config import UNSET, ResponseType, RequestOptions, FetchClientConfig
from .core.store import ConfigStore
from .core.body import Blob, FormData
from .core.response import ResponseKind, ResponseResult
from .core.exceptions import (
    FetchClientException,
    FetchResponseError,
    ConfigurationError,
    BodyUsedError,
)
from .core.transport import Transport, BaseResponse, HTTPXTransport
from .core.requests_transport import RequestsTransport
from .core.settings import FetchClientSettings, load_from_env
from .core.logging import LoggingConfig

# Set up logging - add NullHandler to prevent "No handler found" warnings
# Users can configure logging themselves using logging.getLogger('fetch_client')
logging.getLogger('fetch_client').addHandler(logging.NullHandler())

# Version info - read from package metadata (single source of truth in pyproject.toml)
try:
    __version__ = version("fetch-client")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__license__ = "MIT"

# All public exports
__all__ = [
    # Core
    "FetchClient",
    "ConfigStore",

    # Config
    "UNSET",
    "ResponseType",
    "RequestOptions",
    "FetchClientConfig",
    "FetchClientSettings",
    "load_from_env",
    "LoggingConfig",

    # Bodies and results
    "Blob",
    "FormData",
    "ResponseKind",
    "ResponseResult",

    # Transports
    "Transport",
    "BaseResponse",
    "HTTPXTransport",
    "RequestsTransport",

    # Exceptions
    "FetchClientException",
    "FetchResponseError",
    "ConfigurationError",
    "BodyUsedError",
]
