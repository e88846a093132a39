"""
Configuration Store for FetchClient.

Holds the current FetchClientConfig snapshot and replaces it on every
setter call. Readers take ``snapshot()`` once per request.
"""

from typing import Any, Mapping, Optional, Union

from requests.structures import CaseInsensitiveDict

from .config import (
    UNSET,
    FetchClientConfig,
    RequestOptions,
    AfterEachHook,
    BeforeEachHook,
    ErrorTransform,
    RequestTransform,
    ResponseTransform,
    split_response_type,
)


class ConfigStore:
    """
    Mutable holder of an immutable configuration snapshot.

    There is no locking. A request that is already in flight keeps the
    snapshot it read at its start; mutating the store while other requests
    run means each request observes whatever state existed when it merged
    its headers and options. This race is accepted: requests never share
    per-request state, only the snapshot.

    Example:
        >>> store = ConfigStore(FetchClientConfig.create(headers={"Accept": "application/json"}))
        >>> store.set_header("X-Api-Key", "secret")
        >>> store.set_header("x-api-key", None)  # removed, case-insensitive
        >>> dict(store.snapshot().headers)
        {'Accept': 'application/json'}
    """

    def __init__(self, config: Optional[FetchClientConfig] = None):
        self._config = config if config is not None else FetchClientConfig()

    def snapshot(self) -> FetchClientConfig:
        """Current configuration (immutable)."""
        return self._config

    # ==================== Headers ====================

    def set_header(self, name: str, value: Optional[str]) -> None:
        """
        Set a default header, or remove it when value is None.

        Args:
            name: Header name (case-insensitive)
            value: Header value; None removes the header
        """
        headers = CaseInsensitiveDict(self._config.headers)
        if value is None:
            headers.pop(name, None)
        else:
            headers[name] = value
        self._config = self._config.replace(headers=headers)

    def set_headers(self, headers: Optional[Mapping[str, str]]) -> None:
        """Replace all default headers (not a merge)."""
        self._config = self._config.replace(headers=dict(headers or {}))

    # ==================== Transport options ====================

    def set_option(self, name: str, value: Any) -> None:
        """
        Set a single default transport option.

        ``response_type`` updates the default response type.

        Raises:
            ConfigurationError: Unknown option name
        """
        if name == 'response_type':
            self.set_response_type(value)
            return
        options = self._config.options.replace(**{name: value})
        self._config = self._config.replace(options=options)

    def set_options(self, options: Union[RequestOptions, Mapping[str, Any], None]) -> None:
        """
        Replace all default transport options (not a merge).

        A ``response_type`` inside ``options`` becomes the default response type.
        """
        options = RequestOptions.coerce(options)
        if options.is_set('response_type'):
            options, response_type = split_response_type(options)
            self._config = self._config.replace(options=options, response_type=response_type)
        else:
            self._config = self._config.replace(options=options)

    # ==================== Other settings ====================

    def set_base_url(self, base_url: Optional[str]) -> None:
        self._config = self._config.replace(base_url=base_url)

    def set_response_type(self, response_type: Any) -> None:
        self._config = self._config.replace(
            response_type=None if response_type is UNSET else response_type
        )

    def set_before_each(self, hook: Optional[BeforeEachHook]) -> None:
        self._config = self._config.replace(before_each=hook)

    def set_after_each(self, hook: Optional[AfterEachHook]) -> None:
        self._config = self._config.replace(after_each=hook)

    def set_error_transform(self, transform: Optional[ErrorTransform]) -> None:
        self._config = self._config.replace(transform_error=transform)

    def add_request_transform(self, transform: RequestTransform) -> None:
        """Append a request transform (runs after already registered ones)."""
        self._config = self._config.replace(
            transform_request=self._config.transform_request + (transform,)
        )

    def add_response_transform(self, transform: ResponseTransform) -> None:
        """Append a response transform (runs after already registered ones)."""
        self._config = self._config.replace(
            transform_response=self._config.transform_response + (transform,)
        )
