# src/fetch_client/core/fetch_client.py
"""
FetchClient - конвейер запроса/ответа поверх транспорта.

Порядок шагов запроса фиксирован:
слияние заголовков -> нормализация тела -> разрешение URL -> before_each ->
transform_request -> транспорт -> выбор response_type -> конвертация тела ->
успех (transform_response, after_each) или ошибка (FetchResponseError,
transform_error).

Клиент не ретраит, не кеширует и не оборачивает ошибки транспорта.
"""

import inspect
import re
import time
import uuid
from typing import Any, Mapping, Optional, Union

from requests.structures import CaseInsensitiveDict

from .body import normalize_body
from .config import (
    FetchClientConfig,
    RequestOptions,
    ResponseType,
    AfterEachHook,
    BeforeEachHook,
    ErrorTransform,
    RequestTransform,
    ResponseTransform,
)
from .exceptions import ConfigurationError, FetchResponseError
from .logging import FetchClientLogger, set_correlation_id, reset_correlation_id
from .response import ResponseResult, convert_body, resolve_response_type, should_convert
from .store import ConfigStore
from .transport import DEFAULT_METHOD, HTTPXTransport, Transport

OptionsArg = Union[RequestOptions, Mapping[str, Any], None]

# Схема в начале URL (http://, https://, ws://, ...)
_ABSOLUTE_URL = re.compile(r'^[a-zA-Z][a-zA-Z0-9+.\-]*://')


async def _resolve(value: Any) -> Any:
    """Дождаться результата хука, если он awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


def join_url(base_url: Optional[str], url: str) -> str:
    """
    Построить итоговый URL запроса.

    Абсолютный URL возвращается как есть. Относительный склеивается с
    base_url ровно через один слэш.

    Examples:
        >>> join_url("http://h", "/x")
        'http://h/x'
        >>> join_url("http://h/", "x")
        'http://h/x'
        >>> join_url("http://h", "http://other/x")
        'http://other/x'
    """
    if not base_url or _ABSOLUTE_URL.match(url):
        return url
    return base_url.rstrip('/') + '/' + url.lstrip('/')


def _with_insensitive_headers(options: RequestOptions) -> RequestOptions:
    headers = options.get('headers')
    if isinstance(headers, CaseInsensitiveDict):
        return options
    return options.replace(headers=CaseInsensitiveDict(headers or {}))


class FetchClient:
    """
    Настраиваемый HTTP клиент в стиле fetch.

    Example:
        >>> async with FetchClient(base_url="https://api.example.com", response_type="json") as client:
        ...     result = await client.get("/users", params={"page": 1})
        ...     print(result.status, result.body)

        >>> client = FetchClient()
        >>> client.set_header("Authorization", "Bearer token")
        >>> try:
        ...     await client.post("https://api.example.com/items", {"name": "x"}, response_type="json")
        ... except FetchResponseError as e:
        ...     print(e.status, e.response.body)
        >>> await client.aclose()

    Concurrency:
        Каждый вызов читает снимок конфигурации один раз при старте.
        Изменение настроек во время выполняющихся запросов не синхронизировано:
        уже стартовавшие запросы его не увидят (принятая гонка).
    """

    def __init__(
        self,
        config: Union[FetchClientConfig, Mapping[str, Any], None] = None,
        *,
        transport: Optional[Transport] = None,
        **create_kwargs: Any,
    ):
        """
        Инициализация клиента.

        Args:
            config: FetchClientConfig или mapping аргументов FetchClientConfig.create
                (если указан FetchClientConfig, create_kwargs игнорируются)
            transport: Транспорт, async callable (url, options) -> ResponseLike.
                По умолчанию создаётся HTTPXTransport, которым владеет клиент.
            **create_kwargs: Аргументы FetchClientConfig.create
                (base_url, headers, options, response_type, хуки, logging)
        """
        if config is None:
            config = FetchClientConfig.create(**create_kwargs)
        elif isinstance(config, Mapping):
            config = FetchClientConfig.create(**{**config, **create_kwargs})
        elif not isinstance(config, FetchClientConfig):
            raise ConfigurationError(
                f"config must be FetchClientConfig or a mapping, got {type(config).__name__}"
            )

        self._store = ConfigStore(config)

        if transport is None:
            transport = HTTPXTransport()
            self._owns_transport = True
        else:
            self._owns_transport = False
        self._transport = transport

        self._logger: Optional[FetchClientLogger] = None
        if config.logging is not None:
            self._logger = FetchClientLogger(config.logging)

    @property
    def config(self) -> FetchClientConfig:
        """Текущий снимок конфигурации."""
        return self._store.snapshot()

    @property
    def transport(self) -> Transport:
        return self._transport

    # ==================== Lifecycle ====================

    async def __aenter__(self) -> "FetchClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Закрыть транспорт (если он создан клиентом) и логгер."""
        if self._owns_transport:
            await self._transport.aclose()
        if self._logger is not None:
            self._logger.close()

    # ==================== Configuration ====================

    def set_header(self, name: str, value: Optional[str]) -> None:
        """Установить заголовок по умолчанию; None удаляет его."""
        self._store.set_header(name, value)

    def set_headers(self, headers: Optional[Mapping[str, str]]) -> None:
        """Заменить все заголовки по умолчанию."""
        self._store.set_headers(headers)

    def set_option(self, name: str, value: Any) -> None:
        """Установить одну опцию транспорта по умолчанию."""
        self._store.set_option(name, value)

    def set_options(self, options: OptionsArg) -> None:
        """Заменить все опции транспорта по умолчанию."""
        self._store.set_options(options)

    def set_base_url(self, base_url: Optional[str]) -> None:
        self._store.set_base_url(base_url)

    def set_response_type(self, response_type: Any) -> None:
        self._store.set_response_type(response_type)

    def set_before_each(self, hook: Optional[BeforeEachHook]) -> None:
        self._store.set_before_each(hook)

    def set_after_each(self, hook: Optional[AfterEachHook]) -> None:
        self._store.set_after_each(hook)

    def set_error_transform(self, transform: Optional[ErrorTransform]) -> None:
        self._store.set_error_transform(transform)

    def add_request_transform(self, transform: RequestTransform) -> None:
        self._store.add_request_transform(transform)

    def add_response_transform(self, transform: ResponseTransform) -> None:
        self._store.add_response_transform(transform)

    # ==================== Pipeline ====================

    def _prepare(self, config: FetchClientConfig, call: RequestOptions) -> RequestOptions:
        """Слияние заголовков и опций, нормализация тела."""
        headers = CaseInsensitiveDict()
        for layer in (config.options.get('headers'), config.headers, call.get('headers')):
            if layer:
                headers.update(layer)

        merged = config.options.merge(call).replace(headers=headers)
        return normalize_body(merged)

    async def _apply_request_hooks(
        self,
        config: FetchClientConfig,
        url: str,
        options: RequestOptions,
    ) -> RequestOptions:
        """before_each (полная замена), затем transform_request (shallow merge)."""
        if config.before_each is not None:
            replaced = await _resolve(config.before_each(url, options))
            if replaced is None:
                raise ConfigurationError("before_each hook must return request options")
            options = _with_insensitive_headers(RequestOptions.coerce(replaced))

        for transform in config.transform_request:
            partial = await _resolve(transform(url, options))
            if partial is not None:
                options = _with_insensitive_headers(options.merge(partial))

        return options

    async def fetch(self, url: str, options: OptionsArg = None, **fields: Any) -> ResponseResult:
        """
        Выполнить запрос.

        Args:
            url: Абсолютный URL или путь относительно base_url
            options: RequestOptions или mapping опций запроса
            **fields: Опции запроса именованными аргументами (перекрывают options)

        Returns:
            ResponseResult (status 200-399)

        Raises:
            FetchResponseError: Статус вне диапазона 200-399 (или ошибка из transform_error)
            ConfigurationError: Неизвестное имя опции
            httpx.HTTPError / requests.RequestException: Ошибка транспорта (как есть)
            ValueError: Ошибка конвертации тела (например, битый JSON)
        """
        call = RequestOptions.coerce(options, **fields)
        config = self._store.snapshot()

        request_options = self._prepare(config, call)
        resolved_url = join_url(config.base_url, url)
        request_options = await self._apply_request_hooks(config, resolved_url, request_options)

        method = str(request_options.get('method') or DEFAULT_METHOD).upper()

        token = None
        if self._logger is not None and config.logging.enable_correlation_id:
            token = set_correlation_id(str(uuid.uuid4()))
        try:
            return await self._send(config, resolved_url, method, request_options)
        finally:
            if token is not None:
                reset_correlation_id(token)

    async def _send(
        self,
        config: FetchClientConfig,
        url: str,
        method: str,
        options: RequestOptions,
    ) -> ResponseResult:
        if self._logger is not None:
            self._logger.debug(
                "Request started",
                method=method,
                url=self._logger.mask_url(url),
                headers=self._logger.mask_headers(options.get('headers') or {}),
            )

        start_time = time.perf_counter()
        try:
            response = await self._transport(url, options)
        except Exception as e:
            if self._logger is not None:
                self._logger.error(
                    "Transport error",
                    method=method,
                    url=self._logger.mask_url(url),
                    error=str(e),
                    error_type=type(e).__name__,
                    duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                )
            raise

        # before_each и transform_request могут переопределить response_type
        response_type = resolve_response_type(
            options.response_type, config.response_type, options.is_set('response_type')
        )

        body = None
        streamed = False
        try:
            if should_convert(response_type, method, response.headers):
                body = await convert_body(response, response_type)
                streamed = response_type is ResponseType.STREAM
        finally:
            if not streamed:
                await response.aclose()

        result = ResponseResult.from_response(response, body)
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        if response.ok:
            for transform in config.transform_response:
                body = await _resolve(transform(body, response))
            result = result.with_body(body)

            if config.after_each is not None:
                result = await _resolve(config.after_each(url, result))

            if self._logger is not None:
                self._logger.info(
                    "Request completed",
                    method=method,
                    url=self._logger.mask_url(url),
                    status=result.status,
                    duration_ms=duration_ms,
                )
            return result

        error = FetchResponseError(response.status_text, result)

        if self._logger is not None:
            self._logger.warning(
                "Request failed",
                method=method,
                url=self._logger.mask_url(url),
                status=result.status,
                status_text=result.status_text,
                duration_ms=duration_ms,
            )

        if config.transform_error is not None:
            replacement = await _resolve(config.transform_error(error, result))
            if replacement is not None and replacement is not error:
                if not isinstance(replacement, BaseException):
                    raise ConfigurationError(
                        f"transform_error must return an exception or None, "
                        f"got {type(replacement).__name__}"
                    ) from error
                raise replacement from error
        raise error

    execute = fetch

    # ==================== Удобные методы ====================

    async def get(self, url: str, options: OptionsArg = None, **fields: Any) -> ResponseResult:
        """GET запрос."""
        return await self.fetch(url, RequestOptions.coerce(options, method='GET', **fields))

    async def head(self, url: str, options: OptionsArg = None, **fields: Any) -> ResponseResult:
        """HEAD запрос."""
        return await self.fetch(url, RequestOptions.coerce(options, method='HEAD', **fields))

    async def options(self, url: str, options: OptionsArg = None, **fields: Any) -> ResponseResult:
        """OPTIONS запрос."""
        return await self.fetch(url, RequestOptions.coerce(options, method='OPTIONS', **fields))

    async def delete(self, url: str, options: OptionsArg = None, **fields: Any) -> ResponseResult:
        """DELETE запрос."""
        return await self.fetch(url, RequestOptions.coerce(options, method='DELETE', **fields))

    async def patch(self, url: str, body: Any = None, options: OptionsArg = None,
                    **fields: Any) -> ResponseResult:
        """PATCH запрос с телом."""
        return await self._with_body('PATCH', url, body, options, fields)

    async def post(self, url: str, body: Any = None, options: OptionsArg = None,
                   **fields: Any) -> ResponseResult:
        """POST запрос с телом."""
        return await self._with_body('POST', url, body, options, fields)

    async def put(self, url: str, body: Any = None, options: OptionsArg = None,
                  **fields: Any) -> ResponseResult:
        """PUT запрос с телом."""
        return await self._with_body('PUT', url, body, options, fields)

    async def _with_body(self, method: str, url: str, body: Any, options: OptionsArg,
                         fields: dict) -> ResponseResult:
        if body is not None:
            fields['body'] = body
        return await self.fetch(url, RequestOptions.coerce(options, method=method, **fields))
