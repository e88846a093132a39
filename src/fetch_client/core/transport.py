"""
Транспорт: примитив, выполняющий реальный сетевой запрос.

Транспорт - это async callable ``(url, options) -> ResponseLike``.
Клиент не ретраит, не кеширует и не оборачивает ошибки транспорта:
исключения httpx/requests доходят до вызывающего кода как есть.

По умолчанию используется HTTPXTransport на базе httpx.AsyncClient.
"""

import io
import json
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, Mapping
from typing import Any, AsyncIterator, Dict, Optional, Tuple

import httpx
from requests.structures import CaseInsensitiveDict

from .body import Blob, BodyKind, FormData, classify_body
from .config import UNSET, RequestOptions
from .exceptions import BodyUsedError
from .response import ResponseKind

DEFAULT_METHOD = 'GET'
STREAM_CHUNK_SIZE = 64 * 1024


def _charset(content_type: Optional[str], default: str = 'utf-8') -> str:
    """Extract charset parameter from a content-type header."""
    if not content_type:
        return default
    for param in content_type.split(';')[1:]:
        key, _, value = param.partition('=')
        if key.strip().lower() == 'charset' and value.strip():
            return value.strip().strip('"')
    return default

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESPONSE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class BaseResponse(ABC):
    """
    Базовый ответ транспорта (ResponseLike).

    Тело можно прочитать только один раз любым из методов
    json/text/array_buffer/blob/form_data/stream; повторное чтение
    выбрасывает BodyUsedError.

    Подклассы реализуют _read, _iter_bytes и aclose поверх конкретной
    HTTP библиотеки.
    """

    status: int
    status_text: str
    headers: Any
    redirected: bool = False
    type: ResponseKind = ResponseKind.BASIC
    url: Optional[str] = None

    def __init__(self):
        self._body_used = False

    @property
    def ok(self) -> bool:
        """True для статусов 200-399."""
        return 200 <= self.status < 400

    @property
    def body_used(self) -> bool:
        return self._body_used

    def _consume(self) -> None:
        if self._body_used:
            raise BodyUsedError(self.url)
        self._body_used = True

    @abstractmethod
    async def _read(self) -> bytes:
        """Прочитать тело целиком."""

    @abstractmethod
    def _iter_bytes(self) -> AsyncIterator[bytes]:
        """Живой поток байт тела."""

    @abstractmethod
    async def aclose(self) -> None:
        """Освободить соединение."""

    async def array_buffer(self) -> bytes:
        self._consume()
        return await self._read()

    async def text(self) -> str:
        content = await self.array_buffer()
        return content.decode(_charset(self.headers.get('content-type')), errors='replace')

    async def json(self) -> Any:
        return json.loads(await self.text())

    async def blob(self) -> Blob:
        content = await self.array_buffer()
        return Blob(content, self.headers.get('content-type') or '')

    async def form_data(self) -> FormData:
        content = await self.array_buffer()
        return FormData.parse(content, self.headers.get('content-type') or '')

    def stream(self) -> AsyncIterator[bytes]:
        self._consume()
        return self._iter_bytes()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} [{self.status} {self.status_text}]>"


class HTTPXResponse(BaseResponse):
    """ResponseLike поверх httpx.Response (отправленного со stream=True)."""

    def __init__(self, response: httpx.Response):
        super().__init__()
        self.raw = response
        self.status = response.status_code
        self.status_text = response.reason_phrase
        self.headers = response.headers
        self.redirected = bool(response.history)
        self.url = str(response.url)

    async def _read(self) -> bytes:
        return await self.raw.aread()

    def _iter_bytes(self) -> AsyncIterator[bytes]:
        return self.raw.aiter_bytes()

    async def aclose(self) -> None:
        await self.raw.aclose()

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# REQUEST BODY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

async def _aiter_sync(source: Any) -> AsyncIterator[bytes]:
    """Адаптировать синхронный поток (файл, генератор) к async итератору."""
    if isinstance(source, io.IOBase):
        while True:
            chunk = source.read(STREAM_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk.encode('utf-8') if isinstance(chunk, str) else chunk
    else:
        for chunk in source:
            yield chunk.encode('utf-8') if isinstance(chunk, str) else chunk


def encode_body(body: Any, headers: Any, async_streams: bool = True) -> Tuple[Dict[str, Any], Any]:
    """
    Подготовить тело для httpx / requests.

    Тело к этому моменту уже нормализовано клиентом: JSON-объекты без
    content-type сериализованы в строку. Mapping с заданным вызывающим
    content-type уходит в form encoder библиотеки, прочие объекты - как str().

    Args:
        body: Тело запроса
        headers: Заголовки запроса (регистронезависимые)
        async_streams: Адаптировать синхронные потоки к async (для httpx.AsyncClient)

    Returns:
        (kwargs для библиотеки, заголовки)
    """
    if body is UNSET or body is None:
        return {}, headers

    kind = classify_body(body)

    if kind in (BodyKind.TEXT, BodyKind.BINARY):
        return {'content': bytes(body) if isinstance(body, (bytearray, memoryview)) else body}, headers

    if kind is BodyKind.BLOB:
        if body.content_type and 'content-type' not in headers:
            headers = CaseInsensitiveDict(headers)
            headers['content-type'] = body.content_type
        return {'content': body.content}, headers

    if kind is BodyKind.FORM:
        data, files = body.to_request()
        kwargs: Dict[str, Any] = {'data': data}
        if files:
            kwargs['files'] = files
        return kwargs, headers

    if kind is BodyKind.STREAM:
        if async_streams and not isinstance(body, AsyncIterable):
            return {'content': _aiter_sync(body)}, headers
        return {'content': body}, headers

    if isinstance(body, Mapping):
        return {'data': dict(body)}, headers
    return {'content': str(body)}, headers

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRANSPORTS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class Transport(ABC):
    """
    Базовый класс транспорта.

    Любой async callable с той же сигнатурой тоже годится как транспорт;
    наследование нужно только ради aclose и async context manager.
    """

    @abstractmethod
    async def __call__(self, url: str, options: RequestOptions) -> BaseResponse:
        """Выполнить запрос и вернуть ResponseLike."""

    async def aclose(self) -> None:
        """Освободить ресурсы транспорта."""

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


class HTTPXTransport(Transport):
    """
    Транспорт на базе httpx.AsyncClient.

    Ответ отправляется со stream=True: тело читается только при конвертации
    (или отдаётся потоком при response_type="stream").

    Example:
        >>> transport = HTTPXTransport(verify=False)
        >>> client = FetchClient(transport=transport)

        >>> # Или с собственным httpx клиентом
        >>> transport = HTTPXTransport(client=httpx.AsyncClient(http2=True))
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None, **client_kwargs: Any):
        """
        Args:
            client: Готовый httpx.AsyncClient (закрывает вызывающий код)
            **client_kwargs: Параметры для создаваемого httpx.AsyncClient
        """
        self._client = client
        self._owns_client = client is None
        self._client_kwargs = client_kwargs

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            self._client = httpx.AsyncClient(**self._client_kwargs)
        return self._client

    async def __call__(self, url: str, options: RequestOptions) -> HTTPXResponse:
        client = self._get_client()
        headers = options.get('headers') or {}
        body_kwargs, headers = encode_body(options.body, headers, async_streams=True)

        request_kwargs: Dict[str, Any] = {'headers': dict(headers), **body_kwargs}
        if options.get('params') is not None:
            request_kwargs['params'] = options.params
        if options.is_set('timeout'):
            request_kwargs['timeout'] = options.timeout
        if options.get('extensions'):
            request_kwargs['extensions'] = dict(options.extensions)

        request = client.build_request(options.get('method') or DEFAULT_METHOD, url, **request_kwargs)

        send_kwargs: Dict[str, Any] = {'stream': True}
        if options.is_set('follow_redirects'):
            send_kwargs['follow_redirects'] = bool(options.follow_redirects)

        response = await client.send(request, **send_kwargs)
        return HTTPXResponse(response)

    async def aclose(self) -> None:
        """Закрыть httpx клиент, если он создан транспортом."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
