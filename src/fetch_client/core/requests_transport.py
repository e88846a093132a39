# src/fetch_client/core/requests_transport.py
"""
Транспорт на базе requests.Session.

Блокирующие вызовы requests выполняются в executor, чтобы не блокировать
event loop. Полезно там, где уже настроена requests-сессия (адаптеры,
прокси, аутентификация) и её нужно переиспользовать из async кода.
"""

import asyncio
import functools
from collections.abc import AsyncIterable
from concurrent.futures import Executor
from typing import Any, AsyncIterator, Dict, Optional

import requests

from .config import RequestOptions
from .exceptions import ConfigurationError
from .transport import DEFAULT_METHOD, STREAM_CHUNK_SIZE, BaseResponse, Transport, encode_body

_EXHAUSTED = object()


class RequestsResponse(BaseResponse):
    """ResponseLike поверх requests.Response (полученного со stream=True)."""

    def __init__(
        self,
        response: requests.Response,
        loop: asyncio.AbstractEventLoop,
        executor: Optional[Executor] = None,
    ):
        super().__init__()
        self.raw = response
        self.status = response.status_code
        self.status_text = response.reason or ''
        self.headers = response.headers
        self.redirected = bool(response.history)
        self.url = response.url
        self._loop = loop
        self._executor = executor

    async def _run(self, func, *args):
        return await self._loop.run_in_executor(self._executor, func, *args)

    async def _read(self) -> bytes:
        return await self._run(lambda: self.raw.content)

    async def _iter_bytes(self) -> AsyncIterator[bytes]:
        chunks = self.raw.iter_content(chunk_size=STREAM_CHUNK_SIZE)
        while True:
            chunk = await self._run(next, chunks, _EXHAUSTED)
            if chunk is _EXHAUSTED:
                break
            yield chunk

    async def aclose(self) -> None:
        await self._run(self.raw.close)


class RequestsTransport(Transport):
    """
    Транспорт, выполняющий запросы через requests.Session в executor.

    Args:
        session: Готовая сессия (закрывает вызывающий код)
        executor: Executor для блокирующих вызовов (None = executor event loop)

    Example:
        >>> session = requests.Session()
        >>> session.auth = ("user", "pass")
        >>> client = FetchClient(transport=RequestsTransport(session))
        >>> result = await client.get("https://api.example.com/me", response_type="json")
    """

    def __init__(self, session: Optional[requests.Session] = None,
                 executor: Optional[Executor] = None):
        self._session = session
        self._owns_session = session is None
        self._executor = executor

    @property
    def session(self) -> requests.Session:
        """Получить или создать сессию."""
        if self._session is None:
            self._session = requests.Session()
        return self._session

    async def __call__(self, url: str, options: RequestOptions) -> RequestsResponse:
        if isinstance(options.body, AsyncIterable):
            raise ConfigurationError("RequestsTransport does not accept async iterable bodies")

        headers = options.get('headers') or {}
        body_kwargs, headers = encode_body(options.body, headers, async_streams=False)
        if 'content' in body_kwargs:
            body_kwargs['data'] = body_kwargs.pop('content')

        request_kwargs: Dict[str, Any] = {'headers': dict(headers), 'stream': True, **body_kwargs}
        if options.get('params') is not None:
            request_kwargs['params'] = options.params
        if options.is_set('timeout'):
            request_kwargs['timeout'] = options.timeout
        if options.is_set('follow_redirects'):
            request_kwargs['allow_redirects'] = bool(options.follow_redirects)
        if options.get('extensions'):
            # verify, cert, proxies, ... уходят в Session.request как есть
            request_kwargs.update(options.extensions)

        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            self._executor,
            functools.partial(
                self.session.request,
                options.get('method') or DEFAULT_METHOD,
                url,
                **request_kwargs,
            ),
        )
        return RequestsResponse(response, loop, self._executor)

    async def aclose(self) -> None:
        """Закрыть сессию, если она создана транспортом."""
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None
