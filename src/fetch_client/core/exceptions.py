"""
Иерархия исключений Fetch Client.

Классификация:
- FetchResponseError - HTTP ответ со статусом вне диапазона ok (несёт ответ)
- ConfigurationError - некорректная конфигурация клиента или опций запроса
- BodyUsedError - повторное чтение тела ответа

Ошибки транспорта (httpx / requests) и ошибки конвертации тела
(например, битый JSON) НЕ оборачиваются и доходят до вызывающего кода как есть.
"""

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .response import ResponseResult

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FetchClientException(Exception):
    """Базовое исключение Fetch Client."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP ОШИБКИ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class FetchResponseError(FetchClientException):
    """
    Классифицированная HTTP ошибка (статус вне диапазона 200-399).

    Создаётся ровно один раз на неудачный вызов. Сообщение - statusText
    ответа, в ``response`` лежит полный ResponseResult с уже
    сконвертированным телом, чтобы вызывающий код мог разобрать ошибку.

    Args:
        message: Сообщение (statusText ответа)
        response: Результат ответа

    Examples:
        >>> try:
        ...     await client.get("/error", response_type="json")
        ... except FetchResponseError as e:
        ...     print(e.status, e.response.body)
        400 {'error': 'Bad Request'}
    """

    def __init__(self, message: str, response: Optional['ResponseResult'] = None):
        self.response = response
        super().__init__(message)

    @property
    def status(self) -> Optional[int]:
        """HTTP статус ответа (None если ответа нет)."""
        return self.response.status if self.response is not None else None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, status={self.status})"

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ПРОЧИЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ConfigurationError(FetchClientException):
    """Ошибка конфигурации (например, неизвестное имя опции)."""
    pass

class BodyUsedError(FetchClientException):
    """
    Тело ответа уже прочитано.

    Каждый метод чтения тела (json, text, blob, ...) можно вызвать
    только один раз на ответ.
    """

    def __init__(self, url: Optional[str] = None):
        self.url = url
        msg = "Response body has already been consumed"
        if url:
            msg += f" (url: {url})"
        super().__init__(msg)
