"""
Система конфигурации для Fetch Client.

FetchClientConfig - immutable снимок (frozen dataclass). ConfigStore меняет
конфигурацию только заменой снимка, поэтому каждый запрос работает с тем
снимком, который был актуален в момент его старта.
"""

from dataclasses import dataclass, field, fields, replace as dc_replace
from enum import Enum
from types import MappingProxyType
from typing import (
    Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional, Tuple, Union, TYPE_CHECKING,
)

from requests.structures import CaseInsensitiveDict

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .logging import LoggingConfig
    from .response import ResponseResult
    from .exceptions import FetchResponseError

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SENTINEL
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class _Unset:
    """Маркер "опция не передана" (в отличие от явного None)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNSET: Any = _Unset()

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RESPONSE TYPE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ResponseType(str, Enum):
    """Режим автоматической конвертации тела ответа."""
    NONE = "none"
    ARRAY_BUFFER = "arrayBuffer"
    BLOB = "blob"
    FORM_DATA = "formData"
    JSON = "json"
    STREAM = "stream"
    TEXT = "text"

    @classmethod
    def coerce(cls, value: Any) -> Optional['ResponseType']:
        """
        Привести значение к ResponseType.

        None и "none" означают NONE. Неизвестное значение возвращает None:
        такой запрос проходит без конвертации тела, а не падает.

        Examples:
            >>> ResponseType.coerce("json")
            <ResponseType.JSON: 'json'>
            >>> ResponseType.coerce(None)
            <ResponseType.NONE: 'none'>
            >>> ResponseType.coerce("invalid") is None
            True
        """
        if value is None or value is UNSET:
            return cls.NONE
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return _RESPONSE_TYPE_ALIASES.get(value.lower())
        return None


_RESPONSE_TYPE_ALIASES: Dict[str, ResponseType] = {
    member.value.lower(): member for member in ResponseType
}

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# REQUEST OPTIONS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _freeze_headers(headers: Optional[Mapping[str, str]] = None) -> Mapping[str, str]:
    """
    Convert headers to an immutable case-insensitive mapping.

    Example:
        >>> frozen = _freeze_headers({"X-API-Key": "secret"})
        >>> frozen["x-api-key"]
        'secret'
        >>> frozen["X-New"] = "value"  # Raises TypeError
    """
    return MappingProxyType(CaseInsensitiveDict(headers or {}))


@dataclass
class RequestOptions:
    """
    Опции одного запроса (и опции транспорта по умолчанию).

    Все поля по умолчанию UNSET - "не передано". Это позволяет отличить
    явное ``response_type=None`` ("none") от отсутствия опции и
    корректно делать shallow merge слоёв конфигурации.

    Args:
        method: HTTP метод (по умолчанию транспорт использует GET)
        headers: Заголовки запроса
        body: Тело запроса (str, bytes, Blob, FormData, поток или JSON-объект)
        params: Query параметры
        timeout: Таймаут (передаётся транспорту как есть)
        follow_redirects: Следовать редиректам
        extensions: Специфичные для транспорта параметры (непрозрачно)
        response_type: Режим конвертации тела ответа

    Examples:
        >>> RequestOptions(method="POST", body={"a": 1})
        >>> RequestOptions.coerce({"timeout": 5, "response_type": "json"})
    """
    method: Any = UNSET
    headers: Any = UNSET
    body: Any = UNSET
    params: Any = UNSET
    timeout: Any = UNSET
    follow_redirects: Any = UNSET
    extensions: Any = UNSET
    response_type: Any = UNSET

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def coerce(cls, value: Union['RequestOptions', Mapping[str, Any], None] = None,
               **overrides: Any) -> 'RequestOptions':
        """
        Построить RequestOptions из None, mapping или другого RequestOptions.

        Raises:
            ConfigurationError: Неизвестное имя опции или неподдерживаемый тип
        """
        if value is None:
            options = cls()
        elif isinstance(value, cls):
            options = dc_replace(value)
        elif isinstance(value, Mapping):
            cls._check_names(value.keys())
            options = cls(**dict(value))
        else:
            raise ConfigurationError(
                f"Request options must be a mapping or RequestOptions, got {type(value).__name__}"
            )

        if overrides:
            cls._check_names(overrides.keys())
            options = dc_replace(options, **overrides)
        return options

    @classmethod
    def _check_names(cls, names: Iterable[str]) -> None:
        known = cls.field_names()
        unknown = [name for name in names if name not in known]
        if unknown:
            raise ConfigurationError(
                f"Unknown request option(s): {', '.join(map(repr, unknown))}. "
                f"Known options: {', '.join(known)}"
            )

    def is_set(self, name: str) -> bool:
        return getattr(self, name) is not UNSET

    def get(self, name: str, default: Any = None) -> Any:
        value = getattr(self, name)
        return default if value is UNSET else value

    def to_dict(self) -> Dict[str, Any]:
        """Только явно заданные поля."""
        return {f.name: getattr(self, f.name) for f in fields(self) if self.is_set(f.name)}

    def merge(self, other: Union['RequestOptions', Mapping[str, Any], None]) -> 'RequestOptions':
        """
        Shallow merge: заданные поля ``other`` перекрывают поля self.

        Example:
            >>> base = RequestOptions(method="GET", timeout=10)
            >>> base.merge({"timeout": 30}).timeout
            30
        """
        if other is None:
            return dc_replace(self)
        other = other if isinstance(other, RequestOptions) else RequestOptions.coerce(other)
        return dc_replace(self, **other.to_dict())

    def replace(self, **changes: Any) -> 'RequestOptions':
        self._check_names(changes.keys())
        return dc_replace(self, **changes)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# MAIN CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

BeforeEachHook = Callable[[str, RequestOptions], Union[RequestOptions, Mapping[str, Any], Awaitable[Any]]]
AfterEachHook = Callable[[str, 'ResponseResult'], Union['ResponseResult', Awaitable['ResponseResult']]]
RequestTransform = Callable[[str, RequestOptions], Union[RequestOptions, Mapping[str, Any], None]]
ResponseTransform = Callable[[Any, Any], Any]
ErrorTransform = Callable[['FetchResponseError', 'ResponseResult'], Optional[BaseException]]


@dataclass(frozen=True)
class FetchClientConfig:
    """
    Главная конфигурация FetchClient.

    Immutable снимок: хуки и списки трансформаций фиксируются на момент
    старта запроса.

    Args:
        base_url: Префикс для относительных URL
        headers: Заголовки по умолчанию (регистронезависимые)
        options: Опции транспорта по умолчанию
        response_type: Режим конвертации тела по умолчанию (JSON; "none" отключает)
        before_each: Хук перед отправкой, (url, options) -> options
        after_each: Хук после успешного ответа, (url, result) -> result
        transform_request: Трансформации запроса, (url, options) -> partial options
        transform_response: Трансформации тела, (body, response) -> body
        transform_error: Трансформация ошибки, (error, result) -> error
        logging: Конфигурация логирования (None = без логов)

    Examples:
        >>> config = FetchClientConfig(base_url="https://api.example.com")
        >>> config = FetchClientConfig.create(headers={"X-Api-Key": "k"}, response_type="json")
    """
    base_url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=_freeze_headers)
    options: RequestOptions = field(default_factory=RequestOptions)
    response_type: Any = ResponseType.JSON
    before_each: Optional[BeforeEachHook] = None
    after_each: Optional[AfterEachHook] = None
    transform_request: Tuple[RequestTransform, ...] = ()
    transform_response: Tuple[ResponseTransform, ...] = ()
    transform_error: Optional[ErrorTransform] = None
    logging: Optional['LoggingConfig'] = None

    def __post_init__(self):
        """Freeze mutable containers."""
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, 'headers', _freeze_headers(self.headers))

        options = RequestOptions.coerce(self.options)
        if options.is_set('headers') and options.headers is not None:
            options.headers = _freeze_headers(options.headers)
        object.__setattr__(self, 'options', options)

        object.__setattr__(self, 'transform_request', tuple(self.transform_request or ()))
        object.__setattr__(self, 'transform_response', tuple(self.transform_response or ()))

    @classmethod
    def create(
        cls,
        base_url: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        options: Union[RequestOptions, Mapping[str, Any], None] = None,
        response_type: Any = UNSET,
        before_each: Optional[BeforeEachHook] = None,
        after_each: Optional[AfterEachHook] = None,
        transform_request: Optional[Iterable[RequestTransform]] = None,
        transform_response: Optional[Iterable[ResponseTransform]] = None,
        transform_error: Optional[ErrorTransform] = None,
        logging: Optional['LoggingConfig'] = None,
    ) -> 'FetchClientConfig':
        """
        Удобный конструктор конфигурации.

        ``response_type`` внутри ``options`` используется как значение по
        умолчанию, если аргумент ``response_type`` не передан явно.

        Returns:
            FetchClientConfig instance

        Examples:
            >>> config = FetchClientConfig.create(
            ...     base_url="https://api.example.com",
            ...     options={"timeout": 10},
            ...     transform_response=[lambda body, resp: body["data"]],
            ... )
        """
        options, default_type = split_response_type(options)
        if response_type is UNSET:
            response_type = default_type

        return cls(
            base_url=base_url,
            headers=headers or {},
            options=options,
            response_type=response_type,
            before_each=before_each,
            after_each=after_each,
            transform_request=tuple(transform_request or ()),
            transform_response=tuple(transform_response or ()),
            transform_error=transform_error,
            logging=logging,
        )

    def replace(self, **changes: Any) -> 'FetchClientConfig':
        """Создать новый снимок с изменёнными полями."""
        return dc_replace(self, **changes)


def split_response_type(
    options: Union[RequestOptions, Mapping[str, Any], None]
) -> Tuple[RequestOptions, Any]:
    """
    Отделить response_type от опций транспорта по умолчанию.

    Returns:
        (опции без response_type, response_type или ResponseType.JSON)
    """
    options = RequestOptions.coerce(options)
    response_type = options.response_type if options.is_set('response_type') else ResponseType.JSON
    return options.replace(response_type=UNSET), response_type
