"""
Logging configuration for FetchClient.

A LoggingConfig is part of the FetchClientConfig snapshot, so it is frozen
like the rest of the snapshot.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type, TypeVar, Union

DEFAULT_LOGGER_NAME = "fetch_client"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10MB

_E = TypeVar("_E", bound=Enum)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"
    COLORED = "colored"


def _coerce_enum(enum_cls: Type[_E], value: Union[str, _E], normalize) -> _E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(normalize(str(value)))
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"Invalid {enum_cls.__name__} {value!r}. Allowed: {allowed}") from None


@dataclass(frozen=True)
class LoggingConfig:
    """
    What FetchClient logs and where.

    The client emits one record per request phase: "Request started"
    (DEBUG, with headers), "Request completed" (INFO), "Request failed"
    (WARNING, non-2xx/3xx status) and "Transport error" (ERROR).

    Attributes:
        level: Minimum level for the client's handlers
        format: json, text or colored
        enable_console: Write to stdout
        enable_file: Write to a rotating file at ``file_path``
        max_bytes / backup_count: Rotation settings of the file handler
        enable_correlation_id: Tag the records of one request with a shared id
        mask_sensitive: Redact credentials in URLs, headers and extra fields
        extra_fields: Static fields added to every record (service, env, ...)
        logger_name: Name of the underlying ``logging`` logger

    Example:
        >>> config = LoggingConfig.create(level="debug", format="json")
        >>> client = FetchClient(base_url="https://api.example.com", logging=config)
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.TEXT
    enable_console: bool = True
    enable_file: bool = False
    file_path: Optional[str] = None
    max_bytes: int = DEFAULT_MAX_BYTES
    backup_count: int = 5
    enable_correlation_id: bool = True
    mask_sensitive: bool = True
    extra_fields: Mapping[str, Any] = field(default_factory=dict)
    logger_name: str = DEFAULT_LOGGER_NAME

    def __post_init__(self):
        object.__setattr__(self, 'level', _coerce_enum(LogLevel, self.level, str.upper))
        object.__setattr__(self, 'format', _coerce_enum(LogFormat, self.format, str.lower))
        object.__setattr__(self, 'extra_fields', MappingProxyType(dict(self.extra_fields or {})))

        if self.enable_file and not self.file_path:
            raise ValueError("file_path is required when enable_file=True")
        if self.max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")

    @classmethod
    def create(
        cls,
        level: Union[str, LogLevel] = LogLevel.INFO,
        format: Union[str, LogFormat] = LogFormat.TEXT,
        file_path: Optional[str] = None,
        enable_console: bool = True,
        enable_file: Optional[bool] = None,
        extra_fields: Optional[Mapping[str, Any]] = None,
        **kwargs: Any,
    ) -> "LoggingConfig":
        """
        Build a config from loose values.

        Level and format are case-insensitive. Passing ``file_path`` alone
        turns file logging on. Any other LoggingConfig field is accepted as
        a keyword.

        Example:
            >>> LoggingConfig.create(level="debug", file_path="/tmp/fetch.log").enable_file
            True
        """
        if enable_file is None:
            enable_file = file_path is not None
        return cls(
            level=level,
            format=format,
            enable_console=enable_console,
            enable_file=enable_file,
            file_path=file_path,
            extra_fields=extra_fields or {},
            **kwargs,
        )
