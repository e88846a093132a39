"""
Загрузка конфигурации FetchClient из переменных окружения и .env файла.

Приоритет (от высшего к низшему):
1. **overrides - явные параметры
2. Переменные окружения (FETCH_CLIENT_*)
3. .env файл
4. Значения по умолчанию
"""

from typing import Any, Dict, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .config import FetchClientConfig, ResponseType
from .logging.config import LoggingConfig


class FetchClientSettings(BaseSettings):
    """
    Настройки FetchClient из переменных окружения.

    Example .env file:
        FETCH_CLIENT_BASE_URL=https://api.example.com
        FETCH_CLIENT_RESPONSE_TYPE=json
        FETCH_CLIENT_HEADERS={"Accept": "application/json"}
        FETCH_CLIENT_TIMEOUT=10
        FETCH_CLIENT_LOG_ENABLED=true
        FETCH_CLIENT_LOG_LEVEL=DEBUG

    Usage:
        >>> settings = FetchClientSettings()
        >>> settings.response_type
        'json'
    """

    model_config = SettingsConfigDict(
        env_prefix='FETCH_CLIENT_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    base_url: Optional[str] = Field(default=None, description="Prefix for relative URLs")
    response_type: str = Field(default=ResponseType.JSON.value, description="Default response type")
    headers: Dict[str, str] = Field(default_factory=dict, description="Default headers (JSON object)")
    timeout: Optional[float] = Field(default=None, gt=0)
    follow_redirects: Optional[bool] = None

    # Logging
    log_enabled: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text", "colored"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None

    @field_validator('response_type')
    @classmethod
    def validate_response_type(cls, v: str) -> str:
        """Only known response types are accepted from the environment."""
        response_type = ResponseType.coerce(v)
        if response_type is None:
            allowed = ', '.join(member.value for member in ResponseType)
            raise ValueError(f"response_type must be one of: {allowed}")
        return response_type.value

    @model_validator(mode='after')
    def validate_log_file_path(self) -> "FetchClientSettings":
        """Validate log_file_path is required when log_enable_file=True."""
        if self.log_enable_file and not self.log_file_path:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return self

    def to_logging_config(self) -> Optional[LoggingConfig]:
        """LoggingConfig if logging is enabled, else None."""
        if not self.log_enabled:
            return None
        return LoggingConfig.create(
            level=self.log_level,
            format=self.log_format,
            enable_console=self.log_enable_console,
            enable_file=self.log_enable_file,
            file_path=self.log_file_path,
        )

    def to_options(self) -> Dict[str, Any]:
        """Transport options explicitly present in the environment."""
        options: Dict[str, Any] = {}
        if self.timeout is not None:
            options['timeout'] = self.timeout
        if self.follow_redirects is not None:
            options['follow_redirects'] = self.follow_redirects
        return options


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> FetchClientConfig:
    """
    Загрузить FetchClientConfig из окружения.

    Args:
        env_file: Путь к .env файлу (по умолчанию ``.env`` в текущей директории)
        **overrides: Явные значения настроек (имена полей FetchClientSettings)

    Returns:
        FetchClientConfig instance

    Raises:
        pydantic.ValidationError: Некорректные значения в окружении

    Example:
        >>> config = load_from_env()
        >>> config = load_from_env(env_file=".env.production", response_type="json")
        >>> client = FetchClient(config)
    """
    settings_kwargs: Dict[str, Any] = dict(overrides)
    if env_file is not None:
        settings_kwargs['_env_file'] = env_file

    settings = FetchClientSettings(**settings_kwargs)

    return FetchClientConfig.create(
        base_url=settings.base_url or None,
        headers=settings.headers,
        options=settings.to_options(),
        response_type=ResponseType(settings.response_type),
        logging=settings.to_logging_config(),
    )
