"""
Logger used by FetchClient.

Wraps a standard ``logging.Logger`` with configured handlers and masks
sensitive values in extra fields before they are emitted.
"""

import logging
from typing import Any, Mapping, Optional

from .config import LoggingConfig, LogLevel
from .formatters import get_formatter
from .filters import CorrelationIdFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_headers, mask_sensitive_data, mask_url


class FetchClientLogger:
    """
    Structured logger for Fetch Client.

    Example:
        >>> logger = FetchClientLogger(LoggingConfig.create(level="DEBUG"))
        >>> logger.info("Request completed", method="GET", status=200)
        >>> logger.close()
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: Optional[str] = None):
        self.config = config or LoggingConfig()
        self.name = name or self.config.logger_name
        self._closed = False

        level = self._get_level(self.config.level)
        self._logger = logging.getLogger(self.name)
        self._logger.setLevel(level)
        self._logger.propagate = False

        # Reinitializing replaces previously attached handlers
        self._remove_handlers()

        filters = []
        if self.config.enable_correlation_id:
            filters.append(CorrelationIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)

        if self.config.enable_console:
            self._logger.addHandler(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._logger.addHandler(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters,
            ))

    @staticmethod
    def _get_level(level: LogLevel) -> int:
        return getattr(logging, level.value)

    @property
    def logger(self) -> logging.Logger:
        """Underlying ``logging.Logger``."""
        return self._logger

    def mask_url(self, url: str) -> str:
        """URL as it should appear in a record."""
        return mask_url(url) if self.config.mask_sensitive else url

    def mask_headers(self, headers: Mapping[str, str]) -> dict:
        return mask_headers(headers) if self.config.mask_sensitive else dict(headers)

    def _log(self, level: int, message: str, fields: dict, exc_info: bool = False) -> None:
        if self.config.mask_sensitive:
            fields = mask_sensitive_data(fields)
        self._logger.log(level, message, extra=fields, exc_info=exc_info)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error with traceback; call from an exception handler."""
        self._log(logging.ERROR, message, kwargs, exc_info=True)

    def _remove_handlers(self) -> None:
        for handler in self._logger.handlers[:]:
            try:
                handler.flush()
                handler.close()
            except (OSError, ValueError):
                pass
            self._logger.removeHandler(handler)

    def close(self) -> None:
        """
        Flush and close all handlers. Idempotent.
        """
        if self._closed:
            return
        self._remove_handlers()
        self._logger.propagate = True
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
