import logging
import os
from pathlib import Path
from typing import Iterable, Optional, Sequence, Set, Union

_REDACTED_PLACEHOLDER = "[REDACTED]"
_SENSITIVE_KEY_PARTS = ("TOKEN", "SECRET", "KEY", "PASS", "PWD")
DEFAULT_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


def _is_sensitive_env_var(name: str) -> bool:
    upper_name = name.upper()
    return any(part in upper_name for part in _SENSITIVE_KEY_PARTS)


def _collect_sensitive_values(extra_values: Optional[Iterable[Optional[str]]] = None) -> Sequence[str]:
    secrets: Set[str] = set()
    for key, value in os.environ.items():
        if _is_sensitive_env_var(key) and value:
            secrets.add(value)
    if extra_values:
        for value in extra_values:
            if isinstance(value, str) and value:
                secrets.add(value)
    # Longest first so a secret containing another is replaced whole.
    return tuple(sorted(secrets, key=len, reverse=True))


class RedactingFormatter(logging.Formatter):
    """Wrap another formatter and redact sensitive values from its output."""

    def __init__(
        self,
        base_formatter: Optional[logging.Formatter] = None,
        secrets: Optional[Sequence[str]] = None,
        placeholder: str = _REDACTED_PLACEHOLDER,
    ) -> None:
        super().__init__()
        self._base_formatter = base_formatter or logging.Formatter(DEFAULT_FORMAT)
        self._secrets: Sequence[str] = tuple(secrets or ())
        self._placeholder = placeholder
        self.converter = self._base_formatter.converter

    def update_secrets(self, secrets: Sequence[str]) -> None:
        self._secrets = tuple(secrets)

    def redact(self, text: str) -> str:
        for secret in self._secrets:
            text = text.replace(secret, self._placeholder)
        return text

    def format(self, record: logging.LogRecord) -> str:
        return self.redact(self._base_formatter.format(record))

    def formatException(self, ei):
        return self.redact(self._base_formatter.formatException(ei))

    def formatTime(self, record, datefmt=None):
        return self._base_formatter.formatTime(record, datefmt)


def _wrap_handlers(handlers: Iterable[logging.Handler], secrets: Sequence[str]) -> None:
    for handler in handlers:
        formatter = handler.formatter
        if isinstance(formatter, RedactingFormatter):
            formatter.update_secrets(secrets)
        else:
            handler.setFormatter(RedactingFormatter(formatter, secrets))


def _ensure_file_handler(root_logger: logging.Logger, log_file: Union[str, Path]) -> None:
    path = Path(log_file).resolve()
    for handler in root_logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == path:
            return
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    root_logger.addHandler(file_handler)


def configure_logging(
    *,
    level: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
    extra_values: Optional[Iterable[Optional[str]]] = None,
) -> None:
    """Configure root logging and redact sensitive values from all handlers.

    ``level`` defaults to ``LOG_LEVEL`` and ``log_file`` to ``LOG_FILE``.  When
    a log file is configured, records are appended to it in addition to the
    console handler.
    """

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()
    if log_file is None:
        log_file = os.getenv("LOG_FILE") or None

    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=level, format=DEFAULT_FORMAT)
    root_logger.setLevel(level)
    if log_file:
        _ensure_file_handler(root_logger, log_file)

    secrets = _collect_sensitive_values(extra_values)

    _wrap_handlers(root_logger.handlers, secrets)
    for logger_obj in logging.Logger.manager.loggerDict.values():
        if isinstance(logger_obj, logging.Logger):
            _wrap_handlers(logger_obj.handlers, secrets)
