import logging
import json
import re
import contextvars
from contextlib import contextmanager
from typing import Optional

_datasource_ctx: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("datasource", default=None)


class DatasourceContextFilter(logging.Filter):
    """Injects the datasource name from contextvar into the log record."""
    def filter(self, record):
        record.datasource = _datasource_ctx.get()
        return True


_URL_PASSWORD = re.compile(r"(://[^:/@\s]+:)[^@\s/]+@")


def redact_credentials(text: str) -> str:
    """Masks the password of any URL in ``text``."""
    return _URL_PASSWORD.sub(r"\1***@", text)


class CredentialRedactingFilter(logging.Filter):
    """Masks URL passwords before a record reaches any formatter."""
    def filter(self, record):
        message = record.getMessage()
        redacted = redact_credentials(message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


@contextmanager
def datasource_context(name: str):
    """Context manager to set the datasource name for the current context."""
    token = _datasource_ctx.set(name)
    try:
        yield
    finally:
        _datasource_ctx.reset(token)


class JsonFormatter(logging.Formatter):
    """Formatter that outputs JSON strings after parsing the LogRecord."""

    def format(self, record: logging.LogRecord) -> str:
        """Formats the log record as a JSON string.

        Args:
           record (logging.LogRecord): The log record to format.

        Returns:
            str: The JSON-formatted log string.
        """
        log_record = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "datasource", None):
            log_record["datasource"] = record.datasource

        if record.exc_info:
            log_record["exception"] = redact_credentials(self.formatException(record.exc_info))

        return json.dumps(log_record, default=str)


def configure_logging(level: str = "INFO", json_format: bool = False):
    """Configures the root logger.

    Args:
        level (str): The logging level (default: INFO).
        json_format (bool): Whether to use JSON formatting (default: False).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.addFilter(DatasourceContextFilter())
    handler.addFilter(CredentialRedactingFilter())

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        formatter = logging.Formatter(
            "%(asctime)s - [%(datasource)s] - %(name)s - %(levelname)s - %(message)s"
        )
        handler.setFormatter(formatter)

    root_logger.addHandler(handler)

    # Pool checkout chatter is only useful when debugging the pool itself
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Gets a named logger.

    Args:
        name (str): The name of the logger.

    Returns:
        logging.Logger: The logger instance.
    """
    return logging.getLogger(name)
