"""Logging configuration with structured JSON output and optional Loki shipping.

Every record gets service context (service, environment, host, version) and
the active correlation id, so a topic load can be traced across log lines.
"""

import logging
import os
import socket
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

from clubthreads.utils.correlation import get_correlation_id

_NOISY_LOGGERS = ("requests", "urllib3", "logging_loki")


class _ExcludeLoggerFilter(logging.Filter):
    """Drop records from the given logger name prefixes.

    Keeps the Loki handler from shipping logs emitted by its own HTTP stack.
    """

    def __init__(self, *prefixes: str) -> None:
        super().__init__()
        self._prefixes = tuple(prefixes)

    def filter(self, record: logging.LogRecord) -> bool:
        return not record.name.startswith(self._prefixes)


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level, logger and context fields."""

    def add_fields(
        self, log_record: dict, record: logging.LogRecord, message_dict: dict
    ) -> None:
        """Add custom fields to log record.

        Args:
            log_record: Dictionary to be logged
            record: Original LogRecord
            message_dict: Message dictionary from format string
        """
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        if getattr(record, "correlation_id", None):
            log_record["correlation_id"] = record.correlation_id

        for key in ("service", "environment", "host", "version"):
            if hasattr(record, key):
                log_record[key] = getattr(record, key)


class _ContextFilter(logging.Filter):
    """Inject service context and the current correlation id into records."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service = service_name
        self._environment = os.getenv("ENVIRONMENT", "development")
        # Prefer ENV HOSTNAME over socket hostname for consistency in containers
        self._host = os.getenv("HOSTNAME", socket.gethostname())
        self._version = os.getenv("APP_VERSION", None)

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = self._service
        if not hasattr(record, "environment"):
            record.environment = self._environment
        if not hasattr(record, "host"):
            record.host = self._host
        if self._version and not hasattr(record, "version"):
            record.version = self._version
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id()
        return True


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    service_name: str = "clubthreads",
    loki_url: Optional[str] = None,
) -> None:
    """Setup logging with console and optional Loki handlers.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format - 'json' or 'text'
        service_name: Service name for log labels
        loki_url: Optional Loki URL for remote logging (e.g., http://loki:3100)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # Handler-level so records from child loggers are enriched too
    context_filter = _ContextFilter(service_name)

    # stderr keeps stdout free for rendered threads
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.addFilter(context_filter)

    if log_format == "json":
        console_handler.setFormatter(
            CustomJsonFormatter(
                "%(timestamp)s %(level)s %(logger)s %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    else:
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )

    root_logger.addHandler(console_handler)

    if loki_url:
        try:
            import logging_loki

            loki_handler = logging_loki.LokiHandler(
                url=f"{loki_url}/loki/api/v1/push",
                tags={"service": service_name},
                version="1",
            )
            loki_handler.setLevel(numeric_level)
            loki_handler.addFilter(context_filter)
            loki_handler.addFilter(_ExcludeLoggerFilter(*_NOISY_LOGGERS))
            root_logger.addHandler(loki_handler)

            for noisy in _NOISY_LOGGERS:
                nl = logging.getLogger(noisy)
                nl.setLevel(max(logging.WARNING, numeric_level))
                nl.propagate = False

            root_logger.info(
                "Loki handler configured",
                extra={"loki_url": loki_url, "service": service_name},
            )
        except ImportError:
            root_logger.warning(
                "python-logging-loki not installed, skipping Loki handler. "
                "Install with: pip install python-logging-loki"
            )
        except Exception as e:
            root_logger.error(
                f"Failed to setup Loki handler: {e}", extra={"loki_url": loki_url}
            )

    root_logger.debug(
        "Logging configured",
        extra={
            "log_level": level,
            "log_format": log_format,
            "loki_enabled": loki_url is not None,
        },
    )


def get_logger(name: str) -> logging.Logger:
    """Get logger instance for a module.

    Args:
        name: Logger name (usually __name__ from calling module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
