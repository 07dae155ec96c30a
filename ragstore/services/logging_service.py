"""
Structured logging service.
Configures structlog to render through standard library handlers (console and rotating file)
with a JSON formatter for log aggregation or a plain text formatter for local development.
"""

import logging
import logging.handlers
import sys
import json
from typing import Any, Dict, Optional
from pathlib import Path
from datetime import datetime, timezone
import structlog
from structlog.typing import FilteringBoundLogger

from ragstore.config.settings import Settings


class OperationMetricsProcessor:
    """Processor that tags backend call timings as performance events."""

    @staticmethod
    def add_performance_context(logger: FilteringBoundLogger, name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Add performance context to log events."""
        if 'log_type' not in event_dict and any(key in event_dict for key in ['duration', 'processing_time', 'poll_count']):
            event_dict['log_type'] = 'PERFORMANCE'
        return event_dict


class JsonLogFormatter(logging.Formatter):
    """Formatter that emits one JSON object per log record."""

    _STANDARD_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', (), None)).keys()) | {'message', 'asctime'}

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as a JSON document."""
        log_entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        # Fields passed via ``extra=`` end up as record attributes
        for key, value in record.__dict__.items():
            if key not in self._STANDARD_ATTRS and not key.startswith('_'):
                log_entry[key] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str, ensure_ascii=False)


def setup_file_logging(settings: Settings) -> Optional[logging.Handler]:
    """Set up file logging with rotation."""
    if not settings.enable_file_logging:
        return None

    log_path = Path(settings.log_file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )

    if settings.enable_json_logging:
        file_handler.setFormatter(JsonLogFormatter())
    else:
        file_handler.setFormatter(
            logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
        )

    return file_handler


def setup_console_logging(settings: Settings) -> Optional[logging.Handler]:
    """Set up console logging."""
    if not settings.enable_console_logging:
        return None

    console_handler = logging.StreamHandler(sys.stdout)

    if settings.enable_json_logging:
        console_handler.setFormatter(JsonLogFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter(
                '%(asctime)s - %(levelname)s - %(message)s',
                datefmt='%H:%M:%S'
            )
        )

    return console_handler


def configure_structlog(settings: Settings) -> None:
    """Configure structlog for structured logging."""
    processors = [
        structlog.stdlib.filter_by_level,
        OperationMetricsProcessor.add_performance_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == 'json':
        processors.append(structlog.processors.JSONRenderer(default=str))
    else:
        processors.append(structlog.processors.KeyValueRenderer(key_order=['timestamp', 'level', 'event']))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Set up logging configuration.

    Args:
        settings: Application settings instance
    """
    if settings is None:
        from ragstore.config.settings import get_settings
        settings = get_settings()

    configure_structlog(settings)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_level = getattr(logging, settings.log_level.upper())
    root_logger.setLevel(log_level)

    handlers = [
        setup_file_logging(settings),
        setup_console_logging(settings),
    ]

    for handler in handlers:
        if handler is not None:
            handler.setLevel(log_level)
            root_logger.addHandler(handler)

    # Configure third-party loggers to reduce noise
    logging.getLogger('google_genai').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Logging configured",
        level=settings.log_level,
        format=settings.log_format,
        file_path=settings.log_file_path if settings.enable_file_logging else None,
        handlers=sum(1 for handler in handlers if handler is not None)
    )


def get_logger(name: str, **context) -> FilteringBoundLogger:
    """
    Get a configured logger with optional context binding.

    Args:
        name: Logger name (usually __name__)
        **context: Additional context to bind to logger

    Returns:
        Bound logger with context
    """
    logger = structlog.get_logger(name)

    if context:
        logger = logger.bind(**context)

    return logger
