"""
Structured JSON logging configuration.
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

# Package loggers that share the configured handlers
APP_LOGGERS = ("backend", "core", "config")


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record):
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for attr in ('request_id', 'error_id', 'principal', 'endpoint', 'method',
                     'status_code', 'duration_ms', 'remote_addr'):
            if hasattr(record, attr):
                log_entry[attr] = getattr(record, attr)

        return json.dumps(log_entry, default=str)


def _build_handlers(log_format: str, log_file: str) -> list[logging.Handler]:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)

    if log_format == 'json':
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))

    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    return handlers


def configure_logging(settings, app=None):
    """Configure structured logging for the application packages.

    Args:
        settings: AppSettings carrying log_level, log_format, log_file
        app: Optional Flask app whose logger will be updated.

    Returns:
        The configured 'backend' logger.
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handlers = _build_handlers(settings.log_format, settings.log_file)

    for name in APP_LOGGERS:
        package_logger = logging.getLogger(name)
        package_logger.setLevel(level)
        package_logger.handlers = list(handlers)
        package_logger.propagate = False

    # Sync Flask's logger
    if app is not None:
        app.logger.handlers = list(handlers)
        app.logger.setLevel(level)

    return logging.getLogger(APP_LOGGERS[0])
