"""
Log setup for dormtrack.

Console output is colourised during development. With LOG_TO_FILE the
same records also go to rotating plain and JSON files under LOG_DIR, and
a SENTRY_DSN forwards errors to Sentry.
"""

import logging
import logging.config
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pythonjsonlogger import jsonlogger

from dormtrack.config.settings import Settings, settings as default_settings

ROTATE_BYTES = 10 * 1024 * 1024
ROTATE_KEEP = 10

# Attributes callers pass through ``extra=`` that belong in JSON output.
CONTEXT_KEYS = ('request_id', 'report_id', 'actor_id', 'transition')


class ReportJsonFormatter(jsonlogger.JsonFormatter):
    """One JSON object per record, tagged with environment and request context."""

    environment: str = "development"

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['environment'] = self.environment

        for key in CONTEXT_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                log_record[key] = value

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_record['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc_value),
                'traceback': self.formatException(record.exc_info),
            }


def _rotating(filename: str, level: str, formatter: str, log_dir: str) -> Dict[str, Any]:
    return {
        'level': level,
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': os.path.join(log_dir, filename),
        'maxBytes': ROTATE_BYTES,
        'backupCount': ROTATE_KEEP,
        'formatter': formatter,
        'encoding': 'utf8',
    }


def build_logging_config(config: Settings) -> Dict[str, Any]:
    """Return the ``dictConfig`` mapping for ``config``."""
    ReportJsonFormatter.environment = config.ENVIRONMENT

    handlers: Dict[str, Any] = {
        'console': {
            'level': 'DEBUG' if config.DEBUG else 'INFO',
            'class': 'logging.StreamHandler',
            'formatter': 'colored' if config.is_development() else 'plain',
        },
    }
    if config.LOG_TO_FILE:
        os.makedirs(config.LOG_DIR, exist_ok=True)
        handlers['file'] = _rotating('dormtrack.log', 'INFO', 'plain', config.LOG_DIR)
        handlers['error_file'] = _rotating('dormtrack.error.log', 'ERROR', 'plain', config.LOG_DIR)
        handlers['json_file'] = _rotating('dormtrack.json.log', 'INFO', 'json', config.LOG_DIR)
    active: List[str] = list(handlers)

    line = '%(asctime)s %(levelname)-8s %(name)s | %(message)s'
    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'plain': {'format': line},
            'json': {
                '()': ReportJsonFormatter,
                'format': '%(timestamp)s %(level)s %(logger)s %(message)s',
            },
            'colored': {
                '()': 'colorlog.ColoredFormatter',
                'format': '%(log_color)s' + line,
                'log_colors': {
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                },
            },
        },
        'handlers': handlers,
        'loggers': {
            '': {'handlers': active, 'level': config.LOG_LEVEL},
            'dormtrack': {'handlers': active, 'level': config.LOG_LEVEL, 'propagate': False},
            # Engine echo is noisy; SQL shows up only on warnings.
            'sqlalchemy.engine': {'handlers': ['console'], 'level': 'WARNING', 'propagate': False},
            'uvicorn.access': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
        },
    }


def _init_sentry(config: Settings) -> None:
    import sentry_sdk
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=config.SENTRY_DSN,
        environment=config.ENVIRONMENT,
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        traces_sample_rate=0.2,
        send_default_pii=False,
    )


def setup_logging(config: Optional[Settings] = None) -> logging.Logger:
    config = config or default_settings
    logging.config.dictConfig(build_logging_config(config))
    if config.SENTRY_DSN:
        _init_sentry(config)

    logger = logging.getLogger("dormtrack")
    logger.info("Logging ready (level=%s, files=%s)", config.LOG_LEVEL, config.LOG_TO_FILE)
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
