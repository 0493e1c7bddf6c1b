"""
Structured logging configuration.

Called once from create_app() after app.config is filled. Text (human-readable)
or JSON lines, chosen by LOG_FORMAT.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone


class JSONFormatter(logging.Formatter):
    """Single-line JSON log formatter for log aggregators."""

    def format(self, record):
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry['exception'] = self.formatException(record.exc_info)
        return json.dumps(entry)


# Third-party loggers that are noisy at INFO
_NOISY_LOGGERS = [
    'werkzeug',
    'urllib3',
    'redis',
]


def _setting(app, key, default):
    """app.config wins when an app is given; otherwise the environment."""
    if app is not None and app.config.get(key):
        return str(app.config[key])
    return os.getenv(key, default)


def _resolve_level(level_name):
    level = getattr(logging, str(level_name).upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(app=None):
    """
    Set up the root logger for the filter manager.

    With an app, LOG_LEVEL and LOG_FORMAT come from app.config, so
    create_app() overrides reach the log setup. Without one, the same names
    are read from the environment.

        LOG_LEVEL  — Python log level name (default: INFO; unknown names fall back to INFO)
        LOG_FORMAT — "text" (default) or "json"
    """
    level = _resolve_level(_setting(app, 'LOG_LEVEL', 'INFO'))
    log_format = _setting(app, 'LOG_FORMAT', 'text').lower()

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any existing handlers to avoid duplicates on re-init
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if log_format == 'json' else logging.Formatter(
        '[%(asctime)s] %(levelname)s %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    ))
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if app is not None:
        app.logger.setLevel(level)
