"""
Logging setup for the bot.

JSON lines go to the rotating log file, and by default to stdout as well.
With DEBUG on, stdout gets a readable one-line format instead, which is
easier to follow while watching an animation run locally.

Records logged while an update is handled carry its correlation_id, and
so do records from reveal tasks started by that update.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from pythonjsonlogger import jsonlogger

from shared.logging.correlation import get_correlation_id

LOG_FILE_NAME = "roachagram.log"
LOG_FILE_MAX_BYTES = 20 * 1024 * 1024
LOG_FILE_BACKUPS = 5

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(message)s"
TEXT_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(correlation_id)s | %(message)s"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "aiogram.event": logging.WARNING,
}


class CorrelationIdFilter(logging.Filter):
    """Copies the current correlation_id onto each record ("-" outside a request)"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter: timestamp, level, logger, message and correlation_id when set."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = self.formatTime(record)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        cid = get_correlation_id()
        if cid:
            log_record['correlation_id'] = cid
        if record.exc_info and not log_record.get('exc_info'):
            log_record['exception'] = self.formatException(record.exc_info)
        log_record.pop('levelname', None)
        log_record.pop('name', None)


def _console_handler(readable: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    if readable:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
        handler.addFilter(CorrelationIdFilter())
    else:
        handler.setFormatter(CustomJsonFormatter(fmt=JSON_FORMAT))
    return handler


def _file_handler(log_dir: str) -> logging.Handler:
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        Path(log_dir) / LOG_FILE_NAME,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8',
    )
    handler.setFormatter(CustomJsonFormatter(fmt=JSON_FORMAT))
    return handler


def setup_logging(level: str = "INFO", log_dir: str = "logs", debug: bool = False) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the rotating JSON log file
        debug: Readable console output instead of JSON
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.handlers.clear()
    root.addHandler(_console_handler(readable=debug))
    root.addHandler(_file_handler(log_dir))

    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
