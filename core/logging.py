import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# --- Constants ---
LOG_DIR = Path(os.environ.get("GATEWAY_LOG_DIR", Path(__file__).resolve().parent.parent / 'logs'))
LOG_FILE = LOG_DIR / 'gateway.log'
MAX_BYTES = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5

# Structured fields callers may attach through ``extra=``.
CONTEXT_FIELDS = ("provider", "attempt", "client", "cache_key")

# httpx logs every request at INFO; provider attempts are logged by the caller.
QUIET_LOGGERS = ("httpx", "httpcore")


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line, with any gateway context fields lifted to the top level.
    """
    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                entry[name] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _coerce_level(log_level):
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(str(log_level).upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(log_level=logging.INFO):
    """
    Configures the root logger.
    - Console: plain text on stdout.
    - File: rotating JSON under LOG_DIR.
    Calling it again replaces the handlers, so the level can be changed once settings load.
    """
    level = _coerce_level(log_level)
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(console_handler)

    file_handler = RotatingFileHandler(LOG_FILE, maxBytes=MAX_BYTES, backupCount=BACKUP_COUNT, encoding='utf-8')
    file_handler.setFormatter(JsonFormatter())
    root_logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    return root_logger


logger = setup_logging(os.environ.get("LOG_LEVEL", "INFO"))
