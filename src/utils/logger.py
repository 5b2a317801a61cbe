import json
import logging
import os
import sys
from datetime import datetime, timezone

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED = set(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, with any `extra` fields merged in."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED and not key.startswith("_"):
                log_entry[key] = value
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def _level_from_env(default: int) -> int:
    name = os.environ.get("LOG_LEVEL", "").upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Create a JSON-formatted logger. LOG_LEVEL overrides the given level."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(_level_from_env(level))
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger
