import json
import logging
import os
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from constants import LOG_BACKUP_COUNT, LOG_DATE_FORMAT, LOG_DIR, LOG_FILENAME, LOG_MAX_BYTES


class JsonFormatter(logging.Formatter):
    """Formatter that emits each record as a single JSON object"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        # Context fields passed through log_with_context
        if hasattr(record, "extra_data"):
            log_data.update(record.extra_data)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logger(name: str = "codetrack", log_dir: Optional[Path] = None) -> logging.Logger:
    """Set up the application logger

    Args:
        name: Logger name
        log_dir: Directory for the rotating log file; defaults to
            CODETRACK_LOG_DIR or ./logs
    """
    logger = logging.getLogger(name)

    # Already configured
    if logger.handlers:
        return logger

    log_level = os.getenv("CODETRACK_LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, log_level.upper()))

    log_dir = Path(log_dir or os.getenv("CODETRACK_LOG_DIR", LOG_DIR)).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILENAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(JsonFormatter())
    logger.addHandler(file_handler)

    # Console output in debug mode
    if os.getenv("CODETRACK_DEBUG", "false").lower() == "true":
        console_handler = logging.StreamHandler()
        console_formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt=LOG_DATE_FORMAT)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    return logger


def log_with_context(logger: logging.Logger, level: str, message: str, **kwargs: Any) -> None:
    """Log a message with structured context fields"""
    log_level = getattr(logging, level.upper())

    extra = {"extra_data": kwargs} if kwargs else {}

    logger.log(log_level, message, extra=extra)


def get_logger(name: str = "codetrack") -> logging.Logger:
    """Get the existing logger or create a new one"""
    return setup_logger(name)


def source_context(source: Any) -> dict[str, Any]:
    """Context fields identifying a data source in log records"""
    return {"source_id": source.id, "source_name": source.name}
