"""Logging configuration for the smoothing pipeline."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

# Third-party loggers that are chatty at INFO
NOISY_LOGGERS = ("yfinance", "matplotlib", "urllib3", "peewee")


class JSONFormatter(logging.Formatter):
    """One JSON object per line; stage failure details are merged in from ``props``."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "funcName": record.funcName,
            "lineNo": record.lineno,
        }

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        props = getattr(record, "props", None)
        if isinstance(props, dict):
            log_obj.update(props)

        return json.dumps(log_obj, default=str)


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = "logs",
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        log_level: Logging level name (INFO, DEBUG, etc.)
        log_dir: Directory for ``app.jsonl`` and ``errors.jsonl``; None logs
            to the console only
        quiet: Logger names raised to WARNING

    Returns:
        The configured root logger
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path / "app.jsonl")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

        error_handler = logging.FileHandler(log_path / "errors.jsonl")
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(error_handler)

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)

    root_logger.info(f"Logging configured with level {log_level}")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
