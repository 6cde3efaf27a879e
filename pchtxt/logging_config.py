#!/usr/bin/env python3
# -*-coding: utf-8-*-
"""
Logging System for pchtxt2ips

Features:
- Coloured console output on terminals (colorlog)
- Structured JSON output (optional, PCHTXT_LOG_JSON=1)
- Rotating log file (optional)
- Patch text line numbers carried as their own field
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import colorlog

ROOT_LOGGER_NAME = "pchtxt"
LOG_FILE_NAME = "pchtxt2ips.log"

# =====================================================================================================
# Formatters
# =====================================================================================================

PLAIN_FORMAT = "[%(asctime)s] %(levelname)-7s %(message)s"
COLOR_FORMAT = "%(log_color)s[%(asctime)s] %(levelname)-7s%(reset)s %(message)s"
DATE_FORMAT = "%H:%M:%S"

LOG_COLORS = {
    'DEBUG': 'blue',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'bold_red',
}


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter (optional)."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pathname": record.pathname,
            "lineno": record.lineno,
        }
        pchtxt_line = getattr(record, "pchtxt_line", None)
        if pchtxt_line is not None:
            payload["pchtxt_line"] = pchtxt_line
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _console_formatter(use_json: bool, enable_colors: bool) -> logging.Formatter:
    if use_json:
        return JsonFormatter()
    if enable_colors:
        return colorlog.ColoredFormatter(COLOR_FORMAT, datefmt=DATE_FORMAT, log_colors=LOG_COLORS)
    return logging.Formatter(PLAIN_FORMAT, datefmt=DATE_FORMAT)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")

# =====================================================================================================
# Main Setup Function
# =====================================================================================================

def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    enable_file_logging: bool = False,
    structured_json: Optional[bool] = None,
    max_log_size: str = "10MB",
    backup_count: int = 3,
    stream=None,
) -> Dict[str, Any]:
    """
    Configure the ``pchtxt`` logger hierarchy.

    Args:
        log_level: Level name, e.g. "INFO" or "DEBUG"
        log_dir: Directory for the log file (default: ./logs)
        enable_file_logging: Also write a rotating log file
        structured_json: Force JSON output; None reads PCHTXT_LOG_JSON
        max_log_size: Rotation size, e.g. "10MB"
        backup_count: Rotated files to keep
        stream: Console stream (default: sys.stderr)

    Returns:
        Dict with the configured logger, its handlers and the log directory
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    use_json = structured_json if structured_json is not None else _env_bool("PCHTXT_LOG_JSON")

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(numeric_level)
    logger.propagate = False

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    handlers = {}

    console_stream = stream if stream is not None else sys.stderr
    enable_colors = (hasattr(console_stream, 'isatty') and
                     console_stream.isatty() and
                     os.environ.get('TERM') != 'dumb')
    console_handler = logging.StreamHandler(console_stream)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(_console_formatter(use_json, enable_colors))
    logger.addHandler(console_handler)
    handlers['console'] = console_handler

    log_dir_path = Path(log_dir) if log_dir else Path("logs")
    if enable_file_logging:
        log_dir_path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            str(log_dir_path / LOG_FILE_NAME),
            maxBytes=_parse_size_string(max_log_size),
            backupCount=backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JsonFormatter() if use_json else logging.Formatter(PLAIN_FORMAT))
        logger.addHandler(file_handler)
        handlers['file'] = file_handler

    return {
        'logger': logger,
        'handlers': handlers,
        'log_dir': log_dir_path,
    }

# =====================================================================================================
# Utility functions
# =====================================================================================================

def _parse_size_string(size_str: str) -> int:
    """Parse size string into bytes."""
    size_str = size_str.upper().strip()

    multipliers = {
        'KB': 1024,
        'MB': 1024 ** 2,
        'GB': 1024 ** 3,
        'B': 1,
    }

    for suffix, multiplier in multipliers.items():
        if size_str.endswith(suffix):
            try:
                number = float(size_str[:-len(suffix)].strip())
                return int(number * multiplier)
            except ValueError:
                continue

# Try Parsing as Plain Number (Assume bytes)
    try:
        return int(float(size_str))
    except ValueError:
        pass

    return 10 * 1024 * 1024  # Default 10MB


@lru_cache(maxsize=32)
def get_logger(name: str) -> logging.Logger:
    """Get cached logger instance."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def cleanup_logging():
    """Close and detach every handler of the ``pchtxt`` logger and let it propagate again."""
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
    get_logger.cache_clear()
