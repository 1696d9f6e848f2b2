"""Logging configuration setup."""

import copy
import logging
import logging.config
import os
import sys
from datetime import datetime
from typing import Optional, Tuple

from middlengine.constants import LOG_DIR

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

BASE_LOG_CFG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple_file": {
            "format": ("%(asctime)s - %(name)25s:%(lineno)-4d - " "%(levelname)-7s - %(message)s"),
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "file_handler": {
            "class": "logging.FileHandler",
            "level": "DEBUG",
            "formatter": "simple_file",
            "filename": "temp_log_name.log",
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "uvicorn": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "INFO",
        },
        "uvicorn.error": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "INFO",
        },
        "uvicorn.access": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "WARNING",
        },
        "starlette": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "INFO",
        },
        "middlengine": {
            "handlers": ["file_handler"],
            "propagate": False,
            "level": "INFO",
        },
    },
    "root": {
        "handlers": ["file_handler"],
        "level": "WARNING",
    },
}

# Loggers whose level follows the requested level.
_APP_LOGGERS = (
    "middlengine",
    "middlengine.engine",
    "middlengine.config",
    "middlengine.server",
    "uvicorn",
    "uvicorn.error",
    "starlette",
)


def build_log_config(log_lvl: str, log_fpath: str) -> dict:
    """Return a ``dictConfig`` mapping for *log_lvl* writing to *log_fpath*."""
    log_cfg: dict = copy.deepcopy(BASE_LOG_CFG)
    log_cfg["handlers"]["file_handler"]["filename"] = log_fpath

    for name in _APP_LOGGERS:
        if name in log_cfg["loggers"]:
            log_cfg["loggers"][name]["level"] = log_lvl
        else:
            log_cfg["loggers"][name] = {
                "handlers": ["file_handler"],
                "propagate": False,
                "level": log_lvl,
            }

    log_cfg["loggers"]["uvicorn.access"]["level"] = "INFO" if log_lvl == "DEBUG" else "WARNING"
    log_cfg["root"]["level"] = log_lvl if log_lvl == "DEBUG" else "WARNING"
    return log_cfg


def setup_logging(
    log_lvl_str: str,
    *,
    log_dir: Optional[str] = None,
    quiet: bool = False,
) -> Tuple[str, str]:
    """
    Set up the logging system.

    Uses a timestamped dynamic filename and adjusts module log levels
    based on command-line arguments.

    Args:
        log_lvl_str: The desired log level string (e.g., 'debug', 'info').
        log_dir: Directory for the log file (default: :data:`LOG_DIR`).
        quiet: If *True*, suppress all ``print()`` output.

    Returns:
        A tuple of (log_file_path, validated_log_level).
    """
    log_lvl_valid = log_lvl_str.upper()
    if log_lvl_valid not in VALID_LEVELS:
        if not quiet:
            print(f"Warning: invalid log level '{log_lvl_str}'. Using 'INFO'.")
        log_lvl_valid = "INFO"

    target_dir = log_dir or LOG_DIR
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs(target_dir, exist_ok=True)
    log_fpath = os.path.join(target_dir, f"middlengine_{ts}_{log_lvl_valid}.log")

    try:
        logging.config.dictConfig(build_log_config(log_lvl_valid, log_fpath))
        if not quiet:
            print(
                f"Logging initialized. File log level: {log_lvl_valid}, " f"log file: {log_fpath}"
            )
    except (ValueError, TypeError, AttributeError, ImportError) as e_log_cfg:
        print(
            f"Error applying logging configuration: {e_log_cfg}",
            file=sys.stderr,
        )

    return log_fpath, log_lvl_valid
