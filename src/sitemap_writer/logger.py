"""
Centralized logging configuration for sitemap-writer
统一日志配置模块
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "sitemap_writer"

# Package root logger, configured once
_root: Optional[logging.Logger] = None


def _configure_root() -> logging.Logger:
    global _root

    if _root is None:
        _root = logging.getLogger(ROOT_LOGGER_NAME)
        _root.setLevel(logging.INFO)

        # Avoid adding handlers multiple times
        if not _root.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(logging.INFO)
            # Format: [LEVEL] message
            console_handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
            _root.addHandler(console_handler)

    return _root


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    Get a logger under the package root.

    Args:
        name: usually `__name__` of the calling module

    Returns:
        Logger that propagates to the configured package logger
    """
    root = _configure_root()
    if name == ROOT_LOGGER_NAME:
        return root
    return logging.getLogger(name)


def set_log_level(level: int | str) -> None:
    """
    Set the package log level.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
               or integer level
    """
    root = _configure_root()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)
