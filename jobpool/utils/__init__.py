"""Utility helpers for jobpool."""

from .logging_config import setup_logging
from .status_lines import StatusLineWriter

__all__ = [
    "setup_logging",
    "StatusLineWriter",
]
