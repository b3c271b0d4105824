"""Logging setup and per-build stage log storage."""

from kotlin_explorer.logging.base import LogStore
from kotlin_explorer.logging.local import LocalLogStore
from kotlin_explorer.logging.setup import setup_logging

__all__ = ["LocalLogStore", "LogStore", "setup_logging"]
