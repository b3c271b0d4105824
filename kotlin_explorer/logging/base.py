"""Stage log storage abstract interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO


class LogStore(ABC):
    """Storage for the raw output of every pipeline stage, keyed by build."""

    @abstractmethod
    def get_writer(self, build_id: str, stage: str) -> IO:
        """Get an append handle for a stage log."""
        ...

    @abstractmethod
    def read_log(self, build_id: str, stage: str) -> str:
        """Read log content for debugging."""
        ...

    @abstractmethod
    def delete_logs(self, build_id: str) -> None:
        """Delete all logs for a build."""
        ...
