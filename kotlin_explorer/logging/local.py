"""Local file stage log storage."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import IO

from kotlin_explorer.logging.base import LogStore


class LocalLogStore(LogStore):
    """Writes ``<base_dir>/<build_id>/<stage>.log``."""

    def __init__(self, base_dir: str | Path = "logs/builds") -> None:
        self.base_dir = Path(base_dir)

    def get_writer(self, build_id: str, stage: str) -> IO:
        log_dir = self.base_dir / build_id
        log_dir.mkdir(parents=True, exist_ok=True)
        return open(log_dir / f"{stage}.log", "a", encoding="utf-8")

    def read_log(self, build_id: str, stage: str) -> str:
        log_file = self.base_dir / build_id / f"{stage}.log"
        if log_file.exists():
            return log_file.read_text(encoding="utf-8")
        return ""

    def delete_logs(self, build_id: str) -> None:
        log_dir = self.base_dir / build_id
        if log_dir.exists():
            shutil.rmtree(log_dir)
