"""Blocking external process runner with merged stdout/stderr."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from kotlin_explorer.models.build import ProcessResult

logger = logging.getLogger(__name__)

# Shell convention for "command not found"
EXIT_NOT_FOUND = 127
EXIT_TIMED_OUT = -1


class ProcessRunner:
    """Run one external command and capture everything it prints.

    A non-zero exit is a normal result, never an exception. ``timeout`` is
    off by default; a hung tool then blocks the calling thread until it exits.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(self, command: Sequence[str], directory: str | Path) -> ProcessResult:
        cmd = [str(part) for part in command]
        logger.debug("Running %s (cwd=%s)", " ".join(cmd), directory)
        try:
            completed = subprocess.run(
                cmd,
                cwd=str(directory),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            logger.warning("Executable not found: %s", cmd[0])
            return ProcessResult(EXIT_NOT_FOUND, f"{cmd[0]}: {e.strerror or 'not found'}\n")
        except subprocess.TimeoutExpired as e:
            # subprocess.run already killed the child
            partial = _decode(e.output)
            logger.warning("Command timed out after %ss: %s", self.timeout, cmd[0])
            return ProcessResult(
                EXIT_TIMED_OUT, f"{partial}\n{cmd[0]}: timed out after {self.timeout}s\n"
            )

        output = _decode(completed.stdout)
        if completed.returncode != 0:
            logger.info("%s exited with %d", Path(cmd[0]).name, completed.returncode)
        return ProcessResult(completed.returncode, output)


def _decode(data: bytes | str | None) -> str:
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return data.decode("utf-8", errors="replace")
