"""Data models for external tool invocations and pipeline results."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable, Union

Sink = Callable[[str], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class ProcessResult:
    """Exit code and merged stdout/stderr of one external invocation."""

    exit_code: int
    output: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass(frozen=True)
class Stage:
    """One step of the build pipeline.

    ``command`` builds the argument vector for the scratch directory and
    ``prepare`` runs right before it (rules file, cleanup). On success the
    raw output goes through ``render`` to ``success_sink``; on failure the
    raw output goes through ``on_failure`` to ``failure_sink``.
    """

    name: str
    status: str
    command: Callable[[Path], list[str]]
    failure_sink: str  # "dex" | "oat"
    success_sink: str | None = None
    render: Callable[[str], str] | None = None
    on_failure: Callable[[str], str] | None = None
    prepare: Callable[[Path], None] | None = None
    # Deliver the rendered output even when the stage fails (native code listing)
    always_render: bool = False


@dataclass
class BuildOutput:
    """Pipeline return value."""

    status: str
    stages_run: list[str] = field(default_factory=list)
    failed_stage: str | None = None
    dex: str | None = None
    oat: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.failed_stage is None
