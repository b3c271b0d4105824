"""Build pipeline orchestrator: compile, dex, disassemble, AOT, disassemble.

Stages run strictly in order and the first non-zero exit stops the run:

    compile -> optimize (or dex) -> list_dex -> push -> dex2oat -> list_oat

A failing stage's raw output is forwarded to its failure sink. ``list_dex``
forwards filtered output on success; ``list_oat`` forwards filtered output
whatever its exit code, but only a clean exit reaches "Ready".
"""

from __future__ import annotations

import asyncio
import inspect
import os
import uuid
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Callable

import structlog

from kotlin_explorer.build.commands import (
    SOURCE_FILE_NAME,
    build_d8_command,
    build_dex2oat_command,
    build_dexdump_command,
    build_kotlinc_command,
    build_oatdump_command,
    build_push_command,
    build_r8_command,
    cleanup_classes,
    write_r8_rules,
    write_source,
)
from kotlin_explorer.disasm.dex import filter_dex
from kotlin_explorer.disasm.oat import filter_oat
from kotlin_explorer.disasm.suppression import SuppressionPredicate
from kotlin_explorer.exceptions import BuildInProgressError, InvalidToolPathsError
from kotlin_explorer.logging.base import LogStore
from kotlin_explorer.models.build import BuildOutput, ProcessResult, Sink, Stage
from kotlin_explorer.models.tools import ToolPaths
from kotlin_explorer.process import ProcessRunner
from kotlin_explorer.progress import PhaseProgress, ProgressTracker

log = structlog.get_logger("kotlin_explorer.pipeline")

STATUS_COMPILING = "Compiling Kotlin…"
STATUS_OPTIMIZING = "Optimizing with R8…"
STATUS_DEXING = "Dexing with D8…"
STATUS_DISASSEMBLING_DEX = "Disassembling DEX…"
STATUS_AOT = "AOT compilation…"
STATUS_DISASSEMBLING_OAT = "Disassembling OAT…"
STATUS_READY = "Ready"


@dataclass
class BuildSinks:
    """Receivers for the rendered panes and status line.

    Each callback may be a plain function or a coroutine function.
    """

    on_dex: Sink
    on_oat: Sink
    on_status: Sink


class _SinkDispatcher:
    """Deliver sink payloads in order from a dedicated task.

    The pipeline only enqueues, so a slow sink never holds up a stage.
    Leaving the context waits until every queued payload was delivered.
    """

    def __init__(self, sinks: BuildSinks) -> None:
        self._sinks = sinks
        self._queue: asyncio.Queue[tuple[str, str] | None] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    async def __aenter__(self) -> _SinkDispatcher:
        self._task = asyncio.create_task(self._drain())
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self._queue.put_nowait(None)
        if self._task is not None:
            await self._task

    def emit(self, kind: str, payload: str) -> None:
        self._queue.put_nowait((kind, payload))

    async def _drain(self) -> None:
        while True:
            item = await self._queue.get()
            if item is None:
                return
            kind, payload = item
            callback = getattr(self._sinks, f"on_{kind}")
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                log.warning("pipeline.sink_error", sink=kind, exc_info=True)


class ExplorerPipeline:
    """
    Orchestrate one build of a Kotlin snippet down to native code.

    One pipeline instance owns one scratch directory (``tool_paths.temp_directory``)
    and accepts one build at a time; a concurrent ``run`` raises
    BuildInProgressError.
    """

    def __init__(
        self,
        tool_paths: ToolPaths,
        runner: ProcessRunner | None = None,
        log_store: LogStore | None = None,
        suppressed: Callable[[str], bool] | None = None,
    ) -> None:
        self.tool_paths = tool_paths
        self.runner = runner or ProcessRunner()
        self.log_store = log_store
        self.suppressed = suppressed or SuppressionPredicate()
        self.progress: ProgressTracker | None = None
        self._lock = asyncio.Lock()
        self._build_id_for_log: str | None = None

    def stages(self, source: str, optimize: bool = True) -> list[Stage]:
        """The ordered stage descriptors for one build."""
        tp = self.tool_paths

        if optimize:
            dexer = Stage(
                name="optimize",
                status=STATUS_OPTIMIZING,
                command=partial(build_r8_command, tp),
                failure_sink="dex",
                prepare=write_r8_rules,
            )
        else:
            dexer = Stage(
                name="dex",
                status=STATUS_DEXING,
                command=partial(build_d8_command, tp),
                failure_sink="dex",
            )

        return [
            Stage(
                name="compile",
                status=STATUS_COMPILING,
                command=lambda d: build_kotlinc_command(tp, d / SOURCE_FILE_NAME),
                failure_sink="dex",
                on_failure=self._strip_directory,
                prepare=partial(_prepare_workspace, source=source),
            ),
            dexer,
            Stage(
                name="list_dex",
                status=STATUS_DISASSEMBLING_DEX,
                command=lambda d: build_dexdump_command(tp),
                failure_sink="dex",
                success_sink="dex",
                render=partial(filter_dex, suppressed=self.suppressed),
            ),
            Stage(
                name="push",
                status=STATUS_AOT,
                command=lambda d: build_push_command(tp),
                failure_sink="oat",
            ),
            Stage(
                name="dex2oat",
                status=STATUS_AOT,
                command=lambda d: build_dex2oat_command(tp),
                failure_sink="oat",
            ),
            Stage(
                name="list_oat",
                status=STATUS_DISASSEMBLING_OAT,
                command=lambda d: build_oatdump_command(tp),
                failure_sink="oat",
                success_sink="oat",
                render=partial(filter_oat, suppressed=self.suppressed),
                always_render=True,
            ),
        ]

    async def run(self, source: str, sinks: BuildSinks, optimize: bool = True) -> BuildOutput:
        """Build *source* and stream the results to *sinks*.

        Stage failures are reported through the sinks and the returned
        BuildOutput, never raised. Workspace I/O failures raise WorkspaceError.
        """
        if self._lock.locked():
            raise BuildInProgressError(
                f"A build is already running in {self.tool_paths.temp_directory}"
            )
        async with self._lock:
            missing = self.tool_paths.missing()
            if missing:
                raise InvalidToolPathsError(missing)
            return await self._run(source, sinks, optimize)

    async def _run(self, source: str, sinks: BuildSinks, optimize: bool) -> BuildOutput:
        build_id = uuid.uuid4().hex[:12]
        self._build_id_for_log = build_id
        blog = log.bind(build_id=build_id)
        directory = self.tool_paths.temp_directory

        stages = self.stages(source, optimize)
        progress = self._new_progress(len(stages))
        self.progress = progress  # expose last run's progress for callers

        output = BuildOutput(status="")
        current: str | None = None

        async with _SinkDispatcher(sinks) as dispatch:
            try:
                for index, stage in enumerate(stages):
                    current = stage.name
                    if stage.status != output.status:
                        output.status = stage.status
                        dispatch.emit("status", stage.status)

                    progress.start_phase(stage.name)
                    if stage.prepare is not None:
                        await asyncio.to_thread(stage.prepare, directory)
                    command = stage.command(directory)

                    blog.info("pipeline.stage_started", stage=stage.name, tool=Path(command[0]).name)
                    result = await asyncio.to_thread(self.runner.run, command, directory)
                    output.stages_run.append(stage.name)
                    self._write_stage_log(build_id, stage.name, command, result)

                    if result.ok:
                        progress.complete_phase(stage.name, detail=f"{len(result.output)} chars")
                    else:
                        progress.fail_phase(stage.name, f"exit code {result.exit_code}")
                        output.failed_stage = stage.name
                        blog.warning(
                            "pipeline.stage_failed", stage=stage.name, exit_code=result.exit_code
                        )

                    if stage.render is not None and (result.ok or stage.always_render):
                        text = await asyncio.to_thread(stage.render, result.output)
                        self._deliver(dispatch, output, stage.success_sink or stage.failure_sink, text)
                    elif not result.ok:
                        text = stage.on_failure(result.output) if stage.on_failure else result.output
                        self._deliver(dispatch, output, stage.failure_sink, text)

                    if not result.ok:
                        for remaining in stages[index + 1 :]:
                            progress.skip_phase(remaining.name, f"{stage.name} failed")
                        return output
            except Exception as e:
                if current is not None:
                    progress.fail_phase(current, str(e))
                    for remaining in stages[index + 1 :]:
                        progress.skip_phase(remaining.name, f"{current} aborted")
                blog.error("pipeline.aborted", stage=current, error=str(e))
                raise

            output.status = STATUS_READY
            dispatch.emit("status", STATUS_READY)
            blog.info("pipeline.completed", stages=len(output.stages_run))
            return output

    def _strip_directory(self, text: str) -> str:
        """Drop the scratch directory prefix from compiler diagnostics."""
        return text.replace(f"{self.tool_paths.temp_directory}{os.sep}", "")

    @staticmethod
    def _deliver(dispatch: _SinkDispatcher, output: BuildOutput, sink: str, text: str) -> None:
        setattr(output, sink, text)
        dispatch.emit(sink, text)

    def _new_progress(self, total: int) -> ProgressTracker:
        """Create a fresh ProgressTracker for each build."""
        tracker = ProgressTracker(total=total)
        if self.log_store:
            tracker.callbacks.append(self._log_phase_callback)
        return tracker

    def _log_phase_callback(self, phase: PhaseProgress) -> None:
        """Write phase status transitions to LogStore."""
        if not self.log_store or not self._build_id_for_log:
            return
        try:
            with self.log_store.get_writer(self._build_id_for_log, phase.phase) as writer:
                duration_str = f" ({phase.duration}s)" if phase.duration is not None else ""
                detail_str = f" - {phase.detail}" if phase.detail else ""
                error_str = f" ERROR: {phase.error}" if phase.error else ""
                writer.write(f"[{phase.status}]{duration_str}{detail_str}{error_str}\n")
        except Exception:
            log.debug("pipeline.phase_log_failed", stage=phase.phase, exc_info=True)

    def _write_stage_log(
        self, build_id: str, stage: str, command: list[str], result: ProcessResult
    ) -> None:
        if not self.log_store:
            return
        try:
            with self.log_store.get_writer(build_id, stage) as writer:
                writer.write("$ " + " ".join(command) + "\n")
                writer.write(result.output)
                if result.output and not result.output.endswith("\n"):
                    writer.write("\n")
                writer.write(f"[exit {result.exit_code}]\n")
        except Exception:
            log.debug("pipeline.stage_log_failed", stage=stage, exc_info=True)


def _prepare_workspace(directory: Path, source: str) -> None:
    cleanup_classes(directory)
    write_source(directory, source)


async def disassemble(
    tool_paths: ToolPaths,
    source: str,
    on_dex: Sink,
    on_oat: Sink,
    on_status: Sink,
    optimize: bool = True,
    runner: ProcessRunner | None = None,
) -> BuildOutput:
    """Callback-style entry point: build *source* once with a throwaway pipeline."""
    pipeline = ExplorerPipeline(tool_paths, runner=runner)
    return await pipeline.run(source, BuildSinks(on_dex, on_oat, on_status), optimize=optimize)
