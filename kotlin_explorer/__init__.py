"""Kotlin Explorer: build pipeline and DEX/OAT disassembly filters."""

__version__ = "0.1.0"

from kotlin_explorer.config import resolve_tool_paths
from kotlin_explorer.disasm import SuppressionPredicate, filter_dex, filter_oat
from kotlin_explorer.exceptions import (
    BuildInProgressError,
    ExplorerError,
    InvalidToolPathsError,
    WorkspaceError,
)
from kotlin_explorer.models.build import BuildOutput, ProcessResult, Stage
from kotlin_explorer.models.tools import ToolPaths
from kotlin_explorer.pipeline import BuildSinks, ExplorerPipeline, disassemble
from kotlin_explorer.process import ProcessRunner
from kotlin_explorer.progress import ProgressTracker

__all__ = [
    "BuildInProgressError",
    "BuildOutput",
    "BuildSinks",
    "ExplorerError",
    "ExplorerPipeline",
    "InvalidToolPathsError",
    "ProcessResult",
    "ProcessRunner",
    "ProgressTracker",
    "Stage",
    "SuppressionPredicate",
    "ToolPaths",
    "WorkspaceError",
    "disassemble",
    "filter_dex",
    "filter_oat",
    "resolve_tool_paths",
]
