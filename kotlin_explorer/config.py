"""Tool location resolution from an Android SDK and a Kotlin distribution.

Defaults (overridable via CLI options):
    ANDROID_HOME (or ANDROID_SDK_ROOT)  - Android SDK root
    KOTLIN_HOME                         - Kotlin compiler distribution root
    KOTLIN_EXPLORER_SCRATCH_DIR         - working directory for build artifacts
"""

from __future__ import annotations

import logging
import os
import sys
import tempfile
from pathlib import Path

from kotlin_explorer.models.tools import ToolPaths

logger = logging.getLogger(__name__)

KOTLIN_LIB_JARS = (
    "kotlin-stdlib-jdk8.jar",
    "kotlin-stdlib.jar",
    "kotlin-annotations-jvm.jar",
)

_IS_WINDOWS = sys.platform.startswith("win")


def default_android_home() -> str | None:
    return os.environ.get("ANDROID_HOME") or os.environ.get("ANDROID_SDK_ROOT")


def default_kotlin_home() -> str | None:
    return os.environ.get("KOTLIN_HOME")


def default_scratch_dir() -> str | None:
    return os.environ.get("KOTLIN_EXPLORER_SCRATCH_DIR")


def _latest_child(directory: Path) -> Path | None:
    """Lexicographically last sub-directory, or None if there is none."""
    if not directory.is_dir():
        return None
    children = sorted(p for p in directory.iterdir() if p.is_dir())
    return children[-1] if children else None


def resolve_tool_paths(
    android_home: str | Path,
    kotlin_home: str | Path,
    scratch_dir: str | Path | None = None,
) -> ToolPaths:
    """Build a ToolPaths from SDK roots.

    Missing pieces resolve to paths that do not exist, so the result is
    always constructed and ``is_valid`` tells the caller whether it can
    be used.

    Every path is made absolute, since stages run with the scratch
    directory as their working directory.
    """
    android = Path(android_home).expanduser().resolve()
    kotlin = Path(kotlin_home).expanduser().resolve()

    build_tools = _latest_child(android / "build-tools")
    if build_tools is None:
        logger.warning("No build-tools found under %s", android)
        build_tools = android / "build-tools" / "missing"

    platform_dir = _latest_child(android / "platforms")
    if platform_dir is None:
        logger.warning("No platforms found under %s", android)
        platform_dir = android / "platforms" / "missing"

    if scratch_dir is None:
        temp_directory = Path(tempfile.mkdtemp(prefix="kotlin-explorer"))
    else:
        temp_directory = Path(scratch_dir).expanduser().resolve()
        temp_directory.mkdir(parents=True, exist_ok=True)

    paths = ToolPaths(
        kotlinc=kotlin / "bin" / ("kotlinc.bat" if _IS_WINDOWS else "kotlinc"),
        d8=build_tools / "lib" / "d8.jar",
        platform=platform_dir / "android.jar",
        adb=android / "platform-tools" / ("adb.exe" if _IS_WINDOWS else "adb"),
        build_tools_directory=build_tools,
        kotlin_libs=tuple(kotlin / "lib" / jar for jar in KOTLIN_LIB_JARS),
        temp_directory=temp_directory,
    )
    missing = paths.missing()
    if missing:
        logger.info("Tool paths incomplete, missing: %s", ", ".join(missing))
    return paths
