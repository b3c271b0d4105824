"""Argument vectors for the external tools, plus scratch-directory upkeep.

All builders are deterministic for identical inputs. The only side effects
in this module are ``write_r8_rules`` and ``cleanup_classes``; their I/O
errors surface as WorkspaceError.
"""

from __future__ import annotations

import logging
from pathlib import Path

from kotlin_explorer.exceptions import WorkspaceError
from kotlin_explorer.models.tools import ToolPaths

logger = logging.getLogger(__name__)

SOURCE_FILE_NAME = "KotlinExplorer.kt"
RULES_FILE_NAME = "rules.txt"
DEX_FILE_NAME = "classes.dex"
DEVICE_DEX_PATH = "/sdcard/classes.dex"
DEVICE_OAT_PATH = "/sdcard/classes.oat"
MIN_API_LEVEL = "21"

_R8_MAIN = "com.android.tools.r8.R8"
_D8_MAIN = "com.android.tools.r8.D8"

# Matches $ANDROID_HOME/tools/proguard/proguard-android-optimize.txt
R8_RULES = """\
-optimizations !code/simplification/arithmetic,!code/simplification/cast,!field/*,!class/merging/*
-optimizationpasses 5
-allowaccessmodification
-dontpreverify
-dontobfuscate
-keep,allowoptimization class !kotlin.**,!kotlinx.** {
  <methods>;
}"""


def list_class_files(directory: Path) -> list[str]:
    """File names of every ``*.class`` in *directory*, sorted."""
    try:
        return sorted(p.name for p in directory.iterdir() if p.suffix == ".class")
    except OSError as e:
        raise WorkspaceError(f"Cannot list {directory}: {e}") from e


def build_kotlinc_command(tool_paths: ToolPaths, source: Path) -> list[str]:
    classpath = ":".join(str(jar) for jar in tool_paths.kotlin_libs) + f":{tool_paths.platform}"
    return [
        str(tool_paths.kotlinc),
        str(source),
        "-Xmulti-platform",
        "-classpath",
        classpath,
    ]


def _dexer_command(tool_paths: ToolPaths, directory: Path, main: str, extra: list[str]) -> list[str]:
    command = [
        "java",
        "-classpath",
        str(tool_paths.d8),
        main,
        *extra,
        "--min-api",
        MIN_API_LEVEL,
    ]
    if main == _R8_MAIN:
        command += ["--pg-conf", RULES_FILE_NAME]
    command += ["--output", ".", "--lib", str(tool_paths.platform)]
    command += list_class_files(directory)
    command += [str(jar) for jar in tool_paths.kotlin_libs]
    return command


def build_r8_command(tool_paths: ToolPaths, directory: Path) -> list[str]:
    """Optimizing dexer: R8 in release mode with the generated rules file."""
    return _dexer_command(tool_paths, directory, _R8_MAIN, ["--release"])


def build_d8_command(tool_paths: ToolPaths, directory: Path) -> list[str]:
    """Plain dexer used when optimization is turned off."""
    return _dexer_command(tool_paths, directory, _D8_MAIN, [])


def build_dexdump_command(tool_paths: ToolPaths) -> list[str]:
    return [str(tool_paths.dexdump), "-d", DEX_FILE_NAME]


def build_push_command(tool_paths: ToolPaths) -> list[str]:
    return [str(tool_paths.adb), "push", DEX_FILE_NAME, DEVICE_DEX_PATH]


def build_dex2oat_command(tool_paths: ToolPaths) -> list[str]:
    return [
        str(tool_paths.adb),
        "shell",
        "dex2oat",
        f"--dex-file={DEVICE_DEX_PATH}",
        f"--oat-file={DEVICE_OAT_PATH}",
    ]


def build_oatdump_command(tool_paths: ToolPaths) -> list[str]:
    return [str(tool_paths.adb), "shell", "oatdump", f"--oat-file={DEVICE_OAT_PATH}"]


def write_r8_rules(directory: Path) -> Path:
    path = directory / RULES_FILE_NAME
    try:
        path.write_text(R8_RULES, encoding="utf-8")
    except OSError as e:
        raise WorkspaceError(f"Cannot write {path}: {e}") from e
    return path


def write_source(directory: Path, source: str) -> Path:
    path = directory / SOURCE_FILE_NAME
    try:
        path.write_text(source, encoding="utf-8")
    except OSError as e:
        raise WorkspaceError(f"Cannot write {path}: {e}") from e
    return path


def cleanup_classes(directory: Path) -> int:
    """Delete stale ``*.class`` files so they never reach the dexer.

    Returns the number of files removed.
    """
    removed = 0
    for name in list_class_files(directory):
        try:
            (directory / name).unlink()
        except FileNotFoundError:
            continue
        except OSError as e:
            raise WorkspaceError(f"Cannot delete {directory / name}: {e}") from e
        removed += 1
    if removed:
        logger.debug("Removed %d stale class file(s) from %s", removed, directory)
    return removed
