"""CLI entry point for standalone usage: kotlin-explorer.

Subcommands:
    kotlin-explorer build Snippet.kt        # Compile, dex, AOT and print both listings
    kotlin-explorer filter-dex dump.txt     # Condense a saved dexdump listing
    kotlin-explorer filter-oat dump.txt     # Condense a saved oatdump listing
    kotlin-explorer tools                   # Show resolved tool locations
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from kotlin_explorer.config import (
    default_android_home,
    default_kotlin_home,
    default_scratch_dir,
    resolve_tool_paths,
)
from kotlin_explorer.exceptions import ExplorerError
from kotlin_explorer.logging.setup import setup_logging
from kotlin_explorer.models.tools import ToolPaths

_STATUS_ICONS = {
    "completed": "+",
    "failed": "!",
    "skipped": "-",
    "running": "~",
    "pending": ".",
}


def _tool_options(func):
    func = click.option(
        "--scratch-dir",
        default=default_scratch_dir,
        help="Working directory for build artifacts (default: new temp dir)",
    )(func)
    func = click.option(
        "--kotlin-home",
        default=default_kotlin_home,
        help="Kotlin compiler distribution root (env: KOTLIN_HOME)",
    )(func)
    func = click.option(
        "--android-home",
        default=default_android_home,
        help="Android SDK root (env: ANDROID_HOME)",
    )(func)
    return func


def _resolve(android_home: str | None, kotlin_home: str | None, scratch_dir: str | None) -> ToolPaths:
    if not android_home:
        click.echo("Error: Android SDK not found; set ANDROID_HOME or pass --android-home", err=True)
        sys.exit(1)
    if not kotlin_home:
        click.echo("Error: Kotlin not found; set KOTLIN_HOME or pass --kotlin-home", err=True)
        sys.exit(1)
    return resolve_tool_paths(android_home, kotlin_home, scratch_dir)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(verbose: bool) -> None:
    """Kotlin Explorer: compile a snippet and inspect its DEX and OAT code."""
    setup_logging("DEBUG" if verbose else None)


@main.command("build")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@_tool_options
@click.option("--no-optimize", is_flag=True, help="Dex with D8 instead of optimizing with R8")
@click.option("--log-dir", default=None, help="Keep raw per-stage tool output under this directory")
def build(
    source: str,
    android_home: str | None,
    kotlin_home: str | None,
    scratch_dir: str | None,
    no_optimize: bool,
    log_dir: str | None,
) -> None:
    """Compile SOURCE and print the filtered DEX and OAT listings."""
    from kotlin_explorer.logging.local import LocalLogStore
    from kotlin_explorer.pipeline import BuildSinks, ExplorerPipeline

    tool_paths = _resolve(android_home, kotlin_home, scratch_dir)
    missing = tool_paths.missing()
    if missing:
        click.echo(f"Error: invalid tool configuration, missing: {', '.join(missing)}", err=True)
        sys.exit(1)

    pipeline = ExplorerPipeline(
        tool_paths,
        log_store=LocalLogStore(log_dir) if log_dir else None,
    )
    sinks = BuildSinks(
        on_dex=lambda text: click.echo(f"── DEX ──\n{text}"),
        on_oat=lambda text: click.echo(f"── OAT ──\n{text}"),
        on_status=lambda status: click.echo(status, err=True),
    )

    try:
        result = asyncio.run(
            pipeline.run(Path(source).read_text(), sinks, optimize=not no_optimize)
        )
    except ExplorerError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    summary = pipeline.progress.get_summary() if pipeline.progress else {"phases": []}
    click.echo(f"\nPipeline summary (total: {summary.get('total_duration', 0)}s):", err=True)
    for p in summary["phases"]:
        icon = _STATUS_ICONS.get(p["status"], "?")
        duration = f" ({p['duration']}s)" if p["duration"] else ""
        detail = f" - {p['error'] or p['detail']}" if (p["error"] or p["detail"]) else ""
        click.echo(f"  [{icon}] {p['phase']}{duration}{detail}", err=True)

    if not result.succeeded:
        sys.exit(1)


@main.command("filter-dex")
@click.argument("dump", type=click.Path(allow_dash=True))
@click.option("--keep-stdlib", is_flag=True, help="Do not hide kotlin/java classes")
def filter_dex_cmd(dump: str, keep_stdlib: bool) -> None:
    """Condense a saved ``dexdump -d`` listing (use - for stdin)."""
    from kotlin_explorer.disasm import SuppressionPredicate, filter_dex

    predicate = SuppressionPredicate(()) if keep_stdlib else SuppressionPredicate()
    with click.open_file(dump, errors="replace") as lines:
        click.echo(filter_dex(lines, suppressed=predicate), nl=False)


@main.command("filter-oat")
@click.argument("dump", type=click.Path(allow_dash=True))
@click.option("--keep-stdlib", is_flag=True, help="Do not hide kotlin/java classes")
def filter_oat_cmd(dump: str, keep_stdlib: bool) -> None:
    """Condense a saved ``oatdump`` listing (use - for stdin)."""
    from kotlin_explorer.disasm import SuppressionPredicate, filter_oat

    predicate = SuppressionPredicate(()) if keep_stdlib else SuppressionPredicate()
    with click.open_file(dump, errors="replace") as lines:
        click.echo(filter_oat(lines, suppressed=predicate), nl=False)


@main.command("tools")
@_tool_options
def tools(android_home: str | None, kotlin_home: str | None, scratch_dir: str | None) -> None:
    """Show resolved tool locations and whether they exist."""
    tool_paths = _resolve(android_home, kotlin_home, scratch_dir)
    try:
        _show_tools(tool_paths)
    finally:
        if scratch_dir is None:
            # resolve_tool_paths created a fresh temp dir just for this listing
            tool_paths.temp_directory.rmdir()


def _show_tools(tool_paths: ToolPaths) -> None:
    entries = [
        ("kotlinc", tool_paths.kotlinc),
        ("d8", tool_paths.d8),
        ("platform", tool_paths.platform),
        ("adb", tool_paths.adb),
        ("dexdump", tool_paths.dexdump),
        *(("lib", jar) for jar in tool_paths.kotlin_libs),
        ("scratch", tool_paths.temp_directory),
    ]
    for name, path in entries:
        mark = "+" if path.exists() else "!"
        click.echo(f"  [{mark}] {name:9s} {path}")
    click.echo(f"\nValid: {'yes' if tool_paths.is_valid else 'no'}")
    if not tool_paths.is_valid:
        sys.exit(1)


if __name__ == "__main__":
    main()
