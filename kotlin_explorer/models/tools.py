"""Resolved locations of the external build tools."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class ToolPaths(BaseModel):
    """Immutable set of tool locations used by one build.

    Owned by the caller; the pipeline only reads it and refuses to run
    when ``is_valid`` is false.
    """

    model_config = ConfigDict(frozen=True)

    kotlinc: Path
    d8: Path
    platform: Path
    adb: Path
    build_tools_directory: Path
    kotlin_libs: tuple[Path, ...]
    temp_directory: Path

    @property
    def dexdump(self) -> Path:
        return self.build_tools_directory / "dexdump"

    def missing(self) -> list[str]:
        """Names of the tool locations that do not exist on disk."""
        checks: list[tuple[str, Path]] = [
            ("kotlinc", self.kotlinc),
            ("d8", self.d8),
            ("platform", self.platform),
            ("adb", self.adb),
            ("dexdump", self.dexdump),
        ]
        checks.extend((f"kotlin_libs[{i}]", jar) for i, jar in enumerate(self.kotlin_libs))
        missing = [name for name, path in checks if not path.is_file()]
        if not self.kotlin_libs:
            missing.append("kotlin_libs")
        if not self.temp_directory.is_dir():
            missing.append("temp_directory")
        return missing

    @property
    def is_valid(self) -> bool:
        return not self.missing()
