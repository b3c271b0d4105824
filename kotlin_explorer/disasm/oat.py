"""Condense ``oatdump`` output into a class/method/instruction listing.

Matching priority for every line after ``OatDexFile:``:
  1. instruction line, while inside a method
  2. method header, while inside a (non-suppressed) class
  3. class header
Anything else is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from kotlin_explorer.disasm.cursor import LineCursor, LineSource
from kotlin_explorer.disasm.suppression import SuppressionPredicate

METHOD_INDENT = "    "
INSTRUCTION_INDENT = "        "

_CLASS_NAME_RE = re.compile(r"\d+: L([^;]+); \(offset=[0-9a-zA-Zx]+\) \(type_idx=\d+\).+")
_METHOD_RE = re.compile(r"\s+\d+:\s+(.+)\s+\(dex_method_idx=\d+\)")
_CODE_RE = re.compile(r"\s+(0x[a-zA-Z0-9]+):\s+[a-zA-Z0-9]+\s+(.+)")


@dataclass
class _OatScan:
    cursor: LineCursor
    is_suppressed: Callable[[str], bool]
    out: list[str] = field(default_factory=list)
    inside_class: bool = False
    inside_method: bool = False
    first_method: bool = False


def _emit_instruction(scan: _OatScan, m: re.Match[str]) -> bool:
    scan.out.append(f"{INSTRUCTION_INDENT}{m.group(1)}: {m.group(2)}\n")
    return True


def _start_method(scan: _OatScan, m: re.Match[str]) -> bool:
    if not scan.first_method:
        scan.out.append("\n")
    scan.first_method = False
    scan.out.append(f"{METHOD_INDENT}{m.group(1)}\n")

    if not scan.cursor.consume_until("CODE: "):
        return False
    scan.inside_method = True
    return True


def _start_class(scan: _OatScan, m: re.Match[str]) -> bool:
    class_name = m.group(1).replace("/", ".")
    suppress = scan.is_suppressed(class_name)
    if not suppress:
        scan.out.append(f"class {class_name}\n")

    scan.inside_method = False
    scan.first_method = True
    scan.inside_class = not suppress
    return True


_Rule = tuple[
    Callable[[_OatScan], bool],
    re.Pattern[str],
    Callable[[_OatScan, re.Match[str]], bool],
]

_RULES: list[_Rule] = [
    (lambda s: s.inside_class and s.inside_method, _CODE_RE, _emit_instruction),
    (lambda s: s.inside_class, _METHOD_RE, _start_method),
    (lambda s: True, _CLASS_NAME_RE, _start_class),
]


def filter_oat(dump: LineSource, suppressed: Callable[[str], bool] | None = None) -> str:
    """Render an oatdump listing; empty when there is no ``OatDexFile:`` section."""
    cursor = LineCursor(dump)
    if not cursor.consume_until("OatDexFile:"):
        return ""

    scan = _OatScan(cursor=cursor, is_suppressed=suppressed or SuppressionPredicate())
    while cursor.has_next():
        line = cursor.advance() or ""
        for applies, pattern, handler in _RULES:
            if not applies(scan):
                continue
            m = pattern.fullmatch(line)
            if m is None:
                continue
            if not handler(scan, m):
                # Method without a CODE section: malformed, stop here
                return "".join(scan.out)
            break

    return "".join(scan.out)
