"""Condense ``dexdump -d`` output into a class/method listing.

Input looks like::

    Class #0            -
      Class descriptor  : 'Lcom/example/Bar;'
      ...
      Direct methods    -
        #0              : (in Lcom/example/Bar;)
          name          : 'bar'
          type          : '()V'
          ...
    000148:                                        |[000148] com.example.Bar.bar:()V
    000158: 0e00                                   |0000: return-void

and comes out as::

    class com.example.Bar
        bar()V // com.example.Bar.bar()
            0000: return-void
"""

from __future__ import annotations

import re
from typing import Callable

from kotlin_explorer.disasm.cursor import UNKNOWN, LineCursor, LineSource
from kotlin_explorer.disasm.suppression import SuppressionPredicate

INSTRUCTION_INDENT = "        "

_BYTECODE_RE = re.compile(r"[0-9a-fA-F]+:[^|]+\|([0-9a-fA-F]+: .+)")
_METHOD_NAME_RE = re.compile(r"name\s+:\s+'(.+)'")
_METHOD_TYPE_RE = re.compile(r"type\s+:\s+'(.+)'")
_CLASS_NAME_RE = re.compile(r"Class descriptor\s+:\s+'L(.+);'")
_METHOD_START_RE = re.compile(r"\s+#\d*.*")
# Lines that belong to a method but carry no instruction
_METHOD_PROPERTY_RE = re.compile(
    r"(\s+[a-zA-Z ]+[:-].*)"  # "      registers     : 1"
    r"|([0-9a-fA-F]+:[^|]+\|\[.+)"  # "000148: ... |[000148] com.example.Bar.bar:()V"
    r"|(\s+0x[0-9a-fA-F]+.*)"  # position and local tables, try ranges
    r"|(\s+(<any>|L\S+;) -> 0x[0-9a-fA-F]+.*)"  # catch handlers
)


def _extract(pattern: re.Pattern[str], line: str | None) -> str | None:
    if line is None:
        return None
    m = pattern.fullmatch(line.strip())
    return m.group(1) if m else None


def extract_class_name(line: str | None) -> str:
    name = _extract(_CLASS_NAME_RE, line)
    return name.replace("/", ".") if name is not None else UNKNOWN


def extract_method_name(line: str | None) -> str:
    return _extract(_METHOD_NAME_RE, line) or UNKNOWN


def extract_method_type(line: str | None) -> str:
    return _extract(_METHOD_TYPE_RE, line) or UNKNOWN


def filter_dex(dump: LineSource, suppressed: Callable[[str], bool] | None = None) -> str:
    """Render a dexdump listing as compact per-class method blocks."""
    is_suppressed = suppressed or SuppressionPredicate()
    cursor = LineCursor(dump)
    out: list[str] = []

    while cursor.has_next():
        if not cursor.consume_until("Class #"):
            break

        class_name = extract_class_name(cursor.advance())
        suppress = is_suppressed(class_name)
        if not suppress:
            out.append(f"class {class_name}\n")

        if not cursor.consume_until("Direct methods"):
            break
        # Suppressed classes are still walked so the cursor lands on the next class
        _extract_methods(cursor, [] if suppress else out, class_name)

    return "".join(out)


def _extract_methods(cursor: LineCursor, out: list[str], class_name: str) -> None:
    while cursor.has_next():
        line = cursor.peek() or ""
        stripped = line.strip()
        if not stripped or stripped.startswith("Virtual methods"):
            cursor.advance()
            continue
        if not _METHOD_START_RE.fullmatch(line):
            # Left in place for the outer class scan
            return

        cursor.advance()
        name = extract_method_name(cursor.advance())
        type_ = extract_method_type(cursor.advance())
        out.append(f"    {name}{type_} // {class_name}.{name}()\n")

        while cursor.has_next():
            line = cursor.peek() or ""
            m = _BYTECODE_RE.fullmatch(line)
            if m:
                out.append(f"{INSTRUCTION_INDENT}{m.group(1)}\n")
            elif not _METHOD_PROPERTY_RE.fullmatch(line):
                break
            cursor.advance()

        out.append("\n")
