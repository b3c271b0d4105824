"""Hide runtime and standard library classes from filtered output."""

from __future__ import annotations

from typing import Iterable

DEFAULT_SUPPRESSED_PREFIXES: tuple[str, ...] = (
    "kotlin",
    "kotlinx",
    "java",
    "javax",
    "org.intellij",
    "org.jetbrains",
)


class SuppressionPredicate:
    """Match fully-qualified class names against namespace prefixes.

    ``kotlin.Unit`` matches the ``kotlin`` prefix, ``kotlinfoo.Bar`` and a
    bare ``kotlin`` do not.
    """

    def __init__(self, prefixes: Iterable[str] = DEFAULT_SUPPRESSED_PREFIXES) -> None:
        self.prefixes = tuple(p.rstrip(".") for p in prefixes if p)

    def __call__(self, class_name: str) -> bool:
        for prefix in self.prefixes:
            if class_name.startswith(prefix + ".") and len(class_name) > len(prefix) + 1:
                return True
        return False

    def __repr__(self) -> str:
        return f"SuppressionPredicate({list(self.prefixes)!r})"
