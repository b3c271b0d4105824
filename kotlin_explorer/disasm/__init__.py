"""Line-oriented filters that condense dexdump and oatdump output."""

from kotlin_explorer.disasm.dex import filter_dex
from kotlin_explorer.disasm.oat import filter_oat
from kotlin_explorer.disasm.suppression import DEFAULT_SUPPRESSED_PREFIXES, SuppressionPredicate

__all__ = [
    "DEFAULT_SUPPRESSED_PREFIXES",
    "SuppressionPredicate",
    "filter_dex",
    "filter_oat",
]
