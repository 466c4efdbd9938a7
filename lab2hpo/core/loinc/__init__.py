"""
LOINC Types

Validated LOINC code and scale value types.
"""
from .identifiers import LoincId, LoincScale

__all__ = [
    "LoincId",
    "LoincScale",
]
