"""
Code Systems Module

Normalizes coded lab interpretations and quantities to internal codes.
"""
from .codes import (
    InternalCode,
    Coding,
    CodeSystemTable,
    DEFAULT_CODE_SYSTEMS,
    HL7_V2_0078_SYSTEM,
    HL7_V3_INTERPRETATION_SYSTEM,
    INTERNAL_SYSTEM,
)
from .analyzer import CodeableConceptAnalyzer, get_internal_code
from .quantity import ReferenceRange, interpret_quantity

__all__ = [
    "InternalCode",
    "Coding",
    "CodeSystemTable",
    "DEFAULT_CODE_SYSTEMS",
    "HL7_V2_0078_SYSTEM",
    "HL7_V3_INTERPRETATION_SYSTEM",
    "INTERNAL_SYSTEM",
    "CodeableConceptAnalyzer",
    "get_internal_code",
    "ReferenceRange",
    "interpret_quantity",
]
