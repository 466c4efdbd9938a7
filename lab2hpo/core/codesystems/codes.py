"""
Code Systems — Internal Codes and External Interpretation Tables

Every coded interpretation of a lab value must resolve to one InternalCode
before annotation lookup.  Each supported external code system is a
CodeSystemTable: a fixed external-code -> InternalCode mapping plus the LOINC
scales it is relevant for.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from lab2hpo.core.loinc.identifiers import LoincScale
from lab2hpo.utils import UnrecognizedInternalCodeError


class InternalCode(str, Enum):
    """
    Canonical outcome labels.

    L / N / H   – below, within, above the reference range
    A           – abnormal (direction unspecified)
    NP          – not present
    POS / NEG   – positive / negative finding
    U           – unknown / indeterminate
    """
    LOW      = "L"
    NORMAL   = "N"
    HIGH     = "H"
    ABNORMAL = "A"
    ABSENT   = "NP"
    POSITIVE = "POS"
    NEGATIVE = "NEG"
    UNKNOWN  = "U"

    @classmethod
    def parse(cls, text: str) -> "InternalCode":
        key = (text or "").strip().upper()
        for code in cls:
            if code.value == key:
                return code
        raise UnrecognizedInternalCodeError(text)


class Coding(BaseModel):
    """One (system, code) pair as found on an observation."""
    model_config = ConfigDict(frozen=True)

    system: Optional[str] = None
    code: Optional[str] = None
    display: Optional[str] = None


@dataclass(frozen=True)
class CodeSystemTable:
    """Fixed mapping for one external code system."""
    system: str
    codes: Dict[str, InternalCode] = field(hash=False)
    scales: FrozenSet[LoincScale] = frozenset()

    def lookup(self, code: Optional[str]) -> Optional[InternalCode]:
        if code is None:
            return None
        return self.codes.get(code.strip())

    def applies_to(self, scale: Optional[LoincScale]) -> bool:
        return scale is None or scale in self.scales


# ── System URIs ──────────────────────────────────────────────────────────────
HL7_V2_0078_SYSTEM = "http://hl7.org/fhir/v2/0078"
HL7_V3_INTERPRETATION_SYSTEM = "http://terminology.hl7.org/CodeSystem/v3-ObservationInterpretation"
INTERNAL_SYSTEM = "urn:lab2hpo:internal"

# Scales whose results carry a high/low/normal or pos/neg interpretation
_INTERPRETED_SCALES = frozenset({
    LoincScale.QN,
    LoincScale.ORD,
    LoincScale.ORDQN,
    LoincScale.NOM,
})

# ── HL7 observation interpretation codes ─────────────────────────────────────
# Shared by v2 table 0078 and the v3 ObservationInterpretation code system.
_INTERPRETATION_CODES: Dict[str, InternalCode] = {
    "<":   InternalCode.LOW,       # below absolute low-off instrument scale
    "L":   InternalCode.LOW,
    "LL":  InternalCode.LOW,       # critically low
    "LU":  InternalCode.LOW,       # significantly low
    ">":   InternalCode.HIGH,      # above absolute high-off instrument scale
    "H":   InternalCode.HIGH,
    "HH":  InternalCode.HIGH,      # critically high
    "HU":  InternalCode.HIGH,      # significantly high
    "N":   InternalCode.NORMAL,
    "A":   InternalCode.ABNORMAL,
    "AA":  InternalCode.ABNORMAL,  # critically abnormal
    "POS": InternalCode.POSITIVE,
    "DET": InternalCode.POSITIVE,  # detected
    "RR":  InternalCode.POSITIVE,  # reactive
    "NEG": InternalCode.NEGATIVE,
    "ND":  InternalCode.NEGATIVE,  # not detected
    "NR":  InternalCode.NEGATIVE,  # non-reactive
    "IND": InternalCode.UNKNOWN,   # indeterminate
}


def _build_default_tables() -> Tuple[CodeSystemTable, ...]:
    return (
        CodeSystemTable(HL7_V2_0078_SYSTEM, dict(_INTERPRETATION_CODES), _INTERPRETED_SCALES),
        CodeSystemTable(HL7_V3_INTERPRETATION_SYSTEM, dict(_INTERPRETATION_CODES), _INTERPRETED_SCALES),
        CodeSystemTable(
            INTERNAL_SYSTEM,
            {code.value: code for code in InternalCode},
            _INTERPRETED_SCALES,
        ),
    )


DEFAULT_CODE_SYSTEMS: Tuple[CodeSystemTable, ...] = _build_default_tables()
