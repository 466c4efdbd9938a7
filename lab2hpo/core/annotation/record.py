"""
LOINC Annotation Records

A LoincAnnotation ties one LOINC code to its scale and to the HPO assertion
implied by each internal outcome code.  Records are accumulated as mutable
drafts during a parse pass and frozen in one final build step.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from lab2hpo.core.codesystems.codes import InternalCode
from lab2hpo.core.hpo.terms import TermAssertion
from lab2hpo.core.loinc.identifiers import LoincId, LoincScale


@dataclass(frozen=True)
class LoincAnnotation:
    """Immutable annotation for one LOINC code."""
    loinc_id: LoincId
    scale: LoincScale
    mappings: Mapping[InternalCode, TermAssertion] = field(
        default_factory=lambda: MappingProxyType({}), hash=False
    )

    @property
    def codes(self) -> List[InternalCode]:
        return list(self.mappings)

    def assertion_for(self, code: InternalCode) -> Optional[TermAssertion]:
        return self.mappings.get(code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "loinc_id": str(self.loinc_id),
            "scale": self.scale.value,
            "mappings": {
                code.value: assertion.to_dict()
                for code, assertion in self.mappings.items()
            },
        }


@dataclass
class LoincAnnotationDraft:
    """Mutable record used while scanning the reference dataset."""
    loinc_id: LoincId
    scale: LoincScale
    mappings: Dict[InternalCode, TermAssertion] = field(default_factory=dict)

    def add_mapping(self, code: InternalCode, assertion: TermAssertion) -> Optional[TermAssertion]:
        """Set the assertion for a code; returns the assertion it replaced, if any."""
        previous = self.mappings.get(code)
        self.mappings[code] = assertion
        return previous

    def build(self) -> LoincAnnotation:
        return LoincAnnotation(
            loinc_id=self.loinc_id,
            scale=self.scale,
            mappings=MappingProxyType(dict(self.mappings)),
        )
