"""
Observation Analyzer

Turns one Observation into HPO term assertions:

    LOINC id -> annotation record
    interpretation codings (or quantity + reference range) -> internal code
      (read from the matching component for panel LOINCs)
    (annotation, internal code) -> TermAssertion

Failures are per LOINC id.  analyze_loinc() raises them; analyze() returns
them alongside the successes so the caller decides what to skip.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Set

from lab2hpo.core.annotation.record import LoincAnnotation
from lab2hpo.core.codesystems.analyzer import CodeableConceptAnalyzer
from lab2hpo.core.codesystems.codes import InternalCode
from lab2hpo.core.codesystems.quantity import interpret_quantity
from lab2hpo.core.hpo.terms import TermAssertion
from lab2hpo.core.loinc.identifiers import LoincId, LoincScale
from lab2hpo.core.observation.model import Observation, ObservationComponent
from lab2hpo.utils import get_logger, Lab2HpoError, AnnotationNotFoundError, UnmappedValueError

logger = get_logger(__name__)

# Scales whose numeric results can be read against a reference range
_QUANTITATIVE_SCALES = frozenset({LoincScale.QN, LoincScale.ORDQN})


@dataclass
class LoincOutcome:
    """Result of analysing one LOINC id of an observation."""
    loinc_id: LoincId
    internal_code: Optional[InternalCode] = None
    assertion: Optional[TermAssertion] = None
    error: Optional[Lab2HpoError] = None

    @property
    def ok(self) -> bool:
        return self.assertion is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "loinc_id": str(self.loinc_id),
            "internal_code": self.internal_code.value if self.internal_code else None,
            "assertion": self.assertion.to_dict() if self.assertion else None,
            "error": self.error.to_dict() if self.error else None,
        }


class ObservationAnalyzer:
    """
    Maps observations to term assertions using a built annotation table.

    Read-only over the annotation table; safe to share across threads.
    """

    def __init__(
        self,
        annotations: Mapping[LoincId, LoincAnnotation],
        code_analyzer: Optional[CodeableConceptAnalyzer] = None,
    ):
        self._annotations = annotations
        self._code_analyzer = code_analyzer or CodeableConceptAnalyzer()
        logger.info(f"ObservationAnalyzer initialized with {len(annotations)} annotation(s)")

    def internal_code_for(
        self,
        observation: Observation,
        scale: LoincScale,
        component: Optional[ObservationComponent] = None,
    ) -> InternalCode:
        """
        Coded interpretation wins; quantitative scales fall back to the
        value and its reference range.  With a component, its values are
        read instead of the observation-level ones.

        Raises:
            UnmappedValueError, ConflictingInternalCodesError
        """
        source = component if component is not None else observation
        if source.interpretation:
            return self._code_analyzer.get_internal_code(source.interpretation, scale)
        if scale in _QUANTITATIVE_SCALES and source.value_quantity is not None:
            return interpret_quantity(source.value_quantity, source.reference_range)
        raise UnmappedValueError(
            "Observation has no interpretation or usable quantity",
            details={"observation_id": observation.id, "scale": scale.value},
        )

    def analyze_loinc(self, loinc_id: LoincId, observation: Observation) -> TermAssertion:
        """
        Raises:
            AnnotationNotFoundError, UnmappedValueError, ConflictingInternalCodesError
        """
        outcome = LoincOutcome(loinc_id=loinc_id)
        self._resolve(outcome, observation)
        return outcome.assertion

    def analyze(self, observation: Observation) -> List[LoincOutcome]:
        """One outcome per LOINC id of the observation, in LOINC order."""
        outcomes: List[LoincOutcome] = []
        for loinc_id in sorted(observation.loinc_ids()):
            outcome = LoincOutcome(loinc_id=loinc_id)
            try:
                self._resolve(outcome, observation)
            except Lab2HpoError as exc:
                outcome.error = exc
                logger.warning(f"Observation {observation.id} / LOINC {loinc_id}: {exc.message}")
            outcomes.append(outcome)
        return outcomes

    def assertions(self, observation: Observation) -> Set[TermAssertion]:
        """Successful assertions only, ready to seed a working set."""
        return {outcome.assertion for outcome in self.analyze(observation) if outcome.ok}

    def _resolve(self, outcome: LoincOutcome, observation: Observation) -> None:
        annotation = self._annotations.get(outcome.loinc_id)
        if annotation is None:
            raise AnnotationNotFoundError(str(outcome.loinc_id))

        component = observation.component_for(outcome.loinc_id)
        outcome.internal_code = self.internal_code_for(observation, annotation.scale, component)
        assertion = annotation.assertion_for(outcome.internal_code)
        if assertion is None:
            raise AnnotationNotFoundError(str(outcome.loinc_id), outcome.internal_code.value)
        outcome.assertion = assertion
