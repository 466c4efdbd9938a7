"""
Observation Boundary Model

What the upstream record extractor hands to the pipeline: the test codings,
the result's coded interpretation and/or quantity, optional free text and an
optional effective date or period.  Panel observations (blood pressure,
electrolyte panels) carry one component per measured part, each with its own
codings and value.
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lab2hpo import config
from lab2hpo.core.codesystems.codes import Coding
from lab2hpo.core.codesystems.quantity import ReferenceRange
from lab2hpo.core.loinc.identifiers import LoincId
from lab2hpo.utils import get_logger, MalformedLoincCodeError

logger = get_logger(__name__)


def _loinc_ids_of(codings: Iterable[Coding], owner: Optional[str]) -> Set[LoincId]:
    loinc_ids: Set[LoincId] = set()
    for coding in codings:
        if coding.system != config.LOINC_SYSTEM or coding.code is None:
            continue
        try:
            loinc_ids.add(LoincId(coding.code))
        except MalformedLoincCodeError as exc:
            logger.debug(f"Observation {owner}: {exc.message}")
    return loinc_ids


class ObservationPeriod(BaseModel):
    """When the observation applies. A single instant sets both ends equal."""
    model_config = ConfigDict(frozen=True)

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @model_validator(mode="after")
    def _check_order(self) -> "ObservationPeriod":
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("period start is after period end")
        return self

    @classmethod
    def instant(cls, moment: datetime) -> "ObservationPeriod":
        return cls(start=moment, end=moment)


class ObservationComponent(BaseModel):
    """One measured part of a panel observation."""
    model_config = ConfigDict(frozen=True)

    code: List[Coding] = Field(default_factory=list)
    interpretation: List[Coding] = Field(default_factory=list)
    value_quantity: Optional[float] = None
    reference_range: Optional[ReferenceRange] = None


class Observation(BaseModel):
    """
    A normalized lab observation.

    Attributes:
        id:                 Source record id (optional)
        code:               Codings identifying the test; LOINC ones are used
        text:               Free-text description of the test
        interpretation:     Coded interpretation of the result (H, L, POS, ...)
        value_quantity:     Numeric result, if any
        reference_range:    Normal range for value_quantity
        components:         Parts of a panel, each with its own code and value
        effective_datetime: Instant the observation applies to
        effective_period:   Period the observation applies to

    At most one of effective_datetime / effective_period may be set.
    """
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    code: List[Coding] = Field(default_factory=list)
    text: Optional[str] = None
    interpretation: List[Coding] = Field(default_factory=list)
    value_quantity: Optional[float] = None
    reference_range: Optional[ReferenceRange] = None
    components: List[ObservationComponent] = Field(default_factory=list)
    effective_datetime: Optional[datetime] = None
    effective_period: Optional[ObservationPeriod] = None

    @model_validator(mode="after")
    def _single_effective(self) -> "Observation":
        if self.effective_datetime is not None and self.effective_period is not None:
            raise ValueError("observation has both effective_datetime and effective_period")
        return self

    def code_loinc_ids(self) -> Set[LoincId]:
        """LOINC ids among the observation's own test codings."""
        return _loinc_ids_of(self.code, self.id)

    def component_loinc_ids(self) -> Dict[LoincId, ObservationComponent]:
        """
        LOINC id -> component carrying it.

        A component with several LOINC codings appears under each of them.
        When two components share a LOINC id the later one is kept.
        """
        loincs: Dict[LoincId, ObservationComponent] = {}
        for component in self.components:
            for loinc_id in _loinc_ids_of(component.code, self.id):
                loincs[loinc_id] = component
        return loincs

    def loinc_ids(self) -> Set[LoincId]:
        """LOINC ids of the observation and its components; malformed codes are ignored."""
        return self.code_loinc_ids() | set(self.component_loinc_ids())

    def component_for(self, loinc_id: LoincId) -> Optional[ObservationComponent]:
        """
        Component holding the value for ``loinc_id``.

        None when the id is one of the observation's own codes, which then
        takes the observation-level value.
        """
        if loinc_id in self.code_loinc_ids():
            return None
        return self.component_loinc_ids().get(loinc_id)

    def description(self) -> Optional[str]:
        """Text if present, otherwise the first coding display, otherwise None."""
        if self.text:
            return self.text
        for coding in self.code:
            if coding.display:
                return coding.display
        return None

    def period(self) -> ObservationPeriod:
        if self.effective_datetime is not None:
            return ObservationPeriod.instant(self.effective_datetime)
        if self.effective_period is not None:
            return self.effective_period
        return ObservationPeriod()
