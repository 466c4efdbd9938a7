"""
Quantitative Value Interpretation

Derives L / N / H for a numeric result from its reference range when the
observation carries no coded interpretation.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

from lab2hpo.utils import UnmappedValueError
from .codes import InternalCode


class ReferenceRange(BaseModel):
    """Normal range for a quantitative result. Either bound may be open."""
    model_config = ConfigDict(frozen=True)

    low: Optional[float] = None
    high: Optional[float] = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "ReferenceRange":
        if self.low is not None and self.high is not None and self.low > self.high:
            raise ValueError(f"reference range low ({self.low}) exceeds high ({self.high})")
        return self

    @property
    def is_open(self) -> bool:
        return self.low is None and self.high is None


def interpret_quantity(value: float, reference_range: Optional[ReferenceRange]) -> InternalCode:
    """
    Compare a value against its reference range.

    Values on a bound count as normal.

    Raises:
        UnmappedValueError: no range, or a range with neither bound
    """
    if reference_range is None or reference_range.is_open:
        raise UnmappedValueError(
            "No reference range to interpret quantity",
            details={"value": value},
        )
    if reference_range.low is not None and value < reference_range.low:
        return InternalCode.LOW
    if reference_range.high is not None and value > reference_range.high:
        return InternalCode.HIGH
    return InternalCode.NORMAL
