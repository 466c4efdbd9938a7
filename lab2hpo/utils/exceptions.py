"""
Custom Exception Hierarchy

Provides specific exception types for the LOINC-to-HPO pipeline
with structured error information.
"""
from typing import Optional, Dict, Any, Iterable


class Lab2HpoError(Exception):
    """Base exception for all lab2hpo errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for diagnostics output."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class MalformedLoincCodeError(Lab2HpoError):
    """Raw text does not have the shape of a LOINC code."""

    def __init__(self, raw: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Malformed LOINC code: {raw!r}",
            code="MALFORMED_LOINC",
            details={"raw": raw, **(details or {})}
        )
        self.raw = raw


class UnrecognizedScaleError(Lab2HpoError):
    """Scale code is not one of the known LOINC scales."""

    def __init__(self, raw: str):
        super().__init__(
            message=f"Unrecognized LOINC scale: {raw!r}",
            code="UNRECOGNIZED_SCALE",
            details={"raw": raw}
        )
        self.raw = raw


class UnrecognizedInternalCodeError(Lab2HpoError):
    """Outcome label is not one of the internal codes."""

    def __init__(self, raw: str):
        super().__init__(
            message=f"Unrecognized internal code: {raw!r}",
            code="UNRECOGNIZED_INTERNAL_CODE",
            details={"raw": raw}
        )
        self.raw = raw


class UnmappedValueError(Lab2HpoError):
    """No supplied coding or quantity resolves to an internal code."""

    def __init__(
        self,
        message: str = "No recognized coding found for value",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="UNMAPPED_VALUE",
            details=details
        )


class ConflictingInternalCodesError(Lab2HpoError):
    """Supplied codings resolve to more than one distinct internal code."""

    def __init__(self, codes: Iterable[str], details: Optional[Dict[str, Any]] = None):
        self.codes = sorted(codes)
        super().__init__(
            message=f"Conflicting internal codes: {', '.join(self.codes)}",
            code="CONFLICTING_CODES",
            details={"codes": self.codes, **(details or {})}
        )


class MissingHpoTermError(Lab2HpoError):
    """Term id is absent from the loaded HPO term directory."""

    def __init__(self, term_id: str):
        super().__init__(
            message=f"The HPO term could not be found for term id {term_id}",
            code="MISSING_HPO_TERM",
            details={"term_id": term_id}
        )
        self.term_id = term_id


class AnnotationDatasetError(Lab2HpoError):
    """The reference annotation dataset could not be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Cannot read annotation dataset {path}: {reason}",
            code="ANNOTATION_DATASET_ERROR",
            details={"path": path, "reason": reason}
        )
        self.path = path


class AnnotationNotFoundError(Lab2HpoError):
    """No annotation exists for a LOINC id, or for one of its outcomes."""

    def __init__(
        self,
        loinc_id: str,
        internal_code: Optional[str] = None
    ):
        if internal_code is None:
            message = f"No annotation for LOINC {loinc_id}"
        else:
            message = f"LOINC {loinc_id} has no annotation for internal code {internal_code}"
        super().__init__(
            message=message,
            code="ANNOTATION_NOT_FOUND",
            details={"loinc_id": loinc_id, "internal_code": internal_code}
        )
        self.loinc_id = loinc_id
        self.internal_code = internal_code


class OntologyLoadError(Lab2HpoError):
    """The HPO term directory could not be loaded."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Cannot load HPO terms from {path}: {reason}",
            code="ONTOLOGY_LOAD_ERROR",
            details={"path": path, "reason": reason}
        )
        self.path = path


class RuleDefinitionError(Lab2HpoError):
    """Inference rule definitions could not be read or validated."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Invalid rule definitions in {path}: {reason}",
            code="RULE_DEFINITION_ERROR",
            details={"path": path, "reason": reason}
        )
        self.path = path
