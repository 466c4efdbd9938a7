"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    Lab2HpoError,
    MalformedLoincCodeError,
    UnrecognizedScaleError,
    UnrecognizedInternalCodeError,
    UnmappedValueError,
    ConflictingInternalCodesError,
    MissingHpoTermError,
    AnnotationDatasetError,
    AnnotationNotFoundError,
    OntologyLoadError,
    RuleDefinitionError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "Lab2HpoError",
    "MalformedLoincCodeError",
    "UnrecognizedScaleError",
    "UnrecognizedInternalCodeError",
    "UnmappedValueError",
    "ConflictingInternalCodesError",
    "MissingHpoTermError",
    "AnnotationDatasetError",
    "AnnotationNotFoundError",
    "OntologyLoadError",
    "RuleDefinitionError",
]
