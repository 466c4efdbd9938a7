"""
LOINC Annotation Module

Builds the LOINC -> HPO annotation table from the reference dataset.

Usage:
    from lab2hpo.core.annotation import load_annotations

    annotations = load_annotations(hpo_terms, "annotations.tsv")
    record = annotations[LoincId("2823-3")]
    record.assertion_for(InternalCode.HIGH)
"""
from .record import LoincAnnotation, LoincAnnotationDraft
from .parser import LoincAnnotationParser, ParseSummary, load_annotations

__all__ = [
    "LoincAnnotation",
    "LoincAnnotationDraft",
    "LoincAnnotationParser",
    "ParseSummary",
    "load_annotations",
]
