"""
Analysis Layer

Transforms normalized observations into HPO term assertions.

Usage:
    from lab2hpo.core.analysis import ObservationAnalyzer

    analyzer = ObservationAnalyzer(annotations)
    working_set = analyzer.assertions(observation)
    working_set |= engine.infer_to_fixpoint(working_set)
"""
from .engine import ObservationAnalyzer, LoincOutcome

__all__ = [
    "ObservationAnalyzer",
    "LoincOutcome",
]
