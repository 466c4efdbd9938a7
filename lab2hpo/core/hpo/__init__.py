"""
HPO Module

Term assertions, the term directory and the AND/OR inference engine.

Usage:
    from lab2hpo.core.hpo import InferenceEngine, InferenceRule

    engine = InferenceEngine(rules)
    inferred = engine.apply(working_set)          # one pass
    inferred = engine.infer_to_fixpoint(working_set)
"""
from .terms import HpoTerm, TermAssertion, TermDirectory, resolve_term, load_term_directory
from .rules import RuleKind, InferenceRule, InferenceEngine, evaluate_rule, load_rules

__all__ = [
    "HpoTerm",
    "TermAssertion",
    "TermDirectory",
    "resolve_term",
    "load_term_directory",
    "RuleKind",
    "InferenceRule",
    "InferenceEngine",
    "evaluate_rule",
    "load_rules",
]
