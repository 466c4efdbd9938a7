"""
HPO Inference Rules

Derives new term assertions by combining existing ones.

Design principles:
  - A rule is a closed variant (RuleKind) over two input assertions and one
    consequent.  Evaluation dispatches through _PREDICATES, so adding a kind
    without a predicate fails loudly.
  - Rules are pure predicates over the working set; they never mutate it.
  - InferenceEngine.apply() is a single pass: every rule sees the same,
    unmodified working set, so rule order never changes the result.
  - Fixpoint iteration is a composition of single passes.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import AbstractSet, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, ValidationError

from lab2hpo import config
from lab2hpo.utils import get_logger, MissingHpoTermError, RuleDefinitionError
from .terms import TermAssertion, TermDirectory, resolve_term

logger = get_logger(__name__)


class RuleKind(str, Enum):
    """Logical combinator applied to a rule's two inputs."""
    AND = "AND"
    OR  = "OR"


_PREDICATES: Dict[RuleKind, Callable[[bool, bool], bool]] = {
    RuleKind.AND: lambda has_h1, has_h2: has_h1 and has_h2,
    RuleKind.OR:  lambda has_h1, has_h2: has_h1 or has_h2,
}


@dataclass(frozen=True)
class InferenceRule:
    """``h1 <kind> h2 INFERS h3``"""
    kind: RuleKind
    h1: TermAssertion
    h2: TermAssertion
    h3: TermAssertion

    @property
    def description(self) -> str:
        return f"{self.h1} {self.kind.value} {self.h2} INFERS {self.h3}"

    def evaluate(self, working_set: AbstractSet[TermAssertion]) -> Optional[TermAssertion]:
        return evaluate_rule(self, working_set)

    @classmethod
    def and_rule(cls, h1: TermAssertion, h2: TermAssertion, h3: TermAssertion) -> "InferenceRule":
        return cls(RuleKind.AND, h1, h2, h3)

    @classmethod
    def or_rule(cls, h1: TermAssertion, h2: TermAssertion, h3: TermAssertion) -> "InferenceRule":
        return cls(RuleKind.OR, h1, h2, h3)


def evaluate_rule(rule: InferenceRule, working_set: AbstractSet[TermAssertion]) -> Optional[TermAssertion]:
    """Return the rule's consequent if its precondition holds, else None."""
    predicate = _PREDICATES.get(rule.kind)
    if predicate is None:
        raise ValueError(f"No predicate registered for rule kind {rule.kind!r}")
    if predicate(rule.h1 in working_set, rule.h2 in working_set):
        return rule.h3
    return None


class InferenceEngine:
    """
    Applies a fixed rule set to caller-owned working sets.

    Holds no per-call state; one engine can serve concurrent callers as long
    as each passes its own working set.
    """

    def __init__(self, rules: Iterable[InferenceRule]):
        self._rules: Tuple[InferenceRule, ...] = tuple(rules)
        logger.debug(f"InferenceEngine initialized with {len(self._rules)} rule(s)")

    @property
    def rules(self) -> Tuple[InferenceRule, ...]:
        return self._rules

    def apply(self, working_set: AbstractSet[TermAssertion]) -> Set[TermAssertion]:
        """
        Single pass over all rules.

        Returns:
            Consequents whose precondition holds and that are not already in
            the working set.  The working set itself is left untouched.
        """
        inferred: Set[TermAssertion] = set()
        for rule in self._rules:
            consequent = evaluate_rule(rule, working_set)
            if consequent is not None and consequent not in working_set:
                logger.info(f"Rule fired: {rule.description}")
                inferred.add(consequent)
        return inferred

    def infer_to_fixpoint(self, working_set: AbstractSet[TermAssertion]) -> Set[TermAssertion]:
        """
        Repeat single passes, folding results in, until nothing new appears.

        Terminates because consequents are drawn from the finite rule set.

        Returns:
            Every assertion inferred across all passes.
        """
        current = set(working_set)
        inferred: Set[TermAssertion] = set()
        passes = 0
        while True:
            passes += 1
            new = self.apply(current)
            if not new:
                break
            current |= new
            inferred |= new
        logger.debug(f"Fixpoint reached after {passes} pass(es), {len(inferred)} inferred")
        return inferred


# ── Rule file loading ────────────────────────────────────────────────────────

class _AssertionSpec(BaseModel):
    id: str
    negated: bool = False


class _RuleSpec(BaseModel):
    kind: RuleKind
    h1: _AssertionSpec
    h2: _AssertionSpec
    h3: _AssertionSpec


def _to_assertion(spec: _AssertionSpec, hpo_terms: TermDirectory) -> TermAssertion:
    return TermAssertion(term=resolve_term(spec.id, hpo_terms), negated=spec.negated)


def load_rules(
    hpo_terms: TermDirectory,
    path: Optional[Union[str, Path]] = None,
) -> List[InferenceRule]:
    """
    Load rules from a JSON list of
    ``{"kind": "AND", "h1": {"id": "HP:..", "negated": false}, "h2": {..}, "h3": {..}}``.

    Rules referring to terms absent from ``hpo_terms`` are logged and skipped.

    Raises:
        RuleDefinitionError: unreadable file, invalid JSON or invalid rule shape
    """
    path = Path(path or config.RULES_FILE)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise RuleDefinitionError(str(path), str(exc)) from exc

    if not isinstance(raw, list):
        raise RuleDefinitionError(str(path), "expected a JSON list of rules")

    rules: List[InferenceRule] = []
    for index, entry in enumerate(raw):
        try:
            spec = _RuleSpec.model_validate(entry)
        except ValidationError as exc:
            raise RuleDefinitionError(str(path), f"rule {index}: {exc}") from exc
        try:
            rule = InferenceRule(
                kind=spec.kind,
                h1=_to_assertion(spec.h1, hpo_terms),
                h2=_to_assertion(spec.h2, hpo_terms),
                h3=_to_assertion(spec.h3, hpo_terms),
            )
        except MissingHpoTermError as exc:
            logger.error(f"Skipping rule {index}: {exc.message}")
            continue
        rules.append(rule)

    logger.info(f"Loaded {len(rules)} inference rule(s) from {path}")
    return rules
