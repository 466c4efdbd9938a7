"""
HPO Term Types

HpoTerm carries the metadata of one ontology class; TermAssertion pairs a
term with a presence/negation flag and is the unit every downstream stage
works with.  The term directory maps prefixed term ids (``HP:0001234``) to
HpoTerm and is used to validate references in the annotation dataset and
rule files.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from lab2hpo import config
from lab2hpo.utils import get_logger, MissingHpoTermError, OntologyLoadError

logger = get_logger(__name__)

TermDirectory = Mapping[str, "HpoTerm"]


@dataclass(frozen=True)
class HpoTerm:
    """A single HPO class.  Equality is by id only."""
    id: str
    name: str = field(default="", compare=False)

    def __str__(self) -> str:
        return f"{self.id} ({self.name})" if self.name else self.id


@dataclass(frozen=True)
class TermAssertion:
    """
    "Subject exhibits term" (negated=False) or "subject explicitly does not
    exhibit term" (negated=True).

    Two assertions are equal iff term id and negation flag match.
    """
    term: HpoTerm
    negated: bool = False

    @property
    def term_id(self) -> str:
        return self.term.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.term.id,
            "name": self.term.name,
            "negated": self.negated,
        }

    def __str__(self) -> str:
        return f"NOT {self.term}" if self.negated else str(self.term)


def resolve_term(term_id: str, hpo_terms: TermDirectory) -> HpoTerm:
    """Look up a prefixed term id, raising MissingHpoTermError when absent."""
    term = hpo_terms.get(term_id.strip())
    if term is None:
        raise MissingHpoTermError(term_id)
    return term


def _purl_to_term_id(purl: str) -> Optional[str]:
    # http://purl.obolibrary.org/obo/HP_0001234 -> HP:0001234
    if not purl.startswith(config.HPO_PURL_PREFIX):
        return None
    return "HP:" + purl[len(config.HPO_PURL_PREFIX):]


def load_term_directory(path: Optional[Union[str, Path]] = None) -> Dict[str, HpoTerm]:
    """
    Load HPO classes from an OBO-Graph JSON release (``hp.json``).

    Deprecated classes and non-HPO nodes (imported ontologies, properties)
    are skipped.

    Args:
        path: JSON file; defaults to the configured HPO file.

    Returns:
        Dict of term id -> HpoTerm in file order.

    Raises:
        OntologyLoadError: file missing, unreadable or not OBO-Graph JSON.
    """
    path = Path(path or config.HPO_FILE)
    try:
        with path.open(encoding="utf-8") as handle:
            document = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise OntologyLoadError(str(path), str(exc)) from exc

    graphs = document.get("graphs") if isinstance(document, dict) else None
    if not isinstance(graphs, list):
        raise OntologyLoadError(str(path), "missing 'graphs' list")

    terms: Dict[str, HpoTerm] = {}
    deprecated = 0
    for graph in graphs:
        for node in graph.get("nodes", []):
            term_id = _purl_to_term_id(node.get("id", ""))
            if term_id is None or node.get("type", "CLASS") != "CLASS":
                continue
            if node.get("meta", {}).get("deprecated", False):
                deprecated += 1
                continue
            terms[term_id] = HpoTerm(id=term_id, name=node.get("lbl", ""))

    logger.info(f"Loaded {len(terms)} HPO terms from {path} ({deprecated} deprecated skipped)")
    return terms
