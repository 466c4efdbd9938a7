"""
Codeable Concept Analyzer

Resolves the codings observed for a single result value to exactly one
InternalCode.

Rules:
  - Codings from unrecognized systems are ignored.
  - Unknown codes inside a recognized system are ignored.
  - Synonymous or repeated codes collapse (e.g. HH + H -> H).
  - No code left           -> UnmappedValueError
  - Two or more codes left -> ConflictingInternalCodesError
"""
from __future__ import annotations

from typing import Dict, Iterable, Optional, Set

from lab2hpo.core.loinc.identifiers import LoincScale
from lab2hpo.utils import get_logger, UnmappedValueError, ConflictingInternalCodesError
from .codes import Coding, CodeSystemTable, InternalCode, DEFAULT_CODE_SYSTEMS

logger = get_logger(__name__)


class CodeableConceptAnalyzer:
    """
    Maps external interpretation codings to internal codes.

    Stateless after construction; safe to share across threads.
    """

    def __init__(self, tables: Optional[Iterable[CodeSystemTable]] = None):
        self._tables: Dict[str, CodeSystemTable] = {
            table.system: table for table in (tables if tables is not None else DEFAULT_CODE_SYSTEMS)
        }

    @property
    def systems(self) -> Set[str]:
        return set(self._tables)

    def internal_codes(
        self,
        codings: Iterable[Coding],
        scale: Optional[LoincScale] = None,
    ) -> Set[InternalCode]:
        """Distinct internal codes found among the codings (may be empty)."""
        found: Set[InternalCode] = set()
        for coding in codings:
            table = self._tables.get(coding.system or "")
            if table is None:
                logger.debug(f"Ignoring coding from unrecognized system: {coding.system}|{coding.code}")
                continue
            if not table.applies_to(scale):
                logger.debug(f"System {coding.system} not used for scale {scale.value}: {coding.code}")
                continue
            code = table.lookup(coding.code)
            if code is None:
                logger.debug(f"Unknown code {coding.code!r} in system {coding.system}")
                continue
            found.add(code)
        return found

    def get_internal_code(
        self,
        codings: Iterable[Coding],
        scale: Optional[LoincScale] = None,
    ) -> InternalCode:
        """
        Resolve codings to one internal code.

        Args:
            codings: (system, code) pairs observed for one value
            scale:   LOINC scale of the result; restricts the code systems
                     consulted to those relevant for it. None consults all.

        Raises:
            UnmappedValueError: no recognized coding
            ConflictingInternalCodesError: more than one distinct code
        """
        codings = list(codings)
        found = self.internal_codes(codings, scale)

        if not found:
            raise UnmappedValueError(
                "No recognized coding found for value",
                details={
                    "codings": [f"{c.system}|{c.code}" for c in codings],
                    "scale": scale.value if scale is not None else None,
                },
            )
        if len(found) > 1:
            raise ConflictingInternalCodesError(
                (code.value for code in found),
                details={"codings": [f"{c.system}|{c.code}" for c in codings]},
            )
        return next(iter(found))


_default_analyzer = CodeableConceptAnalyzer()


def get_internal_code(
    codings: Iterable[Coding],
    scale: Optional[LoincScale] = None,
) -> InternalCode:
    """Resolve codings with the default code-system tables."""
    return _default_analyzer.get_internal_code(codings, scale)
