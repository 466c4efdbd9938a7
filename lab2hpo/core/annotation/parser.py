"""
LOINC Annotation Parser

Builds the LOINC -> LoincAnnotation table from the tab-separated reference
dataset.

Row layout (13 fields, 0-indexed):
  0  LOINC id            4  HPO term id (HP:0001234)
  1  scale code          5  negated flag ("true"/"false")
  3  internal code      11  finalized flag ("true"/"false")

Row-level defects (wrong field count, undecodable bytes, malformed LOINC,
unknown scale or internal code) are logged and the row is skipped.  A term
missing from the loaded ontology drops only that mapping; the record for the
LOINC persists.
Only failure to read the dataset itself is fatal.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from lab2hpo import config
from lab2hpo.core.codesystems.codes import InternalCode
from lab2hpo.core.hpo.terms import TermAssertion, TermDirectory, resolve_term
from lab2hpo.core.loinc.identifiers import LoincId, LoincScale
from lab2hpo.utils import (
    get_logger,
    AnnotationDatasetError,
    MalformedLoincCodeError,
    MissingHpoTermError,
    UnrecognizedInternalCodeError,
    UnrecognizedScaleError,
)
from .record import LoincAnnotation, LoincAnnotationDraft

logger = get_logger(__name__)


def _parse_bool(text: str) -> bool:
    return text.strip().lower() == "true"


@dataclass
class ParseSummary:
    """Counters for one parse pass."""
    rows_read: int = 0
    blank_lines: int = 0
    header_rows: int = 0
    wrong_field_count: int = 0
    not_finalized: int = 0
    malformed_loinc: int = 0
    unrecognized_scale: int = 0
    unrecognized_code: int = 0
    missing_terms: int = 0
    mappings_added: int = 0
    overwritten: int = 0
    bad_check_digit: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class LoincAnnotationParser:
    """
    Single-pass builder of LOINC annotations.

    Usage:
        parser = LoincAnnotationParser(hpo_terms)
        annotations = parser.parse_file("annotations.tsv")
        print(parser.summary.to_dict())
    """

    def __init__(self, hpo_terms: TermDirectory):
        self._hpo_terms = hpo_terms
        self.summary = ParseSummary()

    def parse_lines(self, lines: Iterable[str]) -> Mapping[LoincId, LoincAnnotation]:
        """
        Parse dataset rows in order.

        Returns:
            Read-only mapping of LoincId -> LoincAnnotation in first-seen order.
        """
        self.summary = ParseSummary()
        drafts: Dict[LoincId, LoincAnnotationDraft] = {}

        for line in lines:
            serialized = line.rstrip("\r\n")
            if not serialized.strip():
                self.summary.blank_lines += 1
                logger.debug("Skipping blank line")
                continue
            self.summary.rows_read += 1
            self._parse_row(serialized, drafts)

        annotations = {loinc_id: draft.build() for loinc_id, draft in drafts.items()}
        logger.info(
            f"Parsed {len(annotations)} LOINC annotations "
            f"({self.summary.mappings_added} mappings, {self.summary.rows_read} rows)"
        )
        logger.debug(f"Annotation parse summary: {self.summary.to_dict()}")
        return MappingProxyType(annotations)

    def parse_file(self, path: Union[str, Path]) -> Mapping[LoincId, LoincAnnotation]:
        """
        Parse the dataset at ``path``.

        Undecodable bytes are replaced rather than fatal; a row damaged in a
        column the parser reads fails that row's own checks.

        Raises:
            AnnotationDatasetError: the file cannot be opened or read
        """
        try:
            with open(path, encoding="utf-8", errors="replace") as handle:
                return self.parse_lines(handle)
        except OSError as exc:
            raise AnnotationDatasetError(str(path), str(exc)) from exc

    # ------------------------------------------------------------------
    # Row handling
    # ------------------------------------------------------------------

    def _parse_row(self, serialized: str, drafts: Dict[LoincId, LoincAnnotationDraft]) -> None:
        elements = serialized.split("\t")

        if len(elements) != config.ANNOTATION_FIELD_COUNT:
            self.summary.wrong_field_count += 1
            logger.error(
                f"line does not have {config.ANNOTATION_FIELD_COUNT} elements, "
                f"but has {len(elements)} elements. Line: {serialized}"
            )
            return

        if elements[config.FIELD_LOINC_ID].strip().lower() == config.ANNOTATION_HEADER_MARKER.lower():
            self.summary.header_rows += 1
            logger.debug(f"line is header: {serialized}")
            return

        if not _parse_bool(elements[config.FIELD_FINALIZED]):
            self.summary.not_finalized += 1
            return

        try:
            loinc_id = LoincId(elements[config.FIELD_LOINC_ID])
            scale = LoincScale.parse(elements[config.FIELD_SCALE])
            code = InternalCode.parse(elements[config.FIELD_INTERNAL_CODE])
        except MalformedLoincCodeError:
            self.summary.malformed_loinc += 1
            logger.error(f"Malformed loinc code line: {serialized}")
            return
        except UnrecognizedScaleError as exc:
            self.summary.unrecognized_scale += 1
            logger.error(f"{exc.message}. Line: {serialized}")
            return
        except UnrecognizedInternalCodeError as exc:
            self.summary.unrecognized_code += 1
            logger.error(f"{exc.message}. Line: {serialized}")
            return

        draft = drafts.get(loinc_id)
        if draft is None:
            if not loinc_id.has_valid_check_digit():
                self.summary.bad_check_digit += 1
                logger.warning(f"LOINC {loinc_id} has an invalid check digit")
            draft = LoincAnnotationDraft(loinc_id=loinc_id, scale=scale)
            drafts[loinc_id] = draft
        elif draft.scale != scale:
            logger.warning(
                f"LOINC {loinc_id}: scale {scale.value} disagrees with "
                f"{draft.scale.value} from an earlier row; keeping {draft.scale.value}"
            )

        try:
            term = resolve_term(elements[config.FIELD_HPO_TERM], self._hpo_terms)
        except MissingHpoTermError as exc:
            # Expected drift between the dataset and the loaded HPO release
            self.summary.missing_terms += 1
            logger.error(exc.message)
            return

        assertion = TermAssertion(term=term, negated=_parse_bool(elements[config.FIELD_NEGATED]))
        previous = draft.add_mapping(code, assertion)
        self.summary.mappings_added += 1
        if previous is not None and previous != assertion:
            self.summary.overwritten += 1
            logger.warning(
                f"LOINC {loinc_id} code {code.value}: {previous} replaced by {assertion}"
            )


def load_annotations(
    hpo_terms: TermDirectory,
    path: Optional[Union[str, Path]] = None,
) -> Mapping[LoincId, LoincAnnotation]:
    """
    Build the annotation table from a dataset file.

    Args:
        hpo_terms: loaded term directory used to validate term references
        path: dataset file; defaults to the configured annotation file

    Raises:
        AnnotationDatasetError: the file cannot be opened or read
    """
    return LoincAnnotationParser(hpo_terms).parse_file(path or config.ANNOTATION_FILE)
