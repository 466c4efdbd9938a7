"""
Pytest Configuration and Fixtures

Shared fixtures for the LOINC -> HPO pipeline tests.
"""
import logging
import pytest
from pathlib import Path
import sys
from typing import Dict, List

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from lab2hpo.core.hpo import HpoTerm, TermAssertion


@pytest.fixture(autouse=True)
def propagate_package_logs(monkeypatch):
    """Let caplog, which listens on the root logger, see package records."""
    monkeypatch.setattr(logging.getLogger("lab2hpo"), "propagate", True)


def make_row(
    loinc: str = "2823-3",
    scale: str = "Qn",
    code: str = "H",
    term: str = "HP:0002153",
    negated: str = "false",
    finalized: str = "true",
) -> str:
    """Build one 13-field annotation dataset row."""
    fields = [
        loinc, scale, "FHIR", code, term, negated,
        "2018-03-01", "curator", "2018-03-01", "curator", "0.1",
        finalized, "",
    ]
    return "\t".join(fields)


HEADER = "\t".join([
    "loincId", "loincScale", "system", "code", "hpoTermId", "isNegated",
    "createdOn", "createdBy", "lastEditedOn", "lastEditedBy", "version",
    "isFinalized", "comment",
])


@pytest.fixture
def row():
    """Factory for dataset rows, see make_row()."""
    return make_row


@pytest.fixture
def header() -> str:
    return HEADER


@pytest.fixture
def hpo_terms() -> Dict[str, HpoTerm]:
    """Small term directory covering the electrolyte examples."""
    terms = [
        HpoTerm("HP:0000093", "Proteinuria"),
        HpoTerm("HP:0002153", "Hyperkalemia"),
        HpoTerm("HP:0002900", "Hypokalemia"),
        HpoTerm("HP:0002902", "Hyponatremia"),
        HpoTerm("HP:0003111", "Abnormal blood ion concentration"),
        HpoTerm("HP:0003228", "Hypernatremia"),
        HpoTerm("HP:0010931", "Abnormal blood sodium concentration"),
        HpoTerm("HP:0011042", "Abnormal blood potassium concentration"),
    ]
    return {term.id: term for term in terms}


@pytest.fixture
def hyperkalemia(hpo_terms) -> TermAssertion:
    return TermAssertion(hpo_terms["HP:0002153"])


@pytest.fixture
def hypokalemia(hpo_terms) -> TermAssertion:
    return TermAssertion(hpo_terms["HP:0002900"])


@pytest.fixture
def hyponatremia(hpo_terms) -> TermAssertion:
    return TermAssertion(hpo_terms["HP:0002902"])


@pytest.fixture
def abnormal_potassium(hpo_terms) -> TermAssertion:
    return TermAssertion(hpo_terms["HP:0011042"])


@pytest.fixture
def potassium_rows() -> List[str]:
    """Header plus three finalized potassium rows (L / N / H)."""
    return [
        HEADER,
        make_row(code="L", term="HP:0002900"),
        make_row(code="N", term="HP:0011042", negated="true"),
        make_row(code="H", term="HP:0002153"),
    ]


@pytest.fixture
def data_dir() -> Path:
    """Path to the bundled sample data directory."""
    return Path(__file__).parent.parent / "data"
