"""
Unit Tests for the Observation Analyzer

End-to-end checks from observation to term assertions, plus inference over
the resulting working set.
"""
import pytest

from lab2hpo.core.analysis import ObservationAnalyzer
from lab2hpo.core.annotation import LoincAnnotationParser
from lab2hpo.core.codesystems import Coding, InternalCode, ReferenceRange, HL7_V2_0078_SYSTEM
from lab2hpo.core.hpo import InferenceEngine, TermAssertion, load_rules
from lab2hpo.core.loinc import LoincId
from lab2hpo.core.observation import Observation, ObservationComponent
from lab2hpo.utils import (
    AnnotationNotFoundError,
    ConflictingInternalCodesError,
    UnmappedValueError,
)

LOINC = "http://loinc.org"


def flag(code: str) -> Coding:
    return Coding(system=HL7_V2_0078_SYSTEM, code=code)


def potassium(**kwargs) -> Observation:
    return Observation(id="obs-k", code=[Coding(system=LOINC, code="2823-3")], **kwargs)


@pytest.fixture
def analyzer(potassium_rows, row, hpo_terms) -> ObservationAnalyzer:
    lines = potassium_rows + [
        row(loinc="2951-2", code="L", term="HP:0002902"),
        row(loinc="5804-0", scale="Ord", code="POS", term="HP:0000093"),
    ]
    annotations = LoincAnnotationParser(hpo_terms).parse_lines(lines)
    return ObservationAnalyzer(annotations)


class TestObservationAnalyzer:
    """Tests for ObservationAnalyzer."""

    def test_coded_interpretation(self, analyzer, hyperkalemia):
        observation = potassium(interpretation=[flag("HH"), flag("H")])
        assert analyzer.analyze_loinc(LoincId("2823-3"), observation) == hyperkalemia

    def test_normal_gives_negated_assertion(self, analyzer, hpo_terms):
        assertion = analyzer.analyze_loinc(LoincId("2823-3"), potassium(interpretation=[flag("N")]))
        assert assertion == TermAssertion(hpo_terms["HP:0011042"], negated=True)

    def test_quantity_with_reference_range(self, analyzer, hypokalemia):
        observation = potassium(value_quantity=2.8, reference_range=ReferenceRange(low=3.5, high=5.1))
        assert analyzer.analyze_loinc(LoincId("2823-3"), observation) == hypokalemia

    def test_interpretation_wins_over_quantity(self, analyzer, hyperkalemia):
        observation = potassium(
            interpretation=[flag("H")],
            value_quantity=2.8,
            reference_range=ReferenceRange(low=3.5, high=5.1),
        )
        assert analyzer.analyze_loinc(LoincId("2823-3"), observation) == hyperkalemia

    def test_quantity_not_used_for_ordinal_scale(self, analyzer):
        observation = Observation(code=[Coding(system=LOINC, code="5804-0")], value_quantity=30.0)
        with pytest.raises(UnmappedValueError):
            analyzer.analyze_loinc(LoincId("5804-0"), observation)

    def test_quantity_without_range(self, analyzer):
        with pytest.raises(UnmappedValueError):
            analyzer.analyze_loinc(LoincId("2823-3"), potassium(value_quantity=4.0))

    def test_conflicting(self, analyzer):
        with pytest.raises(ConflictingInternalCodesError):
            analyzer.analyze_loinc(LoincId("2823-3"), potassium(interpretation=[flag("LL"), flag("HH")]))

    def test_unannotated_loinc(self, analyzer):
        with pytest.raises(AnnotationNotFoundError) as exc_info:
            analyzer.analyze_loinc(LoincId("718-7"), potassium(interpretation=[flag("H")]))
        assert exc_info.value.internal_code is None

    def test_unannotated_code(self, analyzer):
        with pytest.raises(AnnotationNotFoundError) as exc_info:
            analyzer.analyze_loinc(LoincId("2951-2"), potassium(interpretation=[flag("H")]))
        assert exc_info.value.internal_code == "H"

    def test_analyze_reports_each_loinc(self, analyzer, hyperkalemia):
        observation = Observation(
            id="panel",
            code=[
                Coding(system=LOINC, code="2951-2"),
                Coding(system=LOINC, code="2823-3"),
            ],
            interpretation=[flag("H")],
        )
        outcomes = analyzer.analyze(observation)

        assert [str(o.loinc_id) for o in outcomes] == ["2823-3", "2951-2"]
        assert outcomes[0].ok and outcomes[0].assertion == hyperkalemia
        assert outcomes[0].internal_code is InternalCode.HIGH
        assert not outcomes[1].ok
        assert outcomes[1].internal_code is InternalCode.HIGH
        assert isinstance(outcomes[1].error, AnnotationNotFoundError)
        assert outcomes[1].to_dict()["error"]["error"] == "ANNOTATION_NOT_FOUND"

    def test_assertions_skip_failures(self, analyzer, hyperkalemia):
        observation = Observation(
            code=[Coding(system=LOINC, code="2823-3"), Coding(system=LOINC, code="2951-2")],
            interpretation=[flag("H")],
        )
        assert analyzer.assertions(observation) == {hyperkalemia}

    def test_panel_components(self, analyzer, hypokalemia, hyponatremia):
        observation = Observation(
            id="lytes",
            code=[Coding(system=LOINC, code="24326-1")],
            components=[
                ObservationComponent(
                    code=[Coding(system=LOINC, code="2823-3")],
                    value_quantity=2.8,
                    reference_range=ReferenceRange(low=3.5, high=5.1),
                ),
                ObservationComponent(
                    code=[Coding(system=LOINC, code="2951-2")],
                    interpretation=[flag("L")],
                ),
            ],
        )
        outcomes = analyzer.analyze(observation)

        assert [str(o.loinc_id) for o in outcomes] == ["24326-1", "2823-3", "2951-2"]
        assert isinstance(outcomes[0].error, AnnotationNotFoundError)
        assert analyzer.assertions(observation) == {hypokalemia, hyponatremia}

    def test_component_value_used_over_observation_value(self, analyzer, hypokalemia):
        observation = Observation(
            interpretation=[flag("H")],
            components=[ObservationComponent(
                code=[Coding(system=LOINC, code="2823-3")],
                interpretation=[flag("L")],
            )],
        )
        assert analyzer.analyze_loinc(LoincId("2823-3"), observation) == hypokalemia

    def test_component_without_value(self, analyzer):
        observation = Observation(
            interpretation=[flag("H")],
            components=[ObservationComponent(code=[Coding(system=LOINC, code="2823-3")])],
        )
        with pytest.raises(UnmappedValueError):
            analyzer.analyze_loinc(LoincId("2823-3"), observation)

    def test_observation_without_loinc(self, analyzer):
        assert analyzer.analyze(Observation(interpretation=[flag("H")])) == []


class TestPipeline:
    """Observation -> assertions -> inferred assertions with bundled data."""

    def test_bundled_resources(self, data_dir, hpo_terms, hypokalemia, hyponatremia):
        from lab2hpo.core.annotation import load_annotations

        annotations = load_annotations(hpo_terms, data_dir / "annotations.tsv")
        analyzer = ObservationAnalyzer(annotations)
        engine = InferenceEngine(load_rules(hpo_terms, data_dir / "rules.json"))

        working_set = set()
        working_set |= analyzer.assertions(potassium(interpretation=[flag("LL")]))
        working_set |= analyzer.assertions(Observation(
            code=[Coding(system=LOINC, code="2951-2")],
            value_quantity=128,
            reference_range=ReferenceRange(low=135, high=145),
        ))
        assert working_set == {hypokalemia, hyponatremia}

        inferred = engine.infer_to_fixpoint(working_set)
        assert {a.term_id for a in inferred} == {"HP:0011042", "HP:0010931", "HP:0003111"}
