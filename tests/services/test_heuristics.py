"""
구조적 휴리스틱 테스트 (분자/분모 뒤바꿈)
"""
import pytest

from tutor_api.content.catalog import get_misconceptions_by_ids
from tutor_api.schemas.diagnose import DiagnoseRequest, DiagnoseResponse
from tutor_api.services.heuristics import (
    FractionSwapHeuristic,
    apply_heuristic_override,
    detect_fraction_swap,
    get_heuristic,
    parse_fraction,
)


class TestParseFraction:

    @pytest.mark.parametrize("text,expected", [
        ("3/4", (3, 4)),
        (" 3 / 4 ", (3, 4)),
        ("-1/2", (-1, 2)),
    ])
    def test_valid(self, text, expected):
        assert parse_fraction(text) == expected

    @pytest.mark.parametrize("text", ["3/0", "0.75", "3//4", "abc", "", "3/"])
    def test_invalid(self, text):
        assert parse_fraction(text) is None


class TestDetectFractionSwap:

    def test_reciprocal_detected(self):
        assert detect_fraction_swap("4/3", "3/4") is True

    def test_wrong_but_not_reciprocal(self):
        assert detect_fraction_swap("3/8", "3/4") is False

    def test_identical_fraction_not_flagged(self):
        assert detect_fraction_swap("3/3", "3/3") is False

    def test_non_fraction_answers(self):
        assert detect_fraction_swap("0.75", "3/4") is False
        assert detect_fraction_swap("4/3", "1") is False


class TestRegistry:

    def test_fractions_topic_has_heuristic(self):
        heuristic = get_heuristic("Fractions")
        assert isinstance(heuristic, FractionSwapHeuristic)
        assert heuristic.misconception_id == "FRAC-SWAP"

    def test_other_topic_has_none(self):
        assert get_heuristic("negatives") is None


@pytest.fixture
def swap_request():
    return DiagnoseRequest(
        question_prompt="What fraction of the pizza did you eat?",
        correct_answer="3/4",
        student_answer="4/3",
        student_explanation=None,
        topic="fractions",
        candidate_misconception_ids=["FRAC-01", "FRAC-03", "FRAC-SWAP"],
    )


@pytest.fixture
def candidates():
    return get_misconceptions_by_ids(["FRAC-01", "FRAC-03", "FRAC-SWAP"])


class TestApplyOverride:

    def _response(self, diagnosis_doc, ids, confidences=(0.6, 0.25, 0.15)):
        return DiagnoseResponse.model_validate(diagnosis_doc(ids=ids, confidences=confidences))

    def test_first_place_confidence_raised(self, diagnosis_doc, swap_request, candidates):
        response = self._response(diagnosis_doc, ("FRAC-SWAP", "FRAC-01", "FRAC-03"))
        out = apply_heuristic_override(response, FractionSwapHeuristic(), swap_request, candidates)

        assert out.top_3[0].id == "FRAC-SWAP"
        assert out.top_3[0].confidence == pytest.approx(0.95)

    def test_first_place_keeps_higher_confidence(self, diagnosis_doc, swap_request, candidates):
        response = self._response(diagnosis_doc, ("FRAC-SWAP", "FRAC-01", "FRAC-03"), (0.99, 0.005, 0.005))
        out = apply_heuristic_override(response, FractionSwapHeuristic(), swap_request, candidates)
        assert out.top_3[0].confidence == pytest.approx(0.99)

    def test_absent_is_synthesized_from_catalog(self, diagnosis_doc, swap_request, candidates):
        response = self._response(diagnosis_doc, ("FRAC-01", "FRAC-03", "FRAC-01"))
        out = apply_heuristic_override(response, FractionSwapHeuristic(), swap_request, candidates)

        assert [m.id for m in out.top_3] == ["FRAC-SWAP", "FRAC-01", "FRAC-03"]
        assert "reciprocal" in out.top_3[0].evidence
        assert out.top_3[0].name == candidates[2].name

    def test_input_not_mutated_and_idempotent(self, diagnosis_doc, swap_request, candidates):
        response = self._response(diagnosis_doc, ("FRAC-01", "FRAC-03", "FRAC-SWAP"))
        before = response.model_dump()

        once = apply_heuristic_override(response, FractionSwapHeuristic(), swap_request, candidates)
        twice = apply_heuristic_override(once, FractionSwapHeuristic(), swap_request, candidates)

        assert response.model_dump() == before
        assert once.model_dump() == twice.model_dump()

    def test_no_op_when_not_a_candidate(self, diagnosis_doc, swap_request):
        response = self._response(diagnosis_doc, ("FRAC-01", "FRAC-03", "FRAC-01"))
        only_two = get_misconceptions_by_ids(["FRAC-01", "FRAC-03"])
        out = apply_heuristic_override(response, FractionSwapHeuristic(), swap_request, only_two)
        assert out.model_dump() == response.model_dump()

    def test_repeated_target_collapses_to_one_entry(self, diagnosis_doc, swap_request, candidates):
        response = self._response(diagnosis_doc, ("FRAC-01", "FRAC-SWAP", "FRAC-SWAP"))
        out = apply_heuristic_override(response, FractionSwapHeuristic(), swap_request, candidates)

        ids = [m.id for m in out.top_3]
        assert ids == ["FRAC-SWAP", "FRAC-01", "FRAC-03"]
        assert out.top_3[2].confidence == pytest.approx(0.1)
        DiagnoseResponse.model_validate(out.model_dump())

    def test_moved_entry_ranks_above_everything_else(self, diagnosis_doc, swap_request, candidates):
        response = self._response(diagnosis_doc, ("FRAC-01", "FRAC-SWAP", "FRAC-03"), (0.98, 0.01, 0.01))
        out = apply_heuristic_override(response, FractionSwapHeuristic(), swap_request, candidates)

        confidences = [m.confidence for m in out.top_3]
        assert out.top_3[0].id == "FRAC-SWAP"
        assert confidences == sorted(confidences, reverse=True)
