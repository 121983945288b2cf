"""
EvaluationPipeline 테스트
정확 일치 → 리뷰 에러 → 데모 → 모델 1회 → 문자열 비교 폴백
"""
import pytest

from tutor_api.core.exceptions import MalformedOutput
from tutor_api.schemas.evaluate import EvaluateRequest
from tutor_api.services.evaluation_pipeline import EvaluationPipeline
from tutor_api.services.llm_client import ModelInvoker


def _pipeline(invoker, **kwargs):
    kwargs.setdefault("demo_mode", False)
    return EvaluationPipeline(invoker, **kwargs)


@pytest.fixture
def req(sample_evaluate_request):
    return EvaluateRequest(**sample_evaluate_request)


def test_exact_match_skips_model(sample_evaluate_request, failing_invoker):
    req = EvaluateRequest(**{**sample_evaluate_request, "student_answer": " 3/4"})
    outcome = _pipeline(failing_invoker).run(req)

    assert failing_invoker.call_count == 0
    assert outcome.response.is_correct is True
    assert outcome.response.error_class == "correct"
    assert outcome.response.solution_steps == ["Your answer is correct!"]
    assert outcome.meta.status == "ok"


def test_review_error_skips_model(sample_evaluate_request, failing_invoker):
    req = EvaluateRequest(**{**sample_evaluate_request, "correct_answer": "12", "student_answer": "120"})
    outcome = _pipeline(failing_invoker).run(req)

    assert failing_invoker.call_count == 0
    assert outcome.meta.status == "heuristic"
    assert outcome.response.error_class == "review_error"
    assert outcome.response.review_error_type == "extra_zero"
    assert outcome.response.solution_steps == []
    assert "12" not in outcome.response.review_error_message


def test_model_judgement_used(req, fake_invoker):
    invoker = fake_invoker([{
        "is_correct": False,
        "solution_steps": ["Keep the denominator 4.", "Add 1 + 2 = 3.", "Answer: 3/4."],
        "short_feedback": "Only the numerators get added.",
    }])
    outcome = _pipeline(invoker, model="gpt-test").run(req, trace_id="t-2")

    assert invoker.call_count == 1
    assert invoker.calls[0]["model"] == "gpt-test"
    assert outcome.meta.status == "ok"
    assert outcome.response.error_class == "misconception_error"
    assert len(outcome.response.solution_steps) == 3
    assert outcome.response.coach_notes.remember == "Only add numerators when denominators match."


def test_model_may_accept_equivalent_answer(sample_evaluate_request, fake_invoker):
    req = EvaluateRequest(**{**sample_evaluate_request, "student_answer": "0.75"})
    invoker = fake_invoker([{"is_correct": True, "solution_steps": "Your answer is correct!", "short_feedback": "Nice."}])
    outcome = _pipeline(invoker).run(req)

    assert outcome.response.is_correct is True
    assert outcome.response.error_class == "correct"
    assert outcome.response.solution_steps == ["Your answer is correct!"]


def test_model_failure_falls_back_to_string_equality(req, fake_invoker):
    invoker = fake_invoker([MalformedOutput("fake", raw_text="oops")])
    outcome = _pipeline(invoker).run(req)

    assert invoker.call_count == 1
    assert outcome.meta.status == "fallback"
    assert outcome.response.is_correct is False
    assert outcome.response.error_class == "misconception_error"
    assert outcome.meta.error


def test_deeply_nested_model_output_falls_back(req):
    nested = "[" * 100_000 + "]" * 100_000
    invoker = ModelInvoker(chat_fn=lambda *a, **k: nested, provider="test")
    outcome = _pipeline(invoker).run(req)

    assert outcome.meta.status == "fallback"
    assert outcome.response.is_correct is False


def test_schema_invalid_model_output_falls_back(req, fake_invoker):
    invoker = fake_invoker([{"solution_steps": ["x"]}])
    outcome = _pipeline(invoker).run(req)

    assert outcome.meta.status == "fallback"
    assert "is_correct" in outcome.meta.error


def test_demo_mode_topic_keyed(sample_evaluate_request, failing_invoker):
    req = EvaluateRequest(**{
        **sample_evaluate_request,
        "question_prompt": "Solve for x: 2x + 3 = 11",
        "correct_answer": "4",
        "student_answer": "-1.5",
    })
    outcome = _pipeline(failing_invoker, demo_mode=True).run(req)

    assert failing_invoker.call_count == 0
    assert outcome.meta.status == "demo"
    assert outcome.response.short_feedback == "Remember: whatever you do to one side, do to the other!"


def test_payload_carries_meta(req, failing_invoker):
    payload = _pipeline(failing_invoker).run(req).to_payload()
    assert payload["_meta"]["status"] == "fallback"
    assert set(payload["coach_notes"]) == {"title", "what_went_well", "what_to_fix", "remember", "next_step"}
