"""
테스트 공통 설정 및 Fixtures
pytest의 conftest.py는 모든 테스트에서 공유되는 fixture를 정의
"""
import os
import sys
import copy
import pytest
from typing import Any, Dict, Generator, List

# settings 는 import 시점에 만들어지므로 가장 먼저 환경변수 고정
os.environ["ENV"] = "test"
os.environ["DEMO_MODE"] = "false"

# 프로젝트 루트를 path에 추가
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from tutor_api.core.exceptions import ModelCallFailed


# ===========================================
# 스크립트형 가짜 모델 인보커
# ===========================================

class FakeInvoker:
    """
    ModelInvoker 대역.
    responses 의 각 항목: dict → 그대로 반환, Exception → raise.
    스크립트를 다 쓰면 ModelCallFailed.
    """

    provider = "fake"

    def __init__(self, responses: List[Any] = None):
        self.responses = list(responses or [])
        self.calls: List[Dict[str, Any]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def invoke(self, messages, *, temperature, max_tokens, trace_id=None, timeout_s=None, model=None):
        self.calls.append({
            "messages": copy.deepcopy(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
            "trace_id": trace_id,
            "model": model,
        })
        if not self.responses:
            raise ModelCallFailed("fake", original_error=RuntimeError("script exhausted"))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return copy.deepcopy(item)


@pytest.fixture
def fake_invoker():
    """FakeInvoker 팩토리: fake_invoker([doc, exc, ...])"""
    return FakeInvoker


@pytest.fixture
def failing_invoker():
    """항상 실패하는 인보커"""
    return FakeInvoker([])


# ===========================================
# FastAPI 클라이언트
# ===========================================

@pytest.fixture(scope="module")
def app():
    """FastAPI 애플리케이션 인스턴스"""
    from tutor_api.main import app as fastapi_app
    return fastapi_app


@pytest.fixture(scope="module")
def client(app) -> Generator:
    """테스트 클라이언트"""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def override_invoker(app):
    """
    get_model_invoker 의존성 오버라이드
    사용: override_invoker(FakeInvoker([...]))
    """
    from tutor_api.services.llm_client import get_model_invoker

    def _install(invoker):
        app.dependency_overrides[get_model_invoker] = lambda: invoker
        return invoker

    yield _install
    app.dependency_overrides.clear()


# ===========================================
# 진단 관련 Fixtures
# ===========================================

def make_diagnosis_doc(ids=("FRAC-01", "FRAC-02", "FRAC-03"), confidences=(0.6, 0.25, 0.15)) -> Dict[str, Any]:
    """스키마를 만족하는 모델 출력 문서"""
    return {
        "top_3": [
            {
                "id": mid,
                "name": f"Misconception {mid}",
                "confidence": conf,
                "evidence": "Student added the denominators.",
                "diagnosis": "The student treats the fraction parts as separate whole numbers.",
                "remediation": "Use fraction strips to compare parts of the same whole.",
            }
            for mid, conf in zip(ids, confidences)
        ],
        "next_practice_question": {
            "prompt": "Calculate: 1/3 + 1/6",
            "correct_answer": "1/2",
            "why_this_targets": "It needs a common denominator.",
        },
        "teach_back_prompt": "Explain why the denominators must match before adding.",
        "key_takeaway": "Match the bottoms before adding the tops.",
    }


@pytest.fixture
def diagnosis_doc():
    """make_diagnosis_doc 팩토리"""
    return make_diagnosis_doc


@pytest.fixture
def valid_diagnosis_doc() -> Dict[str, Any]:
    return make_diagnosis_doc()


@pytest.fixture
def sample_diagnose_request() -> Dict[str, Any]:
    """분수 덧셈 오답 (분자/분모를 각각 더함)"""
    return {
        "question_prompt": "Calculate: 1/4 + 2/4",
        "correct_answer": "3/4",
        "student_answer": "3/8",
        "student_explanation": "I added the tops and then added the bottoms together.",
        "topic": "fractions",
        "candidate_misconception_ids": ["FRAC-01", "FRAC-02", "FRAC-03"],
        "language": "en",
    }


@pytest.fixture
def sample_evaluate_request() -> Dict[str, Any]:
    return {
        "question_prompt": "Calculate: 1/4 + 2/4",
        "correct_answer": "3/4",
        "student_answer": "3/8",
        "student_explanation": "I added the tops and then added the bottoms together.",
        "language": "en",
    }


# ===========================================
# 유틸리티 Fixtures
# ===========================================

@pytest.fixture
def capture_logs():
    """로그 캡처"""
    import logging

    class LogCapture(logging.Handler):
        def __init__(self):
            super().__init__()
            self.records = []

        def emit(self, record):
            self.records.append(record)

        def get_messages(self):
            return [r.getMessage() for r in self.records]

    handler = LogCapture()
    logger = logging.getLogger()
    old_level = logger.level
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)
    logger.setLevel(old_level)
