# tutor_api/prompts/diagnose_prompt.py
"""
오개념 진단 프롬프트 빌더

핵심 계약:
  - JSON 키는 고정된 영어 이름
  - top_3[].id 값은 후보 ID 화이트리스트 안에서만
  - 나머지 문자열 값은 요청 언어로 작성
"""
from __future__ import annotations

import json
from typing import Any, List, Sequence

from tutor_api.content.catalog import get_topic_name
from tutor_api.prompts.languages import get_ai_language_instruction
from tutor_api.schemas.catalog import CandidateMisconception
from tutor_api.schemas.diagnose import DiagnoseRequest

RESPONSE_KEYS = (
    "top_3", "id", "name", "confidence", "evidence", "diagnosis", "remediation",
    "next_practice_question", "prompt", "correct_answer", "why_this_targets",
    "teach_back_prompt", "key_takeaway",
)

TRANSLATED_FIELDS = (
    "name", "evidence", "diagnosis", "remediation", "prompt",
    "why_this_targets", "teach_back_prompt", "key_takeaway",
)

_SCHEMA_EXAMPLE = """{
  "top_3": [
    {
      "id": "EXACT_MISCONCEPTION_ID_FROM_LIST",
      "name": "Misconception Name (translate this)",
      "confidence": 0.85,
      "evidence": "quote from student (translate this)",
      "diagnosis": "explanation (translate this)",
      "remediation": "micro-lesson max 120 words (translate this)"
    }
  ],
  "next_practice_question": {
    "prompt": "math problem (translate this)",
    "correct_answer": "answer (keep numbers/fractions as-is)",
    "why_this_targets": "explanation (translate this)"
  },
  "teach_back_prompt": "question for student (translate this)",
  "key_takeaway": "max 12 words (translate this)"
}"""


def _quote_keys(keys: Sequence[str]) -> str:
    return ", ".join(f'"{k}"' for k in keys)


def build_system_prompt(language: str, candidate_ids: Sequence[str]) -> str:
    id_list = ", ".join(candidate_ids)
    return f"""You are a math education expert diagnosing student misconceptions. Your task is to:
1. Analyze the student's incorrect answer and explanation
2. Rank the candidate misconceptions by likelihood (confidence 0-1)
3. Provide evidence from the student's explanation
4. Generate targeted remediation and a follow-up question
5. Create a memorable key takeaway (the ONE thing to remember)

{get_ai_language_instruction(language)}

CRITICAL JSON STRUCTURE RULES (NEVER VIOLATE):
- You MUST respond with valid JSON only
- All JSON keys MUST be in English exactly as shown: {_quote_keys(RESPONSE_KEYS)}
- The "id" field values MUST be one of these exact IDs (DO NOT translate): {id_list}
- DO NOT translate the JSON keys or the misconception IDs
- ONLY translate the STRING VALUES for: {", ".join(TRANSLATED_FIELDS)}

Required JSON schema:
{_SCHEMA_EXAMPLE}

RULES:
- top_3 MUST have exactly 3 items, even if confidence is low
- confidence values must be numbers between 0 and 1
- evidence MUST quote student explanation if available; otherwise say equivalent of "none provided"
- remediation must be <= 120 words
- Use ONLY these misconception IDs: {id_list}
- key_takeaway MUST be max 12 words, simple language"""


def build_user_prompt(req: DiagnoseRequest, candidates: List[CandidateMisconception]) -> str:
    candidate_list = [
        {
            "id": m.id,
            "name": m.name,
            "description": m.description,
            "evidence_patterns": list(m.evidence_patterns),
        }
        for m in candidates
    ]
    return f"""Question: {req.question_prompt}
Correct answer: {req.correct_answer}
Student's answer: {req.student_answer}
Student's explanation: {req.student_explanation or "(none provided)"}
Topic: {get_topic_name(req.topic)}

Candidate misconceptions (use ONLY these IDs):
{json.dumps(candidate_list, ensure_ascii=False, indent=2)}

Diagnose the most likely misconceptions. Respond with valid JSON only."""


def build_repair_prompt(invalid_doc: Any, violations: Sequence[Any], candidate_ids: Sequence[str]) -> str:
    issues = "\n".join(f"- {v}" for v in violations)
    previous = json.dumps(invalid_doc, ensure_ascii=False, indent=2, default=str)[:800]
    return f"""Your previous response had validation errors:
{issues}

IMPORTANT:
- All JSON keys MUST be in English: "top_3", "id", "name", "confidence", etc.
- The "id" field MUST be one of: {", ".join(candidate_ids)}
- DO NOT translate JSON keys or misconception IDs

Previous response (with errors):
{previous}

Fix the JSON to match the required schema exactly. Respond with corrected JSON only."""


def assistant_echo(invalid_doc: Any) -> str:
    """repair 대화에 다시 넣을 직전 assistant 메시지 (길이 제한)"""
    return json.dumps(invalid_doc, ensure_ascii=False, default=str)[:1000]
