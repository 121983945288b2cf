# tutor_api/services/review_errors.py
"""
리뷰 에러(단순 실수) 감지: 모델 호출 전에 답 문자열만으로 판단한다.
메시지에는 정답을 절대 포함하지 않는다.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_INT_RE = re.compile(r"^\s*-?\d+\s*$")
_FRACTION_RE = re.compile(r"^\s*-?\d+\s*/\s*-?\d+\s*$")
_DIGITS_RE = re.compile(r"^-?\d+$")
_NUMERIC_RE = re.compile(r"^-?\d+\.?\d*$")
_WS_RE = re.compile(r"\s+")


REVIEW_MESSAGES = {
    "extra_digit": "Review error detected: likely a quick slip (extra digit). Double-check your number and try again.",
    "missing_digit": "Review error detected: likely a quick slip (missing digit). Double-check your number and try again.",
    "extra_zero": "Review error detected: likely a quick slip (extra zero). Double-check your answer and try again.",
    "transposed_digits": "Review error detected: likely a quick slip (transposed digits). Check the order of your digits and try again.",
    "sign_slip": "Review error detected: likely a quick slip (sign error). Check if your answer should be positive or negative.",
    "decimal_slip": "Review error detected: likely a quick slip (decimal placement). Check your decimal point and try again.",
    "arithmetic_slip": "Review error detected: likely a quick slip (arithmetic). Your answer is very close, double-check your calculation.",
}


@dataclass(frozen=True)
class ReviewError:
    type: str
    message: str


def normalize_answer(s: str) -> str:
    """대소문자/공백 무시 비교용"""
    return _WS_RE.sub("", s or "").lower()


def is_exact_match(student_answer: str, correct_answer: str) -> bool:
    return normalize_answer(student_answer) == normalize_answer(correct_answer)


def edit_distance(a: str, b: str) -> int:
    """Levenshtein 거리"""
    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        cur = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                cur[j] = prev[j - 1]
            else:
                cur[j] = min(prev[j - 1], cur[j - 1], prev[j]) + 1
        prev = cur
    return prev[len(b)]


def detect_format_typo(student_answer: str, correct_answer: str) -> Optional[str]:
    """형식 실수면 메시지, 아니면 None"""
    student = (student_answer or "").strip()
    correct = (correct_answer or "").strip()

    if _FRACTION_RE.match(correct):
        if not _FRACTION_RE.match(student) and not _INT_RE.match(student):
            if re.search(r"/\s*$", student) or re.match(r"^\s*/", student) or re.search(r"/\s*/", student):
                return "Looks like a typo or format slip. Make sure your fraction is complete (e.g., '3/4')."
            if "/" in student:
                return "Looks like a typo or format slip. Check your fraction format (e.g., '3/4')."
            if not re.match(r"^[\d\s/\-.]+$", student):
                return "Looks like a typo or format slip. Use only numbers for your answer."

    if _INT_RE.match(correct) and not _INT_RE.match(student):
        # 정수 정답에 분수 형태는 동치 분수일 수 있으므로 형식이 깨졌을 때만
        if "/" in student:
            if not _FRACTION_RE.match(student):
                return "Looks like a typo or format slip. Check your answer format."
        elif not re.match(r"^[\d\s\-.]+$", student):
            return "Looks like a typo or format slip. Enter a number for your answer."

    return None


def _digit_slip(student: str, correct: str) -> Optional[str]:
    s_digits = student.replace("-", "", 1)
    c_digits = correct.replace("-", "", 1)

    # 끝자리 0 추가는 extra_digit 보다 먼저 본다
    if student == correct + "0":
        return "extra_zero"
    if len(s_digits) == len(c_digits) + 1 and (s_digits.startswith(c_digits) or s_digits.endswith(c_digits)):
        return "extra_digit"
    if len(c_digits) == len(s_digits) + 1 and (c_digits.startswith(s_digits) or c_digits.endswith(s_digits)):
        return "missing_digit"
    if len(s_digits) == len(c_digits) >= 2 and s_digits != c_digits and sorted(s_digits) == sorted(c_digits):
        return "transposed_digits"
    return None


def detect_review_error(student_answer: str, correct_answer: str) -> Optional[ReviewError]:
    """
    검사 순서: 형식 실수 → 자릿수(끝자리 0/추가/누락/순서) → 부호 → 소수점 → 짧은 숫자 편집거리 ≤ 2
    정확히 일치하면 None.
    """
    student = _WS_RE.sub("", (student_answer or "").strip())
    correct = _WS_RE.sub("", (correct_answer or "").strip())

    if student.lower() == correct.lower():
        return None

    typo = detect_format_typo(student_answer, correct_answer)
    if typo:
        return ReviewError("format_typo", typo)

    if _DIGITS_RE.match(student) and _DIGITS_RE.match(correct):
        kind = _digit_slip(student, correct)
        if kind:
            return ReviewError(kind, REVIEW_MESSAGES[kind])

    if student == "-" + correct or "-" + student == correct:
        return ReviewError("sign_slip", REVIEW_MESSAGES["sign_slip"])

    if student.replace(".", "", 1) == correct or student == correct.replace(".", "", 1):
        return ReviewError("decimal_slip", REVIEW_MESSAGES["decimal_slip"])

    if (
        len(student) <= 5
        and len(correct) <= 5
        and _NUMERIC_RE.match(student)
        and _NUMERIC_RE.match(correct)
        and edit_distance(student, correct) <= 2
    ):
        return ReviewError("arithmetic_slip", REVIEW_MESSAGES["arithmetic_slip"])

    return None
