# tutor_api/services/coach_notes.py
"""
Coach Notes: 학생의 설명(또는 thinking_log 전체)을 근거로 한 결정론적 피드백.
모델을 호출하지 않는다.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from tutor_api.core.constants import ErrorClasses
from tutor_api.schemas.evaluate import CoachNotes, ThinkingLogEntry

MIN_EXPLANATION_CHARS = 15
QUOTE_MAX_CHARS = 30

_LOG_PREFIX = {
    "initial_explanation": "Initial thinking",
    "followup_explanation": "Follow-up thinking",
    "teachback": "Teach-back response",
}

SLIP_ADVICE = {
    "extra_digit": "Watch for extra digits when writing your answer.",
    "missing_digit": "Make sure you write all the digits in your answer.",
    "sign_slip": "Double-check positive vs negative signs.",
    "extra_zero": "Count your zeros carefully.",
    "transposed_digits": "Check the order of your digits.",
    "decimal_slip": "Check your decimal point placement.",
    "arithmetic_slip": "Slow down on the final calculation.",
}


def combine_thinking_log(entries: Sequence[ThinkingLogEntry]) -> str:
    parts = [f"{_LOG_PREFIX[e.type]}: {e.text}" for e in entries or [] if e.text]
    return "\n\n".join(parts)


def _short_quote(text: str) -> str:
    if len(text) > QUOTE_MAX_CHARS:
        return f'"{text[:QUOTE_MAX_CHARS - 3]}..."'
    return f'"{text}"'


def _has_any(text: str, *words: str) -> bool:
    return any(w in text for w in words)


def _misconception_tip(lower: str) -> Tuple[str, str]:
    """(what_to_fix, remember)"""
    if "add" in lower and _has_any(lower, "top", "numerator", "bottom", "denominator"):
        return "You mentioned adding tops and bottoms, that's a common trap!", "Only add numerators when denominators match."
    if "add" in lower and "both" in lower:
        return "Check which parts should be added together.", "Not everything gets added the same way."
    if _has_any(lower, "multiply", "times"):
        return "Review when to multiply vs other operations.", "Check which operation the problem is asking for."
    if _has_any(lower, "positive", "negative"):
        return "The sign rules need another look.", "Same signs = positive, different signs = negative."
    if _has_any(lower, "same", "equal"):
        return "There's a step that got skipped or mixed up.", "Check each step against the rules."
    return "Your approach has a gap. Review the concept.", "Re-read the lesson, then try again."


def generate_coach_notes(
    student_explanation: Optional[str],
    is_correct: bool,
    error_class: str,
    review_error_type: Optional[str] = None,
    thinking_log: Optional[List[ThinkingLogEntry]] = None,
) -> CoachNotes:
    thinking = (student_explanation or "").strip()
    combined = combine_thinking_log(thinking_log or [])
    if combined:
        thinking = combined

    if len(thinking) < MIN_EXPLANATION_CHARS:
        return CoachNotes(
            what_to_fix=["I couldn't see your thinking this time."],
            remember="Explaining helps me coach you better!",
            next_step="Write 1-2 sentences next time so I can help with your specific approach.",
        )

    quote = _short_quote(thinking)
    persistent = bool(thinking_log) and len(thinking_log) > 1

    if is_correct:
        return CoachNotes(
            what_went_well=[
                f"You explained: {quote}. Great thinking!",
                "Your reasoning led you to the right answer.",
            ],
            remember="Keep explaining your thinking. It builds strong habits!",
            next_step="Try a harder problem to stretch your skills.",
        )

    if error_class == ErrorClasses.REVIEW_ERROR:
        return CoachNotes(
            what_went_well=[
                f"You wrote {quote}. Your approach makes sense.",
                "Just a small slip at the end!",
            ],
            what_to_fix=["The logic was right, but check your final answer carefully."],
            remember=SLIP_ADVICE.get(review_error_type or "", "Double-check your final answer."),
            next_step="Before submitting, read your answer out loud to catch slips.",
        )

    lower = thinking.lower()
    if _has_any(lower, "step", "first", "then"):
        went_well = [f"You showed step-by-step thinking: {quote}"]
    elif _has_any(lower, "i think", "because", "so"):
        went_well = [f"You explained your reasoning: {quote}"]
    else:
        went_well = [f"Thanks for writing: {quote}"]
    if persistent:
        went_well.append("Great persistence. You kept working through this!")

    fix, remember = _misconception_tip(lower)
    return CoachNotes(
        what_went_well=went_well[:2],
        what_to_fix=[fix],
        remember=remember,
        next_step="Review the solution steps, then try the follow-up question.",
    )
