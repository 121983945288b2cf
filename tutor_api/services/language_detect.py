# tutor_api/services/language_detect.py
"""
경량 언어 감지 (AI 출력 언어 계약 검증용, 서빙 경로에서는 사용하지 않음)

- hi-Deva: 데바나가리 문자
- ur-Arab: 아랍 문자
- hi-Latn: 로마자 힌디어
- mixed-hi-Latn-en: 로마자 힌디어 + 영어 혼합
- en: 영어
- unknown: 판단 불가

JSON 키는 항상 영어이므로 값(value)만 추출해서 판단한다.
"""
from __future__ import annotations

import re
from typing import Any, List

from tutor_api.schemas.language import LanguageDetectionResult

ROMAN_HINDI_MARKERS = frozenset({
    # 동사
    "hai", "hain", "tha", "the", "thi", "tho", "ho", "hoga", "hogi", "honge", "hona",
    "karo", "karein", "karna", "karne", "kar", "kiya", "kiye", "ki", "kara",
    "dekho", "dekhen", "dekhna", "dekh",
    "dhundho", "dhundhen", "dhundna", "dhund",
    "samjho", "samjhen", "samajhna", "samajh",
    "socho", "sochen", "sochna", "soch",
    "likho", "likhen", "likhna", "likh",
    "padho", "padhen", "padhna", "padh",
    "batao", "bataen", "batana", "bata",
    "yaad", "rakh", "rakho", "rakhna",
    # 부정
    "nahi", "nahin", "mat", "na",
    # 의문사
    "kya", "kyun", "kyu", "kyunki", "kaise", "kaisa", "kaisi", "kahan", "kab", "kaun",
    # 후치사
    "ka", "ke", "ko", "se", "par", "pe", "mein", "me", "tak", "liye",
    # 접속사
    "aur", "lekin", "magar", "ya", "phir", "pehle", "baad", "toh", "to", "bhi",
    # 대명사
    "tum", "aap", "hum", "main", "yeh", "ye", "woh", "wo", "iska", "uska", "inhe", "unhe",
    "apna", "apni", "apne", "mera", "meri", "mere", "tera", "teri", "tere",
    # 형용사/부사
    "sahi", "galat", "acha", "accha", "bura", "bada", "chota", "naya", "purana",
    "pehla", "doosra", "teesra", "ek", "do", "teen", "char",
    "bahut", "thoda", "zyada", "kam", "sirf", "bilkul",
    # 명사
    "tarika", "tareeka", "jawab", "sawal", "matlab", "wajah",
    # 수학
    "jod", "ghatao", "guna", "bhag", "barabar",
})

DEVANAGARI_RE = re.compile(r"[\u0900-\u097F]")
ARABIC_RE = re.compile(r"[\u0600-\u06FF\u0750-\u077F]")
_TOKEN_SPLIT_RE = re.compile(r"[\s,.!?;:'\"()\[\]{}]+")
_WS_RE = re.compile(r"\s")

HIGH_MIN_COUNT, HIGH_MIN_RATIO = 3, 0.15
MIXED_MIN_COUNT, MIXED_MIN_RATIO = 2, 0.08


def extract_text_values(obj: Any) -> str:
    """문자열 값만 재귀 추출 (키, 숫자, bool 제외)"""
    if isinstance(obj, str):
        return obj
    if isinstance(obj, dict):
        values = obj.values()
    elif isinstance(obj, (list, tuple)):
        values = obj
    else:
        return ""
    return " ".join(t for t in (extract_text_values(v) for v in values) if t)


def _count_markers(text: str):
    words = [w for w in _TOKEN_SPLIT_RE.split(text.lower()) if w]
    found: List[str] = [w for w in words if w in ROMAN_HINDI_MARKERS]
    return len(found), len(words), list(dict.fromkeys(found))


def _script_result(text: str, pattern: re.Pattern, tag: str, label: str, script: str) -> LanguageDetectionResult:
    chars = len(pattern.findall(text))
    ratio = chars / max(1, len(_WS_RE.sub("", text)))
    return LanguageDetectionResult(
        tag=tag,
        confidence=min(0.95, 0.7 + ratio * 0.25),
        label=label,
        notes=f"{script} script detected ({chars} chars, {ratio * 100:.0f}% of text)",
    )


def detect_language(text: str) -> LanguageDetectionResult:
    trimmed = (text or "").strip()
    if not trimmed:
        return LanguageDetectionResult(tag="unknown", confidence=0, label="Unknown", notes="Empty or no text provided")

    if DEVANAGARI_RE.search(trimmed):
        return _script_result(trimmed, DEVANAGARI_RE, "hi-Deva", "Hindi (Devanagari)", "Devanagari")
    if ARABIC_RE.search(trimmed):
        return _script_result(trimmed, ARABIC_RE, "ur-Arab", "Urdu (Arabic script)", "Arabic")

    count, total, found = _count_markers(trimmed)
    ratio = count / total if total else 0.0
    summary = f"{count}/{total} words are Hindi markers ({ratio * 100:.0f}%): {', '.join(found[:5])}"

    if count >= HIGH_MIN_COUNT and ratio >= HIGH_MIN_RATIO:
        return LanguageDetectionResult(
            tag="hi-Latn",
            confidence=min(0.95, 0.6 + ratio),
            label="Roman Hindi (hi-Latn)",
            notes=summary + ("..." if len(found) > 5 else ""),
        )
    if count >= MIXED_MIN_COUNT and ratio >= MIXED_MIN_RATIO:
        return LanguageDetectionResult(
            tag="mixed-hi-Latn-en",
            confidence=min(0.85, 0.5 + ratio),
            label="Mixed (Roman Hindi + English)",
            notes=summary,
        )
    if count:
        # "to", "the", "do" 같은 영어와 겹치는 단어가 섞인 경우
        return LanguageDetectionResult(
            tag="en", confidence=0.6, label="English", notes=f"Below mixed threshold; stray markers: {summary}"
        )
    return LanguageDetectionResult(
        tag="en", confidence=0.8, label="English", notes="No Hindi markers detected, Latin script only"
    )


def detect_language_from_response(response: Any) -> LanguageDetectionResult:
    return detect_language(extract_text_values(response))


def is_target_language_match(detected: LanguageDetectionResult, expected_language: str) -> bool:
    if expected_language == "en":
        return detected.tag == "en"
    if expected_language == "hi_latn":
        return detected.tag in ("hi-Latn", "mixed-hi-Latn-en", "hi-Deva")
    if expected_language in ("es", "fr"):
        # 마커 사전이 없으므로 "확실한 영어가 아님"으로만 판단
        return detected.tag != "en" or detected.confidence < 0.7
    return detected.tag != "en"
