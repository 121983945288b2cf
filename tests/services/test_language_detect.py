"""
언어 감지 테스트 (AI 출력 언어 계약 검증용)
"""
import pytest

from tutor_api.schemas.language import LanguageDetectionResult
from tutor_api.services.language_detect import (
    detect_language,
    detect_language_from_response,
    extract_text_values,
    is_target_language_match,
)


class TestDetectLanguage:

    def test_roman_hindi(self):
        result = detect_language("Acha try hai, lekin addition ka method sahi nahi tha. Common denominator ka use karo.")
        assert result.tag == "hi-Latn"
        assert result.confidence > 0.6
        assert result.label == "Roman Hindi (hi-Latn)"

    def test_roman_hindi_remediation(self):
        text = "Pehle dono fractions ke liye common denominator dhundho, phir sirf numerators ko jodo."
        assert detect_language(text).tag == "hi-Latn"

    def test_mixed(self):
        result = detect_language("Remember to find common denominator pehle, then add karein.")
        assert result.tag in ("hi-Latn", "mixed-hi-Latn-en")

    def test_plain_english(self):
        result = detect_language("Good job finding a common denominator before adding fractions.")
        assert result.tag == "en"
        assert result.confidence == pytest.approx(0.8)

    def test_stray_marker_stays_english(self):
        result = detect_language("Good try, but you need to use a common denominator before adding fractions.")
        assert result.tag == "en"
        assert result.confidence < 0.7

    def test_devanagari(self):
        result = detect_language("अच्छा प्रयास है, लेकिन पहले समान हर (common denominator) बनाओ।")
        assert result.tag == "hi-Deva"
        assert 0.7 <= result.confidence <= 0.95

    def test_arabic_script(self):
        result = detect_language("اچھی کوشش ہے")
        assert result.tag == "ur-Arab"
        assert result.confidence == pytest.approx(0.95)

    @pytest.mark.parametrize("text", ["", "   "])
    def test_empty(self, text):
        result = detect_language(text)
        assert result.tag == "unknown"
        assert result.confidence == 0


class TestResponseExtraction:

    def test_values_only_not_keys(self):
        text = extract_text_values({"short_feedback": "hello", "nested": {"steps": ["a", "b"]}, "ok": True, "n": 3})
        assert text == "hello a b"
        assert "short_feedback" not in text

    def test_english_keys_do_not_mask_translation(self):
        result = detect_language_from_response({"short_feedback": "Acha try hai, lekin sahi nahi tha"})
        assert result.tag == "hi-Latn"

    def test_non_text_response(self):
        assert detect_language_from_response({"is_correct": False}).tag == "unknown"


def _result(tag, confidence=0.8):
    return LanguageDetectionResult(tag=tag, confidence=confidence, label=tag, notes="")


class TestTargetMatch:

    def test_english_target(self):
        assert is_target_language_match(_result("en"), "en")
        assert not is_target_language_match(_result("hi-Latn"), "en")

    @pytest.mark.parametrize("tag", ["hi-Latn", "mixed-hi-Latn-en", "hi-Deva"])
    def test_hinglish_target_accepts(self, tag):
        assert is_target_language_match(_result(tag), "hi_latn")

    def test_hinglish_target_rejects_english(self):
        assert not is_target_language_match(_result("en"), "hi_latn")

    @pytest.mark.parametrize("lang", ["es", "fr"])
    def test_latin_targets_reject_confident_english(self, lang):
        assert not is_target_language_match(_result("en", 0.8), lang)
        assert is_target_language_match(_result("en", 0.6), lang)

    def test_chinese_target(self):
        assert is_target_language_match(_result("unknown", 0), "zh_hans")
        assert not is_target_language_match(_result("en", 0.6), "zh_hans")
