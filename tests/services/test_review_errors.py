"""
리뷰 에러(단순 실수) 감지 테스트
"""
import pytest

from tutor_api.services.review_errors import (
    detect_format_typo,
    detect_review_error,
    edit_distance,
    is_exact_match,
)


class TestExactMatch:

    def test_case_and_whitespace_insensitive(self):
        assert is_exact_match(" 3 / 4 ", "3/4")
        assert is_exact_match("X = 5", "x=5")

    def test_different(self):
        assert not is_exact_match("4/3", "3/4")


class TestFormatTypo:

    @pytest.mark.parametrize("student", ["5/", "/5", "3//4"])
    def test_incomplete_fraction(self, student):
        assert "fraction is complete" in detect_format_typo(student, "3/4")

    def test_letters_in_fraction_answer(self):
        assert "only numbers" in detect_format_typo("three", "3/4")

    def test_letters_in_integer_answer(self):
        assert "Enter a number" in detect_format_typo("12a", "12")

    def test_equivalent_fraction_for_integer_not_flagged(self):
        assert detect_format_typo("10/2", "5") is None

    def test_valid_integer_for_fraction_not_flagged(self):
        assert detect_format_typo("1", "3/4") is None


class TestDetectReviewError:

    @pytest.mark.parametrize("student,correct,expected", [
        ("111", "11", "extra_digit"),
        ("120", "12", "extra_zero"),
        ("-500", "-50", "extra_zero"),
        ("12", "123", "missing_digit"),
        ("43", "34", "transposed_digits"),
        ("-5", "5", "sign_slip"),
        ("7", "-7", "sign_slip"),
        ("25", "2.5", "decimal_slip"),
        ("17", "19", "arithmetic_slip"),
        ("5/", "3/4", "format_typo"),
    ])
    def test_slip_types(self, student, correct, expected):
        result = detect_review_error(student, correct)
        assert result is not None
        assert result.type == expected

    def test_message_never_reveals_answer(self):
        result = detect_review_error("1234", "123")
        assert "123" not in result.message

    def test_exact_match_is_not_review_error(self):
        assert detect_review_error("3/4", " 3/4 ") is None

    def test_conceptual_error_not_flagged(self):
        assert detect_review_error("3/8", "3/4") is None
        assert detect_review_error("2/8", "1/2") is None

    def test_long_answers_skip_edit_distance(self):
        assert detect_review_error("123456", "123789") is None


def test_edit_distance():
    assert edit_distance("kitten", "sitting") == 3
    assert edit_distance("", "abc") == 3
    assert edit_distance("same", "same") == 0
