"""
후보 오개념 확정 테스트
"""
import pytest

from tutor_api.core.exceptions import NoValidCandidatesError
from tutor_api.services.candidates import resolve_candidates


class TestResolveCandidates:

    def test_keeps_request_order(self):
        records = resolve_candidates("negatives", ["NEG-02", "NEG-01"])
        assert [r.id for r in records] == ["NEG-02", "NEG-01"]

    def test_unknown_ids_dropped(self, capture_logs):
        records = resolve_candidates("negatives", ["NEG-01", "BOGUS"])
        assert [r.id for r in records] == ["NEG-01"]
        assert "unknown_candidates_dropped" in capture_logs.get_messages()

    def test_heuristic_id_appended_for_fractions(self):
        records = resolve_candidates("fractions", ["FRAC-01", "FRAC-02"])
        assert [r.id for r in records] == ["FRAC-01", "FRAC-02", "FRAC-SWAP"]

    def test_heuristic_id_not_duplicated(self):
        records = resolve_candidates("fractions", ["FRAC-SWAP", "FRAC-01"])
        assert [r.id for r in records] == ["FRAC-SWAP", "FRAC-01"]

    def test_all_unknown_raises(self):
        with pytest.raises(NoValidCandidatesError) as exc_info:
            resolve_candidates("negatives", ["X-1", "X-2"])

        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "NO_VALID_CANDIDATES"
        assert exc_info.value.details["requested_ids"] == ["X-1", "X-2"]
