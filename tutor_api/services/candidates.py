# tutor_api/services/candidates.py
from __future__ import annotations

import logging
from typing import List, Optional

from tutor_api.content.catalog import get_misconceptions_by_ids
from tutor_api.core.exceptions import NoValidCandidatesError
from tutor_api.schemas.catalog import CandidateMisconception
from tutor_api.services.heuristics import get_heuristic

log = logging.getLogger("service.candidates")


def resolve_candidates(
    topic: str,
    candidate_ids: List[str],
    *,
    trace_id: Optional[str] = None,
) -> List[CandidateMisconception]:
    """
    후보 ID 목록 → 카탈로그 레코드 (요청 순서 유지)
    - 카탈로그에 없는 ID는 조용히 버림
    - 휴리스틱 대상 토픽이면 해당 ID가 없을 때 뒤에 추가
    - 결과가 비면 NoValidCandidatesError (4xx, 재시도 없음)
    """
    ids = list(dict.fromkeys(candidate_ids))

    heuristic = get_heuristic(topic)
    if heuristic and heuristic.misconception_id not in ids:
        ids.append(heuristic.misconception_id)

    records = get_misconceptions_by_ids(ids)
    dropped = [i for i in ids if i not in {r.id for r in records}]
    if dropped:
        log.info("unknown_candidates_dropped", extra={"trace_id": trace_id, "topic": topic, "dropped": dropped})

    if not records:
        raise NoValidCandidatesError(topic, candidate_ids)
    return records
