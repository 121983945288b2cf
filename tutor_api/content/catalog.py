# tutor_api/content/catalog.py
"""
정적 콘텐츠 카탈로그 (읽기 전용)
- misconceptions.json : 오개념 템플릿
- topic_templates.json: 토픽별 후속 문제 / teach-back / key takeaway

프로세스 시작 후 첫 접근 시 한 번만 로드하고 이후에는 캐시된 불변 객체를 돌려준다.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional

from tutor_api.schemas.catalog import CandidateMisconception, TopicTemplates

log = logging.getLogger("content.catalog")

DATA_DIR = Path(__file__).resolve().parent / "data"


def _load_json(name: str) -> dict:
    with open(DATA_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@lru_cache(maxsize=1)
def _misconceptions() -> Dict[str, CandidateMisconception]:
    raw = _load_json("misconceptions.json")
    items = [CandidateMisconception(**m) for m in raw.get("misconceptions", [])]
    log.debug("catalog_loaded", extra={"kind": "misconceptions", "count": len(items)})
    return {m.id: m for m in items}


@lru_cache(maxsize=1)
def _topic_templates() -> tuple[str, Dict[str, TopicTemplates]]:
    raw = _load_json("topic_templates.json")
    topics = {k: TopicTemplates(**v) for k, v in raw.get("topics", {}).items()}
    return raw.get("default_topic", "fractions"), topics


# ===========================================
# 오개념
# ===========================================

def get_misconception_by_id(misconception_id: str) -> Optional[CandidateMisconception]:
    return _misconceptions().get(misconception_id)


def get_misconceptions_by_ids(ids: List[str]) -> List[CandidateMisconception]:
    """ids 순서를 유지하고, 카탈로그에 없는 ID는 조용히 버린다."""
    found = (get_misconception_by_id(i) for i in ids)
    return [m for m in found if m is not None]


# ===========================================
# 토픽 템플릿
# ===========================================

def get_topic_templates(topic_id: Optional[str]) -> TopicTemplates:
    """알 수 없는 토픽이면 기본 토픽(fractions) 템플릿으로 대체"""
    default_topic, topics = _topic_templates()
    return topics.get(topic_id or default_topic) or topics[default_topic]


def get_topic_name(topic_id: str) -> str:
    _, topics = _topic_templates()
    tpl = topics.get(topic_id)
    return tpl.name if tpl else topic_id
