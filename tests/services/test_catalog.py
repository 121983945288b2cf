"""
카탈로그(정적 참조 데이터) 테스트
"""
from tutor_api.content.catalog import (
    get_misconception_by_id,
    get_misconceptions_by_ids,
    get_topic_name,
    get_topic_templates,
)


def test_lookup_by_id():
    record = get_misconception_by_id("FRAC-SWAP")
    assert record.topic == "fractions"
    assert record.name and record.description
    assert get_misconception_by_id("NOPE") is None


def test_lookup_many_keeps_order_and_drops_unknown():
    records = get_misconceptions_by_ids(["LIN-02", "NOPE", "LIN-01"])
    assert [r.id for r in records] == ["LIN-02", "LIN-01"]


def test_topic_templates_fit_takeaway_bound():
    for topic in ("fractions", "negatives", "linear-equations", "mixed-review", "unknown"):
        assert len(get_topic_templates(topic).key_takeaway) <= 100


def test_unknown_topic_uses_default_templates():
    assert get_topic_templates("geometry") == get_topic_templates("fractions")


def test_topic_name_falls_back_to_id():
    assert get_topic_name("fractions") == "Fractions"
    assert get_topic_name("geometry") == "geometry"
