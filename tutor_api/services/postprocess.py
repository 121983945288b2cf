# tutor_api/services/postprocess.py
import copy
from typing import Any, Sequence


def fix_misconception_ids(doc: Any, valid_ids: Sequence[str]) -> Any:
    """
    top_3[i].id 가 후보 화이트리스트에 없으면 valid_ids[i % len] 로 바꿔 끼운다.
    나머지 필드(설명 텍스트 등)는 그대로 둔다. 원본 doc은 변경하지 않음.
    """
    if not isinstance(doc, dict) or not valid_ids:
        return doc
    top = doc.get("top_3")
    if not isinstance(top, list):
        return doc

    allowed = set(valid_ids)
    out = copy.deepcopy(doc)
    for index, item in enumerate(out["top_3"]):
        if not isinstance(item, dict):
            continue
        mid = item.get("id")
        if not isinstance(mid, str) or mid not in allowed:
            item["id"] = valid_ids[index % len(valid_ids)]
    return out
