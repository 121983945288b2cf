# tutor_api/routes/debug.py
from __future__ import annotations
from fastapi import APIRouter, HTTPException

from tutor_api.core.settings import settings
from tutor_api.schemas.language import LanguageCheckRequest, LanguageCheckResponse
from tutor_api.services.language_detect import detect_language_from_response, is_target_language_match

router = APIRouter(prefix="/api/debug")


@router.post("/language-check", response_model=LanguageCheckResponse)
def post_language_check(req: LanguageCheckRequest):
    # DEBUG 가 아니면 존재하지 않는 엔드포인트처럼 동작
    if not settings.DEBUG:
        raise HTTPException(status_code=404, detail="Not Found")

    detection = detect_language_from_response(req.response)
    return LanguageCheckResponse(
        detection=detection,
        expected_language=req.expected_language,
        is_target_match=is_target_language_match(detection, req.expected_language),
    )
