# tutor_api/routes/diagnose.py
from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from tutor_api.schemas.diagnose import DiagnoseRequest
from tutor_api.schemas.error import ErrorResponse
from tutor_api.services.diagnosis_pipeline import DiagnosisPipeline
from tutor_api.services.llm_client import ModelInvoker, get_model_invoker

router = APIRouter(prefix="/api")


@router.post(
    "/diagnose",
    responses={400: {"model": ErrorResponse}},
)
def post_diagnose(req: DiagnoseRequest, request: Request, invoker: ModelInvoker = Depends(get_model_invoker)):
    """
    오개념 진단. 모델이 실패해도 항상 200 + 스키마 유효 응답 (_meta.status 로 구분).
    4xx는 후보 오개념이 하나도 유효하지 않을 때(NoValidCandidatesError) 뿐.
    """
    trace_id = getattr(request.state, "trace_id", None)
    outcome = DiagnosisPipeline(invoker).run(req, trace_id=trace_id)
    return JSONResponse(content=outcome.to_payload(), media_type="application/json")
