# tutor_api/routes/evaluate.py
from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from tutor_api.schemas.evaluate import EvaluateRequest
from tutor_api.services.evaluation_pipeline import EvaluationPipeline
from tutor_api.services.llm_client import ModelInvoker, get_model_invoker

router = APIRouter(prefix="/api")


@router.post("/evaluate")
def post_evaluate(req: EvaluateRequest, request: Request, invoker: ModelInvoker = Depends(get_model_invoker)):
    trace_id = getattr(request.state, "trace_id", None)
    outcome = EvaluationPipeline(invoker).run(req, trace_id=trace_id)
    return JSONResponse(content=outcome.to_payload(), media_type="application/json")
