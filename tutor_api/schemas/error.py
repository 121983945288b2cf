from typing import Any, Dict, List

from pydantic import BaseModel


class FieldError(BaseModel):
    field: str
    message: str
    type: str | None = None


class ErrorResponse(BaseModel):
    code: str
    message: str
    trace_id: str | None = None
    errors: List[FieldError] | None = None
    details: Dict[str, Any] | None = None
