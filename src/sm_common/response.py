"""API response envelope shared by every endpoint.

    {"code": 0, "message": "success", "data": {...}, "timestamp": "...", "request_id": "..."}

code 0 means success; any other code is an AppError code and data is null.
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from src.sm_common.clock import utc_now
from src.sm_common.errors import AppError


def _new_request_id() -> str:
    return f"req_{uuid.uuid4().hex[:12]}"


class ApiResponse(BaseModel):
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=_new_request_id)


def success_response(data: Any = None, request_id: str | None = None) -> ApiResponse:
    resp = ApiResponse(data=data)
    if request_id:
        resp.request_id = request_id
    return resp


def error_response(error: AppError, request_id: str | None = None) -> ApiResponse:
    resp = ApiResponse(code=error.code, message=error.message, data=None)
    if request_id:
        resp.request_id = request_id
    return resp
