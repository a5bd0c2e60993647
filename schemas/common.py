"""
schemas/common.py

- 전역 에러 핸들러(middlewares/error_handler.py)가 내려주는 500 응답 형식
- 404 등 라우터 단의 응답은 {"success": False, "error": {...}} 형태를 그대로 사용
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    code: str = Field(..., description="에러 식별 코드 (예: INTERNAL_ERROR)")
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    latency_ms: Optional[int] = Field(default=None, ge=0)

    model_config = ConfigDict(extra="ignore")
