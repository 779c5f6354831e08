"""공통 Pydantic 응답 스키마 정의.

Common Pydantic response schema definitions shared across API domains.
"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """단순 메시지 응답 스키마.

    Simple message response schema for operations without a resource payload.
    """

    message: str


class HealthResponse(BaseModel):
    """헬스 체크 응답 스키마.

    Health check response schema.

    Attributes:
        status: "ok" 또는 "degraded" (Overall status)
        database: "up" 또는 "down" (Database probe result, omitted for liveness)
    """

    status: str
    database: str | None = None
