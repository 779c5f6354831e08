"""헬스 체크 라우터 — 로드 밸런서 및 모니터링용.

Health Router — Liveness, readiness and database probe endpoints.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import DbSession
from app.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter()


async def _database_up(db: DbSession) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health probe failed")
        return False
    return True


@router.get("", response_model=HealthResponse)
async def health_check(db: DbSession) -> JSONResponse:
    """서버 및 DB 상태 확인 — DB 불가 시 503.

    Health check with a database probe. Returns 503 when the database is unreachable.
    """
    if await _database_up(db):
        return JSONResponse(status_code=200, content={"status": "ok", "database": "up"})
    return JSONResponse(status_code=503, content={"status": "degraded", "database": "down"})


@router.get("/live", response_model=HealthResponse)
async def liveness() -> HealthResponse:
    """프로세스 생존 확인 (Liveness probe, no dependencies)."""
    return HealthResponse(status="ok")


@router.get("/ready", response_model=HealthResponse)
async def readiness(db: DbSession) -> JSONResponse:
    """트래픽 수신 준비 확인 (Readiness probe, requires the database)."""
    if await _database_up(db):
        return JSONResponse(status_code=200, content={"status": "ok", "database": "up"})
    return JSONResponse(status_code=503, content={"status": "degraded", "database": "down"})
