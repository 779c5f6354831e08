"""v1 API 라우터 패키지 — 모든 엔드포인트 통합.

v1 API Router package — Aggregates all endpoints into a single router for
inclusion in the FastAPI application under ``/api/v1``.

Included routers:
    - auth: 인증 (Registration, login, refresh, logout, me)
    - tasks: 내 업무 (My tasks)
    - health: 헬스 체크 (Health, liveness, readiness)
"""

from fastapi import APIRouter

from app.api.v1.auth import router as auth_router
from app.api.v1.health import router as health_router
from app.api.v1.tasks import router as tasks_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(tasks_router, prefix="/tasks", tags=["Tasks"])
api_router.include_router(health_router, prefix="/health", tags=["Health"])
