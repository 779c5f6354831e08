"""FastAPI 애플리케이션 엔트리포인트 — 로깅, 미들웨어, 예외 처리, 라우터 등록.

FastAPI application entry point — Logging, middleware, exception handling
and router registration.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1 import api_router
from app.config import settings
from app.middleware.axiom_logging import AxiomLoggingMiddleware
from app.services.ports import TokenStoreError
from app.utils.exceptions import AuthError

# 표준 로깅 설정 — stdlib logging for security events and diagnostics
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Cross-Origin Resource Sharing middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """세션 서브시스템 예외를 불투명한 401 로 변환합니다.

    Map any session-subsystem failure that reaches the app boundary to one
    opaque 401. The internal kind is logged, never returned.
    """
    logger.info("Unhandled auth failure on %s: %s", request.url.path, exc.kind.value)
    return JSONResponse(
        status_code=401,
        content={"detail": "Invalid or expired token"},
        headers={"WWW-Authenticate": "Bearer"},
    )


@app.exception_handler(TokenStoreError)
async def token_store_error_handler(request: Request, exc: TokenStoreError) -> JSONResponse:
    """토큰 저장소 내부 오류 — 500 (Internal refresh token store failure)."""
    logger.error("Refresh token store failure on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
app.include_router(api_router, prefix="/api/v1")
