"""FastAPI 의존성 주입 모듈 — 세션 관리자 조립 및 인증.

FastAPI dependency injection module — Session manager wiring and authentication.

The token codecs are built once at import time from the immutable
``TokenConfig``; the refresh token store and user lookup are bound to the
request's database session, so a ``SessionManager`` is assembled per request.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. HTTPBearer가 토큰을 추출 (HTTPBearer extracts the token)
    3. SessionManager.verify_access_token()이 서명과 만료를 검증
       (Session manager verifies signature and expiry)
    4. 클레임을 라우트에 전달, 실패 시 401 (Claims handed to the route; 401 on failure)
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import TokenConfig, settings
from app.database import get_db
from app.repositories.refresh_token_repository import SqlAlchemyRefreshTokenStore
from app.repositories.user_repository import SqlAlchemyUserLookup
from app.services.session_service import SessionManager
from app.utils.exceptions import AuthError, UnauthorizedError
from app.utils.jwt import AccessTokenClaims, AccessTokenCodec, RefreshTokenCodec

# 프로세스 전역 코덱 — Process-wide codecs, built once from immutable config
_token_config: TokenConfig = settings.token_config
access_codec: AccessTokenCodec = AccessTokenCodec(_token_config)
refresh_codec: RefreshTokenCodec = RefreshTokenCodec(_token_config)

# HTTP Bearer 토큰 추출기 — 헤더 누락 시 직접 401 반환
# (Extracts the token from Authorization: Bearer <token>; missing header handled below)
security: HTTPBearer = HTTPBearer(auto_error=False)


async def get_session_manager(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> SessionManager:
    """요청 범위 SessionManager 를 조립합니다.

    Assemble a request-scoped session manager bound to the request's DB session.

    Args:
        db: 비동기 DB 세션 (Async database session)

    Returns:
        SessionManager: 세션 관리자 (Session manager)
    """
    return SessionManager(
        access_codec=access_codec,
        refresh_codec=refresh_codec,
        store=SqlAlchemyRefreshTokenStore(db),
        users=SqlAlchemyUserLookup(db),
    )


async def get_current_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    sessions: Annotated[SessionManager, Depends(get_session_manager)],
) -> AccessTokenClaims:
    """Bearer 액세스 토큰을 검증하고 클레임을 반환합니다.

    Verify the bearer access token and return its claims. The access token is
    stateless, so no database round-trip is made.

    Args:
        credentials: HTTP Bearer 토큰 자격 증명 (Bearer token credentials from header)
        sessions: 세션 관리자 (Session manager)

    Returns:
        AccessTokenClaims: 인증된 사용자 클레임 (Authenticated user's claims)

    Raises:
        UnauthorizedError: 토큰 누락, 위조, 만료 (Missing, invalid or expired token)
    """
    if credentials is None:
        raise UnauthorizedError("Authentication required")
    try:
        return sessions.verify_access_token(credentials.credentials)
    except AuthError as exc:
        raise UnauthorizedError("Invalid or expired token") from exc


# 편의 타입 별칭 — Convenience annotated aliases for route signatures
CurrentClaims = Annotated[AccessTokenClaims, Depends(get_current_claims)]
Sessions = Annotated[SessionManager, Depends(get_session_manager)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
