"""인증 라우터 — 회원가입, 로그인, 토큰 갱신, 로그아웃, 내 정보.

Auth Router — Registration, login, token refresh, logout, and profile endpoints.
"""

from fastapi import APIRouter, Response

from app.api.deps import CurrentClaims, DbSession, Sessions
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from app.services.auth_service import auth_service

router: APIRouter = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    data: RegisterRequest,
    db: DbSession,
    sessions: Sessions,
) -> AuthResponse:
    """회원가입 — 사용자 생성 후 토큰 쌍 발급.

    Register a new account and return the user with a first token pair.
    """
    result: AuthResponse = await auth_service.register(db, sessions, data)
    await db.commit()
    return result


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    db: DbSession,
    sessions: Sessions,
) -> AuthResponse:
    """로그인 — 이메일/비밀번호 인증 후 토큰 쌍 발급.

    Login endpoint. Authenticates by email and password.
    """
    result: AuthResponse = await auth_service.login(db, sessions, data)
    await db.commit()
    return result


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(
    data: RefreshRequest,
    db: DbSession,
    sessions: Sessions,
) -> TokenResponse:
    """토큰 갱신 — 리프레시 토큰으로 새 토큰 쌍 발급.

    Refresh token endpoint. The submitted refresh token becomes unusable.
    """
    result: TokenResponse = await auth_service.refresh(sessions, data)
    await db.commit()
    return result


@router.post("/logout", status_code=204)
async def logout(
    data: LogoutRequest,
    db: DbSession,
    sessions: Sessions,
) -> Response:
    """로그아웃 — 리프레시 토큰 폐기, 항상 204.

    Logout endpoint. Always succeeds, even for unknown or garbage tokens or
    when the token store is unavailable; the service commits.
    """
    await auth_service.logout(db, sessions, data)
    return Response(status_code=204)


@router.get("/me", response_model=UserResponse)
async def get_me(
    claims: CurrentClaims,
    db: DbSession,
) -> UserResponse:
    """내 정보 조회 — 현재 로그인한 사용자 프로필.

    Get the current authenticated user's profile.
    """
    return await auth_service.get_me(db, claims.subject)
