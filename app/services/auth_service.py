"""인증 서비스 — 회원가입, 로그인, 토큰 갱신, 로그아웃 비즈니스 로직.

Auth Service — Business logic for registration, login, token refresh and logout.
Token lifecycle is delegated to :class:`~app.services.session_service.SessionManager`;
this layer maps its internal failures to opaque HTTP errors.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.models.user import User
from app.repositories.user_repository import user_repository
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from app.services.ports import PasswordHasher
from app.services.session_service import SessionManager, TokenPair
from app.utils.exceptions import AuthError, DuplicateError, NotFoundError, UnauthorizedError
from app.utils.password import BcryptPasswordHasher, verify_credentials

logger = logging.getLogger(__name__)


def _token_response(pair: TokenPair) -> TokenResponse:
    return TokenResponse(access_token=pair.access_token, refresh_token=pair.refresh_token)


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.

    Args:
        hasher: 비밀번호 해셔 (Password hasher capability)
    """

    def __init__(self, hasher: PasswordHasher) -> None:
        self.hasher: PasswordHasher = hasher

    async def register(
        self,
        db: AsyncSession,
        sessions: SessionManager,
        data: RegisterRequest,
    ) -> AuthResponse:
        """회원가입을 처리하고 첫 토큰 쌍을 발급합니다.

        Register a new user and issue the first token pair.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            sessions: 요청 범위 세션 관리자 (Request-scoped session manager)
            data: 회원가입 요청 데이터 (Registration request data)

        Returns:
            AuthResponse: 사용자 정보와 토큰 (User profile and tokens)

        Raises:
            DuplicateError: 이메일이 이미 등록됨 (Email already registered)
        """
        # 이메일 중복 확인 — Check email uniqueness
        existing: User | None = await user_repository.get_by_email(db, data.email)
        if existing is not None:
            raise DuplicateError("Email already registered")

        try:
            user: User = await user_repository.create(
                db,
                {
                    "name": data.name,
                    "email": data.email,
                    "password_hash": self.hasher.hash(data.password),
                },
            )
        except IntegrityError as exc:
            # 동시 가입 경쟁 — concurrent registration with the same email
            raise DuplicateError("Email already registered") from exc

        pair: TokenPair = await sessions.issue(user)
        return AuthResponse(user=UserResponse.model_validate(user), tokens=_token_response(pair))

    async def login(
        self,
        db: AsyncSession,
        sessions: SessionManager,
        data: LoginRequest,
    ) -> AuthResponse:
        """이메일/비밀번호 로그인을 처리합니다.

        Authenticate by email and password. Unknown email and wrong password
        produce the same error.

        Raises:
            UnauthorizedError: 잘못된 인증 정보 (Invalid credentials)
        """
        user: User | None = await user_repository.get_by_email(db, data.email)
        if user is None or not verify_credentials(self.hasher, data.password, user.password_hash):
            raise UnauthorizedError("Invalid credentials")

        pair: TokenPair = await sessions.issue(user)
        return AuthResponse(user=UserResponse.model_validate(user), tokens=_token_response(pair))

    async def refresh(
        self,
        sessions: SessionManager,
        data: RefreshRequest,
    ) -> TokenResponse:
        """리프레시 토큰으로 새 토큰 쌍을 발급합니다.

        Rotate a refresh token. The failure cause is never disclosed.

        Raises:
            UnauthorizedError: 유효하지 않거나 만료된 리프레시 토큰일 때
                               (Invalid or expired refresh token)
        """
        try:
            pair: TokenPair = await sessions.rotate(data.refresh_token)
        except AuthError as exc:
            raise UnauthorizedError("Invalid or expired token") from exc
        return _token_response(pair)

    async def logout(
        self,
        db: AsyncSession,
        sessions: SessionManager,
        data: LogoutRequest,
    ) -> None:
        """로그아웃 처리 — 결과와 무관하게 항상 성공.

        Revoke the refresh token (or all of the owner's tokens). The revocation
        outcome is discarded so logout always appears to succeed. The session
        is committed here rather than in the route: a store failure rolls the
        transaction back instead of surfacing as a 500.
        """
        outcome: Exception | None = await sessions.revoke(
            data.refresh_token, revoke_all=data.revoke_all
        )
        if outcome is not None and not isinstance(outcome, AuthError):
            await db.rollback()
            return
        try:
            await db.commit()
        except SQLAlchemyError:
            logger.exception("Commit failed after refresh token revocation")
            await db.rollback()

    async def get_me(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> UserResponse:
        """현재 로그인한 사용자 프로필을 반환합니다.

        Return the profile of the currently authenticated user.

        Raises:
            NotFoundError: 사용자가 삭제됨 (User no longer exists)
        """
        user: User | None = await user_repository.get_by_id(db, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserResponse.model_validate(user)


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService(BcryptPasswordHasher(settings.BCRYPT_COST))
