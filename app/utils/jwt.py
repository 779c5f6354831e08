"""JWT 토큰 생성 및 검증 유틸리티 모듈.

JWT token creation and verification utility module.
Provides the access- and refresh-token codecs. Both are pure functions over
their signing secret and the clock; neither touches storage.

JWT Payload Structure:
    Access token (short-lived, stateless):
    {
        "sub": "user_uuid",      # 사용자 ID (User identifier)
        "email": "a@b.com",      # 이메일 (Email)
        "name": "Jane",          # 이름 (Display name)
        "iat": 1234567000,       # 발급 시각 (Issued at)
        "exp": 1234567900,       # 만료 시각 (Expiration)
        "type": "access"
    }

    Refresh token (long-lived, server-tracked, no PII):
    {
        "sub": "user_uuid",      # 사용자 ID (User identifier)
        "tid": "record_uuid",    # 저장소 레코드 ID (Store record id)
        "iat": 1234567000,
        "exp": 1235171800,
        "type": "refresh"
    }
"""

import hashlib
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import jwt

from app.config import TokenConfig
from app.services.ports import TokenSubject
from app.utils.exceptions import AuthError, AuthErrorKind

Clock = Callable[[], datetime]

# 필수 클레임 — Claims every token must carry
_REQUIRED_CLAIMS: list[str] = ["sub", "iat", "exp", "type"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class AccessTokenClaims:
    """액세스 토큰 클레임 (epoch seconds).

    Decoded access-token claims. Never persisted.
    """

    subject: UUID
    email: str
    name: str
    issued_at: int
    expires_at: int


@dataclass(frozen=True)
class RefreshTokenClaims:
    """리프레시 토큰 클레임 (epoch seconds).

    Decoded refresh-token claims. Mirrors, but is distinct from, the store record.
    """

    subject: UUID
    token_id: UUID
    issued_at: int
    expires_at: int


def hash_token(token: str) -> str:
    """토큰 문자열의 SHA-256 해시를 반환합니다.

    Return the SHA-256 hex digest of a signed token string. Refresh tokens are
    high-entropy, so a fast deterministic digest is sufficient for storage.
    """
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class _JwtCodec:
    """공통 JWT 서명/검증 로직.

    Shared sign/verify machinery for one secret, lifetime, and token type.
    """

    token_type: str = ""

    def __init__(
        self,
        secret: str,
        ttl: timedelta,
        algorithm: str,
        clock: Clock | None = None,
    ) -> None:
        self._secret: str = secret
        self._algorithm: str = algorithm
        self._clock: Clock = clock or _utcnow
        self.ttl: timedelta = ttl

    def now(self) -> datetime:
        """코덱 시계의 현재 시각 (Current time on the codec's clock)."""
        return self._clock()

    def _encode(self, claims: dict[str, Any]) -> tuple[str, int, int]:
        issued_at: int = int(self.now().timestamp())
        expires_at: int = issued_at + int(self.ttl.total_seconds())
        payload: dict[str, Any] = {
            **claims,
            "iat": issued_at,
            "exp": expires_at,
            "type": self.token_type,
        }
        token: str = jwt.encode(payload, self._secret, algorithm=self._algorithm)
        return token, issued_at, expires_at

    def _decode(self, token: str, *, verify_exp: bool = True) -> dict[str, Any]:
        """서명·구조·만료를 검증하고 페이로드를 반환합니다.

        Raises:
            AuthError(TOKEN_EXPIRED): 서명은 유효하나 exp 경과 (Only expiry failed)
            AuthError(TOKEN_INVALID): 그 외 모든 실패 (Any other failure)
        """
        # 시각 클레임은 주입된 시계로 직접 검사 — time claims are checked against the injected clock
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": _REQUIRED_CLAIMS, "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as exc:
            raise AuthError(AuthErrorKind.TOKEN_INVALID, f"Invalid {self.token_type} token") from exc

        if payload.get("type") != self.token_type:
            raise AuthError(AuthErrorKind.TOKEN_INVALID, "Unexpected token type")

        try:
            expires_at: int = int(payload["exp"])
        except (TypeError, ValueError) as exc:
            raise AuthError(AuthErrorKind.TOKEN_INVALID, "Malformed exp claim") from exc

        # 만료 검사는 서명 검증 이후에 별도로 수행 — expiry checked after signature
        if verify_exp and expires_at <= int(self.now().timestamp()):
            raise AuthError(AuthErrorKind.TOKEN_EXPIRED, f"{self.token_type.capitalize()} token expired")
        return payload


class AccessTokenCodec(_JwtCodec):
    """액세스 토큰 코덱 — 짧은 수명, 상태 없음.

    Signs and verifies short-lived, stateless bearer tokens carrying the
    user's identity claims.
    """

    token_type = "access"

    def __init__(self, config: TokenConfig, clock: Clock | None = None) -> None:
        super().__init__(config.access_secret, config.access_ttl, config.algorithm, clock)

    def sign(self, user: TokenSubject) -> str:
        """JWT 액세스 토큰을 생성합니다.

        Generate a JWT access token for the given user.

        Args:
            user: 토큰 주체 (User with id, email, name)

        Returns:
            str: 인코딩된 JWT 문자열 (Encoded JWT token string)
        """
        token, _, _ = self._encode(
            {"sub": str(user.id), "email": user.email, "name": user.name}
        )
        return token

    def verify(self, token: str) -> AccessTokenClaims:
        """JWT 액세스 토큰을 검증하고 클레임을 반환합니다.

        Verify signature and expiry of an access token.

        Raises:
            AuthError: TOKEN_EXPIRED 또는 TOKEN_INVALID
        """
        payload: dict[str, Any] = self._decode(token)
        try:
            return AccessTokenClaims(
                subject=UUID(payload["sub"]),
                email=str(payload["email"]),
                name=str(payload["name"]),
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthError(AuthErrorKind.TOKEN_INVALID, "Malformed access token claims") from exc


class RefreshTokenCodec(_JwtCodec):
    """리프레시 토큰 코덱 — 긴 수명, 최소 클레임.

    Signs and verifies long-lived tokens carrying only a user id and a store
    record id. Uses its own secret, distinct from the access secret.
    """

    token_type = "refresh"

    def __init__(self, config: TokenConfig, clock: Clock | None = None) -> None:
        super().__init__(config.refresh_secret, config.refresh_ttl, config.algorithm, clock)

    def sign(self, user_id: UUID, token_id: UUID) -> tuple[str, RefreshTokenClaims]:
        """JWT 리프레시 토큰을 생성합니다.

        Generate a JWT refresh token bound to a store record id.

        Args:
            user_id: 사용자 ID (User UUID)
            token_id: 저장소 레코드 ID (Store record UUID)

        Returns:
            tuple[str, RefreshTokenClaims]: (토큰, 클레임) (Token and its claims)
        """
        token, issued_at, expires_at = self._encode(
            {"sub": str(user_id), "tid": str(token_id)}
        )
        claims = RefreshTokenClaims(
            subject=user_id,
            token_id=token_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )
        return token, claims

    def verify(self, token: str, *, verify_exp: bool = True) -> RefreshTokenClaims:
        """JWT 리프레시 토큰을 검증하고 클레임을 반환합니다.

        Verify a refresh token. With ``verify_exp=False`` only signature and
        structure are checked (used by revocation).

        Raises:
            AuthError: TOKEN_EXPIRED 또는 TOKEN_INVALID
        """
        payload: dict[str, Any] = self._decode(token, verify_exp=verify_exp)
        try:
            return RefreshTokenClaims(
                subject=UUID(payload["sub"]),
                token_id=UUID(payload["tid"]),
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise AuthError(AuthErrorKind.TOKEN_INVALID, "Malformed refresh token claims") from exc
