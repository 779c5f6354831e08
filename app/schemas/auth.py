"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers login, registration, token issuance/refresh, logout, and current user info.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, field_validator

# bcrypt 입력 한도 — bcrypt reads at most 72 bytes of input
BCRYPT_MAX_BYTES = 72


def _strip(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _normalize_email(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


# 정규화된 이메일 타입 — Email trimmed and lowercased before format validation
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


class LoginRequest(BaseModel):
    """로그인 요청 스키마.

    Login request schema.

    Attributes:
        email: 이메일 (Email, trimmed and lowercased)
        password: 비밀번호 (Plain text password, verified against bcrypt hash)
    """

    email: NormalizedEmail  # 이메일 — 로그인 아이디 (Login identifier)
    password: str = Field(..., min_length=1)  # 비밀번호 — 평문, 서버에서 bcrypt 해시와 비교 (Plain text, compared to bcrypt hash)


class RegisterRequest(BaseModel):
    """회원가입 요청 스키마.

    Self-registration request schema.

    Attributes:
        name: 표시 이름, 2~100자 (Display name, 2-100 chars)
        email: 이메일 (Email, trimmed and lowercased, globally unique)
        password: 비밀번호, 8~72자 및 72바이트 이하 (Plain text, 8-72 chars and at most 72 UTF-8 bytes)
    """

    name: Annotated[str, BeforeValidator(_strip)] = Field(..., min_length=2, max_length=100)
    email: NormalizedEmail
    password: str = Field(..., min_length=8, max_length=72)

    @field_validator("password")
    @classmethod
    def _check_password_bytes(cls, value: str) -> str:
        # 문자 수가 아니라 UTF-8 바이트 수로 제한 — limit is on encoded bytes, not characters
        if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
            raise ValueError(f"must be at most {BCRYPT_MAX_BYTES} bytes when UTF-8 encoded")
        return value


class TokenResponse(BaseModel):
    """JWT 토큰 발급 응답 스키마.

    JWT token issuance response schema.
    Returned after successful login, registration or token refresh.

    Attributes:
        access_token: JWT 액세스 토큰 (Short-lived access token)
        refresh_token: JWT 리프레시 토큰 (Long-lived, single-use refresh token)
        token_type: 토큰 유형 (Always "bearer" for Authorization header)
    """

    access_token: str  # JWT 액세스 토큰 — 만료: 15분 기본 (Access token, default TTL: 15min)
    refresh_token: str  # JWT 리프레시 토큰 — 만료: 7일 기본 (Refresh token, default TTL: 7 days)
    token_type: str = "bearer"  # 토큰 유형 — 항상 "bearer" (Token type for Authorization header)


class RefreshRequest(BaseModel):
    """토큰 갱신 요청 스키마.

    Token refresh request schema.
    Exchanges a valid refresh token for a new access/refresh token pair.
    """

    refresh_token: str = Field(..., min_length=1)  # 기존 리프레시 토큰 (Current refresh token)


class LogoutRequest(BaseModel):
    """로그아웃 요청 스키마.

    Logout request schema. With ``revoke_all`` every refresh token of the
    token's owner is revoked (log out of all devices).
    """

    refresh_token: str = Field(..., min_length=1)
    revoke_all: bool = False  # 모든 기기에서 로그아웃 (Log out everywhere)


class UserResponse(BaseModel):
    """사용자 정보 응답 스키마.

    Public user profile. Never includes the password hash.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    created_at: datetime


class AuthResponse(BaseModel):
    """회원가입/로그인 응답 스키마 (Registration and login response: user plus tokens)."""

    user: UserResponse
    tokens: TokenResponse
