"""커스텀 예외 클래스 모듈.

Custom exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns,
plus the domain-level :class:`AuthError` raised by the session subsystem.

Usage:
    from app.utils.exceptions import NotFoundError, DuplicateError
    raise NotFoundError("Task not found")
    raise DuplicateError("Email already registered")
"""

from enum import Enum

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a requested resource does not exist or belongs to another user.

    Args:
        detail: 오류 메시지 (Error message, default: "Resource not found")
    """

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when attempting to create a resource that violates a uniqueness constraint
    (e.g. registering an email that is already in use).

    Args:
        detail: 오류 메시지 (Error message, default: "Resource already exists")
    """

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired
    (e.g. missing JWT token, expired token, invalid credentials).

    Args:
        detail: 오류 메시지 (Error message, default: "Authentication required")
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches
    (e.g. a due date in the past, a malformed pagination cursor).

    Args:
        detail: 오류 메시지 (Error message, default: "Bad request")
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class AuthErrorKind(str, Enum):
    """인증 실패 유형 — 내부 구분 전용.

    Internal authentication failure kinds. Used for logging and tests only;
    callers outside the session subsystem see a single opaque 401.
    """

    TOKEN_INVALID = "token_invalid"  # 서명/구조 오류 (Bad signature or structure)
    TOKEN_EXPIRED = "token_expired"  # 서명된 exp 경과 (Signed exp claim passed)
    NOT_FOUND = "not_found"  # 저장소에 레코드 없음 (No matching store record)
    REVOKED = "revoked"  # 이미 폐기됨 (Record already revoked or rotated)
    EXPIRED = "expired"  # 저장소 레코드 만료 (Stored record expired)
    USER_NOT_FOUND = "user_not_found"  # 토큰 주체 사용자 없음 (Subject user gone)


class AuthError(Exception):
    """세션 서브시스템의 단일 인증 실패 예외.

    Umbrella failure of the session subsystem: invalid signature, expired
    token, unknown or revoked refresh token.

    Args:
        kind: 실패 유형 (Failure kind)
        message: 내부 메시지 (Internal message, never sent to clients)
    """

    def __init__(self, kind: AuthErrorKind, message: str | None = None) -> None:
        self.kind: AuthErrorKind = kind
        self.message: str = message or kind.value.replace("_", " ")
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"AuthError(kind={self.kind.value!r}, message={self.message!r})"
