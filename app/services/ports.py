"""세션 서브시스템 포트 — 교체 가능한 능력(capability) 인터페이스.

Ports (hexagonal interfaces) consumed by the session subsystem.

These decouple :class:`~app.services.session_service.SessionManager` from
concrete persistence and hashing. Production adapters live under
``app.repositories`` and ``app.utils``; in-memory doubles live in the tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID


class TokenSubject(Protocol):
    """토큰 주체 — 액세스 토큰 클레임에 필요한 사용자 필드.

    Minimal user shape embedded in access-token claims.
    """

    id: UUID
    email: str
    name: str


@dataclass(frozen=True)
class RefreshTokenRecord:
    """
    Read-model for a persisted refresh token.

    :ivar id: Record id, embedded in the signed token as ``tid``.
    :ivar user_id: Owner user id.
    :ivar token_hash: SHA-256 digest of the signed token string.
    :ivar is_revoked: Whether the token was rotated away or revoked.
    :ivar expires_at: Absolute expiration (UTC).
    :ivar created_at: Issuance time (UTC).
    """

    id: UUID
    user_id: UUID
    token_hash: str
    is_revoked: bool
    expires_at: datetime
    created_at: datetime


class PasswordHasher(Protocol):
    """Port for hashing and verifying user passwords."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, hashed_password: str) -> bool: ...


class RefreshTokenStore(Protocol):
    """
    Persisted store of issued refresh tokens.

    ``revoke_by_id`` MUST be a compare-and-swap on ``is_revoked`` so that two
    concurrent rotations of the same token cannot both succeed.
    """

    async def insert(
        self,
        *,
        record_id: UUID,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
    ) -> RefreshTokenRecord:
        """Create a record. A ``token_hash`` collision raises ``TokenStoreError``."""

    async def find_by_hash_and_id(
        self,
        token_hash: str,
        token_id: UUID,
    ) -> RefreshTokenRecord | None:
        """Fetch the record matching both the digest and the claimed id."""

    async def revoke_by_id(self, token_id: UUID) -> bool:
        """Flip ``is_revoked`` to true. :returns: True if this call flipped it."""

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every record of a user. :returns: Number of records flipped."""


class UserLookup(Protocol):
    """Port for resolving the full user behind a token subject."""

    async def find_by_id(self, user_id: UUID) -> TokenSubject | None: ...


class TokenStoreError(Exception):
    """토큰 저장소 내부 오류 (예: token_hash 충돌).

    Internal store failure such as a ``token_hash`` collision. Indicates a
    bug, not an authentication failure; it propagates to the request.
    """
