"""리프레시 토큰 모델 — 발급된 리프레시 토큰의 해시 저장.

Refresh Token model — Stores hashes of issued refresh tokens.
The raw signed token is never persisted; only its SHA-256 digest.
Records are only ever mutated to flip ``is_revoked``; rotation revokes the
old record and logout revokes one or all of a user's records.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class RefreshToken(Base):
    """리프레시 토큰 테이블.

    Refresh token table for managing long-lived authentication sessions.

    Attributes:
        id: 고유 식별자, 토큰의 tid 클레임 (Primary key UUID, the token's ``tid`` claim)
        user_id: 소유 사용자 ID (Owner user UUID)
        token_hash: 서명된 토큰의 SHA-256 해시 (SHA-256 digest of the signed token)
        is_revoked: 폐기 여부 (Rotated away or revoked)
        expires_at: 만료 일시 (Expiration timestamp)
        created_at: 생성 일시 (Creation timestamp)
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    is_revoked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    user = relationship("User", back_populates="refresh_tokens")
