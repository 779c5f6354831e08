"""리프레시 토큰 레포지토리 — RefreshTokenStore 의 SQLAlchemy 구현.

Refresh Token Repository — SQLAlchemy implementation of the
:class:`~app.services.ports.RefreshTokenStore` port.

Only SHA-256 digests of signed tokens are stored. Revocation is a
compare-and-swap on ``is_revoked`` so that two concurrent rotations of the
same refresh token can succeed at most once.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import Select, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.token import RefreshToken
from app.repositories.base import as_utc
from app.services.ports import RefreshTokenRecord, TokenStoreError


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    """ORM 행을 읽기 전용 레코드로 변환합니다 (ORM row to read-model)."""
    return RefreshTokenRecord(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        is_revoked=row.is_revoked,
        expires_at=as_utc(row.expires_at),
        created_at=as_utc(row.created_at),
    )


class SqlAlchemyRefreshTokenStore:
    """요청 세션에 바인딩된 리프레시 토큰 저장소.

    Refresh token store bound to one request ``AsyncSession``. Writes are
    flushed, not committed; the route commits after the use case succeeds.

    Args:
        db: 비동기 데이터베이스 세션 (Async database session)
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db: AsyncSession = db

    async def insert(
        self,
        *,
        record_id: UUID,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
    ) -> RefreshTokenRecord:
        """새 리프레시 토큰 레코드를 생성합니다.

        Create a new refresh token record.

        Args:
            record_id: 레코드 ID, 토큰의 tid (Record id, the token's ``tid``)
            user_id: 소유자 사용자 ID (Owner user UUID)
            token_hash: 토큰 SHA-256 해시 (Token SHA-256 digest)
            expires_at: 만료 일시 (Expiration timestamp)

        Returns:
            RefreshTokenRecord: 생성된 레코드 (Created record)

        Raises:
            TokenStoreError: token_hash 또는 id 충돌 (Hash or id collision)
        """
        row: RefreshToken = RefreshToken(
            id=record_id,
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
        )
        self._db.add(row)
        try:
            await self._db.flush()
        except IntegrityError as exc:
            raise TokenStoreError("Refresh token record collision") from exc
        await self._db.refresh(row)
        return _to_record(row)

    async def find_by_hash_and_id(
        self,
        token_hash: str,
        token_id: UUID,
    ) -> RefreshTokenRecord | None:
        """해시와 tid 로 레코드를 조회합니다.

        Fetch the record matching both the digest and the claimed id.
        """
        # revoke_by_id 는 bulk UPDATE — identity map rows must be reloaded
        query: Select = select(RefreshToken).where(
            RefreshToken.id == token_id,
            RefreshToken.token_hash == token_hash,
        ).execution_options(populate_existing=True)
        result = await self._db.execute(query)
        row: RefreshToken | None = result.scalar_one_or_none()
        return _to_record(row) if row is not None else None

    async def revoke_by_id(self, token_id: UUID) -> bool:
        """레코드를 폐기합니다 (compare-and-swap).

        Flip ``is_revoked`` false to true with a single conditional UPDATE.

        Returns:
            bool: 이 호출이 상태를 변경했으면 True (True if this call flipped it)
        """
        result = await self._db.execute(
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """사용자의 모든 미폐기 레코드를 폐기합니다.

        Revoke every outstanding record of a user.

        Returns:
            int: 폐기된 레코드 수 (Number of records flipped)
        """
        result = await self._db.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
