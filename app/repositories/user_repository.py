"""사용자 레포지토리 — 사용자 CRUD 및 이메일 조회.

User Repository — CRUD and email lookup for users.
Also provides the session-bound :class:`SqlAlchemyUserLookup` adapter the
session manager uses to hydrate token subjects during rotation.
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """사용자 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the users table.
    """

    def __init__(self) -> None:
        super().__init__(User)

    async def get_by_email(
        self,
        db: AsyncSession,
        email: str,
    ) -> User | None:
        """정규화된 이메일로 사용자를 조회합니다.

        Retrieve a user by normalized (trimmed, lowercased) email.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            email: 정규화된 이메일 (Normalized email)

        Returns:
            User | None: 조회된 사용자 또는 None (Found user or None)
        """
        query: Select = select(User).where(User.email == email)
        result = await db.execute(query)
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()


class SqlAlchemyUserLookup:
    """UserLookup 구현체 — 요청 세션에 바인딩.

    :class:`~app.services.ports.UserLookup` adapter bound to one request session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self._db: AsyncSession = db

    async def find_by_id(self, user_id: UUID) -> User | None:
        return await user_repository.get_by_id(self._db, user_id)
