"""기본 CRUD 레포지토리 — 모든 레포지토리의 부모 클래스.

Base CRUD Repository — Parent class for the user and task repositories.
Records that carry a ``user_id`` column can be scoped to their owner, in
which case a row belonging to someone else behaves exactly like a missing one.

Usage:
    class TaskRepository(BaseRepository[Task]):
        def __init__(self) -> None:
            super().__init__(Task)
"""

from datetime import datetime, timezone
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base

ModelType = TypeVar("ModelType", bound=Base)


def as_utc(value: datetime) -> datetime:
    """naive datetime을 UTC aware로 정규화합니다.

    SQLite drops tzinfo on round-trip; PostgreSQL returns aware values.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class BaseRepository(Generic[ModelType]):
    """제네릭 CRUD 레포지토리 (소유자 범위 지원).

    Generic CRUD over one model. Every method that looks a record up accepts
    an optional ``user_id``; when given, the lookup only matches rows owned
    by that user.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model

    def _select_one(self, record_id: UUID, user_id: UUID | None) -> Select:
        query: Select = select(self.model).where(self.model.id == record_id)
        if user_id is not None:
            # 소유자 컬럼이 없는 모델에 범위를 지정하면 버그
            query = query.where(self.model.user_id == user_id)
        return query

    async def get_by_id(
        self,
        db: AsyncSession,
        record_id: UUID,
        user_id: UUID | None = None,
    ) -> ModelType | None:
        """ID로 단일 레코드를 조회합니다.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 레코드 UUID (Record UUID)
            user_id: 소유자 UUID, None이면 범위 미적용 (Owner UUID; None disables scoping)

        Returns:
            ModelType | None: 레코드 또는 None (The record, or None if missing or not owned)
        """
        result = await db.execute(self._select_one(record_id, user_id))
        return result.scalar_one_or_none()

    async def create(self, db: AsyncSession, obj_data: dict[str, Any]) -> ModelType:
        """새 레코드를 추가하고 flush 합니다 (Insert, flush and refresh; the caller commits)."""
        db_obj: ModelType = self.model(**obj_data)
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        record_id: UUID,
        update_data: dict[str, Any],
        user_id: UUID | None = None,
    ) -> ModelType | None:
        """레코드의 일부 필드를 변경합니다.

        Apply ``update_data`` to one record. Values may be None, which clears
        nullable columns; keys the model does not define are ignored.

        Returns:
            ModelType | None: 변경된 레코드 또는 None (Updated record, None if missing or not owned)
        """
        db_obj: ModelType | None = await self.get_by_id(db, record_id, user_id)
        if db_obj is None:
            return None

        for field, value in update_data.items():
            if field in self.model.__table__.columns:
                setattr(db_obj, field, value)

        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def delete(
        self,
        db: AsyncSession,
        record_id: UUID,
        user_id: UUID | None = None,
    ) -> bool:
        """레코드를 삭제합니다. 대상이 없으면 False (False when nothing matched)."""
        db_obj: ModelType | None = await self.get_by_id(db, record_id, user_id)
        if db_obj is None:
            return False

        await db.delete(db_obj)
        await db.flush()
        return True
