"""업무 레포지토리 — 사용자 업무 관련 DB 쿼리 담당.

Task Repository — Handles all task-related database queries.
Extends BaseRepository with owner-scoped filtering and keyset pagination.
"""

from typing import Sequence
from uuid import UUID

from sqlalchemy import Select, and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.task import Task
from app.repositories.base import BaseRepository
from app.utils.pagination import Cursor

_LIKE_ESCAPE = "\\"


def _escape_like(term: str) -> str:
    """LIKE 와일드카드를 이스케이프합니다 (Match % and _ literally)."""
    return (
        term.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )


class TaskRepository(BaseRepository[Task]):
    """업무 레포지토리.

    Task repository. Every query is scoped to the owning user.

    Extends:
        BaseRepository[Task]
    """

    def __init__(self) -> None:
        super().__init__(Task)

    async def get_by_owner(
        self,
        db: AsyncSession,
        user_id: UUID,
        filters: dict | None = None,
        order: str = "desc",
        limit: int = 20,
        cursor: Cursor | None = None,
    ) -> tuple[Sequence[Task], bool]:
        """사용자 업무를 필터링하여 커서 페이지네이션 조회합니다.

        Retrieve a keyset-paginated page of a user's tasks.
        Rows are ordered by ``(created_at, id)``; one extra row is fetched to
        decide whether a next page exists.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 소유자 UUID (Owner UUID)
            filters: 추가 필터 (status, search)
                     (Additional filters: status, search)
            order: 정렬 방향 asc/desc (Sort direction on created_at)
            limit: 페이지 크기 (Page size)
            cursor: 이전 페이지 마지막 행 (Sort key of the previous page's last row)

        Returns:
            tuple[Sequence[Task], bool]: (업무 목록, 다음 페이지 존재 여부)
                                         (Tasks, whether a next page exists)
        """
        query: Select = select(Task).where(Task.user_id == user_id)

        if filters:
            if filters.get("status"):
                query = query.where(Task.status == filters["status"])
            if filters.get("search"):
                # 제목 또는 설명 부분 일치 (대소문자 무시) — Case-insensitive substring
                pattern: str = f"%{_escape_like(filters['search'])}%"
                query = query.where(
                    or_(
                        Task.title.ilike(pattern, escape=_LIKE_ESCAPE),
                        Task.description.ilike(pattern, escape=_LIKE_ESCAPE),
                    )
                )

        if order == "asc":
            if cursor is not None:
                query = query.where(
                    or_(
                        Task.created_at > cursor.created_at,
                        and_(Task.created_at == cursor.created_at, Task.id > cursor.id),
                    )
                )
            query = query.order_by(Task.created_at.asc(), Task.id.asc())
        else:
            if cursor is not None:
                query = query.where(
                    or_(
                        Task.created_at < cursor.created_at,
                        and_(Task.created_at == cursor.created_at, Task.id < cursor.id),
                    )
                )
            query = query.order_by(Task.created_at.desc(), Task.id.desc())

        result = await db.execute(query.limit(limit + 1))
        rows: list[Task] = list(result.scalars().all())
        has_next: bool = len(rows) > limit
        return rows[:limit], has_next


# 싱글턴 인스턴스 — Singleton instance
task_repository: TaskRepository = TaskRepository()
