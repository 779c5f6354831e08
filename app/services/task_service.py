"""업무 서비스 — 사용자 업무 비즈니스 로직.

Task Service — Business logic for per-user task management.
Every operation is scoped to the authenticated user; a task owned by someone
else is indistinguishable from a missing one.
"""

from datetime import date, datetime, timezone
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.task import Task
from app.repositories.base import as_utc
from app.repositories.task_repository import task_repository
from app.schemas.task import (
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskStatusUpdate,
    TaskUpdate,
)
from app.utils.exceptions import BadRequestError, NotFoundError
from app.utils.pagination import Cursor, PageInfo, decode_cursor, encode_cursor


def _validate_due_date(due_date: date | None) -> None:
    """마감일이 과거가 아닌지 검증합니다 (Reject due dates before today, UTC)."""
    if due_date is not None and due_date < datetime.now(timezone.utc).date():
        raise BadRequestError("Due date cannot be in the past")


class TaskService:
    """업무 서비스.

    Task service providing owner-scoped CRUD, status changes, and listing.
    """

    async def _get_owned(
        self,
        db: AsyncSession,
        user_id: UUID,
        task_id: UUID,
    ) -> Task:
        task: Task | None = await task_repository.get_by_id(db, task_id, user_id)
        if task is None:
            raise NotFoundError("Task not found")
        return task

    async def create_task(
        self,
        db: AsyncSession,
        user_id: UUID,
        data: TaskCreate,
    ) -> TaskResponse:
        """업무를 생성합니다.

        Create a task owned by the user. New tasks start as ``pending``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 소유자 UUID (Owner UUID)
            data: 업무 생성 데이터 (Task creation data)

        Returns:
            TaskResponse: 생성된 업무 (Created task)

        Raises:
            BadRequestError: 마감일이 과거일 때 (Due date in the past)
        """
        _validate_due_date(data.due_date)
        task: Task = await task_repository.create(
            db,
            {
                "user_id": user_id,
                "title": data.title,
                "description": data.description,
                "priority": data.priority,
                "due_date": data.due_date,
                "status": "pending",
            },
        )
        return TaskResponse.model_validate(task)

    async def get_task(
        self,
        db: AsyncSession,
        user_id: UUID,
        task_id: UUID,
    ) -> TaskResponse:
        """업무 상세를 조회합니다 (Get one owned task).

        Raises:
            NotFoundError: 업무가 없거나 다른 사용자 소유 (Missing or not owned)
        """
        return TaskResponse.model_validate(await self._get_owned(db, user_id, task_id))

    async def update_task(
        self,
        db: AsyncSession,
        user_id: UUID,
        task_id: UUID,
        data: TaskUpdate,
    ) -> TaskResponse:
        """업무를 부분 수정합니다.

        Partially update an owned task. Only fields present in the request change.

        Raises:
            NotFoundError: 업무가 없거나 다른 사용자 소유 (Missing or not owned)
            BadRequestError: 마감일이 과거일 때 (Due date in the past)
        """
        update_data: dict[str, Any] = data.model_dump(exclude_unset=True)
        if "due_date" in update_data:
            _validate_due_date(update_data["due_date"])

        task: Task | None = await task_repository.update(db, task_id, update_data, user_id)
        if task is None:
            raise NotFoundError("Task not found")
        return TaskResponse.model_validate(task)

    async def change_status(
        self,
        db: AsyncSession,
        user_id: UUID,
        task_id: UUID,
        data: TaskStatusUpdate,
    ) -> TaskResponse:
        """업무 상태를 변경합니다 (Set a task's status to pending or done)."""
        task: Task | None = await task_repository.update(
            db, task_id, {"status": data.status}, user_id
        )
        if task is None:
            raise NotFoundError("Task not found")
        return TaskResponse.model_validate(task)

    async def delete_task(
        self,
        db: AsyncSession,
        user_id: UUID,
        task_id: UUID,
    ) -> None:
        """업무를 삭제합니다.

        Delete an owned task.

        Raises:
            NotFoundError: 업무가 없거나 다른 사용자 소유 (Missing or not owned)
        """
        deleted: bool = await task_repository.delete(db, task_id, user_id)
        if not deleted:
            raise NotFoundError("Task not found")

    async def list_tasks(
        self,
        db: AsyncSession,
        user_id: UUID,
        status: str | None = None,
        search: str | None = None,
        order: str = "desc",
        limit: int = 20,
        cursor: str | None = None,
    ) -> TaskListResponse:
        """사용자 업무 목록을 커서 페이지네이션으로 조회합니다.

        List the user's tasks, newest first by default, one keyset page at a time.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            user_id: 소유자 UUID (Owner UUID)
            status: 상태 필터 (Status filter)
            search: 제목/설명 검색어 (Case-insensitive title/description search)
            order: 정렬 방향 asc/desc (Sort direction)
            limit: 페이지 크기 1~100 (Page size)
            cursor: 이전 응답의 next_cursor (``next_cursor`` from the previous page)

        Returns:
            TaskListResponse: 업무 목록과 페이지 정보 (Tasks and page info)

        Raises:
            BadRequestError: 커서 형식 오류 (Malformed cursor)
        """
        decoded: Cursor | None = decode_cursor(cursor) if cursor else None
        filters: dict[str, str | None] = {
            "status": status,
            "search": search.strip() if search else None,
        }
        rows: Sequence[Task]
        rows, has_next = await task_repository.get_by_owner(
            db, user_id, filters, order=order, limit=limit, cursor=decoded
        )

        next_cursor: str | None = None
        if has_next and rows:
            last: Task = rows[-1]
            next_cursor = encode_cursor(as_utc(last.created_at), last.id)

        return TaskListResponse(
            items=[TaskResponse.model_validate(row) for row in rows],
            page_info=PageInfo(has_next_page=has_next, next_cursor=next_cursor),
        )


# 싱글턴 인스턴스 — Singleton instance
task_service: TaskService = TaskService()
