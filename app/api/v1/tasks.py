"""업무 라우터 — 내 업무 CRUD, 상태 변경, 목록 조회.

Tasks Router — CRUD, status change, and cursor-paginated listing of the
authenticated user's tasks.
"""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Query, Response

from app.api.deps import CurrentClaims, DbSession
from app.schemas.task import (
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskStatus,
    TaskStatusUpdate,
    TaskUpdate,
)
from app.services.task_service import task_service

router: APIRouter = APIRouter()


@router.post("", response_model=TaskResponse, status_code=201)
async def create_task(
    data: TaskCreate,
    claims: CurrentClaims,
    db: DbSession,
) -> TaskResponse:
    """업무 생성 (Create a task)."""
    result: TaskResponse = await task_service.create_task(db, claims.subject, data)
    await db.commit()
    return result


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    claims: CurrentClaims,
    db: DbSession,
    status: Annotated[TaskStatus | None, Query(description="상태 필터 (Status filter)")] = None,
    search: Annotated[str | None, Query(max_length=200, description="제목/설명 검색 (Title/description search)")] = None,
    order: Annotated[Literal["asc", "desc"], Query(description="생성일 정렬 (Sort on created_at)")] = "desc",
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
    cursor: Annotated[str | None, Query(description="다음 페이지 커서 (Next page cursor)")] = None,
) -> TaskListResponse:
    """내 업무 목록 — 필터 및 커서 페이지네이션.

    List my tasks with filters and cursor pagination.
    """
    return await task_service.list_tasks(
        db,
        claims.subject,
        status=status,
        search=search,
        order=order,
        limit=limit,
        cursor=cursor,
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: UUID,
    claims: CurrentClaims,
    db: DbSession,
) -> TaskResponse:
    """업무 상세 조회 (Get a task)."""
    return await task_service.get_task(db, claims.subject, task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    data: TaskUpdate,
    claims: CurrentClaims,
    db: DbSession,
) -> TaskResponse:
    """업무 부분 수정 (Partially update a task)."""
    result: TaskResponse = await task_service.update_task(db, claims.subject, task_id, data)
    await db.commit()
    return result


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def change_task_status(
    task_id: UUID,
    data: TaskStatusUpdate,
    claims: CurrentClaims,
    db: DbSession,
) -> TaskResponse:
    """업무 상태 변경 — pending/done (Change task status)."""
    result: TaskResponse = await task_service.change_status(db, claims.subject, task_id, data)
    await db.commit()
    return result


@router.delete("/{task_id}", status_code=204)
async def delete_task(
    task_id: UUID,
    claims: CurrentClaims,
    db: DbSession,
) -> Response:
    """업무 삭제 (Delete a task)."""
    await task_service.delete_task(db, claims.subject, task_id)
    await db.commit()
    return Response(status_code=204)
