"""업무 관련 Pydantic 요청/응답 스키마 정의.

Task-related Pydantic request/response schema definitions.
Field rules: title 1-200 chars after trim, description up to 5000 chars
(blank becomes null), status pending/done, priority low/medium/high.
"""

from datetime import date, datetime
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator

from app.utils.pagination import PageInfo

TaskStatus = Literal["pending", "done"]
TaskPriority = Literal["low", "medium", "high"]


def _strip_title(value: object) -> object:
    return value.strip() if isinstance(value, str) else value


def _blank_to_none(value: object) -> object:
    # 공백 설명은 null 로 저장 — blank description is stored as null
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


# 제목: trim 후 1~200자 — Title, 1-200 chars after trim
Title = Annotated[str, BeforeValidator(_strip_title), Field(min_length=1, max_length=200)]
# 설명: 최대 5000자, 공백은 null — Description, blank becomes null
Description = Annotated[
    Annotated[str, Field(max_length=5000)] | None,
    BeforeValidator(_blank_to_none),
]


class TaskCreate(BaseModel):
    """업무 생성 요청 스키마.

    Task creation request schema.

    Attributes:
        title: 제목 (Title, required)
        description: 설명 (Description, optional)
        priority: 우선순위 (Priority, default medium)
        due_date: 마감일 (Due date, optional, not in the past)
    """

    title: Title
    description: Description = None
    priority: TaskPriority = "medium"
    due_date: date | None = None


class TaskUpdate(BaseModel):
    """업무 수정 요청 스키마 (부분 업데이트).

    Task partial update schema. At least one field must be provided.
    ``description`` and ``due_date`` may be set to null explicitly.
    """

    title: Title | None = None
    description: Description = None
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    due_date: date | None = None

    @model_validator(mode="after")
    def _require_one_field(self) -> "TaskUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        if "title" in self.model_fields_set and self.title is None:
            raise ValueError("title cannot be null")
        for field in ("status", "priority"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class TaskStatusUpdate(BaseModel):
    """업무 상태 변경 요청 스키마 (Task status change request)."""

    status: TaskStatus


class TaskResponse(BaseModel):
    """업무 응답 스키마 (Task response schema)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    title: str
    description: str | None
    status: TaskStatus
    priority: TaskPriority
    due_date: date | None
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """업무 목록 응답 스키마 — 커서 페이지네이션.

    Task list response with cursor page metadata.
    """

    items: list[TaskResponse]
    page_info: PageInfo
