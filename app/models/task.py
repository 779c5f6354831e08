"""업무 SQLAlchemy ORM 모델 정의.

Task SQLAlchemy ORM model definition.
Each task is owned by exactly one user; every query is scoped by owner.

Tables:
    - tasks: 사용자 업무 (Per-user tasks with status, priority, due date)
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


class Task(Base):
    """업무 모델 — 사용자별 할 일.

    Task model — A to-do item owned by a user.

    Attributes:
        id: 고유 식별자 UUID (Unique identifier)
        user_id: 소유 사용자 FK (Owner user foreign key)
        title: 제목, 1~200자 (Title, 1-200 chars)
        description: 설명, 최대 5000자 (Description, up to 5000 chars, nullable)
        status: 상태 — pending / done (Status)
        priority: 우선순위 — low / medium / high (Priority)
        due_date: 마감일 (Due date, nullable)
        created_at: 생성 일시 UTC (Creation timestamp)
        updated_at: 수정 일시 UTC (Last update timestamp)
    """

    __tablename__ = "tasks"

    # 업무 고유 식별자 — Task unique identifier
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # 소유 사용자 FK — Owner (CASCADE: 사용자 삭제 시 업무도 삭제)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # 상태 — "pending" | "done"
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    # 우선순위 — "low" | "medium" | "high"
    priority: Mapped[str] = mapped_column(String(20), default="medium", nullable=False)
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'done')", name="ck_tasks_status"),
        CheckConstraint("priority IN ('low', 'medium', 'high')", name="ck_tasks_priority"),
        Index("ix_tasks_user_status", "user_id", "status"),
        Index("ix_tasks_user_created", "user_id", "created_at"),
    )

    # 관계 — Relationships
    user = relationship("User", back_populates="tasks")
