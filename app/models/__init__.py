"""SQLAlchemy ORM 모델 패키지 — 모든 도메인 모델의 중앙 임포트 지점.

SQLAlchemy ORM models package — Central import point for all domain models.
Importing from this package ensures all models are registered with the
SQLAlchemy metadata, which is required for Alembic migrations and
relationship resolution.

Modules:
    user: 사용자 (Users)
    task: 업무 (Tasks)
    token: 리프레시 토큰 (Refresh tokens)
"""

from app.models.user import User
from app.models.task import Task
from app.models.token import RefreshToken

__all__ = [
    "User",
    "Task",
    "RefreshToken",
]
