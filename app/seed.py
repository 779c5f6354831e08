"""데모 데이터 시드 스크립트 — 데모 사용자와 샘플 업무 생성.

Seed script — Creates demo users with sample tasks.
Run this script to bootstrap a local database for manual testing.

Usage:
    python -m app.seed

Creates:
    - 2명 데모 사용자: jane.doe / john.roe @example.com, 비밀번호 Demo@123456
      (2 demo users sharing the password Demo@123456)
    - 사용자별 샘플 업무 (Sample tasks per user, mixed status and priority)
"""

import asyncio
from datetime import date, timedelta

from sqlalchemy import select

from app.config import settings
from app.database import Base, async_session, engine
from app.models import Task, User
from app.utils.password import BcryptPasswordHasher

DEMO_PASSWORD: str = "Demo@123456"

# (이름, 이메일) — (name, email)
DEMO_USERS: list[tuple[str, str]] = [
    ("Jane Doe", "jane.doe@example.com"),
    ("John Roe", "john.roe@example.com"),
]

# (제목, 설명, 상태, 우선순위, 마감일 오프셋) — (title, description, status, priority, due offset in days)
SAMPLE_TASKS: list[tuple[str, str | None, str, str, int | None]] = [
    ("Set up project repository", "Initialize the repo, CI and pre-commit hooks.", "done", "high", None),
    ("Write API documentation", "Document every endpoint with request and response examples.", "pending", "medium", 7),
    ("Review pull requests", None, "pending", "high", 1),
    ("Plan next sprint", "Collect backlog items and estimate them with the team.", "pending", "low", 30),
]


async def seed() -> None:
    """데이터베이스를 데모 데이터로 시드합니다.

    Seed the database with demo data.
    Creates tables if they don't exist, then inserts demo users and tasks.

    Idempotent: 이미 존재하는 사용자는 건너뜁니다 (Skips users that already exist).
    """
    # 테이블 생성 — DDL 실행 (Create all tables from ORM metadata)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    hasher: BcryptPasswordHasher = BcryptPasswordHasher(settings.BCRYPT_COST)
    password_hash: str = hasher.hash(DEMO_PASSWORD)
    today: date = date.today()

    async with async_session() as db:
        for name, email in DEMO_USERS:
            result = await db.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none() is not None:
                print(f"Already seeded: {email}. Skipping.")
                continue

            user: User = User(name=name, email=email, password_hash=password_hash)
            db.add(user)
            await db.flush()  # flush로 user.id 생성 (Flush to generate user.id)

            for title, description, status, priority, due_offset in SAMPLE_TASKS:
                db.add(
                    Task(
                        user_id=user.id,
                        title=title,
                        description=description,
                        status=status,
                        priority=priority,
                        due_date=today + timedelta(days=due_offset) if due_offset is not None else None,
                    )
                )
            print(f"Seeded: {email} / {DEMO_PASSWORD} with {len(SAMPLE_TASKS)} tasks")

        await db.commit()


if __name__ == "__main__":
    asyncio.run(seed())
