"""데이터베이스 엔진 및 세션 설정 모듈.

Async engine, session factory and declarative base.
PostgreSQL via asyncpg in deployment; tests swap in aiosqlite by overriding
``get_db``.
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase

from app.config import settings


def _engine_options(database_url: str) -> dict[str, Any]:
    """드라이버별 엔진 옵션 — Engine options per driver.

    Pool sizing and the asyncpg statement cache switch only apply to
    PostgreSQL; SQLite (local runs, tests) takes neither.
    """
    options: dict[str, Any] = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if make_url(database_url).get_backend_name() == "postgresql":
        options.update(
            pool_size=5,
            max_overflow=10,
            # Supavisor(트랜잭션 모드 풀러)에서 prepared statement 비활성화
            # Disable prepared statement caches for transaction-mode poolers
            connect_args={"statement_cache_size": 0},
        )
    return options


# 프로세스 단위 엔진 — One engine per process
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    **_engine_options(settings.DATABASE_URL),
)

# 요청 단위 세션 팩토리 — Per-request session factory
# expire_on_commit=False: 커밋 후 응답 직렬화 시 lazy load 방지
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """SQLAlchemy 선언적 베이스 클래스.

    Declarative base; ``app.models`` registers users, tasks and refresh tokens.
    """

    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """비동기 데이터베이스 세션을 생성하고 요청 종료 시 닫습니다.

    One session per request. Routes commit explicitly after a successful
    use case; anything left uncommitted is rolled back when the session
    closes.

    Yields:
        AsyncSession: SQLAlchemy 비동기 세션 인스턴스 (Async session instance)
    """
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()
