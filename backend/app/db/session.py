"""
데이터베이스 세션 관리
비동기 SQLAlchemy 세션을 생성하고 관리합니다.
"""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)

from backend.app.core.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    """
    비동기 엔진 생성

    커넥션 풀 옵션은 PostgreSQL에만 적용합니다 (SQLite는 풀 크기 옵션 미지원).
    """
    options = {"echo": settings.LOG_LEVEL == "DEBUG", "pool_pre_ping": True}
    if database_url.startswith("postgresql"):
        options.update(pool_size=10, max_overflow=20)
    return create_async_engine(database_url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """비동기 세션 팩토리 생성"""
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# 전역 엔진 및 세션 팩토리 (엔진은 첫 연결 시점에 접속)
engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입용 DB 세션 생성기

    Yields:
        AsyncSession: 비동기 데이터베이스 세션
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
