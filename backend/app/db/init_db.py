"""
데이터베이스 초기화 모듈
애플리케이션 시작 시 데이터베이스 테이블 생성 및 초기 데이터 설정을 담당합니다.
"""
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from backend.app.core.config import settings
from backend.app.db.base import Base
from backend.app.models import BotConfig
from src.infrastructure.adapters.persistence.postgres_persistence_adapter import TIMEZONE_CONFIG_KEY

logger = logging.getLogger(__name__)


async def create_tables(bind: AsyncEngine) -> None:
    """
    데이터베이스 테이블 생성
    모든 SQLAlchemy 모델을 기반으로 테이블을 생성합니다.
    """
    logger.info("📦 데이터베이스 테이블 생성 시작...")

    async with bind.begin() as conn:
        # 모든 테이블 생성 (존재하지 않는 경우에만)
        await conn.run_sync(Base.metadata.create_all)

    logger.info("✅ 데이터베이스 테이블 생성 완료")


async def init_default_config(session: AsyncSession, default_timezone: str) -> None:
    """
    기본 설정 초기화 (이미 존재하는 값은 유지)

    Args:
        session: 데이터베이스 세션
        default_timezone: 타임존 기본값
    """
    result = await session.execute(
        select(BotConfig).where(BotConfig.key == TIMEZONE_CONFIG_KEY)
    )
    if result.scalar_one_or_none() is None:
        session.add(BotConfig(
            key=TIMEZONE_CONFIG_KEY,
            value={"timezone": default_timezone},
            description="작업 시/분을 해석하는 타임존 (IANA)",
        ))
        logger.info(f"  ➕ 설정 추가: {TIMEZONE_CONFIG_KEY}={default_timezone}")
    else:
        logger.info(f"  ✓ 설정 존재: {TIMEZONE_CONFIG_KEY}")

    await session.commit()


async def init_db(
    bind: Optional[AsyncEngine] = None,
    session_factory: Optional[async_sessionmaker] = None,
) -> None:
    """
    데이터베이스 초기화 메인 함수

    1. 테이블 생성
    2. 기본 설정 데이터 추가
    """
    if bind is None or session_factory is None:
        from backend.app.db.session import AsyncSessionLocal, engine
        bind = bind or engine
        session_factory = session_factory or AsyncSessionLocal

    try:
        logger.info("🚀 데이터베이스 초기화 시작...")
        await create_tables(bind)

        async with session_factory() as session:
            await init_default_config(session, settings.SCHEDULER_TIMEZONE)

        logger.info("✅ 데이터베이스 초기화 완료!")
    except Exception as e:
        logger.error(f"❌ 데이터베이스 초기화 실패: {e}", exc_info=True)
        raise
