"""
SQL adapters for execution records and schedule settings.

Execution records go to the execution_records table; the timezone setting
is stored in bot_config under the "timezone" key.
"""
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select

from src.application.ports.outbound.execution_record_port import ExecutionRecordPort
from src.application.ports.outbound.schedule_settings_port import ScheduleSettingsPort
from src.domain.entities.execution import ExecutionOutcome, ExecutionRecord
from backend.app.models.bot_config import BotConfig
from backend.app.models.execution_record import ExecutionRecordModel

logger = logging.getLogger(__name__)

TIMEZONE_CONFIG_KEY = "timezone"


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PostgresExecutionRecordAdapter(ExecutionRecordPort):
    """
    SQL execution record log.
    """

    def __init__(self, session_factory):
        """
        Initialize the adapter.

        Args:
            session_factory: Async session factory (e.g., async_sessionmaker)
        """
        self._session_factory = session_factory

    async def append(self, record: ExecutionRecord) -> ExecutionRecord:
        model = ExecutionRecordModel(
            job_name=record.job_name,
            fired_at=_as_utc(record.fired_at),
            outcome=record.outcome.value,
            reason=record.reason,
            action=record.action,
            ticker=record.ticker,
            quantity=record.quantity,
            order_id=record.order_id,
            client_order_id=record.client_order_id,
            attempts=record.attempts,
            created_at=_as_utc(record.created_at),
        )
        async with self._session_factory() as session:
            try:
                session.add(model)
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error(f"Execution record append failed: {e}")
                raise
            return replace(record, id=model.id)

    async def list(
        self,
        job_name: Optional[str] = None,
        limit: int = 50,
    ) -> List[ExecutionRecord]:
        query = select(ExecutionRecordModel)
        if job_name:
            query = query.where(ExecutionRecordModel.job_name == job_name)
        query = query.order_by(
            ExecutionRecordModel.created_at.desc(),
            ExecutionRecordModel.id.desc(),
        ).limit(limit)

        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_entity(model) for model in result.scalars().all()]

    @staticmethod
    def _to_entity(model: ExecutionRecordModel) -> ExecutionRecord:
        return ExecutionRecord(
            id=model.id,
            job_name=model.job_name,
            fired_at=_as_utc(model.fired_at),
            outcome=ExecutionOutcome(model.outcome),
            reason=model.reason,
            action=model.action,
            ticker=model.ticker,
            quantity=model.quantity,
            order_id=model.order_id,
            client_order_id=model.client_order_id,
            attempts=model.attempts,
            created_at=_as_utc(model.created_at),
        )


class PostgresScheduleSettingsAdapter(ScheduleSettingsPort):
    """
    Timezone setting stored in the bot_config table.
    """

    def __init__(self, session_factory, default_timezone: str):
        """
        Initialize the adapter.

        Args:
            session_factory: Async session factory (e.g., async_sessionmaker)
            default_timezone: Returned until a timezone is stored
        """
        self._session_factory = session_factory
        self._default_timezone = default_timezone

    async def get_timezone(self) -> str:
        async with self._session_factory() as session:
            result = await session.execute(
                select(BotConfig).where(BotConfig.key == TIMEZONE_CONFIG_KEY)
            )
            config = result.scalar_one_or_none()
            if config is None:
                return self._default_timezone
            return config.value.get("timezone", self._default_timezone)

    async def set_timezone(self, timezone: str) -> str:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    select(BotConfig).where(BotConfig.key == TIMEZONE_CONFIG_KEY)
                )
                config = result.scalar_one_or_none()
                if config is None:
                    session.add(BotConfig(
                        key=TIMEZONE_CONFIG_KEY,
                        value={"timezone": timezone},
                        description="작업 시/분을 해석하는 타임존 (IANA)",
                    ))
                else:
                    # JSON 컬럼은 in-place 변경을 추적하지 않으므로 새 dict 할당
                    config.value = {"timezone": timezone}
        return timezone
