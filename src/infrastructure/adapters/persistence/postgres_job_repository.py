"""
PostgresJobRepository - SQL implementation of JobRepositoryPort.

Uses the job_definitions table. Every operation runs in its own
transaction, so readers see either the previous or the new row.
Runs on PostgreSQL (asyncpg) in production and SQLite (aiosqlite) in tests.
"""
import logging
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError

from src.application.ports.outbound.job_repository_port import JobRepositoryPort
from src.domain.entities.job import JobDefinition, OrderSide, Schedule, Weekday
from src.domain.exceptions import JobConflictError, JobNotFoundError
from backend.app.models.job_definition import JobDefinitionModel

logger = logging.getLogger(__name__)


class PostgresJobRepository(JobRepositoryPort):
    """
    SQL job store.

    Uniqueness of job names is enforced by the table's unique constraint,
    which turns a racing duplicate create into JobConflictError.
    """

    def __init__(self, session_factory):
        """
        Initialize the adapter.

        Args:
            session_factory: Async session factory (e.g., async_sessionmaker)
        """
        self._session_factory = session_factory

    async def get(self, name: str) -> JobDefinition:
        async with self._session_factory() as session:
            result = await session.execute(
                select(JobDefinitionModel).where(JobDefinitionModel.name == name)
            )
            model = result.scalar_one_or_none()
            if model is None:
                raise JobNotFoundError(name)
            return self._to_entity(model)

    async def list(self) -> List[JobDefinition]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(JobDefinitionModel).order_by(JobDefinitionModel.name)
            )
            return [self._to_entity(model) for model in result.scalars().all()]

    async def put(self, job: JobDefinition) -> JobDefinition:
        try:
            await self._upsert(job)
        except IntegrityError:
            # A concurrent insert won the race; the row exists now, so update it.
            logger.debug(f"Concurrent insert detected for job {job.name}, retrying as update")
            await self._upsert(job)
        return job

    async def _upsert(self, job: JobDefinition) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    select(JobDefinitionModel)
                    .where(JobDefinitionModel.name == job.name)
                    .with_for_update()
                )
                model = result.scalar_one_or_none()
                if model is None:
                    session.add(self._to_model(job))
                else:
                    self._apply(model, job)

    async def create(self, job: JobDefinition) -> JobDefinition:
        async with self._session_factory() as session:
            try:
                session.add(self._to_model(job))
                await session.commit()
            except IntegrityError:
                await session.rollback()
                raise JobConflictError(job.name)
        return job

    async def delete(self, name: str) -> None:
        async with self._session_factory() as session:
            result = await session.execute(
                delete(JobDefinitionModel).where(JobDefinitionModel.name == name)
            )
            await session.commit()
            if result.rowcount == 0:
                raise JobNotFoundError(name)

    @staticmethod
    def _apply(model: JobDefinitionModel, job: JobDefinition) -> None:
        model.action = job.action.value
        model.ticker = job.ticker
        model.quantity = job.quantity
        model.days = job.schedule.day_values
        model.hour = job.schedule.hour
        model.minute = job.schedule.minute
        model.enabled = job.enabled

    @classmethod
    def _to_model(cls, job: JobDefinition) -> JobDefinitionModel:
        model = JobDefinitionModel(name=job.name)
        cls._apply(model, job)
        return model

    @staticmethod
    def _to_entity(model: JobDefinitionModel) -> JobDefinition:
        return JobDefinition(
            name=model.name,
            action=OrderSide(model.action),
            ticker=model.ticker,
            quantity=model.quantity,
            schedule=Schedule(
                days=tuple(Weekday(day) for day in model.days),
                hour=model.hour,
                minute=model.minute,
            ),
            enabled=bool(model.enabled),
        )
