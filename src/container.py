"""
Dependency Injection Container.

This module provides a central container for wiring dependencies
following the Dependency Inversion Principle.

Usage:
    # Production (inside the FastAPI app)
    container = Container.create_from_settings(settings, scheduler, session_factory)
    manage_jobs = container.get_manage_jobs_use_case()

    # Testing
    container = Container.create_for_testing()
    # or with custom fakes
    container = Container(broker_port=fake_broker)
"""
from typing import Optional

from src.application.ports.outbound.broker_port import BrokerPort
from src.application.ports.outbound.execution_record_port import ExecutionRecordPort
from src.application.ports.outbound.job_repository_port import JobRepositoryPort
from src.application.ports.outbound.lock_port import LockPort
from src.application.ports.outbound.schedule_settings_port import ScheduleSettingsPort
from src.application.ports.outbound.time_provider_port import TimeProviderPort, SystemTimeAdapter
from src.application.ports.outbound.workflow_engine_port import WorkflowEnginePort
from src.application.use_cases.execute_scheduled_trade import ExecuteScheduledTradeUseCase
from src.application.use_cases.manage_jobs import ManageJobsUseCase
from src.application.use_cases.reconcile_schedules import ReconcileSchedulesUseCase

DEFAULT_TIMEZONE = "America/New_York"


class Container:
    """
    Dependency Injection Container.

    Manages the creation and wiring of application dependencies.
    Implements singleton pattern for port instances.
    """

    def __init__(
        self,
        job_repository_port: Optional[JobRepositoryPort] = None,
        workflow_engine_port: Optional[WorkflowEnginePort] = None,
        broker_port: Optional[BrokerPort] = None,
        execution_record_port: Optional[ExecutionRecordPort] = None,
        schedule_settings_port: Optional[ScheduleSettingsPort] = None,
        lock_port: Optional[LockPort] = None,
        time_provider_port: Optional[TimeProviderPort] = None,
        engine_timeout_seconds: float = 10.0,
        broker_timeout_seconds: float = 10.0,
        lock_timeout_seconds: float = 30.0,
    ):
        """
        Initialize container with optional port overrides.

        Args:
            job_repository_port: Job store (in-memory if None)
            workflow_engine_port: Workflow engine (in-memory if None)
            broker_port: Trading API (in-memory if None)
            execution_record_port: Execution audit log (in-memory if None)
            schedule_settings_port: Timezone setting (in-memory if None)
            lock_port: Write/reconcile locks (in-memory if None)
            time_provider_port: Clock (system UTC if None)
            engine_timeout_seconds: Timeout for every workflow engine call
            broker_timeout_seconds: Timeout for order submission
            lock_timeout_seconds: Maximum wait for a held lock
        """
        self._job_repository_port = job_repository_port
        self._workflow_engine_port = workflow_engine_port
        self._broker_port = broker_port
        self._execution_record_port = execution_record_port
        self._schedule_settings_port = schedule_settings_port
        self._lock_port = lock_port
        self._time_provider_port = time_provider_port

        self.engine_timeout_seconds = engine_timeout_seconds
        self.broker_timeout_seconds = broker_timeout_seconds
        self.lock_timeout_seconds = lock_timeout_seconds

        # Cached use cases
        self._reconcile_use_case: Optional[ReconcileSchedulesUseCase] = None
        self._manage_jobs_use_case: Optional[ManageJobsUseCase] = None
        self._execute_trade_use_case: Optional[ExecuteScheduledTradeUseCase] = None

    @classmethod
    def create_for_testing(cls, **overrides) -> "Container":
        """
        Create container with in-memory adapters for testing.

        Args:
            **overrides: Port or timeout overrides passed to the constructor

        Returns:
            Container with test adapters
        """
        from src.infrastructure.adapters.broker.memory_broker_adapter import InMemoryBrokerAdapter
        from src.infrastructure.adapters.persistence.memory_adapter import (
            InMemoryExecutionRecordAdapter,
            InMemoryScheduleSettingsAdapter,
        )
        from src.infrastructure.adapters.persistence.memory_job_repository import InMemoryJobRepository
        from src.infrastructure.adapters.persistence.memory_lock_adapter import InMemoryLockAdapter
        from src.infrastructure.adapters.scheduler.memory_engine_adapter import InMemoryWorkflowEngineAdapter

        ports = dict(
            job_repository_port=InMemoryJobRepository(),
            workflow_engine_port=InMemoryWorkflowEngineAdapter(),
            broker_port=InMemoryBrokerAdapter(),
            execution_record_port=InMemoryExecutionRecordAdapter(),
            schedule_settings_port=InMemoryScheduleSettingsAdapter(),
            lock_port=InMemoryLockAdapter(),
        )
        ports.update(overrides)
        return cls(**ports)

    @classmethod
    def create_from_settings(
        cls,
        settings,
        scheduler=None,
        session_factory=None,
    ) -> "Container":
        """
        Create container from application settings.

        Args:
            settings: backend.app.core.config.Settings
            scheduler: APScheduler instance backing the workflow engine
                (in-memory engine if None)
            session_factory: SQLAlchemy async session factory
                (required unless STORAGE_BACKEND is "memory")

        Returns:
            Container wired for production
        """
        from src.infrastructure.adapters.persistence.memory_lock_adapter import InMemoryLockAdapter

        if settings.STORAGE_BACKEND == "memory":
            from src.infrastructure.adapters.persistence.memory_adapter import (
                InMemoryExecutionRecordAdapter,
                InMemoryScheduleSettingsAdapter,
            )
            from src.infrastructure.adapters.persistence.memory_job_repository import InMemoryJobRepository
            job_repository_port = InMemoryJobRepository()
            execution_record_port = InMemoryExecutionRecordAdapter()
            schedule_settings_port = InMemoryScheduleSettingsAdapter(settings.SCHEDULER_TIMEZONE)
        else:
            if session_factory is None:
                raise ValueError("session_factory is required for the postgres storage backend")
            from src.infrastructure.adapters.persistence.postgres_job_repository import PostgresJobRepository
            from src.infrastructure.adapters.persistence.postgres_persistence_adapter import (
                PostgresExecutionRecordAdapter,
                PostgresScheduleSettingsAdapter,
            )
            job_repository_port = PostgresJobRepository(session_factory)
            execution_record_port = PostgresExecutionRecordAdapter(session_factory)
            schedule_settings_port = PostgresScheduleSettingsAdapter(
                session_factory, settings.SCHEDULER_TIMEZONE
            )

        workflow_engine_port = None
        if scheduler is not None:
            from src.infrastructure.adapters.scheduler.apscheduler_engine_adapter import APSchedulerEngineAdapter
            workflow_engine_port = APSchedulerEngineAdapter(
                scheduler,
                namespace=settings.SCHEDULER_NAMESPACE,
                misfire_grace_time=settings.SCHEDULER_MISFIRE_GRACE_SECONDS,
            )

        broker_port = None
        if settings.ALPACA_API_KEY and settings.ALPACA_SECRET_KEY:
            from src.infrastructure.adapters.broker.alpaca_broker_adapter import AlpacaBrokerAdapter
            broker_port = AlpacaBrokerAdapter(
                api_key=settings.ALPACA_API_KEY,
                secret_key=settings.ALPACA_SECRET_KEY,
                paper=settings.ALPACA_PAPER,
            )

        return cls(
            job_repository_port=job_repository_port,
            workflow_engine_port=workflow_engine_port,
            broker_port=broker_port,
            execution_record_port=execution_record_port,
            schedule_settings_port=schedule_settings_port,
            lock_port=InMemoryLockAdapter(),
            engine_timeout_seconds=settings.ENGINE_CALL_TIMEOUT_SECONDS,
            broker_timeout_seconds=settings.BROKER_CALL_TIMEOUT_SECONDS,
            lock_timeout_seconds=settings.LOCK_TIMEOUT_SECONDS,
        )

    # --- Port Getters ---

    def get_job_repository_port(self) -> JobRepositoryPort:
        """Get job store implementation."""
        if self._job_repository_port is None:
            from src.infrastructure.adapters.persistence.memory_job_repository import InMemoryJobRepository
            self._job_repository_port = InMemoryJobRepository()
        return self._job_repository_port

    def get_workflow_engine_port(self) -> WorkflowEnginePort:
        """Get workflow engine implementation."""
        if self._workflow_engine_port is None:
            from src.infrastructure.adapters.scheduler.memory_engine_adapter import InMemoryWorkflowEngineAdapter
            self._workflow_engine_port = InMemoryWorkflowEngineAdapter()
        return self._workflow_engine_port

    def get_broker_port(self) -> BrokerPort:
        """
        Get broker implementation.

        Falls back to the in-memory broker when no Alpaca credentials are
        configured, so a misconfigured deployment never reaches a live account.
        """
        if self._broker_port is None:
            from src.infrastructure.adapters.broker.memory_broker_adapter import InMemoryBrokerAdapter
            self._broker_port = InMemoryBrokerAdapter()
        return self._broker_port

    def get_execution_record_port(self) -> ExecutionRecordPort:
        """Get execution audit log implementation."""
        if self._execution_record_port is None:
            from src.infrastructure.adapters.persistence.memory_adapter import InMemoryExecutionRecordAdapter
            self._execution_record_port = InMemoryExecutionRecordAdapter()
        return self._execution_record_port

    def get_schedule_settings_port(self) -> ScheduleSettingsPort:
        """Get timezone setting implementation."""
        if self._schedule_settings_port is None:
            from src.infrastructure.adapters.persistence.memory_adapter import InMemoryScheduleSettingsAdapter
            self._schedule_settings_port = InMemoryScheduleSettingsAdapter(DEFAULT_TIMEZONE)
        return self._schedule_settings_port

    def get_lock_port(self) -> LockPort:
        """Get lock port implementation."""
        if self._lock_port is None:
            from src.infrastructure.adapters.persistence.memory_lock_adapter import InMemoryLockAdapter
            self._lock_port = InMemoryLockAdapter()
        return self._lock_port

    def get_time_provider_port(self) -> TimeProviderPort:
        """Get clock implementation."""
        if self._time_provider_port is None:
            self._time_provider_port = SystemTimeAdapter()
        return self._time_provider_port

    # --- Use Case Getters ---

    def get_reconcile_use_case(self) -> ReconcileSchedulesUseCase:
        """Get ReconcileSchedulesUseCase with wired dependencies."""
        if self._reconcile_use_case is None:
            self._reconcile_use_case = ReconcileSchedulesUseCase(
                job_repository=self.get_job_repository_port(),
                engine=self.get_workflow_engine_port(),
                settings=self.get_schedule_settings_port(),
                lock_port=self.get_lock_port(),
                engine_timeout_seconds=self.engine_timeout_seconds,
                lock_timeout_seconds=self.lock_timeout_seconds,
            )
        return self._reconcile_use_case

    def get_manage_jobs_use_case(self) -> ManageJobsUseCase:
        """Get ManageJobsUseCase with wired dependencies."""
        if self._manage_jobs_use_case is None:
            self._manage_jobs_use_case = ManageJobsUseCase(
                job_repository=self.get_job_repository_port(),
                reconciler=self.get_reconcile_use_case(),
                settings=self.get_schedule_settings_port(),
                lock_port=self.get_lock_port(),
                lock_timeout_seconds=self.lock_timeout_seconds,
                executor=self.get_execute_trade_use_case(),
            )
        return self._manage_jobs_use_case

    def get_execute_trade_use_case(self) -> ExecuteScheduledTradeUseCase:
        """Get ExecuteScheduledTradeUseCase with wired dependencies."""
        if self._execute_trade_use_case is None:
            self._execute_trade_use_case = ExecuteScheduledTradeUseCase(
                job_repository=self.get_job_repository_port(),
                broker=self.get_broker_port(),
                execution_records=self.get_execution_record_port(),
                time_provider=self.get_time_provider_port(),
                broker_timeout_seconds=self.broker_timeout_seconds,
            )
        return self._execute_trade_use_case
