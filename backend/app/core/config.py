"""
FastAPI 애플리케이션 설정
환경 변수 및 전역 설정을 관리합니다.
"""
from typing import Optional, List, Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정 클래스"""

    # API 설정
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Trade Schedule Service"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "요일/시각 기반 주식 매매 작업 스케줄러"

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:8000",
        "http://localhost:9090",  # Prometheus
        "http://localhost:3000",  # Grafana
    ]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        return v

    # Database
    STORAGE_BACKEND: Literal["postgres", "memory"] = "postgres"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "trade_schedule"
    # 설정 시 POSTGRES_* 대신 사용 (예: sqlite+aiosqlite:///./local.db)
    SQLALCHEMY_DATABASE_URI: Optional[str] = None

    @property
    def DATABASE_URL(self) -> str:
        """비동기 데이터베이스 연결 URL"""
        if self.SQLALCHEMY_DATABASE_URI:
            return self.SQLALCHEMY_DATABASE_URI
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    # Alpaca API (키가 없으면 인메모리 브로커 사용)
    ALPACA_API_KEY: str = ""
    ALPACA_SECRET_KEY: str = ""
    ALPACA_PAPER: bool = True

    # Sentry
    SENTRY_DSN: Optional[str] = None
    SENTRY_ENABLED: bool = False
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # Scheduler
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_TIMEZONE: str = "America/New_York"  # 타임존 설정이 저장되기 전 기본값
    SCHEDULER_NAMESPACE: str = "trade"  # 트리거 ID 접두사
    SCHEDULER_JOBSTORE_URL: Optional[str] = None  # 동기 SQLAlchemy URL (영속 jobstore)
    SCHEDULER_MISFIRE_GRACE_SECONDS: int = 60
    RECONCILE_INTERVAL_SECONDS: int = 300  # 주기적 재조정 (드리프트 복구)

    # Timeouts (초)
    ENGINE_CALL_TIMEOUT_SECONDS: float = 10.0
    BROKER_CALL_TIMEOUT_SECONDS: float = 10.0
    LOCK_TIMEOUT_SECONDS: float = 30.0

    # Trade retry (재시도 가능한 실패에만 적용)
    TRADE_RETRY_MAX_ATTEMPTS: int = 3
    TRADE_RETRY_BASE_DELAY_SECONDS: float = 2.0
    TRADE_RETRY_MAX_DELAY_SECONDS: float = 30.0

    @field_validator("TRADE_RETRY_MAX_ATTEMPTS")
    @classmethod
    def validate_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("TRADE_RETRY_MAX_ATTEMPTS must be at least 1")
        return v

    # Monitoring
    PROMETHEUS_ENABLED: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# 전역 설정 인스턴스
settings = Settings()
