"""
Pytest 설정 및 공통 픽스처
인메모리 Container로 FastAPI 앱을 구동합니다 (DB/APScheduler/Alpaca 불필요).
"""
from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from backend.app.core.scheduler import set_container
from backend.app.main import app
from src.application.ports.outbound.time_provider_port import FixedTimeAdapter
from src.container import Container
from src.domain.entities.job import JobDefinition, OrderSide, Schedule, Weekday

# 2024-01-08 월요일 09:35 America/New_York
FIXED_FIRE_TIME = datetime(2024, 1, 8, 14, 35, tzinfo=timezone.utc)


@pytest.fixture
def container() -> Container:
    """
    테스트용 Container
    전역 싱글톤을 교체하고 테스트 종료 시 초기화합니다.
    """
    container = Container.create_for_testing(
        time_provider_port=FixedTimeAdapter(FIXED_FIRE_TIME),
        engine_timeout_seconds=1.0,
        broker_timeout_seconds=1.0,
        lock_timeout_seconds=1.0,
    )
    set_container(container)
    yield container
    set_container(None)


@pytest.fixture
def engine(container):
    """인메모리 워크플로 엔진"""
    return container.get_workflow_engine_port()


@pytest.fixture
def broker(container):
    """인메모리 브로커"""
    return container.get_broker_port()


@pytest.fixture
async def client(container) -> AsyncGenerator[AsyncClient, None]:
    """
    테스트용 HTTP 클라이언트
    FastAPI 앱에 대한 비동기 HTTP 요청을 수행합니다. (lifespan 미실행)
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def job_payload():
    """buy-tsla 작업 생성 요청 본문 (평일 09:35 TSLA 10주 매수)"""
    return {
        "name": "buy-tsla",
        "action": "buy",
        "ticker": "TSLA",
        "quantity": 10,
        "schedule": {"days": ["mon-fri"], "hour": 9, "minute": 35},
    }


@pytest.fixture
def job_factory():
    """작업 정의 팩토리 (기본값: 평일 09:35 TSLA 10주 매수)"""
    def _make(name: str = "buy-tsla", quantity: int = 10, enabled: bool = True) -> JobDefinition:
        return JobDefinition(
            name=name,
            action=OrderSide.BUY,
            ticker="TSLA",
            quantity=quantity,
            schedule=Schedule(
                days=(Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI),
                hour=9,
                minute=35,
            ),
            enabled=enabled,
        )
    return _make
