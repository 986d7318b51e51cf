"""
pytest 공통 설정 및 픽스처
"""
from datetime import datetime, timezone

import pytest

from src.application.ports.outbound.time_provider_port import FixedTimeAdapter
from src.domain.entities.job import JobDefinition, OrderSide, Schedule, Weekday

WEEKDAYS = (Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI)


def make_job(
    name: str = "buy-tsla",
    action: OrderSide = OrderSide.BUY,
    ticker: str = "TSLA",
    quantity: int = 10,
    days=WEEKDAYS,
    hour: int = 9,
    minute: int = 35,
    enabled: bool = True,
) -> JobDefinition:
    """테스트용 작업 정의 생성 (기본값: 평일 09:35 TSLA 10주 매수)"""
    return JobDefinition(
        name=name,
        action=action,
        ticker=ticker,
        quantity=quantity,
        schedule=Schedule(days=tuple(days), hour=hour, minute=minute),
        enabled=enabled,
    )


@pytest.fixture
def job_factory():
    """작업 정의 팩토리"""
    return make_job


@pytest.fixture
def fired_at():
    """고정 발화 시각 (2024-01-08 월요일 09:35 America/New_York = 14:35 UTC)"""
    return datetime(2024, 1, 8, 14, 35, tzinfo=timezone.utc)


@pytest.fixture
def time_provider(fired_at):
    """고정 시간 제공자"""
    return FixedTimeAdapter(fired_at)
