"""
TimeProviderPort - 시간 제공자 포트 인터페이스

Clean Architecture: Application Layer (Outbound Port)

트리거 발화 시각과 client_order_id 생성에서 datetime.now()를 직접
호출하지 않고 주입된 시간 소스를 사용합니다.

구현체:
- SystemTimeAdapter: 시스템 시간 사용 (실거래용)
- FixedTimeAdapter: 고정 시간 (테스트용)
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime, timezone


class TimeProviderPort(ABC):
    """
    시간 제공자 포트 인터페이스

    datetime.now() 직접 호출을 제거하고, 의존성 주입으로
    시간 소스를 교체할 수 있게 합니다.
    """

    @abstractmethod
    def now(self) -> datetime:
        """현재 시간 반환 (UTC, timezone-aware)"""
        pass

    def fire_time(self) -> datetime:
        """
        트리거 발화 시각 반환

        cron 트리거는 분 단위로 발화하므로 초 이하를 버립니다.
        같은 발화의 재시도는 동일한 값을 공유해야 합니다.
        """
        return self.now().replace(second=0, microsecond=0)


class SystemTimeAdapter(TimeProviderPort):
    """
    시스템 시간 어댑터 (실거래용)

    실제 시스템 시간을 반환합니다.
    """

    def now(self) -> datetime:
        """현재 시스템 시간 반환"""
        return datetime.now(timezone.utc)


class FixedTimeAdapter(TimeProviderPort):
    """
    고정 시간 어댑터 (테스트용)

    테스트에서 예측 가능한 시간을 반환합니다.
    """

    def __init__(self, fixed_time: datetime):
        self._fixed_time = fixed_time

    def set_time(self, new_time: datetime) -> None:
        """시간 변경"""
        self._fixed_time = new_time

    def now(self) -> datetime:
        """고정된 시간 반환"""
        return self._fixed_time
