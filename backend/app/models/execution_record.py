"""
실행 기록 모델
트리거 발화마다 한 번 기록되는 감사 로그입니다. (append-only)
"""
from datetime import datetime
from sqlalchemy import String, Integer, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db.base import Base, utcnow


class ExecutionRecordModel(Base):
    """실행 기록 테이블"""
    __tablename__ = "execution_records"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    job_name: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True,
        comment="발화한 작업 이름"
    )
    fired_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
        comment="트리거 발화 시각 (재시도 간 공유)"
    )
    outcome: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True,
        comment="결과: success, failed, skipped"
    )
    reason: Mapped[str | None] = mapped_column(
        Text, nullable=True,
        comment="실패/스킵 사유 (예: timeout, not_found)"
    )
    action: Mapped[str | None] = mapped_column(String(10), nullable=True, comment="buy/sell")
    ticker: Mapped[str | None] = mapped_column(String(20), nullable=True, comment="종목 심볼")
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="주문 수량")
    order_id: Mapped[str | None] = mapped_column(
        String(100), nullable=True,
        comment="브로커 주문 ID"
    )
    client_order_id: Mapped[str | None] = mapped_column(
        String(128), nullable=True, index=True,
        comment="클라이언트 주문 ID (발화 단위 중복 방지)"
    )
    attempts: Mapped[int] = mapped_column(
        Integer, nullable=False, default=1,
        comment="기록 시점까지의 시도 횟수"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True,
        comment="기록 생성 시각"
    )

    # 복합 인덱스: 작업별 최신 기록 조회 최적화
    __table_args__ = (
        Index('ix_execution_records_job_name_created_at', 'job_name', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<ExecutionRecord {self.job_name} {self.outcome} @ {self.fired_at}>"
