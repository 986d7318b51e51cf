"""
작업 정의 모델
스케줄 트레이딩 작업(Job Store)의 영구 저장소입니다.
"""
from datetime import datetime
from typing import List
from sqlalchemy import String, Integer, Boolean, DateTime, SmallInteger, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import JSONB

from backend.app.db.base import Base, utcnow


class JobDefinitionModel(Base):
    """작업 정의 테이블"""
    __tablename__ = "job_definitions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(
        String(100), unique=True, nullable=False, index=True,
        comment="작업 이름 (고유 키, 트리거 ID로도 사용)"
    )
    action: Mapped[str] = mapped_column(
        String(10), nullable=False,
        comment="매수(buy) 또는 매도(sell)"
    )
    ticker: Mapped[str] = mapped_column(
        String(20), nullable=False, index=True,
        comment="종목 심볼 (예: TSLA)"
    )
    quantity: Mapped[int] = mapped_column(
        Integer, nullable=False,
        comment="주문 수량 (양의 정수)"
    )
    days: Mapped[List[str]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False,
        comment="실행 요일 목록 (mon..sun, 정규화된 순서)"
    )
    hour: Mapped[int] = mapped_column(
        SmallInteger, nullable=False,
        comment="실행 시 (0-23)"
    )
    minute: Mapped[int] = mapped_column(
        SmallInteger, nullable=False,
        comment="실행 분 (0-59)"
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
        comment="활성화 여부 (비활성 작업은 트리거 없음)"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False,
        comment="생성 시각"
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False,
        comment="최종 업데이트 시각"
    )

    def __repr__(self) -> str:
        return f"<JobDefinition {self.name} {self.action} {self.quantity} {self.ticker}>"
