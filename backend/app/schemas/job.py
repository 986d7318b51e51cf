"""
작업 정의 스키마
API 요청/응답에 사용되는 Pydantic 모델입니다.

숫자 필드는 StrictInt: true, 9.0, "35" 같은 값은 변환하지 않고 거부합니다.
요청 스키마는 형태만 검사하고, 값 검증은 도메인 엔티티(JobDefinition)에 맡깁니다.
검증 실패 메시지는 그대로 422 응답의 detail이 됩니다.
"""
from typing import List, Optional, Union
from pydantic import BaseModel, Field, ConfigDict, StrictInt, field_validator

from src.domain.entities.job import JobDefinition, Schedule
from src.domain.services.schedule_compiler import parse_day_tokens


class ScheduleSchema(BaseModel):
    """실행 스케줄 스키마"""
    days: Union[List[str], str] = Field(
        ...,
        description="실행 요일 (mon..sun, 범위 'mon-fri', 별칭 weekdays/weekends/daily)",
        examples=[["mon-fri"]],
    )
    hour: StrictInt = Field(..., description="실행 시 (0-23, 설정된 타임존 기준)")
    minute: StrictInt = Field(..., description="실행 분 (0-59)")

    def to_entity(self) -> Schedule:
        """도메인 Schedule로 변환 (JobValidationError 발생 가능)"""
        return Schedule(days=parse_day_tokens(self.days), hour=self.hour, minute=self.minute)


class JobBase(BaseModel):
    """작업 기본 스키마"""
    action: str = Field(..., description="매수(buy) 또는 매도(sell)")
    ticker: str = Field(..., description="종목 심볼 (예: TSLA)")
    quantity: StrictInt = Field(..., description="주문 수량 (양의 정수)")
    schedule: ScheduleSchema
    enabled: bool = Field(default=True, description="활성화 여부")

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("ticker", mode="before")
    @classmethod
    def normalize_ticker(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class JobCreate(JobBase):
    """작업 생성 요청 스키마"""
    name: str = Field(..., description="작업 이름 (고유)", examples=["buy-tsla"])

    def to_entity(self) -> JobDefinition:
        """도메인 JobDefinition으로 변환 (JobValidationError 발생 가능)"""
        return JobDefinition(
            name=self.name,
            action=self.action,
            ticker=self.ticker,
            quantity=self.quantity,
            schedule=self.schedule.to_entity(),
            enabled=self.enabled,
        )


class JobUpdate(JobBase):
    """작업 전체 교체 요청 스키마 (name 생략 시 경로의 이름 사용)"""
    name: Optional[str] = Field(None, description="작업 이름 (경로와 같아야 함)")

    def to_entity(self, path_name: str) -> JobDefinition:
        """도메인 JobDefinition으로 변환 (JobValidationError 발생 가능)"""
        return JobDefinition(
            name=self.name if self.name is not None else path_name,
            action=self.action,
            ticker=self.ticker,
            quantity=self.quantity,
            schedule=self.schedule.to_entity(),
            enabled=self.enabled,
        )


class ScheduleResponse(BaseModel):
    """스케줄 응답 스키마"""
    days: List[str]
    hour: int
    minute: int


class JobResponse(BaseModel):
    """작업 조회 응답 스키마"""
    name: str
    action: str
    ticker: str
    quantity: int
    schedule: ScheduleResponse
    enabled: bool

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, job: JobDefinition) -> "JobResponse":
        return cls(
            name=job.name,
            action=job.action.value,
            ticker=job.ticker,
            quantity=job.quantity,
            schedule=ScheduleResponse(
                days=job.schedule.day_values,
                hour=job.schedule.hour,
                minute=job.schedule.minute,
            ),
            enabled=job.enabled,
        )


class JobListResponse(BaseModel):
    """작업 목록 응답 스키마"""
    jobs: list[JobResponse]
    total: int = Field(..., description="전체 작업 수")
