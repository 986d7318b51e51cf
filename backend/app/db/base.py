"""
SQLAlchemy Base 설정
모든 데이터베이스 모델의 기본 클래스를 정의합니다.
"""
from datetime import datetime, timezone

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


# Naming convention for constraints
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=convention)


def utcnow() -> datetime:
    """타임스탬프 컬럼 기본값 (UTC, timezone-aware)"""
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """모든 ORM 모델의 기본 클래스"""
    metadata = metadata
