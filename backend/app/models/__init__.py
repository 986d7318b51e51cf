"""
데이터베이스 모델 패키지
모든 SQLAlchemy 모델을 임포트합니다.
"""
from backend.app.models.job_definition import JobDefinitionModel
from backend.app.models.execution_record import ExecutionRecordModel
from backend.app.models.bot_config import BotConfig

__all__ = [
    "JobDefinitionModel",
    "ExecutionRecordModel",
    "BotConfig",
]
