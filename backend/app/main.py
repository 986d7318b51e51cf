"""
FastAPI 메인 애플리케이션
스케줄 트레이딩 작업 관리 REST API 서버입니다.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.app.core.config import settings
from backend.app.api.v1.api import api_router
from src.application.ports.outbound.lock_port import LockAcquisitionError
from src.domain.exceptions import (
    JobConflictError,
    JobNotFoundError,
    JobValidationError,
    ReconciliationError,
)

# 로깅 설정
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Sentry 초기화 (전역)
if settings.SENTRY_ENABLED and settings.SENTRY_DSN:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    def before_send_filter(event, hint):
        """민감 정보 마스킹"""
        if 'request' in event:
            headers = event['request'].get('headers', {})
            # API 키 마스킹
            for key in ['Authorization', 'APCA-API-KEY-ID', 'APCA-API-SECRET-KEY']:
                if key in headers:
                    headers[key] = '***MASKED***'
        return event

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(
                level=logging.INFO,  # INFO 이상 로그 캡처
                event_level=logging.ERROR  # ERROR 이상을 Sentry 이벤트로 전송
            ),
        ],
        before_send=before_send_filter,
        send_default_pii=False,  # 개인정보 전송 안 함
        attach_stacktrace=True,  # 스택 트레이스 포함
    )
    logger.info(f"✅ Sentry 초기화 완료 (환경: {settings.SENTRY_ENVIRONMENT})")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    애플리케이션 라이프사이클 관리

    시작 시: 데이터베이스 초기화, 스케줄러 시작, 초기 재조정
    종료 시: 스케줄러 중지
    """
    from backend.app.core.scheduler import get_container, start_scheduler, stop_scheduler

    logger.info("🚀 애플리케이션 시작 중...")

    if settings.STORAGE_BACKEND != "memory":
        try:
            from backend.app.db.init_db import init_db
            await init_db()
        except Exception as e:
            logger.error(f"❌ 데이터베이스 초기화 실패: {e}")
            # 초기화 실패 시에도 계속 진행 (테이블이 이미 존재할 수 있음)

    start_scheduler()

    # 초기 재조정: 저장된 작업 정의로부터 트리거 복원
    try:
        result = await get_container().get_reconcile_use_case().reconcile()
        logger.info(f"✅ 초기 재조정 완료: {result.to_dict()}")
    except Exception as e:
        logger.error(f"❌ 초기 재조정 실패 (주기적 재조정이 복구): {e}")

    logger.info("✅ 애플리케이션 시작 완료")

    yield

    logger.info("🛑 애플리케이션 종료 중...")
    stop_scheduler()
    logger.info("✅ 애플리케이션 종료 완료")


# FastAPI 애플리케이션 생성
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.DESCRIPTION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=f"{settings.API_PREFIX}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

# API 라우터 등록
app.include_router(api_router, prefix=settings.API_PREFIX)

# Prometheus 메트릭 엔드포인트 마운트
if settings.PROMETHEUS_ENABLED:
    from backend.app.services.metrics import metrics_app
    app.mount("/metrics", metrics_app)
    logger.info("✅ Prometheus 메트릭 엔드포인트 활성화: /metrics")


@app.get("/")
async def root() -> dict:
    """루트 엔드포인트"""
    return {
        "message": f"{settings.PROJECT_NAME} API",
        "version": settings.VERSION,
        "docs": f"{settings.API_PREFIX}/docs",
    }


@app.get("/health")
async def health_check() -> dict:
    """헬스 체크 엔드포인트"""
    from backend.app.core.scheduler import scheduler

    return {
        "status": "healthy",
        "version": settings.VERSION,
        "scheduler_running": scheduler.running,
        "paper_trading": settings.ALPACA_PAPER,
    }


# ============================================================================
# 도메인 예외 → HTTP 응답 매핑
# ============================================================================

@app.exception_handler(JobValidationError)
async def validation_exception_handler(request: Request, exc: JobValidationError):
    """검증 실패 (422) - 도메인 메시지를 그대로 반환"""
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "field": exc.field},
    )


@app.exception_handler(JobNotFoundError)
async def not_found_exception_handler(request: Request, exc: JobNotFoundError):
    """작업 없음 (404)"""
    return JSONResponse(
        status_code=404,
        content={"detail": f"Job not found: {exc.name}"},
    )


@app.exception_handler(JobConflictError)
async def conflict_exception_handler(request: Request, exc: JobConflictError):
    """이름 충돌 (409)"""
    return JSONResponse(
        status_code=409,
        content={"detail": f"Job already exists: {exc.name}"},
    )


@app.exception_handler(LockAcquisitionError)
@app.exception_handler(ReconciliationError)
async def unavailable_exception_handler(request: Request, exc: Exception):
    """락 획득 실패 / 워크플로 엔진 연결 불가 (503)"""
    logger.warning(f"Service unavailable for {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=503,
        content={"detail": str(exc), "type": type(exc).__name__},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """전역 예외 처리"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    if settings.SENTRY_ENABLED:
        import sentry_sdk
        with sentry_sdk.new_scope() as scope:
            scope.set_tag("endpoint", str(request.url))
            scope.set_context("request", {
                "method": request.method,
                "url": str(request.url),
            })
            sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content={
            "detail": "내부 서버 오류가 발생했습니다.",
            "type": type(exc).__name__,
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "backend.app.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
    )
