from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import api_router as api_v1_router
from app.core.config import settings
from app.core.database import close_db, get_db, ping_database
from app.core.exceptions import (
    BaseAPIException,
    base_exception_handler,
    database_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.core.logging import get_logger, setup_logging
from app.core.middlewares import LoggingMiddleware
from app.core.migration import run_migrations_on_startup
from app.core.notifications import WebhookNotifier, get_notifier
from app.core.schemas import APIResponse

setup_logging()
logger = get_logger(__name__)

EXCEPTION_HANDLERS = (
    (BaseAPIException, base_exception_handler),
    (RequestValidationError, validation_exception_handler),
    (StarletteHTTPException, http_exception_handler),
    (SQLAlchemyError, database_exception_handler),
    (Exception, generic_exception_handler),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """애플리케이션 생명주기 관리

    시작: 스키마 리비전 확인(개발 환경은 자동 업그레이드)
    종료: 전송 중인 웹훅 알림 정리 후 커넥션 풀 해제
    """
    logger.info(
        f"Starting {settings.app_name}",
        extra={"environment": settings.app_env},
    )
    run_migrations_on_startup(auto_migrate=settings.auto_migrate)

    yield

    logger.info(f"Shutting down {settings.app_name}")
    notifier = get_notifier()
    if isinstance(notifier, WebhookNotifier):
        await notifier.drain()
    await close_db()


def create_app() -> FastAPI:
    """FastAPI 애플리케이션 팩토리"""
    docs_enabled = settings.is_development
    app = FastAPI(
        title=settings.app_name,
        description="Marketplace API: users, items, comments, follows and favorites",
        version="0.1.0",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    # 미들웨어는 나중에 추가한 것이 바깥쪽에서 실행됨
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time"],
    )
    app.add_middleware(LoggingMiddleware)

    for exc_class, handler in EXCEPTION_HANDLERS:
        app.add_exception_handler(exc_class, handler)

    app.include_router(api_v1_router, prefix="/api/v1")
    return app


app = create_app()


@app.get(
    "/health", tags=["Health"], response_model=APIResponse[dict[str, Any]]
)
async def health_check(session: AsyncSession = Depends(get_db)):
    """헬스 체크 (저장소 연결 포함)

    저장소에 연결할 수 없으면 503과 함께 status=degraded를 반환합니다.
    """
    database_ok = await ping_database(session)
    body = APIResponse(
        success=database_ok,
        message="OK" if database_ok else "DEGRADED",
        data={
            "status": "healthy" if database_ok else "degraded",
            "database": "ok" if database_ok else "unavailable",
            "app_name": settings.app_name,
            "environment": settings.app_env,
        },
    )
    if not database_ok:
        return JSONResponse(status_code=503, content=jsonable_encoder(body))
    return body
