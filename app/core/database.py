import asyncio
from typing import AsyncGenerator, Awaitable, Callable, TypeVar

from sqlalchemy import MetaData, text
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings
from app.core.exceptions import UnavailableException
from app.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

# 비동기 엔진 생성
engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=20,
    pool_timeout=settings.database_timeout_seconds,
    connect_args={"command_timeout": settings.database_timeout_seconds},
)

# 비동기 세션 팩토리
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# 제약 조건 이름 규칙 (유니크 위반 시 어떤 필드인지 판별하는 데 사용)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """SQLAlchemy 모델 베이스 클래스"""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """데이터베이스 세션 의존성

    요청 하나가 하나의 트랜잭션입니다. 예외가 발생하면 전체가 롤백됩니다.
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def is_transient_error(exc: BaseException) -> bool:
    """재시도 가능한 일시적 저장소 장애 여부"""
    if isinstance(exc, (PoolTimeoutError, asyncio.TimeoutError)):
        return True
    if isinstance(exc, OperationalError):
        return True
    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        return True
    return False


def constraint_name(exc: SQLAlchemyError) -> str | None:
    """IntegrityError에서 위반된 제약 조건 이름 추출 (asyncpg/psycopg2 공통)"""
    orig = getattr(exc, "orig", None)
    name = getattr(orig, "constraint_name", None)
    if name:
        return str(name)

    # asyncpg 어댑터는 원본 예외를 __cause__로 감싼다
    cause = getattr(orig, "__cause__", None)
    name = getattr(cause, "constraint_name", None)
    if name:
        return str(name)

    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    return str(name) if name else None


async def retry_read(
    operation: Callable[[], Awaitable[T]],
    session: AsyncSession | None = None,
    retries: int | None = None,
) -> T:
    """멱등 조회를 제한된 횟수만큼 재시도

    쓰기 작업에는 사용하지 않습니다. 재시도가 모두 실패하면
    UnavailableException을 발생시킵니다.

    재시도 전 롤백은 세션에 로드된 모든 ORM 인스턴스를 만료시킵니다.
    operation은 ID 같은 일반 값만 캡처해야 하고, 호출자는 이전에 로드한
    인스턴스의 속성을 호출 전에 지역 변수로 꺼내 두어야 합니다.
    같은 트랜잭션에서 쓰기보다 먼저 호출합니다.

    Args:
        operation: 인자 없는 조회 코루틴 팩토리
        session: 재시도 전에 롤백할 세션 (실패한 트랜잭션 정리)
        retries: 추가 시도 횟수 (기본: settings.database_read_retries)

    Returns:
        조회 결과
    """
    max_retries = settings.database_read_retries if retries is None else retries

    for attempt in range(max_retries + 1):
        try:
            return await operation()
        except SQLAlchemyError as e:
            if not is_transient_error(e):
                raise
            logger.warning(
                f"Transient read failure (attempt {attempt + 1}/"
                f"{max_retries + 1}): {type(e).__name__}"
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Read timed out (attempt {attempt + 1}/{max_retries + 1})"
            )

        if session is not None:
            await session.rollback()

    raise UnavailableException()


async def ping_database(session: AsyncSession) -> bool:
    """저장소 연결 확인 (헬스 체크용)

    실패하면 세션의 연결을 폐기하고 False를 반환합니다.
    """
    try:
        await asyncio.wait_for(
            session.execute(text("SELECT 1")),
            timeout=settings.database_timeout_seconds,
        )
        return True
    except (SQLAlchemyError, asyncio.TimeoutError) as e:
        logger.warning(f"Database ping failed: {type(e).__name__}")
        await session.invalidate()
        return False


async def close_db() -> None:
    """데이터베이스 연결 종료"""
    await engine.dispose()
