"""테스트 설정"""

import itertools
import os
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio
from docker import from_env
from docker.errors import DockerException
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from app.core.config import settings
from app.core.database import Base, get_db
from app.core.dependencies import get_credential_store
from app.core.notifications import EventNotifier, get_notifier
from app.core.security import CredentialStore, Identity, Role, TokenService
from app.core.security.passwords import MIN_ROUNDS
from app.domains.users.models import User
from app.main import app


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in {"1", "true"}


def _docker_available() -> bool:
    """FORCE_DOCKER_TESTS / SKIP_DOCKER_TESTS 우선, 없으면 데몬에 ping"""
    if _env_flag("FORCE_DOCKER_TESTS"):
        return True
    if _env_flag("SKIP_DOCKER_TESTS"):
        return False
    try:
        from_env().ping()
    except (DockerException, OSError):
        return False
    return True


DOCKER_AVAILABLE = _docker_available()


@pytest.fixture(scope="session")
def name_factory():
    """테스트마다 겹치지 않는 사용자명을 만들기 위한 팩토리"""
    counter = itertools.count(start=1)

    def _factory(prefix: str = "user") -> str:
        return f"{prefix}{next(counter)}"

    return _factory


@pytest.fixture(scope="session")
def credential_store() -> CredentialStore:
    """해시 비용을 하한으로 낮춘 CredentialStore"""
    return CredentialStore(rounds=MIN_ROUNDS)


@pytest.fixture(scope="session")
def token_service() -> TokenService:
    """설정과 같은 키를 쓰는 TokenService"""
    return TokenService.from_settings(settings)


@pytest.fixture
def notifier() -> EventNotifier:
    """커밋 후 발행된 이벤트를 기록하는 알림 싱크 (notify만 Mock)"""
    sink = EventNotifier()
    sink.notify = MagicMock()
    return sink


@pytest.fixture
def auth_header(token_service):
    """사용자 ID로 Authorization 헤더 생성"""

    def _header(user_id: int, role: Role = Role.USER) -> dict[str, str]:
        return {"Authorization": f"Token {token_service.issue(user_id, role)}"}

    return _header


@pytest.fixture
def api_key_header():
    """Internal API Key 헤더"""
    return {"X-Internal-Api-Key": settings.internal_api_key}


@pytest.fixture
def user_identity() -> Identity:
    return Identity(user_id=1)


@pytest.fixture
def admin_identity() -> Identity:
    return Identity(user_id=99, role=Role.ADMIN)


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """PostgreSQL 테스트 컨테이너"""
    if not DOCKER_AVAILABLE:
        pytest.skip("Docker is not available; skipping container-based tests.")

    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def test_database_url(postgres_container: PostgresContainer) -> str:
    """컨테이너 URL (asyncpg 드라이버)"""
    return postgres_container.get_connection_url(driver="asyncpg")


# NOTE:
# pytest-asyncio(0.21+)는 기본적으로 테스트마다 독립적인 event loop를 생성
# session 스코프 async fixture는 이 구조와 충돌하여 ScopeMismatch 에러를 유발할 수 있음
# 이를 방지하기 위해 async fixture는 모두 function 스코프로 유지
@pytest_asyncio.fixture
async def session_factory(test_database_url: str):
    """깨끗한 스키마에 연결된 세션 팩토리"""
    engine = create_async_engine(test_database_url, echo=False)

    # 각 테스트마다 깨끗한 스키마 유지
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    """테스트 데이터베이스 세션 (검증용)"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(session_factory, credential_store, notifier):
    """비동기 테스트 클라이언트 (테스트 DB 사용)

    요청마다 별도 세션/트랜잭션을 사용하므로 동시 요청도 실제 서버처럼 동작합니다.
    """

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    get_credential_store.cache_clear()
    get_notifier.cache_clear()

    # 서비스 기본값(get_credential_store, get_notifier)도 테스트용으로 교체
    with patch(
        "app.domains.users.service.get_credential_store",
        return_value=credential_store,
    ), patch(
        "app.domains.users.service.get_notifier", return_value=notifier
    ), patch(
        "app.domains.items.service.get_notifier", return_value=notifier
    ):
        transport = ASGITransport(app=app)
        async with AsyncClient(
            transport=transport, base_url="http://test"
        ) as client:
            yield client

    # 정리
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def register(client, name_factory):
    """API로 사용자를 가입시키고 (user 데이터, 인증 헤더) 반환"""

    async def _register(
        username: str | None = None, password: str = "password123"
    ):
        username = username or name_factory()
        response = await client.post(
            "/api/v1/users",
            json={
                "username": username,
                "email": f"{username}@example.com",
                "password": password,
            },
        )
        assert response.status_code == 201, response.text
        user = response.json()["data"]
        return user, {"Authorization": f"Token {user['token']}"}

    return _register


@pytest_asyncio.fixture
async def set_role(session_factory):
    """저장된 사용자 역할 변경 (운영 스크립트와 같은 효과)"""

    async def _set_role(user_id: int, role: Role) -> None:
        async with session_factory() as session:
            await session.execute(
                update(User).where(User.id == user_id).values(role=role.value)
            )
            await session.commit()

    return _set_role
