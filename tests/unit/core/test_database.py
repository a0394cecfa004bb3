"""저장소 유틸리티 단위 테스트 (재시도, 제약 조건 판별)"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError, ProgrammingError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from app.core.database import (
    constraint_name,
    is_transient_error,
    ping_database,
    retry_read,
)
from app.core.exceptions import UnavailableException


def _operational_error() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection reset"))


class TestIsTransientError:
    """일시적 장애 판별"""

    def test_operational_error(self):
        assert is_transient_error(_operational_error())

    def test_pool_timeout(self):
        assert is_transient_error(PoolTimeoutError())

    def test_asyncio_timeout(self):
        assert is_transient_error(asyncio.TimeoutError())

    def test_integrity_error_is_not_transient(self):
        assert not is_transient_error(
            IntegrityError("INSERT", {}, Exception("duplicate"))
        )


class TestConstraintName:
    """IntegrityError 제약 조건 이름 추출"""

    def test_from_orig_attribute(self):
        orig = Exception("duplicate key")
        orig.constraint_name = "uq_items_slug"

        assert constraint_name(IntegrityError("INSERT", {}, orig)) == "uq_items_slug"

    def test_from_wrapped_cause(self):
        """asyncpg 어댑터처럼 원본 예외가 __cause__에 있는 경우"""
        cause = Exception("duplicate key")
        cause.constraint_name = "uq_users_email"
        orig = Exception("wrapped")
        orig.__cause__ = cause

        assert constraint_name(IntegrityError("INSERT", {}, orig)) == "uq_users_email"

    def test_from_diag(self):
        """psycopg2처럼 diag에 있는 경우"""
        orig = Exception("duplicate key")
        orig.diag = MagicMock(constraint_name="uq_users_username")

        assert (
            constraint_name(IntegrityError("INSERT", {}, orig))
            == "uq_users_username"
        )

    def test_unknown(self):
        assert constraint_name(IntegrityError("INSERT", {}, Exception())) is None


class TestRetryRead:
    """멱등 조회 재시도"""

    @pytest.mark.asyncio
    async def test_returns_first_success(self):
        operation = AsyncMock(return_value="ok")

        assert await retry_read(operation, retries=2) == "ok"
        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_retries_transient_failure(self):
        """일시적 장애 후 성공하면 결과 반환, 세션 롤백"""
        operation = AsyncMock(side_effect=[_operational_error(), "ok"])
        session = MagicMock()
        session.rollback = AsyncMock()

        assert await retry_read(operation, session=session, retries=2) == "ok"
        assert operation.await_count == 2
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_unavailable(self):
        """재시도를 모두 소진하면 UnavailableException"""
        operation = AsyncMock(side_effect=_operational_error())

        with pytest.raises(UnavailableException):
            await retry_read(operation, retries=2)

        assert operation.await_count == 3

    @pytest.mark.asyncio
    async def test_non_transient_error_propagates(self):
        """일시적이지 않은 오류는 재시도 없이 전파"""
        error = ProgrammingError("SELECT", {}, Exception("syntax"))
        operation = AsyncMock(side_effect=error)

        with pytest.raises(ProgrammingError):
            await retry_read(operation, retries=2)

        operation.assert_awaited_once()


class TestPingDatabase:
    """헬스 체크용 연결 확인"""

    @pytest.mark.asyncio
    async def test_ok(self):
        session = MagicMock()
        session.execute = AsyncMock()

        assert await ping_database(session) is True

    @pytest.mark.asyncio
    async def test_failure_invalidates_connection(self):
        session = MagicMock()
        session.execute = AsyncMock(side_effect=_operational_error())
        session.invalidate = AsyncMock()

        assert await ping_database(session) is False
        session.invalidate.assert_awaited_once()
