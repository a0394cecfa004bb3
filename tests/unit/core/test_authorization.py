"""권한 판단 단위 테스트"""

from unittest.mock import AsyncMock

import pytest

from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.core.security import (
    Identity,
    Role,
    can_mutate,
    ensure_can_mutate,
    ensure_owner_or_admin,
)
from app.domains.items.exceptions import ItemForbiddenException

OWNER = Identity(user_id=1)
OTHER = Identity(user_id=2)
ADMIN = Identity(user_id=3, role=Role.ADMIN)


class TestCanMutate:
    """can_mutate 테스트"""

    def test_owner(self):
        assert can_mutate(OWNER, 1)

    def test_other_user(self):
        assert not can_mutate(OTHER, 1)

    def test_anonymous(self):
        assert not can_mutate(None, 1)

    def test_admin_without_override(self):
        """관리자라도 허용되지 않은 작업은 거부"""
        assert not can_mutate(ADMIN, 1)

    def test_admin_with_override(self):
        assert can_mutate(ADMIN, 1, allow_admin=True)

    def test_override_does_not_help_regular_user(self):
        assert not can_mutate(OTHER, 1, allow_admin=True)


class TestEnsureCanMutate:
    """ensure_can_mutate 테스트"""

    def test_returns_identity(self):
        assert ensure_can_mutate(OWNER, 1) is OWNER

    def test_anonymous_is_unauthorized(self):
        with pytest.raises(UnauthorizedException):
            ensure_can_mutate(None, 1)

    def test_default_forbidden(self):
        with pytest.raises(ForbiddenException):
            ensure_can_mutate(OTHER, 1)

    def test_domain_forbidden(self):
        """도메인 예외로 대체 가능"""
        with pytest.raises(ItemForbiddenException):
            ensure_can_mutate(
                OTHER, 1, forbidden=ItemForbiddenException("vintage-lamp")
            )


class TestEnsureOwnerOrAdmin:
    """관리자 우회 작업의 저장된 역할 재확인"""

    @pytest.mark.asyncio
    async def test_owner_skips_role_lookup(self):
        load_role = AsyncMock()

        assert await ensure_owner_or_admin(OWNER, 1, load_role=load_role) is OWNER
        load_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_current_admin_allowed(self):
        load_role = AsyncMock(return_value="admin")

        assert await ensure_owner_or_admin(ADMIN, 1, load_role=load_role) is ADMIN
        load_role.assert_awaited_once_with(ADMIN.user_id)

    @pytest.mark.asyncio
    async def test_demoted_admin_forbidden(self):
        """토큰은 관리자지만 저장된 역할이 user로 바뀐 경우"""
        load_role = AsyncMock(return_value="user")

        with pytest.raises(ItemForbiddenException):
            await ensure_owner_or_admin(
                ADMIN,
                1,
                load_role=load_role,
                forbidden=ItemForbiddenException("vintage-lamp"),
            )

    @pytest.mark.asyncio
    async def test_deleted_admin_forbidden(self):
        with pytest.raises(ForbiddenException):
            await ensure_owner_or_admin(
                ADMIN, 1, load_role=AsyncMock(return_value=None)
            )

    @pytest.mark.asyncio
    async def test_regular_user_skips_role_lookup(self):
        load_role = AsyncMock()

        with pytest.raises(ForbiddenException):
            await ensure_owner_or_admin(OTHER, 1, load_role=load_role)
        load_role.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_anonymous_is_unauthorized(self):
        with pytest.raises(UnauthorizedException):
            await ensure_owner_or_admin(None, 1, load_role=AsyncMock())
