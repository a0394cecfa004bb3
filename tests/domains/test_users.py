"""Users 도메인 테스트 - 리포지토리 (PostgreSQL)"""

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.database import constraint_name
from app.domains.users.models import User
from app.domains.users.repository import UserRepository


async def _create_user(repository: UserRepository, username: str) -> User:
    return await repository.create(
        User(
            username=username,
            email=f"{username}@example.com",
            password_hash="hash",
            password_salt="salt",
        )
    )


class TestUserRepository:
    """UserRepository 테스트"""

    @pytest.mark.asyncio
    async def test_create_and_lookup(self, db_session):
        repository = UserRepository(db_session)
        user = await _create_user(repository, "alice")

        assert user.id is not None
        assert user.role == "user"
        assert (await repository.get_by_username("alice")).id == user.id
        assert (await repository.get_by_email("alice@example.com")).id == user.id
        assert await repository.get_by_username("ghost") is None

    @pytest.mark.asyncio
    async def test_taken_checks_exclude_self(self, db_session):
        repository = UserRepository(db_session)
        user = await _create_user(repository, "alice")

        assert await repository.username_taken("alice") is True
        assert await repository.username_taken("alice", exclude_user_id=user.id) is False
        assert await repository.email_taken("bob@example.com") is False

    @pytest.mark.asyncio
    async def test_unique_constraint_name(self, db_session):
        """유니크 위반은 제약 조건 이름으로 식별"""
        repository = UserRepository(db_session)
        await _create_user(repository, "alice")

        with pytest.raises(IntegrityError) as exc_info:
            async with db_session.begin_nested():
                await repository.create(
                    User(
                        username="alice",
                        email="other@example.com",
                        password_hash="hash",
                        password_salt="salt",
                    )
                )

        assert constraint_name(exc_info.value) == "uq_users_username"

    @pytest.mark.asyncio
    async def test_follow_edges(self, db_session):
        repository = UserRepository(db_session)
        alice = await _create_user(repository, "alice")
        bob = await _create_user(repository, "bob")
        carol = await _create_user(repository, "carol")

        assert await repository.add_follow(alice.id, bob.id) is True
        assert await repository.add_follow(alice.id, bob.id) is False
        assert await repository.is_following(alice.id, bob.id) is True
        assert await repository.is_following(bob.id, alice.id) is False
        assert await repository.get_followed_among(
            alice.id, {bob.id, carol.id}
        ) == {bob.id}

        assert await repository.remove_follow(alice.id, bob.id) is True
        assert await repository.remove_follow(alice.id, bob.id) is False

    @pytest.mark.asyncio
    async def test_self_follow_blocked_by_database(self, db_session):
        repository = UserRepository(db_session)
        alice = await _create_user(repository, "alice")

        with pytest.raises(IntegrityError):
            async with db_session.begin_nested():
                await repository.add_follow(alice.id, alice.id)

    @pytest.mark.asyncio
    async def test_get_many(self, db_session):
        repository = UserRepository(db_session)
        alice = await _create_user(repository, "alice")
        bob = await _create_user(repository, "bob")

        users = await repository.get_many([alice.id, bob.id, 999])

        assert set(users) == {alice.id, bob.id}
        assert await repository.get_many([]) == {}
