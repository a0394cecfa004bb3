"""Users 도메인 리포지토리

사용자 및 팔로우 관계를 위한 데이터 접근 계층입니다.
"""

from typing import Iterable, Optional, Sequence, cast

from sqlalchemy import and_, delete, exists, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.users.models import Follow, User


class UserRepository:
    """사용자 리포지토리"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """ID로 사용자 조회"""
        result = await self.session.execute(
            select(User).where(User.id == user_id)
        )
        return cast(Optional[User], result.scalar_one_or_none())

    async def get_by_username(self, username: str) -> Optional[User]:
        """사용자명으로 조회 (대소문자 구분)"""
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return cast(Optional[User], result.scalar_one_or_none())

    async def get_by_email(self, email: str) -> Optional[User]:
        """이메일로 조회"""
        result = await self.session.execute(
            select(User).where(User.email == email)
        )
        return cast(Optional[User], result.scalar_one_or_none())

    async def get_role(self, user_id: int) -> Optional[str]:
        """저장된 역할 조회 (사용자가 없으면 None)"""
        result = await self.session.execute(
            select(User.role).where(User.id == user_id)
        )
        return cast(Optional[str], result.scalar_one_or_none())

    async def get_many(self, user_ids: Iterable[int]) -> dict[int, User]:
        """여러 사용자를 ID → User 딕셔너리로 조회"""
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.session.execute(
            select(User).where(User.id.in_(ids))
        )
        users = cast(Sequence[User], result.scalars().all())
        return {user.id: user for user in users}

    async def username_taken(
        self, username: str, exclude_user_id: Optional[int] = None
    ) -> bool:
        """사용자명 사용 여부 (자기 자신 제외 가능)"""
        query = select(exists().where(User.username == username))
        if exclude_user_id is not None:
            query = select(
                exists().where(
                    and_(User.username == username, User.id != exclude_user_id)
                )
            )
        result = await self.session.execute(query)
        return bool(result.scalar())

    async def email_taken(
        self, email: str, exclude_user_id: Optional[int] = None
    ) -> bool:
        """이메일 사용 여부 (자기 자신 제외 가능)"""
        query = select(exists().where(User.email == email))
        if exclude_user_id is not None:
            query = select(
                exists().where(
                    and_(User.email == email, User.id != exclude_user_id)
                )
            )
        result = await self.session.execute(query)
        return bool(result.scalar())

    async def create(self, user: User) -> User:
        """사용자 생성"""
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """사용자 수정"""
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def add_follow(self, follower_id: int, followee_id: int) -> bool:
        """팔로우 추가 (이미 있으면 무시)

        Returns:
            새로 추가되었으면 True
        """
        stmt = (
            insert(Follow)
            .values(follower_id=follower_id, followee_id=followee_id)
            .on_conflict_do_nothing(
                index_elements=[Follow.follower_id, Follow.followee_id]
            )
            .returning(Follow.follower_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def remove_follow(self, follower_id: int, followee_id: int) -> bool:
        """팔로우 삭제 (없으면 무시)

        Returns:
            실제로 삭제되었으면 True
        """
        stmt = (
            delete(Follow)
            .where(
                and_(
                    Follow.follower_id == follower_id,
                    Follow.followee_id == followee_id,
                )
            )
            .returning(Follow.follower_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def is_following(self, follower_id: int, followee_id: int) -> bool:
        """팔로우 여부"""
        result = await self.session.execute(
            select(
                exists().where(
                    and_(
                        Follow.follower_id == follower_id,
                        Follow.followee_id == followee_id,
                    )
                )
            )
        )
        return bool(result.scalar())

    async def get_followed_among(
        self, follower_id: int, candidate_ids: Iterable[int]
    ) -> set[int]:
        """후보 중 follower가 팔로우 하는 사용자 ID 집합"""
        ids = set(candidate_ids)
        if not ids:
            return set()
        result = await self.session.execute(
            select(Follow.followee_id).where(
                and_(
                    Follow.follower_id == follower_id,
                    Follow.followee_id.in_(ids),
                )
            )
        )
        return set(result.scalars().all())
