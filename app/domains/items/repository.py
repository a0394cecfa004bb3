"""Items 도메인 리포지토리

상품 CRUD, 필터링, 찜 관계를 위한 데이터 접근 계층입니다.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, cast

from sqlalchemy import Select, and_, delete, exists, func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.comments.models import Comment
from app.domains.items.models import Favorite, Item
from app.domains.users.models import Follow, User


@dataclass
class ItemFilters:
    """상품 목록 조회 필터

    모든 필드는 선택적이며, 제공된 필터만 적용됩니다.
    """

    tag: Optional[str] = None
    seller: Optional[str] = None  # 판매자 username
    favorited: Optional[str] = None  # 찜한 사용자 username
    followed_by: Optional[int] = None  # 피드: 이 사용자가 팔로우 하는 판매자만


class ItemRepository:
    """상품 리포지토리"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_slug(self, slug: str) -> Optional[Item]:
        """slug로 상품 조회"""
        result = await self.session.execute(
            select(Item).where(Item.slug == slug)
        )
        return cast(Optional[Item], result.scalar_one_or_none())

    async def slug_exists(self, slug: str) -> bool:
        """slug 사용 여부"""
        result = await self.session.execute(
            select(exists().where(Item.slug == slug))
        )
        return bool(result.scalar())

    def _apply_filters(
        self, query: Select, filters: Optional[ItemFilters]
    ) -> Select:
        if not filters:
            return query

        if filters.tag:
            query = query.where(Item.tag_list.contains([filters.tag]))

        if filters.seller:
            seller_ids = select(User.id).where(User.username == filters.seller)
            query = query.where(Item.seller_id.in_(seller_ids))

        if filters.favorited:
            favorited_ids = (
                select(Favorite.item_id)
                .join(User, Favorite.user_id == User.id)
                .where(User.username == filters.favorited)
            )
            query = query.where(Item.id.in_(favorited_ids))

        if filters.followed_by is not None:
            followee_ids = select(Follow.followee_id).where(
                Follow.follower_id == filters.followed_by
            )
            query = query.where(Item.seller_id.in_(followee_ids))

        return query

    async def get_list(
        self,
        skip: int = 0,
        limit: int = 20,
        filters: Optional[ItemFilters] = None,
    ) -> Sequence[Item]:
        """상품 목록 조회 (최신순)

        Args:
            skip: 건너뛸 레코드 수
            limit: 조회할 최대 레코드 수
            filters: 필터 옵션

        Returns:
            상품 목록
        """
        query = self._apply_filters(select(Item), filters)

        # 생성 시각이 같으면 ID로 순서 고정
        query = (
            query.order_by(Item.created_at.desc(), Item.id.desc())
            .offset(skip)
            .limit(limit)
        )

        result = await self.session.execute(query)
        return cast(Sequence[Item], result.scalars().all())

    async def count(self, filters: Optional[ItemFilters] = None) -> int:
        """상품 수 조회 (get_list와 같은 필터)"""
        query = self._apply_filters(select(func.count(Item.id)), filters)
        result = await self.session.execute(query)
        return int(result.scalar_one())

    async def create(self, item: Item) -> Item:
        """상품 생성"""
        self.session.add(item)
        await self.session.flush()
        await self.session.refresh(item)
        return item

    async def update(self, item: Item) -> Item:
        """상품 수정"""
        await self.session.flush()
        await self.session.refresh(item)
        return item

    async def delete_with_comments(self, item: Item) -> int:
        """상품과 해당 댓글을 함께 삭제

        Returns:
            삭제된 댓글 수
        """
        result = await self.session.execute(
            delete(Comment).where(Comment.item_id == item.id)
        )
        await self.session.delete(item)
        await self.session.flush()
        return int(result.rowcount)

    async def add_favorite(self, user_id: int, item_id: int) -> bool:
        """찜 추가 (이미 있으면 무시)

        Returns:
            새로 추가되었으면 True
        """
        stmt = (
            insert(Favorite)
            .values(user_id=user_id, item_id=item_id)
            .on_conflict_do_nothing(
                index_elements=[Favorite.user_id, Favorite.item_id]
            )
            .returning(Favorite.item_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def remove_favorite(self, user_id: int, item_id: int) -> bool:
        """찜 삭제 (없으면 무시)

        Returns:
            실제로 삭제되었으면 True
        """
        stmt = (
            delete(Favorite)
            .where(
                and_(Favorite.user_id == user_id, Favorite.item_id == item_id)
            )
            .returning(Favorite.item_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def adjust_favorites_count(self, item_id: int, delta: int) -> int:
        """찜 수를 원자적으로 증감 (읽고 쓰지 않고 DB에서 계산)

        Returns:
            변경 후 찜 수
        """
        stmt = (
            update(Item)
            .where(Item.id == item_id)
            .values(favorites_count=Item.favorites_count + delta)
            .returning(Item.favorites_count)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def get_favorited_among(
        self, user_id: int, item_ids: Iterable[int]
    ) -> set[int]:
        """후보 상품 중 user가 찜한 상품 ID 집합"""
        ids = set(item_ids)
        if not ids:
            return set()
        result = await self.session.execute(
            select(Favorite.item_id).where(
                and_(Favorite.user_id == user_id, Favorite.item_id.in_(ids))
            )
        )
        return set(result.scalars().all())

    async def get_all_tags(self) -> list[str]:
        """사용 중인 태그 목록 (중복 제거, 정렬)"""
        tag = func.unnest(Item.tag_list).label("tag")
        subquery = select(tag).subquery()
        result = await self.session.execute(
            select(subquery.c.tag).distinct().order_by(subquery.c.tag)
        )
        return [str(t) for t in result.scalars().all()]
