"""Items 도메인 서비스

상품 등록/수정/삭제, 찜, 목록/피드 조회를 다루는 비즈니스 로직 계층입니다.
"""

from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.database import constraint_name, retry_read
from app.core.logging import get_logger
from app.core.middlewares.context import get_request_id
from app.core.notifications import EventName, EventNotifier, get_notifier
from app.core.security import Identity, ensure_can_mutate, ensure_owner_or_admin
from app.domains.items.exceptions import (
    ItemForbiddenException,
    ItemNotFoundException,
    SlugConflictException,
)
from app.domains.items.models import Item
from app.domains.items.repository import ItemFilters, ItemRepository
from app.domains.items.schemas import ItemCreate, ItemUpdate, ItemView, to_item_view
from app.domains.items.slug import slugify, with_suffix
from app.domains.users.repository import UserRepository
from app.domains.users.schemas import to_profile_view

logger = get_logger(__name__)

SLUG_CONSTRAINT = "uq_items_slug"


class ItemService:
    """상품 서비스 (Catalog Graph)"""

    def __init__(
        self,
        session: AsyncSession,
        notifier: EventNotifier | None = None,
        settings: Settings | None = None,
    ):
        self.session = session
        self.repository = ItemRepository(session)
        self.user_repository = UserRepository(session)
        self.notifier = notifier or get_notifier()
        self.settings = settings or get_settings()

    async def create_item(self, identity: Identity, data: ItemCreate) -> ItemView:
        """상품 등록

        제목에서 slug를 만들고, 이미 사용 중이면 무작위 접미사를 붙입니다.
        동시 등록으로 커밋 시점에 유니크 위반이 나면 새 접미사로 재시도합니다.

        Args:
            identity: 판매자가 될 호출자
            data: 상품 데이터

        Returns:
            판매자 기준 상품 뷰

        Raises:
            SlugConflictException: 재시도 횟수를 넘긴 경우
        """
        suffix_length = self.settings.slug_suffix_length
        max_attempts = self.settings.slug_max_retries

        base = slugify(data.title, token_length=suffix_length)
        candidate = base
        if await self.repository.slug_exists(candidate):
            candidate = with_suffix(base, suffix_length)

        item: Optional[Item] = None
        for attempt in range(1, max_attempts + 1):
            new_item = Item(
                slug=candidate,
                title=data.title,
                description=data.description,
                image=str(data.image) if data.image else None,
                tag_list=list(data.tag_list),
                seller_id=identity.user_id,
            )
            try:
                async with self.session.begin_nested():
                    item = await self.repository.create(new_item)
                break
            except IntegrityError as e:
                if constraint_name(e) != SLUG_CONSTRAINT:
                    raise
                logger.warning(
                    f"Slug collision on attempt {attempt}",
                    extra={"request_id": get_request_id(), "slug": candidate},
                )
                candidate = with_suffix(base, suffix_length)

        if item is None:
            raise SlugConflictException(slug=base, attempts=max_attempts)

        seller = await self.user_repository.get_by_id(identity.user_id)
        view = to_item_view(item, to_profile_view(seller), favorited=False)

        logger.info(
            "Item created",
            extra={
                "request_id": get_request_id(),
                "user_id": identity.user_id,
                "item_id": item.id,
                "slug": item.slug,
            },
        )
        self.notifier.notify_after_commit(
            self.session, EventName.ITEM_CREATED, view
        )
        return view

    async def get_item(
        self, slug: str, viewer: Optional[Identity] = None
    ) -> ItemView:
        """조회자 기준 상품 조회

        Raises:
            ItemNotFoundException: 상품이 없는 경우
        """
        item = await self._get_by_slug(slug)
        views = await self._to_views([item], viewer)
        return views[0]

    async def update_item(
        self, identity: Identity, slug: str, data: ItemUpdate
    ) -> ItemView:
        """상품 수정 (판매자만 가능, slug는 유지)

        Raises:
            ItemNotFoundException: 상품이 없는 경우
            ItemForbiddenException: 판매자가 아닌 경우
        """
        item = await self._get_by_slug(slug)
        ensure_can_mutate(
            identity, item.seller_id, forbidden=ItemForbiddenException(slug)
        )

        fields = data.model_fields_set
        if "title" in fields and data.title is not None:
            item.title = data.title.strip()
        if "description" in fields and data.description is not None:
            item.description = data.description
        if "image" in fields:
            item.image = str(data.image) if data.image else None
        if "tag_list" in fields and data.tag_list is not None:
            item.tag_list = list(data.tag_list)

        item = await self.repository.update(item)

        logger.info(
            "Item updated",
            extra={
                "request_id": get_request_id(),
                "user_id": identity.user_id,
                "item_id": item.id,
                "slug": item.slug,
            },
        )
        views = await self._to_views([item], identity)
        return views[0]

    async def delete_item(self, identity: Identity, slug: str) -> int:
        """상품 삭제 (판매자 또는 관리자)

        댓글도 같은 트랜잭션에서 삭제됩니다.

        Returns:
            함께 삭제된 댓글 수

        Raises:
            ItemNotFoundException: 상품이 없는 경우
            ItemForbiddenException: 권한이 없는 경우
        """
        item = await self._get_by_slug(slug)
        await ensure_owner_or_admin(
            identity,
            item.seller_id,
            load_role=self.user_repository.get_role,
            forbidden=ItemForbiddenException(slug),
        )

        item_id = item.id
        removed_comments = await self.repository.delete_with_comments(item)

        logger.info(
            f"Item deleted with {removed_comments} comments",
            extra={
                "request_id": get_request_id(),
                "user_id": identity.user_id,
                "item_id": item_id,
                "slug": slug,
            },
        )
        return removed_comments

    async def favorite(self, identity: Identity, slug: str) -> ItemView:
        """찜하기 (이미 찜한 경우 아무 것도 하지 않음)

        찜 관계 추가와 찜 수 증가는 하나의 SAVEPOINT 안에서 함께 반영됩니다.
        """
        item = await self._get_by_slug(slug)

        async with self.session.begin_nested():
            added = await self.repository.add_favorite(identity.user_id, item.id)
            if added:
                await self.repository.adjust_favorites_count(item.id, 1)

        await self.session.refresh(item)
        logger.info(
            "Item favorited",
            extra={
                "request_id": get_request_id(),
                "user_id": identity.user_id,
                "item_id": item.id,
                "action": "favorited" if added else "noop",
            },
        )
        views = await self._to_views([item], identity, favorited={item.id})
        return views[0]

    async def unfavorite(self, identity: Identity, slug: str) -> ItemView:
        """찜 취소 (찜하지 않은 경우 아무 것도 하지 않음)"""
        item = await self._get_by_slug(slug)

        async with self.session.begin_nested():
            removed = await self.repository.remove_favorite(
                identity.user_id, item.id
            )
            if removed:
                await self.repository.adjust_favorites_count(item.id, -1)

        await self.session.refresh(item)
        logger.info(
            "Item unfavorited",
            extra={
                "request_id": get_request_id(),
                "user_id": identity.user_id,
                "item_id": item.id,
                "action": "unfavorited" if removed else "noop",
            },
        )
        views = await self._to_views([item], identity, favorited=set())
        return views[0]

    async def list_items(
        self,
        filters: Optional[ItemFilters] = None,
        offset: int = 0,
        limit: int = 20,
        viewer: Optional[Identity] = None,
    ) -> tuple[list[ItemView], int]:
        """상품 목록 조회 (최신순)

        Returns:
            (조회자 기준 상품 뷰 목록, 전체 개수)
        """

        async def load():
            items = await self.repository.get_list(
                skip=offset, limit=limit, filters=filters
            )
            return items, await self.repository.count(filters)

        # 목록과 개수를 한 번에 재시도 (롤백 후 이전 결과는 만료됨)
        items, total = await retry_read(load, session=self.session)
        return await self._to_views(items, viewer), total

    async def feed(
        self, identity: Identity, offset: int = 0, limit: int = 20
    ) -> tuple[list[ItemView], int]:
        """팔로우 하는 판매자의 상품 목록"""
        return await self.list_items(
            filters=ItemFilters(followed_by=identity.user_id),
            offset=offset,
            limit=limit,
            viewer=identity,
        )

    async def list_tags(self) -> list[str]:
        """사용 중인 태그 목록"""
        return await retry_read(
            self.repository.get_all_tags, session=self.session
        )

    async def _get_by_slug(self, slug: str) -> Item:
        item = await retry_read(
            lambda: self.repository.get_by_slug(slug), session=self.session
        )
        if not item:
            raise ItemNotFoundException(slug)
        return item

    async def _to_views(
        self,
        items: Sequence[Item],
        viewer: Optional[Identity],
        favorited: Optional[set[int]] = None,
    ) -> list[ItemView]:
        """조회자 기준 뷰로 일괄 변환 (판매자/팔로우/찜 여부를 한 번에 조회)"""
        if not items:
            return []

        seller_ids = {item.seller_id for item in items}
        sellers = await self.user_repository.get_many(seller_ids)

        following: set[int] = set()
        if viewer is not None:
            following = await self.user_repository.get_followed_among(
                viewer.user_id, seller_ids - {viewer.user_id}
            )
            if favorited is None:
                favorited = await self.repository.get_favorited_among(
                    viewer.user_id, [item.id for item in items]
                )
        favorited = favorited or set()

        return [
            to_item_view(
                item,
                to_profile_view(
                    sellers[item.seller_id],
                    following=item.seller_id in following,
                ),
                favorited=item.id in favorited,
            )
            for item in items
        ]
