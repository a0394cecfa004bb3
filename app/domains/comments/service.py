"""Comments 도메인 서비스

댓글 작성/조회/삭제와 관리용 댓글 조회/삭제를 다루는 비즈니스 로직 계층입니다.
"""

from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.database import retry_read
from app.core.logging import get_logger
from app.core.middlewares.context import get_request_id
from app.core.security import Identity, ensure_owner_or_admin
from app.domains.comments.exceptions import (
    CommentForbiddenException,
    CommentNotFoundException,
)
from app.domains.comments.models import Comment
from app.domains.comments.repository import CommentRepository
from app.domains.comments.schemas import (
    CommentCreate,
    CommentView,
    ModerationCommentView,
    to_comment_view,
)
from app.domains.items.exceptions import ItemNotFoundException
from app.domains.items.models import Item
from app.domains.items.repository import ItemRepository
from app.domains.users.repository import UserRepository
from app.domains.users.schemas import to_profile_view

logger = get_logger(__name__)


class CommentService:
    """댓글 서비스 (Discussion Graph)"""

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.repository = CommentRepository(session)
        self.item_repository = ItemRepository(session)
        self.user_repository = UserRepository(session)
        self.settings = settings or get_settings()

    async def add_comment(
        self, identity: Identity, slug: str, data: CommentCreate
    ) -> CommentView:
        """댓글 작성

        Raises:
            ItemNotFoundException: 상품이 없는 경우
        """
        item = await self._get_item(slug)

        comment = await self.repository.create(
            Comment(body=data.body, author_id=identity.user_id, item_id=item.id)
        )

        logger.info(
            "Comment created",
            extra={
                "request_id": get_request_id(),
                "user_id": identity.user_id,
                "item_id": item.id,
                "comment_id": comment.id,
            },
        )
        views = await self._to_views([comment], identity)
        return views[0]

    async def list_comments(
        self, slug: str, viewer: Optional[Identity] = None
    ) -> list[CommentView]:
        """상품의 댓글 목록 (설정된 순서, 기본 오래된 순)

        Raises:
            ItemNotFoundException: 상품이 없는 경우
        """
        item_id = await self._get_item_id(slug)
        order = self.settings.comments_order
        comments = await retry_read(
            lambda: self.repository.list_by_item(item_id, order=order),
            session=self.session,
        )
        return await self._to_views(comments, viewer)

    async def delete_comment(
        self, identity: Identity, slug: str, comment_id: int
    ) -> None:
        """댓글 삭제 (작성자 또는 관리자)

        Raises:
            ItemNotFoundException: 상품이 없는 경우
            CommentNotFoundException: 댓글이 없거나 다른 상품의 댓글인 경우
            CommentForbiddenException: 권한이 없는 경우
        """
        item_id = await self._get_item_id(slug)
        comment = await self._get_comment(comment_id)
        if comment.item_id != item_id:
            raise CommentNotFoundException(comment_id)

        await ensure_owner_or_admin(
            identity,
            comment.author_id,
            load_role=self.user_repository.get_role,
            forbidden=CommentForbiddenException(comment_id),
        )

        await self.repository.delete(comment)
        logger.info(
            "Comment deleted",
            extra={
                "request_id": get_request_id(),
                "user_id": identity.user_id,
                "item_id": item_id,
                "comment_id": comment_id,
            },
        )

    async def list_all_comments(
        self, offset: int = 0, limit: int = 20
    ) -> tuple[list[ModerationCommentView], int]:
        """전체 댓글 목록 (관리용, 최신순)"""

        async def load():
            rows = await self.repository.list_all(skip=offset, limit=limit)
            return rows, await self.repository.count_all()

        # 목록과 개수를 한 번에 재시도 (롤백 후 이전 결과는 만료됨)
        rows, total = await retry_read(load, session=self.session)

        views = await self._to_views([comment for comment, _ in rows], None)
        return [
            ModerationCommentView(**view.model_dump(), item_slug=item_slug)
            for view, (_, item_slug) in zip(views, rows)
        ], total

    async def moderate_delete(self, comment_id: int) -> None:
        """관리용 댓글 삭제 (소유자 확인 없음, 내부 API Key로 보호)

        Raises:
            CommentNotFoundException: 댓글이 없는 경우
        """
        comment = await self._get_comment(comment_id)
        await self.repository.delete(comment)
        logger.info(
            "Comment removed by moderation",
            extra={
                "request_id": get_request_id(),
                "comment_id": comment_id,
                "action": "moderation",
            },
        )

    async def _get_item(self, slug: str) -> Item:
        item = await retry_read(
            lambda: self.item_repository.get_by_slug(slug),
            session=self.session,
        )
        if not item:
            raise ItemNotFoundException(slug)
        return item

    async def _get_item_id(self, slug: str) -> int:
        """상품 ID만 필요할 때 (이후 재시도 롤백에 영향받지 않음)"""
        item = await self._get_item(slug)
        return item.id

    async def _get_comment(self, comment_id: int) -> Comment:
        comment = await retry_read(
            lambda: self.repository.get_by_id(comment_id),
            session=self.session,
        )
        if not comment:
            raise CommentNotFoundException(comment_id)
        return comment

    async def _to_views(
        self, comments: Sequence[Comment], viewer: Optional[Identity]
    ) -> list[CommentView]:
        """작성자 프로필을 붙여 일괄 변환"""
        if not comments:
            return []

        author_ids = {comment.author_id for comment in comments}
        authors = await self.user_repository.get_many(author_ids)

        following: set[int] = set()
        if viewer is not None:
            following = await self.user_repository.get_followed_among(
                viewer.user_id, author_ids - {viewer.user_id}
            )

        return [
            to_comment_view(
                comment,
                to_profile_view(
                    authors[comment.author_id],
                    following=comment.author_id in following,
                ),
            )
            for comment in comments
        ]
