"""Comments 도메인 리포지토리"""

from typing import Literal, Optional, Sequence, cast

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.comments.models import Comment
from app.domains.items.models import Item


class CommentRepository:
    """댓글 리포지토리"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, comment_id: int) -> Optional[Comment]:
        """ID로 댓글 조회"""
        result = await self.session.execute(
            select(Comment).where(Comment.id == comment_id)
        )
        return cast(Optional[Comment], result.scalar_one_or_none())

    async def list_by_item(
        self, item_id: int, order: Literal["asc", "desc"] = "asc"
    ) -> Sequence[Comment]:
        """상품의 댓글 목록 (생성 시각 순)"""
        if order == "desc":
            ordering = (Comment.created_at.desc(), Comment.id.desc())
        else:
            ordering = (Comment.created_at.asc(), Comment.id.asc())

        result = await self.session.execute(
            select(Comment).where(Comment.item_id == item_id).order_by(*ordering)
        )
        return cast(Sequence[Comment], result.scalars().all())

    async def list_all(
        self, skip: int = 0, limit: int = 20
    ) -> Sequence[tuple[Comment, str]]:
        """전체 댓글 목록 (최신순, 상품 slug 포함)"""
        result = await self.session.execute(
            select(Comment, Item.slug)
            .join(Item, Comment.item_id == Item.id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return cast(Sequence[tuple[Comment, str]], result.tuples().all())

    async def count_all(self) -> int:
        """전체 댓글 수"""
        result = await self.session.execute(select(func.count(Comment.id)))
        return int(result.scalar_one())

    async def create(self, comment: Comment) -> Comment:
        """댓글 생성"""
        self.session.add(comment)
        await self.session.flush()
        await self.session.refresh(comment)
        return comment

    async def delete(self, comment: Comment) -> None:
        """댓글 삭제"""
        await self.session.delete(comment)
        await self.session.flush()
