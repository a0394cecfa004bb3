"""Comments 도메인 스키마 정의"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.domains.comments.models import Comment
from app.domains.users.schemas import ProfileView


class CommentCreate(BaseModel):
    """댓글 작성 요청 스키마"""

    body: str = Field(..., min_length=1, max_length=5000, description="본문")

    @field_validator("body")
    @classmethod
    def body_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("body must not be blank")
        return v


class CommentView(BaseModel):
    """조회자 기준 댓글 응답"""

    id: int
    body: str
    author: ProfileView
    created_at: datetime
    updated_at: Optional[datetime] = None


class ModerationCommentView(CommentView):
    """관리용 댓글 응답 (소속 상품 slug 포함)"""

    item_slug: str


class CommentDeleteResponse(BaseModel):
    """댓글 삭제 응답"""

    id: int


def to_comment_view(comment: Comment, author: ProfileView) -> CommentView:
    """Comment → 조회자 기준 댓글 투영"""
    return CommentView(
        id=comment.id,
        body=comment.body,
        author=author,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )
