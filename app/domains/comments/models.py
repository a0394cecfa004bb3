"""Comments 도메인 모델 정의"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Comment(Base):
    """댓글 모델

    작성자(author)만 삭제할 수 있으며, 상품이 삭제되면 함께 삭제됩니다.
    """

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="댓글 ID",
    )
    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="본문",
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="작성자 ID",
    )
    item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
        comment="상품 ID",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="생성 일시",
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
        comment="수정 일시",
    )

    __table_args__ = (
        Index("ix_comments_item_id_created_at", "item_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Comment(id={self.id}, item_id={self.item_id}, "
            f"author_id={self.author_id})>"
        )
