"""Items 도메인 모델 정의

상품(Item)과 찜(Favorite) 관계를 정의합니다.
favorites_count는 favorites 테이블의 해당 상품 행 수와 항상 같아야 합니다.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    ARRAY,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Item(Base):
    """상품 모델

    slug는 전역 유일하며, seller만 수정할 수 있습니다.
    favorites_count는 찜/찜 해제의 부수 효과로만 변경됩니다.
    """

    __tablename__ = "items"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="상품 ID",
    )
    slug: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        comment="URL 식별자 (제목 기반, 전역 유일)",
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="제목",
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="설명",
    )
    image: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="이미지 URL",
    )
    tag_list: Mapped[list[str]] = mapped_column(
        ARRAY(String),
        nullable=False,
        default=list,
        server_default=text("'{}'"),
        comment="태그 목록 (순서 유지, 중복 없음)",
    )
    seller_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        comment="판매자 사용자 ID",
    )
    favorites_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        server_default="0",
        comment="찜 수 (favorites 행 수와 동일)",
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
        CheckConstraint(
            "favorites_count >= 0", name="favorites_count_non_negative"
        ),
        Index("ix_items_seller_id", "seller_id"),
        Index("ix_items_created_at", "created_at"),
        Index("ix_items_tag_list", "tag_list", postgresql_using="gin"),
    )

    def __repr__(self) -> str:
        return (
            f"<Item(id={self.id}, slug={self.slug}, "
            f"seller_id={self.seller_id}, "
            f"favorites_count={self.favorites_count})>"
        )


class Favorite(Base):
    """찜 관계 (user → item)"""

    __tablename__ = "favorites"

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        comment="사용자 ID",
    )
    item_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("items.id", ondelete="CASCADE"),
        primary_key=True,
        comment="상품 ID",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="생성 일시",
    )

    __table_args__ = (Index("ix_favorites_item_id", "item_id"),)

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id}, item_id={self.item_id})>"
