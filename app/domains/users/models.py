"""Users 도메인 모델 정의

사용자와 팔로우 관계(follows)를 독립 테이블로 관리합니다.
관계는 ID 쌍으로만 표현하며, 객체 간 순환 참조를 두지 않습니다.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.core.security import Role


class User(Base):
    """사용자 모델

    username, email은 전역 유일하며 (대소문자 구분),
    password_hash/password_salt는 CredentialStore를 통해서만 변경합니다.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="사용자 ID",
    )
    username: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        comment="사용자명 (영숫자, 대소문자 구분)",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        comment="이메일",
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="비밀번호 해시 (PBKDF2-SHA512)",
    )
    password_salt: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        comment="비밀번호 salt",
    )
    bio: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="소개",
    )
    image: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="프로필 이미지 URL",
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=Role.USER.value,
        server_default=Role.USER.value,
        comment="역할 (user/admin)",
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

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"


class Follow(Base):
    """팔로우 관계 (follower → followee)"""

    __tablename__ = "follows"

    follower_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        comment="팔로우 하는 사용자 ID",
    )
    followee_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
        comment="팔로우 대상 사용자 ID",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        comment="생성 일시",
    )

    __table_args__ = (
        CheckConstraint("follower_id <> followee_id", name="no_self_follow"),
    )

    def __repr__(self) -> str:
        return (
            f"<Follow(follower_id={self.follower_id}, "
            f"followee_id={self.followee_id})>"
        )
