"""Items 도메인 스키마 정의"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, HttpUrl, field_validator

from app.domains.items.models import Item
from app.domains.users.schemas import ProfileView

MAX_TAGS = 20
MAX_TAG_LENGTH = 50


def normalize_tags(tags: list[str]) -> list[str]:
    """태그 정리: 앞뒤 공백 제거, 빈 값 제외, 순서 유지 중복 제거"""
    seen: set[str] = set()
    result = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result


def require_text(v: Optional[str], field: str) -> Optional[str]:
    """공백뿐인 문자열 거부 (None은 '수정하지 않음'이므로 통과)"""
    if v is not None and not v.strip():
        raise ValueError(f"{field} must not be blank")
    return v


class ItemCreate(BaseModel):
    """상품 등록 요청 스키마"""

    title: str = Field(..., min_length=1, max_length=255, description="제목")
    description: str = Field(
        ..., min_length=1, max_length=10000, description="설명"
    )
    image: Optional[HttpUrl] = Field(None, description="이미지 URL")
    tag_list: list[str] = Field(
        default_factory=list, max_length=MAX_TAGS, description="태그 목록"
    )

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        return require_text(v, "title").strip()

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        return require_text(v, "description")

    @field_validator("tag_list")
    @classmethod
    def clean_tags(cls, v: list[str]) -> list[str]:
        tags = normalize_tags(v)
        if any(len(tag) > MAX_TAG_LENGTH for tag in tags):
            raise ValueError(f"tag must be at most {MAX_TAG_LENGTH} characters")
        return tags


class ItemUpdate(BaseModel):
    """상품 수정 요청 스키마 (부분 수정, slug는 변경되지 않음)"""

    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=10000)
    image: Optional[HttpUrl] = None
    tag_list: Optional[list[str]] = Field(None, max_length=MAX_TAGS)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        v = require_text(v, "title")
        return v.strip() if v is not None else v

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return require_text(v, "description")

    @field_validator("tag_list")
    @classmethod
    def clean_tags(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        if v is None:
            return v
        tags = normalize_tags(v)
        if any(len(tag) > MAX_TAG_LENGTH for tag in tags):
            raise ValueError(f"tag must be at most {MAX_TAG_LENGTH} characters")
        return tags


class ItemView(BaseModel):
    """조회자 기준 상품 응답"""

    slug: str
    title: str
    description: str
    image: Optional[str] = None
    tag_list: list[str] = Field(default_factory=list)
    seller: ProfileView
    favorited: bool = False
    favorites_count: int = 0
    created_at: datetime
    updated_at: Optional[datetime] = None


class TagListResponse(BaseModel):
    """태그 목록 응답"""

    tags: list[str]


def to_item_view(
    item: Item, seller: ProfileView, favorited: bool = False
) -> ItemView:
    """Item → 조회자 기준 상품 투영

    Args:
        item: 상품
        seller: 조회자 기준 판매자 프로필
        favorited: 조회자가 찜했는지 여부 (익명이면 False)
    """
    return ItemView(
        slug=item.slug,
        title=item.title,
        description=item.description,
        image=item.image,
        tag_list=list(item.tag_list or []),
        seller=seller,
        favorited=favorited,
        favorites_count=item.favorites_count,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


class ItemDeleteResponse(BaseModel):
    """상품 삭제 응답"""

    slug: str
    deleted_comments: int = 0
