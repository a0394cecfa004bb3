"""Items 도메인 라우터

상품(/items), 피드(/items/feed), 찜(/items/{slug}/favorite), 태그(/tags) 엔드포인트입니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_identity, get_optional_identity
from app.core.schemas import (
    APIResponse,
    ListAPIResponse,
    create_list_response,
    create_response,
    error_responses,
)
from app.core.security import Identity
from app.core.utils import PageParams
from app.domains.items.repository import ItemFilters
from app.domains.items.schemas import (
    ItemCreate,
    ItemDeleteResponse,
    ItemUpdate,
    ItemView,
    TagListResponse,
)
from app.domains.items.service import ItemService

router = APIRouter()
tags_router = APIRouter()


def get_item_service(session: AsyncSession = Depends(get_db)) -> ItemService:
    """ItemService 의존성"""
    return ItemService(session)


@router.get("", response_model=ListAPIResponse[ItemView])
async def list_items(
    page_params: PageParams = Depends(),
    tag: Optional[str] = Query(None, description="태그 필터"),
    seller: Optional[str] = Query(None, description="판매자 username"),
    favorited: Optional[str] = Query(None, description="찜한 사용자 username"),
    identity: Optional[Identity] = Depends(get_optional_identity),
    service: ItemService = Depends(get_item_service),
):
    """상품 목록 조회"""
    items, total = await service.list_items(
        filters=ItemFilters(tag=tag, seller=seller, favorited=favorited),
        offset=page_params.offset,
        limit=page_params.limit,
        viewer=identity,
    )
    return create_list_response(
        data=items,
        total=total,
        offset=page_params.offset,
        limit=page_params.limit,
        message="상품 목록을 조회했습니다.",
    )


# /{slug} 보다 먼저 등록해야 함
@router.get(
    "/feed",
    response_model=ListAPIResponse[ItemView],
    responses=error_responses(401),
)
async def feed(
    page_params: PageParams = Depends(),
    identity: Identity = Depends(get_current_identity),
    service: ItemService = Depends(get_item_service),
):
    """팔로우 하는 판매자의 상품 피드"""
    items, total = await service.feed(
        identity, offset=page_params.offset, limit=page_params.limit
    )
    return create_list_response(
        data=items,
        total=total,
        offset=page_params.offset,
        limit=page_params.limit,
        message="피드를 조회했습니다.",
    )


@router.post(
    "",
    response_model=APIResponse[ItemView],
    status_code=201,
    responses=error_responses(401, 409, 422),
)
async def create_item(
    data: ItemCreate,
    identity: Identity = Depends(get_current_identity),
    service: ItemService = Depends(get_item_service),
):
    """상품 등록"""
    item = await service.create_item(identity, data)
    return create_response(data=item, message="상품이 등록되었습니다.")


@router.get(
    "/{slug}", response_model=APIResponse[ItemView], responses=error_responses(404)
)
async def get_item(
    slug: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    service: ItemService = Depends(get_item_service),
):
    """상품 조회"""
    item = await service.get_item(slug, viewer=identity)
    return create_response(data=item, message="상품을 조회했습니다.")


@router.put(
    "/{slug}",
    response_model=APIResponse[ItemView],
    responses=error_responses(401, 403, 404, 422),
)
async def update_item(
    slug: str,
    data: ItemUpdate,
    identity: Identity = Depends(get_current_identity),
    service: ItemService = Depends(get_item_service),
):
    """상품 수정"""
    item = await service.update_item(identity, slug, data)
    return create_response(data=item, message="상품이 수정되었습니다.")


@router.delete(
    "/{slug}",
    response_model=APIResponse[ItemDeleteResponse],
    responses=error_responses(401, 403, 404),
)
async def delete_item(
    slug: str,
    identity: Identity = Depends(get_current_identity),
    service: ItemService = Depends(get_item_service),
):
    """상품 삭제"""
    deleted_comments = await service.delete_item(identity, slug)
    return create_response(
        data=ItemDeleteResponse(slug=slug, deleted_comments=deleted_comments),
        message="상품이 삭제되었습니다.",
    )


@router.post(
    "/{slug}/favorite",
    response_model=APIResponse[ItemView],
    responses=error_responses(401, 404),
)
async def favorite_item(
    slug: str,
    identity: Identity = Depends(get_current_identity),
    service: ItemService = Depends(get_item_service),
):
    """찜하기"""
    item = await service.favorite(identity, slug)
    return create_response(data=item, message="찜했습니다.")


@router.delete(
    "/{slug}/favorite",
    response_model=APIResponse[ItemView],
    responses=error_responses(401, 404),
)
async def unfavorite_item(
    slug: str,
    identity: Identity = Depends(get_current_identity),
    service: ItemService = Depends(get_item_service),
):
    """찜 취소"""
    item = await service.unfavorite(identity, slug)
    return create_response(data=item, message="찜을 취소했습니다.")


@tags_router.get("", response_model=APIResponse[TagListResponse])
async def list_tags(service: ItemService = Depends(get_item_service)):
    """사용 중인 태그 목록"""
    tags = await service.list_tags()
    return create_response(
        data=TagListResponse(tags=tags), message="태그 목록을 조회했습니다."
    )
