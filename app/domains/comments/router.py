"""Comments 도메인 라우터

상품 댓글(/items/{slug}/comments)과 관리용 댓글(/admin/comments) 엔드포인트입니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import (
    get_current_identity,
    get_optional_identity,
    verify_internal_api_key,
)
from app.core.schemas import (
    APIResponse,
    ListAPIResponse,
    create_list_response,
    create_response,
    error_responses,
)
from app.core.security import Identity
from app.core.utils import PageParams
from app.domains.comments.schemas import (
    CommentCreate,
    CommentDeleteResponse,
    CommentView,
    ModerationCommentView,
)
from app.domains.comments.service import CommentService

router = APIRouter()
admin_router = APIRouter(
    dependencies=[Depends(verify_internal_api_key)],
    responses=error_responses(401),
)


def get_comment_service(
    session: AsyncSession = Depends(get_db),
) -> CommentService:
    """CommentService 의존성"""
    return CommentService(session)


@router.get(
    "",
    response_model=APIResponse[list[CommentView]],
    responses=error_responses(404),
)
async def list_comments(
    slug: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    service: CommentService = Depends(get_comment_service),
):
    """상품 댓글 목록"""
    comments = await service.list_comments(slug, viewer=identity)
    return create_response(data=comments, message="댓글 목록을 조회했습니다.")


@router.post(
    "",
    response_model=APIResponse[CommentView],
    status_code=201,
    responses=error_responses(401, 404, 422),
)
async def add_comment(
    slug: str,
    data: CommentCreate,
    identity: Identity = Depends(get_current_identity),
    service: CommentService = Depends(get_comment_service),
):
    """댓글 작성"""
    comment = await service.add_comment(identity, slug, data)
    return create_response(data=comment, message="댓글이 작성되었습니다.")


@router.delete(
    "/{comment_id}",
    response_model=APIResponse[CommentDeleteResponse],
    responses=error_responses(401, 403, 404),
)
async def delete_comment(
    slug: str,
    comment_id: int = Path(..., gt=0, description="댓글 ID"),
    identity: Identity = Depends(get_current_identity),
    service: CommentService = Depends(get_comment_service),
):
    """댓글 삭제"""
    await service.delete_comment(identity, slug, comment_id)
    return create_response(
        data=CommentDeleteResponse(id=comment_id),
        message="댓글이 삭제되었습니다.",
    )


@admin_router.get("", response_model=ListAPIResponse[ModerationCommentView])
async def list_all_comments(
    page_params: PageParams = Depends(),
    service: CommentService = Depends(get_comment_service),
):
    """전체 댓글 목록 (관리용)"""
    comments, total = await service.list_all_comments(
        offset=page_params.offset, limit=page_params.limit
    )
    return create_list_response(
        data=comments,
        total=total,
        offset=page_params.offset,
        limit=page_params.limit,
        message="전체 댓글 목록을 조회했습니다.",
    )


@admin_router.delete(
    "/{comment_id}",
    response_model=APIResponse[CommentDeleteResponse],
    responses=error_responses(404),
)
async def moderate_comment(
    comment_id: int = Path(..., gt=0, description="댓글 ID"),
    service: CommentService = Depends(get_comment_service),
):
    """댓글 삭제 (관리용)"""
    await service.moderate_delete(comment_id)
    return create_response(
        data=CommentDeleteResponse(id=comment_id),
        message="댓글이 삭제되었습니다.",
    )
