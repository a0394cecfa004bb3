"""공통 API 응답 스키마

모든 엔드포인트는 성공 시 APIResponse/ListAPIResponse, 실패 시 ErrorResponse
봉투로 응답합니다.

Usage::

    from app.core.schemas import create_response, create_list_response

    return create_response(data=item_view, message="상품을 조회했습니다.")
    return create_list_response(data=items, total=100, offset=0, limit=20)

Note:
    Generic 모델에는 classmethod 팩토리를 두지 않고 모듈 함수를 사용합니다.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")

DEFAULT_MESSAGE = "요청이 성공적으로 처리되었습니다."


class APIResponse(BaseModel, Generic[DataT]):
    """단일 데이터 API 응답"""

    success: bool = True
    message: str = DEFAULT_MESSAGE
    data: Optional[DataT] = None


class PageMeta(BaseModel):
    """offset/limit 페이지네이션 메타 정보"""

    total: int = Field(..., description="필터에 맞는 전체 아이템 수")
    offset: int = Field(..., description="건너뛴 아이템 수")
    limit: int = Field(..., description="요청한 최대 아이템 수")
    has_next: bool = Field(..., description="뒤에 아이템이 더 있는지 여부")
    has_prev: bool = Field(..., description="앞에 아이템이 있는지 여부")


class ListAPIResponse(BaseModel, Generic[DataT]):
    """목록 데이터 API 응답"""

    success: bool = True
    message: str = DEFAULT_MESSAGE
    data: list[DataT] = Field(default_factory=list)
    meta: PageMeta


def create_response(
    data: Optional[DataT] = None, message: str = DEFAULT_MESSAGE
) -> APIResponse[DataT]:
    """단일 데이터 응답 생성"""
    return APIResponse(success=True, message=message, data=data)


def create_list_response(
    data: list[DataT],
    total: int,
    offset: int,
    limit: int,
    message: str = DEFAULT_MESSAGE,
) -> ListAPIResponse[DataT]:
    """목록 응답 생성

    Args:
        data: 현재 페이지 아이템
        total: 필터에 맞는 전체 아이템 수
        offset: 건너뛴 아이템 수
        limit: 요청한 최대 아이템 수
        message: 응답 메시지
    """
    return ListAPIResponse(
        success=True,
        message=message,
        data=data,
        meta=PageMeta(
            total=total,
            offset=offset,
            limit=limit,
            has_next=offset + len(data) < total,
            has_prev=offset > 0,
        ),
    )


class ErrorDetail(BaseModel):
    """에러 상세 정보"""

    code: str = Field(..., description="기계가 읽을 수 있는 에러 코드")
    message: str = Field(..., description="사용자에게 보여줄 메시지")
    detail: Optional[dict[str, Any]] = Field(default=None, description="추가 정보")


class ErrorResponse(BaseModel):
    """에러 API 응답

    Example::

        {
            "success": false,
            "message": "상품을 수정할 권한이 없습니다.",
            "error": {
                "code": "ITEM_FORBIDDEN",
                "message": "상품을 수정할 권한이 없습니다.",
                "detail": {"slug": "vintage-lamp"}
            }
        }
    """

    success: bool = False
    message: str
    error: ErrorDetail


def error_responses(*status_codes: int) -> dict[int | str, dict[str, Any]]:
    """OpenAPI 문서용 에러 응답 선언

    Example::

        @router.put("/{slug}", responses=error_responses(401, 403, 404))
    """
    return {code: {"model": ErrorResponse} for code in status_codes}
