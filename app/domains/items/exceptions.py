"""Items 도메인 예외 정의"""

from enum import Enum

from app.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
)


class ItemErrorCode(str, Enum):
    """상품 도메인 에러 코드"""

    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    ITEM_FORBIDDEN = "ITEM_FORBIDDEN"
    SLUG_CONFLICT = "SLUG_CONFLICT"


class ItemNotFoundException(NotFoundException):
    """상품을 찾을 수 없는 경우"""

    def __init__(self, slug: str | None = None):
        detail = {"slug": slug} if slug else {}
        super().__init__(
            message="상품을 찾을 수 없습니다.",
            error_code=ItemErrorCode.ITEM_NOT_FOUND,
            detail=detail,
        )


class ItemForbiddenException(ForbiddenException):
    """판매자가 아닌 사용자가 상품을 변경하려는 경우"""

    def __init__(self, slug: str | None = None):
        detail = {"slug": slug} if slug else {}
        super().__init__(
            message="상품을 변경할 권한이 없습니다.",
            error_code=ItemErrorCode.ITEM_FORBIDDEN,
            detail=detail,
        )


class SlugConflictException(ConflictException):
    """재시도 후에도 유일한 slug를 만들지 못한 경우"""

    def __init__(self, slug: str | None = None, attempts: int | None = None):
        detail: dict = {}
        if slug:
            detail["slug"] = slug
        if attempts:
            detail["attempts"] = attempts
        super().__init__(
            message="상품 식별자를 생성하지 못했습니다. 다시 시도해주세요.",
            error_code=ItemErrorCode.SLUG_CONFLICT,
            detail=detail,
        )
