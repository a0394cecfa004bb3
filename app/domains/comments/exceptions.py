"""Comments 도메인 예외 정의"""

from enum import Enum

from app.core.exceptions import ForbiddenException, NotFoundException


class CommentErrorCode(str, Enum):
    """댓글 도메인 에러 코드"""

    COMMENT_NOT_FOUND = "COMMENT_NOT_FOUND"
    COMMENT_FORBIDDEN = "COMMENT_FORBIDDEN"


class CommentNotFoundException(NotFoundException):
    """댓글을 찾을 수 없는 경우"""

    def __init__(self, comment_id: int | None = None):
        detail = {"comment_id": comment_id} if comment_id else {}
        super().__init__(
            message="댓글을 찾을 수 없습니다.",
            error_code=CommentErrorCode.COMMENT_NOT_FOUND,
            detail=detail,
        )


class CommentForbiddenException(ForbiddenException):
    """작성자가 아닌 사용자가 댓글을 삭제하려는 경우"""

    def __init__(self, comment_id: int | None = None):
        detail = {"comment_id": comment_id} if comment_id else {}
        super().__init__(
            message="댓글을 삭제할 권한이 없습니다.",
            error_code=CommentErrorCode.COMMENT_FORBIDDEN,
            detail=detail,
        )
