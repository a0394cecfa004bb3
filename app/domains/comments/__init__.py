"""Comments 도메인 모듈

상품 댓글(Discussion Graph)을 다루는 도메인입니다.

구조:
    - models.py: SQLAlchemy 모델 정의 (Comment)
    - schemas.py: Pydantic 스키마 및 댓글 투영 함수
    - repository.py: 데이터 접근 계층
    - service.py: 비즈니스 로직 (작성, 조회, 삭제, 관리용 삭제)
    - router.py: API 엔드포인트 (/items/{slug}/comments, /admin/comments)
    - exceptions.py: 도메인 예외
"""

from app.domains.comments.exceptions import (
    CommentErrorCode,
    CommentForbiddenException,
    CommentNotFoundException,
)
from app.domains.comments.models import Comment

__all__ = [
    "Comment",
    "CommentErrorCode",
    "CommentNotFoundException",
    "CommentForbiddenException",
]
