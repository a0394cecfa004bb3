"""Items 도메인 모듈

상품, slug, 찜(Catalog Graph)을 다루는 도메인입니다.

구조:
    - models.py: SQLAlchemy 모델 정의 (Item, Favorite)
    - slug.py: 제목 → slug 변환 규칙
    - schemas.py: Pydantic 스키마 및 상품 투영 함수
    - repository.py: 데이터 접근 계층
    - service.py: 비즈니스 로직 (등록, 수정, 삭제, 찜, 목록, 피드)
    - router.py: API 엔드포인트 (/items, /tags)
    - exceptions.py: 도메인 예외
"""

from app.domains.items.exceptions import (
    ItemErrorCode,
    ItemForbiddenException,
    ItemNotFoundException,
    SlugConflictException,
)
from app.domains.items.models import Favorite, Item

__all__ = [
    "Item",
    "Favorite",
    "ItemErrorCode",
    "ItemNotFoundException",
    "ItemForbiddenException",
    "SlugConflictException",
]
