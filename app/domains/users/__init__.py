"""Users 도메인 모듈

사용자 신원과 팔로우 관계(Identity Graph)를 다루는 도메인입니다.

구조:
    - models.py: SQLAlchemy 모델 정의 (User, Follow)
    - schemas.py: Pydantic 스키마 및 프로필 투영 함수
    - repository.py: 데이터 접근 계층
    - service.py: 비즈니스 로직 (가입, 인증, 프로필 수정, 팔로우)
    - router.py: API 엔드포인트 (/users, /user, /profiles)
    - exceptions.py: 도메인 예외
"""

from app.domains.users.exceptions import (
    EmailAlreadyExistsException,
    InvalidCredentialsException,
    ProfileForbiddenException,
    SelfFollowException,
    UserErrorCode,
    UsernameAlreadyExistsException,
    UserNotFoundException,
)
from app.domains.users.models import Follow, User

__all__ = [
    "User",
    "Follow",
    "UserErrorCode",
    "UserNotFoundException",
    "UsernameAlreadyExistsException",
    "EmailAlreadyExistsException",
    "InvalidCredentialsException",
    "SelfFollowException",
    "ProfileForbiddenException",
]
