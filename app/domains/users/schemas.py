"""Users 도메인 스키마 정의

요청 스키마, 응답 스키마, 그리고 조회자 기준 프로필 투영 함수를 정의합니다.
"""

from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    HttpUrl,
    field_validator,
)

from app.domains.users.models import User

USERNAME_PATTERN = r"^[A-Za-z0-9]+$"


def normalize_email(v: Optional[str]) -> Optional[str]:
    """이메일은 소문자로 저장하고 비교 (대소문자만 다른 중복 가입 방지)"""
    return v.lower() if v is not None else v


class UserRegister(BaseModel):
    """회원가입 요청 스키마"""

    username: str = Field(
        ...,
        min_length=1,
        max_length=64,
        pattern=USERNAME_PATTERN,
        description="사용자명 (영숫자만)",
    )
    email: EmailStr = Field(..., description="이메일")
    password: str = Field(
        ..., min_length=8, max_length=128, description="비밀번호"
    )

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v)


class UserLogin(BaseModel):
    """로그인 요청 스키마"""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v)


class UserUpdate(BaseModel):
    """프로필 수정 요청 스키마 (부분 수정)

    명시적으로 null을 보낸 bio/image는 비웁니다.
    """

    username: Optional[str] = Field(
        None, min_length=1, max_length=64, pattern=USERNAME_PATTERN
    )
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=128)
    bio: Optional[str] = Field(None, max_length=2000)
    image: Optional[HttpUrl] = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v)


class UserResponse(BaseModel):
    """현재 사용자 응답 스키마 (토큰 포함)"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    bio: Optional[str] = None
    image: Optional[str] = None
    role: str
    token: Optional[str] = None


class ProfileView(BaseModel):
    """다른 사용자에게 보여지는 프로필"""

    username: str
    bio: Optional[str] = None
    image: Optional[str] = None
    following: bool = False


def to_user_response(user: User, token: Optional[str] = None) -> UserResponse:
    """User → 현재 사용자 응답"""
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        bio=user.bio,
        image=user.image,
        role=user.role,
        token=token,
    )


def to_profile_view(user: User, following: bool = False) -> ProfileView:
    """User → 조회자 기준 프로필 투영

    Args:
        user: 대상 사용자
        following: 조회자가 대상을 팔로우 하는지 여부 (익명이면 False)
    """
    return ProfileView(
        username=user.username,
        bio=user.bio,
        image=user.image,
        following=following,
    )
