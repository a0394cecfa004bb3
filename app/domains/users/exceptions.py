"""Users 도메인 예외 정의"""

from enum import Enum

from app.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)


class UserErrorCode(str, Enum):
    """사용자 도메인 에러 코드"""

    USER_NOT_FOUND = "USER_NOT_FOUND"
    USERNAME_ALREADY_EXISTS = "USERNAME_ALREADY_EXISTS"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    SELF_FOLLOW = "SELF_FOLLOW"
    PROFILE_FORBIDDEN = "PROFILE_FORBIDDEN"


class UserNotFoundException(NotFoundException):
    """사용자를 찾을 수 없는 경우"""

    def __init__(self, user_id: int | None = None, username: str | None = None):
        detail: dict = {}
        if user_id:
            detail["user_id"] = user_id
        if username:
            detail["username"] = username
        super().__init__(
            message="사용자를 찾을 수 없습니다.",
            error_code=UserErrorCode.USER_NOT_FOUND,
            detail=detail,
        )


class UsernameAlreadyExistsException(ConflictException):
    """이미 사용 중인 사용자명"""

    def __init__(self, username: str | None = None):
        detail = {"username": username} if username else {}
        super().__init__(
            message="이미 사용 중인 사용자명입니다.",
            error_code=UserErrorCode.USERNAME_ALREADY_EXISTS,
            detail=detail,
        )


class EmailAlreadyExistsException(ConflictException):
    """이미 사용 중인 이메일"""

    def __init__(self, email: str | None = None):
        detail = {"email": email} if email else {}
        super().__init__(
            message="이미 사용 중인 이메일입니다.",
            error_code=UserErrorCode.EMAIL_ALREADY_EXISTS,
            detail=detail,
        )


class InvalidCredentialsException(UnauthorizedException):
    """이메일 또는 비밀번호 불일치 (어느 쪽인지 구분하지 않음)"""

    def __init__(self):
        super().__init__(
            message="이메일 또는 비밀번호가 올바르지 않습니다.",
            error_code=UserErrorCode.INVALID_CREDENTIALS,
        )


class SelfFollowException(ValidationException):
    """자기 자신을 팔로우/언팔로우 하려는 경우"""

    def __init__(self, username: str | None = None):
        detail = {"username": username} if username else {}
        super().__init__(
            message="자기 자신은 팔로우할 수 없습니다.",
            error_code=UserErrorCode.SELF_FOLLOW,
            detail=detail,
        )


class ProfileForbiddenException(ForbiddenException):
    """다른 사용자의 프로필을 수정하려는 경우"""

    def __init__(self):
        super().__init__(
            message="프로필을 수정할 권한이 없습니다.",
            error_code=UserErrorCode.PROFILE_FORBIDDEN,
        )
