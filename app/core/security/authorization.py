"""권한 판단 (소유자 또는 허용된 경우 관리자만 변경 가능)"""

from typing import Awaitable, Callable, Optional

from app.core.exceptions import ForbiddenException, UnauthorizedException
from app.core.security.identity import Identity, Role


def can_mutate(
    identity: Optional[Identity],
    resource_owner_id: int,
    allow_admin: bool = False,
) -> bool:
    """호출자가 리소스를 변경할 수 있는지 판단

    Args:
        identity: 호출자 (익명이면 None)
        resource_owner_id: 리소스 소유자 ID
        allow_admin: 관리자 우회 허용 여부 (작업별로 명시)

    Returns:
        변경 가능 여부
    """
    if identity is None:
        return False
    if identity.user_id == resource_owner_id:
        return True
    return allow_admin and identity.is_admin


def ensure_can_mutate(
    identity: Optional[Identity],
    resource_owner_id: int,
    allow_admin: bool = False,
    forbidden: Optional[ForbiddenException] = None,
) -> Identity:
    """can_mutate가 거짓이면 예외 발생

    Raises:
        UnauthorizedException: 호출자가 없는 경우
        ForbiddenException: 권한이 없는 경우 (forbidden 인자로 대체 가능)
    """
    if identity is None:
        raise UnauthorizedException()
    if not can_mutate(identity, resource_owner_id, allow_admin=allow_admin):
        raise forbidden or ForbiddenException()
    return identity


async def ensure_owner_or_admin(
    identity: Optional[Identity],
    resource_owner_id: int,
    load_role: Callable[[int], Awaitable[Optional[str]]],
    forbidden: Optional[ForbiddenException] = None,
) -> Identity:
    """관리자 우회를 허용하는 작업의 권한 확인

    소유자가 아닌 호출자가 토큰에 관리자 역할을 가지고 있으면
    load_role로 현재 저장된 역할을 다시 읽습니다. 발급 이후 강등되었거나
    삭제된 사용자는 일반 사용자로 취급합니다.

    Raises:
        UnauthorizedException: 호출자가 없는 경우
        ForbiddenException: 권한이 없는 경우 (forbidden 인자로 대체 가능)
    """
    if (
        identity is not None
        and identity.is_admin
        and identity.user_id != resource_owner_id
        and await load_role(identity.user_id) != Role.ADMIN
    ):
        identity = Identity(user_id=identity.user_id)

    return ensure_can_mutate(
        identity, resource_owner_id, allow_admin=True, forbidden=forbidden
    )
