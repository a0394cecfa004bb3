"""호출자 신원 (토큰 검증 결과)"""

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """사용자 역할"""

    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    """검증된 호출자

    Attributes:
        user_id: 사용자 ID
        role: 사용자 역할
    """

    user_id: int
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
