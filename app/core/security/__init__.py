"""보안 모듈 (자격 증명, 토큰, 권한)"""

from app.core.security.authorization import (
    can_mutate,
    ensure_can_mutate,
    ensure_owner_or_admin,
)
from app.core.security.identity import Identity, Role
from app.core.security.passwords import CredentialStore
from app.core.security.tokens import (
    TokenExpiredException,
    TokenInvalidException,
    TokenService,
)

__all__ = [
    "Identity",
    "Role",
    "CredentialStore",
    "TokenService",
    "TokenInvalidException",
    "TokenExpiredException",
    "can_mutate",
    "ensure_can_mutate",
    "ensure_owner_or_admin",
]
