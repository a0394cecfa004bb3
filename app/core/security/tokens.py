"""세션 토큰 발급/검증 (JWT, HS256)"""

from datetime import datetime, timedelta
from typing import Any, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from app.core.config import Settings
from app.core.exceptions import UnauthorizedException
from app.core.security.identity import Identity, Role
from app.core.utils.datetime import now_utc

# 토큰 관련 실패는 원인과 관계없이 같은 메시지로 응답
TOKEN_REJECTED_MESSAGE = "유효하지 않거나 만료된 인증 토큰입니다."


class TokenInvalidException(UnauthorizedException):
    """형식 오류 또는 서명 불일치"""

    def __init__(self):
        super().__init__(message=TOKEN_REJECTED_MESSAGE)


class TokenExpiredException(UnauthorizedException):
    """유효 기간 경과"""

    def __init__(self):
        super().__init__(message=TOKEN_REJECTED_MESSAGE)


class TokenService:
    """서명된 세션 토큰 발급 및 검증"""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_days: int = 60,
    ):
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.validity = timedelta(days=expire_days)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.jwt_algorithm,
            expire_days=settings.access_token_expire_days,
        )

    def issue(
        self, user_id: int, role: Role, now: Optional[datetime] = None
    ) -> str:
        """토큰 발급

        Args:
            user_id: 사용자 ID
            role: 사용자 역할
            now: 발급 시각 (테스트용, 기본: 현재 UTC)

        Returns:
            서명된 JWT 문자열
        """
        issued_at = now or now_utc()
        payload: dict[str, Any] = {
            "sub": str(user_id),
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.validity).timestamp()),
        }
        return str(jwt.encode(payload, self._secret_key, algorithm=self.algorithm))

    def validate(self, token: str) -> Identity:
        """토큰 검증

        Args:
            token: JWT 문자열

        Returns:
            검증된 Identity

        Raises:
            TokenExpiredException: 유효 기간이 지난 경우
            TokenInvalidException: 형식/서명/클레임이 잘못된 경우
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError:
            raise TokenExpiredException()
        except JWTError:
            raise TokenInvalidException()

        try:
            return Identity(
                user_id=int(payload["sub"]),
                role=Role(payload.get("role", Role.USER.value)),
            )
        except (KeyError, TypeError, ValueError):
            raise TokenInvalidException()
