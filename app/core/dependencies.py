"""공통 의존성 함수 정의

이 모듈은 FastAPI 엔드포인트에서 사용되는 인증 의존성을 정의합니다.

- get_current_identity: 토큰 필수 (없거나 잘못되면 401)
- get_optional_identity: 토큰 선택 (없으면 익명, 잘못되면 401)
- verify_internal_api_key: 운영/모더레이션 경로용 API Key 검증
"""

import hmac
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header

from app.core.config import settings
from app.core.exceptions import ErrorCode, UnauthorizedException
from app.core.middlewares.context import set_caller_id
from app.core.security import CredentialStore, Identity, TokenService

AUTH_SCHEMES = {"token", "bearer"}


@lru_cache
def get_token_service() -> TokenService:
    """TokenService 의존성 (설정 기반, 프로세스 단위 캐시)"""
    return TokenService.from_settings(settings)


@lru_cache
def get_credential_store() -> CredentialStore:
    """CredentialStore 의존성 (설정 기반, 프로세스 단위 캐시)"""
    return CredentialStore.from_settings(settings)


def _extract_token(authorization: Optional[str]) -> Optional[str]:
    """Authorization 헤더에서 토큰 추출

    `Token <jwt>`, `Bearer <jwt>` 형식을 지원합니다.
    헤더가 없으면 None, 형식이 잘못되면 UnauthorizedException.
    """
    if authorization is None or not authorization.strip():
        return None

    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() not in AUTH_SCHEMES or not token.strip():
        raise UnauthorizedException(message="잘못된 인증 헤더 형식입니다.")
    return token.strip()


async def get_optional_identity(
    authorization: Optional[str] = Header(None),
    token_service: TokenService = Depends(get_token_service),
) -> Optional[Identity]:
    """선택 인증: 토큰이 없으면 익명(None), 잘못된 토큰은 거부"""
    token = _extract_token(authorization)
    if token is None:
        return None

    identity = token_service.validate(token)
    set_caller_id(identity.user_id)
    return identity


async def get_current_identity(
    identity: Optional[Identity] = Depends(get_optional_identity),
) -> Identity:
    """필수 인증: 토큰이 없거나 잘못되면 거부"""
    if identity is None:
        raise UnauthorizedException()
    return identity


async def verify_internal_api_key(
    x_internal_api_key: str = Header(..., alias="X-Internal-Api-Key")
) -> None:
    """내부 API Key 검증 (모더레이션 등 배포 경계에서 보호되는 경로)

    Args:
        x_internal_api_key: 요청 헤더의 X-Internal-Api-Key 값

    Raises:
        UnauthorizedException: API Key가 유효하지 않은 경우
    """
    if not hmac.compare_digest(
        x_internal_api_key.encode(), settings.internal_api_key.encode()
    ):
        raise UnauthorizedException(
            message="유효하지 않은 API 키입니다.",
            error_code=ErrorCode.INVALID_API_KEY,
        )
