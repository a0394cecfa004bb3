"""Users 도메인 라우터

회원가입/로그인(/users), 현재 사용자(/user), 프로필/팔로우(/profiles) 엔드포인트입니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import (
    get_current_identity,
    get_optional_identity,
    get_token_service,
)
from app.core.schemas import APIResponse, create_response, error_responses
from app.core.security import Identity, Role, TokenService
from app.domains.users.schemas import (
    ProfileView,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
    to_user_response,
)
from app.domains.users.service import UserService

router = APIRouter()
user_router = APIRouter()
profiles_router = APIRouter()


def get_user_service(session: AsyncSession = Depends(get_db)) -> UserService:
    """UserService 의존성"""
    return UserService(session)


@router.post(
    "",
    response_model=APIResponse[UserResponse],
    status_code=201,
    responses=error_responses(409, 422),
)
async def register(
    data: UserRegister,
    service: UserService = Depends(get_user_service),
    token_service: TokenService = Depends(get_token_service),
):
    """회원가입"""
    user = await service.register(data)
    token = token_service.issue(user.id, Role(user.role))
    return create_response(
        data=to_user_response(user, token=token),
        message="회원가입이 완료되었습니다.",
    )


@router.post(
    "/login",
    response_model=APIResponse[UserResponse],
    responses=error_responses(401),
)
async def login(
    data: UserLogin,
    service: UserService = Depends(get_user_service),
    token_service: TokenService = Depends(get_token_service),
):
    """로그인"""
    user = await service.authenticate(data)
    token = token_service.issue(user.id, Role(user.role))
    return create_response(
        data=to_user_response(user, token=token),
        message="로그인되었습니다.",
    )


@user_router.get(
    "", response_model=APIResponse[UserResponse], responses=error_responses(401)
)
async def get_current_user(
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
):
    """현재 사용자 조회"""
    user = await service.get_user(identity.user_id)
    return create_response(
        data=to_user_response(user),
        message="사용자 정보를 조회했습니다.",
    )


@user_router.put(
    "",
    response_model=APIResponse[UserResponse],
    responses=error_responses(401, 409, 422),
)
async def update_current_user(
    data: UserUpdate,
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
    token_service: TokenService = Depends(get_token_service),
):
    """현재 사용자 프로필 수정"""
    user = await service.update_profile(identity, identity.user_id, data)
    token = token_service.issue(user.id, Role(user.role))
    return create_response(
        data=to_user_response(user, token=token),
        message="프로필이 수정되었습니다.",
    )


@profiles_router.get(
    "/{username}",
    response_model=APIResponse[ProfileView],
    responses=error_responses(404),
)
async def get_profile(
    username: str,
    identity: Optional[Identity] = Depends(get_optional_identity),
    service: UserService = Depends(get_user_service),
):
    """프로필 조회"""
    profile = await service.get_profile(username, viewer=identity)
    return create_response(data=profile, message="프로필을 조회했습니다.")


@profiles_router.post(
    "/{username}/follow",
    response_model=APIResponse[ProfileView],
    responses=error_responses(401, 404, 422),
)
async def follow_user(
    username: str,
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
):
    """팔로우"""
    profile = await service.follow_by_username(identity, username)
    return create_response(data=profile, message="팔로우했습니다.")


@profiles_router.delete(
    "/{username}/follow",
    response_model=APIResponse[ProfileView],
    responses=error_responses(401, 404, 422),
)
async def unfollow_user(
    username: str,
    identity: Identity = Depends(get_current_identity),
    service: UserService = Depends(get_user_service),
):
    """언팔로우"""
    profile = await service.unfollow_by_username(identity, username)
    return create_response(data=profile, message="언팔로우했습니다.")
