"""Users 도메인 서비스

회원가입, 로그인, 프로필 수정, 팔로우 관계를 다루는 비즈니스 로직 계층입니다.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import constraint_name, retry_read
from app.core.dependencies import get_credential_store
from app.core.logging import get_logger
from app.core.middlewares.context import get_request_id
from app.core.notifications import EventName, EventNotifier, get_notifier
from app.core.security import CredentialStore, Identity, ensure_can_mutate
from app.domains.users.exceptions import (
    EmailAlreadyExistsException,
    InvalidCredentialsException,
    ProfileForbiddenException,
    SelfFollowException,
    UsernameAlreadyExistsException,
    UserNotFoundException,
)
from app.domains.users.models import User
from app.domains.users.repository import UserRepository
from app.domains.users.schemas import (
    ProfileView,
    UserLogin,
    UserRegister,
    UserUpdate,
    to_profile_view,
)

logger = get_logger(__name__)

USERNAME_CONSTRAINT = "uq_users_username"
EMAIL_CONSTRAINT = "uq_users_email"


class UserService:
    """사용자 서비스 (Identity Graph)"""

    def __init__(
        self,
        session: AsyncSession,
        credential_store: CredentialStore | None = None,
        notifier: EventNotifier | None = None,
    ):
        self.session = session
        self.repository = UserRepository(session)
        self.credential_store = credential_store or get_credential_store()
        self.notifier = notifier or get_notifier()

    async def register(self, data: UserRegister) -> User:
        """회원가입

        Args:
            data: 회원가입 데이터 (형식 검증은 스키마에서 수행)

        Returns:
            생성된 사용자

        Raises:
            UsernameAlreadyExistsException: 사용자명 중복
            EmailAlreadyExistsException: 이메일 중복
        """
        await self._ensure_unique(username=data.username, email=data.email)

        password_hash, password_salt = self.credential_store.set_credential(
            data.password
        )
        user = User(
            username=data.username,
            email=data.email,
            password_hash=password_hash,
            password_salt=password_salt,
        )

        try:
            async with self.session.begin_nested():
                user = await self.repository.create(user)
        except IntegrityError as e:
            # 사전 확인 이후 동시 가입으로 발생한 유니크 위반
            conflict = self._conflict_from(e, data.username, data.email)
            if conflict is None:
                raise
            raise conflict from e

        logger.info(
            "User registered",
            extra={"request_id": get_request_id(), "user_id": user.id},
        )
        self.notifier.notify_after_commit(
            self.session, EventName.USER_CREATED, {"username": user.username}
        )
        return user

    async def authenticate(self, data: UserLogin) -> User:
        """이메일/비밀번호 인증

        이메일이 없는 경우와 비밀번호가 틀린 경우를 구분하지 않습니다.

        Raises:
            InvalidCredentialsException: 인증 실패
        """
        user = await self.repository.get_by_email(data.email)
        if user is None:
            self.credential_store.dummy_verify()

        if user is None or not self.credential_store.verify_credential(
            data.password, user.password_hash, user.password_salt
        ):
            logger.info(
                "Login failed",
                extra={"request_id": get_request_id(), "action": "login"},
            )
            raise InvalidCredentialsException()

        if self.credential_store.needs_rehash(user.password_hash):
            user.password_hash, user.password_salt = (
                self.credential_store.set_credential(data.password)
            )
            user = await self.repository.update(user)

        logger.info(
            "User logged in",
            extra={"request_id": get_request_id(), "user_id": user.id},
        )
        return user

    async def get_user(self, user_id: int) -> User:
        """ID로 사용자 조회

        Raises:
            UserNotFoundException: 사용자를 찾을 수 없는 경우
        """
        user = await retry_read(
            lambda: self.repository.get_by_id(user_id), session=self.session
        )
        if not user:
            raise UserNotFoundException(user_id=user_id)
        return user

    async def get_by_username(self, username: str) -> User:
        """사용자명으로 조회

        Raises:
            UserNotFoundException: 사용자를 찾을 수 없는 경우
        """
        user = await retry_read(
            lambda: self.repository.get_by_username(username),
            session=self.session,
        )
        if not user:
            raise UserNotFoundException(username=username)
        return user

    async def update_profile(
        self, identity: Identity, user_id: int, data: UserUpdate
    ) -> User:
        """프로필 부분 수정 (본인만 가능)

        Args:
            identity: 호출자
            user_id: 수정 대상 사용자 ID
            data: 수정할 필드 (보낸 필드만 반영)

        Raises:
            ProfileForbiddenException: 본인이 아닌 경우
            UsernameAlreadyExistsException: 사용자명 중복
            EmailAlreadyExistsException: 이메일 중복
        """
        ensure_can_mutate(identity, user_id, forbidden=ProfileForbiddenException())

        user = await self.get_user(user_id)
        fields = data.model_fields_set

        new_username = (
            data.username
            if "username" in fields
            and data.username is not None
            and data.username != user.username
            else None
        )
        new_email = (
            data.email
            if "email" in fields
            and data.email is not None
            and data.email != user.email
            else None
        )
        await self._ensure_unique(
            username=new_username, email=new_email, exclude_user_id=user.id
        )

        if new_username:
            user.username = new_username
        if new_email:
            user.email = new_email
        if "bio" in fields:
            user.bio = data.bio
        if "image" in fields:
            user.image = str(data.image) if data.image else None
        if "password" in fields and data.password:
            user.password_hash, user.password_salt = (
                self.credential_store.set_credential(data.password)
            )

        try:
            async with self.session.begin_nested():
                user = await self.repository.update(user)
        except IntegrityError as e:
            conflict = self._conflict_from(e, new_username, new_email)
            if conflict is None:
                raise
            raise conflict from e

        logger.info(
            "Profile updated",
            extra={
                "request_id": get_request_id(),
                "user_id": user.id,
                "action": ",".join(sorted(fields)),
            },
        )
        return user

    async def get_profile(
        self, username: str, viewer: Optional[Identity] = None
    ) -> ProfileView:
        """조회자 기준 프로필 조회"""
        user = await self.get_by_username(username)
        following = False
        if viewer is not None:
            following = await self.is_following(viewer.user_id, user.id)
        return to_profile_view(user, following=following)

    async def follow(self, follower_id: int, target_id: int) -> None:
        """팔로우 (이미 팔로우 중이면 아무 것도 하지 않음)

        Raises:
            SelfFollowException: 자기 자신을 대상으로 한 경우
        """
        if follower_id == target_id:
            raise SelfFollowException()

        added = await self.repository.add_follow(follower_id, target_id)
        logger.info(
            "User followed",
            extra={
                "request_id": get_request_id(),
                "user_id": follower_id,
                "target_id": target_id,
                "action": "followed" if added else "noop",
            },
        )

    async def unfollow(self, follower_id: int, target_id: int) -> None:
        """언팔로우 (팔로우 중이 아니면 아무 것도 하지 않음)

        Raises:
            SelfFollowException: 자기 자신을 대상으로 한 경우
        """
        if follower_id == target_id:
            raise SelfFollowException()

        removed = await self.repository.remove_follow(follower_id, target_id)
        logger.info(
            "User unfollowed",
            extra={
                "request_id": get_request_id(),
                "user_id": follower_id,
                "target_id": target_id,
                "action": "unfollowed" if removed else "noop",
            },
        )

    async def follow_by_username(
        self, identity: Identity, username: str
    ) -> ProfileView:
        """사용자명으로 팔로우 후 갱신된 프로필 반환"""
        target = await self.get_by_username(username)
        if target.id == identity.user_id:
            raise SelfFollowException(username=username)
        await self.follow(identity.user_id, target.id)
        return to_profile_view(target, following=True)

    async def unfollow_by_username(
        self, identity: Identity, username: str
    ) -> ProfileView:
        """사용자명으로 언팔로우 후 갱신된 프로필 반환"""
        target = await self.get_by_username(username)
        if target.id == identity.user_id:
            raise SelfFollowException(username=username)
        await self.unfollow(identity.user_id, target.id)
        return to_profile_view(target, following=False)

    async def is_following(self, follower_id: int, target_id: int) -> bool:
        """팔로우 여부"""
        if follower_id == target_id:
            return False
        return await self.repository.is_following(follower_id, target_id)

    async def _ensure_unique(
        self,
        username: Optional[str] = None,
        email: Optional[str] = None,
        exclude_user_id: Optional[int] = None,
    ) -> None:
        if username and await self.repository.username_taken(
            username, exclude_user_id=exclude_user_id
        ):
            raise UsernameAlreadyExistsException(username=username)
        if email and await self.repository.email_taken(
            email, exclude_user_id=exclude_user_id
        ):
            raise EmailAlreadyExistsException(email=email)

    @staticmethod
    def _conflict_from(
        error: IntegrityError,
        username: Optional[str],
        email: Optional[str],
    ) -> Optional[Exception]:
        name = constraint_name(error)
        if name == EMAIL_CONSTRAINT:
            return EmailAlreadyExistsException(email=email)
        if name == USERNAME_CONSTRAINT:
            return UsernameAlreadyExistsException(username=username)
        return None
