"""자격 증명 저장소 (비밀번호 해시/검증)

PBKDF2-SHA512(512bit 출력)를 사용하며, 사용자마다 새 salt를 생성합니다.
원본 비밀번호는 저장하거나 로그에 남기지 않습니다.
"""

from passlib.context import CryptContext
from passlib.hash import pbkdf2_sha512
from passlib.utils import consteq
from passlib.utils.binary import ab64_encode

from app.core.config import MIN_PASSWORD_HASH_ROUNDS, Settings

MIN_ROUNDS = MIN_PASSWORD_HASH_ROUNDS


class CredentialStore:
    """비밀번호 해시 생성 및 검증"""

    def __init__(self, rounds: int, salt_size: int = 16):
        if rounds < MIN_ROUNDS:
            raise ValueError(f"rounds must be at least {MIN_ROUNDS}")

        self.rounds = rounds
        self._context = CryptContext(
            schemes=["pbkdf2_sha512"],
            pbkdf2_sha512__default_rounds=rounds,
            pbkdf2_sha512__min_rounds=rounds,
            pbkdf2_sha512__salt_size=salt_size,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        return cls(
            rounds=settings.password_hash_rounds,
            salt_size=settings.password_salt_size,
        )

    def set_credential(self, raw_password: str) -> tuple[str, str]:
        """새 salt로 비밀번호 해시 생성

        Args:
            raw_password: 원본 비밀번호

        Returns:
            (password_hash, password_salt) 튜플
        """
        password_hash = self._context.hash(raw_password)
        return password_hash, self._salt_of(password_hash)

    def verify_credential(
        self, raw_password: str, password_hash: str, password_salt: str
    ) -> bool:
        """저장된 salt로 해시를 다시 계산하여 상수 시간 비교

        Args:
            raw_password: 입력된 비밀번호
            password_hash: 저장된 해시
            password_salt: 저장된 salt

        Returns:
            일치 여부
        """
        try:
            stored_salt = self._salt_of(password_hash)
        except ValueError:
            return False

        if not consteq(stored_salt, password_salt):
            return False

        return bool(self._context.verify(raw_password, password_hash))

    def dummy_verify(self) -> None:
        """실제 검증과 같은 비용의 해시 계산 (없는 계정 로그인 시 응답 시간 평준화)"""
        self._context.dummy_verify()

    def needs_rehash(self, password_hash: str) -> bool:
        """설정된 해시 비용보다 약한 해시인지 확인"""
        return bool(self._context.needs_update(password_hash))

    @staticmethod
    def _salt_of(password_hash: str) -> str:
        record = pbkdf2_sha512.from_string(password_hash)
        return ab64_encode(record.salt).decode("ascii")
