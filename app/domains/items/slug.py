"""상품 slug 생성 규칙

- 소문자로 변환
- 영숫자가 아닌 문자의 연속은 하이픈 하나로 치환
- 앞뒤 하이픈 제거
- 비어 있으면 무작위 토큰 사용
"""

import re
import secrets
import string
import unicodedata

NON_ALNUM = re.compile(r"[^a-z0-9]+")
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
MAX_BASE_LENGTH = 200


def random_token(length: int = 6) -> str:
    """소문자 영숫자 무작위 토큰"""
    return "".join(secrets.choice(SUFFIX_ALPHABET) for _ in range(length))


def slugify(title: str, token_length: int = 6) -> str:
    """제목을 URL 안전한 slug로 변환

    Example::

        slugify("Vintage Lamp")      # "vintage-lamp"
        slugify("  Café -- Table! ") # "cafe-table"
        slugify("!!!")               # 무작위 토큰
    """
    # 악센트 제거 (é → e)
    decomposed = unicodedata.normalize("NFKD", title)
    ascii_title = decomposed.encode("ascii", "ignore").decode("ascii")

    slug = NON_ALNUM.sub("-", ascii_title.lower()).strip("-")
    slug = slug[:MAX_BASE_LENGTH].rstrip("-")
    return slug or random_token(token_length)


def with_suffix(base: str, length: int = 6) -> str:
    """충돌 회피용 무작위 접미사 추가 (예: vintage-lamp-k3x9a1)"""
    return f"{base}-{random_token(length)}"
