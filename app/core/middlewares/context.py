"""요청 범위 컨텍스트

요청 ID는 LoggingMiddleware가, 호출자 ID는 인증 의존성이 설정합니다.
둘 다 contextvars라서 동시 요청 사이에 섞이지 않습니다.
"""

import contextvars
import uuid
from typing import Optional

_request_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)
_caller_id: contextvars.ContextVar[Optional[int]] = contextvars.ContextVar(
    "caller_id", default=None
)


def get_request_id() -> Optional[str]:
    return _request_id.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """클라이언트가 보낸 ID를 쓰거나 uuid4를 새로 발급"""
    request_id = request_id or str(uuid.uuid4())
    _request_id.set(request_id)
    return request_id


def get_caller_id() -> Optional[int]:
    """인증된 사용자 ID (익명 요청이면 None)"""
    return _caller_id.get()


def set_caller_id(user_id: Optional[int]) -> None:
    _caller_id.set(user_id)
