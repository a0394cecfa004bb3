"""요청 추적 미들웨어와 요청 범위 컨텍스트"""

from app.core.middlewares.context import (
    get_caller_id,
    get_request_id,
    set_caller_id,
    set_request_id,
)
from app.core.middlewares.logging import LoggingMiddleware

__all__ = [
    "LoggingMiddleware",
    "get_caller_id",
    "get_request_id",
    "set_caller_id",
    "set_request_id",
]
