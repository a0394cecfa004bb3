"""요청 추적 미들웨어

모든 응답에 X-Request-ID를 붙이고, 헬스 체크와 문서 경로를 제외한 요청의
시작/종료를 기록합니다. Authorization 헤더와 요청 본문은 기록하지 않습니다.
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import get_logger
from app.core.middlewares.context import set_request_id
from app.core.utils.timing import Stopwatch

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

QUIET_PATHS = frozenset(
    {"/health", "/docs", "/redoc", "/openapi.json", "/favicon.ico"}
)


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class LoggingMiddleware(BaseHTTPMiddleware):
    """요청 ID 전파 및 처리 시간 측정"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        route = f"{request.method} {request.url.path}"

        if request.url.path in QUIET_PATHS:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        logger.info(f"→ {route} | Client: {_client_host(request)}")

        with Stopwatch() as watch:
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error(
                    f"✗ {route} | Error: {type(e).__name__} "
                    f"| Time: {watch.elapsed_ms:.2f}ms"
                )
                raise

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = f"{watch.elapsed_ms:.2f}ms"

        failed = response.status_code >= 400
        log = logger.warning if failed else logger.info
        log(
            f"{'✗' if failed else '✓'} {route} "
            f"| Status: {response.status_code} | Time: {watch.elapsed_ms:.2f}ms"
        )
        return response
