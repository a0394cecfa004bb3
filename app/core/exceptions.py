"""API 예외 및 전역 예외 핸들러

서비스 계층은 BaseAPIException 하위 클래스를 발생시키고, main.py에 등록된
핸들러가 이를 ErrorResponse 봉투로 변환합니다.
"""

from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from app.core.logging import get_logger
from app.core.middlewares.context import get_request_id
from app.core.schemas import ErrorDetail, ErrorResponse

logger = get_logger(__name__)


class ErrorCode(str, Enum):
    """전역 에러 코드"""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INVALID_API_KEY = "INVALID_API_KEY"


# 프레임워크가 직접 발생시키는 HTTPException(404 라우트 없음 등)의 코드
STATUS_ERROR_CODES = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorCode.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
    status.HTTP_409_CONFLICT: ErrorCode.CONFLICT,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION_ERROR,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.SERVICE_UNAVAILABLE,
}


class BaseAPIException(HTTPException):
    """기본 API 예외 클래스

    하위 클래스는 상태 코드, 에러 코드, 기본 메시지를 클래스 속성으로 지정합니다.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_error_code: str = ErrorCode.INTERNAL_ERROR
    default_message: str = "서버 내부 오류가 발생했습니다."
    default_headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        detail: Optional[Dict[str, Any]] = None,
    ):
        self.error_code = error_code or self.default_error_code
        self.message = message or self.default_message
        self.detail_info = detail or {}
        super().__init__(
            status_code=type(self).status_code,
            detail=self.message,
            headers=self.default_headers,
        )


class ValidationException(BaseAPIException):
    """422 Unprocessable Entity"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_error_code = ErrorCode.VALIDATION_ERROR
    default_message = "입력값이 올바르지 않습니다."


class UnauthorizedException(BaseAPIException):
    """401 Unauthorized"""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_error_code = ErrorCode.UNAUTHORIZED
    default_message = "인증이 필요합니다."
    default_headers = {"WWW-Authenticate": "Token"}


class ForbiddenException(BaseAPIException):
    """403 Forbidden"""

    status_code = status.HTTP_403_FORBIDDEN
    default_error_code = ErrorCode.FORBIDDEN
    default_message = "접근 권한이 없습니다."


class NotFoundException(BaseAPIException):
    """404 Not Found"""

    status_code = status.HTTP_404_NOT_FOUND
    default_error_code = ErrorCode.NOT_FOUND
    default_message = "리소스를 찾을 수 없습니다."


class ConflictException(BaseAPIException):
    """409 Conflict"""

    status_code = status.HTTP_409_CONFLICT
    default_error_code = ErrorCode.CONFLICT
    default_message = "리소스 충돌이 발생했습니다."


class UnavailableException(BaseAPIException):
    """503 Service Unavailable (일시적 저장소 장애, 재시도 가능)"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_error_code = ErrorCode.SERVICE_UNAVAILABLE
    default_message = "일시적으로 서비스를 사용할 수 없습니다. 잠시 후 다시 시도해주세요."
    default_headers = {"Retry-After": "1"}


def _error_response(
    status_code: int,
    message: str,
    error_code: str,
    detail: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    code = error_code.value if isinstance(error_code, Enum) else error_code
    body = ErrorResponse(
        message=message,
        error=ErrorDetail(code=code, message=message, detail=detail),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )


async def base_exception_handler(
    request: Request, exc: BaseAPIException
) -> JSONResponse:
    """BaseAPIException 핸들러"""
    return _error_response(
        exc.status_code,
        exc.message,
        exc.error_code,
        exc.detail_info,
        headers=exc.headers,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """요청 검증 실패 핸들러 (필드 단위 상세 반환)"""
    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ValidationException.default_message,
        ErrorCode.VALIDATION_ERROR,
        {"errors": jsonable_encoder(exc.errors())},
    )


async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    """프레임워크 HTTPException 핸들러 (없는 경로, 허용되지 않은 메서드 등)"""
    error_code = STATUS_ERROR_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return _error_response(
        exc.status_code,
        str(exc.detail),
        error_code,
        headers=getattr(exc, "headers", None),
    )


async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """저장소 예외 핸들러

    일시적 장애(연결/타임아웃)는 503으로, 나머지는 500으로 응답합니다.
    """
    from app.core.database import is_transient_error

    if is_transient_error(exc):
        logger.warning(
            "Transient database failure",
            extra={"request_id": get_request_id(), "error": type(exc).__name__},
        )
        return await base_exception_handler(request, UnavailableException())

    return await generic_exception_handler(request, exc)


async def generic_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """처리되지 않은 예외 핸들러 (내부 정보는 응답에 포함하지 않음)"""
    logger.error(
        f"Unhandled {type(exc).__name__}",
        exc_info=exc,
        extra={"request_id": get_request_id()},
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        BaseAPIException.default_message,
        ErrorCode.INTERNAL_ERROR,
    )
