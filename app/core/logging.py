"""전역 로깅 설정

서비스 코드는 ``logger.info("...", extra={"slug": slug})`` 형태로 컨텍스트를
넘기고, RequestContextFilter가 요청 ID와 호출자 ID를 채웁니다.
"""

import json
import logging
import sys

from app.core.config import settings

# 로그 레코드에 표시할 extra 필드
EXTRA_FIELDS = (
    "user_id",
    "item_id",
    "slug",
    "comment_id",
    "target_id",
    "event",
    "action",
)

# 외부 라이브러리 기본 레벨
LIBRARY_LEVELS = {
    "uvicorn": logging.INFO,
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "jose": logging.WARNING,
    "passlib": logging.WARNING,
}

DEV_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(request_id)s | "
    "%(name)s:%(lineno)d | %(message)s %(context)s"
)


class RequestContextFilter(logging.Filter):
    """request_id, user_id, context 속성을 레코드에 채움"""

    def filter(self, record: logging.LogRecord) -> bool:
        from app.core.middlewares.context import get_caller_id, get_request_id

        if not getattr(record, "request_id", None):
            record.request_id = get_request_id() or "-"
        if getattr(record, "user_id", None) is None:
            record.user_id = get_caller_id()

        record.context = " ".join(
            f"{field}={value}"
            for field, value in _extras(record).items()
        )
        return True


def _extras(record: logging.LogRecord) -> dict:
    values = {}
    for field in EXTRA_FIELDS:
        value = getattr(record, field, None)
        if value is not None:
            values[field] = value
    return values


class ColoredFormatter(logging.Formatter):
    """레벨별 ANSI 색상 (개발 환경용)"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        original = record.levelname
        record.levelname = (
            f"{self.COLORS.get(original, self.RESET)}{original}{self.RESET}"
        )
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JsonFormatter(logging.Formatter):
    """한 줄짜리 JSON 로그 (로그 수집 시스템용)"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "request_id": getattr(record, "request_id", "-"),
            "message": record.getMessage(),
            **_extras(record),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _build_formatter() -> logging.Formatter:
    if settings.is_development:
        return ColoredFormatter(fmt=DEV_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return JsonFormatter()


def setup_logging() -> None:
    """루트 로거에 stdout 핸들러 하나를 설치"""
    log_level = logging.DEBUG if settings.debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())
    handler.setLevel(log_level)
    handler.addFilter(RequestContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    for name, level in LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.database_echo else logging.WARNING
    )


def get_logger(name: str) -> logging.Logger:
    """모듈 로거 반환 (보통 ``get_logger(__name__)``)"""
    return logging.getLogger(name)
