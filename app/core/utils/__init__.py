"""공용 유틸리티"""

from app.core.utils.datetime import UTC, now_utc
from app.core.utils.pagination import PageParams
from app.core.utils.timing import Stopwatch

__all__ = ["UTC", "now_utc", "PageParams", "Stopwatch"]
