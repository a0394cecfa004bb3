"""날짜/시간 유틸리티 (저장/토큰 시각은 모두 UTC)"""

from datetime import datetime, timezone

UTC = timezone.utc


def now_utc() -> datetime:
    """tz 정보가 있는 현재 UTC 시각"""
    return datetime.now(UTC)
