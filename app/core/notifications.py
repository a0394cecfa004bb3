"""외부 알림 싱크 (fire-and-forget)

도메인 서비스는 user_created, item_created 이벤트를 발행합니다.
이벤트는 트랜잭션이 커밋된 뒤에만 전달되고, 롤백되면 버려집니다.
전달 실패는 로그로만 남기며, 원래 작업을 실패시키거나 롤백하지 않습니다.
"""

import asyncio
from enum import Enum
from functools import lru_cache
from typing import Any

import httpx
from fastapi.encoders import jsonable_encoder
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# session.info에 커밋 대기 중인 이벤트를 쌓는 키
PENDING_EVENTS_KEY = "pending_events"


class EventName(str, Enum):
    """발행 이벤트 이름"""

    USER_CREATED = "user_created"
    ITEM_CREATED = "item_created"


class EventNotifier:
    """알림 싱크 기본 구현 (로그만 기록)"""

    def notify(self, event: EventName, payload: Any) -> None:
        """이벤트 발행 (예외를 호출자에게 전파하지 않음)"""
        try:
            self._dispatch(event, jsonable_encoder(payload))
        except Exception:
            logger.exception(
                "Failed to dispatch event", extra={"event": event.value}
            )

    def notify_after_commit(
        self, session: AsyncSession | Session, event: EventName, payload: Any
    ) -> None:
        """세션의 현재 트랜잭션이 커밋되면 발행

        트랜잭션이 롤백되거나 커밋 없이 끝나면 이벤트는 버려집니다.
        """
        pending = session.info.setdefault(PENDING_EVENTS_KEY, [])
        pending.append((self, event, payload))

    def _dispatch(self, event: EventName, payload: Any) -> None:
        logger.info("Event emitted", extra={"event": event.value})


@event.listens_for(Session, "after_commit")
def _publish_pending_events(session: Session) -> None:
    # SAVEPOINT 해제도 after_commit을 발생시키므로 최상위 커밋에서만 발행
    if session.in_nested_transaction():
        return
    for notifier, name, payload in session.info.pop(PENDING_EVENTS_KEY, []):
        notifier.notify(name, payload)


@event.listens_for(Session, "after_transaction_end")
def _discard_pending_events(
    session: Session, transaction: SessionTransaction
) -> None:
    # 커밋 후에는 이미 비어 있음, 롤백/종료 시에는 버림
    if transaction.parent is None:
        session.info.pop(PENDING_EVENTS_KEY, None)


class WebhookNotifier(EventNotifier):
    """웹훅 URL로 이벤트를 POST 하는 알림 싱크

    전송은 백그라운드 태스크로 실행되며 응답을 기다리지 않습니다.
    """

    def __init__(self, url: str, timeout: float = 3.0):
        self.url = url
        self.timeout = timeout
        self._tasks: set[asyncio.Task] = set()

    def _dispatch(self, event: EventName, payload: Any) -> None:
        task = asyncio.get_running_loop().create_task(
            self._post(event, payload)
        )
        # 태스크가 GC 되지 않도록 완료 전까지 참조 유지
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _post(self, event: EventName, payload: Any) -> None:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.url, json={"event": event.value, "data": payload}
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                f"Event delivery failed: {type(e).__name__}",
                extra={"event": event.value},
            )
        else:
            logger.info("Event delivered", extra={"event": event.value})

    async def drain(self) -> None:
        """진행 중인 전송 완료 대기 (종료 시 사용)"""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)


@lru_cache
def get_notifier() -> EventNotifier:
    """알림 싱크 의존성 (설정에 웹훅 URL이 없으면 로그만 기록)"""
    if settings.event_webhook_url:
        return WebhookNotifier(
            settings.event_webhook_url,
            timeout=settings.event_webhook_timeout_seconds,
        )
    return EventNotifier()
