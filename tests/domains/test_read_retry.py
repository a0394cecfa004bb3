"""일시적 저장소 장애 후 조회 재시도 - 실제 세션 (PostgreSQL)

재시도 전 롤백이 이미 로드된 인스턴스를 만료시켜도 서비스가
지연 로딩 없이 결과를 반환하는지 확인합니다.
"""

from unittest.mock import MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from app.core.security import Identity
from app.domains.comments.models import Comment
from app.domains.comments.service import CommentService
from app.domains.items.models import Item
from app.domains.items.repository import ItemFilters
from app.domains.items.service import ItemService
from app.domains.users.models import User


def fail_once(method):
    """첫 호출만 연결 장애를 내고 이후에는 원래 메서드를 호출"""
    calls = {"count": 0}

    async def wrapper(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise OperationalError("SELECT", {}, Exception("connection reset"))
        return await method(*args, **kwargs)

    wrapper.calls = calls
    return wrapper


@pytest_asyncio.fixture
async def seeded(session_factory):
    """커밋된 판매자, 구매자, 상품, 댓글 2개"""
    async with session_factory() as session:
        seller = User(
            username="alice",
            email="alice@example.com",
            password_hash="hash",
            password_salt="salt",
        )
        buyer = User(
            username="bob",
            email="bob@example.com",
            password_hash="hash",
            password_salt="salt",
        )
        session.add_all([seller, buyer])
        await session.flush()
        item = Item(
            slug="lamp",
            title="Lamp",
            description="desc",
            tag_list=["vintage"],
            seller_id=seller.id,
        )
        session.add(item)
        await session.flush()
        session.add_all(
            [
                Comment(body="first", author_id=buyer.id, item_id=item.id),
                Comment(body="second", author_id=seller.id, item_id=item.id),
            ]
        )
        await session.commit()
        return {"seller_id": seller.id, "buyer_id": buyer.id, "item_id": item.id}


class TestCommentReadRetry:
    @pytest.mark.asyncio
    async def test_list_comments_after_transient_failure(
        self, session_factory, seeded
    ):
        async with session_factory() as session:
            service = CommentService(session)
            retried = fail_once(service.repository.list_by_item)
            service.repository.list_by_item = retried

            views = await service.list_comments("lamp")

        assert retried.calls["count"] == 2
        assert [view.body for view in views] == ["first", "second"]
        assert [view.author.username for view in views] == ["bob", "alice"]

    @pytest.mark.asyncio
    async def test_delete_comment_after_transient_failure(
        self, session_factory, seeded
    ):
        async with session_factory() as session:
            service = CommentService(session)
            comments = await service.list_comments("lamp")
            comment_id = comments[0].id
            service.repository.get_by_id = fail_once(service.repository.get_by_id)

            await service.delete_comment(
                Identity(user_id=seeded["buyer_id"]), "lamp", comment_id
            )
            await session.commit()

        async with session_factory() as session:
            remaining = await CommentService(session).list_comments("lamp")

        assert [view.body for view in remaining] == ["second"]


class TestItemReadRetry:
    @pytest.mark.asyncio
    async def test_list_items_after_transient_count_failure(
        self, session_factory, seeded
    ):
        """개수 조회가 실패해도 목록과 개수를 함께 다시 읽음"""
        async with session_factory() as session:
            service = ItemService(session, notifier=MagicMock())
            service.repository.count = fail_once(service.repository.count)

            views, total = await service.list_items(
                ItemFilters(tag="vintage"),
                viewer=Identity(user_id=seeded["buyer_id"]),
            )

        assert total == 1
        assert [view.slug for view in views] == ["lamp"]
        assert views[0].seller.username == "alice"
