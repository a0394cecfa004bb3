"""마켓플레이스 시나리오 E2E 테스트 (가입부터 삭제까지 API만으로 진행)

Note:
    PostgreSQL 컨테이너가 필요하며 Docker가 없으면 건너뜁니다.
"""

import pytest

from app.core.notifications import EventName


class TestRequestTracking:
    """요청 ID는 실패 응답에도 그대로 돌아옴"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path, status_code",
        [
            ("get", "/api/v1/items/no-such-item", 404),
            ("get", "/api/v1/user", 401),
            ("post", "/api/v1/items", 401),
        ],
    )
    async def test_error_response_keeps_request_id(
        self, client, method, path, status_code
    ):
        response = await client.request(
            method, path, headers={"X-Request-ID": "err-001"}
        )

        assert response.status_code == status_code
        assert response.headers["x-request-id"] == "err-001"
        assert response.json()["success"] is False


class TestMarketplaceScenario:
    """판매자/구매자 전체 흐름"""

    @pytest.mark.asyncio
    async def test_full_marketplace_flow(self, client, register, notifier):
        """마켓플레이스 전체 생명주기

        시나리오:
        1. 판매자/구매자 가입
        2. 판매자가 상품 등록
        3. 구매자가 판매자를 팔로우하고 피드에서 상품 확인
        4. 구매자가 찜하고 댓글 작성
        5. 판매자가 상품 설명 수정
        6. 판매자가 상품 삭제 (댓글도 함께 삭제)
        """
        # 1. 가입
        _, seller = await register("seller")
        _, buyer = await register("buyer")

        # 2. 상품 등록
        response = await client.post(
            "/api/v1/items",
            json={
                "title": "Mid-Century Chair",
                "description": "Teak, good condition",
                "tag_list": ["furniture", "vintage"],
            },
            headers=seller,
        )
        assert response.status_code == 201
        slug = response.json()["data"]["slug"]
        assert slug == "mid-century-chair"

        # 3. 팔로우 후 피드 확인
        response = await client.post(
            "/api/v1/profiles/seller/follow", headers=buyer
        )
        assert response.json()["data"]["following"] is True

        response = await client.get("/api/v1/items/feed", headers=buyer)
        feed = response.json()["data"]
        assert [i["slug"] for i in feed] == [slug]
        assert feed[0]["seller"]["following"] is True

        # 4. 찜 + 댓글
        response = await client.post(
            f"/api/v1/items/{slug}/favorite", headers=buyer
        )
        assert response.json()["data"]["favorites_count"] == 1

        response = await client.post(
            f"/api/v1/items/{slug}/comments",
            json={"body": "Does it ship?"},
            headers=buyer,
        )
        assert response.status_code == 201

        response = await client.get("/api/v1/items?favorited=buyer")
        assert [i["slug"] for i in response.json()["data"]] == [slug]

        # 5. 설명 수정 (slug 유지)
        response = await client.put(
            f"/api/v1/items/{slug}",
            json={"description": "Teak, ships worldwide"},
            headers=seller,
        )
        assert response.json()["data"]["slug"] == slug
        assert response.json()["data"]["favorites_count"] == 1

        # 6. 삭제
        response = await client.delete(f"/api/v1/items/{slug}", headers=seller)
        assert response.json()["data"]["deleted_comments"] == 1

        response = await client.get("/api/v1/items/feed", headers=buyer)
        assert response.json()["data"] == []

        published = [call.args[0] for call in notifier.notify.call_args_list]
        assert published.count(EventName.USER_CREATED) == 2
        assert published.count(EventName.ITEM_CREATED) == 1


class TestErrorScenarios:
    """에러 처리 E2E 시나리오"""

    @pytest.mark.asyncio
    async def test_authentication_error_then_login(self, client, register):
        """로그인 실패 후 올바른 비밀번호로 재시도"""
        await register("alice")

        response = await client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )
        assert response.status_code == 401

        response = await client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "password123"},
        )
        assert response.status_code == 200

        token = response.json()["data"]["token"]
        response = await client.get(
            "/api/v1/user", headers={"Authorization": f"Token {token}"}
        )
        assert response.json()["data"]["username"] == "alice"


class TestRenameScenario:
    """판매자 사용자명 변경 후 목록/프로필"""

    @pytest.mark.asyncio
    async def test_items_follow_renamed_seller(self, client, register):
        _, seller = await register("oldname")
        _, buyer = await register("buyer")
        await client.post(
            "/api/v1/items",
            json={"title": "Desk Lamp", "description": "Brass"},
            headers=seller,
        )
        await client.post("/api/v1/profiles/oldname/follow", headers=buyer)

        response = await client.put(
            "/api/v1/user", json={"username": "newname"}, headers=seller
        )
        assert response.status_code == 200

        # 이전 사용자명은 더 이상 존재하지 않음
        response = await client.get("/api/v1/profiles/oldname")
        assert response.status_code == 404

        response = await client.get("/api/v1/items?seller=newname")
        assert [i["slug"] for i in response.json()["data"]] == ["desk-lamp"]

        # 팔로우 관계는 사용자 ID 기준이므로 유지
        response = await client.get("/api/v1/profiles/newname", headers=buyer)
        assert response.json()["data"]["following"] is True
