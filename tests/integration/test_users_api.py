"""Users API 통합 테스트 - 회원가입, 로그인, 현재 사용자"""

from datetime import timedelta

import pytest

from app.core.config import settings
from app.core.security import Role, TokenService
from app.core.utils import now_utc


class TestRegister:
    """회원가입 API 테스트"""

    @pytest.mark.asyncio
    async def test_register_returns_token(self, client, notifier):
        response = await client.post(
            "/api/v1/users",
            json={
                "username": "alice",
                "email": "alice@example.com",
                "password": "password123",
            },
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["username"] == "alice"
        assert data["email"] == "alice@example.com"
        assert data["token"]
        assert "password" not in data
        assert "password_hash" not in data
        notifier.notify.assert_called_once()

    @pytest.mark.asyncio
    async def test_duplicate_username(self, client, register):
        await register("alice")

        response = await client.post(
            "/api/v1/users",
            json={
                "username": "alice",
                "email": "other@example.com",
                "password": "password123",
            },
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "USERNAME_ALREADY_EXISTS"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client, register):
        await register("alice")

        response = await client.post(
            "/api/v1/users",
            json={
                "username": "alice2",
                "email": "alice@example.com",
                "password": "password123",
            },
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"

    @pytest.mark.asyncio
    async def test_duplicate_email_differing_only_in_case(self, client, register):
        await register("alice")

        response = await client.post(
            "/api/v1/users",
            json={
                "username": "alice2",
                "email": "ALICE@Example.com",
                "password": "password123",
            },
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"


class TestLogin:
    """로그인 API 테스트"""

    @pytest.mark.asyncio
    async def test_login_success(self, client, register):
        await register("alice")

        response = await client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "password123"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["token"]

    @pytest.mark.asyncio
    async def test_login_email_case_insensitive(self, client, register):
        await register("alice")

        response = await client.post(
            "/api/v1/users/login",
            json={"email": "Alice@EXAMPLE.com", "password": "password123"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_look_the_same(
        self, client, register
    ):
        """계정 존재 여부가 드러나지 않음"""
        await register("alice")

        wrong = await client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "wrong-password"},
        )
        unknown = await client.post(
            "/api/v1/users/login",
            json={"email": "nobody@example.com", "password": "password123"},
        )

        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()


class TestCurrentUser:
    """현재 사용자 API 테스트"""

    @pytest.mark.asyncio
    async def test_get_current_user(self, client, register):
        user, headers = await register("alice")

        response = await client.get("/api/v1/user", headers=headers)

        assert response.status_code == 200
        assert response.json()["data"]["username"] == "alice"

    @pytest.mark.asyncio
    async def test_bearer_scheme_accepted(self, client, register):
        user, _ = await register("alice")

        response = await client.get(
            "/api/v1/user",
            headers={"Authorization": f"Bearer {user['token']}"},
        )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_missing_token(self, client):
        response = await client.get("/api/v1/user")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_expired_and_invalid_tokens_look_the_same(
        self, client, register
    ):
        """만료 토큰과 위조 토큰은 같은 응답"""
        user, _ = await register("alice")
        service = TokenService.from_settings(settings)
        expired = service.issue(
            user["id"],
            Role.USER,
            now=now_utc() - timedelta(days=settings.access_token_expire_days + 1),
        )

        expired_response = await client.get(
            "/api/v1/user", headers={"Authorization": f"Token {expired}"}
        )
        invalid_response = await client.get(
            "/api/v1/user", headers={"Authorization": "Token not-a-jwt"}
        )

        assert expired_response.status_code == 401
        assert invalid_response.status_code == 401
        assert expired_response.json() == invalid_response.json()

    @pytest.mark.asyncio
    async def test_update_current_user(self, client, register):
        _, headers = await register("alice")

        response = await client.put(
            "/api/v1/user",
            json={"bio": "I sell lamps", "image": "http://img.example/a.png"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["bio"] == "I sell lamps"
        assert data["image"] == "http://img.example/a.png"
        assert data["username"] == "alice"

    @pytest.mark.asyncio
    async def test_update_password_then_login(self, client, register):
        _, headers = await register("alice")

        await client.put(
            "/api/v1/user", json={"password": "new-password"}, headers=headers
        )
        old = await client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "password123"},
        )
        new = await client.post(
            "/api/v1/users/login",
            json={"email": "alice@example.com", "password": "new-password"},
        )

        assert old.status_code == 401
        assert new.status_code == 200

    @pytest.mark.asyncio
    async def test_update_to_taken_username(self, client, register):
        await register("bob")
        _, headers = await register("alice")

        response = await client.put(
            "/api/v1/user", json={"username": "bob"}, headers=headers
        )

        assert response.status_code == 409
