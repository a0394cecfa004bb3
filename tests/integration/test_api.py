"""API 통합 테스트 - 응답 구조, 로깅, 미들웨어 검증"""

from unittest.mock import AsyncMock, patch

import pytest


class TestHealthCheck:
    """헬스 체크 API 테스트"""

    @pytest.mark.asyncio
    async def test_health_check_response_structure(self, client):
        """헬스 체크 응답 구조 검증"""
        response = await client.get("/health")

        assert response.status_code == 200

        data = response.json()
        assert data["success"] is True
        assert data["message"] == "OK"
        assert data["data"]["status"] == "healthy"
        assert data["data"]["database"] == "ok"

    @pytest.mark.asyncio
    async def test_health_check_degraded(self, client):
        """저장소에 닿지 않으면 503 degraded"""
        with patch("app.main.ping_database", AsyncMock(return_value=False)):
            response = await client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["success"] is False
        assert data["data"]["status"] == "degraded"
        assert data["data"]["database"] == "unavailable"

    @pytest.mark.asyncio
    async def test_health_check_is_not_logged(self, client):
        """/health는 로깅 제외 경로 (처리 시간 헤더 없음)"""
        response = await client.get("/health")

        assert response.status_code == 200
        assert "x-process-time" not in response.headers


class TestAPIRoot:
    """API 루트 테스트"""

    @pytest.mark.asyncio
    async def test_api_v1_root(self, client):
        response = await client.get("/api/v1/")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"]["version"] == "1.0.0"


class TestMiddleware:
    """미들웨어 동작 검증"""

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client):
        response = await client.get("/api/v1/")

        assert response.headers.get("x-request-id")
        assert response.headers.get("x-process-time", "").endswith("ms")

    @pytest.mark.asyncio
    async def test_request_id_propagated(self, client):
        response = await client.get(
            "/api/v1/", headers={"X-Request-ID": "req-abc-123"}
        )

        assert response.headers["x-request-id"] == "req-abc-123"


class TestErrorEnvelope:
    """에러 응답 형식 검증"""

    @pytest.mark.asyncio
    async def test_validation_error_envelope(self, client):
        """검증 실패는 필드 단위 상세와 함께 422"""
        response = await client.post(
            "/api/v1/users",
            json={"username": "bad name", "email": "x", "password": "1"},
        )

        assert response.status_code == 422
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "VALIDATION_ERROR"
        fields = {tuple(e["loc"])[-1] for e in data["error"]["detail"]["errors"]}
        assert {"username", "email", "password"} <= fields

    @pytest.mark.asyncio
    async def test_unknown_route_is_404(self, client):
        response = await client.get("/api/v99/")

        assert response.status_code == 404
        assert response.json()["success"] is False
