# tests/test_main.py

"""
FastAPI 애플리케이션의 메인 엔드포인트와 공통 오류 응답 형식에 대한 통합 테스트 모듈입니다.
"""

import pytest
from httpx import AsyncClient

from app.core.config import settings


@pytest.mark.asyncio
async def test_read_root(client: AsyncClient):
    """루트 엔드포인트 (`GET /`)가 환영 메시지를 반환하는지 테스트합니다."""
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json() == {
        "message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."
    }


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    """헬스 체크 엔드포인트가 데이터베이스 연결 상태를 반환하는지 테스트합니다."""
    response = await client.get("/health-check")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database_connection": "successful"}


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(client: AsyncClient):
    """
    존재하지 않는 경로의 404 도 공통 오류 응답 봉투로 반환되는지 테스트합니다.
    """
    response = await client.get("/api/does-not-exist")

    assert response.status_code == 404
    body = response.json()
    assert body["success"] is False
    assert body["statusCode"] == 404
    assert body["data"] is None
    assert body["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_validation_error_envelope(client: AsyncClient):
    """요청 본문 검증 실패는 400 VALIDATION_ERROR 와 필드별 오류 목록으로 반환됩니다."""
    response = await client.post("/api/auth/register", json={"name": "A", "email": "not-an-email"})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    fields = {err["field"] for err in body["errors"]}
    assert {"email", "password"} <= fields
