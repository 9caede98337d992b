# tests/domains/test_usr_n.py

"""
'usr' 도메인 (사용자 관리) 관련 API 엔드포인트에 대한 통합 테스트 모듈입니다.
"""

from datetime import datetime, UTC

import pytest
from httpx import AsyncClient

from app.domains.usr import models as usr_models


# =============================================================================
# 1. 사용자 목록 (관리자)
# =============================================================================
@pytest.mark.asyncio
async def test_read_users_admin(
    admin_client: AsyncClient,
    test_customer: usr_models.User,
    test_other_customer: usr_models.User,
):
    """(성공) 관리자는 페이지네이션된 사용자 목록을 조회합니다."""
    response = await admin_client.get("/api/users", params={"limit": 2, "sortBy": "email", "sortOrder": "asc"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["meta"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}
    assert [u["email"] for u in data["items"]] == ["admin@example.com", "customer@example.com"]


@pytest.mark.asyncio
async def test_read_users_filters(admin_client: AsyncClient, test_customer: usr_models.User):
    response = await admin_client.get("/api/users", params={"role": "customer", "search": "jane"})

    assert response.status_code == 200
    items = response.json()["data"]["items"]
    assert [u["id"] for u in items] == [test_customer.id]


@pytest.mark.asyncio
async def test_read_users_forbidden_for_customer(customer_client: AsyncClient):
    """(실패) 고객은 사용자 목록을 조회할 수 없습니다."""
    response = await customer_client.get("/api/users")

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_read_users_limit_too_large(admin_client: AsyncClient):
    """(실패) limit 이 최대값을 넘으면 400 검증 오류입니다."""
    response = await admin_client.get("/api/users", params={"limit": 1000})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "limit"


# =============================================================================
# 2. 단일 사용자 조회
# =============================================================================
@pytest.mark.asyncio
async def test_read_self(customer_client: AsyncClient, test_customer: usr_models.User):
    response = await customer_client.get(f"/api/users/{test_customer.id}")

    assert response.status_code == 200
    assert response.json()["data"]["email"] == "customer@example.com"


@pytest.mark.asyncio
async def test_read_other_user_forbidden(customer_client: AsyncClient, test_other_customer: usr_models.User):
    """(실패) 고객은 다른 사용자의 정보를 조회할 수 없습니다."""
    response = await customer_client.get(f"/api/users/{test_other_customer.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_read_user_not_found(admin_client: AsyncClient):
    response = await admin_client.get("/api/users/999999")
    assert response.status_code == 404


# =============================================================================
# 3. 사용자 수정
# =============================================================================
@pytest.mark.asyncio
async def test_customer_updates_own_name(customer_client: AsyncClient, test_customer: usr_models.User):
    """(성공) 고객은 자신의 이름을 변경할 수 있습니다."""
    response = await customer_client.put(f"/api/users/{test_customer.id}", json={"name": "Jane Renamed"})

    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Jane Renamed"


@pytest.mark.asyncio
async def test_customer_cannot_change_own_role(customer_client: AsyncClient, test_customer: usr_models.User):
    """(실패) 고객은 자신의 역할을 바꿀 수 없습니다."""
    response = await customer_client.put(f"/api/users/{test_customer.id}", json={"role": "admin"})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_promotes_customer(admin_client: AsyncClient, test_customer: usr_models.User):
    response = await admin_client.put(f"/api/users/{test_customer.id}", json={"role": "admin"})

    assert response.status_code == 200
    assert response.json()["data"]["role"] == "admin"


@pytest.mark.asyncio
async def test_last_admin_cannot_be_demoted(admin_client: AsyncClient, test_admin_user: usr_models.User):
    """(실패) 마지막 활성 관리자는 강등할 수 없습니다."""
    response = await admin_client.put(f"/api/users/{test_admin_user.id}", json={"role": "customer"})

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot demote or deactivate the last active admin account."


@pytest.mark.asyncio
async def test_update_user_rejects_unknown_fields(admin_client: AsyncClient, test_customer: usr_models.User):
    """(실패) 정의되지 않은 필드와 빈 본문은 400 입니다."""
    response = await admin_client.put(f"/api/users/{test_customer.id}", json={"email": "x@example.com"})
    assert response.status_code == 400

    response = await admin_client.put(f"/api/users/{test_customer.id}", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"name": None}, {"role": None}, {"is_active": None}])
async def test_admin_update_user_rejects_null(
    admin_client: AsyncClient, test_customer: usr_models.User, payload: dict
):
    """(실패) 명시적인 null 값은 검증 오류(400)로 거부됩니다."""
    response = await admin_client.put(f"/api/users/{test_customer.id}", json=payload)

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_customer_update_own_name_rejects_null(customer_client: AsyncClient, test_customer: usr_models.User):
    response = await customer_client.put(f"/api/users/{test_customer.id}", json={"name": None})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"
    assert response.json()["errors"][0]["field"] == "name"


@pytest.mark.asyncio
async def test_deleted_admin_does_not_count_as_other_admin(
    admin_client: AsyncClient, test_admin_user: usr_models.User, user_factory
):
    """(실패) 소프트 삭제된 관리자는 남은 관리자로 인정되지 않습니다."""
    await user_factory(
        "retired-admin@example.com", "retiredpass123",
        role=usr_models.UserRole.ADMIN, name="Retired Admin", deleted_at=datetime.now(UTC),
    )

    response = await admin_client.put(f"/api/users/{test_admin_user.id}", json={"is_active": False})

    assert response.status_code == 400
    assert response.json()["message"] == "Cannot demote or deactivate the last active admin account."
