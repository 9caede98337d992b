# tests/domains/test_sweet_n.py

"""
'sweet' 도메인의 스윗 API (목록, 검색, CRUD, 재입고)에 대한 통합 테스트 모듈입니다.
"""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from app.domains.sweet import models as sweet_models

SWEETS_URL = "/api/sweets"


def _names(response) -> list:
    data = response.json()["data"]
    items = data["items"] if isinstance(data, dict) else data
    return [s["name"] for s in items]


# =============================================================================
# 1. 생성
# =============================================================================
@pytest.mark.asyncio
async def test_create_sweet_and_read_back(admin_client: AsyncClient, test_category: sweet_models.Category):
    """(성공) 가격은 소수점 2자리로 반올림되고, 조회 결과에 카테고리 요약이 포함됩니다."""
    payload = {"name": "Milk Bar", "category_id": test_category.id, "price": "10.005", "quantity": 7}
    response = await admin_client.post(SWEETS_URL, json=payload)

    assert response.status_code == 201
    created = response.json()["data"]
    assert created["price"] == "10.01"
    assert created["quantity"] == 7
    assert created["is_active"] is True
    assert created["category"] == {"id": test_category.id, "name": "Chocolates"}

    response = await admin_client.get(f"{SWEETS_URL}/{created['id']}")
    assert response.status_code == 200
    fetched = response.json()["data"]
    assert fetched["name"] == "Milk Bar"
    assert fetched["price"] == "10.01"


@pytest.mark.asyncio
async def test_create_sweet_validation(admin_client: AsyncClient, test_category: sweet_models.Category):
    """(실패) 이름 형식, 가격 범위, 재고 범위를 위반하면 400 입니다."""
    base = {"name": "Valid Name", "category_id": test_category.id, "price": "1.00", "quantity": 1}
    invalid = [
        {"name": "9Lives"},
        {"name": "X"},
        {"price": "0"},
        {"price": "1000000.00"},
        {"quantity": -1},
        {"quantity": 1000000},
        {"is_active": False},
    ]
    for override in invalid:
        response = await admin_client.post(SWEETS_URL, json={**base, **override})
        assert response.status_code == 400, override
        assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_create_sweet_duplicate_name(admin_client: AsyncClient, test_sweet: sweet_models.Sweet):
    payload = {"name": test_sweet.name, "category_id": test_sweet.category_id, "price": "3.00"}
    response = await admin_client.post(SWEETS_URL, json=payload)

    assert response.status_code == 409
    assert response.json()["message"] == "Sweet name is already present !"


@pytest.mark.asyncio
async def test_create_sweet_name_of_deleted_sweet_is_free(
    admin_client: AsyncClient, sweet_factory, test_category: sweet_models.Category
):
    """(성공) 삭제된 스윗의 이름은 다시 사용할 수 있습니다."""
    await sweet_factory("Old Fudge", test_category, deleted=True)
    payload = {"name": "Old Fudge", "category_id": test_category.id, "price": "2.00"}
    response = await admin_client.post(SWEETS_URL, json=payload)
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_sweet_category_checks(admin_client: AsyncClient, category_factory):
    """(실패) 없는 카테고리는 404, 삭제된 카테고리는 400 입니다."""
    payload = {"name": "Orphan", "category_id": 999999, "price": "1.00"}
    response = await admin_client.post(SWEETS_URL, json=payload)
    assert response.status_code == 404
    assert response.json()["message"] == "Category not found"

    gone = await category_factory("Gone", deleted=True)
    response = await admin_client.post(SWEETS_URL, json={**payload, "category_id": gone.id})
    assert response.status_code == 400
    assert response.json()["message"] == "Category is inactive and cannot be used"


@pytest.mark.asyncio
async def test_create_sweet_forbidden_for_customer(customer_client: AsyncClient, test_category: sweet_models.Category):
    payload = {"name": "Sneaky", "category_id": test_category.id, "price": "1.00"}
    assert (await customer_client.post(SWEETS_URL, json=payload)).status_code == 403


# =============================================================================
# 2. 목록 / 필터 / 검색
# =============================================================================
@pytest_asyncio.fixture
async def catalog(sweet_factory, category_factory, test_category):
    gummies = await category_factory("Gummies")
    return {
        "truffle": await sweet_factory("Dark Truffle", test_category, price="12.50", quantity=5),
        "bar": await sweet_factory("Milk Bar", test_category, price="3.00", quantity=0),
        "bears": await sweet_factory("Gummy Bears", gummies, price="4.25", quantity=20),
        "retired": await sweet_factory("Retired Praline", test_category, price="8.00", quantity=3, deleted=True),
    }


@pytest.mark.asyncio
async def test_list_sweets_requires_auth(client: AsyncClient):
    assert (await client.get(SWEETS_URL)).status_code == 401


@pytest.mark.asyncio
async def test_list_sweets_filters(customer_client: AsyncClient, catalog):
    async def names(params):
        response = await customer_client.get(SWEETS_URL, params={**params, "sortBy": "name", "sortOrder": "asc"})
        assert response.status_code == 200
        return _names(response)

    assert await names({}) == ["Dark Truffle", "Gummy Bears", "Milk Bar"]
    assert await names({"category": "choco"}) == ["Dark Truffle", "Milk Bar"]
    assert await names({"categoryId": catalog["bears"].category_id}) == ["Gummy Bears"]
    assert await names({"minPrice": "4", "maxPrice": "13"}) == ["Dark Truffle", "Gummy Bears"]
    assert await names({"inStock": "true"}) == ["Dark Truffle", "Gummy Bears"]
    assert await names({"inStock": "false"}) == ["Milk Bar"]
    assert await names({"name": "bar"}) == ["Milk Bar"]


@pytest.mark.asyncio
async def test_list_sweets_sorting(customer_client: AsyncClient, catalog):
    response = await customer_client.get(SWEETS_URL, params={"sortBy": "price", "sortOrder": "desc"})
    assert _names(response) == ["Dark Truffle", "Gummy Bears", "Milk Bar"]

    response = await customer_client.get(SWEETS_URL, params={"sortBy": "colour"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_sweets_invalid_price_range(customer_client: AsyncClient):
    response = await customer_client.get(SWEETS_URL, params={"minPrice": "10", "maxPrice": "1"})

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_PRICE_RANGE"


@pytest.mark.asyncio
async def test_customer_cannot_see_deleted_sweets(customer_client: AsyncClient, catalog):
    """(성공) 고객은 is_active / includeDeleted 요청 값과 관계없이 활성 스윗만 봅니다."""
    response = await customer_client.get(SWEETS_URL, params={"is_active": "false", "includeDeleted": "true"})
    assert "Retired Praline" not in _names(response)
    assert len(_names(response)) == 3

    response = await customer_client.get(f"{SWEETS_URL}/{catalog['retired'].id}", params={"includeDeleted": "true"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_sees_deleted_sweets_on_request(admin_client: AsyncClient, catalog):
    response = await admin_client.get(SWEETS_URL)
    assert "Retired Praline" not in _names(response)

    response = await admin_client.get(SWEETS_URL, params={"is_active": "false", "includeDeleted": "true"})
    assert _names(response) == ["Retired Praline"]

    response = await admin_client.get(f"{SWEETS_URL}/{catalog['retired'].id}", params={"includeDeleted": "true"})
    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is False


@pytest.mark.asyncio
async def test_search_sweets(customer_client: AsyncClient, catalog):
    """(성공) 검색은 페이지네이션 없이 목록을 반환합니다."""
    response = await customer_client.get(f"{SWEETS_URL}/search", params={"q": "r"})
    assert response.status_code == 200
    assert sorted(_names(response)) == ["Dark Truffle", "Gummy Bears", "Milk Bar"]

    response = await customer_client.get(f"{SWEETS_URL}/search", params={"q": "r", "category": "gumm"})
    assert _names(response) == ["Gummy Bears"]

    response = await customer_client.get(f"{SWEETS_URL}/search", params={"q": "praline"})
    assert _names(response) == []


@pytest.mark.asyncio
async def test_search_requires_query(customer_client: AsyncClient):
    assert (await customer_client.get(f"{SWEETS_URL}/search")).status_code == 400


@pytest.mark.asyncio
async def test_search_treats_wildcards_literally(customer_client: AsyncClient, catalog):
    response = await customer_client.get(f"{SWEETS_URL}/search", params={"q": "%"})
    assert _names(response) == []


@pytest.mark.asyncio
async def test_sweets_by_category(customer_client: AsyncClient, catalog, test_category, category_factory):
    response = await customer_client.get(f"{SWEETS_URL}/category/{test_category.id}", params={"sortBy": "name", "sortOrder": "asc"})
    assert response.status_code == 200
    assert _names(response) == ["Dark Truffle", "Milk Bar"]
    assert response.json()["data"]["meta"]["total"] == 2

    gone = await category_factory("Gone", deleted=True)
    assert (await customer_client.get(f"{SWEETS_URL}/category/{gone.id}")).status_code == 404


# =============================================================================
# 3. 수정 / 삭제 / 재활성화
# =============================================================================
@pytest.mark.asyncio
async def test_update_sweet(admin_client: AsyncClient, test_sweet: sweet_models.Sweet):
    response = await admin_client.put(f"{SWEETS_URL}/{test_sweet.id}", json={"price": 15, "quantity": 40})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["price"] == "15.00"
    assert data["quantity"] == 40
    assert data["name"] == test_sweet.name


@pytest.mark.asyncio
async def test_update_sweet_rejects_is_active_and_null(admin_client: AsyncClient, test_sweet: sweet_models.Sweet):
    """(실패) is_active 변경이나 null 값은 400 입니다."""
    url = f"{SWEETS_URL}/{test_sweet.id}"
    assert (await admin_client.put(url, json={"is_active": False})).status_code == 400
    assert (await admin_client.put(url, json={"price": None})).status_code == 400
    assert (await admin_client.put(url, json={})).status_code == 400


@pytest.mark.asyncio
async def test_update_sweet_name_conflict(admin_client: AsyncClient, sweet_factory, test_sweet, test_category):
    other = await sweet_factory("Caramel Chew", test_category)
    response = await admin_client.put(f"{SWEETS_URL}/{other.id}", json={"name": test_sweet.name})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delete_and_reactivate_sweet(admin_client: AsyncClient, test_sweet: sweet_models.Sweet):
    url = f"{SWEETS_URL}/{test_sweet.id}"

    response = await admin_client.delete(url)
    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is False
    assert (await admin_client.delete(url)).status_code == 404
    assert (await admin_client.get(url)).status_code == 404

    response = await admin_client.post(f"{url}/reactivate")
    assert response.status_code == 200
    assert response.json()["data"]["is_active"] is True


@pytest.mark.asyncio
async def test_reactivate_sweet_name_conflict(
    admin_client: AsyncClient, sweet_factory, test_category: sweet_models.Category
):
    """(실패) 같은 이름의 활성 스윗이 있으면 재활성화는 409 입니다."""
    retired = await sweet_factory("Fudge", test_category, deleted=True)
    await sweet_factory("Fudge", test_category)

    response = await admin_client.post(f"{SWEETS_URL}/{retired.id}/reactivate")
    assert response.status_code == 409


# =============================================================================
# 4. 재입고
# =============================================================================
@pytest.mark.asyncio
async def test_restock_sweet(admin_client: AsyncClient, test_admin_user, test_sweet: sweet_models.Sweet):
    """(성공) 재입고는 재고를 늘리고 이력을 남깁니다."""
    response = await admin_client.post(f"{SWEETS_URL}/{test_sweet.id}/restock", json={"quantity": 10})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["quantity"] == 10
    assert data["admin_id"] == test_admin_user.id
    assert data["sweet"]["quantity"] == 15

    response = await admin_client.get(f"{SWEETS_URL}/{test_sweet.id}")
    assert response.json()["data"]["quantity"] == 15


@pytest.mark.asyncio
async def test_restock_validation_and_permissions(
    admin_client: AsyncClient, customer_client: AsyncClient, sweet_factory, test_sweet, test_category
):
    url = f"{SWEETS_URL}/{test_sweet.id}/restock"
    assert (await customer_client.post(url, json={"quantity": 5})).status_code == 403
    assert (await admin_client.post(url, json={"quantity": 0})).status_code == 400
    assert (await admin_client.post(url, json={"quantity": 10001})).status_code == 400
    assert (await admin_client.post(f"{SWEETS_URL}/999999/restock", json={"quantity": 5})).status_code == 404

    retired = await sweet_factory("Retired", test_category, deleted=True)
    assert (await admin_client.post(f"{SWEETS_URL}/{retired.id}/restock", json={"quantity": 5})).status_code == 404


@pytest.mark.asyncio
async def test_restock_cannot_exceed_max_quantity(
    admin_client: AsyncClient, sweet_factory, test_category: sweet_models.Category
):
    """(실패) 재입고 후 재고가 최대 수량(999999)을 넘으면 400 이고 재고는 그대로입니다."""
    sweet = await sweet_factory("Bulk Fudge", test_category, quantity=999995)
    url = f"{SWEETS_URL}/{sweet.id}/restock"

    response = await admin_client.post(url, json={"quantity": 10})
    assert response.status_code == 400
    assert response.json()["code"] == "STOCK_LIMIT_EXCEEDED"
    assert (await admin_client.get(f"{SWEETS_URL}/{sweet.id}")).json()["data"]["quantity"] == 999995

    response = await admin_client.post(url, json={"quantity": 4})
    assert response.status_code == 201
    assert response.json()["data"]["sweet"]["quantity"] == 999999
