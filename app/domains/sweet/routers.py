# app/domains/sweet/routers.py

"""
'sweet' 도메인 (카테고리, 스윗, 재입고)과 관련된 API 엔드포인트를 정의하는 모듈입니다.

- category_router: /sweet/category  (조회는 공개, 변경은 관리자)
- router:          /sweets          (모든 엔드포인트 인증 필요, 변경/재입고는 관리자)
"""

from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.database import get_session
from app.core.exceptions import NotFoundError
from app.core.query_utils import ListQuery
from app.core.responses import ApiResponse, Paginated, PaginationMeta
from app.core.visibility import resolve_visibility
from app.domains.purchase import crud as purchase_crud
from app.domains.purchase import schemas as purchase_schemas
from app.domains.usr.schemas import AuthUser

from . import crud as sweet_crud
from . import schemas as sweet_schemas

CATEGORY_SORT_PATTERN = "^(id|name|created_at|updated_at)$"
SWEET_SORT_PATTERN = "^(id|name|price|quantity|created_at|updated_at)$"


category_router = APIRouter(
    responses={404: {"description": "Not found"}},
)
router = APIRouter(
    responses={404: {"description": "Not found"}},
)


def _paginated_sweets(sweets, total, params: ListQuery) -> Paginated[sweet_schemas.SweetRead]:
    return Paginated[sweet_schemas.SweetRead](
        items=[sweet_schemas.SweetRead.model_validate(s) for s in sweets],
        meta=PaginationMeta.build(page=params.page.page, limit=params.page.limit, total=total),
    )


# =============================================================================
# 1. 카테고리 (Category) 엔드포인트
# =============================================================================
@category_router.get("", response_model=ApiResponse[Paginated[sweet_schemas.CategoryRead]], summary="카테고리 목록 조회")
async def read_categories(
    params: ListQuery = Depends(),
    name: Optional[str] = Query(None, min_length=1, max_length=255),
    search: Optional[str] = Query(None, min_length=1, max_length=255),
    is_active: Optional[bool] = Query(None),
    include_deleted: Optional[bool] = Query(None, alias="includeDeleted"),
    sort_by: Optional[str] = Query(None, alias="sortBy", pattern=CATEGORY_SORT_PATTERN),
    db: AsyncSession = Depends(get_session),
    current_user: Optional[AuthUser] = Depends(deps.get_optional_user),
):
    """
    카테고리 목록을 조회합니다.
    관리자가 아니면 is_active / includeDeleted 값과 관계없이 활성 카테고리만 반환합니다.
    """
    visibility = resolve_visibility(
        current_user.role if current_user else None, is_active=is_active, include_deleted=include_deleted,
    )
    categories, total = await sweet_crud.category.list_categories(
        db, visibility=visibility, page=params.page, name=name, search=search,
        sort_by=sort_by, sort_order=params.sort_order,
    )
    return ApiResponse(
        data=Paginated[sweet_schemas.CategoryRead](
            items=[sweet_schemas.CategoryRead.model_validate(c) for c in categories],
            meta=PaginationMeta.build(page=params.page.page, limit=params.page.limit, total=total),
        ),
        message="Categories fetched successfully",
    )


@category_router.get("/active/list", response_model=ApiResponse[List[sweet_schemas.CategorySummary]], summary="활성 카테고리 선택 목록")
async def read_active_categories(db: AsyncSession = Depends(get_session)):
    categories = await sweet_crud.category.get_active(db)
    return ApiResponse(
        data=[sweet_schemas.CategorySummary.model_validate(c) for c in categories],
        message="Active categories fetched successfully",
    )


@category_router.get("/{category_id}", response_model=ApiResponse[sweet_schemas.CategoryRead], summary="특정 카테고리 조회")
async def read_category(
    category_id: int,
    include_deleted: Optional[bool] = Query(None, alias="includeDeleted"),
    db: AsyncSession = Depends(get_session),
    current_user: Optional[AuthUser] = Depends(deps.get_optional_user),
):
    visibility = resolve_visibility(current_user.role if current_user else None, include_deleted=include_deleted)
    category = await sweet_crud.category.get_visible(db, category_id, visibility)
    if category is None:
        raise NotFoundError(sweet_crud.CATEGORY_NOT_FOUND, code="CATEGORY_NOT_FOUND")
    return ApiResponse(data=sweet_schemas.CategoryRead.model_validate(category), message="Category fetched successfully")


@category_router.post(
    "",
    response_model=ApiResponse[sweet_schemas.CategoryRead],
    status_code=status.HTTP_201_CREATED,
    summary="새 카테고리 생성",
)
async def create_category(
    category_in: sweet_schemas.CategoryCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    category = await sweet_crud.category.create(db, obj_in=category_in)
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=sweet_schemas.CategoryRead.model_validate(category),
        message="Category created successfully",
    )


@category_router.put("/{category_id}", response_model=ApiResponse[sweet_schemas.CategoryRead], summary="카테고리 수정")
async def update_category(
    category_id: int,
    category_in: sweet_schemas.CategoryUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    db_category = await sweet_crud.category.get(db, category_id)
    if db_category is None:
        raise NotFoundError(sweet_crud.CATEGORY_NOT_FOUND, code="CATEGORY_NOT_FOUND")
    category = await sweet_crud.category.update(db, db_obj=db_category, obj_in=category_in)
    return ApiResponse(data=sweet_schemas.CategoryRead.model_validate(category), message="Category updated successfully")


@category_router.delete("/{category_id}", response_model=ApiResponse[sweet_schemas.CategoryRead], summary="카테고리 삭제 (soft delete)")
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    category = await sweet_crud.category.soft_delete(db, id=category_id)
    if category is None:
        raise NotFoundError(sweet_crud.CATEGORY_NOT_FOUND, code="CATEGORY_NOT_FOUND")
    return ApiResponse(data=sweet_schemas.CategoryRead.model_validate(category), message="Category deleted successfully")


@category_router.post("/{category_id}/reactivate", response_model=ApiResponse[sweet_schemas.CategoryRead], summary="카테고리 재활성화")
async def reactivate_category(
    category_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    category = await sweet_crud.category.reactivate(db, id=category_id)
    if category is None:
        raise NotFoundError(sweet_crud.CATEGORY_NOT_FOUND, code="CATEGORY_NOT_FOUND")
    return ApiResponse(data=sweet_schemas.CategoryRead.model_validate(category), message="Category reactivated successfully")


# =============================================================================
# 2. 스윗 (Sweet) 엔드포인트
# =============================================================================
@router.get("", response_model=ApiResponse[Paginated[sweet_schemas.SweetRead]], summary="스윗 목록 조회")
async def read_sweets(
    params: ListQuery = Depends(),
    name: Optional[str] = Query(None, min_length=1, max_length=255),
    category: Optional[str] = Query(None, min_length=1, max_length=255, description="카테고리명 부분 일치"),
    category_id: Optional[int] = Query(None, alias="categoryId", gt=0),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    is_active: Optional[bool] = Query(None),
    include_deleted: Optional[bool] = Query(None, alias="includeDeleted"),
    sort_by: Optional[str] = Query(None, alias="sortBy", pattern=SWEET_SORT_PATTERN),
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    filters = sweet_crud.SweetFilters(
        name=name, category_id=category_id, category_name=category,
        min_price=min_price, max_price=max_price, in_stock=in_stock,
    )
    visibility = resolve_visibility(current_user.role, is_active=is_active, include_deleted=include_deleted)
    sweets, total = await sweet_crud.sweet.list_sweets(
        db, visibility=visibility, filters=filters, page=params.page,
        sort_by=sort_by, sort_order=params.sort_order,
    )
    return ApiResponse(data=_paginated_sweets(sweets, total, params), message="Sweets fetched successfully")


@router.get("/search", response_model=ApiResponse[List[sweet_schemas.SweetRead]], summary="스윗 검색")
async def search_sweets(
    q: str = Query(..., min_length=1, max_length=255, description="이름 검색어"),
    category: Optional[str] = Query(None, min_length=1, max_length=255),
    min_price: Optional[Decimal] = Query(None, alias="minPrice", ge=0),
    max_price: Optional[Decimal] = Query(None, alias="maxPrice", ge=0),
    in_stock: Optional[bool] = Query(None, alias="inStock"),
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    """이름 검색. 페이지네이션 없이 최신순 최대 50건을 반환합니다."""
    filters = sweet_crud.SweetFilters(
        category_name=category, min_price=min_price, max_price=max_price, in_stock=in_stock,
    )
    sweets = await sweet_crud.sweet.search(
        db, q=q.strip(), visibility=resolve_visibility(current_user.role), filters=filters,
    )
    return ApiResponse(
        data=[sweet_schemas.SweetRead.model_validate(s) for s in sweets],
        message="Sweets fetched successfully",
    )


@router.get(
    "/category/{category_id}",
    response_model=ApiResponse[Paginated[sweet_schemas.SweetRead]],
    summary="카테고리별 스윗 목록",
)
async def read_sweets_by_category(
    category_id: int,
    params: ListQuery = Depends(),
    sort_by: Optional[str] = Query(None, alias="sortBy", pattern=SWEET_SORT_PATTERN),
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    sweets, total = await sweet_crud.sweet.get_by_category(
        db, category_id=category_id, visibility=resolve_visibility(current_user.role),
        page=params.page, sort_by=sort_by, sort_order=params.sort_order,
    )
    return ApiResponse(data=_paginated_sweets(sweets, total, params), message="Sweets fetched successfully")


@router.get("/{sweet_id}", response_model=ApiResponse[sweet_schemas.SweetRead], summary="특정 스윗 조회")
async def read_sweet(
    sweet_id: int,
    include_deleted: Optional[bool] = Query(None, alias="includeDeleted"),
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    visibility = resolve_visibility(current_user.role, include_deleted=include_deleted)
    sweet = await sweet_crud.sweet.get_visible(db, sweet_id, visibility)
    if sweet is None:
        raise NotFoundError(sweet_crud.SWEET_NOT_FOUND, code="SWEET_NOT_FOUND")
    return ApiResponse(data=sweet_schemas.SweetRead.model_validate(sweet), message="Sweet fetched successfully")


@router.post(
    "",
    response_model=ApiResponse[sweet_schemas.SweetRead],
    status_code=status.HTTP_201_CREATED,
    summary="새 스윗 생성",
)
async def create_sweet(
    sweet_in: sweet_schemas.SweetCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    sweet = await sweet_crud.sweet.create(db, obj_in=sweet_in)
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=sweet_schemas.SweetRead.model_validate(sweet),
        message="Sweet created successfully",
    )


@router.put("/{sweet_id}", response_model=ApiResponse[sweet_schemas.SweetRead], summary="스윗 수정")
async def update_sweet(
    sweet_id: int,
    sweet_in: sweet_schemas.SweetUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    """삭제된 스윗도 수정할 수 있습니다 (활성 상태는 변경하지 않음)."""
    db_sweet = await sweet_crud.sweet.get(db, sweet_id)
    if db_sweet is None:
        raise NotFoundError(sweet_crud.SWEET_NOT_FOUND, code="SWEET_NOT_FOUND")
    sweet = await sweet_crud.sweet.update(db, db_obj=db_sweet, obj_in=sweet_in)
    return ApiResponse(data=sweet_schemas.SweetRead.model_validate(sweet), message="Sweet updated successfully")


@router.delete("/{sweet_id}", response_model=ApiResponse[sweet_schemas.SweetRead], summary="스윗 삭제 (soft delete)")
async def delete_sweet(
    sweet_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    sweet = await sweet_crud.sweet.soft_delete(db, id=sweet_id)
    if sweet is None:
        raise NotFoundError(sweet_crud.SWEET_NOT_FOUND, code="SWEET_NOT_FOUND")
    return ApiResponse(data=sweet_schemas.SweetRead.model_validate(sweet), message="Sweet deleted successfully")


@router.post("/{sweet_id}/reactivate", response_model=ApiResponse[sweet_schemas.SweetRead], summary="스윗 재활성화")
async def reactivate_sweet(
    sweet_id: int,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    sweet = await sweet_crud.sweet.reactivate(db, id=sweet_id)
    if sweet is None:
        raise NotFoundError(sweet_crud.SWEET_NOT_FOUND, code="SWEET_NOT_FOUND")
    return ApiResponse(data=sweet_schemas.SweetRead.model_validate(sweet), message="Sweet reactivated successfully")


# =============================================================================
# 3. 구매 / 재입고 엔드포인트
# =============================================================================
@router.post(
    "/{sweet_id}/purchase",
    response_model=ApiResponse[purchase_schemas.PurchaseRead],
    status_code=status.HTTP_201_CREATED,
    summary="스윗 구매",
)
async def purchase_sweet(
    sweet_id: int,
    purchase_in: purchase_schemas.PurchaseQuantity,
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    purchase = await purchase_crud.purchase.create_purchase(
        db, sweet_id=sweet_id, quantity=purchase_in.quantity, buyer=current_user,
    )
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=purchase_schemas.PurchaseRead.model_validate(purchase),
        message="Purchase completed successfully",
    )


@router.post(
    "/{sweet_id}/restock",
    response_model=ApiResponse[sweet_schemas.RestockRead],
    status_code=status.HTTP_201_CREATED,
    summary="스윗 재입고 (관리자)",
)
async def restock_sweet(
    sweet_id: int,
    restock_in: sweet_schemas.RestockCreate,
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    record = await sweet_crud.restock.restock(
        db, sweet_id=sweet_id, admin_id=current_admin_user.id, obj_in=restock_in,
    )
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=sweet_schemas.RestockRead.model_validate(record),
        message="Sweet restocked successfully",
    )
