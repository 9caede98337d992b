# app/domains/purchase/routers.py

"""
'purchase' 도메인 (구매 및 구매 내역)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
고객은 자신의 구매 내역만, 관리자는 전체 구매 내역을 조회할 수 있습니다.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core.database import get_session
from app.core.query_utils import ListQuery
from app.core.responses import ApiResponse, Paginated, PaginationMeta
from app.domains.usr.schemas import AuthUser

from . import crud as purchase_crud
from . import models as purchase_models
from . import schemas as purchase_schemas

PURCHASE_SORT_PATTERN = "^(id|purchased_at|quantity)$"


router = APIRouter(
    responses={404: {"description": "Not found"}},
)


def _paginated(
    purchases: List[purchase_models.Purchase], total: int, params: ListQuery
) -> Paginated[purchase_schemas.PurchaseRead]:
    return Paginated[purchase_schemas.PurchaseRead](
        items=[purchase_schemas.PurchaseRead.model_validate(p) for p in purchases],
        meta=PaginationMeta.build(page=params.page.page, limit=params.page.limit, total=total),
    )


@router.post(
    "",
    response_model=ApiResponse[purchase_schemas.PurchaseRead],
    status_code=status.HTTP_201_CREATED,
    summary="구매 생성",
)
async def create_purchase(
    purchase_in: purchase_schemas.PurchaseCreate,
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    purchase = await purchase_crud.purchase.create_purchase(
        db, sweet_id=purchase_in.sweet_id, quantity=purchase_in.quantity, buyer=current_user,
    )
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=purchase_schemas.PurchaseRead.model_validate(purchase),
        message="Purchase completed successfully",
    )


@router.get("", response_model=ApiResponse[Paginated[purchase_schemas.PurchaseRead]], summary="구매 내역 조회")
async def read_purchases(
    params: ListQuery = Depends(),
    user_id: Optional[int] = Query(None, gt=0),
    sweet_id: Optional[int] = Query(None, gt=0),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    sort_by: Optional[str] = Query(None, alias="sortBy", pattern=PURCHASE_SORT_PATTERN),
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    """
    구매 내역 목록. 고객은 user_id 필터와 관계없이 자신의 구매만 반환됩니다.
    """
    filters = purchase_crud.PurchaseFilters(
        user_id=user_id, sweet_id=sweet_id, start_date=start_date, end_date=end_date,
    )
    purchases, total = await purchase_crud.purchase.list_purchases(
        db, caller=current_user, filters=filters, page=params.page,
        sort_by=sort_by, sort_order=params.sort_order,
    )
    return ApiResponse(data=_paginated(purchases, total, params), message="Purchases fetched successfully")


@router.get("/user/{user_id}", response_model=ApiResponse[Paginated[purchase_schemas.PurchaseRead]], summary="사용자별 구매 내역")
async def read_purchases_by_user(
    user_id: int,
    params: ListQuery = Depends(),
    sort_by: Optional[str] = Query(None, alias="sortBy", pattern=PURCHASE_SORT_PATTERN),
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    purchases, total = await purchase_crud.purchase.get_by_user(
        db, user_id=user_id, caller=current_user, page=params.page,
        sort_by=sort_by, sort_order=params.sort_order,
    )
    return ApiResponse(data=_paginated(purchases, total, params), message="Purchases fetched successfully")


@router.get("/sweet/{sweet_id}", response_model=ApiResponse[Paginated[purchase_schemas.PurchaseRead]], summary="스윗별 구매 내역 (관리자)")
async def read_purchases_by_sweet(
    sweet_id: int,
    params: ListQuery = Depends(),
    sort_by: Optional[str] = Query(None, alias="sortBy", pattern=PURCHASE_SORT_PATTERN),
    db: AsyncSession = Depends(get_session),
    current_admin_user: AuthUser = Depends(deps.get_current_admin_user),
):
    purchases, total = await purchase_crud.purchase.get_by_sweet(
        db, sweet_id=sweet_id, caller=current_admin_user, page=params.page,
        sort_by=sort_by, sort_order=params.sort_order,
    )
    return ApiResponse(data=_paginated(purchases, total, params), message="Purchases fetched successfully")


@router.get("/{purchase_id}", response_model=ApiResponse[purchase_schemas.PurchaseRead], summary="특정 구매 조회")
async def read_purchase(
    purchase_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: AuthUser = Depends(deps.get_current_user),
):
    purchase = await purchase_crud.purchase.get_for_caller(db, id=purchase_id, caller=current_user)
    return ApiResponse(data=purchase_schemas.PurchaseRead.model_validate(purchase), message="Purchase fetched successfully")
