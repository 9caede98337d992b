# app/domains/purchase/crud.py

"""
'purchase' 도메인의 CRUD 작업을 담당하는 모듈입니다.

구매 생성은 다음 순서로 하나의 트랜잭션 안에서 처리됩니다.
1. 호출자 역할 기준으로 조회 가능한 스윗인지 확인 (없으면 404)
2. `quantity >= :q` 조건부 UPDATE 로 재고 차감 (영향받은 행이 없으면 400, 아무것도 기록하지 않음)
3. 구매 레코드 추가 후 재고 차감과 함께 커밋
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, UTC
from typing import List, Optional, Tuple

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from app.core.query_utils import PageParams, SortOrder, build_sort
from app.core.visibility import resolve_visibility
from app.domains.sweet import crud as sweet_crud
from app.domains.usr.schemas import AuthUser
from . import models as purchase_models
from . import schemas as purchase_schemas

logger = logging.getLogger(__name__)

PURCHASE_SORT_COLUMNS = {
    "id": purchase_models.Purchase.id,
    "purchased_at": purchase_models.Purchase.purchased_at,
    "quantity": purchase_models.Purchase.quantity,
}


@dataclass(frozen=True)
class PurchaseFilters:
    user_id: Optional[int] = None
    sweet_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise BadRequestError("startDate must be on or before endDate", code="INVALID_DATE_RANGE")


class CRUDPurchase(CRUDBase[purchase_models.Purchase, purchase_schemas.PurchaseCreate, purchase_schemas.PurchaseCreate]):
    def __init__(self):
        super().__init__(model=purchase_models.Purchase)

    async def create_purchase(
        self, db: AsyncSession, *, sweet_id: int, quantity: int, buyer: AuthUser
    ) -> purchase_models.Purchase:
        """
        재고를 원자적으로 차감하고 구매 레코드를 기록합니다.
        """
        visibility = resolve_visibility(buyer.role)
        if await sweet_crud.sweet.get_visible(db, sweet_id, visibility) is None:
            raise NotFoundError(sweet_crud.SWEET_NOT_FOUND, code="SWEET_NOT_FOUND")

        if not await sweet_crud.sweet.adjust_stock(db, id=sweet_id, delta=-quantity):
            logger.info("Purchase rejected: sweet %s, qty %s, user %s (insufficient stock)", sweet_id, quantity, buyer.id)
            raise BadRequestError("Insufficient quantity available for purchase", code="INSUFFICIENT_QUANTITY")

        purchase = purchase_models.Purchase(user_id=buyer.id, sweet_id=sweet_id, quantity=quantity)
        db.add(purchase)
        await db.commit()
        logger.info("Purchase %s: user %s bought %s of sweet %s", purchase.id, buyer.id, quantity, sweet_id)

        await sweet_crud.sweet.get(db, sweet_id)
        return await self.get(db, purchase.id)

    async def get_for_caller(self, db: AsyncSession, *, id: int, caller: AuthUser) -> purchase_models.Purchase:
        purchase = await self.get(db, id)
        if purchase is None:
            raise NotFoundError("Purchase not found", code="PURCHASE_NOT_FOUND")
        if not caller.is_admin and purchase.user_id != caller.id:
            raise ForbiddenError("You are not authorized to view this purchase")
        return purchase

    async def list_purchases(
        self,
        db: AsyncSession,
        *,
        caller: AuthUser,
        filters: PurchaseFilters,
        page: PageParams,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> Tuple[List[purchase_models.Purchase], int]:
        """
        구매 목록. 고객은 요청한 user_id 와 관계없이 자신의 구매만 조회합니다.
        """
        user_id = filters.user_id if caller.is_admin else caller.id

        statement = select(self.model)
        if user_id is not None:
            statement = statement.where(self.model.user_id == user_id)
        if filters.sweet_id is not None:
            statement = statement.where(self.model.sweet_id == filters.sweet_id)
        if filters.start_date is not None:
            statement = statement.where(
                self.model.purchased_at >= datetime.combine(filters.start_date, time.min, tzinfo=UTC)
            )
        if filters.end_date is not None:
            # end_date 당일까지 포함
            statement = statement.where(
                self.model.purchased_at < datetime.combine(filters.end_date + timedelta(days=1), time.min, tzinfo=UTC)
            )

        order_by = build_sort(PURCHASE_SORT_COLUMNS, sort_by, sort_order, default="purchased_at")
        return await self.paginate(db, statement, page=page, order_by=order_by)

    async def get_by_user(
        self,
        db: AsyncSession,
        *,
        user_id: int,
        caller: AuthUser,
        page: PageParams,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> Tuple[List[purchase_models.Purchase], int]:
        if not caller.is_admin and user_id != caller.id:
            raise ForbiddenError("You are not authorized to view these purchases")
        return await self.list_purchases(
            db, caller=caller, filters=PurchaseFilters(user_id=user_id), page=page, sort_by=sort_by, sort_order=sort_order,
        )

    async def get_by_sweet(
        self,
        db: AsyncSession,
        *,
        sweet_id: int,
        caller: AuthUser,
        page: PageParams,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> Tuple[List[purchase_models.Purchase], int]:
        """스윗별 구매 내역 (관리자 전용, 권한은 라우터에서 검사)."""
        if await sweet_crud.sweet.get(db, sweet_id) is None:
            raise NotFoundError(sweet_crud.SWEET_NOT_FOUND, code="SWEET_NOT_FOUND")
        return await self.list_purchases(
            db, caller=caller, filters=PurchaseFilters(sweet_id=sweet_id), page=page, sort_by=sort_by, sort_order=sort_order,
        )


purchase = CRUDPurchase()
