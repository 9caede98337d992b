# app/domains/sweet/crud.py

"""
'sweet' 도메인 (카테고리, 스윗, 재입고)의 CRUD 작업을 담당하는 모듈입니다.

- 모든 조회는 app.core.visibility 의 역할 기반 조회 범위를 따릅니다.
- 재고 증감은 조건부 UPDATE 로 수행하여 동시 요청에서도 음수 재고가 생기지 않습니다.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings
from app.core.crud_base import CRUDBase, SoftDeleteCRUDBase
from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.core.query_utils import PageParams, SortOrder, build_sort, contains_pattern
from app.core.visibility import ACTIVE_ONLY, Visibility
from . import models as sweet_models
from . import schemas as sweet_schemas

logger = logging.getLogger(__name__)

CATEGORY_NOT_FOUND = "Category not found"
SWEET_NOT_FOUND = "Sweet not found"

CATEGORY_SORT_COLUMNS = {
    "id": sweet_models.Category.id,
    "name": sweet_models.Category.name,
    "created_at": sweet_models.Category.created_at,
    "updated_at": sweet_models.Category.updated_at,
}

SWEET_SORT_COLUMNS = {
    "id": sweet_models.Sweet.id,
    "name": sweet_models.Sweet.name,
    "price": sweet_models.Sweet.price,
    "quantity": sweet_models.Sweet.quantity,
    "created_at": sweet_models.Sweet.created_at,
    "updated_at": sweet_models.Sweet.updated_at,
}


# =============================================================================
# 1. categories 테이블 CRUD
# =============================================================================
class CRUDCategory(SoftDeleteCRUDBase[sweet_models.Category, sweet_schemas.CategoryCreate, sweet_schemas.CategoryUpdate]):
    def __init__(self):
        super().__init__(model=sweet_models.Category)

    async def is_name_taken(self, db: AsyncSession, *, name: str, exclude_id: Optional[int] = None) -> bool:
        """카테고리 이름은 삭제된 행을 포함해 전체에서 유일합니다."""
        statement = select(self.model.id).where(self.model.name == name)
        if exclude_id is not None:
            statement = statement.where(self.model.id != exclude_id)
        return (await db.execute(statement)).first() is not None

    async def create(self, db: AsyncSession, *, obj_in: sweet_schemas.CategoryCreate) -> sweet_models.Category:
        if await self.is_name_taken(db, name=obj_in.name):
            raise ConflictError("Category name already exists", code="CATEGORY_NAME_TAKEN")
        category = await super().create(db, obj_in=obj_in)
        logger.info("Category %s created: %s", category.id, category.name)
        return category

    async def update(
        self, db: AsyncSession, *, db_obj: sweet_models.Category, obj_in: sweet_schemas.CategoryUpdate
    ) -> sweet_models.Category:
        if obj_in.name is not None and await self.is_name_taken(db, name=obj_in.name, exclude_id=db_obj.id):
            raise ConflictError("Category name already exists", code="CATEGORY_NAME_TAKEN")
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def list_categories(
        self,
        db: AsyncSession,
        *,
        visibility: Visibility,
        page: PageParams,
        name: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> Tuple[List[sweet_models.Category], int]:
        statement = self.visible(select(self.model), visibility)
        for term in (name, search):
            if term:
                statement = statement.where(self.model.name.ilike(contains_pattern(term), escape="\\"))
        order_by = build_sort(CATEGORY_SORT_COLUMNS, sort_by, sort_order, default="created_at")
        return await self.paginate(db, statement, page=page, order_by=order_by)

    async def get_active(self, db: AsyncSession) -> List[sweet_models.Category]:
        """활성 카테고리를 이름순으로 반환합니다 (선택 목록용)."""
        statement = self.visible(select(self.model), ACTIVE_ONLY).order_by(self.model.name.asc())
        return list((await db.execute(statement)).scalars().all())


category = CRUDCategory()


# =============================================================================
# 2. sweets 테이블 CRUD
# =============================================================================
@dataclass(frozen=True)
class SweetFilters:
    """스윗 목록/검색 공통 필터"""
    name: Optional[str] = None
    category_id: Optional[int] = None
    category_name: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    in_stock: Optional[bool] = None

    def __post_init__(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise BadRequestError("minPrice must be less than or equal to maxPrice", code="INVALID_PRICE_RANGE")


class CRUDSweet(SoftDeleteCRUDBase[sweet_models.Sweet, sweet_schemas.SweetCreate, sweet_schemas.SweetUpdate]):
    def __init__(self):
        super().__init__(model=sweet_models.Sweet)

    async def is_name_taken(self, db: AsyncSession, *, name: str, exclude_id: Optional[int] = None) -> bool:
        """스윗 이름은 삭제되지 않은 행 사이에서만 유일합니다."""
        statement = select(self.model.id).where(self.model.name == name, self.model.deleted_at.is_(None))
        if exclude_id is not None:
            statement = statement.where(self.model.id != exclude_id)
        return (await db.execute(statement)).first() is not None

    async def _ensure_usable_category(self, db: AsyncSession, category_id: int) -> None:
        target = await category.get(db, category_id)
        if target is None:
            raise NotFoundError(CATEGORY_NOT_FOUND, code="CATEGORY_NOT_FOUND")
        if not target.is_active:
            raise BadRequestError("Category is inactive and cannot be used", code="CATEGORY_INACTIVE")

    async def create(self, db: AsyncSession, *, obj_in: sweet_schemas.SweetCreate) -> sweet_models.Sweet:
        if await self.is_name_taken(db, name=obj_in.name):
            raise ConflictError("Sweet name is already present !", code="SWEET_NAME_TAKEN")
        await self._ensure_usable_category(db, obj_in.category_id)
        sweet = await super().create(db, obj_in=obj_in)
        logger.info("Sweet %s created: %s (qty=%s)", sweet.id, sweet.name, sweet.quantity)
        return sweet

    async def update(
        self, db: AsyncSession, *, db_obj: sweet_models.Sweet, obj_in: sweet_schemas.SweetUpdate
    ) -> sweet_models.Sweet:
        """
        부분 수정. 삭제된 스윗도 수정할 수 있으며, 이 경우 이름 중복 검사는 건너뜁니다
        (재활성화 시점에 다시 검사합니다).
        """
        if (
            obj_in.name is not None
            and db_obj.deleted_at is None
            and await self.is_name_taken(db, name=obj_in.name, exclude_id=db_obj.id)
        ):
            raise ConflictError("Sweet name is already present !", code="SWEET_NAME_TAKEN")
        if obj_in.category_id is not None and obj_in.category_id != db_obj.category_id:
            await self._ensure_usable_category(db, obj_in.category_id)
        return await super().update(db, db_obj=db_obj, obj_in=obj_in)

    async def reactivate(self, db: AsyncSession, *, id: int) -> Optional[sweet_models.Sweet]:
        target = await self.get(db, id)
        if target is None or target.deleted_at is None:
            return None
        if await self.is_name_taken(db, name=target.name, exclude_id=target.id):
            raise ConflictError("Sweet name is already present !", code="SWEET_NAME_TAKEN")
        return await super().reactivate(db, id=id)

    def _filtered(self, visibility: Visibility, filters: SweetFilters):
        statement = self.visible(select(self.model), visibility)
        if filters.name:
            statement = statement.where(self.model.name.ilike(contains_pattern(filters.name), escape="\\"))
        if filters.category_id is not None:
            statement = statement.where(self.model.category_id == filters.category_id)
        if filters.category_name:
            statement = statement.join(sweet_models.Category, sweet_models.Category.id == self.model.category_id).where(
                sweet_models.Category.name.ilike(contains_pattern(filters.category_name), escape="\\")
            )
        if filters.min_price is not None:
            statement = statement.where(self.model.price >= filters.min_price)
        if filters.max_price is not None:
            statement = statement.where(self.model.price <= filters.max_price)
        if filters.in_stock is True:
            statement = statement.where(self.model.quantity > 0)
        elif filters.in_stock is False:
            statement = statement.where(self.model.quantity == 0)
        return statement

    async def list_sweets(
        self,
        db: AsyncSession,
        *,
        visibility: Visibility,
        filters: SweetFilters,
        page: PageParams,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> Tuple[List[sweet_models.Sweet], int]:
        statement = self._filtered(visibility, filters)
        order_by = build_sort(SWEET_SORT_COLUMNS, sort_by, sort_order, default="created_at")
        return await self.paginate(db, statement, page=page, order_by=order_by)

    async def search(
        self,
        db: AsyncSession,
        *,
        q: str,
        visibility: Visibility,
        filters: SweetFilters,
    ) -> List[sweet_models.Sweet]:
        """
        이름 부분 일치 검색. 페이지네이션 없이 최신순으로 최대 SWEET_SEARCH_LIMIT 건을 반환합니다.
        """
        statement = (
            self._filtered(visibility, filters)
            .where(self.model.name.ilike(contains_pattern(q), escape="\\"))
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .limit(settings.SWEET_SEARCH_LIMIT)
        )
        return list((await db.execute(statement)).scalars().all())

    async def get_by_category(
        self,
        db: AsyncSession,
        *,
        category_id: int,
        visibility: Visibility,
        page: PageParams,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> Tuple[List[sweet_models.Sweet], int]:
        if await category.get_visible(db, category_id, visibility) is None:
            raise NotFoundError(CATEGORY_NOT_FOUND, code="CATEGORY_NOT_FOUND")
        return await self.list_sweets(
            db,
            visibility=visibility,
            filters=SweetFilters(category_id=category_id),
            page=page,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    async def adjust_stock(self, db: AsyncSession, *, id: int, delta: int) -> bool:
        """
        재고를 delta 만큼 조건부로 증감합니다 (커밋하지 않음).
        감소 시 재고가 부족하거나, 증가 시 MAX_QUANTITY 를 넘거나,
        스윗이 없거나 삭제된 경우 False 를 반환합니다.
        """
        conditions = [self.model.id == id, self.model.deleted_at.is_(None)]
        if delta < 0:
            conditions.append(self.model.quantity >= -delta)
        else:
            conditions.append(self.model.quantity <= sweet_schemas.MAX_QUANTITY - delta)
        statement = (
            update(self.model)
            .where(*conditions)
            .values(quantity=self.model.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(statement)
        return result.rowcount == 1


sweet = CRUDSweet()


# =============================================================================
# 3. restocks 테이블 CRUD
# =============================================================================
class CRUDRestock(CRUDBase[sweet_models.Restock, sweet_schemas.RestockCreate, sweet_schemas.RestockCreate]):
    def __init__(self):
        super().__init__(model=sweet_models.Restock)

    async def restock(
        self, db: AsyncSession, *, sweet_id: int, admin_id: int, obj_in: sweet_schemas.RestockCreate
    ) -> sweet_models.Restock:
        """
        재고 증가와 재입고 이력 기록을 하나의 트랜잭션으로 커밋합니다.
        """
        if not await sweet.adjust_stock(db, id=sweet_id, delta=obj_in.quantity):
            current = await sweet.get(db, sweet_id)
            if current is None or current.deleted_at is not None:
                raise NotFoundError(SWEET_NOT_FOUND, code="SWEET_NOT_FOUND")
            raise BadRequestError(
                f"Restock would exceed the maximum stock of {sweet_schemas.MAX_QUANTITY}",
                code="STOCK_LIMIT_EXCEEDED",
            )

        record = sweet_models.Restock(sweet_id=sweet_id, admin_id=admin_id, quantity=obj_in.quantity)
        db.add(record)
        await db.commit()
        logger.info("Sweet %s restocked by admin %s (+%s)", sweet_id, admin_id, obj_in.quantity)

        # 관계(sweet, category)까지 최신 값으로 다시 읽습니다.
        await sweet.get(db, sweet_id)
        return await self.get(db, record.id)


restock = CRUDRestock()
