# app/core/crud_base.py

"""
공통 CRUD(Create, Read, Update, Delete) 작업을 위한 기본 클래스 모듈입니다.
모든 메서드는 비동기(async) 세션을 인자로 받으며, CRUD 객체 자체는 상태를 갖지 않습니다.
"""

from typing import Any, Generic, List, Optional, Tuple, Type, TypeVar
from datetime import datetime, UTC

from sqlalchemy import func, update
from sqlalchemy.sql import Select
from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from pydantic import BaseModel

from app.core.query_utils import PageParams
from app.core.visibility import Visibility

ModelType = TypeVar("ModelType", bound=SQLModel)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    모든 CRUD 작업에 대한 기본 클래스를 정의합니다.
    """
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: Any) -> Optional[ModelType]:
        """
        ID를 기준으로 단일 레코드를 조회합니다.
        세션에 캐시된 객체가 있더라도 DB 값으로 다시 채웁니다 (bulk UPDATE 이후 일관성).
        """
        return await db.get(self.model, id, populate_existing=True)

    async def get_by_attribute(
        self, db: AsyncSession, *, attribute: str, value: Any
    ) -> Optional[ModelType]:
        statement = select(self.model).where(getattr(self.model, attribute) == value)
        response = await db.execute(statement)
        return response.scalars().first()

    async def paginate(
        self,
        db: AsyncSession,
        statement: Select,
        *,
        page: PageParams,
        order_by: Any,
    ) -> Tuple[List[ModelType], int]:
        """
        WHERE 조건이 적용된 statement 를 받아 (현재 페이지 항목, 전체 건수) 를 반환합니다.
        """
        count_statement = select(func.count()).select_from(statement.order_by(None).subquery())
        total = (await db.execute(count_statement)).scalar_one()

        paged = statement.order_by(order_by).offset(page.offset).limit(page.limit)
        result = await db.execute(paged)
        return list(result.scalars().all()), total

    async def create(self, db: AsyncSession, *, obj_in: CreateSchemaType, **extra: Any) -> ModelType:
        """
        새로운 레코드를 생성합니다.
        """
        db_obj = self.model.model_validate(obj_in, update=extra or None)
        db.add(db_obj)
        await db.commit()
        return await self.get(db, db_obj.id)

    async def update(
        self, db: AsyncSession, *, db_obj: ModelType, obj_in: UpdateSchemaType
    ) -> ModelType:
        """
        기존 레코드를 업데이트합니다. 요청에 포함된 필드만 반영합니다.
        """
        update_data = obj_in.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(db_obj, key, value)

        db.add(db_obj)
        await db.commit()
        return await self.get(db, db_obj.id)


class SoftDeleteCRUDBase(CRUDBase[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    `deleted_at` 컬럼 하나로 활성/삭제 상태를 관리하는 모델용 CRUD 기본 클래스입니다.
    상태 전이는 조건부 UPDATE 한 번으로 수행되므로 동시 요청에서도 한 번만 성공합니다.
    """

    def visible(self, statement: Select, visibility: Visibility) -> Select:
        conditions = visibility.clauses(self.model)
        if conditions:
            statement = statement.where(*conditions)
        return statement

    async def get_visible(self, db: AsyncSession, id: Any, visibility: Visibility) -> Optional[ModelType]:
        statement = self.visible(select(self.model).where(self.model.id == id), visibility)
        result = await db.execute(statement.execution_options(populate_existing=True))
        return result.scalars().first()

    async def _transition(self, db: AsyncSession, id: Any, *, deleted: bool) -> Optional[ModelType]:
        if deleted:
            statement = (
                update(self.model)
                .where(self.model.id == id, self.model.deleted_at.is_(None))
                .values(deleted_at=datetime.now(UTC))
            )
        else:
            statement = (
                update(self.model)
                .where(self.model.id == id, self.model.deleted_at.is_not(None))
                .values(deleted_at=None)
            )
        result = await db.execute(statement.execution_options(synchronize_session=False))
        if result.rowcount == 0:
            return None
        await db.commit()
        return await self.get(db, id)

    async def soft_delete(self, db: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """활성 레코드를 삭제 상태로 바꿉니다. 없거나 이미 삭제된 경우 None."""
        return await self._transition(db, id, deleted=True)

    async def reactivate(self, db: AsyncSession, *, id: Any) -> Optional[ModelType]:
        """삭제된 레코드를 다시 활성화합니다. 없거나 이미 활성인 경우 None."""
        return await self._transition(db, id, deleted=False)
