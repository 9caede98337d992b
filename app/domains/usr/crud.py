# app/domains/usr/crud.py

"""
'usr' 도메인의 CRUD 작업과 사용자 인증 로직을 담당하는 모듈입니다.
"""

import logging
from typing import List, Optional, Tuple

from sqlmodel import or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.crud_base import CRUDBase
from app.core.exceptions import BadRequestError, ConflictError, NotFoundError
from app.core.query_utils import PageParams, SortOrder, build_sort, contains_pattern
from app.core.security import get_password_hash, verify_password
from . import models as usr_models
from . import schemas as usr_schemas

logger = logging.getLogger(__name__)

USER_SORT_COLUMNS = {
    "id": usr_models.User.id,
    "name": usr_models.User.name,
    "email": usr_models.User.email,
    "created_at": usr_models.User.created_at,
}


# =============================================================================
# 1. users 테이블 CRUD
# =============================================================================
class CRUDUser(CRUDBase[usr_models.User, usr_schemas.UserCreate, usr_schemas.UserUpdate]):
    def __init__(self):
        super().__init__(model=usr_models.User)

    async def get_by_email(self, db: AsyncSession, *, email: str) -> Optional[usr_models.User]:
        """이메일로 사용자를 조회합니다."""
        return await self.get_by_attribute(db, attribute="email", value=email.lower())

    async def create(self, db: AsyncSession, *, obj_in: usr_schemas.UserCreate) -> usr_models.User:
        """새로운 사용자를 생성하며 비밀번호를 해싱하고 이메일 중복을 검사합니다."""
        if await self.get_by_email(db, email=obj_in.email):
            logger.info("Registration rejected: email already registered")
            raise ConflictError("User with this email already exists", code="EMAIL_TAKEN")

        user_data = obj_in.model_dump(exclude={"password"})
        db_user = usr_models.User(**user_data, password_hash=get_password_hash(obj_in.password))

        db.add(db_user)
        await db.commit()
        await db.refresh(db_user)
        logger.info("User %s registered with role %s", db_user.id, db_user.role.value)
        return db_user

    async def authenticate(self, db: AsyncSession, *, email: str, password: str) -> usr_models.User:
        """
        이메일과 비밀번호로 사용자를 인증합니다.
        - 등록되지 않은 이메일: 404
        - 비밀번호 불일치: 400
        - 비활성 계정: 400
        """
        user = await self.get_by_email(db, email=email)
        if not user:
            raise NotFoundError("Kindly register yourself or check your credentials", code="USER_NOT_FOUND")
        if not verify_password(password, user.password_hash):
            logger.info("Login failed for user %s: password mismatch", user.id)
            raise BadRequestError("Invalid email or password", code="INVALID_CREDENTIALS")
        if not user.is_active or user.deleted_at is not None:
            raise BadRequestError("Inactive user", code="INACTIVE_USER")
        return user

    async def list_users(
        self,
        db: AsyncSession,
        *,
        page: PageParams,
        search: Optional[str] = None,
        role: Optional[usr_models.UserRole] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[SortOrder] = None,
    ) -> Tuple[List[usr_models.User], int]:
        statement = select(usr_models.User).where(usr_models.User.deleted_at.is_(None))
        if search:
            pattern = contains_pattern(search)
            statement = statement.where(or_(
                usr_models.User.name.ilike(pattern, escape="\\"),
                usr_models.User.email.ilike(pattern, escape="\\"),
            ))
        if role is not None:
            statement = statement.where(usr_models.User.role == role)
        order_by = build_sort(USER_SORT_COLUMNS, sort_by, sort_order, default="created_at")
        return await self.paginate(db, statement, page=page, order_by=order_by)

    async def update(self, db: AsyncSession, *, db_obj: usr_models.User, obj_in: usr_schemas.UserUpdate) -> usr_models.User:
        """
        사용자 정보를 업데이트합니다. 마지막 활성 관리자의 강등/비활성화는 거부합니다.
        """
        demoting = obj_in.role is not None and obj_in.role != usr_models.UserRole.ADMIN
        deactivating = obj_in.is_active is False
        if db_obj.role == usr_models.UserRole.ADMIN and (demoting or deactivating):
            statement = select(usr_models.User).where(
                usr_models.User.role == usr_models.UserRole.ADMIN,
                usr_models.User.is_active.is_(True),
                usr_models.User.deleted_at.is_(None),
                usr_models.User.id != db_obj.id,
            )
            other_admin = (await db.execute(statement)).scalars().first()
            if other_admin is None:
                raise BadRequestError("Cannot demote or deactivate the last active admin account.")

        return await super().update(db, db_obj=db_obj, obj_in=obj_in)


user = CRUDUser()
