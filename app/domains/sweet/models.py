# app/domains/sweet/models.py

"""
'sweet' 도메인 (카탈로그)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

- categories: 스윗 분류
- sweets: 판매 품목 (가격, 재고 수량)
- restocks: 관리자 재입고 이력 (불변)

카테고리와 스윗의 활성/삭제 상태는 `deleted_at` 컬럼 하나로만 표현하며,
`is_active` 는 그 값에서 계산되는 읽기 전용 속성입니다.
"""

from typing import Optional
from datetime import datetime, UTC
from decimal import Decimal

from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, text
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from app.domains.usr.models import User


# =============================================================================
# 1. categories 테이블 모델
# =============================================================================
class CategoryBase(SQLModel):
    """
    categories 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="카테고리 고유 ID")
    name: str = Field(max_length=255, sa_column_kwargs={"unique": True}, description="카테고리명")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="soft delete 일시 (NULL 이면 활성)"
    )


class Category(CategoryBase, table=True):
    """
    categories 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "categories"

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


# =============================================================================
# 2. sweets 테이블 모델
# =============================================================================
class SweetBase(SQLModel):
    """
    sweets 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="스윗 고유 ID")
    name: str = Field(max_length=255, description="스윗 이름 (삭제되지 않은 행 사이에서 유일)")
    category_id: int = Field(
        sa_column=Column(Integer, ForeignKey("categories.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="카테고리 ID (FK)"
    )
    price: Decimal = Field(max_digits=10, decimal_places=2, description="단가 (소수점 2자리)")
    quantity: int = Field(default=0, description="재고 수량 (0 이상)")

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )
    deleted_at: Optional[datetime] = Field(
        default=None,
        sa_column=Column(TIMESTAMP(timezone=True), nullable=True),
        description="soft delete 일시 (NULL 이면 활성)"
    )


class Sweet(SweetBase, table=True):
    """
    sweets 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "sweets"
    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_sweets_quantity_non_negative"),
        CheckConstraint("price > 0", name="ck_sweets_price_positive"),
        # 이름은 삭제되지 않은 스윗 사이에서만 유일합니다.
        Index(
            "uq_sweets_name_active",
            "name",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    category: Optional[Category] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None


# =============================================================================
# 3. restocks 테이블 모델
# =============================================================================
class RestockBase(SQLModel):
    """
    restocks 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="재입고 이력 ID")
    sweet_id: int = Field(
        sa_column=Column(Integer, ForeignKey("sweets.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="재입고된 스윗 ID (FK)"
    )
    admin_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="재입고를 수행한 관리자 ID (FK)"
    )
    quantity: int = Field(description="재입고 수량")
    restocked_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False),
        description="재입고 일시"
    )

    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now()),
        description="레코드 생성 일시"
    )
    updated_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()),
        description="레코드 마지막 업데이트 일시"
    )


class Restock(RestockBase, table=True):
    """
    restocks 테이블에 매핑되는 SQLModel ORM 클래스입니다. 생성 후 변경되지 않습니다.
    """
    __tablename__ = "restocks"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_restocks_quantity_positive"),
    )

    sweet: Optional[Sweet] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
    admin: Optional[User] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
