# app/domains/purchase/models.py

"""
'purchase' 도메인의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

구매(Purchase) 레코드는 재고 차감과 같은 트랜잭션에서만 생성되며, 생성 후 변경되지 않습니다.
"""

from typing import Optional
from datetime import datetime, UTC

from sqlmodel import Field, Relationship, SQLModel, Column
from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP

from app.domains.sweet.models import Sweet
from app.domains.usr.models import User


# =============================================================================
# 1. purchases 테이블 모델
# =============================================================================
class PurchaseBase(SQLModel):
    """
    purchases 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="구매 고유 ID")
    user_id: int = Field(
        sa_column=Column(Integer, ForeignKey("users.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="구매자 ID (FK)"
    )
    sweet_id: int = Field(
        sa_column=Column(Integer, ForeignKey("sweets.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False),
        description="구매한 스윗 ID (FK)"
    )
    quantity: int = Field(description="구매 수량")
    purchased_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(TIMESTAMP(timezone=True), server_default=func.now(), nullable=False),
        description="구매 일시"
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


class Purchase(PurchaseBase, table=True):
    """
    purchases 테이블에 매핑되는 SQLModel ORM 클래스입니다.
    """
    __tablename__ = "purchases"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_purchases_quantity_positive"),
        Index("ix_purchases_user_purchased_at", "user_id", "purchased_at"),
        Index("ix_purchases_sweet_id", "sweet_id"),
    )

    sweet: Optional[Sweet] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
    user: Optional[User] = Relationship(sa_relationship_kwargs={"lazy": "selectin"})
