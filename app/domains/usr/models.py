# app/domains/usr/models.py

"""
'usr' 도메인 (사용자)의 데이터베이스 ORM 모델을 정의하는 모듈입니다.

users 테이블에 대한 SQLModel 클래스와 사용자 역할(UserRole) Enum 을 포함합니다.
"""

from typing import Optional
from datetime import datetime, UTC
from enum import Enum

from sqlmodel import Field, SQLModel, Column
from sqlalchemy.sql import func
from sqlalchemy.types import TIMESTAMP


# =============================================================================
# 사용자 역할(RBAC) Enum
# =============================================================================
class UserRole(str, Enum):
    """
    사용자 역할. JWT payload 에도 이 문자열 값이 그대로 들어갑니다.
    """
    CUSTOMER = "customer"
    ADMIN = "admin"


# =============================================================================
# 1. users 테이블 모델
# =============================================================================
class UserBase(SQLModel):
    """
    users 테이블의 기본 속성을 정의하는 SQLModel Base 클래스입니다.
    """
    id: Optional[int] = Field(default=None, primary_key=True, description="사용자 고유 ID")
    name: str = Field(max_length=255, description="사용자 이름")
    email: str = Field(max_length=255, sa_column_kwargs={"unique": True}, description="로그인 이메일")
    password_hash: str = Field(max_length=255, description="해싱된 비밀번호")
    role: UserRole = Field(default=UserRole.CUSTOMER, description="사용자 역할 (권한)")
    is_active: bool = Field(default=True, description="계정 활성 여부")

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


class User(UserBase, table=True):
    """
    users 테이블에 매핑되는 SQLModel ORM 클래스입니다. 사용자는 물리 삭제되지 않습니다.
    """
    __tablename__ = "users"
