# app/domains/sweet/schemas.py

"""
'sweet' 도메인 (카테고리, 스윗, 재입고)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

import re
from typing import Optional
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from sqlmodel import SQLModel
from pydantic import ConfigDict, Field, field_validator, model_validator

NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9\s.&-]*$"
NAME_PATTERN_MESSAGE = (
    "Name must start with a letter and contain only letters, numbers, spaces, dots, ampersands or hyphens"
)
MAX_PRICE = Decimal("999999.99")
MAX_QUANTITY = 999999
MAX_PURCHASE_QUANTITY = 1000
MAX_RESTOCK_QUANTITY = 10000

_CENT = Decimal("0.01")


def normalize_price(value: Decimal) -> Decimal:
    """가격을 소수점 2자리로 반올림(ROUND_HALF_UP)하고 범위를 검사합니다."""
    price = Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)
    if price <= 0:
        raise ValueError("Price must be greater than 0")
    if price > MAX_PRICE:
        raise ValueError("Price must not exceed 999999.99")
    return price


def _check_name(value: str) -> str:
    value = value.strip()
    if len(value) < 2:
        raise ValueError("Name must be at least 2 characters")
    if not re.match(NAME_PATTERN, value):
        raise ValueError(NAME_PATTERN_MESSAGE)
    return value


class _AtLeastOneField(SQLModel):
    """부분 수정 스키마: 알 수 없는 필드(is_active 포함)는 거부하고, 최소 한 개 필드를 요구합니다."""
    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def check_not_empty(self):
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


# =============================================================================
# 1. 카테고리 (Category) 스키마
# =============================================================================
class CategoryCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value)


class CategoryUpdate(_AtLeastOneField):
    name: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("Name cannot be null")
        return _check_name(value)


class CategorySummary(SQLModel):
    id: int
    name: str


class CategoryRead(SQLModel):
    id: int
    name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


# =============================================================================
# 2. 스윗 (Sweet) 스키마
# =============================================================================
class SweetCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., max_length=255)
    category_id: int = Field(..., gt=0)
    price: Decimal
    quantity: int = Field(0, ge=0, le=MAX_QUANTITY)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("price")
    @classmethod
    def validate_price(cls, value: Decimal) -> Decimal:
        return normalize_price(value)


class SweetUpdate(_AtLeastOneField):
    name: Optional[str] = Field(None, max_length=255)
    category_id: Optional[int] = Field(None, gt=0)
    price: Optional[Decimal] = None
    quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)

    @field_validator("name", "category_id", "price", "quantity")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_name(value)

    @field_validator("price")
    @classmethod
    def validate_price(cls, value: Decimal) -> Decimal:
        return normalize_price(value)


class SweetSummary(SQLModel):
    """구매 내역에 포함되는 스윗 요약 정보"""
    id: int
    name: str
    price: Decimal
    category: Optional[CategorySummary] = None


class SweetRead(SQLModel):
    id: int
    name: str
    category_id: int
    price: Decimal
    quantity: int
    is_active: bool
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None
    category: Optional[CategorySummary] = None


# =============================================================================
# 3. 재입고 (Restock) 스키마
# =============================================================================
class RestockCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(..., ge=1, le=MAX_RESTOCK_QUANTITY)


class RestockRead(SQLModel):
    id: int
    sweet_id: int
    admin_id: int
    quantity: int
    restocked_at: datetime
    sweet: Optional[SweetRead] = None
