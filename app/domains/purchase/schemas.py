# app/domains/purchase/schemas.py

"""
'purchase' 도메인의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel
from pydantic import ConfigDict, Field

from app.domains.sweet.schemas import MAX_PURCHASE_QUANTITY, SweetSummary
from app.domains.usr.schemas import UserSummary


class PurchaseQuantity(SQLModel):
    """POST /sweets/{id}/purchase 요청 본문"""
    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(..., ge=1, le=MAX_PURCHASE_QUANTITY)


class PurchaseCreate(PurchaseQuantity):
    """POST /purchases 요청 본문"""
    sweet_id: int = Field(..., gt=0)


class PurchaseRead(SQLModel):
    id: int
    user_id: int
    sweet_id: int
    quantity: int
    purchased_at: datetime
    sweet: Optional[SweetSummary] = None
    user: Optional[UserSummary] = None
