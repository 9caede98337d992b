# app/core/responses.py

"""
모든 성공 응답이 공유하는 응답 봉투(envelope) 스키마입니다.

    {"success": true, "statusCode": 200, "data": ..., "message": "..."}

목록 API의 data 는 `{"items": [...], "meta": {page, limit, total, totalPages}}` 형태입니다.
"""

import math
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

DataType = TypeVar("DataType")


class PaginationMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(..., alias="totalPages")

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> "PaginationMeta":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit) if limit else 0)


class Paginated(BaseModel, Generic[DataType]):
    items: List[DataType]
    meta: PaginationMeta


class ApiResponse(BaseModel, Generic[DataType]):
    """성공 응답 봉투"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    status_code: int = Field(200, alias="statusCode")
    data: Optional[DataType] = None
    message: str = "Success"
