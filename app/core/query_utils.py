# app/core/query_utils.py

"""
목록 조회 API가 공통으로 사용하는 페이지네이션 / 정렬 헬퍼입니다.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from fastapi import Query
from sqlalchemy.sql.elements import ColumnElement

from app.core.config import settings


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class PageParams:
    """
    요청된 page / limit 을 정규화한 결과입니다.
    limit 은 1 ~ MAX_PAGE_LIMIT 범위로 제한되고 page 는 1 이상입니다.
    """
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def build_pagination(page: Optional[int] = None, limit: Optional[int] = None) -> PageParams:
    safe_page = max(1, page or 1)
    safe_limit = max(1, min(limit or settings.DEFAULT_PAGE_LIMIT, settings.MAX_PAGE_LIMIT))
    return PageParams(page=safe_page, limit=safe_limit)


def build_sort(
    sortable_columns: Mapping[str, Any],
    sort_by: Optional[str],
    sort_order: Optional[SortOrder],
    default: str,
) -> ColumnElement:
    """
    허용된 컬럼 매핑에서 ORDER BY 절을 만듭니다.
    알 수 없는 sort_by 는 default 컬럼으로 대체하며, 정렬 방향 기본값은 내림차순입니다.
    """
    column = sortable_columns.get(sort_by or default, sortable_columns[default])
    if sort_order == SortOrder.ASC:
        return column.asc()
    return column.desc()


def escape_like(value: str) -> str:
    """LIKE 패턴의 와일드카드 문자를 이스케이프합니다 (escape='\\')."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(value: str) -> str:
    return f"%{escape_like(value)}%"


class ListQuery:
    """
    목록 API 공통 쿼리 파라미터 (page, limit, sortOrder) 의존성입니다.
    limit 이 MAX_PAGE_LIMIT 를 넘으면 요청 검증 오류(400)가 됩니다.
    """

    def __init__(
        self,
        page: int = Query(1, ge=1, description="1부터 시작하는 페이지 번호"),
        limit: int = Query(settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT, description="페이지 크기"),
        sort_order: SortOrder = Query(SortOrder.DESC, alias="sortOrder"),
    ):
        self.page = build_pagination(page, limit)
        self.sort_order = sort_order
