# app/core/visibility.py

"""
역할 기반 조회 범위(visibility) 규칙을 한 곳에서 정의합니다.

카테고리와 스윗 조회가 모두 이 규칙을 사용합니다.
- 관리자: 요청한 is_active 필터를 그대로 적용하고, includeDeleted=true 가 아니면 삭제된 행을 숨깁니다.
- 그 외 (고객, 비로그인): 요청한 필터와 관계없이 활성(삭제되지 않은) 행만 조회합니다.

soft delete 상태는 `deleted_at` 컬럼 하나로만 표현되며, is_active 는
`deleted_at IS NULL` 의 읽기 전용 투영입니다.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.sql.elements import ColumnElement

from app.domains.usr.models import UserRole


@dataclass(frozen=True)
class Visibility:
    """호출자 역할을 반영한 최종 조회 범위"""
    is_active: Optional[bool]
    include_deleted: bool

    def clauses(self, model: Any) -> List[ColumnElement]:
        """`deleted_at` 컬럼을 가진 모델에 적용할 WHERE 조건 목록"""
        conditions: List[ColumnElement] = []
        if self.is_active is True:
            conditions.append(model.deleted_at.is_(None))
        elif self.is_active is False:
            conditions.append(model.deleted_at.is_not(None))
        if not self.include_deleted and self.is_active is not True:
            # is_active=false 와 함께 쓰이면 결과는 비어 있습니다.
            conditions.append(model.deleted_at.is_(None))
        return conditions


ACTIVE_ONLY = Visibility(is_active=True, include_deleted=False)


def resolve_visibility(
    role: Optional[UserRole],
    *,
    is_active: Optional[bool] = None,
    include_deleted: Optional[bool] = None,
) -> Visibility:
    """
    호출자 역할과 요청 필터로부터 실제 적용할 조회 범위를 계산합니다.
    관리자가 아니면 요청 값은 무시됩니다.
    """
    if role == UserRole.ADMIN:
        return Visibility(is_active=is_active, include_deleted=bool(include_deleted))
    return ACTIVE_ONLY
