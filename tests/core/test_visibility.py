# tests/core/test_visibility.py

"""
역할 기반 조회 범위(visibility) 규칙에 대한 단위 테스트입니다.
"""

import pytest

from app.core.visibility import ACTIVE_ONLY, Visibility, resolve_visibility
from app.domains.sweet.models import Sweet
from app.domains.usr.models import UserRole


def _where_sql(visibility: Visibility) -> str:
    return " AND ".join(str(clause) for clause in visibility.clauses(Sweet))


@pytest.mark.parametrize("role", [UserRole.CUSTOMER, None])
@pytest.mark.parametrize("is_active,include_deleted", [(None, None), (False, True), (True, False), (None, True)])
def test_non_admin_is_always_active_only(role, is_active, include_deleted):
    """(성공) 관리자가 아니면 요청 값과 관계없이 활성 행만 조회합니다."""
    assert resolve_visibility(role, is_active=is_active, include_deleted=include_deleted) == ACTIVE_ONLY


def test_admin_keeps_requested_filters():
    visibility = resolve_visibility(UserRole.ADMIN, is_active=False, include_deleted=True)
    assert visibility == Visibility(is_active=False, include_deleted=True)


def test_admin_default_hides_deleted():
    visibility = resolve_visibility(UserRole.ADMIN)
    assert _where_sql(visibility) == "sweets.deleted_at IS NULL"


def test_admin_include_deleted_has_no_condition():
    visibility = resolve_visibility(UserRole.ADMIN, include_deleted=True)
    assert visibility.clauses(Sweet) == []


def test_admin_inactive_only():
    visibility = resolve_visibility(UserRole.ADMIN, is_active=False, include_deleted=True)
    assert _where_sql(visibility) == "sweets.deleted_at IS NOT NULL"


def test_inactive_without_include_deleted_is_contradictory():
    """(성공) is_active=false 이면서 includeDeleted 가 아니면 두 조건이 모두 걸려 결과가 비게 됩니다."""
    clauses = resolve_visibility(UserRole.ADMIN, is_active=False).clauses(Sweet)
    assert [str(c) for c in clauses] == ["sweets.deleted_at IS NOT NULL", "sweets.deleted_at IS NULL"]
