# app/domains/usr/routers.py

"""
'usr' 도메인 (인증 및 사용자 관리)과 관련된 API 엔드포인트를 정의하는 모듈입니다.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core import dependencies as deps
from app.core import security
from app.core.database import get_session
from app.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from app.core.query_utils import ListQuery
from app.core.responses import ApiResponse, Paginated, PaginationMeta

from . import crud as usr_crud
from . import models as usr_models
from . import schemas as usr_schemas


router = APIRouter(
    responses={404: {"description": "Not found"}},
)


# =============================================================================
# 1. 인증 (Authentication) 엔드포인트
# =============================================================================
@router.post(
    "/auth/register",
    response_model=ApiResponse[usr_schemas.UserRead],
    status_code=status.HTTP_201_CREATED,
    summary="회원 가입",
)
async def register(
    user_in: usr_schemas.UserCreate,
    db: AsyncSession = Depends(get_session),
):
    user = await usr_crud.user.create(db, obj_in=user_in)
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        data=usr_schemas.UserRead.model_validate(user),
        message="User registered successfully",
    )


@router.post("/auth/login", response_model=ApiResponse[usr_schemas.LoginResult], summary="로그인 (토큰 및 쿠키 발급)")
async def login(
    credentials: usr_schemas.LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_session),
):
    """
    이메일/비밀번호로 로그인합니다. 성공 시 accessToken / refreshToken 을
    httpOnly 쿠키로 설정하고 응답 본문에도 포함합니다.
    """
    user = await usr_crud.user.authenticate(db, email=credentials.email, password=credentials.password)

    claims = security.token_claims(user.id, user.role.value)
    access_token = security.create_access_token(claims)
    refresh_token = security.create_refresh_token(claims)
    security.set_access_cookie(response, access_token)
    security.set_refresh_cookie(response, refresh_token)

    return ApiResponse(
        data=usr_schemas.LoginResult(
            user=usr_schemas.UserRead.model_validate(user),
            access_token=access_token,
            refresh_token=refresh_token,
        ),
        message="Login successful",
    )


@router.post("/auth/logout", response_model=ApiResponse[None], summary="로그아웃 (쿠키 삭제)")
async def logout(response: Response):
    security.clear_auth_cookies(response)
    return ApiResponse(message="Logged out successfully")


@router.get("/auth/me", response_model=ApiResponse[usr_schemas.MeRead], summary="현재 사용자 정보 조회")
async def read_users_me(
    current_user: usr_schemas.AuthUser = Depends(deps.get_current_user),
    db: AsyncSession = Depends(get_session),
):
    user = await usr_crud.user.get(db, current_user.id)
    if user is None or user.deleted_at is not None:
        raise UnauthorizedError("User no longer exists")
    return ApiResponse(
        data=usr_schemas.MeRead(user=usr_schemas.UserRead.model_validate(user)),
        message="Current user fetched successfully",
    )


# =============================================================================
# 2. 사용자 (User) 관리 엔드포인트
# =============================================================================
@router.get("/users", response_model=ApiResponse[Paginated[usr_schemas.UserRead]], summary="사용자 목록 조회 (관리자)")
async def read_users(
    params: ListQuery = Depends(),
    search: Optional[str] = Query(None, min_length=1, max_length=255),
    role: Optional[usr_models.UserRole] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy", pattern="^(id|name|email|created_at)$"),
    db: AsyncSession = Depends(get_session),
    current_admin_user: usr_schemas.AuthUser = Depends(deps.get_current_admin_user),
):
    users, total = await usr_crud.user.list_users(
        db, page=params.page, search=search, role=role, sort_by=sort_by, sort_order=params.sort_order,
    )
    return ApiResponse(
        data=Paginated[usr_schemas.UserRead](
            items=[usr_schemas.UserRead.model_validate(u) for u in users],
            meta=PaginationMeta.build(page=params.page.page, limit=params.page.limit, total=total),
        ),
        message="Users fetched successfully",
    )


@router.get("/users/{user_id}", response_model=ApiResponse[usr_schemas.UserRead], summary="특정 사용자 조회")
async def read_user(
    user_id: int,
    db: AsyncSession = Depends(get_session),
    current_user: usr_schemas.AuthUser = Depends(deps.get_current_user),
):
    """
    관리자는 모든 사용자를, 일반 사용자는 자신의 정보만 조회할 수 있습니다.
    """
    if not current_user.is_admin and user_id != current_user.id:
        raise ForbiddenError("Not enough permissions to view other user's information.")

    user = await usr_crud.user.get(db, user_id)
    if not user or user.deleted_at is not None:
        raise NotFoundError("User not found")
    return ApiResponse(data=usr_schemas.UserRead.model_validate(user), message="User fetched successfully")


@router.put("/users/{user_id}", response_model=ApiResponse[usr_schemas.UserRead], summary="사용자 정보 수정")
async def update_user(
    user_id: int,
    user_in: usr_schemas.UserUpdate,
    db: AsyncSession = Depends(get_session),
    current_user: usr_schemas.AuthUser = Depends(deps.get_current_user),
):
    """
    관리자는 모든 사용자의 name / role / is_active 를 수정할 수 있습니다.
    일반 사용자는 자신의 name 만 수정할 수 있습니다.
    """
    if not current_user.is_admin:
        if user_id != current_user.id:
            raise ForbiddenError("Not enough permissions to update other user's information.")
        if user_in.model_fields_set - {"name"}:
            raise ForbiddenError("Only administrators can change role or account status.")

    db_user = await usr_crud.user.get(db, user_id)
    if not db_user or db_user.deleted_at is not None:
        raise NotFoundError("User not found")

    user = await usr_crud.user.update(db, db_obj=db_user, obj_in=user_in)
    return ApiResponse(data=usr_schemas.UserRead.model_validate(user), message="User updated successfully")
