# app/core/dependencies.py

"""
FastAPI 애플리케이션의 인증/권한 의존성(Dependency Injection)을 정의하는 모듈입니다.

- get_current_user: Authorization 헤더 또는 accessToken 쿠키로 호출자를 식별합니다.
  Access Token 이 만료되었고 refreshToken 쿠키가 유효하면 새 Access Token 을 쿠키로 발급합니다.
- get_optional_user: 공개 엔드포인트용. 인증할 수 없으면 None (refresh 흐름은 동일).
- require_roles: 역할 기반 권한 검사 의존성 팩토리.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request, Response
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError
from sqlmodel.ext.asyncio.session import AsyncSession

from app import API_PREFIX
from app.core import security
from app.core.config import settings
from app.core.database import get_session
from app.core.exceptions import ForbiddenError, UnauthorizedError
from app.domains.usr import schemas as usr_schemas
from app.domains.usr.models import User, UserRole

logger = logging.getLogger(__name__)

# Bearer 헤더가 없으면 None 을 돌려받고 쿠키를 확인합니다.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{API_PREFIX}/auth/login", auto_error=False)


def _identity_from_payload(payload: Dict[str, Any]) -> usr_schemas.AuthUser:
    try:
        return usr_schemas.AuthUser(id=int(payload["sub"]), role=UserRole(payload["role"]))
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Invalid or expired access token")


async def _refresh_session(
    db: AsyncSession,
    response: Response,
    refresh_token: str,
) -> usr_schemas.AuthUser:
    """
    Refresh Token 으로 새 Access Token 을 발급하고 쿠키에 설정합니다.
    ROTATE_REFRESH_TOKENS 가 켜져 있으면 Refresh Token 도 새로 발급합니다.
    """
    try:
        payload = security.decode_refresh_token(refresh_token)
        user_id = int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        logger.info("Refresh token rejected")
        raise UnauthorizedError("Invalid refresh token")

    user = await db.get(User, user_id)
    if user is None or not user.is_active or user.deleted_at is not None:
        raise UnauthorizedError("Invalid refresh token")

    claims = security.token_claims(user.id, user.role.value)
    security.set_access_cookie(response, security.create_access_token(claims))
    if settings.ROTATE_REFRESH_TOKENS:
        security.set_refresh_cookie(response, security.create_refresh_token(claims))
    logger.info("Access token refreshed for user %s", user.id)
    return usr_schemas.AuthUser(id=user.id, role=user.role)


async def get_current_user(
    request: Request,
    response: Response,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> usr_schemas.AuthUser:
    """
    현재 호출자의 식별 정보를 반환합니다. 인증할 수 없으면 401 을 발생시킵니다.
    """
    access_token = bearer_token or request.cookies.get(security.ACCESS_TOKEN_COOKIE)
    refresh_token = request.cookies.get(security.REFRESH_TOKEN_COOKIE)

    if not access_token and not refresh_token:
        raise UnauthorizedError("Missing authentication tokens")

    if access_token:
        try:
            return _identity_from_payload(security.decode_access_token(access_token))
        except ExpiredSignatureError:
            # 만료된 경우에만 refresh 흐름으로 넘어갑니다.
            if not refresh_token:
                raise UnauthorizedError("Invalid or expired access token")
        except JWTError:
            raise UnauthorizedError("Invalid or expired access token")

    return await _refresh_session(db, response, refresh_token)


async def get_optional_user(
    request: Request,
    response: Response,
    bearer_token: Optional[str] = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_session),
) -> Optional[usr_schemas.AuthUser]:
    """
    공개 엔드포인트용 호출자 식별. 인증할 수 없으면 비로그인(None)으로 취급합니다.
    Access Token 이 만료되었거나 없고 refreshToken 쿠키가 유효하면 get_current_user 와 같이 세션을 갱신합니다.
    """
    access_token = bearer_token or request.cookies.get(security.ACCESS_TOKEN_COOKIE)
    refresh_token = request.cookies.get(security.REFRESH_TOKEN_COOKIE)

    if access_token:
        try:
            return _identity_from_payload(security.decode_access_token(access_token))
        except ExpiredSignatureError:
            pass
        except (JWTError, UnauthorizedError):
            return None

    if not refresh_token:
        return None
    try:
        return await _refresh_session(db, response, refresh_token)
    except UnauthorizedError:
        return None


# --- 역할 기반 권한 부여 의존성 ---
def require_roles(*allowed_roles: UserRole) -> Callable[..., Any]:
    """
    허용된 역할만 통과시키는 의존성을 만듭니다. 그 외 역할은 403 Forbidden.
    """
    async def _checker(
        current_user: usr_schemas.AuthUser = Depends(get_current_user),
    ) -> usr_schemas.AuthUser:
        if current_user.role not in allowed_roles:
            logger.info("User %s (%s) denied; requires %s", current_user.id, current_user.role.value,
                        [role.value for role in allowed_roles])
            raise ForbiddenError("You do not have permission to perform this action")
        return current_user

    return _checker


get_current_admin_user = require_roles(UserRole.ADMIN)
