# app/core/security.py

"""
애플리케이션의 보안 관련 유틸리티 함수를 정의하는 모듈입니다.

- 비밀번호 해싱 및 검증 (passlib / bcrypt).
- Access / Refresh JWT 생성 및 검증 (python-jose). 두 토큰은 서로 다른 비밀키로 서명합니다.
- 인증 쿠키(accessToken / refreshToken) 설정 및 삭제.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Response
from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

ACCESS_TOKEN_COOKIE = "accessToken"
REFRESH_TOKEN_COOKIE = "refreshToken"

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


# --- 비밀번호 해싱 설정 ---
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """일반 텍스트 비밀번호와 해싱된 비밀번호가 일치하는지 확인합니다."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """주어진 비밀번호를 해싱합니다."""
    return pwd_context.hash(password)


# --- JWT 토큰 생성 및 검증 ---
def _encode(data: Dict[str, Any], secret: str, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"exp": now + expires_delta, "iat": now, "type": token_type})
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Access Token을 생성합니다. data 에는 `sub`(사용자 ID 문자열)와 `role` 이 포함됩니다.
    """
    return _encode(
        data,
        settings.SECRET_KEY.get_secret_value(),
        ACCESS_TOKEN_TYPE,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Refresh Token을 생성합니다.
    Access Token과 다른 비밀키로 서명하므로 서로 바꿔 사용할 수 없습니다.
    """
    return _encode(
        data,
        settings.REFRESH_SECRET_KEY.get_secret_value(),
        REFRESH_TOKEN_TYPE,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Access Token 을 검증하고 payload 를 반환합니다.
    만료 시 jose.ExpiredSignatureError, 그 외 검증 실패 시 jose.JWTError 를 발생시킵니다.
    """
    payload = jwt.decode(token, settings.SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise JWTError("Unexpected token type")
    return payload


def decode_refresh_token(token: str) -> Dict[str, Any]:
    payload = jwt.decode(token, settings.REFRESH_SECRET_KEY.get_secret_value(), algorithms=[settings.ALGORITHM])
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise JWTError("Unexpected token type")
    return payload


def token_claims(user_id: int, role: str) -> Dict[str, Any]:
    return {"sub": str(user_id), "role": role}


# --- 인증 쿠키 ---
def set_access_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=token,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def clear_auth_cookies(response: Response) -> None:
    for key in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            key=key,
            httponly=True,
            secure=settings.COOKIE_SECURE,
            samesite=settings.COOKIE_SAMESITE,
        )
