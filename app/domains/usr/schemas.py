# app/domains/usr/schemas.py

"""
'usr' 도메인 (사용자 및 인증)의 API 데이터 전송 객체(DTO)를 정의하는 모듈입니다.
"""

from typing import Optional
from datetime import datetime

from sqlmodel import SQLModel
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from . import models as usr_models


def _normalize_email(value: str) -> str:
    return value.strip().lower()


# =============================================================================
# 1. 사용자 (User) 스키마
# =============================================================================
class UserBase(SQLModel):
    """사용자 정보의 기본 필드를 정의하는 스키마"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: usr_models.UserRole = Field(default=usr_models.UserRole.CUSTOMER, description="사용자 역할")


class UserCreate(UserBase):
    """회원 가입(사용자 생성)을 위한 스키마"""
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class UserUpdate(SQLModel):
    """
    사용자 정보 수정을 위한 스키마.
    고객은 자신의 name 만, 관리자는 role / is_active 까지 변경할 수 있습니다 (라우터에서 검사).
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[usr_models.UserRole] = None
    is_active: Optional[bool] = None

    @field_validator("name", "role", "is_active")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @model_validator(mode="after")
    def check_not_empty(self) -> "UserUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


class UserRead(SQLModel):
    """
    사용자 정보 조회를 위한 기본 스키마.
    비밀번호 해시값 등 민감한 정보는 제외됩니다.
    """
    id: int
    name: str
    email: str
    role: usr_models.UserRole
    is_active: bool
    created_at: datetime = Field(..., description="레코드 생성 일시")
    updated_at: datetime = Field(..., description="레코드 마지막 업데이트 일시")


class UserSummary(SQLModel):
    """구매 내역 등에 포함되는 사용자 요약 정보"""
    id: int
    name: str
    email: str


# =============================================================================
# 2. 인증 (Auth) 스키마
# =============================================================================
class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)


class AuthUser(BaseModel):
    """토큰에서 복원한 호출자 식별 정보 (DB 조회 없이 사용)"""
    id: int
    role: usr_models.UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == usr_models.UserRole.ADMIN


class Token(BaseModel):
    """로그인 응답에 포함되는 JWT 토큰"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LoginResult(Token):
    user: UserRead


class MeRead(BaseModel):
    user: UserRead
