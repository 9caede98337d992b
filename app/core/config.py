# app/core/config.py

from typing import List
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
import os

# 프로젝트의 루트 디렉토리 경로를 계산합니다.
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


class Settings(BaseSettings):
    """
    애플리케이션의 모든 설정을 정의하는 Pydantic BaseSettings 모델입니다.
    환경 변수 및 .env 파일에서 값을 자동으로 로드합니다.
    """

    # --- Pydantic Settings 설정 ---
    model_config = SettingsConfigDict(
        env_file=os.path.join(BASE_DIR, '.env'),
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=True
    )

    # --- 애플리케이션 기본 설정 ---
    APP_NAME: str = "Sweet Shop API"
    APP_VERSION: str = "0.1.0"
    APP_DESCRIPTION: str = "Sweet Shop inventory, catalog and purchase API"
    APP_ENV: str = Field("development", description="Application environment (e.g., development, production, testing)")
    DEBUG_MODE: bool = Field(False, description="Enable debug mode for detailed logging and error messages")
    LOG_LEVEL: str = Field("INFO", description="Root logging level")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # --- 데이터베이스 설정 ---
    DATABASE_URL: SecretStr = Field(..., description="Async database connection URL (postgresql+asyncpg://...)")

    # --- JWT (JSON Web Token) 설정 ---
    SECRET_KEY: SecretStr = Field(..., description="Secret key for access token signing. Keep this highly secure!")
    REFRESH_SECRET_KEY: SecretStr = Field(..., description="Secret key for refresh token signing (must differ from SECRET_KEY)")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing (e.g., HS256)")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(15, description="Access token expiration time in minutes")
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7, description="Refresh token expiration time in days")
    ROTATE_REFRESH_TOKENS: bool = Field(False, description="Issue a new refresh token whenever the access token is refreshed")
    BCRYPT_ROUNDS: int = Field(10, ge=4, le=31, description="bcrypt cost factor for password hashing")

    # --- 페이지네이션 설정 ---
    DEFAULT_PAGE_LIMIT: int = Field(20, ge=1, description="Default page size for list endpoints")
    MAX_PAGE_LIMIT: int = Field(100, ge=1, description="Upper bound for the page size")
    SWEET_SEARCH_LIMIT: int = Field(50, ge=1, description="Maximum number of rows returned by sweet search")

    # --- ARQ (Redis) 설정 ---
    ARQ_ENABLED: bool = Field(False, description="Create the ARQ Redis pool at application startup")
    REDIS_HOST: str = Field("localhost", description="Redis host for the ARQ worker")
    REDIS_PORT: int = Field(6379, description="Redis port for the ARQ worker")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def COOKIE_SECURE(self) -> bool:
        return self.is_production

    @property
    def COOKIE_SAMESITE(self) -> str:
        return "strict" if self.is_production else "lax"


settings = Settings()
