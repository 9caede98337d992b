# app/core/database.py

"""
애플리케이션의 데이터베이스 연결 및 세션 관리를 담당하는 모듈입니다.

- SQLModel의 비동기 엔진을 설정합니다.
- 비동기 세션 생성을 위한 유틸리티 함수를 제공합니다.
"""

from typing import Any, AsyncGenerator, Dict
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine
from sqlalchemy.orm import sessionmaker

from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.config import settings

# =============================================================================
# 모든 도메인 모델 임포트
# =============================================================================
# 모든 SQLModel 클래스가 SQLModel.metadata에 등록되어야
# 매퍼가 관계를 해석할 수 있습니다.
from app.domains import models  # noqa: F401


def _engine_options(url: str) -> Dict[str, Any]:
    """드라이버별 커넥션 풀 옵션. SQLite(aiosqlite)는 풀 크기 옵션을 받지 않습니다."""
    if url.startswith("sqlite"):
        return {}
    return {
        "pool_recycle": 3600,  # 1시간마다 연결 재활용
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
    }


_database_url = settings.DATABASE_URL.get_secret_value()

# SQLModel 엔진을 생성합니다.
engine: AsyncEngine = create_async_engine(
    _database_url,
    echo=settings.DEBUG_MODE,  # 디버그 모드일 때만 SQL 쿼리 출력
    future=True,
    **_engine_options(_database_url),
)

# 비동기 세션을 생성하는 '세션 공장'을 정의합니다.
AsyncSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# =============================================================================
# 비동기 데이터베이스 세션 의존성 주입
# =============================================================================
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 의존성 주입을 위한 비동기 데이터베이스 세션 제너레이터입니다.
    요청마다 새로운 세션을 생성하고, 요청 처리 후 세션을 닫습니다.
    커밋되지 않은 트랜잭션은 세션 종료 시 롤백됩니다.
    """
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def get_async_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    ARQ Task 등 요청 밖의 비동기 컨텍스트에서 사용할
    독립적인 비동기 DB 세션을 제공하는 컨텍스트 관리자입니다.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
