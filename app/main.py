# app/main.py

import logging
from typing import AsyncGenerator
from contextlib import asynccontextmanager
from arq import cron
from arq.connections import create_pool, RedisSettings

from sqlalchemy import literal
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

# 핵심 설정 및 데이터베이스 모듈 임포트
from app.core.config import settings
from app.core.database import engine, get_session
from app.core.exceptions import ApiError, register_exception_handlers

from app import API_PREFIX

# 태스크 모듈 임포트
from app.core import tasks as core_tasks

# 도메인 라우터 임포트
from app.domains.usr.routers import router as usr_router
from app.domains.sweet.routers import router as sweet_router, category_router
from app.domains.purchase.routers import router as purchase_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# ARQ 워커가 실행할 태스크 함수 목록
worker_functions = [
    core_tasks.health_check_database_task,
]


# ARQ 워커 설정 클래스 (arq app.main.ArqWorkerSettings 로 실행)
class ArqWorkerSettings:
    redis_settings = RedisSettings(host=settings.REDIS_HOST, port=settings.REDIS_PORT)
    functions = worker_functions
    cron_jobs = [
        # 매일 00:00 데이터베이스 헬스 체크
        cron(core_tasks.health_check_database_task, hour={0}, minute={0}, timeout=300, keep_result=600),
    ]


# -- 애플리케이션 수명 주기 이벤트 핸들러 --
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI 애플리케이션의 수명 주기 이벤트(데이터베이스, ARQ Redis)를 함께 처리합니다.
    ARQ_ENABLED 가 꺼져 있으면 Redis 풀을 만들지 않습니다.
    """
    logger.info("%s 시작 중... (env=%s)", settings.APP_NAME, settings.APP_ENV)
    app.state.redis = None
    if settings.ARQ_ENABLED:
        logger.info("ARQ Redis 커넥션 풀을 생성합니다...")
        app.state.redis = await create_pool(ArqWorkerSettings.redis_settings)
        logger.info("ARQ Redis 커넥션 풀 생성 완료.")

    yield  # 애플리케이션 실행

    logger.info("%s 종료 중...", settings.APP_NAME)
    try:
        if app.state.redis is not None:
            await app.state.redis.close()
            logger.info("ARQ Redis 연결 풀 종료 완료.")
    finally:
        await engine.dispose()
        logger.info("데이터베이스 연결 풀 종료 완료.")


# -- FastAPI 애플리케이션 인스턴스 생성 --
app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# -- CORS 미들웨어 설정 --
# 쿠키 인증을 쓰므로 allow_credentials 를 켭니다. 운영에서는 CORS_ORIGINS 를 프론트엔드 도메인으로 제한합니다.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -- 전역 예외 핸들러 (공통 오류 응답 봉투) --
register_exception_handlers(app)

# -- 도메인 라우터 포함 --
app.include_router(usr_router, prefix=API_PREFIX, tags=["Auth & Users (인증 및 사용자 관리)"])
app.include_router(category_router, prefix=f"{API_PREFIX}/sweet/category", tags=["Categories (카테고리 관리)"])
app.include_router(sweet_router, prefix=f"{API_PREFIX}/sweets", tags=["Sweets (스윗 및 재고 관리)"])
app.include_router(purchase_router, prefix=f"{API_PREFIX}/purchases", tags=["Purchases (구매 내역)"])


# -- 루트 엔드포인트 --
@app.get("/", summary="API Root", response_description="Welcome message and documentation link.")
async def read_root():
    return {"message": f"Welcome to {settings.APP_NAME}. Visit /docs for interactive API documentation."}


# -- 헬스 체크 엔드포인트 --
@app.get("/health-check", summary="Health Check", response_description="Status of the application and database connection.")
async def health_check(session: AsyncSession = Depends(get_session)):
    """
    데이터베이스 연결을 테스트하여 서비스의 정상 작동 여부를 확인합니다.
    """
    try:
        result = await session.exec(select(literal(1)))
        ok = result.first() == 1
    except Exception as e:
        logger.exception("Database health check failed")
        raise ApiError(f"Database connection error during health check: {e}", status_code=503, code="DATABASE_UNAVAILABLE")
    if not ok:
        raise ApiError("Database health check failed: No result from test query", status_code=503, code="DATABASE_UNAVAILABLE")
    return {"status": "ok", "database_connection": "successful"}
