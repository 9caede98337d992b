# app/core/tasks.py

import logging

from sqlalchemy import literal
from sqlmodel import select

from app.core.database import get_async_session_context

logger = logging.getLogger(__name__)


async def health_check_database_task(ctx):
    """
    ARQ 워커에 의해 실행될 주기적인 데이터베이스 헬스 체크 태스크.
    결과는 ARQ job 결과로 남고, 실패는 로그로 기록됩니다.
    """
    logger.info("ARQ 태스크: 데이터베이스 헬스 체크 실행")
    try:
        async with get_async_session_context() as db:
            result = await db.exec(select(literal(1)))
            if result.first() == 1:
                logger.info("데이터베이스 헬스 체크: 성공")
                return {"status": "success", "message": "Database connection successful."}
            error_msg = "Database health check failed: No result from test query."
    except Exception as e:
        error_msg = f"Database connection error: {e}"
    logger.error("데이터베이스 헬스 체크: 실패 - %s", error_msg)
    return {"status": "failed", "message": error_msg}
