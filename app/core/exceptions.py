# app/core/exceptions.py

"""
애플리케이션 공통 예외와 전역 예외 핸들러를 정의하는 모듈입니다.

- ApiError: HTTPException을 확장하여 action / code / message / errors 를 함께 전달합니다.
- register_exception_handlers(): 모든 오류 응답을 공통 응답 봉투
  `{success, statusCode, data, message, code[, errors]}` 형태로 변환합니다.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# =============================================================================
# 1. 오류 분류 (action) 상수
# =============================================================================
class ErrorAction:
    BAD_REQUEST = "BAD_REQUEST"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


_STATUS_ACTIONS = {
    status.HTTP_400_BAD_REQUEST: ErrorAction.BAD_REQUEST,
    status.HTTP_401_UNAUTHORIZED: ErrorAction.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorAction.FORBIDDEN,
    status.HTTP_404_NOT_FOUND: ErrorAction.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorAction.CONFLICT,
}


# =============================================================================
# 2. 구조화된 API 예외
# =============================================================================
class ApiError(HTTPException):
    """
    구조화된 API 예외. 라우터와 CRUD 계층 어디에서든 raise 할 수 있으며,
    전역 핸들러가 공통 응답 봉투로 변환합니다.
    """
    status_code: int = status.HTTP_400_BAD_REQUEST
    action: str = ErrorAction.BAD_REQUEST

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(status_code=status_code or self.status_code, detail=message, headers=headers)
        self.message = message
        self.code = code or self.action
        self.errors = errors


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    action = ErrorAction.BAD_REQUEST


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    action = ErrorAction.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", **kwargs: Any):
        kwargs.setdefault("headers", {"WWW-Authenticate": "Bearer"})
        super().__init__(message, **kwargs)


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    action = ErrorAction.FORBIDDEN


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    action = ErrorAction.NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    action = ErrorAction.CONFLICT


# =============================================================================
# 3. 응답 봉투 생성
# =============================================================================
def error_body(
    status_code: int,
    message: str,
    code: str,
    errors: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "success": False,
        "statusCode": status_code,
        "data": None,
        "message": message,
        "code": code,
    }
    if errors:
        body["errors"] = errors
    return body


def _validation_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    """pydantic 오류 목록을 `{field, message}` 목록으로 평탄화합니다."""
    errors = []
    for err in exc.errors():
        # loc 예: ("body", "price") / ("query", "limit")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append({"field": ".".join(loc) or None, "message": message})
    return errors


# =============================================================================
# 4. 전역 예외 핸들러 등록
# =============================================================================
def register_exception_handlers(app: FastAPI) -> None:
    """FastAPI 앱에 공통 예외 핸들러를 등록합니다."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("%s %s -> %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.message, exc.code, exc.errors),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = _validation_errors(exc)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                status.HTTP_400_BAD_REQUEST,
                "Validation failed",
                ErrorAction.VALIDATION_ERROR,
                errors,
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        code = _STATUS_ACTIONS.get(exc.status_code, ErrorAction.BAD_REQUEST)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, message, code),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        # 사전 중복 검사를 통과한 동시 요청이 유니크 제약에 걸린 경우
        logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=error_body(
                status.HTTP_409_CONFLICT,
                "Resource conflicts with an existing record",
                ErrorAction.CONFLICT,
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "Internal server error",
                ErrorAction.INTERNAL_SERVER_ERROR,
            ),
        )
