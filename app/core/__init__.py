# app/core/__init__.py

"""
FastAPI 애플리케이션의 핵심 구성 요소 패키지입니다.

- `config.py`: 애플리케이션 설정 및 환경 변수 관리 (Pydantic Settings).
- `database.py`: 데이터베이스 엔진, 세션 관리 (SQLModel 및 Async SQLAlchemy).
- `security.py`: 비밀번호 해싱, JWT 발급/검증, 인증 쿠키.
- `dependencies.py`: 인증/권한 의존성 함수.
- `exceptions.py`: 구조화된 API 예외와 전역 예외 핸들러.
- `responses.py`: 공통 응답 봉투 스키마.
- `visibility.py`, `query_utils.py`: 역할 기반 조회 범위, 페이지네이션/정렬 헬퍼.
- `crud_base.py`: 공통 CRUD 기본 클래스.
- `tasks.py`: ARQ 워커 태스크.
"""

__title__ = "Sweet Shop Core"
__all__ = []
