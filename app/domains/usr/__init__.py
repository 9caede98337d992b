# app/domains/usr/__init__.py

"""
FastAPI 애플리케이션의 'usr' 도메인 패키지입니다.

시스템 사용자와 인증(회원 가입, 로그인, 토큰/쿠키 발급)을 담당합니다.

주요 서브모듈:
- `models.py`: users 테이블에 매핑되는 SQLModel 정의와 UserRole Enum.
- `schemas.py`: 요청/응답 Pydantic 모델 (인증 스키마 포함).
- `crud.py`: 사용자 CRUD 및 인증 로직.
- `routers.py`: /auth, /users 엔드포인트.
"""

__title__ = "Sweet Shop User Domain"
__all__ = []
