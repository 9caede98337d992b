# tests/__init__.py

"""
Sweet Shop API 테스트 스위트 패키지입니다.

- `conftest.py`: 테스트 DB(SQLite/aiosqlite), 세션, 사용자/카탈로그 팩토리, 역할별 인증 클라이언트 픽스처.
- `core/`: 조회 범위, 페이지네이션/정렬 헬퍼 단위 테스트.
- `domains/`: 도메인별 API 통합 테스트 (usr, sweet, purchase).
"""

__title__ = "Sweet Shop API Tests"
__all__ = []
