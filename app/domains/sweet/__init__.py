# app/domains/sweet/__init__.py

"""
FastAPI 애플리케이션의 'sweet' 도메인 패키지입니다.

카탈로그(카테고리, 스윗)와 관리자 재입고(restock)를 담당합니다.
카테고리/스윗 조회는 app.core.visibility 의 역할 기반 조회 범위를 따릅니다.
"""

__title__ = "Sweet Shop Catalog Domain"
__all__ = []
