# app/domains/purchase/__init__.py

"""
FastAPI 애플리케이션의 'purchase' 도메인 패키지입니다.

재고 차감과 함께 원자적으로 기록되는 구매(purchase)와 구매 내역 조회를 담당합니다.
"""

__title__ = "Sweet Shop Purchase Domain"
__all__ = []
