# app/domains/models/__init__.py

"""
모든 도메인의 SQLModel 모델을 한 곳에서 임포트하여
SQLModel.metadata 가 모든 테이블을 인식하도록 보장합니다.
"""

# usr (User)
from app.domains.usr.models import User, UserRole

# sweet (Category, Sweet, Restock)
from app.domains.sweet.models import Category, Sweet, Restock

# purchase (Purchase)
from app.domains.purchase.models import Purchase

__all__ = ["User", "UserRole", "Category", "Sweet", "Restock", "Purchase"]
