# tests/domains/__init__.py

"""
도메인별 API 통합 테스트 모음입니다.

- `test_auth_n.py`, `test_usr_n.py`: 'usr' 도메인 (인증, 사용자 관리)
- `test_category_n.py`, `test_sweet_n.py`: 'sweet' 도메인 (카테고리, 스윗, 재입고)
- `test_purchase_n.py`: 'purchase' 도메인 (구매, 구매 내역)
"""
