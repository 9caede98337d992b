# app/domains/__init__.py

"""
비즈니스 도메인 패키지 모음입니다 (usr, sweet, purchase).
"""
