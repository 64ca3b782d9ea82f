# backend/utils/__init__.py
