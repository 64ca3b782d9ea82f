# backend/models/__init__.py
