# backend/routers/__init__.py

from .distribution import router as distribution_router
from .stats import router as stats_router
