"""
API v1 routes package.
"""

from .calendar_routes import router as calendar_router
from .day_routes import router as day_router

__all__ = [
    "calendar_router",
    "day_router"
]
