"""
Database package for the application.
"""

from .base import Base
from .connection import (
    AsyncSessionLocal,
    engine,
    async_session,
    build_engine,
    build_session_factory,
    init_models,
)

__all__ = [
    "Base",
    "AsyncSessionLocal",
    "engine",
    "async_session",
    "build_engine",
    "build_session_factory",
    "init_models",
]
