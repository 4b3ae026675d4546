"""
API Routes Package

This module exports the FastAPI routers of the traffic engine.
"""

from .engine_routes import router as engine_router

__all__ = [
    "engine_router",
]
