"""HTTP layer: routers, auth dependency and error mapping."""

from .router import build_router

__all__ = ["build_router"]
