"""Middleware package."""
from meetpoll.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
