"""Middleware package."""

from lunapm.middleware.request_context import RequestContextMiddleware

__all__ = ["RequestContextMiddleware"]
