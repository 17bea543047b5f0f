"""
Middleware package for request processing
"""
from .security import SecurityHeadersMiddleware

__all__ = [
    "SecurityHeadersMiddleware",
]
