"""Middleware package."""

from gello.middleware.csrf import CSRFMiddleware
from gello.middleware.logging import LoggingMiddleware, configure_logging
from gello.middleware.request_id import RequestIDMiddleware

__all__ = ["CSRFMiddleware", "LoggingMiddleware", "RequestIDMiddleware", "configure_logging"]
