"""Middleware registration."""

from fastapi import FastAPI

from taskflow.config import Settings
from taskflow.middleware.cors import setup_cors
from taskflow.middleware.error_handler import setup_error_handlers
from taskflow.middleware.logging import setup_logging
from taskflow.middleware.rate_limit import RateLimitMiddleware
from taskflow.middleware.request_id import RequestIdMiddleware
from taskflow.middleware.security_headers import SecurityHeadersMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette runs middleware in reverse-add order (last added = outermost).
    CORS is added last so it also wraps 429 responses from the rate limiter.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
