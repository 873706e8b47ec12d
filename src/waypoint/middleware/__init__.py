"""Middleware — protocol-based, no inheritance required.

A middleware is any object with:
    def handle(self, request: Request) -> MiddlewareResult

Built-in middleware:
    BearerAuthMiddleware -- Bearer token authentication (the auth step)
    BodyLimitMiddleware -- 413 for oversized request bodies
    RateLimitMiddleware -- Fixed-window per-client rate limiting
    SecurityHeadersMiddleware -- nosniff, frame and referrer headers
"""

from waypoint.middleware.auth import BearerAuthConfig, BearerAuthMiddleware
from waypoint.middleware.body_limit import BodyLimitMiddleware
from waypoint.middleware.protocol import (
    CONTINUE,
    HALT,
    Middleware,
    MiddlewareResult,
    ResponseHook,
    Signal,
)
from waypoint.middleware.rate_limit import RateLimitBucket, RateLimitConfig, RateLimitMiddleware
from waypoint.middleware.security_headers import (
    SecurityHeadersConfig,
    SecurityHeadersMiddleware,
)

__all__ = [
    "CONTINUE",
    "HALT",
    "BearerAuthConfig",
    "BearerAuthMiddleware",
    "BodyLimitMiddleware",
    "Middleware",
    "MiddlewareResult",
    "RateLimitBucket",
    "RateLimitConfig",
    "RateLimitMiddleware",
    "ResponseHook",
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
    "Signal",
]
