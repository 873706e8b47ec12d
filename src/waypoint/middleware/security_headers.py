"""Security headers middleware — X-Content-Type-Options, X-Frame-Options, Referrer-Policy.

Never rejects a request; only decorates the outgoing response.
"""

from dataclasses import dataclass

from waypoint.http.request import Request
from waypoint.http.response import Response
from waypoint.middleware.protocol import CONTINUE, MiddlewareResult


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Configuration for security headers.

    All values are applied as-is. ``None`` omits the header.
    """

    x_content_type_options: str = "nosniff"
    x_frame_options: str = "DENY"
    referrer_policy: str = "strict-origin-when-cross-origin"
    permissions_policy: str | None = "geolocation=(), microphone=(), camera=()"
    strict_transport_security: str | None = None


class SecurityHeadersMiddleware:
    """Add security headers to every response that reaches the handler.

    Usage::

        from waypoint.middleware import SecurityHeadersMiddleware

        app.use(SecurityHeadersMiddleware())
    """

    __slots__ = ("config",)

    def __init__(self, config: SecurityHeadersConfig | None = None) -> None:
        self.config = config or SecurityHeadersConfig()

    def handle(self, request: Request) -> MiddlewareResult:
        return CONTINUE

    def process_response(self, request: Request, response: Response) -> Response:
        cfg = self.config
        secured = (
            response.with_header("X-Content-Type-Options", cfg.x_content_type_options)
            .with_header("X-Frame-Options", cfg.x_frame_options)
            .with_header("Referrer-Policy", cfg.referrer_policy)
        )
        if cfg.permissions_policy:
            secured = secured.with_header("Permissions-Policy", cfg.permissions_policy)
        if cfg.strict_transport_security:
            secured = secured.with_header(
                "Strict-Transport-Security", cfg.strict_transport_security
            )
        return secured
