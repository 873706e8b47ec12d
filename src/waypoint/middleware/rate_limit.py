"""Fixed-window rate limiting middleware.

In-memory, per client and per bucket. A bucket is selected by path;
requests that match no bucket use the default limit. Passing responses
carry ``X-RateLimit-Limit``, ``X-RateLimit-Remaining`` and
``X-RateLimit-Reset`` (epoch seconds).

The client is the authenticated user when an earlier middleware stored
one in ``request.state``, else the transport peer address.
``X-Forwarded-For`` / ``X-Real-IP`` are used only with
``trust_forwarded=True``, which is safe only behind a proxy that sets
them.
"""

import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass

from waypoint.errors import TooManyRequests
from waypoint.http.request import Request
from waypoint.http.response import Response, error_response
from waypoint.middleware.protocol import CONTINUE, MiddlewareResult
from waypoint.routing.pattern import CompiledPattern, compile_pattern

logger = logging.getLogger("waypoint.middleware")

_STATE_KEY = "rate_limit"


@dataclass(frozen=True, slots=True)
class RateLimitBucket:
    """A named limit for a set of paths.

    ``prefixes`` match a path and everything below it; ``patterns`` are
    route patterns (``/forms/{id}/submit``) matched exactly.
    """

    name: str
    requests: int
    window_seconds: int = 60
    prefixes: tuple[str, ...] = ()
    patterns: tuple[str, ...] = ()

    def compile(self) -> tuple[CompiledPattern, ...]:
        return tuple(compile_pattern(p) for p in self.patterns)


DEFAULT_BUCKETS: tuple[RateLimitBucket, ...] = (
    RateLimitBucket(
        name="public",
        requests=30,
        prefixes=("/track",),
        patterns=("/forms/{form_id}/submit",),
    ),
    RateLimitBucket(name="chat", requests=20, prefixes=("/ai/chat",)),
    RateLimitBucket(name="auth", requests=5, window_seconds=300, prefixes=("/auth/login",)),
)


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
    """Configuration for ``RateLimitMiddleware``.

    Defaults: 60 requests per minute; 30 per minute for public tracking
    and form submission; 20 per minute for chat; 5 login attempts per
    five minutes. Buckets are tried in order.
    """

    requests: int = 60
    window_seconds: int = 60
    buckets: tuple[RateLimitBucket, ...] = DEFAULT_BUCKETS
    trust_forwarded: bool = False
    user_state_key: str = "user"
    headers: bool = True


@dataclass(frozen=True, slots=True)
class _Quota:
    limit: int
    remaining: int
    reset: int


class RateLimitMiddleware:
    """Reject clients that exceed their bucket's limit with a 429.

    Register it after ``BearerAuthMiddleware`` to count authenticated
    users by id instead of by address.
    """

    __slots__ = (
        "_clock",
        "_compiled",
        "_config",
        "_last_sweep",
        "_lock",
        "_state",
        "_sweep_interval",
    )

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config or RateLimitConfig()
        self._clock = clock
        self._compiled = tuple((b, b.compile()) for b in self._config.buckets)
        self._lock = threading.Lock()
        self._last_sweep = clock()
        self._sweep_interval = min(
            [self._config.window_seconds, *(b.window_seconds for b in self._config.buckets)]
        )
        # (bucket, client) -> (count, window_start, window)
        self._state: dict[tuple[str, str], tuple[int, float, int]] = {}

    def __len__(self) -> int:
        """Number of live (bucket, client) windows."""
        return len(self._state)

    def _bucket_for(self, path: str) -> tuple[str, int, int]:
        for bucket, patterns in self._compiled:
            if any(path == p or path.startswith(f"{p}/") for p in bucket.prefixes) or any(
                pattern.match(path) is not None for pattern in patterns
            ):
                return bucket.name, bucket.requests, bucket.window_seconds
        return "default", self._config.requests, self._config.window_seconds

    def client_key(self, request: Request) -> str:
        """The identity a request is counted under."""
        user = request.state.get(self._config.user_state_key)
        if user is not None:
            user_id = user.get("id") if isinstance(user, Mapping) else getattr(user, "id", None)
            if user_id is not None:
                return f"user:{user_id}"
        if self._config.trust_forwarded:
            forwarded = request.forwarded_for
            if forwarded:
                return f"ip:{forwarded}"
        return f"ip:{request.client_ip}"

    def _sweep(self, now: float) -> None:
        """Drop expired windows. Caller holds the lock."""
        expired = [key for key, (_, start, window) in self._state.items() if now - start >= window]
        for key in expired:
            del self._state[key]
        self._last_sweep = now

    def _consume(self, key: tuple[str, str], limit: int, window: int) -> tuple[int, _Quota]:
        """Count one request against *key*.

        Returns the seconds until the window resets when the limit is
        already used up (0 when the request is allowed), and the quota
        left afterwards.
        """
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self._sweep_interval:
                self._sweep(now)
            count, start, _ = self._state.get(key, (0, now, window))
            if now - start >= window:
                count, start = 0, now
            if count >= limit:
                return max(1, int(start + window - now)), _Quota(limit, 0, int(start + window))
            count += 1
            self._state[key] = (count, start, window)
        return 0, _Quota(limit, limit - count, int(start + window))

    def handle(self, request: Request) -> MiddlewareResult:
        name, limit, window = self._bucket_for(request.path)
        client = self.client_key(request)
        retry_after, quota = self._consume((name, client), limit, window)
        if retry_after:
            logger.warning(
                "429 %s %s: %s bucket exhausted for %s", request.method, request.path, name, client
            )
            return error_response(TooManyRequests(retry_after))
        request.state[_STATE_KEY] = quota
        return CONTINUE

    def process_response(self, request: Request, response: Response) -> Response:
        quota = request.state.get(_STATE_KEY)
        if not self._config.headers or quota is None:
            return response
        return response.with_headers(
            (
                ("X-RateLimit-Limit", str(quota.limit)),
                ("X-RateLimit-Remaining", str(quota.remaining)),
                ("X-RateLimit-Reset", str(quota.reset)),
            )
        )
