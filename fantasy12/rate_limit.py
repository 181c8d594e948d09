"""
Rate limiting - fixed-window request counters keyed by client identity.

The application factory creates one RateLimiter and keeps it on ``app.state``;
routes reach it through the ``rate_limit`` dependency. The counters are
process-local, so a multi-instance deployment needs a shared store instead.
"""
import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from fastapi import Request, Response

from fantasy12.exceptions import RateLimited

CLEANUP_INTERVAL_SECONDS = 60


@dataclass(frozen=True)
class RateLimitRule:
    name: str
    window_seconds: int
    max_requests: int
    message: str
    skip_successful: bool = False  # refund hits for requests that succeed


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds
    retry_after: int

    def headers(self) -> dict:
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": datetime.fromtimestamp(self.reset_at, tz=timezone.utc).isoformat(),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


DEFAULT_RULES = (
    RateLimitRule(
        "general", 15 * 60, 100,
        "Too many requests. Limit is 100 requests per 15 minutes.",
    ),
    RateLimitRule(
        "auth", 15 * 60, 5,
        "Too many login attempts. Try again in 15 minutes.",
        skip_successful=True,
    ),
    RateLimitRule(
        "creation", 60 * 60, 10,
        "Creation limit reached. Try again in 1 hour.",
    ),
    RateLimitRule(
        "strict", 60, 3,
        "Too many requests. Wait 1 minute.",
    ),
)


class RateLimiter:
    """Thread-safe in-memory counters, one window per (rule, identity)."""

    def __init__(self, rules=DEFAULT_RULES, clock=time.time):
        self.rules = {rule.name: rule for rule in rules}
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[tuple[str, str], list] = {}  # key -> [count, reset_at]
        self._last_cleanup = 0.0

    def allow(self, identity: str, rule_name: str) -> RateLimitDecision:
        """Count one hit and report whether it fits in the current window."""
        rule = self.rules[rule_name]
        now = self._clock()
        key = (rule_name, identity)

        with self._lock:
            self._cleanup(now)

            window = self._windows.get(key)
            if window is None or now > window[1]:
                window = [0, now + rule.window_seconds]
                self._windows[key] = window

            count, reset_at = window
            if count >= rule.max_requests:
                return RateLimitDecision(
                    allowed=False,
                    limit=rule.max_requests,
                    remaining=0,
                    reset_at=reset_at,
                    retry_after=max(1, math.ceil(reset_at - now)),
                )

            window[0] += 1
            return RateLimitDecision(
                allowed=True,
                limit=rule.max_requests,
                remaining=rule.max_requests - window[0],
                reset_at=reset_at,
                retry_after=0,
            )

    def release(self, identity: str, rule_name: str) -> None:
        """Give back one hit, e.g. after a successful login."""
        with self._lock:
            window = self._windows.get((rule_name, identity))
            if window is not None and window[0] > 0:
                window[0] -= 1

    def _cleanup(self, now: float) -> None:
        # Caller holds the lock
        if now - self._last_cleanup < CLEANUP_INTERVAL_SECONDS:
            return
        expired = [key for key, (_, reset_at) in self._windows.items() if now > reset_at]
        for key in expired:
            del self._windows[key]
        self._last_cleanup = now


def client_identity(request: Request) -> str:
    host = request.client.host if request.client else "unknown"
    return f"{host}-{request.headers.get('user-agent', '')}"


def check_rate_limit(request: Request, rule_name: str) -> tuple[RateLimitDecision, str]:
    """Count a hit for the request, raising RateLimited when over the limit."""
    limiter: RateLimiter = request.app.state.rate_limiter
    identity = client_identity(request)
    decision = limiter.allow(identity, rule_name)
    if not decision.allowed:
        raise RateLimited(
            limiter.rules[rule_name].message,
            retry_after=decision.retry_after,
            headers=decision.headers(),
        )
    return decision, identity


def rate_limit(rule_name: str):
    """Route dependency enforcing one rule."""

    def dependency(request: Request, response: Response):
        decision, identity = check_rate_limit(request, rule_name)
        response.headers.update(decision.headers())
        request.state.rate_limit_headers = decision.headers()
        rule = request.app.state.rate_limiter.rules[rule_name]
        yield decision
        # Only reached when the endpoint did not raise
        if rule.skip_successful:
            request.app.state.rate_limiter.release(identity, rule_name)

    return dependency

