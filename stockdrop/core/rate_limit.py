from __future__ import annotations

import time
from collections import defaultdict, deque

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        limit: int = 120,
        window_seconds: int = 60,
        exempt_paths: tuple[str, ...] = ("/health",),
        trusted_proxies: tuple[str, ...] = (),
    ):
        super().__init__(app)
        self.limit = limit
        self.window_seconds = window_seconds
        self.exempt_paths = exempt_paths
        self.trusted_proxies = frozenset(trusted_proxies)
        self.requests: dict[str, deque[float]] = defaultdict(deque)

    def _client_key(self, request: Request) -> str:
        peer = request.client.host if request.client else "unknown"
        forwarded = request.headers.get("x-forwarded-for")
        if not forwarded or peer not in self.trusted_proxies:
            return peer
        # Walk back through our own proxies; anything left of the first untrusted hop is client-supplied
        hops = [hop.strip() for hop in forwarded.split(",") if hop.strip()]
        for hop in reversed(hops):
            if hop not in self.trusted_proxies:
                return hop
        return hops[0] if hops else peer

    async def dispatch(self, request: Request, call_next):
        if request.url.path.endswith(self.exempt_paths):
            return await call_next(request)

        key = self._client_key(request)
        now = time.monotonic()
        bucket = self.requests[key]

        while bucket and now - bucket[0] > self.window_seconds:
            bucket.popleft()

        if len(bucket) >= self.limit:
            retry_after = max(1, int(self.window_seconds - (now - bucket[0])))
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Please retry shortly.", "error": "rate_limited"},
                headers={"Retry-After": str(retry_after)},
            )

        bucket.append(now)
        return await call_next(request)
