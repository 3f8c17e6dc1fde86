# ===== app/api/middleware/rate_limit_middleware.py =====
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import logging
import math
import time

logger = logging.getLogger(__name__)


class BookingRateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-client limit on booking creation.

    Only POST requests to the booking endpoint count. Each client IP may
    create `max_requests` bookings per sliding `window_seconds`.
    Timestamps are kept in process memory, so the limit is per worker.
    """

    def __init__(
            self,
            app,
            max_requests: int = 10,
            window_seconds: float = 60.0,
            path: str = "/api/v1/appointments"
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.path = path.rstrip("/")
        self.request_times = {}
        self._last_sweep = time.monotonic()

    def _sweep(self, current_time: float) -> None:
        """Forget clients with no request inside the window, at most once per window."""
        if current_time - self._last_sweep < self.window_seconds:
            return
        self._last_sweep = current_time
        stale = [
            ip for ip, times in self.request_times.items()
            if not times or current_time - times[-1] >= self.window_seconds
        ]
        for ip in stale:
            del self.request_times[ip]

    async def dispatch(self, request: Request, call_next):
        if request.method != "POST" or request.url.path.rstrip("/") != self.path:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"
        current_time = time.monotonic()
        self._sweep(current_time)

        # Drop timestamps that left the window
        recent = [
            t for t in self.request_times.get(client_ip, [])
            if current_time - t < self.window_seconds
        ]

        if len(recent) >= self.max_requests:
            retry_after = max(1, math.ceil(self.window_seconds - (current_time - recent[0])))
            self.request_times[client_ip] = recent
            logger.warning(f"Booking rate limit hit for {client_ip}")
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": "RATE_LIMITED",
                    "message": "Too many booking attempts. Please try again later.",
                    "details": {"retry_after": retry_after}
                },
                headers={"Retry-After": str(retry_after)}
            )

        recent.append(current_time)
        self.request_times[client_ip] = recent
        return await call_next(request)
