from __future__ import annotations

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Rejects course payloads whose declared size exceeds ``max_bytes``."""

    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self._max_bytes = max(1, max_bytes)

    async def dispatch(self, request: Request, call_next) -> Response:
        raw_length = request.headers.get("content-length")
        if not raw_length:
            return await call_next(request)
        try:
            declared = int(raw_length)
        except ValueError:
            declared = 0
        if declared > self._max_bytes:
            return JSONResponse(
                status_code=413,
                content={
                    "message": f"Request body too large ({declared} bytes).",
                    "details": {"max_bytes": self._max_bytes},
                },
            )
        return await call_next(request)
