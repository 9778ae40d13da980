from __future__ import annotations

import logging

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Refuse oversized schedule batches before the body is read."""

    def __init__(self, app, *, max_bytes: int) -> None:
        super().__init__(app)
        self.max_bytes = max(1, max_bytes)

    async def dispatch(self, request: Request, call_next) -> Response:
        declared = request.headers.get("content-length")
        size = int(declared) if declared and declared.isdigit() else 0
        if size <= self.max_bytes:
            return await call_next(request)

        logger.warning("Rejected %s %s: body of %d bytes", request.method, request.url.path, size)
        return JSONResponse(
            status_code=413,
            content={
                "message": "Request body too large",
                "details": {"size": size, "max_bytes": self.max_bytes},
            },
        )
