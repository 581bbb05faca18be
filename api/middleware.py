"""Correlation-id middleware using ContextVar.

Reads the X-Correlation-ID request header (or generates one) and stores it
in a ContextVar so that log records emitted anywhere during the request can
be stamped with it via get_correlation_id(). The id is echoed back on the
response.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_ID_HEADER = "X-Correlation-ID"

# ---------------------------------------------------------------------------
# Context variable (per request task)
# ---------------------------------------------------------------------------

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Return the correlation id of the current request, if any."""
    return _correlation_id.get()


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to every request.

    Priority:
    1. X-Correlation-ID header (explicit)
    2. Fresh uuid4
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or str(uuid.uuid4())

        token = _correlation_id.set(correlation_id)
        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            _correlation_id.reset(token)
