from __future__ import annotations

import time
import uuid
from collections.abc import Callable

import sentry_sdk
import structlog
from fastapi import Request, Response

REQUEST_ID_HEADER = "X-Request-ID"


def _access_fields(request: Request, rid: str, status_code: int, start_ns: int) -> dict:
    duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000.0
    return {
        "request_id": rid,
        "path": request.url.path,
        "method": request.method,
        "status": status_code,
        "duration_ms": round(duration_ms, 3),
        "client_ip": (request.client.host if request.client else None) or "-",
    }


async def request_id_middleware(request: Request, call_next: Callable) -> Response:
    """Attach/propagate Request-ID and emit structured access log.

    - Prefer inbound X-Request-ID; generate UUID4 if absent
    - Bind request_id, path, method to contextvars so service logs include it
    - Emit one-line access log event="http_request"
    - Always set X-Request-ID on the response
    """
    logger = structlog.get_logger(__name__)
    rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

    structlog.contextvars.bind_contextvars(
        request_id=rid, path=request.url.path, method=request.method
    )
    # No-op when Sentry is not initialised.
    sentry_sdk.set_tag("request_id", rid)

    start_ns = time.perf_counter_ns()
    try:
        response = await call_next(request)
    except Exception:
        logger.error("http_request", **_access_fields(request, rid, 500, start_ns), exc_info=True)
        structlog.contextvars.clear_contextvars()
        raise

    logger.info("http_request", **_access_fields(request, rid, response.status_code, start_ns))
    response.headers[REQUEST_ID_HEADER] = rid

    # Clear per-request bindings to avoid leakage across tasks
    structlog.contextvars.clear_contextvars()
    return response
