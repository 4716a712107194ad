"""
Request tracing middleware.

Every request gets a request_id (taken from X-Request-ID when the proxy sets
one) bound into the structlog context together with method, path and client
address, so service-level events such as payment_status_updated can be tied
back to the gateway call that caused them.
"""
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from structlog.contextvars import bind_contextvars, clear_contextvars

from tourdesk.deps import client_ip
from tourdesk.logging_config import get_logger

logger = get_logger(__name__)

# Health checks hit these constantly; only failures are logged
QUIET_PATHS = frozenset({"/health"})


async def request_id_middleware(request: Request, call_next: Callable) -> Response:
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    clear_contextvars()
    bind_contextvars(
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        client_ip=client_ip(request),
    )
    request.state.request_id = request_id
    quiet = request.url.path in QUIET_PATHS

    if not quiet:
        logger.info("request_started")
    start = time.perf_counter()

    try:
        response = await call_next(request)
    except Exception as exc:
        logger.error(
            "request_failed",
            exc_info=exc,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        clear_contextvars()
        raise

    if not quiet or response.status_code >= 500:
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
    clear_contextvars()

    response.headers["X-Request-ID"] = request_id
    return response
