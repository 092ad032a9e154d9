import time
import uuid
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from src.shared.config import logger
from src.shared.constants import CORS_HEADERS

class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Injects a unique request ID into every incoming request for tracing.
    """
    async def dispatch(
        self, request: Request, call_next
    ) -> Response:
        request.state.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4()))
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Forces the permissive cross-origin headers onto every response,
    including error responses and relayed upstream responses.
    """
    async def dispatch(
        self, request: Request, call_next
    ) -> Response:
        response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        return response

async def add_process_time_header(
    request: Request, call_next
) -> Response:
    """
    Adds a custom X-Process-Time header and logs request completion details,
    including the relay mode and the status the upstream answered with.
    For streamed responses the duration covers the time to first byte.
    """
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    # The 'date' header is removed as it is often redundant and inconsistently
    # populated by various components in the proxy chain.
    if "date" in response.headers:
        del response.headers["date"]

    # Set by the relay handler once the upstream has answered
    relay_mode = getattr(request.state, 'relay_mode', None)
    upstream_status = getattr(request.state, 'upstream_status', None)

    logger.info(
        "Request completed: %s %s -> %s (relay: %s, upstream: %s)",
        request.method,
        request.url.path,
        response.status_code,
        relay_mode or "-",
        upstream_status or "-",
        extra={
            "req_id": getattr(request.state, 'request_id', 'N/A'),
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "relay_mode": relay_mode,
            "upstream_status": upstream_status,
            "duration_sec": round(process_time, 4)
        }
    )
    return response
