"""
Relay error types and their conversion into client responses.
"""

from fastapi import Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException


class RelayError(Exception):
    """Base error carrying the status code and message sent to the client."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BadRequestError(RelayError):
    status_code = 400

    def __init__(self, message: str = "Invalid JSON body"):
        super().__init__(message)


class NotFoundError(RelayError):
    status_code = 404

    def __init__(self, message: str = "Not found"):
        super().__init__(message)


class UpstreamError(RelayError):
    status_code = 502


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Renders a RelayError as {"error": message}."""
    policy = request.app.state.header_policy
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=policy.error_headers(),
    )


async def routing_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Method or path mismatches in the router surface as the relay's 404."""
    if exc.status_code in (404, 405):
        return await relay_error_handler(request, NotFoundError())
    return await http_exception_handler(request, exc)
