from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from .handler import RelayChatHandler

router = APIRouter()

RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

@router.api_route("/{path:path}", methods=RELAY_METHODS, include_in_schema=False)
async def relay_chat(
    request: Request,
    handler: RelayChatHandler = Depends(RelayChatHandler)
) -> Response:
    return await handler.handle(request)
