from fastapi import APIRouter, Depends, Response
from .handler import HealthCheckHandler
from .query import HealthCheckResponse

router = APIRouter()

@router.get("/health", response_model=HealthCheckResponse, tags=["Monitoring"])
async def health_check(response: Response, handler: HealthCheckHandler = Depends()):
    """Reports credential and upstream reachability; 503 when either is down."""
    result = await handler.handle()
    if not result.healthy:
        response.status_code = 503
    return result
