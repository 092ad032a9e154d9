import httpx
from fastapi import Depends
from src.shared.config import AppConfig, logger
from src.shared.dependencies import get_app_config, get_http_client
from .query import HealthCheckResponse

class HealthCheckHandler:
    def __init__(
        self,
        http_client: httpx.AsyncClient = Depends(get_http_client),
        app_config: AppConfig = Depends(get_app_config),
    ):
        self._http_client = http_client
        self._upstream = app_config.upstream

    async def handle(self) -> HealthCheckResponse:
        services_status = {
            "credential": "up" if self._upstream.api_key else "down",
        }

        # Any answer below 500 means the upstream is reachable, 401 included
        try:
            health_resp = await self._http_client.head(self._upstream.health_url, timeout=5.0)
            services_status["upstream_api"] = "up" if health_resp.status_code < 500 else "down"
        except Exception as e:
            logger.error("Upstream API health check failed: %s", str(e))
            services_status["upstream_api"] = "down"

        overall_status = "ok" if all(s == "up" for s in services_status.values()) else "error"
        return HealthCheckResponse(
            status=overall_status,
            upstream_url=self._upstream.url,
            services=services_status,
        )
