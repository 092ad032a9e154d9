# src/features/relay_chat/client.py
import json
from typing import Any, Dict

import httpx

from src.shared.config import UpstreamConfig, logger
from src.shared.errors import UpstreamError
from src.shared.utils import mask_key

from .policy import ResponseHeaderPolicy

class UpstreamClient:
    """Sends chat completion requests to the fixed upstream endpoint. Never retries."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        upstream: UpstreamConfig,
        policy: ResponseHeaderPolicy,
    ):
        self._client = http_client
        self._upstream = upstream
        self._policy = policy

    def _headers(self) -> Dict[str, str]:
        if not self._upstream.api_key:
            raise UpstreamError("Upstream API key is not configured")

        headers = {
            "Authorization": f"Bearer {self._upstream.api_key}",
            "Content-Type": "application/json",
        }
        if self._upstream.organization:
            headers["OpenAI-Organization"] = self._upstream.organization
        if self._upstream.project:
            headers["OpenAI-Project"] = self._upstream.project
        headers.update(self._policy.upstream_request_headers())
        return headers

    async def send(self, payload: Any, stream: bool) -> httpx.Response:
        """Issues the upstream POST.

        With ``stream`` set, only the response head has been read when this
        returns; the caller owns the response and must close it.
        """
        headers = self._headers()
        logger.info(
            "Relaying request to %s (stream: %s, key: %s, model: %s)",
            self._upstream.url,
            stream,
            mask_key(self._upstream.api_key),
            payload.get("model") if isinstance(payload, dict) else None,
        )
        body = json.dumps(payload, allow_nan=False).encode("utf-8")
        upstream_req = self._client.build_request(
            "POST", self._upstream.url, content=body, headers=headers
        )
        return await self._client.send(upstream_req, stream=stream)
