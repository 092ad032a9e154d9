# src/features/relay_chat/handler.py
from typing import AsyncIterator

import httpx
from fastapi import Depends, Request
from fastapi.responses import Response, StreamingResponse
from starlette.background import BackgroundTask

from src.shared.config import logger
from src.shared.dependencies import get_header_policy, get_upstream_client
from src.shared.errors import NotFoundError, RelayError, UpstreamError
from src.shared.metrics import RELAYED_BYTES, RELAYED_REQUESTS, STREAMED_CHUNKS, UPSTREAM_FAILURES

from .client import UpstreamClient
from .command import RelayCommand
from .policy import ResponseHeaderPolicy

class RelayChatHandler:
    def __init__(
        self,
        upstream: UpstreamClient = Depends(get_upstream_client),
        policy: ResponseHeaderPolicy = Depends(get_header_policy),
    ):
        self._upstream = upstream
        self._policy = policy

    async def handle(self, request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204)
        if request.method != "POST":
            raise NotFoundError()

        command = RelayCommand.from_body(await request.body())
        mode = "stream" if command.stream else "buffered"

        try:
            upstream_resp = await self._upstream.send(command.payload, stream=command.stream)
        except RelayError:
            UPSTREAM_FAILURES.inc()
            raise
        except Exception as e:
            UPSTREAM_FAILURES.inc()
            logger.error("Upstream request failed: %s", e)
            raise UpstreamError(str(e)) from e

        RELAYED_REQUESTS.labels(mode=mode, status=upstream_resp.status_code).inc()
        request.state.relay_mode = mode
        request.state.upstream_status = upstream_resp.status_code
        if command.stream:
            # Closes the upstream even if the body iterator never starts
            return StreamingResponse(
                self._relay_chunks(upstream_resp),
                status_code=upstream_resp.status_code,
                headers=self._policy.stream_headers(upstream_resp.headers),
                background=BackgroundTask(upstream_resp.aclose),
            )

        body = upstream_resp.content
        RELAYED_BYTES.labels(mode=mode).inc(len(body))
        return Response(
            content=body,
            status_code=upstream_resp.status_code,
            headers=self._policy.buffered_headers(upstream_resp.headers),
        )

    async def _relay_chunks(self, upstream_resp: httpx.Response) -> AsyncIterator[bytes]:
        """Yields upstream body chunks in arrival order, unchanged."""
        try:
            async for chunk in upstream_resp.aiter_bytes():
                STREAMED_CHUNKS.inc()
                RELAYED_BYTES.labels(mode="stream").inc(len(chunk))
                yield chunk
        except Exception as e:
            UPSTREAM_FAILURES.inc()
            logger.error("Upstream stream interrupted: %s", e)
            raise
        finally:
            await upstream_resp.aclose()
