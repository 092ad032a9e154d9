#!/usr/bin/env python3
"""
Chat Relay
Relays chat completion requests from browser clients to the upstream LLM API,
passing through both buffered JSON and streamed responses.
"""

import sys
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn

from fastapi import FastAPI
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.shared.config import AppConfig, config, logger
from src.shared.errors import RelayError, relay_error_handler, routing_error_handler
from src.shared.middleware import CORSHeadersMiddleware, RequestIDMiddleware, add_process_time_header
from src.shared.utils import mask_key
from src.features.relay_chat.policy import ResponseHeaderPolicy
from src.features.health_check.endpoints import router as health_check_router
from src.features.metrics.endpoints import router as metrics_router
from src.features.relay_chat.endpoints import router as relay_chat_router


def build_http_client(app_config: AppConfig) -> httpx.AsyncClient:
    """Creates the shared upstream client. No timeout: the host bounds request duration."""
    client_kwargs = {"timeout": httpx.Timeout(None)}
    if app_config.request_proxy.enabled and app_config.request_proxy.url:
        client_kwargs["proxy"] = app_config.request_proxy.url
        logger.info("Using proxy for httpx client: %s", app_config.request_proxy.url)
    return httpx.AsyncClient(**client_kwargs)


def create_app(app_config: AppConfig, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """Builds the relay application around an explicit configuration.

    When ``http_client`` is given it is used as-is and left open on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app_: FastAPI):
        """Manage application lifespan resources."""
        owns_client = http_client is None
        if owns_client:
            app_.state.http_client = build_http_client(app_config)
        if not app_config.upstream.api_key:
            logger.warning("No upstream API key configured; relay requests will fail with 502")
        logger.info(
            "Application startup complete (upstream: %s, key: %s, header policy: %s)",
            app_config.upstream.url,
            mask_key(app_config.upstream.api_key),
            app_config.relay.header_policy.value,
        )
        yield
        if owns_client:
            await app_.state.http_client.aclose()
        logger.info("Application shutdown complete")

    app_ = FastAPI(
        title="Chat Relay",
        description="Relays chat completion requests to the upstream LLM API",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app_.state.config = app_config
    app_.state.header_policy = ResponseHeaderPolicy.from_config(app_config.relay)
    if http_client is not None:
        app_.state.http_client = http_client

    app_.include_router(health_check_router, tags=["Monitoring"])
    app_.include_router(metrics_router)
    # Catch-all; must stay last
    app_.include_router(relay_chat_router, tags=["Relay"])

    app_.add_exception_handler(RelayError, relay_error_handler)
    app_.add_exception_handler(StarletteHTTPException, routing_error_handler)

    app_.middleware("http")(add_process_time_header)
    app_.add_middleware(RequestIDMiddleware)
    app_.add_middleware(CORSHeadersMiddleware)
    return app_


app = create_app(config)

if __name__ == "__main__":
    if not config.upstream.api_key:
        logger.error("No upstream API key found in config.yml or OPENAI_API_KEY environment variable. Exiting.")
        sys.exit(1)

    host = config.server.host
    port = config.server.port

    logger.warning("Starting Chat Relay on %s:%s", host, port)
    logger.warning("Relay URL: http://%s:%s%s", host, port, config.server.route)
    logger.warning("Metrics: http://%s:%s/metrics", host, port)

    log_config = uvicorn.config.LOGGING_CONFIG
    http_log_level = config.server.http_log_level.upper()
    log_config["loggers"]["uvicorn.access"]["level"] = http_log_level

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_config=log_config,
        timeout_graceful_shutdown=30,
        server_header=False
    )
