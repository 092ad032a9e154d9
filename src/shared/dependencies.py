#!/usr/bin/env python3
"""
Dependency provider functions for the application.
"""

from fastapi import Depends, Request
import httpx

from src.shared.config import AppConfig
from src.features.relay_chat.client import UpstreamClient
from src.features.relay_chat.policy import ResponseHeaderPolicy

def get_app_config(request: Request) -> AppConfig:
    """Returns the configuration the application was created with."""
    return request.app.state.config

def get_http_client(request: Request) -> httpx.AsyncClient:
    """Returns the shared httpx.AsyncClient instance."""
    return request.app.state.http_client

def get_header_policy(request: Request) -> ResponseHeaderPolicy:
    """Returns the shared ResponseHeaderPolicy instance."""
    return request.app.state.header_policy

def get_upstream_client(
    http_client: httpx.AsyncClient = Depends(get_http_client),
    app_config: AppConfig = Depends(get_app_config),
    policy: ResponseHeaderPolicy = Depends(get_header_policy),
) -> UpstreamClient:
    return UpstreamClient(http_client, app_config.upstream, policy)
