"""Shared fixtures: a fake upstream behind httpx.MockTransport and relay apps wired to it."""

import asyncio
from collections.abc import AsyncIterator, Callable
from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from main import create_app
from src.shared.config import AppConfig, HeaderPolicy, RelayConfig, UpstreamConfig

UPSTREAM_URL = "https://upstream.test/v1/chat/completions"
API_KEY = "sk-test-0123456789abcdef"


class FakeUpstream:
    """Records every upstream request and answers with a configurable responder."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={"id": "chatcmpl-1", "object": "chat.completion"}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


def make_config(
    api_key: str = API_KEY,
    header_policy: HeaderPolicy = HeaderPolicy.FORWARD_ALL,
    force_identity_encoding: bool = False,
    **upstream: Any,
) -> AppConfig:
    return AppConfig(
        upstream=UpstreamConfig(url=UPSTREAM_URL, api_key=api_key, **upstream),
        relay=RelayConfig(
            header_policy=header_policy,
            force_identity_encoding=force_identity_encoding,
        ),
    )


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
async def upstream_http_client(fake_upstream: FakeUpstream) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_upstream)) as http_client:
        yield http_client


@pytest.fixture
def build_app(upstream_http_client: httpx.AsyncClient) -> Callable[..., FastAPI]:
    """Factory building a relay app around the fake upstream."""

    def _build(**config_kwargs: Any) -> FastAPI:
        return create_app(make_config(**config_kwargs), http_client=upstream_http_client)

    return _build


@pytest.fixture
def client_for() -> Callable[[FastAPI], httpx.AsyncClient]:
    """Wraps an app in an in-process httpx client."""

    def _client(app: FastAPI) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://relay")

    return _client


async def drive_asgi(
    app: FastAPI,
    method: str,
    path: str = "/api/chat",
    body: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
    messages: list[dict[str, Any]] | None = None,
) -> tuple[dict[str, Any], list[bytes]]:
    """Runs one request through the ASGI app and captures every body message.

    Returns the ``http.response.start`` message and the non-empty body chunks
    in the order the app sent them. Pass ``messages`` to keep what was sent
    when the app raises part way through a response.
    """
    messages = [] if messages is None else messages
    response_done = asyncio.Event()
    request_sent = False

    async def receive() -> dict[str, Any]:
        nonlocal request_sent
        if not request_sent:
            request_sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        await response_done.wait()
        return {"type": "http.disconnect"}

    async def send(message: dict[str, Any]) -> None:
        messages.append(message)
        if message["type"] == "http.response.body" and not message.get("more_body", False):
            response_done.set()

    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": headers or [(b"host", b"relay"), (b"content-type", b"application/json")],
        "client": ("127.0.0.1", 50000),
        "server": ("relay", 80),
    }
    await app(scope, receive, send)

    start = next(m for m in messages if m["type"] == "http.response.start")
    chunks = [
        m["body"] for m in messages if m["type"] == "http.response.body" and m.get("body")
    ]
    return start, chunks
