"""Unit tests for response header policies."""

import httpx

from src.features.relay_chat.policy import ResponseHeaderPolicy
from src.shared.config import HeaderPolicy, RelayConfig

UPSTREAM = httpx.Headers({
    "Content-Type": "application/json",
    "Content-Length": "123",
    "Content-Encoding": "gzip",
    "Transfer-Encoding": "chunked",
    "Connection": "keep-alive",
    "X-RateLimit-Remaining-Tokens": "1500",
    "OpenAI-Processing-Ms": "87",
    "CF-Ray": "8a1b2c3d",
})


def test_forward_all_copies_everything_settable():
    policy = ResponseHeaderPolicy(HeaderPolicy.FORWARD_ALL)

    headers = policy.buffered_headers(UPSTREAM)

    assert headers == {
        "content-type": "application/json",
        "x-ratelimit-remaining-tokens": "1500",
        "openai-processing-ms": "87",
        "cf-ray": "8a1b2c3d",
    }


def test_allow_list_drops_unlisted_headers_and_pins_identity():
    policy = ResponseHeaderPolicy(HeaderPolicy.ALLOW_LIST)

    headers = policy.buffered_headers(UPSTREAM)

    assert headers == {
        "content-type": "application/json",
        "x-ratelimit-remaining-tokens": "1500",
        "openai-processing-ms": "87",
        "access-control-allow-origin": "*",
        "content-encoding": "identity",
        "cache-control": "no-cache, no-transform",
    }


def test_stream_headers_override_upstream_content_type():
    policy = ResponseHeaderPolicy(HeaderPolicy.FORWARD_ALL)

    headers = policy.stream_headers(httpx.Headers({"content-type": "text/event-stream"}))

    assert headers["content-type"] == "text/event-stream; charset=utf-8"
    assert headers["cache-control"] == "no-cache, no-transform"
    assert headers["connection"] == "keep-alive"
    assert "content-encoding" not in headers


def test_buffered_headers_default_content_type():
    policy = ResponseHeaderPolicy(HeaderPolicy.ALLOW_LIST)

    headers = policy.buffered_headers(httpx.Headers({"cf-ray": "x"}))

    assert headers["content-type"] == "application/json; charset=utf-8"


def test_error_headers_follow_compression_policy():
    assert ResponseHeaderPolicy(HeaderPolicy.FORWARD_ALL).error_headers() == {}
    assert ResponseHeaderPolicy(
        HeaderPolicy.FORWARD_ALL, force_identity_encoding=True
    ).error_headers()["content-encoding"] == "identity"


def test_upstream_request_headers_only_when_forcing_identity():
    assert ResponseHeaderPolicy(HeaderPolicy.ALLOW_LIST).upstream_request_headers() == {}
    policy = ResponseHeaderPolicy.from_config(
        RelayConfig(header_policy="forward_all", force_identity_encoding=True)
    )
    assert policy.upstream_request_headers() == {
        "Accept": "application/json",
        "Accept-Encoding": "identity",
    }
