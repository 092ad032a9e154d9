"""
Header sets shared by the relay and its middleware.
"""

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Headers": "*",
}

STREAM_HEADERS = {
    "Content-Type": "text/event-stream; charset=utf-8",
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
}

# Forced onto relay responses when the compression-safe policy is active.
IDENTITY_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Content-Encoding": "identity",
    "Cache-Control": "no-cache, no-transform",
}

DEFAULT_CONTENT_TYPE = "application/json; charset=utf-8"

# Diagnostic and rate-limit headers relayed under the allow-list policy.
ALLOWED_UPSTREAM_HEADERS = frozenset({
    "x-ratelimit-limit-requests",
    "x-ratelimit-limit-tokens",
    "x-ratelimit-remaining-requests",
    "x-ratelimit-remaining-tokens",
    "x-ratelimit-reset-requests",
    "x-ratelimit-reset-tokens",
    "retry-after",
    "openai-model",
    "openai-processing-ms",
    "openai-version",
    "content-type",
})

# Never copied from upstream: hop-by-hop headers, plus the framing headers
# that no longer describe the body once httpx has decoded it.
UNFORWARDABLE_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
    "content-length",
    "content-encoding",
})
