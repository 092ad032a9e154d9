#!/usr/bin/env python3
"""
Metrics definitions for the chat relay.
"""

import prometheus_client

RELAYED_REQUESTS = prometheus_client.Counter(
    'relay_requests_total', 'Chat completion requests relayed upstream', ['mode', 'status']
)
UPSTREAM_FAILURES = prometheus_client.Counter(
    'relay_upstream_failures_total', 'Upstream calls that ended in a bad gateway response'
)
STREAMED_CHUNKS = prometheus_client.Counter(
    'relay_streamed_chunks_total', 'Body chunks relayed in streaming mode'
)
RELAYED_BYTES = prometheus_client.Counter(
    'relay_response_bytes_total', 'Response body bytes relayed to clients', ['mode']
)
