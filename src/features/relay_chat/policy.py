# src/features/relay_chat/policy.py
from typing import Dict, Mapping

import httpx

from src.shared.config import HeaderPolicy, RelayConfig
from src.shared.constants import (
    ALLOWED_UPSTREAM_HEADERS,
    DEFAULT_CONTENT_TYPE,
    IDENTITY_HEADERS,
    STREAM_HEADERS,
    UNFORWARDABLE_HEADERS,
)


class ResponseHeaderPolicy:
    """Decides which headers a relayed response carries.

    ``forward_all`` copies every upstream header that can still be set on the
    downstream response. ``allow_list`` copies only the rate-limit and
    diagnostic headers. When the policy is ``allow_list`` or identity encoding
    is forced, the response is additionally pinned to an uncompressed,
    non-transformable body so that clients never try to decode a coding they
    do not support.
    """

    def __init__(self, mode: HeaderPolicy, force_identity_encoding: bool = False):
        self.mode = HeaderPolicy(mode)
        self.force_identity_encoding = force_identity_encoding

    @classmethod
    def from_config(cls, relay_config: RelayConfig) -> "ResponseHeaderPolicy":
        return cls(relay_config.header_policy, relay_config.force_identity_encoding)

    @property
    def compression_safe(self) -> bool:
        return self.force_identity_encoding or self.mode is HeaderPolicy.ALLOW_LIST

    def upstream_request_headers(self) -> Dict[str, str]:
        """Extra headers sent upstream to ask for an uncompressed JSON body."""
        if not self.force_identity_encoding:
            return {}
        return {"Accept": "application/json", "Accept-Encoding": "identity"}

    def _copy(self, upstream_headers: httpx.Headers) -> Dict[str, str]:
        copied = {}
        for name, value in upstream_headers.items():
            name = name.lower()
            if self.mode is HeaderPolicy.ALLOW_LIST:
                if name not in ALLOWED_UPSTREAM_HEADERS:
                    continue
            elif name in UNFORWARDABLE_HEADERS:
                continue
            copied[name] = value
        return copied

    def _pin(self, headers: Dict[str, str]) -> Dict[str, str]:
        if self.compression_safe:
            headers.update(_lowered(IDENTITY_HEADERS))
        return headers

    def buffered_headers(self, upstream_headers: httpx.Headers) -> Dict[str, str]:
        headers = self._copy(upstream_headers)
        headers.setdefault("content-type", DEFAULT_CONTENT_TYPE)
        return self._pin(headers)

    def stream_headers(self, upstream_headers: httpx.Headers) -> Dict[str, str]:
        headers = self._copy(upstream_headers)
        headers.update(_lowered(STREAM_HEADERS))
        return self._pin(headers)

    def error_headers(self) -> Dict[str, str]:
        return self._pin({})


def _lowered(headers: Mapping[str, str]) -> Dict[str, str]:
    return {name.lower(): value for name, value in headers.items()}
