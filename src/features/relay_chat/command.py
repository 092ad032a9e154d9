import json
import math
from typing import Any

from pydantic import BaseModel

from src.shared.errors import BadRequestError


def is_truthy(value: Any) -> bool:
    """Truthiness as browser clients expect it: only null, false, 0 and "" are false."""
    if value is None or value is False:
        return False
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value != 0
    if isinstance(value, str):
        return value != ""
    return True


def _parse_finite(text: str) -> float:
    value = float(text)
    if math.isinf(value):
        raise ValueError(f"{text} is out of range")
    return value


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


class RelayCommand(BaseModel):
    """A chat completion request as received from the client.

    The payload is kept as parsed so it can be forwarded without any
    field being added, dropped or coerced.
    """
    payload: Any
    stream: bool = False

    @classmethod
    def from_body(cls, body: bytes) -> "RelayCommand":
        if not body:
            return cls(payload={}, stream=False)
        try:
            payload = json.loads(
                body.decode("utf-8"), parse_float=_parse_finite, parse_constant=_reject_constant
            )
        except (UnicodeDecodeError, ValueError) as e:
            raise BadRequestError() from e

        stream = is_truthy(payload.get("stream")) if isinstance(payload, dict) else False
        return cls(payload=payload, stream=stream)
