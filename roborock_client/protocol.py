"""Request building and message parsing for miio JSON command bodies.

Request:   {"id": <int>, "method": <str>, "params": <list|object>}
Response:  {"id": <int>, "result": <any>}
           {"id": <int>, "error": {"code": <int>, "message": <str>}}
Event:     {"method": <str>, "params": <any>} (no id)
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .exceptions import RoborockError


class ProtocolError(RoborockError):
    """Raised when a message cannot be parsed."""


@dataclass(frozen=True)
class RoborockMessage:
    """A parsed miio JSON message."""

    id: int | None
    method: str | None
    params: Any
    result: Any
    error: dict[str, Any] | None
    raw: str  # original message text

    @property
    def is_response(self) -> bool:
        """Return True for replies to a request sent by this client."""
        return self.id is not None and self.method is None

    @property
    def error_code(self) -> int | None:
        """Return the device error code, if this is an error response."""
        if self.error is None:
            return None
        code = self.error.get("code")
        return code if isinstance(code, int) else None

    @property
    def error_message(self) -> str:
        """Return the device error message, if this is an error response."""
        if self.error is None:
            return ""
        return str(self.error.get("message", "unknown error"))


def parse_message(data: str | bytes) -> RoborockMessage:
    """Parse a raw text or binary WebSocket message into a RoborockMessage.

    Raises:
        ProtocolError: If the message is not a valid miio JSON body.
    """
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Invalid UTF-8 in message: {e}") from e

    try:
        body = json.loads(data)
    except ValueError as e:
        raise ProtocolError(f"Invalid JSON in message: {e}") from e

    if not isinstance(body, dict):
        raise ProtocolError(f"Message must be a JSON object, got {type(body).__name__}")

    message_id = body.get("id")
    if message_id is not None and (
        not isinstance(message_id, int) or isinstance(message_id, bool)
    ):
        raise ProtocolError(f"Invalid message id: {message_id!r}")

    method = body.get("method")
    if method is not None and not isinstance(method, str):
        raise ProtocolError(f"Invalid method: {method!r}")

    if "result" not in body and "error" not in body and method is None:
        raise ProtocolError("Message has neither result, error nor method")

    error = body.get("error")
    if error is not None and not isinstance(error, dict):
        error = {"message": str(error)}

    return RoborockMessage(
        id=message_id,
        method=method,
        params=body.get("params"),
        result=body.get("result"),
        error=error,
        raw=data,
    )


def build_request(
    request_id: int,
    method: str,
    params: Sequence[Any] | Mapping[str, Any] = (),
) -> str:
    """Build the JSON text of a command request.

    Raises:
        ValueError: If the method is empty or the id is not positive.
    """
    if not method:
        raise ValueError("Method cannot be empty")
    if request_id <= 0:
        raise ValueError(f"Request id must be positive, got {request_id}")

    if isinstance(params, Mapping):
        encoded_params: Any = dict(params)
    else:
        encoded_params = list(params)

    return json.dumps(
        {"id": request_id, "method": method, "params": encoded_params},
        separators=(",", ":"),
    )
