"""Test doubles shared by the Roborock client tests."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable, Mapping, Sequence
from typing import Any

# --- Sample status payloads ---

LEGACY_STATUS = {"msg_ver": 2, "state": 8, "battery": 100, "fan_power": 60}
GEN3_STATUS = {"msg_ver": 3, "state": 8, "battery": 100, "fan_power": 102}


class FakeChannel:
    """Command channel that records calls and replays canned results."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any, float | None]] = []
        self.results: dict[str, Any] = {}
        self.errors: dict[str, Exception] = {}

    async def send_command(
        self,
        method: str,
        params: Sequence[Any] | Mapping[str, Any] = (),
        *,
        timeout: float | None = None,
    ) -> Any:
        self.calls.append((method, params, timeout))
        if method in self.errors:
            raise self.errors[method]
        return self.results.get(method, ["ok"])

    @property
    def methods(self) -> list[str]:
        return [method for method, _, _ in self.calls]


# Replies to one request: (delay in seconds, message text or None to close)
Replies = list[tuple[float, "str | None"]]


class FakeWebSocket:
    """Minimal stand-in for a websockets connection.

    Incoming messages are queued; None ends iteration like a closed socket.
    Must be used inside a single event loop.
    """

    def __init__(
        self,
        reply: Callable[[dict[str, Any]], Replies] | None = None,
        incoming: Sequence[str | None] = (),
    ) -> None:
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self._reply = reply
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        for text in incoming:
            self._queue.put_nowait(text)

    async def send(self, frame: str) -> None:
        request = json.loads(frame)
        self.sent.append(request)
        if self._reply:
            loop = asyncio.get_running_loop()
            for delay, text in self._reply(request):
                loop.call_later(delay, self._queue.put_nowait, text)

    def push(self, text: str | None) -> None:
        self._queue.put_nowait(text)

    def __aiter__(self) -> FakeWebSocket:
        return self

    async def __anext__(self) -> str:
        text = await self._queue.get()
        if text is None:
            raise StopAsyncIteration
        return text

    async def close(self) -> None:
        self.closed = True
        self._queue.put_nowait(None)


def attach_socket(channel: Any, ws: FakeWebSocket) -> None:
    """Mark a WebSocketChannel as connected through ws."""
    channel._ws = ws
    channel._connected.set()


def reply_ok(request: dict[str, Any]) -> Replies:
    return [(0.0, json.dumps({"id": request["id"], "result": ["ok"]}))]


def reply_method(request: dict[str, Any]) -> Replies:
    """Answer every request with its own method name."""
    return [(0.0, json.dumps({"id": request["id"], "result": [request["method"]]}))]
