"""WebSocket command channel for a local Roborock miio bridge."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

import websockets
import websockets.exceptions

from .const import (
    COMMAND_RESPONSE_TIMEOUT,
    DEFAULT_PATH,
    DEFAULT_PORT,
    HEARTBEAT_INTERVAL,
    RECONNECT_BACKOFF_FACTOR,
    RECONNECT_INITIAL_DELAY,
    RECONNECT_MAX_DELAY,
)
from .exceptions import RoborockCommandError, RoborockConnectionError
from .protocol import ProtocolError, RoborockMessage, build_request, parse_message

_LOGGER = logging.getLogger(__name__)


class CommandChannel(Protocol):
    """Anything that can execute a named miio command on the robot."""

    async def send_command(
        self,
        method: str,
        params: Sequence[Any] | Mapping[str, Any] = (),
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a command and return the device result."""


class WebSocketChannel:
    """Async WebSocket channel carrying miio JSON commands.

    Exactly one task reads the socket at any time: the start_listening()
    loop when it runs, otherwise a reader task started on demand by
    send_command(). Replies are matched to callers by request id, so
    overlapping commands are safe in both modes.

    Usage:
        channel = WebSocketChannel(host="192.168.1.100")
        await channel.connect()
        listener = asyncio.create_task(channel.start_listening())
        result = await channel.send_command("get_status")
        # ...later...
        await channel.disconnect()
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        path: str = DEFAULT_PATH,
        command_timeout: float = COMMAND_RESPONSE_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.path = path if path.startswith("/") else f"/{path}"
        self.url = f"ws://{host}:{port}{self.path}"
        self.command_timeout = command_timeout
        self.on_message: Callable[[RoborockMessage], None] | None = None

        self._ws: Any = None
        self._connected = asyncio.Event()
        self._listening = False
        self._reader_task: asyncio.Task[None] | None = None
        self._should_reconnect = True
        self._request_id = 0
        # In-flight requests awaiting a reply, keyed by request id
        self._pending: dict[int, asyncio.Future[RoborockMessage]] = {}

    @property
    def connected(self) -> bool:
        """Return True if the WebSocket is currently connected."""
        return self._ws is not None and self._connected.is_set()

    async def connect(self) -> None:
        """Open the bridge socket; keepalive pings are left to websockets.

        Raises:
            RoborockConnectionError: If the bridge cannot be reached.
        """
        try:
            self._ws = await websockets.connect(
                self.url,
                ping_interval=HEARTBEAT_INTERVAL,
                ping_timeout=COMMAND_RESPONSE_TIMEOUT,
            )
        except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
            raise RoborockConnectionError(f"Cannot reach bridge at {self.url}: {e}") from e
        self._connected.set()
        _LOGGER.info("Connected to Roborock bridge at %s", self.url)

    async def disconnect(self) -> None:
        """Stop reading, fail in-flight commands and close the socket."""
        self._should_reconnect = False
        self._connected.clear()
        await self._stop_reader()
        self._fail_pending(RoborockConnectionError("Disconnected from vacuum"))

        ws, self._ws = self._ws, None
        if ws is not None:
            await ws.close()
        _LOGGER.info("Disconnected from Roborock bridge")

    async def start_listening(self) -> None:
        """Run the message listener with auto-reconnect.

        Takes over from the on-demand reader, if one is running. This
        method runs until disconnect() is called.
        """
        self._should_reconnect = True
        retry_delay = RECONNECT_INITIAL_DELAY

        while self._should_reconnect:
            try:
                if not self.connected:
                    await self.connect()

                await self._stop_reader()
                self._listening = True
                retry_delay = RECONNECT_INITIAL_DELAY

                async for raw_message in self._ws:
                    self._handle_message(raw_message)

            except RoborockConnectionError as e:
                _LOGGER.warning("Connection failed: %s", e)
            except websockets.exceptions.ConnectionClosed as e:
                _LOGGER.warning("Connection closed: %s", e)
            except asyncio.CancelledError:
                _LOGGER.debug("Listener cancelled")
                raise
            except Exception:
                _LOGGER.exception("Unexpected error in listener")
            finally:
                self._listening = False
                self._connected.clear()
                self._fail_pending(RoborockConnectionError("Connection lost"))

            if not self._should_reconnect:
                break

            self._ws = None
            wait = retry_delay + random.uniform(0, 1)
            _LOGGER.info("Reconnecting in %.1fs...", wait)
            await asyncio.sleep(wait)
            retry_delay = min(
                retry_delay * RECONNECT_BACKOFF_FACTOR, RECONNECT_MAX_DELAY
            )

    def _ensure_reader(self) -> None:
        """Start the on-demand reader unless someone already reads."""
        if self._listening:
            return
        if self._reader_task is None or self._reader_task.done():
            self._reader_task = asyncio.get_running_loop().create_task(self._read_loop())

    async def _stop_reader(self) -> None:
        task, self._reader_task = self._reader_task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    async def _read_loop(self) -> None:
        """Dispatch incoming messages until the socket closes."""
        try:
            async for raw_message in self._ws:
                self._handle_message(raw_message)
            error = RoborockConnectionError("Connection closed by bridge")
        except websockets.exceptions.ConnectionClosed as e:
            error = RoborockConnectionError(f"Connection closed: {e}")
        except Exception as e:
            _LOGGER.exception("Unexpected error in reader")
            error = RoborockConnectionError(f"Reader failed: {e}")

        _LOGGER.debug("Reader stopped: %s", error)
        self._connected.clear()
        self._fail_pending(error)

    def _handle_message(self, data: str | bytes) -> None:
        """Parse a raw message and resolve its waiting command."""
        try:
            msg = parse_message(data)
        except ProtocolError as e:
            _LOGGER.debug("Dropping unparsable message: %s", e)
            return

        if msg.is_response:
            future = self._pending.get(msg.id)
            if future is not None and not future.done():
                future.set_result(msg)
            else:
                _LOGGER.debug("Dropping reply to unknown request %s", msg.id)
            return

        if self.on_message:
            self.on_message(msg)

    def _fail_pending(self, exc: Exception) -> None:
        for future in self._pending.values():
            if not future.done():
                future.set_exception(exc)
        self._pending.clear()

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def send_command(
        self,
        method: str,
        params: Sequence[Any] | Mapping[str, Any] = (),
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send a command and wait for its reply.

        Any number of commands may be in flight at once; each waits on
        the future registered under its own request id.

        Args:
            method: miio command name, e.g. "get_status".
            params: Command arguments.
            timeout: Seconds to wait for the reply (channel default if None).

        Returns:
            The "result" member of the device reply.

        Raises:
            RoborockConnectionError: If not connected or the connection
                drops before the reply arrives.
            RoborockCommandError: If the robot rejects the command or the
                reply times out.
        """
        if not self.connected:
            raise RoborockConnectionError("Not connected to vacuum")

        if timeout is None:
            timeout = self.command_timeout

        request_id = self._next_request_id()
        frame = build_request(request_id, method, params)
        future: asyncio.Future[RoborockMessage] = asyncio.get_running_loop().create_future()
        # Registered before sending: the reply may be read first
        self._pending[request_id] = future
        self._ensure_reader()

        try:
            await self._ws.send(frame)
            _LOGGER.debug("Sent command: %s (id=%d)", method, request_id)
            msg = await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            raise RoborockCommandError(
                f"No response for command '{method}' within {timeout}s",
                method=method,
            ) from None
        except websockets.exceptions.ConnectionClosed as e:
            raise RoborockConnectionError(f"Connection closed: {e}") from e
        finally:
            self._pending.pop(request_id, None)

        if msg.error is not None:
            raise RoborockCommandError(
                f"Command '{method}' failed: {msg.error_message}",
                method=method,
                code=msg.error_code,
            )

        _LOGGER.debug("Received reply to %s (id=%d)", method, request_id)
        return msg.result
