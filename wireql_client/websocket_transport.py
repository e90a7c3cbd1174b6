"""
WebSocket transport for WireQL
A single persistent socket per client with requestId correlation,
keep-alive pings and exponential-backoff reconnects
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, NamedTuple, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from . import codec
from ._logging import logger
from .events import ClientEvent, EventEmitter
from .exceptions import CodecError, ConnectTimeoutError, NotConnectedError, TransportError
from .metrics import RoundTrip, StatsTracker
from .retry_logic import ReconnectStrategy
from .types import ClientOptions, RequestKind, SerializationFormat, SqlResponse

NORMAL_CLOSURE = 1000
PING_TIMEOUT_CLOSURE = 1011

Connector = Callable[..., Awaitable[Any]]


class _Reply(NamedTuple):
    response: SqlResponse
    size: int
    decode_time: float


class WebSocketTransport:
    def __init__(
        self,
        options: ClientOptions,
        events: EventEmitter,
        stats: StatsTracker,
        strategy: Optional[ReconnectStrategy] = None,
        connector: Optional[Connector] = None,
    ):
        """
        Args:
            options: Client configuration
            events: Emitter receiving lifecycle notifications
            stats: Shared connection statistics
            strategy: Reconnect backoff, built from ``options.websocket`` by default
            connector: Coroutine opening the socket, ``websockets.connect`` by default
        """
        self.options = options
        self.events = events
        self.stats = stats
        self.strategy = strategy or ReconnectStrategy(
            max_attempts=options.websocket.max_reconnect_attempts,
            max_delay=options.websocket.max_reconnect_delay,
        )
        self._connector: Connector = connector or websockets.connect

        self._ws: Any = None
        self._connected = False
        self._closing = False
        self._reconnect_attempts = 0
        self._request_counter = 0
        self._pending: Dict[str, "asyncio.Future[_Reply]"] = {}

        self._connect_lock: Optional[asyncio.Lock] = None
        self._reader_task: Optional["asyncio.Task[None]"] = None
        self._ping_task: Optional["asyncio.Task[None]"] = None
        self._reconnect_task: Optional["asyncio.Task[None]"] = None

    @property
    def url(self) -> str:
        return self.options.websocket_url

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def pending_requests(self) -> int:
        return len(self._pending)

    # ============================================
    # Connection lifecycle
    # ============================================

    async def connect(self) -> None:
        """Open the socket; a no-op when already connected"""
        self._closing = False
        await self._connect()

    async def _connect(self) -> None:
        if self._connected:
            logger.debug("WebSocket already connected")
            return

        if self._connect_lock is None:
            self._connect_lock = asyncio.Lock()
        async with self._connect_lock:
            if self._connected:
                return
            await self._open()

    async def _open(self) -> None:
        url = self.url
        timeout = self.options.timeout
        logger.debug("Connecting to %s", url)

        try:
            ws = await asyncio.wait_for(
                self._connector(url, ping_interval=None, open_timeout=timeout / 1000.0),
                timeout / 1000.0,
            )
        except asyncio.TimeoutError:
            error: TransportError = ConnectTimeoutError(
                f"WebSocket connection timed out after {timeout}ms", {"url": url}
            )
            self.stats.record_error(error.message)
            self.events.emit(ClientEvent.ERROR, error)
            raise error
        except (OSError, WebSocketException) as e:
            error = TransportError(f"WebSocket connection failed: {e}", {"url": url})
            logger.debug("WebSocket connection to %s failed: %s", url, e)
            self.stats.record_error(error.message)
            self.events.emit(ClientEvent.ERROR, error)
            raise error

        if self._closing:
            # disconnect() ran while the handshake was in flight
            await ws.close(code=NORMAL_CLOSURE, reason="Client disconnect")
            raise TransportError("WebSocket connect aborted by disconnect", {"url": url})

        self._ws = ws
        self._connected = True
        self._reconnect_attempts = 0
        self.stats.set_connected(True)
        self._cancel_reconnect()
        self._reader_task = asyncio.ensure_future(self._read_loop(ws))
        self._start_ping(ws)

        logger.info("WebSocket connected to %s", url)
        self.events.emit(ClientEvent.CONNECT)

    async def disconnect(self) -> None:
        """Close with a normal-closure code; never triggers a reconnect"""
        self._closing = True
        self._cancel_reconnect()
        self._stop_ping()

        ws = self._ws
        if ws is not None:
            await ws.close(code=NORMAL_CLOSURE, reason="Client disconnect")

        reader = self._reader_task
        self._reader_task = None
        if reader is not None and reader is not asyncio.current_task():
            await reader

        self._ws = None
        self._connected = False
        self.stats.set_connected(False)

    async def _read_loop(self, ws: Any) -> None:
        try:
            async for frame in ws:
                try:
                    self._handle_frame(frame)
                except Exception as e:
                    logger.exception("Failed to handle WebSocket frame")
                    self.events.emit(ClientEvent.ERROR, e)
        except ConnectionClosed as e:
            logger.debug("WebSocket connection closed: %s", e)
        self._handle_close(ws)

    def _handle_close(self, ws: Any) -> None:
        if ws is not self._ws:
            return

        self._ws = None
        self._connected = False
        self.stats.set_connected(False)
        self._stop_ping()

        code = ws.close_code
        reason = ws.close_reason or f"Code: {code}"
        logger.info("WebSocket closed: %s", reason)
        self.events.emit(ClientEvent.DISCONNECT, reason)

        if (
            self.options.websocket.auto_reconnect
            and not self._closing
            and code != NORMAL_CLOSURE
        ):
            self._schedule_reconnect()

    # ============================================
    # Reconnect
    # ============================================

    def _schedule_reconnect(self) -> None:
        self._cancel_reconnect()
        if self._closing:
            return

        delay = self.strategy.next_delay(self._reconnect_attempts)
        if delay is None:
            logger.warning(
                "Maximum reconnect attempts reached (%d), giving up",
                self.strategy.max_attempts,
            )
            return

        self._reconnect_attempts += 1
        self.stats.record_reconnection()
        logger.info(
            "Reconnecting in %dms (attempt %d)", delay, self._reconnect_attempts
        )
        self.events.emit(ClientEvent.RECONNECTING, self._reconnect_attempts, delay)
        self._reconnect_task = asyncio.ensure_future(self._reconnect_after(delay))

    async def _reconnect_after(self, delay: float) -> None:
        # The task stays registered until the attempt finishes so disconnect() can cancel it
        await asyncio.sleep(delay / 1000.0)
        try:
            await self._connect()
        except TransportError as e:
            logger.debug(
                "Reconnect attempt %d failed: %s", self._reconnect_attempts, e
            )
            self._schedule_reconnect()
            return

        if self._reconnect_task is asyncio.current_task():
            self._reconnect_task = None
        if self._connected:
            self.events.emit(ClientEvent.RECONNECTED)

    def _cancel_reconnect(self) -> None:
        task = self._reconnect_task
        self._reconnect_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    # ============================================
    # Keep-alive
    # ============================================

    def _start_ping(self, ws: Any) -> None:
        self._stop_ping()
        if self.options.websocket.ping_interval > 0:
            self._ping_task = asyncio.ensure_future(self._ping_loop(ws))

    def _stop_ping(self) -> None:
        task = self._ping_task
        self._ping_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _ping_loop(self, ws: Any) -> None:
        interval = self.options.websocket.ping_interval / 1000.0
        timeout = self.options.websocket.ping_timeout

        while ws is self._ws:
            await asyncio.sleep(interval)
            if ws is not self._ws:
                return

            self.events.emit(ClientEvent.PING)
            try:
                pong_waiter = await ws.ping()
                await asyncio.wait_for(pong_waiter, timeout / 1000.0)
            except asyncio.TimeoutError:
                logger.warning("No pong within %dms, closing WebSocket", timeout)
                asyncio.ensure_future(
                    ws.close(code=PING_TIMEOUT_CLOSURE, reason="Ping timeout")
                )
                return
            except ConnectionClosed:
                return
            self.events.emit(ClientEvent.PONG)

    # ============================================
    # Requests
    # ============================================

    def next_request_id(self, kind: RequestKind) -> str:
        self._request_counter += 1
        prefix = "txn" if kind == RequestKind.TRANSACTION else "req"
        return f"{prefix}_{self._request_counter}_{int(time.time() * 1000)}"

    async def send(
        self,
        payload: Dict[str, Any],
        kind: RequestKind,
        fmt: SerializationFormat,
        timeout: int,
    ) -> RoundTrip:
        """
        Send one envelope and wait for the reply carrying the same requestId

        Raises:
            NotConnectedError: If the socket is not open
        """
        ws = self._ws
        if ws is None or not self._connected:
            raise NotConnectedError("WebSocket not connected")

        request_id = self.next_request_id(kind)
        started = time.perf_counter()
        message = codec.encode({**payload, "requestId": request_id}, fmt)
        serialization_time = (time.perf_counter() - started) * 1000
        request_size = codec.payload_size(message)

        future: "asyncio.Future[_Reply]" = asyncio.get_running_loop().create_future()
        self._pending[request_id] = future
        try:
            await ws.send(message)
            reply = await asyncio.wait_for(future, timeout / 1000.0)
        except asyncio.TimeoutError:
            return RoundTrip(
                SqlResponse.failure(f"WebSocket request timed out after {timeout}ms"),
                request_size=request_size,
                serialization_time=serialization_time,
            )
        except ConnectionClosed as e:
            return RoundTrip(
                SqlResponse.failure(f"WebSocket closed: {e}"),
                request_size=request_size,
                serialization_time=serialization_time,
            )
        finally:
            self._pending.pop(request_id, None)

        return RoundTrip(
            reply.response,
            request_size=request_size,
            response_size=reply.size,
            serialization_time=serialization_time + reply.decode_time,
        )

    def _handle_frame(self, frame: codec.Encoded) -> None:
        started = time.perf_counter()
        try:
            message = codec.decode_frame(frame)
        except CodecError as e:
            logger.warning("Dropping undecodable WebSocket frame: %s", e)
            self.events.emit(ClientEvent.ERROR, e)
            return
        decode_time = (time.perf_counter() - started) * 1000

        self.events.emit(ClientEvent.MESSAGE, message)

        request_id = message.get("requestId")
        if not isinstance(request_id, str) or not request_id:
            return
        self.events.emit(ClientEvent.RESPONSE, message)

        future = self._pending.get(request_id)
        if future is None or future.done():
            return
        body = message.get("response", message)
        if isinstance(body, dict):
            response = SqlResponse.from_dict(body)
        else:
            response = SqlResponse.failure("Malformed WebSocket response")
        future.set_result(_Reply(response, codec.payload_size(frame), decode_time))
