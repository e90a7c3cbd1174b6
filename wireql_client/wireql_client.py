"""
WireQL Python SDK
Async client for the WireQL SQL service over HTTP or WebSocket, JSON or MessagePack
"""

import asyncio
import time
import types
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, Union

from ._logging import enable_debug_logging, logger
from .dsn_parser import DSNParser
from .events import ClientEvent, ClientObserver, EventEmitter, Handler, Subscription
from .exceptions import ValidationError, WireQLError
from .http_transport import HTTPTransport
from .metrics import RoundTrip, StatsTracker, assemble_result, failed_result
from .request_builder import RequestBuilder
from .streaming import RowStream
from .types import (
    BatchOptions,
    BatchQuery,
    ClientOptions,
    ConnectionStats,
    QueryOptions,
    QueryResult,
    RequestKind,
    SqlOperation,
    SqlResponse,
    SqlStep,
    StreamOptions,
    TransactionOptions,
)
from .validation import SchemaValidator
from .websocket_transport import WebSocketTransport

OptionsArg = Union[None, QueryOptions, Dict[str, Any]]


class WireQLClient:
    def __init__(
        self,
        config: Union[None, ClientOptions, Dict[str, Any]] = None,
        dsn: Optional[str] = None,
        **kwargs: Any,
    ):
        """
        Initialize WireQL client. No network I/O happens until a call is made.

        Args:
            config: ClientOptions or configuration dictionary
            dsn: DSN connection string (alternative to config)
            **kwargs: Configuration keys overriding ``config`` or the DSN
        """
        self.options = self._build_options(config, dsn, kwargs)
        if self.options.debug:
            enable_debug_logging()

        self.events = EventEmitter()
        self.stats = StatsTracker()
        self.request_builder = RequestBuilder(self.options)
        self.http = HTTPTransport(self.options)
        self.websocket = WebSocketTransport(self.options, self.events, self.stats)

        logger.debug(
            "WireQL client initialized for %s (format=%s)",
            self.options.http_base_url,
            self.options.serialization_format.value,
        )

    @staticmethod
    def _build_options(
        config: Union[None, ClientOptions, Dict[str, Any]],
        dsn: Optional[str],
        overrides: Dict[str, Any],
    ) -> ClientOptions:
        if isinstance(config, ClientOptions):
            return replace(config, **overrides) if overrides else config

        if dsn:
            try:
                data = DSNParser.to_config(DSNParser.parse(dsn))
            except ValueError as e:
                raise ValidationError("INVALID_CONFIG", f"Invalid DSN: {e}")
        elif config is None and not overrides:
            raise ValidationError("INVALID_CONFIG", "Either config or dsn must be provided")
        else:
            data = dict(config or {})

        data.update(overrides)
        return SchemaValidator.validate_client_options(data)

    # ============================================
    # Connection
    # ============================================

    async def connect(self) -> None:
        """Open the WebSocket channel"""
        await self.websocket.connect()

    async def disconnect(self) -> None:
        """Close the WebSocket channel without triggering a reconnect"""
        await self.websocket.disconnect()

    def is_connected(self) -> bool:
        return self.websocket.is_connected

    def get_stats(self) -> ConnectionStats:
        return self.stats.snapshot()

    async def ping(self) -> bool:
        """Round-trip a trivial query; False when it fails"""
        try:
            await self.query("SELECT 1 as ping")
            return True
        except WireQLError as e:
            logger.debug("Ping failed: %s", e)
            return False

    async def close(self) -> None:
        await self.disconnect()
        self.http.close()

    async def __aenter__(self) -> "WireQLClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[types.TracebackType],
    ) -> None:
        await self.close()

    # ============================================
    # Events
    # ============================================

    def on(self, event: ClientEvent, handler: Handler) -> Subscription:
        return self.events.on(event, handler)

    def once(self, event: ClientEvent, handler: Handler) -> Subscription:
        return self.events.once(event, handler)

    def off(self, event: ClientEvent, handler: Optional[Handler] = None) -> None:
        self.events.off(event, handler)

    def emit(self, event: ClientEvent, *args: Any) -> bool:
        return self.events.emit(event, *args)

    def subscribe(self, observer: ClientObserver) -> List[Subscription]:
        return self.events.subscribe(observer)

    # ============================================
    # Statements
    # ============================================

    async def query(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        """Execute a SQL query"""
        return await self._execute(SqlOperation.QUERY, sql, parameters, options)

    async def single(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        """Execute a query the server answers with at most one row"""
        return await self._execute(SqlOperation.SINGLE, sql, parameters, options)

    async def insert(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self._execute(SqlOperation.INSERT, sql, parameters, options)

    async def update(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self._execute(SqlOperation.UPDATE, sql, parameters, options)

    async def delete(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self._execute(SqlOperation.DELETE, sql, parameters, options)

    async def transaction(
        self,
        steps: Iterable[Union[SqlStep, Dict[str, Any]]],
        options: Union[None, TransactionOptions, Dict[str, Any]] = None,
    ) -> QueryResult:
        """Run all steps atomically in one round trip"""
        opts = TransactionOptions.coerce(options)
        request = self.request_builder.build_transaction(steps, opts)
        trip, total_time = await self._round_trip(
            request.to_dict(), RequestKind.TRANSACTION, opts
        )
        return assemble_result(trip, total_time, "Transaction failed")

    async def raw(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> SqlResponse:
        """Execute a query and return the server envelope even when success=False"""
        opts = QueryOptions.coerce(options)
        request = self.request_builder.build_request(SqlOperation.QUERY, sql, parameters, opts)
        trip, _ = await self._round_trip(request.to_dict(), RequestKind.SQL, opts)
        return trip.response

    # ============================================
    # Batch and streaming
    # ============================================

    async def batch(
        self,
        queries: Iterable[Union[BatchQuery, Dict[str, Any]]],
        batch_options: Union[None, BatchOptions, Dict[str, Any]] = None,
    ) -> List[QueryResult]:
        """
        Execute several queries, results in input order

        Without ``stop_on_error`` a failed query contributes a result with
        ``data=None``, zero metrics and the error message in ``raw``.
        """
        opts = BatchOptions.coerce(batch_options)
        items = [q if isinstance(q, BatchQuery) else BatchQuery(**q) for q in queries]

        if opts.parallel:
            calls = [
                self.query(item.sql, item.parameters, opts.merged_with(item.options))
                for item in items
            ]
            if opts.stop_on_error:
                return list(await asyncio.gather(*calls))
            outcomes = await asyncio.gather(*calls, return_exceptions=True)
            return [self._batch_outcome(outcome) for outcome in outcomes]

        results: List[QueryResult] = []
        for item in items:
            try:
                results.append(
                    await self.query(item.sql, item.parameters, opts.merged_with(item.options))
                )
            except WireQLError as e:
                if opts.stop_on_error:
                    raise
                results.append(failed_result(e.message))
        return results

    @staticmethod
    def _batch_outcome(outcome: Union[QueryResult, BaseException]) -> QueryResult:
        if isinstance(outcome, WireQLError):
            return failed_result(outcome.message)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def stream(
        self,
        sql: str,
        parameters: Optional[List[Any]] = None,
        options: Union[None, StreamOptions, Dict[str, Any]] = None,
    ) -> RowStream:
        """
        Run a query and iterate its rows with ``async for``

        The full result is fetched first; ``on_row`` and ``on_progress`` fire
        as each row is consumed.
        """
        opts = StreamOptions.coerce(options)
        result = await self.query(sql, parameters, opts)
        return RowStream(result.data, opts.on_row, opts.on_progress)

    # ============================================
    # Internals
    # ============================================

    async def _execute(
        self,
        op: SqlOperation,
        sql: str,
        parameters: Optional[List[Any]],
        options: OptionsArg,
    ) -> QueryResult:
        opts = QueryOptions.coerce(options)
        request = self.request_builder.build_request(op, sql, parameters, opts)
        trip, total_time = await self._round_trip(request.to_dict(), RequestKind.SQL, opts)
        return assemble_result(trip, total_time)

    async def _round_trip(
        self, payload: Dict[str, Any], kind: RequestKind, options: QueryOptions
    ) -> Tuple[RoundTrip, float]:
        """Send over exactly one transport and update the stats"""
        if options.use_websocket is None:
            via_websocket = self.websocket.is_connected
        else:
            via_websocket = options.use_websocket
        transport = self.websocket if via_websocket else self.http
        fmt = options.format or self.options.serialization_format
        timeout = options.timeout or self.options.timeout

        started = time.perf_counter()
        try:
            trip = await transport.send(payload, kind, fmt, timeout)
        except WireQLError as e:
            self.stats.record_error(e.message)
            raise
        total_time = (time.perf_counter() - started) * 1000

        self.stats.record_call(total_time, via_websocket=via_websocket)
        if not trip.response.success:
            self.stats.record_error(trip.response.error or "Unknown error")
        return trip, total_time
