"""
WireQL Python SDK

A raw SQL client for WireQL over HTTP or WebSocket, with JSON or
MessagePack payloads.
"""

from .wireql_client import WireQLClient
from .callable import WireQL, create_client, create_wireql, create_callable_wireql
from .events import ClientEvent, ClientObserver, EventEmitter, Subscription
from .streaming import RowStream
from .validation import SchemaValidator
from .types import (
    SqlOperation,
    SerializationFormat,
    AuthInfo,
    WebSocketOptions,
    ClientOptions,
    QueryOptions,
    TransactionOptions,
    BatchOptions,
    StreamOptions,
    BatchQuery,
    SqlRequest,
    SqlStep,
    TransactionRequest,
    SqlResponse,
    ApiResponse,
    PerformanceMetrics,
    QueryResult,
    ConnectionStats,
)
from .exceptions import (
    WireQLError,
    ValidationError,
    TransportError,
    NotConnectedError,
    ConnectTimeoutError,
    CodecError,
    QueryError,
)

__version__ = "1.0.0"
__author__ = "WireQL Team"
__license__ = "Apache-2.0"

__all__ = [
    "WireQLClient",
    "WireQL",
    "create_client",
    "create_wireql",
    "create_callable_wireql",
    "ClientEvent",
    "ClientObserver",
    "EventEmitter",
    "Subscription",
    "RowStream",
    "SchemaValidator",
    # Data model
    "SqlOperation",
    "SerializationFormat",
    "AuthInfo",
    "WebSocketOptions",
    "ClientOptions",
    "QueryOptions",
    "TransactionOptions",
    "BatchOptions",
    "StreamOptions",
    "BatchQuery",
    "SqlRequest",
    "SqlStep",
    "TransactionRequest",
    "SqlResponse",
    "ApiResponse",
    "PerformanceMetrics",
    "QueryResult",
    "ConnectionStats",
    # Errors
    "WireQLError",
    "ValidationError",
    "TransportError",
    "NotConnectedError",
    "ConnectTimeoutError",
    "CodecError",
    "QueryError",
]
