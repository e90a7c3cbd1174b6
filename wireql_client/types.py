"""
WireQL data model
Request/response envelopes exchanged with the server plus client-side options
"""

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union

O = TypeVar("O", bound="QueryOptions")


class SqlOperation(str, Enum):
    QUERY = "query"
    UPDATE = "update"
    INSERT = "insert"
    DELETE = "delete"
    SINGLE = "single"
    TRANSACTION = "transaction"


class SerializationFormat(str, Enum):
    JSON = "json"
    MSGPACK = "msgpack"


class RequestKind(str, Enum):
    """Selects the endpoint family: single statement or transaction"""

    SQL = "sql"
    TRANSACTION = "transaction"


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


@dataclass
class AuthInfo:
    api_key: Optional[str] = None
    token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"api_key": self.api_key, "token": self.token})

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthInfo":
        return cls(api_key=data.get("api_key"), token=data.get("token"))


# ============================================
# Configuration
# ============================================


@dataclass
class WebSocketOptions:
    auto_reconnect: bool = True
    max_reconnect_delay: int = 30000
    max_reconnect_attempts: int = 10
    ping_interval: int = 30000
    ping_timeout: int = 5000


@dataclass
class ClientOptions:
    host: str
    port: int = 8080
    secure: bool = False
    api_key: Optional[str] = None
    token: Optional[str] = None
    default_database: Optional[str] = None
    serialization_format: SerializationFormat = SerializationFormat.MSGPACK
    timeout: int = 30000
    websocket: WebSocketOptions = field(default_factory=WebSocketOptions)
    headers: Dict[str, str] = field(default_factory=dict)
    debug: bool = False

    def __post_init__(self):
        if isinstance(self.websocket, dict):
            self.websocket = WebSocketOptions(**self.websocket)
        self.serialization_format = SerializationFormat(self.serialization_format)

    @property
    def http_base_url(self) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.host}:{self.port}"

    @property
    def websocket_url(self) -> str:
        scheme = "wss" if self.secure else "ws"
        return f"{scheme}://{self.host}:{self.port}/ws"


# ============================================
# Per-call options
# ============================================


@dataclass
class QueryOptions:
    database: Optional[str] = None
    auth: Optional[AuthInfo] = None
    timeout: Optional[int] = None
    format: Optional[SerializationFormat] = None
    use_websocket: Optional[bool] = None

    def __post_init__(self):
        if isinstance(self.auth, dict):
            self.auth = AuthInfo.from_dict(self.auth)
        if self.format is not None:
            self.format = SerializationFormat(self.format)

    @classmethod
    def coerce(cls: Type[O], value: Union[None, "QueryOptions", Dict[str, Any]]) -> O:
        """Build options from None, a dict, or another options instance"""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, QueryOptions):
            value = {f.name: getattr(value, f.name) for f in fields(value)}
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in value.items() if k in names})

    def merged_with(self, override: Optional["QueryOptions"]) -> "QueryOptions":
        """Per-call fields from ``override`` win over the ones set here"""
        base = {f.name: getattr(self, f.name) for f in fields(QueryOptions)}
        if override is not None:
            for name in base:
                value = getattr(override, name)
                if value is not None:
                    base[name] = value
        return QueryOptions(**base)


@dataclass
class TransactionOptions(QueryOptions):
    transaction_id: Optional[str] = None


@dataclass
class BatchOptions(QueryOptions):
    parallel: bool = False
    stop_on_error: bool = False


@dataclass
class StreamOptions(QueryOptions):
    on_row: Optional[Callable[[Dict[str, Any]], None]] = None
    on_progress: Optional[Callable[[int, Optional[int]], None]] = None


@dataclass
class BatchQuery:
    sql: str
    parameters: Optional[List[Any]] = None
    options: Optional[QueryOptions] = None

    def __post_init__(self):
        if self.parameters is None:
            self.parameters = []
        if isinstance(self.options, dict):
            self.options = QueryOptions.coerce(self.options)


# ============================================
# Envelopes
# ============================================


@dataclass
class SqlRequest:
    op: SqlOperation
    query: str
    values: List[Any] = field(default_factory=list)
    transaction_id: Optional[str] = None
    database: Optional[str] = None
    auth: Optional[AuthInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "op": SqlOperation(self.op).value,
                "query": self.query,
                "values": list(self.values),
                "transaction_id": self.transaction_id,
                "database": self.database,
                "auth": self.auth.to_dict() if self.auth else None,
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SqlRequest":
        auth = data.get("auth")
        return cls(
            op=SqlOperation(data["op"]),
            query=data["query"],
            values=list(data.get("values") or []),
            transaction_id=data.get("transaction_id"),
            database=data.get("database"),
            auth=AuthInfo.from_dict(auth) if auth else None,
        )


@dataclass
class SqlStep:
    op: SqlOperation
    query: str
    values: List[Any] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "op": SqlOperation(self.op).value,
            "query": self.query,
            "values": list(self.values),
        }


@dataclass
class TransactionRequest:
    steps: List[SqlStep]
    transaction_id: Optional[str] = None
    database: Optional[str] = None
    auth: Optional[AuthInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "steps": [step.to_dict() for step in self.steps],
                "transaction_id": self.transaction_id,
                "database": self.database,
                "auth": self.auth.to_dict() if self.auth else None,
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransactionRequest":
        auth = data.get("auth")
        return cls(
            steps=[
                SqlStep(SqlOperation(s["op"]), s["query"], list(s.get("values") or []))
                for s in data["steps"]
            ],
            transaction_id=data.get("transaction_id"),
            database=data.get("database"),
            auth=AuthInfo.from_dict(auth) if auth else None,
        )


@dataclass
class SqlResponse:
    success: bool
    data: Optional[List[Dict[str, Any]]] = None
    rows_affected: Optional[int] = None
    last_insert_id: Optional[int] = None
    transaction_id: Optional[str] = None
    error: Optional[str] = None
    execution_time: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "success": self.success,
                "data": self.data,
                "rows_affected": self.rows_affected,
                "last_insert_id": self.last_insert_id,
                "transaction_id": self.transaction_id,
                "error": self.error,
                "execution_time": self.execution_time,
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SqlResponse":
        return cls(
            success=bool(data.get("success", False)),
            data=data.get("data"),
            rows_affected=data.get("rows_affected"),
            last_insert_id=data.get("last_insert_id"),
            transaction_id=data.get("transaction_id"),
            error=data.get("error"),
            execution_time=data.get("execution_time"),
        )

    @classmethod
    def failure(cls, error: Optional[str]) -> "SqlResponse":
        return cls(success=False, error=error)


@dataclass
class ApiResponse:
    """Outer ``{success, data, error}`` envelope of the HTTP API"""

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApiResponse":
        return cls(
            success=bool(data.get("success", False)),
            data=data.get("data"),
            error=data.get("error"),
        )

    def unwrap(self) -> SqlResponse:
        if self.data is None:
            return SqlResponse.failure(self.error)
        if not isinstance(self.data, dict):
            return SqlResponse.failure("Malformed API response")
        return SqlResponse.from_dict(self.data)


# ============================================
# Results and statistics
# ============================================


@dataclass
class PerformanceMetrics:
    total_time: float
    network_time: float
    serialization_time: float
    request_size: int
    response_size: int

    @classmethod
    def empty(cls) -> "PerformanceMetrics":
        return cls(0.0, 0.0, 0.0, 0, 0)


@dataclass
class QueryResult:
    data: Optional[List[Dict[str, Any]]]
    metrics: PerformanceMetrics
    raw: SqlResponse


@dataclass
class ConnectionStats:
    websocket_connected: bool = False
    http_requests: int = 0
    websocket_messages: int = 0
    reconnections: int = 0
    average_latency: float = 0.0
    last_error: Optional[str] = None
    last_activity: float = 0.0
