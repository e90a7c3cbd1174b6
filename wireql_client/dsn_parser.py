"""
DSN Parser for WireQL
Parses connection strings in the format:
wireql://[apiKey[:token]@]host[:port][/database][?param1=value1&param2=value2]
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import SplitResult, parse_qsl, unquote, urlsplit

SCHEME = "wireql"
TRUE_VALUES = ("1", "true", "yes", "on")

WEBSOCKET_PARAMS = (
    ("maxReconnectAttempts", "max_reconnect_attempts"),
    ("maxReconnectDelay", "max_reconnect_delay"),
    ("pingInterval", "ping_interval"),
    ("pingTimeout", "ping_timeout"),
)


@dataclass
class ParsedDSN:
    """Parsed DSN components; credentials already resolved against the query string"""

    host: str
    port: Optional[int] = None
    database: Optional[str] = None
    api_key: Optional[str] = None
    token: Optional[str] = None
    params: Dict[str, str] = field(default_factory=dict)
    protocol: str = SCHEME


class DSNParser:
    """DSN Parser for WireQL connection strings"""

    @staticmethod
    def parse(dsn: str) -> ParsedDSN:
        """
        Parse a WireQL DSN string

        The user-info part carries ``apiKey:token``; ``apiKey`` and ``token``
        query parameters take precedence over it.

        Args:
            dsn: Connection string to parse

        Returns:
            ParsedDSN: Parsed DSN components

        Raises:
            ValueError: If DSN format is invalid
        """
        if not dsn or not isinstance(dsn, str):
            raise ValueError("DSN must be a non-empty string")

        parts = urlsplit(dsn)
        if parts.scheme.lower() != SCHEME:
            raise ValueError(f"Invalid protocol: {parts.scheme}. Expected '{SCHEME}'")
        if not parts.hostname:
            raise ValueError("Host is required in DSN")

        # Later duplicates of a key win
        params = dict(parse_qsl(parts.query))
        database = parts.path.strip("/") or None

        return ParsedDSN(
            protocol=parts.scheme.lower(),
            host=parts.hostname,
            port=_port_of(parts),
            database=database,
            api_key=params.get("apiKey") or _unquoted(parts.username),
            token=params.get("token") or _unquoted(parts.password),
            params=params,
        )

    @staticmethod
    def to_config(parsed: ParsedDSN) -> Dict[str, Any]:
        """Build a client configuration dict from parsed DSN components"""
        params = parsed.params
        config: Dict[str, Any] = {"host": parsed.host}

        for key, value in (
            ("port", parsed.port),
            ("default_database", parsed.database),
            ("api_key", parsed.api_key),
            ("token", parsed.token),
        ):
            if value:
                config[key] = value

        if "secure" in params:
            config["secure"] = _to_bool(params["secure"])
        if "format" in params:
            config["serialization_format"] = params["format"].lower()
        if "timeout" in params:
            config["timeout"] = _to_int(params, "timeout")
        if "debug" in params:
            config["debug"] = _to_bool(params["debug"])

        websocket: Dict[str, Any] = {}
        if "autoReconnect" in params:
            websocket["auto_reconnect"] = _to_bool(params["autoReconnect"])
        for param, key in WEBSOCKET_PARAMS:
            if param in params:
                websocket[key] = _to_int(params, param)
        if websocket:
            config["websocket"] = websocket

        return config


def _port_of(parts: SplitResult) -> Optional[int]:
    try:
        return parts.port
    except ValueError as e:
        raise ValueError(f"Invalid DSN format: {e}")


def _unquoted(value: Optional[str]) -> Optional[str]:
    return unquote(value) if value else None


def _to_bool(value: str) -> bool:
    return value.lower() in TRUE_VALUES


def _to_int(params: Dict[str, str], name: str) -> int:
    try:
        return int(params[name])
    except ValueError:
        raise ValueError(f"DSN parameter {name} must be an integer, got {params[name]!r}")
