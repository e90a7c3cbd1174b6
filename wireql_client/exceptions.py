"""WireQL SDK exception classes"""

from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .types import SqlResponse


class WireQLError(Exception):
    """Base class for all WireQL SDK errors"""

    def __init__(
        self, code: str, message: str, details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}


class ValidationError(WireQLError):
    """Invalid client configuration, DSN or request input"""
    pass


class TransportError(WireQLError):
    """Errors raised while opening or using the WebSocket channel"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CONNECTION_ERROR", message, details)


class NotConnectedError(TransportError):
    """The WebSocket path was requested while the socket is closed"""
    pass


class ConnectTimeoutError(TransportError):
    """The WebSocket did not open before the connect deadline"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "TIMEOUT_ERROR"


class CodecError(WireQLError):
    """A payload could not be encoded or decoded"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CODEC_ERROR", message, details)


class QueryError(WireQLError):
    """The server (or the transport) reported success=False"""

    def __init__(self, message: str, response: Optional["SqlResponse"] = None):
        super().__init__("QUERY_ERROR", message)
        self.response = response
