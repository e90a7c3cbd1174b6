"""
Lifecycle notifications for the WireQL client
Handlers are registered per ClientEvent and called in registration order
"""

from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ._logging import logger

Handler = Callable[..., Any]


class ClientEvent(str, Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    ERROR = "error"
    RECONNECTING = "reconnecting"
    RECONNECTED = "reconnected"
    MESSAGE = "message"
    RESPONSE = "response"
    PING = "ping"
    PONG = "pong"


class Subscription:
    """Handle returned by ``on``/``once``; ``cancel()`` deregisters it"""

    def __init__(self, emitter: "EventEmitter", event: ClientEvent, handler: Handler, once: bool):
        self.emitter = emitter
        self.event = event
        self.handler = handler
        self.once = once
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self.emitter._remove(self)


class ClientObserver:
    """Typed observer; override the callbacks you care about"""

    def on_connect(self) -> None:
        pass

    def on_disconnect(self, reason: str) -> None:
        pass

    def on_error(self, error: Exception) -> None:
        pass

    def on_reconnecting(self, attempt: int, delay: float) -> None:
        pass

    def on_reconnected(self) -> None:
        pass

    def on_message(self, message: Dict[str, Any]) -> None:
        pass

    def on_response(self, message: Dict[str, Any]) -> None:
        pass

    def on_ping(self) -> None:
        pass

    def on_pong(self) -> None:
        pass


class EventEmitter:
    def __init__(self):
        self._subscriptions: Dict[ClientEvent, List[Subscription]] = {}

    def on(self, event: ClientEvent, handler: Handler) -> Subscription:
        return self._add(ClientEvent(event), handler, once=False)

    def once(self, event: ClientEvent, handler: Handler) -> Subscription:
        return self._add(ClientEvent(event), handler, once=True)

    def off(self, event: ClientEvent, handler: Optional[Handler] = None) -> None:
        """Remove ``handler`` from ``event``, or every handler when omitted"""
        for sub in list(self._subscriptions.get(ClientEvent(event), [])):
            if handler is None or sub.handler == handler:
                self._remove(sub)

    def subscribe(self, observer: ClientObserver) -> List[Subscription]:
        """Attach every callback of a ClientObserver"""
        return [
            self.on(event, getattr(observer, f"on_{event.value}"))
            for event in ClientEvent
        ]

    def emit(self, event: ClientEvent, *args: Any) -> bool:
        """Call the handlers of ``event``; returns False when there were none"""
        event = ClientEvent(event)
        subs = list(self._subscriptions.get(event, []))
        for sub in subs:
            if sub.once:
                self._remove(sub)
            try:
                sub.handler(*args)
            except Exception:
                logger.exception("Handler for %r event failed", event.value)
        return bool(subs)

    def listener_count(self, event: ClientEvent) -> int:
        return len(self._subscriptions.get(ClientEvent(event), []))

    def _add(self, event: ClientEvent, handler: Handler, once: bool) -> Subscription:
        sub = Subscription(self, event, handler, once)
        self._subscriptions.setdefault(event, []).append(sub)
        return sub

    def _remove(self, sub: Subscription) -> None:
        sub.active = False
        subs = self._subscriptions.get(sub.event, [])
        if sub in subs:
            subs.remove(sub)
