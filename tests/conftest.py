"""
Pytest configuration for WireQL Python SDK tests
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

import pytest  # type: ignore

_CLOSED = object()


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection"""

    def __init__(self) -> None:
        self.sent: List[Any] = []
        self.close_code: Optional[int] = None
        self.close_reason = ""
        self.ping_count = 0
        self.on_send: Optional[Callable[[Any], None]] = None
        self._incoming: "asyncio.Queue[Any]" = asyncio.Queue()

    def sent_messages(self) -> List[Dict[str, Any]]:
        return [json.loads(m) for m in self.sent if isinstance(m, str)]

    def feed(self, frame: Any) -> None:
        self._incoming.put_nowait(frame)

    def reply(self, request_id: str, response: Dict[str, Any]) -> None:
        self.feed(json.dumps({"requestId": request_id, "response": response}))

    def drop(self, code: int = 1006, reason: str = "") -> None:
        """Simulate the server going away"""
        self.close_code = code
        self.close_reason = reason
        self._incoming.put_nowait(_CLOSED)

    async def send(self, message: Any) -> None:
        self.sent.append(message)
        if self.on_send:
            self.on_send(message)

    async def ping(self) -> "asyncio.Future[float]":
        self.ping_count += 1
        pong: "asyncio.Future[float]" = asyncio.get_running_loop().create_future()
        pong.set_result(0.0)
        return pong

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.close_code is None:
            self.close_code = code
            self.close_reason = reason
            self._incoming.put_nowait(_CLOSED)

    def __aiter__(self) -> "FakeWebSocket":
        return self

    async def __anext__(self) -> Any:
        frame = await self._incoming.get()
        if frame is _CLOSED:
            raise StopAsyncIteration
        return frame


class FakeConnector:
    """Hands out FakeWebSocket connections, raises while ``fail`` is set and waits on ``gate`` when given"""

    def __init__(self) -> None:
        self.sockets: List[FakeWebSocket] = []
        self.calls: List[str] = []
        self.fail = False
        self.gate: Optional[asyncio.Event] = None

    @property
    def socket(self) -> FakeWebSocket:
        return self.sockets[-1]

    async def __call__(self, url: str, **kwargs: Any) -> FakeWebSocket:
        self.calls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise ConnectionRefusedError("Connection refused")
        ws = FakeWebSocket()
        self.sockets.append(ws)
        return ws


async def wait_for_condition(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture  # type: ignore
def client_config() -> Dict[str, Any]:
    return {
        "host": "localhost",
        "port": 8080,
        "api_key": "test-key",
        "default_database": "test_db",
        "serialization_format": "json",
    }


@pytest.fixture  # type: ignore
def connector() -> FakeConnector:
    return FakeConnector()
