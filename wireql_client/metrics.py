"""
Result assembly and connection statistics
Every completed round trip goes through here before reaching the caller
"""

import time
from collections import deque
from dataclasses import dataclass, replace
from typing import Deque

from .exceptions import QueryError
from .types import ConnectionStats, PerformanceMetrics, QueryResult, SqlResponse

LATENCY_WINDOW = 100


@dataclass
class RoundTrip:
    """What a transport hands back for one request"""

    response: SqlResponse
    request_size: int = 0
    response_size: int = 0
    serialization_time: float = 0.0


class StatsTracker:
    """Owns the ConnectionStats of one client instance"""

    def __init__(self, window: int = LATENCY_WINDOW):
        self._stats = ConnectionStats(last_activity=time.time())
        self._latencies: Deque[float] = deque(maxlen=window)

    def snapshot(self) -> ConnectionStats:
        return replace(self._stats)

    def set_connected(self, connected: bool) -> None:
        self._stats.websocket_connected = connected

    def record_reconnection(self) -> None:
        self._stats.reconnections += 1

    def record_error(self, message: str) -> None:
        self._stats.last_error = message

    def record_call(self, latency: float, via_websocket: bool) -> None:
        if via_websocket:
            self._stats.websocket_messages += 1
        else:
            self._stats.http_requests += 1
        self._latencies.append(latency)
        self._stats.average_latency = sum(self._latencies) / len(self._latencies)
        self._stats.last_activity = time.time()


def build_metrics(total_time: float, trip: RoundTrip) -> PerformanceMetrics:
    return PerformanceMetrics(
        total_time=total_time,
        network_time=max(total_time - trip.serialization_time, 0.0),
        serialization_time=trip.serialization_time,
        request_size=trip.request_size,
        response_size=trip.response_size,
    )


def assemble_result(
    trip: RoundTrip, total_time: float, fallback_error: str = "Unknown error"
) -> QueryResult:
    """
    Wrap a round trip into a QueryResult

    Raises:
        QueryError: If the response reports success=False
    """
    response = trip.response
    if not response.success:
        raise QueryError(response.error or fallback_error, response)

    return QueryResult(
        data=response.data,
        metrics=build_metrics(total_time, trip),
        raw=response,
    )


def failed_result(message: str) -> QueryResult:
    """Stand-in result for a batch item that failed"""
    return QueryResult(
        data=None,
        metrics=PerformanceMetrics.empty(),
        raw=SqlResponse.failure(message),
    )
