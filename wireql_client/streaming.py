"""
Result streaming for the WireQL Python SDK

The server has no incremental delivery yet: ``stream()`` runs one ordinary
query and RowStream iterates over the rows it already holds.
"""

from typing import Any, AsyncIterator, Callable, Dict, List, Optional


class RowStream:
    """Async iterator over materialized rows; it cannot be restarted"""

    def __init__(
        self,
        rows: Optional[List[Dict[str, Any]]],
        on_row: Optional[Callable[[Dict[str, Any]], None]] = None,
        on_progress: Optional[Callable[[int, Optional[int]], None]] = None,
    ):
        self.rows = rows or []
        self.on_row = on_row
        self.on_progress = on_progress
        self.processed = 0

    @property
    def total(self) -> int:
        return len(self.rows)

    def __aiter__(self) -> AsyncIterator[Dict[str, Any]]:
        return self

    async def __anext__(self) -> Dict[str, Any]:
        if self.processed >= len(self.rows):
            raise StopAsyncIteration

        row = self.rows[self.processed]
        self.processed += 1

        if self.on_row:
            self.on_row(row)
        if self.on_progress:
            self.on_progress(self.processed, len(self.rows))
        return row

    async def fetchall(self) -> List[Dict[str, Any]]:
        """Consume the remaining rows"""
        return [row async for row in self]

    def close(self) -> None:
        """Stop the stream; later iteration yields nothing"""
        self.processed = len(self.rows)
