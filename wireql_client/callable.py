"""
Callable facade: ``await wireql(sql, params)`` runs a query, every other
client method is available under its own name
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from .events import ClientEvent, Handler, Subscription
from .streaming import RowStream
from .types import (
    BatchOptions,
    BatchQuery,
    ClientOptions,
    ConnectionStats,
    QueryResult,
    SqlResponse,
    SqlStep,
    StreamOptions,
    TransactionOptions,
)
from .wireql_client import OptionsArg, WireQLClient


class WireQL:
    def __init__(self, client: WireQLClient):
        self.client = client

    async def __call__(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self.client.query(sql, parameters, options)

    async def query(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self.client.query(sql, parameters, options)

    async def single(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self.client.single(sql, parameters, options)

    async def insert(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self.client.insert(sql, parameters, options)

    async def update(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self.client.update(sql, parameters, options)

    async def delete(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> QueryResult:
        return await self.client.delete(sql, parameters, options)

    async def transaction(
        self,
        steps: Iterable[Union[SqlStep, Dict[str, Any]]],
        options: Union[None, TransactionOptions, Dict[str, Any]] = None,
    ) -> QueryResult:
        return await self.client.transaction(steps, options)

    async def batch(
        self,
        queries: Iterable[Union[BatchQuery, Dict[str, Any]]],
        batch_options: Union[None, BatchOptions, Dict[str, Any]] = None,
    ) -> List[QueryResult]:
        return await self.client.batch(queries, batch_options)

    async def stream(
        self,
        sql: str,
        parameters: Optional[List[Any]] = None,
        options: Union[None, StreamOptions, Dict[str, Any]] = None,
    ) -> RowStream:
        return await self.client.stream(sql, parameters, options)

    async def raw(
        self, sql: str, parameters: Optional[List[Any]] = None, options: OptionsArg = None
    ) -> SqlResponse:
        return await self.client.raw(sql, parameters, options)

    async def connect(self) -> None:
        await self.client.connect()

    async def disconnect(self) -> None:
        await self.client.disconnect()

    async def ping(self) -> bool:
        return await self.client.ping()

    def is_connected(self) -> bool:
        return self.client.is_connected()

    def get_stats(self) -> ConnectionStats:
        return self.client.get_stats()

    def on(self, event: ClientEvent, handler: Handler) -> Subscription:
        return self.client.on(event, handler)

    def once(self, event: ClientEvent, handler: Handler) -> Subscription:
        return self.client.once(event, handler)

    def off(self, event: ClientEvent, handler: Optional[Handler] = None) -> None:
        self.client.off(event, handler)

    def emit(self, event: ClientEvent, *args: Any) -> bool:
        return self.client.emit(event, *args)


def create_client(
    config: Union[None, ClientOptions, Dict[str, Any]] = None,
    dsn: Optional[str] = None,
    **kwargs: Any,
) -> WireQL:
    """Create a callable WireQL instance"""
    return WireQL(WireQLClient(config, dsn, **kwargs))


create_wireql = create_client
create_callable_wireql = create_client
