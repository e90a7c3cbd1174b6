"""
Request builder
Maps high-level calls onto SqlRequest / TransactionRequest envelopes
"""

from typing import Any, Dict, Iterable, List, Optional, Union

from .types import (
    AuthInfo,
    ClientOptions,
    QueryOptions,
    SqlOperation,
    SqlRequest,
    SqlStep,
    TransactionOptions,
    TransactionRequest,
)
from .validation import SchemaValidator


class RequestBuilder:
    """Resolves per-call options against the client defaults.

    Parameters are passed through untouched; the server binds them.
    """

    def __init__(self, options: ClientOptions):
        self.options = options

    def default_auth(self) -> Optional[AuthInfo]:
        if self.options.api_key or self.options.token:
            return AuthInfo(
                api_key=self.options.api_key or "",
                token=self.options.token or "",
            )
        return None

    def resolve_database(self, options: QueryOptions) -> Optional[str]:
        return options.database or self.options.default_database

    def resolve_auth(self, options: QueryOptions) -> Optional[AuthInfo]:
        return options.auth or self.default_auth()

    def build_request(
        self,
        op: SqlOperation,
        sql: str,
        parameters: Optional[List[Any]] = None,
        options: Optional[QueryOptions] = None,
    ) -> SqlRequest:
        options = options or QueryOptions()
        return SqlRequest(
            op=op,
            query=sql,
            values=list(parameters or []),
            database=self.resolve_database(options),
            auth=self.resolve_auth(options),
        )

    def build_transaction(
        self,
        steps: Iterable[Union[SqlStep, Dict[str, Any]]],
        options: Optional[TransactionOptions] = None,
    ) -> TransactionRequest:
        options = options or TransactionOptions()
        return TransactionRequest(
            steps=SchemaValidator.validate_steps(steps),
            transaction_id=options.transaction_id,
            database=self.resolve_database(options),
            auth=self.resolve_auth(options),
        )
