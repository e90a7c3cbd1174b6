"""
HTTP transport for WireQL
One POST per call; the blocking requests session runs in the loop's executor
"""

import asyncio
import functools
import time
from typing import Any, Dict, Optional

import requests  # type: ignore[import-untyped]

from . import codec
from ._logging import logger
from .exceptions import CodecError
from .metrics import RoundTrip
from .types import ApiResponse, ClientOptions, RequestKind, SerializationFormat, SqlResponse

USER_AGENT = "WireQL-PythonSDK/1.0.0"

ENDPOINTS = {
    (RequestKind.SQL, SerializationFormat.JSON): "/api/sql",
    (RequestKind.SQL, SerializationFormat.MSGPACK): "/api/sql/msgpack",
    (RequestKind.TRANSACTION, SerializationFormat.JSON): "/api/transaction",
    (RequestKind.TRANSACTION, SerializationFormat.MSGPACK): "/api/transaction/msgpack",
}

CONTENT_TYPES = {
    SerializationFormat.JSON: "application/json",
    SerializationFormat.MSGPACK: "application/octet-stream",
}


class HTTPTransport:
    """Sends envelopes with ``requests`` and returns failure envelopes instead of raising"""

    def __init__(self, options: ClientOptions):
        self.options = options
        self._session: Optional[requests.Session] = None

    @property
    def session(self) -> requests.Session:
        # Created on first use so building a client never touches the network stack
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def build_url(self, kind: RequestKind, fmt: SerializationFormat) -> str:
        return f"{self.options.http_base_url}{ENDPOINTS[(kind, fmt)]}"

    def build_headers(self, fmt: SerializationFormat) -> Dict[str, str]:
        headers = dict(self.options.headers)
        headers["User-Agent"] = USER_AGENT
        headers["Content-Type"] = CONTENT_TYPES[fmt]
        return headers

    async def send(
        self,
        payload: Dict[str, Any],
        kind: RequestKind,
        fmt: SerializationFormat,
        timeout: int,
    ) -> RoundTrip:
        """
        POST one envelope and unwrap the API response

        Args:
            payload: Envelope as produced by ``to_dict()``
            kind: Single statement or transaction endpoint
            fmt: Body encoding
            timeout: Deadline in milliseconds
        """
        url = self.build_url(kind, fmt)

        started = time.perf_counter()
        body = codec.encode(payload, fmt)
        serialization_time = (time.perf_counter() - started) * 1000
        request_size = codec.payload_size(body)

        logger.debug("POST %s (%d bytes)", url, request_size)
        loop = asyncio.get_running_loop()
        post = functools.partial(
            self.session.post,
            url,
            data=body.encode("utf-8") if isinstance(body, str) else body,
            headers=self.build_headers(fmt),
            timeout=timeout / 1000.0,
        )

        try:
            response = await asyncio.wait_for(
                loop.run_in_executor(None, post), timeout / 1000.0
            )
        except (asyncio.TimeoutError, requests.Timeout):
            return RoundTrip(
                SqlResponse.failure(f"Request timed out after {timeout}ms"),
                request_size=request_size,
                serialization_time=serialization_time,
            )
        except requests.RequestException as e:
            logger.debug("HTTP request to %s failed: %s", url, e)
            return RoundTrip(
                SqlResponse.failure(str(e)),
                request_size=request_size,
                serialization_time=serialization_time,
            )

        if not response.ok:
            return RoundTrip(
                SqlResponse.failure(f"HTTP {response.status_code}: {response.reason}"),
                request_size=request_size,
                serialization_time=serialization_time,
            )

        content = response.content
        started = time.perf_counter()
        try:
            api_response = ApiResponse.from_dict(codec.decode(content, fmt))
        except CodecError as e:
            return RoundTrip(
                SqlResponse.failure(str(e)),
                request_size=request_size,
                response_size=len(content),
                serialization_time=serialization_time,
            )
        serialization_time += (time.perf_counter() - started) * 1000

        return RoundTrip(
            api_response.unwrap(),
            request_size=request_size,
            response_size=len(content),
            serialization_time=serialization_time,
        )

    def close(self) -> None:
        if self._session is not None:
            self._session.close()
            self._session = None
