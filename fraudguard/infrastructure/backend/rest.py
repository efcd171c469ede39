"""PostgREST HTTP client for the hosted fraud-case backend"""

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import httpx

from fraudguard.config import settings
from fraudguard.domain.exceptions import (
    BackendUnavailableError,
    BackendValidationError,
    ConflictError,
    DataAccessError,
    UnknownBackendError,
)
from fraudguard.infrastructure.backend.base import EQ, GTE, IN, NOT_NULL, DataAccess, Query
from fraudguard.infrastructure.observability.metrics import backend_failure_counter

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
RESERVED_CHARS = set(',()"')


def encode_value(value: Any) -> str:
    """Render a filter operand the way PostgREST expects it"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        value = value.value
    return str(value)


def _encode_list_item(value: Any) -> str:
    text = encode_value(value)
    if RESERVED_CHARS.intersection(text):
        text = '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return text


def build_params(query: Query) -> List[Tuple[str, str]]:
    params = [("select", ",".join(query.columns))]
    for op, column, value in query.filters:
        if op == EQ:
            params.append((column, f"eq.{encode_value(value)}"))
        elif op == IN:
            params.append((column, f"in.({','.join(_encode_list_item(v) for v in value)})"))
        elif op == GTE:
            params.append((column, f"gte.{encode_value(value)}"))
        elif op == NOT_NULL:
            params.append((column, "not.is.null"))
        else:
            raise ValueError(f"Unsupported filter operator: {op}")
    return params


def classify_error(response: httpx.Response, table: str) -> DataAccessError:
    """Map an error response to a tagged DataAccessError"""
    try:
        body = response.json()
    except ValueError:
        body = {}
    code = body.get("code") if isinstance(body, dict) else None
    message = body.get("message") if isinstance(body, dict) else None
    detail = f"{table}: HTTP {response.status_code} {message or response.text[:200]}"

    if response.status_code == 409 or code == UNIQUE_VIOLATION:
        return ConflictError(detail, table=table)
    if response.status_code >= 500:
        return BackendUnavailableError(detail, table=table)
    if response.status_code in (400, 422):
        return BackendValidationError(detail, table=table)
    return UnknownBackendError(detail, table=table)


class RestBackend(DataAccess):
    """Client for the backend's PostgREST endpoint (/rest/v1/{table})"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.backend_url).rstrip("/")
        self.api_key = api_key or settings.backend_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/rest/v1",
            timeout=self.timeout,
            transport=self.transport,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
            },
        )

    async def _send(self, table: str, method: str, **kwargs) -> Any:
        async with self._client() as client:
            try:
                response = await client.request(method, f"/{table}", **kwargs)
            except httpx.TimeoutException as e:
                backend_failure_counter.labels(kind="network").inc()
                raise BackendUnavailableError(
                    f"{table}: backend timeout after {self.timeout}s", table=table
                ) from e
            except httpx.RequestError as e:
                backend_failure_counter.labels(kind="network").inc()
                raise BackendUnavailableError(f"{table}: {e}", table=table) from e

            if response.is_error:
                error = classify_error(response, table)
                backend_failure_counter.labels(kind=error.kind).inc()
                logger.warning(
                    "Backend request failed",
                    extra={"table": table, "method": method, "kind": error.kind, "status": response.status_code},
                )
                raise error

            if not response.content:
                return []
            try:
                return response.json()
            except ValueError as e:
                raise BackendValidationError(f"{table}: response is not JSON", table=table) from e

    async def select(self, query: Query) -> List[Dict[str, Any]]:
        if query.matches_nothing:
            return []
        rows = await self._send(query.table, "GET", params=build_params(query))
        if not isinstance(rows, list):
            raise BackendValidationError(f"{query.table}: expected a list of rows", table=query.table)
        return rows

    async def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        rows = await self._send(
            table,
            "POST",
            json=record,
            headers={"Prefer": "return=representation"},
        )
        if isinstance(rows, list):
            return rows[0] if rows else dict(record)
        return rows

    async def delete(self, table: str, column: str, value: Any) -> int:
        rows = await self._send(
            table,
            "DELETE",
            params=[(column, f"eq.{encode_value(value)}")],
            headers={"Prefer": "return=representation"},
        )
        return len(rows) if isinstance(rows, list) else 0
