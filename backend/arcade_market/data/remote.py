"""
Remote executor: translates query specs into requests against a hosted
PostgREST endpoint (``<project>/rest/v1/<collection>``).

Service-level errors are raised as ``StorageError``; the "no rows" answer to
a single-row request is not an error and comes back as ``data=None``.
Transport failures (``httpx.HTTPError``) propagate unchanged.
"""

import logging
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

import httpx

from arcade_market.data.executor import Executor, Record
from arcade_market.data.filters import format_value, quote_value
from arcade_market.data.spec import QueryError, QuerySpec, Result, StorageError

logger = logging.getLogger(__name__)

SINGLE_OBJECT = "application/vnd.pgrst.object+json"
NO_ROWS_CODE = "PGRST116"
_ZERO_ROWS = re.compile(r"(?<!\d)0 rows")


def _jsonable(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def _operand(operator: str, value: Any) -> str:
    if operator == "eq" and value is None:
        return "is.null"
    if operator == "neq" and value is None:
        return "not.is.null"
    if operator == "ilike":
        return f"ilike.*{value}*"
    if operator == "in":
        return "in.(" + ",".join(quote_value(item) for item in value) + ")"
    return f"{operator}.{format_value(value)}"


def filter_params(spec: QuerySpec) -> List[Tuple[str, str]]:
    """Horizontal filters as PostgREST query parameters (repeatable keys)."""
    params = []
    for column, constraint in spec.filters:
        for operator, value in constraint.items():
            params.append((column, _operand(operator, value)))
    if spec.or_filter is not None:
        params.append(("or", f"({spec.or_filter})"))
    return params


def _count(response: httpx.Response) -> Optional[int]:
    content_range = response.headers.get("content-range")
    if not content_range or "/" not in content_range:
        return None
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


class RemoteExecutor(Executor):
    """Executor backed by the hosted relational service."""

    name = "remote"

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=f"{self.url}/rest/v1",
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    @staticmethod
    def _error(response: httpx.Response) -> QueryError:
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return QueryError(
                message=response.text or response.reason_phrase,
                code=str(response.status_code),
            )
        return QueryError(
            message=body.get("message") or response.reason_phrase,
            code=body.get("code"),
            details=body.get("details"),
            hint=body.get("hint"),
        )

    def _raise_for_status(self, response: httpx.Response) -> None:
        if response.is_error:
            raise StorageError(self._error(response))

    @staticmethod
    def _prefer(returning: Optional[str]) -> Dict[str, str]:
        return {"Prefer": "return=representation" if returning is not None else "return=minimal"}

    @staticmethod
    def _with_select(params: List[Tuple[str, str]], returning: Optional[str]) -> List[Tuple[str, str]]:
        if returning is not None:
            return [("select", returning)] + params
        return params

    async def query(self, spec: QuerySpec) -> Result:
        params = [("select", spec.columns)] + filter_params(spec)
        if spec.order is not None:
            direction = "asc" if spec.order.ascending else "desc"
            params.append(("order", f"{spec.order.column}.{direction}"))
        if spec.limit is not None:
            params.append(("limit", str(spec.limit)))

        headers = {}
        if spec.single:
            headers["Accept"] = SINGLE_OBJECT
        if spec.count:
            headers["Prefer"] = f"count={spec.count}"

        response = await self.client.get(f"/{spec.collection}", params=params, headers=headers)
        if response.is_error:
            error = self._error(response)
            if spec.single and error.code == NO_ROWS_CODE and _ZERO_ROWS.search(error.details or ""):
                return Result(data=None, count=_count(response))
            raise StorageError(error)
        return Result(data=response.json(), count=_count(response))

    async def insert(self, collection: str, records: List[Record], returning: Optional[str]) -> Result:
        if not records:
            return Result(data=[] if returning is not None else None)
        response = await self.client.post(
            f"/{collection}",
            params=self._with_select([], returning),
            json=_jsonable(records),
            headers=self._prefer(returning),
        )
        self._raise_for_status(response)
        return Result(data=response.json() if returning is not None else None)

    async def update(self, spec: QuerySpec, patch: Record, returning: Optional[str]) -> Result:
        if not spec.is_filtered:
            logger.warning(f"Unfiltered update on '{spec.collection}' affects every row")
        response = await self.client.patch(
            f"/{spec.collection}",
            params=self._with_select(filter_params(spec), returning),
            json=_jsonable(patch),
            headers=self._prefer(returning),
        )
        self._raise_for_status(response)
        return Result(data=response.json() if returning is not None else None)

    async def delete(self, spec: QuerySpec, returning: Optional[str]) -> Result:
        if not spec.is_filtered:
            logger.warning(f"Unfiltered delete on '{spec.collection}' affects every row")
        response = await self.client.delete(
            f"/{spec.collection}",
            params=self._with_select(filter_params(spec), returning),
            headers=self._prefer(returning),
        )
        self._raise_for_status(response)
        return Result(data=response.json() if returning is not None else None)

    async def replace(self, spec: QuerySpec, records: List[Record], returning: Optional[str]) -> Result:
        # REST has no multi-statement transaction; restore the old rows if the insert fails
        removed = await self.delete(spec, returning="*")
        try:
            return await self.insert(spec.collection, records, returning)
        except (StorageError, httpx.HTTPError) as exc:
            if removed.data:
                logger.error(
                    f"Replace on '{spec.collection}' failed ({exc}); "
                    f"restoring {len(removed.data)} deleted rows"
                )
                await self.insert(spec.collection, removed.data, None)
            raise
