from __future__ import annotations

import logging
from typing import Any, Protocol

import httpx

from ..models.import_file import InputKind

"""Persistence API client.

The backend turns each submitted sheet into a table of a data source. The
first submission of a session creates the data source and returns its id;
later submissions pass that id to attach to it.

Request payload::

    {file_id, data: {columns: [{title, key, column_name, type}], rows: [...]},
     data_source_name, project_id, data_source_id | None,
     sheet_info: {sheet_id, sheet_name, file_name, sheet_index}}

Response: ``{"result": {"data_source_id": ...}}``
"""

logger = logging.getLogger(__name__)

__all__ = [
    "PersistenceError",
    "PersistenceClient",
    "HttpPersistenceClient",
    "extract_data_source_id",
    "ENDPOINTS",
]

ENDPOINTS: dict[InputKind, str] = {
    InputKind.WORKSHEET: "/data-source/add-excel-data-source",
    InputKind.CSV: "/data-source/add-excel-data-source",
    InputKind.PDF: "/data-source/add-pdf-data-source",
}


class PersistenceError(Exception):
    """Raised when a submission fails or the response lacks a data source id."""


class PersistenceClient(Protocol):
    async def submit(self, payload: dict[str, Any], *, kind: InputKind) -> dict[str, Any]:
        ...


def extract_data_source_id(response: Any) -> int | str:
    try:
        data_source_id = response["result"]["data_source_id"]
    except (KeyError, TypeError) as e:
        raise PersistenceError(f"response has no result.data_source_id: {response!r}") from e
    if data_source_id is None:
        raise PersistenceError("response data_source_id is null")
    return data_source_id


class HttpPersistenceClient:
    """httpx based client for the data source endpoints."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.base_url = base_url
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> HttpPersistenceClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def submit(self, payload: dict[str, Any], *, kind: InputKind) -> dict[str, Any]:
        path = ENDPOINTS[kind]
        try:
            response = await self.client.post(path, json=payload)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"submission rejected ({path}): HTTP {e.response.status_code}")
            raise PersistenceError(f"HTTP {e.response.status_code} from {path}") from e
        except httpx.HTTPError as e:
            logger.error(f"submission failed ({path}): {e}")
            raise PersistenceError(f"request to {path} failed: {e}") from e
