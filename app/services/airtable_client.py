"""Thin async client for the Airtable REST API."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)


class AirtableError(RuntimeError):
    """Raised when Airtable answers with a non-success response."""


class AirtableClient:
    """Request-scoped client bound to one Airtable base.

    Use as an async context manager so the connection pool is closed when
    the request is done.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._http = httpx.AsyncClient(
            base_url=f"{settings.airtable_api_url.rstrip('/')}/{settings.airtable_base_id}",
            headers={
                "Authorization": f"Bearer {settings.airtable_token}",
                "Content-Type": "application/json",
            },
            timeout=settings.http_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "AirtableClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self._http.aclose()

    async def list_records(self, table: str) -> List[Dict[str, Any]]:
        """Return every record of *table*, following Airtable's ``offset`` pagination."""
        records: List[Dict[str, Any]] = []
        params: Dict[str, Any] = {}
        while True:
            response = await self._http.get(f"/{table}", params=params)
            data = _read_json(response)
            records.extend(data.get("records") or [])
            offset = data.get("offset")
            if not offset:
                return records
            params = {"offset": offset}

    async def create_record(self, table: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create one record in *table* and return it (including its new ``id``)."""
        response = await self._http.post(f"/{table}", json={"fields": fields})
        record = _read_json(response)
        logger.info("Airtable record created", extra={"table": table, "record_id": record.get("id")})
        return record


def _read_json(response: httpx.Response) -> Dict[str, Any]:
    if not response.is_success:
        raise AirtableError(f"Airtable error: {response.text}")
    try:
        return response.json()
    except ValueError:
        raise AirtableError("Airtable error: response body is not JSON.") from None
