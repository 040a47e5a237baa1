"""Thin async client for the Notion REST API (pages, block children, database queries)."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from app.config import Settings

logger = logging.getLogger(__name__)

PAGE_SIZE = 100  # maximum page size accepted by Notion

# Status codes for which an ``error`` object means "no such page".
_NOT_FOUND_STATUSES = {400, 404}


class NotionError(RuntimeError):
    """Raised when Notion answers with a non-success response."""


class NotionClient:
    """Request-scoped Notion client.

    Use as an async context manager so the underlying connection pool is
    closed when the request is done::

        async with NotionClient(settings) as notion:
            page = await notion.get_page(page_id)
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._http = httpx.AsyncClient(
            base_url=settings.notion_api_url,
            headers={
                "Authorization": f"Bearer {settings.notion_key}",
                "Notion-Version": settings.notion_version,
                "Content-Type": "application/json",
            },
            timeout=settings.http_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self._http.aclose()

    async def get_page(self, page_id: str) -> Optional[Dict[str, Any]]:
        """Return the page object for *page_id*, or ``None`` when Notion reports it missing."""
        response = await self._http.get(f"/pages/{page_id}")
        data = _read_json(response)
        if data.get("object") == "error" and (
            response.status_code in _NOT_FOUND_STATUSES or response.is_success
        ):
            logger.info("Notion page not found: %s (%s)", page_id, data.get("code", ""))
            return None
        _raise_for_error(response, data)
        return data

    async def list_block_children(self, block_id: str) -> List[Dict[str, Any]]:
        """Return every direct child of *block_id*, following the pagination cursor."""
        results: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"page_size": PAGE_SIZE}
            if cursor:
                params["start_cursor"] = cursor
            response = await self._http.get(f"/blocks/{block_id}/children", params=params)
            data = _read_json(response)
            _raise_for_error(response, data)
            results.extend(data.get("results") or [])
            cursor = _next_cursor(data)
            if cursor is None:
                return results

    async def query_database(
        self, database_id: str, query: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Run *query* (filter / sorts) against *database_id* and return all matching pages."""
        results: List[Dict[str, Any]] = []
        cursor: Optional[str] = None
        while True:
            body: Dict[str, Any] = {**(query or {}), "page_size": PAGE_SIZE}
            if cursor:
                body["start_cursor"] = cursor
            response = await self._http.post(f"/databases/{database_id}/query", json=body)
            data = _read_json(response)
            _raise_for_error(response, data)
            results.extend(data.get("results") or [])
            cursor = _next_cursor(data)
            if cursor is None:
                return results


def _next_cursor(data: Dict[str, Any]) -> Optional[str]:
    """Return the cursor of the next page, or ``None`` once ``has_more`` is false."""
    if not data.get("has_more"):
        return None
    cursor = data.get("next_cursor")
    if not cursor:
        raise NotionError("Notion reported has_more without a next_cursor.")
    return cursor


def _raise_for_error(response: httpx.Response, data: Dict[str, Any]) -> None:
    if response.is_success and data.get("object") != "error":
        return
    message = data.get("message") or response.reason_phrase
    raise NotionError(f"Notion API error {response.status_code}: {message}")


def _read_json(response: httpx.Response) -> Dict[str, Any]:
    try:
        return response.json()
    except ValueError:
        raise NotionError(
            f"Notion API error {response.status_code}: response body is not JSON."
        ) from None
