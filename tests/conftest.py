"""Shared fixtures: settings and in-memory Notion / Airtable APIs.

The stubs are served through :class:`httpx.MockTransport`, so the real
clients (URL building, headers, pagination) run unchanged without network
access.
"""

import asyncio
import functools
import json
from typing import Any, Dict, List, Tuple

import httpx
import pytest

from app.config import Settings, get_settings
from app.main import app
from app.routers import airtable as airtable_router
from app.routers import notion as notion_router
from app.services.airtable_client import AirtableClient
from app.services.notion_client import NotionClient

TEST_SETTINGS = Settings(
    notion_key="secret_test",
    notion_db_actualites="db-news",
    notion_db_portfolio="db-portfolio",
    airtable_token="pat_test",
    airtable_base_id="appTEST",
    airtable_table_clubs="tblClubs",
    airtable_table_produits="tblProduits",
    airtable_table_commandes="tblCommandes",
    airtable_table_lignes="tblLignes",
    airtable_table_demandes="tblDemandes",
)


class NotionStub:
    """In-memory Notion API.

    ``children`` and ``databases`` map an id to a list of *result pages*;
    each result page is the list of objects returned by one paginated call.
    """

    def __init__(self):
        self.pages: Dict[str, Dict[str, Any]] = {}
        self.children: Dict[str, List[List[Dict[str, Any]]]] = {}
        self.databases: Dict[str, List[List[Dict[str, Any]]]] = {}
        self.failures: Dict[str, Tuple[int, str]] = {}
        self.requests: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def run(self, call):
        """Run ``call(notion)`` against this stub and return its result."""

        async def main():
            async with NotionClient(TEST_SETTINGS, transport=self.transport()) as notion:
                return await call(notion)

        return asyncio.run(main())

    def calls_for(self, kind: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.split("/")[2] == kind]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # /v1/<kind>/<id>[/...]
        _, _, kind, object_id, *_ = request.url.path.split("/")
        if object_id in self.failures:
            status, message = self.failures[object_id]
            return httpx.Response(status, json={"object": "error", "status": status, "message": message})

        if kind == "pages":
            page = self.pages.get(object_id)
            if page is None:
                return httpx.Response(
                    404,
                    json={
                        "object": "error",
                        "status": 404,
                        "code": "object_not_found",
                        "message": f"Could not find page with ID: {object_id}.",
                    },
                )
            return httpx.Response(200, json=page)
        if kind == "blocks":
            cursor = request.url.params.get("start_cursor")
            return self._result_page(self.children.get(object_id, []), object_id, cursor)
        if kind == "databases":
            cursor = json.loads(request.content).get("start_cursor")
            return self._result_page(self.databases.get(object_id, []), object_id, cursor)
        return httpx.Response(400, json={"object": "error", "message": "unexpected request"})

    @staticmethod
    def _result_page(pages, object_id: str, cursor) -> httpx.Response:
        index = int(cursor.rsplit(":", 1)[1]) if cursor else 0
        results = pages[index] if index < len(pages) else []
        has_more = index + 1 < len(pages)
        return httpx.Response(
            200,
            json={
                "object": "list",
                "results": results,
                "has_more": has_more,
                "next_cursor": f"{object_id}:{index + 1}" if has_more else None,
            },
        )


class AirtableStub:
    """In-memory Airtable base: ``tables`` maps a table id to pages of records."""

    def __init__(self):
        self.tables: Dict[str, List[List[Dict[str, Any]]]] = {}
        self.created: List[Tuple[str, Dict[str, Any]]] = []
        self.failures: Dict[str, Tuple[int, str]] = {}
        self.requests: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    def run(self, call):
        async def main():
            async with AirtableClient(TEST_SETTINGS, transport=self.transport()) as airtable:
                return await call(airtable)

        return asyncio.run(main())

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        # /v0/<base>/<table>
        table = request.url.path.rsplit("/", 1)[1]
        if table in self.failures:
            status, text = self.failures[table]
            return httpx.Response(status, text=text)

        if request.method == "POST":
            fields = json.loads(request.content)["fields"]
            self.created.append((table, fields))
            return httpx.Response(200, json={"id": f"rec{len(self.created)}", "fields": fields})

        pages = self.tables.get(table, [])
        offset = request.url.params.get("offset")
        index = int(offset) if offset else 0
        body: Dict[str, Any] = {"records": pages[index] if index < len(pages) else []}
        if index + 1 < len(pages):
            body["offset"] = str(index + 1)
        return httpx.Response(200, json=body)


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def notion_stub() -> NotionStub:
    return NotionStub()


@pytest.fixture
def airtable_stub() -> AirtableStub:
    return AirtableStub()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Clear the slowapi in-memory counters before every test."""
    notion_router.limiter._storage.reset()
    airtable_router.limiter._storage.reset()
    yield


@pytest.fixture
def api_app(monkeypatch, notion_stub, airtable_stub):
    """The FastAPI app wired to the test settings and the in-memory upstream APIs."""
    monkeypatch.setattr(
        notion_router, "NotionClient", functools.partial(NotionClient, transport=notion_stub.transport())
    )
    monkeypatch.setattr(
        airtable_router,
        "AirtableClient",
        functools.partial(AirtableClient, transport=airtable_stub.transport()),
    )
    app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    yield app
    app.dependency_overrides.clear()
