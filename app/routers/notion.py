"""Document-store endpoint: news, portfolio and project content from Notion."""

import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import APIRouter, Depends, Query, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import Settings, get_settings
from app.routers.cors import InvalidRequest, SERVER_ERROR, json_response, preflight_response
from app.services.news import get_news_item, list_news
from app.services.notion_client import NotionClient, NotionError
from app.services.portfolio import get_project_content, get_project_detail, list_projects

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@router.options("/notion-api", include_in_schema=False)
async def notion_preflight():
    return preflight_response()


@router.get("/notion-api", summary="Read news, portfolio and project content from Notion")
@limiter.limit("120/minute")
async def notion_api(
    request: Request,
    action: Optional[str] = Query(default=None, description="getNews, getPortfolio or getProject."),
    page_id: Optional[str] = Query(default=None, alias="id", description="Notion page id."),
    include_all: Optional[str] = Query(
        default=None, alias="all", description="'true' to list every project."
    ),
    settings: Settings = Depends(get_settings),
):
    """Dispatch *action* and return ``{<resultKey>: <value>}``.

    A page id that Notion does not know yields a ``null`` result with status
    200.  Upstream failures give a 500 with ``error`` and ``details``.
    """
    logger.info("Notion request received", extra={"action": action, "page_id": page_id})

    try:
        async with NotionClient(settings) as notion:
            result = await _dispatch(notion, settings, action, page_id, include_all == "true")
    except InvalidRequest as exc:
        logger.warning("Rejected Notion request: %s", exc)
        return json_response(exc.to_content(), status_code=400)
    except (httpx.HTTPError, NotionError) as exc:
        logger.error("Notion API error for action %s: %s", action, exc)
        return json_response({"error": SERVER_ERROR, "details": str(exc)}, status_code=500)

    return json_response(result)


async def _dispatch(
    notion: NotionClient,
    settings: Settings,
    action: Optional[str],
    page_id: Optional[str],
    include_all: bool,
) -> Dict[str, Any]:
    if action == "getNews":
        if page_id:
            item = await get_news_item(notion, page_id)
            return {"news": item.model_dump() if item else None}
        items = await list_news(notion, settings.notion_db_actualites)
        return {"news": [item.model_dump() for item in items]}

    if action == "getPortfolio":
        if page_id:
            detail = await get_project_detail(notion, page_id)
            return {"projects": detail.model_dump() if detail else None}
        projects = await list_projects(notion, settings.notion_db_portfolio, include_all)
        return {"projects": [project.model_dump() for project in projects]}

    if action == "getProject":
        if not page_id:
            raise InvalidRequest("Paramètre manquant: id")
        content = await get_project_content(notion, page_id)
        return {"project": content.model_dump() if content else None}

    raise InvalidRequest(f"Action inconnue: {action}")
