"""Portfolio projects read from the Notion portfolio database."""

from typing import Any, Dict, List, Optional

from app.models.project import ProjectContent, ProjectDetail, ProjectSummary
from app.services.content_tree import fetch_content
from app.services.normalizer import split_list
from app.services.notion_client import NotionClient
from app.services.properties import get_prop

_BY_YEAR = [{"property": "Année", "direction": "descending"}]
_FEATURED_FILTER = {"property": "Mis_en_avant", "checkbox": {"equals": True}}


def _page_to_detail(page: Dict[str, Any]) -> ProjectDetail:
    return ProjectDetail(
        id=page["id"],
        nom=get_prop(page, "Nom", "title"),
        club=get_prop(page, "Club", "rich_text"),
        annee=get_prop(page, "Année", "rich_text"),
        image=get_prop(page, "Image_Cover", "url"),
        description=get_prop(page, "Description", "rich_text"),
        galerie=split_list(get_prop(page, "Images_Galerie", "rich_text")),
    )


def _page_to_summary(page: Dict[str, Any]) -> ProjectSummary:
    return ProjectSummary(
        id=page["id"],
        nom=get_prop(page, "Nom", "title"),
        club=get_prop(page, "Club", "rich_text"),
        annee=get_prop(page, "Année", "rich_text"),
        image=get_prop(page, "Image_Cover", "url"),
        description=get_prop(page, "Description", "rich_text"),
        mis_en_avant=get_prop(page, "Mis_en_avant", "checkbox"),
    )


async def list_projects(
    notion: NotionClient, database_id: str, include_all: bool = False
) -> List[ProjectSummary]:
    """Return portfolio projects, newest year first.

    Only featured projects (``Mis_en_avant``) are returned unless
    *include_all* is set.
    """
    query: Dict[str, Any] = {"sorts": _BY_YEAR}
    if not include_all:
        query["filter"] = _FEATURED_FILTER
    pages = await notion.query_database(database_id, query)
    return [_page_to_summary(page) for page in pages]


async def get_project_detail(notion: NotionClient, page_id: str) -> Optional[ProjectDetail]:
    """Return the metadata of one project, or ``None`` when the page does not exist."""
    page = await notion.get_page(page_id)
    if page is None:
        return None
    return _page_to_detail(page)


async def get_project_content(notion: NotionClient, page_id: str) -> Optional[ProjectContent]:
    """Return a project's metadata and rendered content blocks.

    Blocks are only fetched once the page is known to exist; a missing page
    yields ``None``.
    """
    metadata = await get_project_detail(notion, page_id)
    if metadata is None:
        return None
    blocks = await fetch_content(notion, page_id)
    return ProjectContent(metadata=metadata, blocks=blocks)
