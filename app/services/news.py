"""News ("actualités") read from the Notion news database."""

from typing import Any, Dict, List, Optional

from app.models.news import NewsDetail, NewsItem
from app.services.normalizer import format_date
from app.services.notion_client import NotionClient
from app.services.properties import get_prop

_PUBLISHED_QUERY = {
    "filter": {"property": "Publié", "checkbox": {"equals": True}},
    "sorts": [{"property": "Date", "direction": "descending"}],
}


def _page_to_news(page: Dict[str, Any]) -> NewsItem:
    return NewsItem(
        id=page["id"],
        titre=get_prop(page, "Titre", "title"),
        date=format_date(get_prop(page, "Date", "date")),
        texte_court=get_prop(page, "Texte_Court", "rich_text"),
        image=get_prop(page, "Image", "url"),
        lien_externe=get_prop(page, "Lien_Externe", "url"),
    )


async def list_news(notion: NotionClient, database_id: str) -> List[NewsItem]:
    """Return every published news item, most recent first."""
    pages = await notion.query_database(database_id, _PUBLISHED_QUERY)
    return [_page_to_news(page) for page in pages]


async def get_news_item(notion: NotionClient, page_id: str) -> Optional[NewsDetail]:
    """Return one news item, or ``None`` when the page does not exist."""
    page = await notion.get_page(page_id)
    if page is None:
        return None
    item = _page_to_news(page)
    return NewsDetail(**item.model_dump(), images=[item.image] if item.image else [])
