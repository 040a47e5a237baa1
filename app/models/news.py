from typing import List

from pydantic import BaseModel


class NewsItem(BaseModel):
    """One published news entry, as listed on the news page."""

    id: str
    titre: str
    date: str  # DD/MM/YYYY
    texte_court: str
    image: str
    lien_externe: str


class NewsDetail(NewsItem):
    images: List[str]
