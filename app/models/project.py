from typing import Any, Dict, List

from pydantic import BaseModel


class ProjectSummary(BaseModel):
    id: str
    nom: str
    club: str
    annee: str
    image: str
    description: str
    mis_en_avant: bool


class ProjectDetail(BaseModel):
    """Scalar metadata of a portfolio project page."""

    id: str
    nom: str
    club: str
    annee: str
    image: str  # cover image URL
    description: str
    galerie: List[str]


class ProjectContent(BaseModel):
    metadata: ProjectDetail
    blocks: List[Dict[str, Any]]
    """Render-ready content blocks, see :mod:`app.services.content_tree`."""
