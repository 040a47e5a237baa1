"""Process-wide configuration: upstream credentials and target identifiers."""

import os
from functools import lru_cache
from typing import Any, Dict, Literal

from pydantic import BaseModel, Field

# Environment variable name for every settings field.
_ENV_VARS = {
    "notion_key": "NOTION_KEY",
    "notion_api_url": "NOTION_API_URL",
    "notion_db_actualites": "NOTION_DB_ACTUALITES",
    "notion_db_portfolio": "NOTION_DB_PORTFOLIO",
    "airtable_token": "AIRTABLE_TOKEN",
    "airtable_api_url": "AIRTABLE_API_URL",
    "airtable_base_id": "AIRTABLE_BASE_ID",
    "airtable_table_clubs": "AIRTABLE_TABLE_CLUBS",
    "airtable_table_produits": "AIRTABLE_TABLE_PRODUITS",
    "airtable_table_commandes": "AIRTABLE_TABLE_COMMANDES",
    "airtable_table_lignes": "AIRTABLE_TABLE_LIGNES",
    "airtable_table_demandes": "AIRTABLE_TABLE_DEMANDES",
    "http_timeout": "PROXY_HTTP_TIMEOUT",
    "log_level": "PROXY_LOG_LEVEL",
}


class Settings(BaseModel):
    notion_key: str = ""
    notion_api_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    notion_db_actualites: str = ""
    notion_db_portfolio: str = ""

    airtable_token: str = ""
    airtable_api_url: str = "https://api.airtable.com/v0"
    airtable_base_id: str = ""
    airtable_table_clubs: str = "tblsBiicwKqdFe7h5"
    airtable_table_produits: str = "tbl8ri4tUfg1TH659"
    airtable_table_commandes: str = "tbloz7JkktaBoHWie"
    airtable_table_lignes: str = "tblWuqefKcUPd4I22"
    airtable_table_demandes: str = Field(
        default="", description="Requests table id; empty disables the requests feature."
    )

    http_timeout: float = Field(default=10.0, gt=0, description="Upstream request timeout (seconds).")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


def load_settings(environ: Dict[str, str] | None = None) -> Settings:
    """Build :class:`Settings` from environment variables, ignoring unset ones."""
    environ = os.environ if environ is None else environ
    data: Dict[str, Any] = {}
    for field, var in _ENV_VARS.items():
        if val := environ.get(var):
            data[field] = val
    return Settings(**data)


@lru_cache
def get_settings() -> Settings:
    return load_settings()
