"""Fetch a Notion page's block tree and flatten it into render-ready JSON blocks.

The work happens in two phases:

1. **Fetch** – :func:`fetch_block_tree` pages through the top-level children
   of a page.  Every ``column_list`` block is expanded into its columns and
   each column's children, producing a :class:`ColumnListBlock`; everything
   else becomes a :class:`LeafBlock`.
2. **Map** – :func:`map_block` turns each node into the flat dict consumed by
   the front end, rendering rich text to inline HTML.  Unsupported block types
   map to ``None`` and are dropped by :func:`map_blocks`.

Only one level of column nesting is expanded.  A ``column_list`` found inside
a column reaches the mapper as a plain :class:`LeafBlock` (no columns were
fetched for it) and is therefore dropped.
"""

import logging
from typing import Any, Dict, List, NamedTuple, Optional, Union

from app.services.notion_client import NotionClient
from app.services.rich_text import render_rich_text

logger = logging.getLogger(__name__)

# Blocks whose payload is a single rich-text field rendered to ``html``.
_TEXT_BLOCK_TYPES = {
    "paragraph",
    "heading_1",
    "heading_2",
    "heading_3",
    "bulleted_list_item",
    "numbered_list_item",
    "quote",
}

_MEDIA_BLOCK_TYPES = {"image", "video"}


class LeafBlock(NamedTuple):
    """A block mapped on its own, without any pre-fetched children."""

    block: Dict[str, Any]


class ColumnListBlock(NamedTuple):
    """A ``column_list`` block together with its columns' children, in order."""

    block: Dict[str, Any]
    columns: List[List[LeafBlock]]


BlockNode = Union[LeafBlock, ColumnListBlock]


# ---------------------------------------------------------------------------
# Fetch phase
# ---------------------------------------------------------------------------

async def fetch_block_tree(notion: NotionClient, page_id: str) -> List[BlockNode]:
    """Fetch every top-level block of *page_id*, expanding column lists.

    Nested fetches run sequentially, one column list and one column at a
    time, and any upstream failure aborts the whole fetch.
    """
    nodes: List[BlockNode] = []
    for block in await notion.list_block_children(page_id):
        if block.get("type") == "column_list":
            nodes.append(await _expand_column_list(notion, block))
        else:
            nodes.append(LeafBlock(block))
    return nodes


async def _expand_column_list(notion: NotionClient, block: Dict[str, Any]) -> ColumnListBlock:
    columns: List[List[LeafBlock]] = []
    for column in await notion.list_block_children(block["id"]):
        children = await notion.list_block_children(column["id"])
        columns.append([LeafBlock(child) for child in children])
    return ColumnListBlock(block, columns)


# ---------------------------------------------------------------------------
# Map phase
# ---------------------------------------------------------------------------

def _media_url(payload: Dict[str, Any]) -> str:
    source = payload.get("type", "external")
    return (payload.get(source) or {}).get("url", "")


def map_block(node: BlockNode) -> Optional[Dict[str, Any]]:
    """Map one fetched node to its output shape, or ``None`` when unsupported."""
    block = node.block
    block_id = block.get("id", "")

    if isinstance(node, ColumnListBlock):
        return {
            "id": block_id,
            "type": "column_list",
            "columns": [map_blocks(column) for column in node.columns],
        }

    block_type = block.get("type")
    payload = (block.get(block_type) or {}) if block_type else {}

    if block_type in _TEXT_BLOCK_TYPES:
        return {
            "id": block_id,
            "type": block_type,
            "html": render_rich_text(payload.get("rich_text")),
        }
    if block_type == "callout":
        icon = payload.get("icon") or {}
        return {
            "id": block_id,
            "type": block_type,
            "html": render_rich_text(payload.get("rich_text")),
            "icon": icon.get("emoji", "") if icon.get("type") == "emoji" else "",
        }
    if block_type == "divider":
        return {"id": block_id, "type": block_type}
    if block_type in _MEDIA_BLOCK_TYPES:
        return {
            "id": block_id,
            "type": block_type,
            "url": _media_url(payload),
            "caption": render_rich_text(payload.get("caption")),
        }

    # Unsupported types, and column lists that were not expanded.
    logger.debug("Dropping unsupported block %s of type %s", block_id, block_type)
    return None


def map_blocks(nodes: List[BlockNode]) -> List[Dict[str, Any]]:
    """Map *nodes* in order, dropping those :func:`map_block` does not support."""
    mapped = (map_block(node) for node in nodes)
    return [block for block in mapped if block is not None]


async def fetch_content(notion: NotionClient, page_id: str) -> List[Dict[str, Any]]:
    """Fetch and flatten the content of *page_id* into render-ready blocks."""
    nodes = await fetch_block_tree(notion, page_id)
    blocks = map_blocks(nodes)
    logger.info(
        "Fetched page content",
        extra={"page_id": page_id, "fetched": len(nodes), "rendered": len(blocks)},
    )
    return blocks
