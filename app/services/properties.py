"""Typed accessors over a Notion page's property bag."""

from typing import Any, Dict, Literal

PropertyKind = Literal["title", "rich_text", "date", "checkbox", "url", "number"]

# Value returned for each kind when the property is absent or empty.
_DEFAULTS: Dict[str, Any] = {
    "title": "",
    "rich_text": "",
    "date": "",
    "checkbox": False,
    "url": "",
    "number": 0,
}


def _plain_text(runs) -> str:
    return "".join(run.get("plain_text", "") for run in runs or [])


def get_prop(page: Dict[str, Any], name: str, kind: PropertyKind) -> Any:
    """Return the value of property *name* read as *kind*.

    Missing properties fall back to ``""``, ``False`` or ``0`` depending on
    *kind*.

    Raises:
        ValueError: if *kind* is not a supported property kind.
    """
    if kind not in _DEFAULTS:
        raise ValueError(f"Unsupported property kind: {kind!r}")

    prop = (page.get("properties") or {}).get(name)
    if not prop:
        return _DEFAULTS[kind]

    if kind == "title":
        value = _plain_text(prop.get("title"))
    elif kind == "rich_text":
        value = _plain_text(prop.get("rich_text"))
    elif kind == "date":
        value = (prop.get("date") or {}).get("start")
    else:
        value = prop.get(kind)

    return value or _DEFAULTS[kind]
