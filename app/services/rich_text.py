"""Render Notion rich-text runs to inline HTML."""

import html
from typing import Any, Dict, Iterable, Optional

# Applied innermost first, so bold ends up as the outermost tag.
_STYLE_TAGS = (
    ("code", "code"),
    ("strikethrough", "s"),
    ("underline", "u"),
    ("italic", "em"),
    ("bold", "strong"),
)


def _run_text(run: Dict[str, Any]) -> str:
    if "plain_text" in run:
        return run["plain_text"] or ""
    text = run.get("text")
    if isinstance(text, str):
        return text
    return (text or {}).get("content") or ""


def _run_link(run: Dict[str, Any]) -> Optional[str]:
    if run.get("href"):
        return run["href"]
    text = run.get("text")
    if isinstance(text, dict):
        return (text.get("link") or {}).get("url")
    return run.get("link")


def render_run(run: Dict[str, Any]) -> str:
    """Render a single run: escape its text, wrap it in style tags, then in a link."""
    out = html.escape(_run_text(run), quote=False)

    # Flags live under "annotations" in Notion payloads; flat runs carry them inline.
    annotations = run.get("annotations") or run
    for flag, tag in _STYLE_TAGS:
        if annotations.get(flag):
            out = f"<{tag}>{out}</{tag}>"

    href = _run_link(run)
    if href:
        out = (
            f'<a href="{html.escape(href, quote=True)}" target="_blank" '
            f'rel="noopener noreferrer">{out}</a>'
        )
    return out


def render_rich_text(runs: Optional[Iterable[Dict[str, Any]]]) -> str:
    """Concatenate the rendered *runs* in order; ``None`` or ``[]`` gives ``""``."""
    if not runs:
        return ""
    return "".join(render_run(run) for run in runs)
