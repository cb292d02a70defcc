from __future__ import annotations

from pathlib import Path

from bs4 import BeautifulSoup
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .core.types import FeedItem


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )


def render_feed_list(items: list[FeedItem]) -> str:
    """Render the public list of linked item titles as an HTML fragment."""
    template = _environment().get_template("feed_list.html")
    return template.render(items=items)


def write_feed_list(items: list[FeedItem], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_feed_list(items), encoding="utf-8")


def excerpt(html: str, max_chars: int = 160) -> str:
    """Plain-text preview of HTML-bearing item content."""
    if not html:
        return ""
    text = " ".join(BeautifulSoup(html, "html.parser").get_text(" ").split())
    if len(text) <= max_chars:
        return text
    return text[: max_chars - 1].rstrip() + "…"
