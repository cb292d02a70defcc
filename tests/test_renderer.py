from pathlib import Path

from rss_curator.core.types import FeedItem
from rss_curator.renderer import excerpt, render_feed_list, write_feed_list


def _item(title: str, link: str = "https://example.com/a") -> FeedItem:
    return FeedItem(title=title, link=link, published=0, content="", source="Example")


def test_render_feed_list_links_titles_and_escapes():
    html = render_feed_list([_item("Tom & Jerry <3"), _item("Second", "https://example.com/b")])

    assert html.startswith('<div class="feed-list">')
    assert '<a href="https://example.com/a" target="_blank">Tom &amp; Jerry &lt;3</a>' in html
    assert 'href="https://example.com/b"' in html
    assert "No items." not in html


def test_render_feed_list_empty():
    html = render_feed_list([])

    assert "<p>No items.</p>" in html


def test_write_feed_list(tmp_path: Path):
    output = tmp_path / "out" / "feed.html"

    write_feed_list([_item("Hello")], output)

    assert "Hello" in output.read_text(encoding="utf-8")


def test_excerpt_strips_markup_and_truncates():
    html = "<h2>Title</h2><p>Some   <b>bold</b>\ntext here</p>"

    assert excerpt(html) == "Title Some bold text here"
    assert excerpt(html, max_chars=10) == "Title Som…"
    assert excerpt("") == ""
