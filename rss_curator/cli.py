"""
Command-line interface for the RSS Curator.

Uses Typer to expose the two pipelines: listing aggregated feed items
(with their draft state) and rewriting one item into a draft. Supports
loading .env files for API key configuration.
"""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import typer
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .aggregate import dashboard_rows, list_items
from .config import AppConfig, load_config
from .context import CuratorContext, build_context, remove_source, update_source_url
from .core.errors import CuratorError
from .core.types import ALL_SOURCES
from .llm.tracing import flush, setup_langfuse
from .publish import publish as publish_item
from .publish import verify_credential
from .renderer import excerpt, render_feed_list, write_feed_list
from .utils.logging import setup_llm_logger, setup_logging

app = typer.Typer(add_completion=False, help="Aggregate RSS feeds and rewrite items into drafts.")
sources_app = typer.Typer(add_completion=False, help="Manage registered feed sources.")
app.add_typer(sources_app, name="sources")
console = Console()

_STATE: dict[str, AppConfig] = {}


@app.callback()
def main(
    config: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, readable=True),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level."),
    api_key: Optional[str] = typer.Option(
        None, "--api-key", help="Override the API key (or set VENICE_API_KEY / .env)."
    ),
):
    """Load .env, configuration and logging before any command runs."""
    load_dotenv(find_dotenv(usecwd=True))
    cfg = load_config(str(config) if config else _default_config_path())
    if log_level:
        cfg.logging.level = log_level
    if api_key:
        cfg.provider.api_key = api_key
    setup_logging(cfg.logging)
    setup_langfuse(cfg.langfuse)
    _STATE["config"] = cfg


def _default_config_path() -> str | None:
    path = Path("config.yaml")
    return str(path) if path.exists() else None


def _context(llm_log: bool = False) -> CuratorContext:
    """Build the runtime context; only rewrite commands open the LLM log."""
    cfg = _STATE.get("config") or AppConfig()
    llm_logger = setup_llm_logger(cfg.logging) if llm_log else None
    return build_context(cfg, llm_logger=llm_logger)


def _fail(exc: CuratorError) -> None:
    console.print(f"[red]{escape(str(exc))}[/red]")
    raise typer.Exit(code=1)


def _scope(source: Optional[str]) -> str:
    return source if source else ALL_SOURCES


@sources_app.command("list")
def sources_list():
    """List registered feed sources."""
    ctx = _context()
    table = Table(title="Feed sources")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("URL")
    for source in ctx.registry.all():
        table.add_row(source.id, escape(source.name), escape(source.url))
    console.print(table)


@sources_app.command("add")
def sources_add(
    url: str = typer.Argument(..., help="Feed URL."),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Display name."),
):
    """Register a new feed source."""
    ctx = _context()
    try:
        source = ctx.registry.add(url, name)
    except CuratorError as exc:
        _fail(exc)
    ctx.cache.invalidate_source(source.id)
    console.print(f"Added source {source.id}: {source.name}")


@sources_app.command("set-url")
def sources_set_url(
    source_id: str = typer.Argument(...),
    url: str = typer.Argument(...),
):
    """Change a source's feed URL (drops cached items for it)."""
    ctx = _context()
    try:
        source = update_source_url(ctx, source_id, url)
    except CuratorError as exc:
        _fail(exc)
    console.print(f"Updated source {source.id}: {source.url}")


@sources_app.command("remove")
def sources_remove(source_id: str = typer.Argument(...)):
    """Remove a feed source."""
    ctx = _context()
    try:
        source = remove_source(ctx, source_id)
    except CuratorError as exc:
        _fail(exc)
    console.print(f"Removed source {source.id}: {source.name}")


@app.command()
def items(
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Only this source id."),
    limit: int = typer.Option(50, "--limit", "-l", min=0),
):
    """Show aggregated items, newest first, with their draft state."""
    ctx = _context()
    try:
        rows = dashboard_rows(ctx, _scope(source), limit)
    except CuratorError as exc:
        _fail(exc)
    if not rows:
        console.print("No items found.")
        return

    table = Table(title="Feed items")
    table.add_column("Title / Content")
    table.add_column("Source")
    table.add_column("Date")
    table.add_column("Action")
    for row in rows:
        item = row.item
        title = f"[bold]{escape(item.title)}[/bold]\n{escape(item.link)}\n[dim]{escape(excerpt(item.content))}[/dim]"
        action = row.action
        if row.edit_url:
            action = f"{action}\nEdit: {row.edit_url}"
        table.add_row(title, escape(item.source), _format_date(item.published), action)
    console.print(table)


@app.command()
def publish(
    title: str = typer.Option(..., "--title", "-t"),
    link: str = typer.Option(..., "--link"),
    content: Optional[str] = typer.Option(None, "--content", help="Raw item content."),
    content_file: Optional[Path] = typer.Option(
        None, "--content-file", exists=True, readable=True, help="Read content from a file."
    ),
    content_b64: Optional[str] = typer.Option(
        None, "--content-b64", help="Base64-encoded item content."
    ),
):
    """Rewrite one item and save the result as a draft."""
    body = _read_content(content, content_file, content_b64)
    ctx = _context(llm_log=True)
    try:
        result = publish_item(ctx, title=title, link=link, content=body)
    except CuratorError as exc:
        _fail(exc)
    finally:
        flush()
    console.print(f"Draft {result.document_id} created: {result.edit_url}")


@app.command()
def verify(
    key: Optional[str] = typer.Option(None, "--key", help="Key to test instead of the configured one."),
):
    """Check that the API key is accepted by the remote service."""
    ctx = _context(llm_log=True)
    try:
        message = verify_credential(ctx, key)
    except CuratorError as exc:
        _fail(exc)
    console.print(f"[green]{message}[/green]")


@app.command()
def render(
    source: Optional[str] = typer.Option(None, "--source", "-s"),
    limit: int = typer.Option(10, "--limit", "-l", min=0),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
):
    """Render the public HTML list of item titles."""
    ctx = _context()
    try:
        feed_items = list_items(ctx, _scope(source), limit)
    except CuratorError as exc:
        _fail(exc)
    if output is None:
        console.print(render_feed_list(feed_items), markup=False, highlight=False)
        return
    write_feed_list(feed_items, output)
    console.print(f"Feed list written: {output}")


def _read_content(
    content: Optional[str],
    content_file: Optional[Path],
    content_b64: Optional[str],
) -> str:
    provided = [value for value in (content, content_file, content_b64) if value is not None]
    if len(provided) > 1:
        raise typer.BadParameter("Use only one of --content, --content-file, --content-b64.")
    if content_file is not None:
        return content_file.read_text(encoding="utf-8")
    if content_b64 is not None:
        try:
            return base64.b64decode(content_b64, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            raise typer.BadParameter(f"Invalid base64 content: {exc}") from exc
    return content or ""


def _format_date(epoch: int) -> str:
    if not epoch:
        return "-"
    return datetime.fromtimestamp(epoch, tz=timezone.utc).strftime("%b %d, %Y")


if __name__ == "__main__":
    app()
