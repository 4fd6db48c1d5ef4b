"""
Command-line interface for the changelog feed.

Uses Typer to expose the changelog tools as commands, plus a `serve`
command that speaks line-delimited JSON-RPC over stdio for tool-calling
clients. Supports loading .env files for configuration overrides.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
import sys
from typing import Any

from dotenv import load_dotenv
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import load_config
from .core.errors import ChangelogError
from .logging_utils import setup_logging
from .parser import extract
from .runner import ChangelogService
from .server import serve as serve_stdio
from .tools import ChangelogTools, ToolResponse

app = typer.Typer(add_completion=False, help="Query the GitHub changelog.")
console = Console()
err_console = Console(stderr=True)

ConfigOption = typer.Option(None, "--config", "-c", exists=True, help="YAML config file.")
LogLevelOption = typer.Option(None, "--log-level", help="Logging level.")
JsonOption = typer.Option(False, "--json", help="Print the raw JSON payload.")


def _build_tools(config: Path | None, log_level: str | None) -> ChangelogTools:
    # Load environment variables from .env if available
    load_dotenv()
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    logger = setup_logging(cfg.logging)
    return ChangelogTools(ChangelogService(cfg, logger=logger))


def _run_tool(tools: ChangelogTools, name: str, arguments: dict[str, Any], as_json: bool) -> None:
    response = asyncio.run(tools.call_tool(name, arguments))
    _render(response, as_json)


def _render(response: ToolResponse, as_json: bool) -> None:
    if response.is_error:
        err_console.print(response.text, style="bold red", markup=False)
        raise typer.Exit(code=1)
    if as_json:
        console.print_json(response.text)
        return

    payload = response.json()
    if "entries" in payload:
        console.print(_entries_table(payload["entries"]))
        total = payload.get("total_count", payload.get("total_matches"))
        shown = len(payload["entries"])
        console.print(f"{shown} shown" + (f" of {total} matching" if total is not None else ""))
    elif "categories" in payload:
        for category in payload["categories"]:
            console.print(category, markup=False)
    else:
        console.print(payload.get("message", response.text))


def _entries_table(entries: list[dict[str, Any]]) -> Table:
    table = Table(show_lines=False)
    table.add_column("Date", no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("Category")
    table.add_column("Title")
    for entry in entries:
        table.add_row(entry["date"], entry["type"], escape(entry["category"]), escape(entry["title"]))
    return table


def _drop_none(**kwargs: Any) -> dict[str, Any]:
    return {key: value for key, value in kwargs.items() if value is not None}


@app.command()
def entries(
    start_date: str | None = typer.Option(None, "--start-date", help="YYYY-MM-DD, inclusive."),
    end_date: str | None = typer.Option(None, "--end-date", help="YYYY-MM-DD, inclusive."),
    category: list[str] | None = typer.Option(None, "--category", help="Repeatable category filter."),
    change_type: list[str] | None = typer.Option(None, "--type", help="Repeatable change type filter."),
    search: str | None = typer.Option(None, "--search", "-s", help="Search title or category."),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Maximum entries to show."),
    as_json: bool = JsonOption,
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """List changelog entries, optionally filtered."""
    tools = _build_tools(config, log_level)
    arguments = _drop_none(
        start_date=start_date,
        end_date=end_date,
        categories=category or None,
        types=change_type or None,
        search_term=search,
        limit=limit,
    )
    _run_tool(tools, "get_changelog_entries", arguments, as_json)


@app.command()
def recent(
    count: int | None = typer.Option(None, "--count", "-n", help="Number of entries."),
    category: str | None = typer.Option(None, "--category", help="Category filter."),
    change_type: str | None = typer.Option(None, "--type", help="Change type filter."),
    as_json: bool = JsonOption,
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Show the most recent changelog entries."""
    tools = _build_tools(config, log_level)
    arguments = _drop_none(count=count, category=category, type=change_type)
    _run_tool(tools, "get_recent_entries", arguments, as_json)


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to look for in titles and categories."),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Maximum results."),
    as_json: bool = JsonOption,
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Search changelog entries by title or category."""
    tools = _build_tools(config, log_level)
    _run_tool(tools, "search_changelog", _drop_none(query=query, limit=limit), as_json)


@app.command()
def categories(
    as_json: bool = JsonOption,
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """List every category present in the current and previous year."""
    tools = _build_tools(config, log_level)
    _run_tool(tools, "get_changelog_categories", {}, as_json)


@app.command()
def parse(
    html_file: Path = typer.Argument(..., exists=True, readable=True, help="Saved changelog page."),
    year: int | None = typer.Option(None, "--year", help="Year of the page; defaults to this year."),
):
    """Parse a saved changelog page and print the records it yields."""
    document = html_file.read_text(encoding="utf-8")
    try:
        records = extract(document, year=year)
    except ChangelogError as exc:
        err_console.print(f"Error: {exc}", style="bold red", markup=False)
        raise typer.Exit(code=1)
    console.print(_entries_table([record.to_dict() for record in records]))
    console.print(f"{len(records)} records")


@app.command()
def serve(
    config: Path | None = ConfigOption,
    log_level: str | None = LogLevelOption,
):
    """Serve the changelog tools as line-delimited JSON-RPC over stdio."""
    tools = _build_tools(config, log_level)
    try:
        asyncio.run(serve_stdio(tools, sys.stdin, sys.stdout))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    app()
