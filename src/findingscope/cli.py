"""findingscope CLI — Typer application for browsing and summarising findings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from findingscope import __version__

app = typer.Typer(
    name="findingscope",
    help="Search, filter, and summarise security findings.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console(stderr=True)


@dataclass
class _Options:
    config: Optional[str] = None
    file: Optional[str] = None
    format: Optional[str] = None


def _configure_logging(verbose: bool, debug: bool) -> None:
    from rich.logging import RichHandler

    level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=debug)],
        force=True,
    )


def _load_config(opts: _Options):
    from findingscope.config.loader import ConfigError, load_config
    from findingscope.config.schema import OUTPUT_FORMATS

    try:
        cfg = load_config(Path.cwd(), opts.config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    if opts.format:
        if opts.format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {escape(opts.format)}")
            raise typer.Exit(code=2)
        cfg.output.format = opts.format  # type: ignore[assignment]
    if opts.file:
        cfg.source.file = opts.file
    return cfg


def _history(cfg):
    from findingscope.search.history import JsonFileStore, RecentSearchHistory

    return RecentSearchHistory(
        JsonFileStore(Path(cfg.history.path)),
        max_entries=cfg.history.max_entries,
    )


def _open_session(ctx: typer.Context):
    """Load config and findings; fall back to sample data on fetch failure."""
    from findingscope.session import FindingsSession
    from findingscope.source.fetcher import FileFindingSource, HttpFindingSource

    cfg = _load_config(ctx.obj)
    session = FindingsSession(cfg, history=_history(cfg))

    if cfg.source.file:
        source = FileFindingSource(Path(cfg.source.file).expanduser())
    else:
        source = HttpFindingSource(cfg.source.url, timeout=cfg.source.timeout)

    error = session.refresh(source)
    if error is not None and cfg.output.format == "terminal":
        console.print(f"[yellow]⚠[/yellow]  {escape(str(error))}")
        if session.store.is_sample:
            console.print("[dim]Showing built-in sample findings.[/dim]")
    return session


def _parse_severity(value: Optional[str]):
    from findingscope.findings.models import ALL, parse_severity

    if value is None or value.strip().upper() == ALL.value:
        return ALL
    return parse_severity(value)


def _apply_filters(session, severity: Optional[str], query: Optional[str]) -> None:
    session.update_filters(severity=_parse_severity(severity), query=query or "")


# ── list ──────────────────────────────────────────────────────────────────────


@app.command("list")
def list_findings(
    ctx: typer.Context,
    severity: Optional[str] = typer.Option(None, "--severity", "-s", help="ALL | CRITICAL | HIGH | MEDIUM | LOW"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Literal text filter"),
) -> None:
    """Show findings matching the severity and text filters."""
    from findingscope.output import json_report, terminal

    session = _open_session(ctx)
    _apply_filters(session, severity, query)
    view = session.view

    if session.config.output.format == "json":
        print(json_report.render({
            "filter": {
                "severity": _severity_text(session.filter_state.severity),
                "query": session.filter_state.query,
            },
            "stats": json_report.stats_to_dict(session.view_stats),
            "findings": [json_report.finding_to_dict(f) for f in view],
        }))
        return

    terminal.render_findings(view, title=f"Findings ({len(view)} of {len(session.store)})")
    terminal.render_stats(session.view_stats)


def _severity_text(severity) -> str:
    from findingscope.findings.models import AllSeverities

    return severity.value if isinstance(severity, AllSeverities) else severity.label


# ── stats ─────────────────────────────────────────────────────────────────────


@app.command()
def stats(ctx: typer.Context) -> None:
    """Severity totals across all loaded findings."""
    from findingscope.output import json_report, terminal

    session = _open_session(ctx)
    if session.config.output.format == "json":
        print(json_report.render(
            json_report.stats_to_dict(session.stats, session.severity_distribution)
        ))
        return
    terminal.render_stats(session.stats, session.severity_distribution)


# ── timeline / resources ──────────────────────────────────────────────────────


@app.command()
def timeline(
    ctx: typer.Context,
    severity: Optional[str] = typer.Option(None, "--severity", "-s"),
    query: Optional[str] = typer.Option(None, "--query", "-q"),
) -> None:
    """Findings per day for the most recent days in the filtered view."""
    from findingscope.output import json_report, terminal

    session = _open_session(ctx)
    _apply_filters(session, severity, query)
    if session.config.output.format == "json":
        print(json_report.render(json_report.timeline_to_list(session.timeline)))
        return
    terminal.render_timeline(session.timeline)


@app.command()
def resources(
    ctx: typer.Context,
    severity: Optional[str] = typer.Option(None, "--severity", "-s"),
    query: Optional[str] = typer.Option(None, "--query", "-q"),
) -> None:
    """Most affected services in the filtered view."""
    from findingscope.output import json_report, terminal

    session = _open_session(ctx)
    _apply_filters(session, severity, query)
    if session.config.output.format == "json":
        print(json_report.render(json_report.resources_to_list(session.resources)))
        return
    terminal.render_resources(session.resources)


# ── search / suggest / submit ─────────────────────────────────────────────────


@app.command()
def search(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Fuzzy query (typos tolerated)"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Max results"),
) -> None:
    """Fuzzy-search titles, descriptions, severities and resources."""
    from findingscope.output import json_report, terminal

    session = _open_session(ctx)
    results = session.search(query)
    if limit is not None:
        results = results[:limit]
    if session.config.output.format == "json":
        print(json_report.render(json_report.search_to_list(results)))
        return
    terminal.render_search(results)


@app.command()
def suggest(
    ctx: typer.Context,
    query: str = typer.Argument("", help="Partial query; empty shows recent searches and facets"),
) -> None:
    """Suggestions for a partial query."""
    from findingscope.output import json_report, terminal

    session = _open_session(ctx)
    suggestions = session.suggest(query)
    if session.config.output.format == "json":
        print(json_report.render(json_report.suggestions_to_list(suggestions)))
        return
    terminal.render_suggestions(suggestions)


@app.command()
def submit(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Typed query text"),
    pick: int = typer.Option(-1, "--pick", "-p", help="Index of a suggestion to submit instead"),
    severity: Optional[str] = typer.Option(None, "--severity", "-s"),
) -> None:
    """Submit a query (or one of its suggestions), record it, and show the view."""
    from findingscope.output import json_report, terminal

    session = _open_session(ctx)
    session.update_filters(severity=_parse_severity(severity))
    suggestions = session.suggest(query)
    try:
        state = session.submit(query, suggestions, pick)
    except IndexError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    view = session.view
    if session.config.output.format == "json":
        print(json_report.render({
            "query": state.query,
            "findings": [json_report.finding_to_dict(f) for f in view],
        }))
        return
    console.print(f"[dim]Query:[/dim] {escape(state.query)}")
    terminal.render_findings(view, title=f"Findings ({len(view)} of {len(session.store)})")


# ── history ───────────────────────────────────────────────────────────────────


@app.command()
def history(
    ctx: typer.Context,
    clear: bool = typer.Option(False, "--clear", help="Forget all recent searches"),
) -> None:
    """Show (or clear) recent searches."""
    from findingscope.output import json_report

    cfg = _load_config(ctx.obj)
    recent = _history(cfg)
    if clear:
        recent.clear()
        console.print("[green]✓[/green] Recent searches cleared")
        return
    entries = list(recent.entries)
    if cfg.output.format == "json":
        print(json_report.render(entries))
        return
    if not entries:
        console.print("[dim]No recent searches.[/dim]")
        return
    for i, entry in enumerate(entries):
        print(f"{i:>2}  {entry}")


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init() -> None:
    """Generate a starter .findingscope.toml in the current directory."""
    from findingscope.config.defaults import DEFAULT_TOML
    from findingscope.config.loader import CONFIG_FILENAME

    config_path = Path.cwd() / CONFIG_FILENAME
    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILENAME} already exists at {escape(str(config_path))}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {escape(str(config_path))}")


# ── version / global options ──────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"findingscope {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .findingscope.toml"),
    file: Optional[str] = typer.Option(None, "--file", help="Load findings from a JSON/YAML file"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug logging"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """findingscope — search, filter, and summarise security findings."""
    _configure_logging(verbose, debug)
    ctx.obj = _Options(config=config, file=file, format=format)
