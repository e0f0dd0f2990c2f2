"""Rich terminal reporter: tables, severity pills, highlighted matches."""

from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from findingscope.findings.models import (
    Finding,
    ResourceBucket,
    Severity,
    SeverityLabel,
    SeverityShare,
    Stats,
    Suggestion,
    SuggestionKind,
    TimelineBucket,
    UnknownSeverity,
)
from findingscope.search.index import SearchResult

_SEVERITY_STYLE = {
    Severity.CRITICAL: "bold white on red",
    Severity.HIGH: "bold white on dark_orange",
    Severity.MEDIUM: "bold black on bright_cyan",
    Severity.LOW: "bold black on green",
}

_SEVERITY_ICON = {
    Severity.CRITICAL: "🔴",
    Severity.HIGH: "🟠",
    Severity.MEDIUM: "🔵",
    Severity.LOW: "🟢",
}

_KIND_ICON = {
    SuggestionKind.RECENT: "🕘",
    SuggestionKind.CATEGORY: "📈",
    SuggestionKind.FINDING: "🔍",
}


def severity_pill(severity: SeverityLabel) -> Text:
    if isinstance(severity, UnknownSeverity):
        return Text(f" ? {severity.label or 'UNKNOWN'} ", style="bold black on white")
    return Text(
        f" {_SEVERITY_ICON[severity]} {severity.value} ",
        style=_SEVERITY_STYLE[severity],
    )


def highlight(value: str, spans: Sequence[tuple[int, int]], width: int = 80) -> Text:
    """Matched spans in bold, trimmed to a window around the first match."""
    text = Text(value)
    for start, end in spans:
        text.stylize("bold yellow", start, end)
    if len(value) <= width:
        return text
    first = spans[0][0] if spans else 0
    begin = max(0, min(first - width // 4, len(value) - width))
    excerpt = text[begin:begin + width]
    if begin > 0:
        excerpt = Text("…") + excerpt
    if begin + width < len(value):
        excerpt.append("…")
    return excerpt


def _console(console: Optional[Console]) -> Console:
    return console or Console()


def render_findings(
    findings: Sequence[Finding],
    *,
    title: str = "Findings",
    console: Optional[Console] = None,
) -> None:
    out = _console(console)
    if not findings:
        out.print("[dim]No findings match the current filters.[/dim]")
        return

    table = Table(title=title, show_lines=True, title_style="bold", border_style="dim")
    table.add_column("Severity", justify="center", width=14)
    table.add_column("Title", style="cyan", min_width=20)
    table.add_column("Resource", style="magenta")
    table.add_column("Created", style="green")

    for f in findings:
        table.add_row(
            severity_pill(f.severity),
            Text(f.title),
            Text(f.resource or "-"),
            f.created_at.strftime("%Y-%m-%d") if f.created_at else "-",
        )
    out.print(table)


def render_stats(
    stats: Stats,
    shares: Sequence[SeverityShare] = (),
    *,
    console: Optional[Console] = None,
) -> None:
    out = _console(console)
    out.print()
    out.print(f"[dim]Total:[/dim]     {stats.total}")
    out.print(f"[dim]Critical:[/dim]  {stats.critical}")
    out.print(f"[dim]High:[/dim]      {stats.high}")
    out.print(f"[dim]Medium:[/dim]    {stats.medium}")
    out.print(f"[dim]Low:[/dim]       {stats.low}")
    if shares:
        out.print()
        for share in shares:
            out.print(severity_pill(share.severity), f" {share.count}  ({share.percentage}%)")


def render_timeline(buckets: Sequence[TimelineBucket], *, console: Optional[Console] = None) -> None:
    out = _console(console)
    if not buckets:
        out.print("[dim]No dated findings.[/dim]")
        return
    table = Table(title="Timeline", title_style="bold", border_style="dim")
    table.add_column("Date")
    for name in ("Critical", "High", "Medium", "Low", "Total"):
        table.add_column(name, justify="right")
    for b in buckets:
        table.add_row(
            Text(b.date_label), str(b.critical), str(b.high), str(b.medium), str(b.low), str(b.total)
        )
    out.print(table)


def render_resources(buckets: Sequence[ResourceBucket], *, console: Optional[Console] = None) -> None:
    out = _console(console)
    if not buckets:
        out.print("[dim]No resources to summarise.[/dim]")
        return
    table = Table(title="Resources", title_style="bold", border_style="dim")
    table.add_column("Service", style="cyan")
    table.add_column("Findings", justify="right")
    for b in buckets:
        table.add_row(Text(b.service), str(b.count))
    out.print(table)


def render_search(results: Sequence[SearchResult], *, console: Optional[Console] = None) -> None:
    out = _console(console)
    if not results:
        out.print("[dim]No fuzzy matches.[/dim]")
        return
    table = Table(title="Search results", show_lines=True, title_style="bold", border_style="dim")
    table.add_column("Score", justify="right", style="green")
    table.add_column("Severity", justify="center", width=14)
    table.add_column("Title", style="cyan")
    table.add_column("Match")
    for r in results:
        match = r.best_match
        table.add_row(
            f"{r.score:.2f}",
            severity_pill(r.finding.severity),
            Text(r.finding.title),
            Text(f"{match.field}: ", style="dim") + highlight(match.value, match.spans),
        )
    out.print(table)


def render_suggestions(
    suggestions: Sequence[Suggestion],
    *,
    selected: int = -1,
    console: Optional[Console] = None,
) -> None:
    out = _console(console)
    if not suggestions:
        out.print("[dim]No suggestions.[/dim]")
        return
    for i, s in enumerate(suggestions):
        line = Text(f"{i:>2} {_KIND_ICON[s.kind]} ", style="reverse" if i == selected else "")
        if s.kind is SuggestionKind.FINDING and s.highlight:
            line.append(s.text, style="bold")
            line.append("  ")
            line.append_text(highlight(s.highlight, s.spans, width=60))
        else:
            line.append(s.text, style="bold")
        if s.count:
            line.append(f"  ({s.count})", style="dim")
        out.print(line)
