from __future__ import annotations

from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from logsieve.ingest import IngestSummary


def _percent(part: int, whole: int) -> str:
    if whole <= 0:
        return "-"
    return f"{part / whole * 100:.1f}%"


def _format_bytes(value: Optional[int]) -> str:
    if not value:
        return "N/A"
    return f"{value / (1024 * 1024):.2f} MB"


def build_summary_table(summary: IngestSummary, title: str = "Log Admission Summary") -> Table:
    """
    Render an ingest summary as a rich table.

    Rejections are broken down by reason (duplicate, not_modified, ...), sorted
    by count so the noisiest source is listed first.
    """
    table = Table(title=title, box=box.ROUNDED, caption=f"{summary.submitted:,} candidates")

    table.add_column("Outcome", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right", style="magenta")
    table.add_column("Share", justify="right", style="green")

    total = summary.submitted
    table.add_row("accepted", f"{summary.accepted:,}", _percent(summary.accepted, total))
    for reason, count in sorted(summary.rejected.items(), key=lambda item: (-item[1], item[0])):
        table.add_row(f"rejected: {reason}", f"{count:,}", _percent(count, total))
    if summary.too_large:
        table.add_row(
            "too large", f"{summary.too_large:,}", _percent(summary.too_large, total), style="yellow"
        )
    if summary.invalid:
        table.add_row("invalid", f"{summary.invalid:,}", _percent(summary.invalid, total), style="red")
    if summary.failed:
        table.add_row(
            "storage failure", f"{summary.failed:,}", _percent(summary.failed, total), style="bold red"
        )
    return table


def build_profile_table(profile: Dict[str, Any]) -> Table:
    table = Table(title="Run Profile", box=box.SIMPLE)
    table.add_column("Duration (s)", justify="right", style="green")
    table.add_column("Peak Memory", justify="right", style="yellow")
    table.add_column("CPU %", justify="right", style="red")

    cpu = profile.get("cpu_percent")
    table.add_row(
        f"{profile.get('duration_seconds', 0.0):.2f}",
        _format_bytes(profile.get("peak_rss_bytes")),
        f"{cpu:.1f}" if cpu is not None else "N/A",
    )
    return table


def print_summary(summary: IngestSummary, console: Optional[Console] = None) -> None:
    console = console or Console()

    if summary.submitted == 0:
        console.print("[yellow]No candidates were submitted.[/yellow]")
        return

    console.print(build_summary_table(summary))
    if summary.profile:
        console.print(build_profile_table(summary.profile))
    for error in summary.errors:
        console.print(f"[red]- {error}[/red]")


__all__ = ["build_profile_table", "build_summary_table", "print_summary"]
