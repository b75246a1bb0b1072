"""
Rich rendering of probe results for the console
"""

from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..models.probe_models import ProbeOutcome, ProbeResult, RoundResult
from ..utils.formatters import format_duration, format_growth, format_kb, format_memory

OUTCOME_STYLES = {
    ProbeOutcome.PASSED: "bold green",
    ProbeOutcome.FAILED: "bold red",
    ProbeOutcome.SKIPPED: "bold yellow",
}


def _elapsed(record: RoundResult) -> float:
    start = datetime.fromisoformat(record.start_time)
    end = datetime.fromisoformat(record.end_time)
    return (end - start).total_seconds()


def rounds_table(rounds: List[RoundResult], marker: Optional[str] = None) -> Table:
    """One row per round with its sample"""
    table = Table(show_header=True, header_style="bold cyan", box=None, expand=True)
    table.add_column("Round", justify="center", style="magenta")
    table.add_column("Cycles", justify="right")
    table.add_column(marker or "Sample", justify="right", style="green")
    table.add_column("Marker", justify="center")
    table.add_column("Report Lines", justify="right", style="blue")
    table.add_column("Target RSS", justify="right")
    table.add_column("Duration", justify="right", style="dim")

    for record in rounds:
        table.add_row(
            str(record.round_index),
            str(record.cycles),
            format_kb(record.sample_kb),
            "yes" if record.marker_found else Text("missing", style="yellow"),
            str(record.report_lines),
            format_memory(record.target_rss_mb) if record.target_rss_mb else "-",
            format_duration(_elapsed(record)),
        )
    return table


def outcome_text(result: ProbeResult) -> Text:
    """Single line summary, e.g. 'FAILED  Found memory leak: ...'"""
    text = Text(f"{result.outcome.value.upper():<8}", style=OUTCOME_STYLES[result.outcome])
    text.append(result.message)
    return text


def print_result(result: ProbeResult, console: Optional[Console] = None):
    """Print the result summary"""
    console = console or Console()
    console.rule("Leak Probe Result")

    if result.host:
        console.print(
            f"JVM: {result.host.vm_name} {result.host.vm_version} "
            f"(jdk.debug={result.host.jdk_debug or 'n/a'})"
        )

    if result.rounds:
        marker = result.configuration.marker if result.configuration else None
        console.print(rounds_table(result.rounds, marker))
        console.print(
            f"Change: {format_growth(result.first_sample_kb, result.second_sample_kb)}"
        )

    console.print(outcome_text(result))
