"""
Samples display widget showing the per-round measurements
"""

from typing import List

from rich.table import Table
from rich.text import Text
from textual.app import ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Static

from ...utils.formatters import format_growth, format_kb


class SamplesDisplay(VerticalScroll):
    """Display samples captured so far"""

    def __init__(self, marker: str):
        super().__init__()
        self.border_title = "Samples"
        self.marker = marker
        self._content = Static("Waiting for first round...")

    def compose(self) -> ComposeResult:
        """Compose the widget"""
        yield self._content

    def update_samples(self, samples_kb: List[int]):
        """Update the display with new samples"""
        if not samples_kb:
            self._content.update(Text("No samples yet", style="dim"))
            return
        self._content.update(self._format_samples(samples_kb))

    def _format_samples(self, samples_kb: List[int]) -> Table:
        table = Table(show_header=True, header_style="bold cyan", box=None, expand=True)
        table.add_column("Round", justify="center", style="magenta", ratio=1)
        table.add_column(self.marker, justify="right", style="green", ratio=3)
        table.add_column("Change", justify="right", style="yellow", ratio=1)

        for i, sample in enumerate(samples_kb):
            change = format_growth(samples_kb[i - 1], sample) if i else "-"
            table.add_row(str(i + 1), format_kb(sample), change)
        return table
