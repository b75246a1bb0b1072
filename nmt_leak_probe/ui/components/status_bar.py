"""
Status bar component for the dashboard
"""

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.widgets import Static

from ...managers.state_manager import ProbeState
from ...utils.formatters import format_growth, format_kb, format_memory


class StatusItem(Static):
    """Individual status bar item with proper styling"""

    def __init__(self, content: str = "", classes: str = ""):
        super().__init__(content)
        if classes:
            self.add_class(classes)


def status_texts(state: ProbeState) -> dict:
    """Build the status bar strings for a state snapshot"""
    if state.outcome:
        status = f"{state.outcome.upper()}: {state.current_status}"
    else:
        status = state.current_status

    if state.current_round:
        progress = (
            f"Round {state.current_round}/{state.total_rounds} - "
            f"cycle {state.cycles_completed}/{state.cycles_per_round}"
        )
    else:
        progress = "Round -"

    samples = " -> ".join(format_kb(s) for s in state.samples_kb) or "Samples: none"
    if len(state.samples_kb) >= 2:
        samples += f" ({format_growth(state.samples_kb[0], state.samples_kb[1])})"

    if state.current_memory_mb > 0:
        memory = f"PID {state.target_pid}: {format_memory(state.current_memory_mb)}"
    elif state.target_pid:
        memory = f"PID {state.target_pid}"
    else:
        memory = "Target: N/A"

    return {"status": status, "progress": progress, "samples": samples, "memory": memory}


class StatusBar(Static):
    """Status bar showing probe progress"""

    def __init__(self):
        super().__init__(id="status-bar-container")

    def compose(self) -> ComposeResult:
        """Create the status bar layout"""
        with Horizontal(id="status-bar"):
            yield StatusItem("Initializing...", classes="status-text")
            yield StatusItem("Round -", classes="progress-text")
            yield StatusItem("Samples: none", classes="samples-text")
            yield StatusItem("Target: N/A", classes="memory-text")

    def update_from_state(self, state: ProbeState):
        """Update the status bar from probe state; call on the UI thread"""
        texts = status_texts(state)
        try:
            self.query_one(".status-text", StatusItem).update(texts["status"])
            self.query_one(".progress-text", StatusItem).update(texts["progress"])
            self.query_one(".samples-text", StatusItem).update(texts["samples"])
            self.query_one(".memory-text", StatusItem).update(texts["memory"])
        except NoMatches:
            # Widgets might not be mounted yet
            pass
