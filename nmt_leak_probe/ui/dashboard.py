"""
Dashboard that shows a probe run live
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from dependency_injector.wiring import Provide, inject
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.widgets import Footer, Header

if TYPE_CHECKING:
    from ..services.logging_service import LoggingService

from ..config import Config
from ..container import Container
from ..errors import ProbeError
from ..managers import ProcessManager, StateManager
from ..managers.state_manager import ProbeState
from ..models.probe_models import ProbeResult
from ..services import LeakProbe
from .components import ProbeLogViewer, SamplesDisplay, StatusBar, TargetOutputViewer


class LeakProbeDashboard(App):
    """Runs the probe in a worker thread and shows its progress"""

    CSS = """
    Screen {
        background: $surface;
    }

    #status-bar-container {
        dock: top;
        height: 3;
        width: 100%;
    }

    #status-bar {
        height: 3;
        background: $panel;
        border: solid $primary;
        padding: 0 1;
        width: 100%;
        layout: horizontal;
    }

    .status-text {
        width: 3fr;
        content-align: left middle;
        color: $text;
        text-style: bold;
    }

    .progress-text {
        width: 2fr;
        content-align: center middle;
        color: $primary;
    }

    .samples-text {
        width: 2fr;
        content-align: center middle;
        color: $warning;
    }

    .memory-text {
        width: 1.5fr;
        content-align: right middle;
        color: $success;
    }

    #top-panel {
        height: 2fr;
        width: 100%;
        layout: horizontal;
    }

    #probe-log {
        width: 2fr;
        border: solid $primary;
        padding: 1;
    }

    SamplesDisplay {
        width: 1fr;
        border: solid $accent;
        padding: 1;
    }

    #target-output {
        height: 1fr;
        border: solid $secondary;
        padding: 1;
    }

    RichLog {
        background: $surface;
        color: $text;
        scrollbar-size: 1 1;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", priority=True),
        Binding("c", "clear", "Clear logs"),
    ]

    @inject
    def __init__(
        self,
        config: Config = Provide[Container.config],
        state_manager: StateManager = Provide[Container.state_manager],
        process_manager: ProcessManager = Provide[Container.process_manager],
        leak_probe: LeakProbe = Provide[Container.leak_probe],
        logging_service: "LoggingService" = Provide[Container.logging_service],
    ):
        super().__init__()
        self.config = config
        self.state_manager = state_manager
        self.process_manager = process_manager
        self.leak_probe = leak_probe
        self.logging_service = logging_service

        self.title = "NMT Leak Probe"
        self.sub_title = "jmethodID block memory across class unloading"

        self.result: Optional[ProbeResult] = None
        self.error: Optional[BaseException] = None

        self.status_bar = None
        self.probe_log = None
        self.target_output = None
        self.samples_display = None

    def compose(self) -> ComposeResult:
        """Create the layout"""
        yield Header()

        self.status_bar = StatusBar()
        yield self.status_bar

        with Vertical(id="main-container"):
            with Horizontal(id="top-panel"):
                with VerticalScroll(id="probe-log"):
                    self.probe_log = ProbeLogViewer()
                    yield self.probe_log

                self.samples_display = SamplesDisplay(self.config.marker)
                yield self.samples_display

            with VerticalScroll(id="target-output"):
                self.target_output = TargetOutputViewer()
                yield self.target_output

        yield Footer()

    def on_mount(self) -> None:
        """Called when the app is mounted"""
        self._setup_logging()
        self._setup_process_output()
        self.state_manager.subscribe(self._on_state_change)

        self.probe_log.queue_message(f"Started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        self.probe_log.queue_message(f"Target: {' '.join(self.config.target_command)}")
        self.probe_log.queue_message(f"Cycles per round: {self.config.cycles}")
        self.probe_log.queue_message("")

        self.set_interval(0.1, self._process_queues)
        self.run_worker(self._run_probe, exclusive=True, thread=True)

    def _setup_logging(self):
        """Route the logging service into the probe log"""
        from ..services.logging_service import LogLevel

        style_map = {
            LogLevel.ERROR: "red",
            LogLevel.WARNING: "yellow",
            LogLevel.INFO: None,
            LogLevel.DEBUG: "dim",
            LogLevel.CRITICAL: "bold red",
        }

        def log_handler(message: str, level: LogLevel):
            self.probe_log.queue_message(message, style_map.get(level))

        self.logging_service.add_handler(log_handler)

    def _setup_process_output(self):
        """Route target stdout/stderr into the output viewer"""

        def on_stdout(line: str):
            self.target_output.queue_stdout(line)

        def on_stderr(line: str):
            self.target_output.queue_stderr(line)

        self.process_manager.subscribe_stdout(on_stdout)
        self.process_manager.subscribe_stderr(on_stderr)

    def _on_state_change(self, state: ProbeState):
        # State changes arrive on the probe worker thread
        self.call_from_thread(self._apply_state, state)

    def _apply_state(self, state: ProbeState):
        self.status_bar.update_from_state(state)
        self.samples_display.update_samples(list(state.samples_kb))

    def _process_queues(self):
        """Process all message queues"""
        self.probe_log.process_queue()
        self.target_output.process_queue()

    def _run_probe(self):
        """Worker body: run the probe to completion"""
        try:
            self.result = self.leak_probe.run()
        except (ProbeError, OSError, ValueError) as e:
            self.error = e
            self.logging_service.error(f"Probe aborted: {e}")
            self.state_manager.finish("error", f"Error: {e}")
            return

        self.logging_service.info("Probe finished; press q to exit")

    def on_unmount(self) -> None:
        # Quitting mid-run stops the target so the worker thread can finish
        self.process_manager.stop_current()

    def action_clear(self) -> None:
        """Clear both logs"""
        self.probe_log.clear()
        self.target_output.clear()

        # Re-add titles
        self.probe_log._initialized = False
        self.target_output._initialized = False
        self.probe_log.on_mount()
        self.target_output.on_mount()
