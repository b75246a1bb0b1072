"""
Log viewer components for the dashboard
"""

import queue
from typing import Optional

from rich.text import Text
from textual.widgets import RichLog


class QueuedLogViewer(RichLog):
    """Log viewer that processes messages from a queue.

    Messages may be queued from any thread; process_queue runs on the UI thread.
    """

    def __init__(self, title: str, title_style: str = "bold cyan", *args, **kwargs):
        kwargs['auto_scroll'] = kwargs.get('auto_scroll', True)
        super().__init__(*args, **kwargs)
        self.title = title
        self.title_style = title_style
        self.message_queue: "queue.Queue" = queue.Queue()
        self._initialized = False
        self.can_focus = True

    def on_mount(self):
        """Initialize the log when mounted"""
        if not self._initialized:
            self.write(Text(self.title, style=self.title_style))
            self.write("-" * 60)
            self._initialized = True

    def queue_message(self, message: str, style: Optional[str] = None):
        """Add a message to the queue"""
        self.message_queue.put((message, style))

    def process_queue(self, max_messages: int = 50):
        """Process messages from the queue"""
        count = 0
        while count < max_messages:
            try:
                message, style = self.message_queue.get_nowait()
            except queue.Empty:
                break
            if style:
                self.write(Text(message, style=style))
            else:
                self.write(Text(message))
            count += 1


class ProbeLogViewer(QueuedLogViewer):
    """Log viewer for probe output"""

    def __init__(self):
        super().__init__(
            title="Leak Probe Log",
            title_style="bold cyan",
            highlight=True,
            markup=True,
            wrap=True,
            auto_scroll=True,
            id="probe-richlog"
        )


class TargetOutputViewer(QueuedLogViewer):
    """Log viewer for target JVM output"""

    def __init__(self):
        super().__init__(
            title="Target Output",
            title_style="bold green",
            highlight=True,
            markup=True,
            wrap=True,
            auto_scroll=True,
            id="target-richlog"
        )

    def queue_stdout(self, line: str):
        """Queue a stdout line"""
        self.queue_message(f"[stdout] {line}", "cyan")

    def queue_stderr(self, line: str):
        """Queue a stderr line"""
        self.queue_message(f"[stderr] {line}", "yellow")
