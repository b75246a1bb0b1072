"""
UI components for the dashboard
"""

from .log_viewer import ProbeLogViewer, TargetOutputViewer
from .samples_display import SamplesDisplay
from .status_bar import StatusBar, StatusItem

__all__ = [
    "StatusBar",
    "StatusItem",
    "ProbeLogViewer",
    "TargetOutputViewer",
    "SamplesDisplay",
]
