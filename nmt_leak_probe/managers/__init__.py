"""
Manager components for the leak probe
"""

from .state_manager import StateManager, ProbeState
from .process_manager import ProcessManager

__all__ = [
    'StateManager',
    'ProbeState',
    'ProcessManager',
]
