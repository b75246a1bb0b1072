"""
Centralized state management for the probe
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ProbeState:
    """Current probe state"""

    # Progress
    current_status: str = "Initializing..."
    current_round: int = 0
    total_rounds: int = 2
    cycles_completed: int = 0  # within the current round
    cycles_per_round: int = 0

    # Samples captured so far, one per finished round
    samples_kb: List[int] = field(default_factory=list)

    # Target process
    target_pid: Optional[int] = None
    current_memory_mb: float = 0.0

    # Final outcome ("passed", "failed", "skipped"), None while running
    outcome: Optional[str] = None
    is_running: bool = False


class StateManager:
    """Holds probe state and notifies observers on every change.

    Updates come from the probe thread; observers must marshal to their own
    thread if they need to.
    """

    def __init__(self):
        self.state = ProbeState()
        self._lock = threading.Lock()
        self._observers: List[Callable[[ProbeState], None]] = []

    def subscribe(self, callback: Callable[[ProbeState], None]) -> Callable:
        """Subscribe to state changes"""
        self._observers.append(callback)
        return callback

    def unsubscribe(self, callback: Callable[[ProbeState], None]):
        """Unsubscribe from state changes"""
        if callback in self._observers:
            self._observers.remove(callback)

    def update_status(self, status: str):
        with self._lock:
            self.state.current_status = status
        self._notify_observers()

    def start_probe(self, cycles_per_round: int, total_rounds: int = 2):
        with self._lock:
            self.state.is_running = True
            self.state.outcome = None
            self.state.samples_kb = []
            self.state.current_round = 0
            self.state.cycles_completed = 0
            self.state.cycles_per_round = cycles_per_round
            self.state.total_rounds = total_rounds
        self._notify_observers()

    def start_round(self, round_index: int):
        with self._lock:
            self.state.current_round = round_index
            self.state.cycles_completed = 0
            self.state.current_status = f"Round {round_index}: cycling"
        self._notify_observers()

    def cycle_completed(self, cycles_completed: int):
        with self._lock:
            self.state.cycles_completed = cycles_completed
        self._notify_observers()

    def record_sample(self, sample_kb: int):
        with self._lock:
            self.state.samples_kb.append(sample_kb)
        self._notify_observers()

    def update_process_info(self, pid: Optional[int], memory_mb: float = 0.0):
        with self._lock:
            self.state.target_pid = pid
            self.state.current_memory_mb = memory_mb
        self._notify_observers()

    def finish(self, outcome: str, status: str):
        with self._lock:
            self.state.outcome = outcome
            self.state.is_running = False
            self.state.current_status = status
        self._notify_observers()

    def abort(self, status: str):
        """End the run without an outcome"""
        with self._lock:
            self.state.is_running = False
            self.state.current_status = status
        self._notify_observers()

    def get_state(self) -> ProbeState:
        """Get current state"""
        return self.state

    def _notify_observers(self):
        """Notify all observers of state change"""
        for callback in list(self._observers):
            try:
                callback(self.state)
            except Exception as e:
                # Log but don't crash on observer errors
                logger.error(f"Observer callback error: {e}")
