"""
Process management for the target JVM
"""

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Callable, List, Optional

from ..config import Config
from ..errors import WorkloadError
from ..services.process_service import TargetProcessService

if TYPE_CHECKING:
    from ..services.logging_service import LoggingService

logger = logging.getLogger(__name__)


class ProcessManager:
    """Owns the single target process of a probe run"""

    def __init__(self, config: Config, logging_service: "LoggingService"):
        if logging_service is None:
            raise ValueError("logging_service is required")
        self.config = config
        self.logging_service = logging_service
        self.current_process: Optional[TargetProcessService] = None
        self._lock = threading.Lock()
        self._stdout_callbacks: List[Callable[[str], None]] = []
        self._stderr_callbacks: List[Callable[[str], None]] = []

    def subscribe_stdout(self, callback: Callable[[str], None]):
        """Subscribe to stdout output"""
        self._stdout_callbacks.append(callback)
        # If process already running, add to it
        if self.current_process:
            self.current_process.add_stdout_callback(callback)

    def subscribe_stderr(self, callback: Callable[[str], None]):
        """Subscribe to stderr output"""
        self._stderr_callbacks.append(callback)
        if self.current_process:
            self.current_process.add_stderr_callback(callback)

    def start_target(self) -> TargetProcessService:
        """Start the target process, replacing any previous one.

        The lock covers spawning only. Waiting for the ready token happens
        outside it, so stop_current can end a target that never gets ready.
        """
        with self._lock:
            if self.current_process and self.current_process.is_alive():
                logger.info(f"Stopping existing process {self.current_process.name}")
                self.current_process.stop()

            name = Path(self.config.target_command[0]).name
            target = TargetProcessService(
                self.config.target_command, name, self.config, self.logging_service
            )

            # Hook up output callbacks
            for callback in self._stdout_callbacks:
                target.add_stdout_callback(callback)
            for callback in self._stderr_callbacks:
                target.add_stderr_callback(callback)

            target.spawn()
            self.current_process = target

        if target.wait_until_ready():
            logger.info(f"Successfully started {name} (PID: {target.pid})")
            return target

        with self._lock:
            if self.current_process is target:
                self.current_process = None
        target.stop()
        raise WorkloadError(f"Failed to start target process {name}")

    def stop_current(self):
        """Stop the current process"""
        with self._lock:
            if self.current_process:
                logger.info(f"Stopping process {self.current_process.name}")
                self.current_process.stop()

    def get_current_process(self) -> Optional[TargetProcessService]:
        """Get the current process"""
        return self.current_process

