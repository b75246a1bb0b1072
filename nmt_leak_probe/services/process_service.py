"""
Process service that drives the target JVM over its stdin/stdout line protocol
"""

import logging
import os
import queue
import subprocess
import threading
from typing import TYPE_CHECKING, Callable, List, Optional

import psutil

from ..config import Config
from ..errors import WorkloadError
from ..utils.formatters import format_command

logger = logging.getLogger(__name__)

# Type hints only - these are injected via DI
if TYPE_CHECKING:
    from .logging_service import LoggingService

OUTPUT_TAIL_LINES = 100

# Put on the control queue when the target's stdout reaches EOF
_EOF = object()


class TargetProcessService:
    """Target JVM process that performs load/unload cycles on request.

    The target prints the ready token once it can accept commands, and answers
    each cycle command with the cycle acknowledgement after the classes have
    been loaded, dropped and unloading has been requested.
    """

    def __init__(
        self, command: List[str], name: str, config: Config, logging_service: "LoggingService"
    ):
        if logging_service is None:
            raise ValueError("logging_service is required")
        self.command = command
        self.name = name
        self.config = config
        self.logging_service = logging_service
        self.process: Optional[subprocess.Popen] = None
        self.pid: Optional[int] = None
        self.cycles_completed = 0

        # Output handling
        self.stdout_buffer: List[str] = []
        self.stderr_buffer: List[str] = []
        self._control_lines: "queue.Queue" = queue.Queue()
        self._output_threads: List[threading.Thread] = []

        # Callbacks
        self.stdout_callbacks: List[Callable[[str], None]] = []
        self.stderr_callbacks: List[Callable[[str], None]] = []

    def add_stdout_callback(self, callback: Callable[[str], None]):
        """Add a callback for stdout lines"""
        self.stdout_callbacks.append(callback)

    def add_stderr_callback(self, callback: Callable[[str], None]):
        """Add a callback for stderr lines"""
        self.stderr_callbacks.append(callback)

    def _build_env(self) -> dict:
        env = os.environ.copy()
        env["NO_COLOR"] = "1"

        # The java launcher reads extra options from JDK_JAVA_OPTIONS
        options = list(self.config.target_jvm_options)
        existing = env.get("JDK_JAVA_OPTIONS")
        if existing:
            options.insert(0, existing)
        if options:
            env["JDK_JAVA_OPTIONS"] = " ".join(options)
        return env

    def start(self) -> bool:
        """Start the target and block until it reports ready.

        Returns False if the target exits before the ready token appears.
        OSError from spawning propagates.
        """
        self.spawn()
        return self.wait_until_ready()

    def spawn(self):
        """Launch the target and its output capture threads without waiting"""
        logger.info(f"Starting {self.name} with command: {format_command(self.command)}")
        self.logging_service.info(f"Spawning target process: {self.command[0]}")

        self.process = subprocess.Popen(
            self.command,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            env=self._build_env(),
            bufsize=1,
            universal_newlines=True,
        )
        self.pid = self.process.pid
        logger.info(f"Started {self.name} with PID: {self.pid}")

        self._output_threads = [
            threading.Thread(
                target=self._capture_output_thread,
                args=(self.process.stdout, self.stdout_buffer, self.stdout_callbacks, True),
                daemon=True,
            ),
            threading.Thread(
                target=self._capture_output_thread,
                args=(self.process.stderr, self.stderr_buffer, self.stderr_callbacks, False),
                daemon=True,
            ),
        ]
        for thread in self._output_threads:
            thread.start()

    def wait_until_ready(self) -> bool:
        """Block until the ready token; False if the target exits or is stopped first"""
        try:
            self._wait_for(self.config.ready_token)
        except WorkloadError as e:
            self.logging_service.error(f"Failed to start {self.name}: {e}")
            return False
        return True

    def run_cycle(self):
        """Ask the target for one load/unload cycle and block until it is acknowledged"""
        if not self.process or not self.process.stdin:
            raise WorkloadError(f"{self.name} is not running")

        try:
            self.process.stdin.write(self.config.cycle_command + "\n")
            self.process.stdin.flush()
        except (BrokenPipeError, ValueError) as e:
            raise WorkloadError(f"{self.name} stopped accepting commands: {e}") from e

        self._wait_for(self.config.cycle_ack)
        self.cycles_completed += 1

    def _wait_for(self, token: str):
        """Block until the target prints token; no timeout"""
        while True:
            line = self._control_lines.get()
            if line is _EOF:
                code = self.process.wait() if self.process else None
                raise WorkloadError(
                    f"{self.name} exited with code {code} while waiting for '{token}'"
                )
            if line == token:
                return

    def stop(self):
        """Stop the target process"""
        if not self.process:
            return

        try:
            logger.info(f"Stopping {self.name}...")
            if self.process.stdin and not self.process.stdin.closed:
                try:
                    self.process.stdin.close()
                except BrokenPipeError:
                    pass
            self.process.terminate()

            # Wait for graceful shutdown
            try:
                self.process.wait(timeout=10)
                logger.info(f"Gracefully stopped {self.name}")
            except subprocess.TimeoutExpired:
                logger.warning(f"Force killing {self.name}")
                self.process.kill()
                self.process.wait()

        except Exception as e:
            logger.error(f"Error stopping {self.name}: {e}")

        for thread in self._output_threads:
            thread.join(timeout=2)

    def is_alive(self) -> bool:
        """Check if the process is still running"""
        if not self.process:
            return False
        return self.process.poll() is None

    def get_memory_usage(self) -> dict:
        """Get memory usage statistics for the process"""
        if not self.pid:
            return {}

        try:
            process = psutil.Process(self.pid)
            if not process.is_running():
                return {}

            memory_info = process.memory_info()
            memory_percent = process.memory_percent()

            return {
                "rss": memory_info.rss / (1024 * 1024),  # MB
                "vms": memory_info.vms / (1024 * 1024),  # MB
                "percent": memory_percent,
                "num_threads": process.num_threads(),
            }
        except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
            return {}

    def _capture_output_thread(
        self,
        stream,
        buffer: List[str],
        callbacks: List[Callable[[str], None]],
        is_control: bool,
    ):
        """Thread function that reads one stream until EOF"""
        try:
            for raw_line in iter(stream.readline, ""):
                line = raw_line.strip()
                buffer.append(line)
                if len(buffer) > OUTPUT_TAIL_LINES:
                    buffer.pop(0)

                if is_control and line in (self.config.ready_token, self.config.cycle_ack):
                    self._control_lines.put(line)

                # Notify callbacks
                for callback in callbacks:
                    try:
                        callback(line)
                    except Exception as e:
                        logger.error(f"Output callback error: {e}")
        except (OSError, ValueError) as e:
            logger.debug(f"Error in output capture thread: {e}")
        finally:
            if is_control:
                self._control_lines.put(_EOF)
