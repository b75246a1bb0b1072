"""
Native Memory Tracking sampler backed by jcmd
"""

import logging
import subprocess
from datetime import datetime
from typing import TYPE_CHECKING, List

import psutil

from ..errors import SamplerError
from ..models.probe_models import Baseline
from ..utils.formatters import format_command
from ..utils.parsers import SAMPLE_UNIT, nmt_disabled

if TYPE_CHECKING:
    from ..config import Config
    from .logging_service import LoggingService

logger = logging.getLogger(__name__)


class NativeMemorySampler:
    """Runs `jcmd <pid> VM.native_memory ...` against the target.

    Each call blocks until jcmd exits; there is no timeout. A missing jcmd
    binary surfaces as the OSError raised by subprocess.
    """

    def __init__(self, config: "Config", logging_service: "LoggingService"):
        self.config = config
        self.logger = logging_service

    def establish_baseline(self, pid: int) -> Baseline:
        """Mark the target's current NMT state as the baseline for later diffs"""
        output = self._jcmd(pid, "VM.native_memory", "baseline=true")
        logger.debug(f"Baseline output for {pid}:\n{output}")
        baseline = Baseline(pid=pid, established_at=datetime.now())
        self.logger.info(f"NMT baseline established for PID {pid}")
        return baseline

    def detail_diff(self, baseline: Baseline) -> str:
        """Return the full detail.diff report against baseline in kilobytes"""
        output = self._jcmd(
            baseline.pid, "VM.native_memory", "detail.diff", f"scale={SAMPLE_UNIT}"
        )
        logger.debug(f"detail.diff for {baseline.pid}: {len(output.splitlines())} lines")
        return output

    def _command(self, pid: int, args: List[str]) -> List[str]:
        return [self.config.jcmd_path, str(pid)] + list(args)

    def _jcmd(self, pid: int, *args: str) -> str:
        if not psutil.pid_exists(pid):
            raise SamplerError(f"Target process {pid} is not running")

        cmd = self._command(pid, list(args))
        logger.info(f"Running {format_command(cmd)}")

        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        output = result.stdout or ""
        if result.stderr:
            output += result.stderr

        if result.returncode != 0:
            raise SamplerError(
                f"jcmd exited with code {result.returncode}: {output.strip()[:200]}",
                command=cmd,
                output=output,
            )
        if nmt_disabled(output):
            raise SamplerError(
                f"Native memory tracking is not enabled in process {pid}",
                command=cmd,
                output=output,
            )
        return output
