"""
Leak probe: decides from two rounds of load/unload cycles whether the
native memory attributed to jmethodID blocks keeps growing
"""

import platform
import socket
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

import psutil

from ..errors import SampleNotFoundError, WorkloadError
from ..models.probe_models import (
    Baseline,
    ProbeConfiguration,
    ProbeOutcome,
    ProbeResult,
    RoundResult,
    SystemInfo,
)
from ..utils.formatters import format_growth, format_kb
from ..utils.parsers import parse_ensure_jmethod_ids_kb

# Type hints only - these are injected via DI
if TYPE_CHECKING:
    from ..config import Config
    from ..managers.process_manager import ProcessManager
    from ..managers.state_manager import StateManager
    from .host_service import HostService
    from .logging_service import LoggingService
    from .sampler_service import NativeMemorySampler


# Exactly two rounds are compared. A leak that only shows after a third
# round goes undetected.
ROUNDS = 2


def detect_growth(first_kb: int, second_kb: int) -> bool:
    """Verdict: the second sample is strictly larger than the first"""
    return second_kb > first_kb


def leak_message(first_kb: int, second_kb: int) -> str:
    return f"Found memory leak: Result 1: {first_kb}KB; Result 2: {second_kb}KB"


class LeakProbe:
    """Runs the two-round growth check against one target process"""

    def __init__(
        self,
        config: "Config",
        process_manager: "ProcessManager",
        sampler: "NativeMemorySampler",
        host_service: "HostService",
        state_manager: "StateManager",
        logging_service: "LoggingService",
    ):
        self.config = config
        self.process_manager = process_manager
        self.sampler = sampler
        self.host_service = host_service
        self.state_manager = state_manager
        self.logger = logging_service

        self.rounds: List[RoundResult] = []

    def run(self) -> ProbeResult:
        """Check the host, start the target, take the baseline and compare two rounds"""
        start_time = datetime.now()

        host = self.host_service.inspect()
        reason = self.host_service.skip_reason(host)
        if reason:
            self.logger.info(f"Skipped. {reason}")
            result = ProbeResult(
                outcome=ProbeOutcome.SKIPPED,
                message=reason,
                start_time=start_time.isoformat(),
                end_time=datetime.now().isoformat(),
                host=host,
                system_info=self._system_info(),
                configuration=self._configuration(),
            )
            self.state_manager.finish(result.outcome.value, f"Skipped: {reason}")
            self._save_result(result)
            return result

        self.state_manager.update_status("Starting target...")
        try:
            target = self.process_manager.start_target()
            self.state_manager.update_process_info(target.pid)
            baseline = self.sampler.establish_baseline(target.pid)
            result = self.detect_leak(baseline)
        except Exception as e:
            self.state_manager.abort(f"Aborted: {e}")
            raise
        finally:
            self.process_manager.stop_current()

        result.start_time = start_time.isoformat()
        result.host = host
        result.stdout_tail = list(target.stdout_buffer)
        result.stderr_tail = list(target.stderr_buffer)
        self._save_result(result)
        return result

    def detect_leak(self, baseline: Baseline) -> ProbeResult:
        """Run two rounds strictly in sequence and compare their samples"""
        start_time = datetime.now()
        self.rounds = []
        self.state_manager.start_probe(self.config.cycles, ROUNDS)

        try:
            first = self.capture_round(baseline, 1, self.config.cycles)
            second = self.capture_round(baseline, 2, self.config.cycles)
        except Exception as e:
            self.state_manager.abort(f"Aborted: {e}")
            raise

        if detect_growth(first.sample_kb, second.sample_kb):
            outcome = ProbeOutcome.FAILED
            message = leak_message(first.sample_kb, second.sample_kb)
            self.logger.error(f"Failed. {message}")
        else:
            outcome = ProbeOutcome.PASSED
            message = (
                f"No growth: Result 1: {first.sample_kb}KB; Result 2: {second.sample_kb}KB"
            )
            self.logger.info(f"Passed. {message}")
        self.logger.info(
            f"Change between rounds: {format_growth(first.sample_kb, second.sample_kb)}"
        )

        self.state_manager.finish(outcome.value, message)
        return ProbeResult(
            outcome=outcome,
            message=message,
            first_sample_kb=first.sample_kb,
            second_sample_kb=second.sample_kb,
            rounds=list(self.rounds),
            target_pid=baseline.pid,
            start_time=start_time.isoformat(),
            end_time=datetime.now().isoformat(),
            system_info=self._system_info(),
            configuration=self._configuration(),
        )

    def run_round(self, baseline: Baseline, cycles: Optional[int] = None) -> int:
        """Perform cycles units of work, then return the sample from a detail diff"""
        round_index = len(self.rounds) + 1
        if cycles is None:
            cycles = self.config.cycles
        return self.capture_round(baseline, round_index, cycles).sample_kb

    def capture_round(self, baseline: Baseline, round_index: int, cycles: int) -> RoundResult:
        """Like run_round, but return the full record of the round"""
        if cycles <= 0:
            raise ValueError(f"Cycle count must be positive, got {cycles}")

        target = self.process_manager.get_current_process()
        if target is None:
            raise WorkloadError("No target process is running")
        if target.pid != baseline.pid:
            raise WorkloadError(
                f"Baseline was taken in PID {baseline.pid}, target is PID {target.pid}"
            )

        start_time = datetime.now()
        self.state_manager.start_round(round_index)
        self.logger.info(f"Round {round_index}: running {cycles} load/unload cycles")
        for i in range(cycles):
            target.run_cycle()
            self.state_manager.cycle_completed(i + 1)

        self.state_manager.update_status(f"Round {round_index}: sampling")
        report = self.sampler.detail_diff(baseline)
        lines = report.splitlines()
        sample = parse_ensure_jmethod_ids_kb(lines, self.config.marker)

        marker_found = sample is not None
        if sample is None:
            if not self.config.allow_missing_sample:
                raise SampleNotFoundError(self.config.marker, round_index)
            self.logger.warning(
                f"Round {round_index}: no malloc= line after '{self.config.marker}', using 0"
            )
            sample = 0

        memory_stats = target.get_memory_usage()
        record = RoundResult(
            round_index=round_index,
            cycles=cycles,
            sample_kb=sample,
            marker_found=marker_found,
            report_lines=len(lines),
            target_rss_mb=memory_stats.get("rss"),
            start_time=start_time.isoformat(),
            end_time=datetime.now().isoformat(),
        )
        self.rounds.append(record)

        self.logger.info(
            f"Round {round_index}: used memory for {self.config.marker}: {format_kb(sample)}"
        )
        self.state_manager.record_sample(sample)
        self.state_manager.update_process_info(target.pid, memory_stats.get("rss", 0.0))
        return record

    def _configuration(self) -> ProbeConfiguration:
        return ProbeConfiguration(
            cycles=self.config.cycles,
            marker=self.config.marker,
            allow_missing_sample=self.config.allow_missing_sample,
            target_command=list(self.config.target_command),
            jcmd_binary=self.config.jcmd_path,
        )

    def _system_info(self) -> SystemInfo:
        """Gather system information"""
        return SystemInfo(
            platform=platform.system().lower(),
            platform_version=platform.platform(),
            hostname=socket.gethostname(),
            cpu_count=psutil.cpu_count() or 0,
            total_memory_gb=psutil.virtual_memory().total / (1024**3),
            python_version=sys.version.split()[0],
        )

    def _save_result(self, result: ProbeResult):
        """Save the probe result to JSON if an output directory is configured"""
        if not self.config.output_dir:
            return

        output_dir = Path(self.config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_file = output_dir / f"leak_probe_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"

        try:
            with open(output_file, "w") as f:
                f.write(result.model_dump_json(indent=2))
            self.logger.info(f"Results saved to: {output_file}")
        except OSError as e:
            self.logger.error(f"Error saving results: {e}")
