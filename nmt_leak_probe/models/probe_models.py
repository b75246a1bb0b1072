"""
Data models for the leak probe
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


@dataclass(frozen=True)
class Baseline:
    """Handle for an NMT baseline taken in one target process.

    Diffs are only meaningful against the process the baseline was taken in,
    so the handle carries that pid.
    """

    pid: int
    established_at: datetime


class ProbeOutcome(str, Enum):
    """Three-valued probe outcome"""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class HostInfo(BaseModel):
    """What we learned about the JVM under test"""
    java_binary: str
    java_version: str = "unknown"
    vm_name: str = "unknown"
    vm_version: str = "unknown"
    jdk_debug: Optional[str] = None  # "release", "fastdebug", ... (JDK 9+)
    is_debug_build: bool = False
    class_unloading: Optional[bool] = None  # None if the flag was not reported


class SystemInfo(BaseModel):
    """System information at probe start"""
    platform: str  # e.g., "darwin", "linux"
    platform_version: str
    hostname: str
    cpu_count: int
    total_memory_gb: float
    python_version: str


class ProbeConfiguration(BaseModel):
    """Probe settings recorded alongside the result"""
    cycles: int
    marker: str
    allow_missing_sample: bool
    target_command: List[str]
    jcmd_binary: str


class RoundResult(BaseModel):
    """One round: N load/unload cycles followed by one detail diff"""
    round_index: int  # 1-based
    cycles: int
    sample_kb: int
    marker_found: bool  # False means sample_kb was defaulted to 0
    report_lines: int
    target_rss_mb: Optional[float] = None
    start_time: str  # ISO format
    end_time: str


class ProbeResult(BaseModel):
    """Complete result of one probe run"""
    outcome: ProbeOutcome
    message: str

    first_sample_kb: Optional[int] = None
    second_sample_kb: Optional[int] = None
    rounds: List[RoundResult] = []

    target_pid: Optional[int] = None
    start_time: str
    end_time: str = ""

    host: Optional[HostInfo] = None
    system_info: Optional[SystemInfo] = None
    configuration: Optional[ProbeConfiguration] = None

    # Target output (last N lines)
    stdout_tail: List[str] = []
    stderr_tail: List[str] = []

    @property
    def leak_detected(self) -> bool:
        return self.outcome == ProbeOutcome.FAILED

    @property
    def exit_code(self) -> int:
        """Process exit code for this outcome (77 is the conventional 'skipped')"""
        return {
            ProbeOutcome.PASSED: 0,
            ProbeOutcome.FAILED: 1,
            ProbeOutcome.SKIPPED: 77,
        }[self.outcome]
