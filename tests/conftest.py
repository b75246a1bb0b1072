from datetime import datetime
from typing import List, Optional

import pytest

from nmt_leak_probe.config import Config
from nmt_leak_probe.managers.state_manager import StateManager
from nmt_leak_probe.models.probe_models import Baseline, HostInfo
from nmt_leak_probe.services.host_service import HostService
from nmt_leak_probe.services.logging_service import LoggingService
from nmt_leak_probe.services.probe_service import LeakProbe

MARKER = "Method::ensure_jmethod_ids"


def nmt_report(malloc_kb: Optional[int], frames_between: int = 0) -> str:
    """Build a detail.diff report shaped like jcmd's output.

    With malloc_kb None the marker frame is present but no malloc line follows.
    """
    lines = [
        "Native Memory Tracking:",
        "",
        "(Omitting categories weighting less than 1KB)",
        "",
        "Total: reserved=1470632KB +1102KB, committed=88060KB +1166KB",
        "",
        "-                     Internal (reserved=1156KB +141KB, committed=1156KB +141KB)",
        "                            (malloc=1124KB type=Internal +141KB #4302 +1522)",
        "",
        "Details:",
        "",
        "[0x00007f3c9a8b1d4e] Symbol::operator new(unsigned long, int)+0x2e",
        "[0x00007f3c9a8b2e5f] SymbolTable::do_add_if_needed(char const*, int, unsigned long, bool)+0x9c",
        "                             (malloc=48KB type=Symbol +12KB #610 +152)",
        "",
        f"[0x00007f3c9a6f7a1b] {MARKER}(methodHandle const&, int)+0x5b",
    ]
    lines += [f"[0x00007f3c9a6f8b2c] frame_{i}()+0x1c" for i in range(frames_between)]
    if malloc_kb is not None:
        lines.append(
            f"                             (malloc={malloc_kb}KB type=Internal +{malloc_kb}KB #22 +22)"
        )
    lines += [
        "",
        "[0x00007f3c9a7c0d3e] ChunkPool::allocate(unsigned long, AllocFailStrategy::AllocFailEnum)+0x3d",
        "                             (malloc=320KB type=Other -64KB #10 -2)",
        "",
    ]
    return "\n".join(lines)


class FakeTarget:
    def __init__(self, pid: int = 4242):
        self.pid = pid
        self.name = "java"
        self.cycles_completed = 0
        self.stdout_buffer = ["READY", "CYCLE DONE"]
        self.stderr_buffer = []

    def run_cycle(self):
        self.cycles_completed += 1

    def get_memory_usage(self) -> dict:
        return {"rss": 64.0, "vms": 2048.0, "percent": 0.4, "num_threads": 18}


class FakeProcessManager:
    def __init__(self, target: Optional[FakeTarget] = None):
        self.target = target or FakeTarget()
        self.current_process = None
        self.started = 0
        self.stopped = 0
        self.stdout_callbacks = []
        self.stderr_callbacks = []

    def subscribe_stdout(self, callback):
        self.stdout_callbacks.append(callback)

    def subscribe_stderr(self, callback):
        self.stderr_callbacks.append(callback)

    def start_target(self):
        self.started += 1
        self.current_process = self.target
        return self.target

    def stop_current(self):
        self.stopped += 1

    def get_current_process(self):
        return self.current_process


class FakeSampler:
    """Hands out the given reports in order, one per detail_diff call"""

    def __init__(self, reports: List[str]):
        self.reports = list(reports)
        self.calls: List[str] = []

    def establish_baseline(self, pid: int) -> Baseline:
        self.calls.append("baseline")
        return Baseline(pid=pid, established_at=datetime.now())

    def detail_diff(self, baseline: Baseline) -> str:
        self.calls.append("detail.diff")
        return self.reports.pop(0)


class FakeHostService:
    def __init__(self, debug: bool = True, class_unloading: Optional[bool] = True):
        self.host = HostInfo(
            java_binary="java",
            java_version="21-internal",
            vm_name="OpenJDK 64-Bit Server VM",
            vm_version="21-internal-adhoc.builder.jdk",
            jdk_debug="fastdebug" if debug else "release",
            is_debug_build=debug,
            class_unloading=class_unloading,
        )
        self.inspected = 0

    def inspect(self) -> HostInfo:
        self.inspected += 1
        return self.host

    skip_reason = staticmethod(HostService.skip_reason)


@pytest.fixture
def config():
    return Config(target_command=["java", "-cp", "classes", "LeakDriver"])


@pytest.fixture
def logging_service():
    return LoggingService()


@pytest.fixture
def state_manager():
    return StateManager()


@pytest.fixture
def make_probe(config, logging_service, state_manager):
    def _make(reports, debug=True, config_overrides=None, class_unloading=True):
        probe_config = config.model_copy(update=config_overrides or {})
        process_manager = FakeProcessManager()
        sampler = FakeSampler(reports)
        host = FakeHostService(debug=debug, class_unloading=class_unloading)
        probe = LeakProbe(
            config=probe_config,
            process_manager=process_manager,
            sampler=sampler,
            host_service=host,
            state_manager=state_manager,
            logging_service=logging_service,
        )
        return probe, process_manager, sampler, host

    return _make
