"""
Exceptions raised by the leak probe
"""

from typing import Optional


class ProbeError(RuntimeError):
    """Base class for errors that abort a probe run"""


class SamplerError(ProbeError):
    """jcmd failed or returned output we cannot use"""

    def __init__(self, message: str, command: Optional[list] = None, output: str = ""):
        super().__init__(message)
        self.command = command
        self.output = output


class WorkloadError(ProbeError):
    """The target process exited or broke the line protocol"""


class SampleNotFoundError(ProbeError):
    """The report carries no malloc line after the marker"""

    def __init__(self, marker: str, round_index: int):
        super().__init__(f"No malloc= line found after '{marker}' in round {round_index} report")
        self.marker = marker
        self.round_index = round_index


class ReportParseError(ValueError):
    """A malloc= line was found but its value could not be read"""

    def __init__(self, line: str, reason: str):
        super().__init__(f"Cannot parse malloc value ({reason}): {line.strip()!r}")
        self.line = line
        self.reason = reason
