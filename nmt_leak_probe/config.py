"""Configuration module for the leak probe."""

import os
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.parsers import DEFAULT_MARKER

# The two probe classes declare 11 methods between them, more than the initial
# JNIMethodBlock capacity of 8, so every cycle links at least two block nodes.
# Ten cycles per round exercise node allocation and freeing enough times for a
# leak to show up as growth between rounds.
DEFAULT_CYCLES = 10

# Options the target JVM needs for NMT detail reports to attribute mallocs
# to Method::ensure_jmethod_ids. Passed through JDK_JAVA_OPTIONS.
DEFAULT_TARGET_JVM_OPTIONS = [
    "-Xmn8m",
    "-XX:+UnlockDiagnosticVMOptions",
    "-XX:NativeMemoryTracking=detail",
    "-Xlog:class+unload=trace",
]


class Config(BaseSettings):
    """Configuration for the leak probe."""

    model_config = SettingsConfigDict(env_prefix="LEAK_PROBE_", extra="forbid")

    # Command that starts the target JVM (java ... <driver class>)
    target_command: List[str]
    target_jvm_options: List[str] = Field(default_factory=lambda: list(DEFAULT_TARGET_JVM_OPTIONS))

    # JDK tools
    java_home: Optional[str] = Field(default=None)
    java_binary: Optional[str] = Field(default=None)
    jcmd_binary: Optional[str] = Field(default=None)

    # Probe parameters
    cycles: int = Field(default=DEFAULT_CYCLES)
    marker: str = Field(default=DEFAULT_MARKER)
    allow_missing_sample: bool = Field(default=True)

    # Target line protocol
    ready_token: str = Field(default="READY")
    cycle_command: str = Field(default="CYCLE")
    cycle_ack: str = Field(default="CYCLE DONE")

    # Results
    output_dir: Optional[str] = Field(default=None)

    @field_validator('target_command')
    def validate_target_command(cls, v):
        """Validate target command."""
        if not v:
            raise ValueError("Target command must not be empty")
        return v

    @field_validator('cycles')
    def validate_cycles(cls, v):
        """Validate cycle count."""
        if v <= 0:
            raise ValueError("Cycle count must be positive")
        return v

    @field_validator('marker', 'ready_token', 'cycle_command', 'cycle_ack')
    def validate_not_blank(cls, v):
        """Validate protocol tokens."""
        if not v.strip():
            raise ValueError("Value must not be blank")
        return v

    def _jdk_bin_dir(self) -> Optional[str]:
        """bin/ directory of the JDK that runs the target"""
        if self.java_home:
            return os.path.join(self.java_home, "bin")
        launcher_dir = os.path.dirname(self.target_command[0])
        return launcher_dir or None

    def _jdk_tool(self, name: str) -> str:
        bin_dir = self._jdk_bin_dir()
        if bin_dir:
            return os.path.join(bin_dir, name)
        return name

    @property
    def java_path(self) -> str:
        """java launcher used for host inspection.

        Without java_home this is the target's own launcher, so the checked
        JVM is the one under test.
        """
        if self.java_binary:
            return self.java_binary
        if self.java_home:
            return self._jdk_tool("java")
        return self.target_command[0]

    @property
    def jcmd_path(self) -> str:
        """jcmd used for NMT baseline and diffs"""
        return self.jcmd_binary or self._jdk_tool("jcmd")

    @property
    def target_vm_flags(self) -> List[str]:
        """-XX options the target runs with, in the order the launcher sees them"""
        options = list(self.target_jvm_options) + list(self.target_command[1:])
        return [option for option in options if option.startswith("-XX:")]
