"""
Inspection of the JVM the probe runs against
"""

import logging
import subprocess
from typing import TYPE_CHECKING, Optional, Sequence

from ..models.probe_models import HostInfo
from ..utils.formatters import format_command
from ..utils.parsers import is_debug_build, parse_java_properties, parse_vm_flags

if TYPE_CHECKING:
    from ..config import Config
    from .logging_service import LoggingService

logger = logging.getLogger(__name__)


class HostService:
    """Decides whether the JVM can produce attributable NMT detail reports.

    Only debug builds reliably keep the Method::ensure_jmethod_ids frame in
    NMT call stacks; product builds may inline it away.
    """

    def __init__(self, config: "Config", logging_service: "LoggingService"):
        self.config = config
        self.logger = logging_service

    def inspect(self) -> HostInfo:
        """Query the target's java launcher for its properties and final VM flags.

        Flags are resolved with the target's own -XX options, so a
        -XX:-ClassUnloading on the target command line is seen here.
        """
        java = self.config.java_path
        properties = parse_java_properties(self._java_output("-XshowSettings:properties"))
        flags = parse_vm_flags(
            self._java_output("-XX:+PrintFlagsFinal", self.config.target_vm_flags)
        )

        class_unloading = None
        if "ClassUnloading" in flags:
            class_unloading = flags["ClassUnloading"].lower() == "true"

        host = HostInfo(
            java_binary=java,
            java_version=properties.get("java.version", "unknown"),
            vm_name=properties.get("java.vm.name", "unknown"),
            vm_version=properties.get("java.vm.version", "unknown"),
            jdk_debug=properties.get("jdk.debug"),
            is_debug_build=is_debug_build(properties),
            class_unloading=class_unloading,
        )
        self.logger.info(
            f"Host JVM: {host.vm_name} {host.vm_version} "
            f"(debug build: {host.is_debug_build}, class unloading: {host.class_unloading})"
        )
        return host

    @staticmethod
    def skip_reason(host: HostInfo) -> Optional[str]:
        """Why the probe cannot run on this host, or None if it can"""
        if not host.is_debug_build:
            return "Requires a debug build."
        if host.class_unloading is False:
            return "Requires class unloading (-XX:+ClassUnloading)."
        return None

    def _java_output(self, option: str, vm_flags: Sequence[str] = ()) -> str:
        # The launcher prints settings and the version banner to stderr
        cmd = [self.config.java_path] + list(vm_flags) + [option, "-version"]
        logger.debug(f"Running {format_command(cmd)}")
        result = subprocess.run(cmd, capture_output=True, text=True, check=False)
        if result.returncode != 0:
            logger.warning(f"{format_command(cmd)} exited with code {result.returncode}")
        return (result.stdout or "") + (result.stderr or "")
