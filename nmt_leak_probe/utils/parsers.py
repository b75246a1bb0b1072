"""
Parsing utilities for jcmd and java console output
"""

import logging
import re
from typing import Dict, Iterable, Optional

from ..errors import ReportParseError

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "Method::ensure_jmethod_ids"
MALLOC_TOKEN = "malloc="

# Samples are always requested and reported in kilobytes
SAMPLE_UNIT = "KB"

# e.g. "     bool ClassUnloading          = true          {product} {default}"
_VM_FLAG_RE = re.compile(r"^\s*(?P<type>[\w:]+)\s+(?P<name>\w+)\s+:?=\s+(?P<value>\S*)")


def parse_malloc_kb(line: str, unit: str = SAMPLE_UNIT) -> int:
    """Extract the integer between the first '=' and the following '<unit> ' token.

    "(malloc=120KB type=Internal +120KB #2)" -> 120
    """
    start = line.find("=")
    if start < 0:
        raise ReportParseError(line, "no '='")
    start += 1

    end = line.find(f"{unit} ", start)
    if end < 0:
        raise ReportParseError(line, f"no '{unit} ' after '='")

    value = line[start:end].strip()
    if not value.isdigit():
        raise ReportParseError(line, f"'{value}' is not a decimal integer")
    return int(value)


def _is_frame_line(line: str) -> bool:
    return line.lstrip().startswith("[0x")


def parse_ensure_jmethod_ids_kb(
    lines: Iterable[str], marker: str = DEFAULT_MARKER, unit: str = SAMPLE_UNIT
) -> Optional[int]:
    """Find the malloc figure attributed to the marker frame in an NMT detail report.

    A call site in a detail report is a run of "[0x...]" frame lines closed by
    its "(malloc=...)" line. Returns the value from the malloc line of the first
    site whose frames include the marker, or None when no such site has one.
    A blank line or any other text ends the marker's site.
    """
    in_marker_site = False
    for line in lines:
        if marker in line:
            in_marker_site = True
            continue
        if not in_marker_site:
            continue

        if MALLOC_TOKEN in line:
            value = parse_malloc_kb(line, unit)
            logger.debug(f"Used memory for {marker}: {value}{unit}")
            return value
        if not _is_frame_line(line):
            logger.debug(f"Call site of '{marker}' ends without a {MALLOC_TOKEN} line")
            in_marker_site = False

    return None


def nmt_disabled(output: str) -> bool:
    """Detect jcmd's answer when the target was started without NMT."""
    return "native memory tracking is not enabled" in output.lower()


def parse_java_properties(output: str) -> Dict[str, str]:
    """Parse `java -XshowSettings:properties -version` output into a dict.

    Continuation lines of multi-valued properties (paths) are skipped.
    """
    properties = {}
    for line in output.splitlines():
        if " = " not in line:
            continue
        key, value = line.split(" = ", 1)
        key = key.strip()
        if not key or " " in key:
            continue
        properties[key] = value.strip()
    return properties


def parse_vm_flags(output: str) -> Dict[str, str]:
    """Parse `java -XX:+PrintFlagsFinal -version` output into {flag: value}."""
    flags = {}
    for line in output.splitlines():
        match = _VM_FLAG_RE.match(line)
        if match:
            flags[match.group("name")] = match.group("value")
    return flags


def is_debug_build(properties: Dict[str, str]) -> bool:
    """Decide whether the JVM is a debug build from its system properties.

    Newer JDKs publish jdk.debug ("release", "fastdebug", "slowdebug");
    older ones only mark the version strings.
    """
    jdk_debug = properties.get("jdk.debug")
    if jdk_debug:
        return "debug" in jdk_debug.lower()

    vm_version = properties.get("java.vm.version", "")
    java_version = properties.get("java.version", "")
    return "debug" in vm_version.lower() or "debug" in java_version.lower()
