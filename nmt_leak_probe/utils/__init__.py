"""
Utility functions for the leak probe
"""

from .parsers import (
    is_debug_build,
    nmt_disabled,
    parse_ensure_jmethod_ids_kb,
    parse_java_properties,
    parse_malloc_kb,
    parse_vm_flags,
)
from .formatters import format_command, format_duration, format_growth, format_kb, format_memory

__all__ = [
    # Parsers
    'is_debug_build',
    'nmt_disabled',
    'parse_ensure_jmethod_ids_kb',
    'parse_java_properties',
    'parse_malloc_kb',
    'parse_vm_flags',
    # Formatters
    'format_command',
    'format_duration',
    'format_growth',
    'format_kb',
    'format_memory',
]
