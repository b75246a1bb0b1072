"""
Data models for the leak probe
"""

from .probe_models import (
    Baseline,
    HostInfo,
    ProbeConfiguration,
    ProbeOutcome,
    ProbeResult,
    RoundResult,
    SystemInfo,
)

__all__ = [
    'Baseline',
    'HostInfo',
    'ProbeConfiguration',
    'ProbeOutcome',
    'ProbeResult',
    'RoundResult',
    'SystemInfo',
]
