"""
Service layer for the leak probe
"""

from .host_service import HostService
from .logging_service import LoggingService
from .probe_service import LeakProbe, detect_growth
from .process_service import TargetProcessService
from .sampler_service import NativeMemorySampler

__all__ = [
    'HostService',
    'LeakProbe',
    'LoggingService',
    'NativeMemorySampler',
    'TargetProcessService',
    'detect_growth',
]
