"""
Formatting utilities for the leak probe
"""

from typing import List, Optional


def format_duration(seconds: float) -> str:
    """Format duration in seconds to a readable format like 01m:30.5s or 01h:05m:30s"""
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes:02d}m:{secs:04.1f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = seconds % 60
        return f"{hours:02d}h:{minutes:02d}m:{secs:02.0f}s"


def format_memory(memory_mb: float) -> str:
    """Format memory in MB to a readable format"""
    if memory_mb < 1024:
        return f"{memory_mb:.1f}MB"
    else:
        memory_gb = memory_mb / 1024
        return f"{memory_gb:.2f}GB"


def format_kb(value_kb: Optional[int]) -> str:
    """Format a sample in KB, or N/A if it was not captured"""
    if value_kb is None:
        return "N/A"
    return f"{value_kb:,}KB"


def format_growth(first_kb: Optional[int], second_kb: Optional[int]) -> str:
    """Format the change between two samples, e.g. '+136KB'"""
    if first_kb is None or second_kb is None:
        return "N/A"
    delta = second_kb - first_kb
    sign = "+" if delta > 0 else ""
    return f"{sign}{delta:,}KB"


def format_command(command: List[str]) -> str:
    """Join a command line for log output"""
    return " ".join(command)
