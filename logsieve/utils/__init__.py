"""
Utilities package for logsieve.

Exports shared helpers for logging, profiling and safe serialization.
Keep this package lightweight and free of admission logic.
"""

from logsieve.utils.logging import configure_logging, get_logger
from logsieve.utils.profiler import ProfileStats, profile_block
from logsieve.utils.serialization import safe_dumps

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
    "safe_dumps",
]
