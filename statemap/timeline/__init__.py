"""
Timeline Module — State accumulation before emission.
"""

from .clock import CalendarTime, Timestamp, to_epoch_nanos
from .store import TimelineStore

__all__ = [
    "TimelineStore",
    "CalendarTime",
    "Timestamp",
    "to_epoch_nanos",
]
