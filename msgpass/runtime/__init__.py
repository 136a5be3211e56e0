"""
Runtime module: Schedules and external data handling.
"""

from msgpass.runtime.schedule import Resolution, ScheduleEntry, Schedule
from msgpass.runtime.data import read_buffer, observe

__all__ = [
    "Resolution",
    "ScheduleEntry",
    "Schedule",
    "read_buffer",
    "observe",
]
