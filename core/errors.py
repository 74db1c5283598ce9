"""
Scheduler exceptions
"""


class SchedulerError(Exception):
    """Base class for scheduling engine errors"""


class SpawnError(SchedulerError):
    """A process or its communication channels could not be created"""


class ReportError(SchedulerError):
    """The summary file could not be written"""
