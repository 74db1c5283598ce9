"""
Core modules for the process scheduling engine
"""

from .process import Process, ProcessState, Workload, create_process_copy
from .clock import Clock, SystemClock
from .errors import SchedulerError, SpawnError, ReportError
from .harness import ChildProcess, ExecutionHarness, split_command
from .stats import CommandStatistic, CommandStatsStore, DEFAULT_PREDICTED_BURST_MS
from .report import SummaryWriter, write_summary, read_summary, SUMMARY_HEADER
from .scheduler_base import BaseScheduler, SchedulerStats, GanttEntry, NUM_QUEUES

__all__ = [
    'Process',
    'ProcessState',
    'Workload',
    'create_process_copy',
    'Clock',
    'SystemClock',
    'SchedulerError',
    'SpawnError',
    'ReportError',
    'ChildProcess',
    'ExecutionHarness',
    'split_command',
    'CommandStatistic',
    'CommandStatsStore',
    'DEFAULT_PREDICTED_BURST_MS',
    'SummaryWriter',
    'write_summary',
    'read_summary',
    'SUMMARY_HEADER',
    'BaseScheduler',
    'SchedulerStats',
    'GanttEntry',
    'NUM_QUEUES'
]
