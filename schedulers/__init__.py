"""
CPU scheduling policies driving real processes
"""

from .basic_schedulers import FCFSScheduler, RoundRobinScheduler, FCFS, RoundRobin
from .advanced_schedulers import MLFQScheduler, MultiLevelFeedbackQueue
from .online_schedulers import SJFScheduler, ShortestJobFirst, EXIT_COMMAND

__all__ = [
    'FCFSScheduler',
    'RoundRobinScheduler',
    'MLFQScheduler',
    'SJFScheduler',
    'FCFS',
    'RoundRobin',
    'MultiLevelFeedbackQueue',
    'ShortestJobFirst',
    'EXIT_COMMAND'
]
