"""
Process (work item) and workload context
"""

from enum import Enum
from typing import Iterator, List, Optional
from copy import deepcopy


class ProcessState(Enum):
    """Process state"""
    NEW = "New"
    READY = "Ready"
    RUNNING = "Running"
    STOPPED = "Stopped"
    DONE = "Done"


class Process:
    """
    One scheduled unit of work: an external command plus its timing record.

    All times are integer milliseconds on the scheduler's logical clock.
    """

    def __init__(self, command: str, arrival_time: int = 0, index: int = 0):
        """
        Args:
            command: command line to execute (split on single spaces)
            arrival_time: logical arrival time
            index: position in the workload (tie-breaker for SJF)
        """
        self.command = command
        self.index = index
        self.arrival_time = arrival_time
        self.reset()

    def reset(self):
        """Clear everything a scheduler run writes."""
        self.state = ProcessState.NEW
        self.start_time: Optional[int] = None
        self.completion_time: Optional[int] = None
        self.burst_time = 0
        self.turnaround_time = 0
        self.waiting_time = 0
        self.response_time = 0

        self.error = False
        self.started = False
        self.completed = False
        self.output = ""
        self.pid: Optional[int] = None

        # last dispatch window, used for the context switch trace
        self.switch_in_time: Optional[int] = None
        self.switch_out_time: Optional[int] = None

        # MLFQ only
        self.current_queue = 0
        self.time_in_queue = 0

    def calculate_time_metrics(self):
        """
        Derive turnaround, waiting and response time.

        waiting is computed from turnaround so that
        turnaround == waiting + burst holds exactly.
        """
        self.turnaround_time = self.completion_time - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time
        self.response_time = self.start_time - self.arrival_time

    def is_completed(self) -> bool:
        return self.completed

    def __repr__(self):
        return f"Process({self.command!r})[{self.state.value}]"

    def __str__(self):
        return f"Process {self.index}: {self.command!r} State={self.state.value}, " \
               f"Burst={self.burst_time}"


def create_process_copy(process: Process) -> Process:
    """
    Deep copy of a process, so every policy run starts from a clean record
    """
    return deepcopy(process)


class Workload:
    """
    Workload context shared by a scheduler run.

    Owns the process collection; offline batches are filled up front,
    the online engine appends as commands arrive.
    """

    def __init__(self, processes: Optional[List[Process]] = None):
        self.processes: List[Process] = []
        for process in processes or []:
            self.append(process)

    @classmethod
    def from_commands(cls, commands: List[str]) -> "Workload":
        return cls([Process(command) for command in commands])

    def append(self, process: Process) -> Process:
        process.index = len(self.processes)
        self.processes.append(process)
        return process

    def add(self, command: str, arrival_time: int = 0) -> Process:
        """Create a process for `command` and append it."""
        return self.append(Process(command, arrival_time))

    def unfinished(self) -> List[Process]:
        return [p for p in self.processes if not p.completed]

    def completed_count(self) -> int:
        return sum(1 for p in self.processes if p.completed)

    def all_completed(self) -> bool:
        return self.completed_count() == len(self.processes)

    def __len__(self) -> int:
        return len(self.processes)

    def __iter__(self) -> Iterator[Process]:
        return iter(self.processes)

    def __getitem__(self, i: int) -> Process:
        return self.processes[i]
