"""
Basic offline scheduling algorithms
- FCFS (First-Come, First-Served)
- Round Robin

Both run a fixed batch of real commands; every process arrives at time 0.
"""

from typing import List, Optional, Dict, Union
from core.process import Process, Workload
from core.scheduler_base import BaseScheduler


class FCFSScheduler(BaseScheduler):
    """
    FCFS (First-Come, First-Served) scheduler
    Non-preemptive: processes run one at a time, in order, to completion.
    The burst is the measured wall-clock duration of the command.
    """

    result_file = "result_offline_FCFS.csv"

    def __init__(self, processes: Union[Workload, List[Process]], **kwargs):
        super().__init__(processes, "FCFS", **kwargs)

    def select_next_process(self) -> Optional[Process]:
        """First unfinished process in submission order"""
        for process in self.processes:
            if not process.completed:
                return process
        return None

    def run(self, verbose: bool = False) -> Dict:
        """Run FCFS"""
        self.prepare()
        self.log_event(f"===== {self.name} Scheduling Started =====")

        process = self.select_next_process()
        while process is not None:
            started_at = self.clock.now_ms()
            child = self.dispatch(process)
            child.wait()

            burst = self.clock.now_ms() - started_at
            process.burst_time = burst
            self.stats.cpu_busy_time += burst
            self.current_time += burst

            self.terminate_process(process)
            self.record_switch_out(process)
            process = self.select_next_process()

        return self.finish_run(verbose)


class RoundRobinScheduler(BaseScheduler):
    """
    Round Robin scheduler
    Every unfinished process gets one quantum per round, in array order.
    Preemption is a SIGSTOP of the live child, resumption a SIGCONT.
    """

    result_file = "result_offline_RR.csv"

    def __init__(self, processes: Union[Workload, List[Process]], quantum: int = 50, **kwargs):
        if quantum <= 0:
            raise ValueError(f"quantum must be positive: {quantum}")
        super().__init__(processes, f"Round Robin (q={quantum})", **kwargs)
        self.quantum = quantum

    def select_next_process(self) -> Optional[Process]:
        """Next unfinished process after the one that ran last (FIFO ring)"""
        unfinished = self.workload.unfinished()
        if not unfinished:
            return None
        if self.previous_process is None:
            return unfinished[0]
        for process in unfinished:
            if process.index > self.previous_process.index:
                return process
        return unfinished[0]

    def run(self, verbose: bool = False) -> Dict:
        """Run Round Robin"""
        self.prepare()
        self.log_event(f"===== {self.name} Scheduling Started =====")

        process = self.select_next_process()
        while process is not None:
            child = self.dispatch(process)
            self.run_slice(process, child, self.quantum)
            self.record_switch_out(process)
            process = self.select_next_process()

        return self.finish_run(verbose)


def FCFS(processes: List[Process], n: int, verbose: bool = False, **kwargs) -> Dict:
    """
    Run the first `n` processes under FCFS.

    The Process objects are updated in place; results are also written to
    result_offline_FCFS.csv.
    """
    return FCFSScheduler(_take(processes, n), **kwargs).run(verbose=verbose)


def RoundRobin(processes: List[Process], n: int, quantum: int,
               verbose: bool = False, **kwargs) -> Dict:
    """Run the first `n` processes under Round Robin with a `quantum` ms slice."""
    return RoundRobinScheduler(_take(processes, n), quantum, **kwargs).run(verbose=verbose)


def _take(processes: List[Process], n: int) -> List[Process]:
    if n < 0 or n > len(processes):
        raise ValueError(f"n={n} out of range for {len(processes)} processes")
    return list(processes[:n])
