"""
Advanced offline scheduling algorithms
- Multi-Level Feedback Queue (MLFQ)
"""

from typing import List, Dict, Sequence, Union
from core.process import Process, Workload
from core.scheduler_base import BaseScheduler, NUM_QUEUES


class MLFQScheduler(BaseScheduler):
    """
    Multi-Level Feedback Queue scheduler
    - Queue 0 (highest) .. Queue 2 (lowest), each with its own time slice
    - A process still alive after its slice drops one level (floor at 2)
    - Every `boost_time` ms of logical time, all unfinished processes go
      back to Queue 0

    Each round visits the unfinished processes in array order; the level
    only decides the length of the slice.
    """

    result_file = "result_offline_MLFQ.csv"

    def __init__(self, processes: Union[Workload, List[Process]],
                 time_slices: Sequence[int] = (10, 20, 40), boost_time: int = 200,
                 **kwargs):
        if len(time_slices) != NUM_QUEUES:
            raise ValueError(f"{NUM_QUEUES} time slices required, got {len(time_slices)}")
        if any(q <= 0 for q in time_slices):
            raise ValueError(f"time slices must be positive: {list(time_slices)}")
        if boost_time <= 0:
            raise ValueError(f"boost time must be positive: {boost_time}")

        name = "MLFQ (q={}, boost={})".format("/".join(str(q) for q in time_slices), boost_time)
        super().__init__(processes, name, **kwargs)

        self.time_slices = list(time_slices)
        self.boost_time = boost_time
        self.last_boost_time = 0
        self.boost_times: List[int] = []

    def priority_boost(self) -> bool:
        """Move every unfinished process to Queue 0 once boost_time has passed"""
        if self.current_time - self.last_boost_time < self.boost_time:
            return False

        for process in self.workload.unfinished():
            process.current_queue = 0
            process.time_in_queue = 0
        self.last_boost_time = self.current_time
        self.boost_times.append(self.current_time)
        self.log_event("Priority boost → Queue 0")
        return True

    def demote(self, process: Process):
        """Drop one level after using a full slice"""
        if process.current_queue < NUM_QUEUES - 1:
            process.current_queue += 1
            process.time_in_queue = 0
            self.log_event(f"P{process.index} → Queue {process.current_queue}")

    def run(self, verbose: bool = False) -> Dict:
        """Run MLFQ"""
        self.prepare()
        self.log_event(f"===== {self.name} Scheduling Started =====")

        while not self.is_simulation_complete():
            self.priority_boost()

            for process in self.processes:
                if process.completed:
                    continue

                level = process.current_queue
                quantum = self.time_slices[level]
                burst_before = process.burst_time

                child = self.dispatch(process)
                exited = self.run_slice(process, child, quantum)
                process.time_in_queue += process.burst_time - burst_before

                if not exited:
                    self.demote(process)
                self.record_switch_out(process, queue=level)

                self.priority_boost()

        return self.finish_run(verbose)


def MultiLevelFeedbackQueue(processes: List[Process], n: int,
                            quantum0: int, quantum1: int, quantum2: int,
                            boost_ms: int, verbose: bool = False, **kwargs) -> Dict:
    """
    Run the first `n` processes under MLFQ.

    Args:
        quantum0, quantum1, quantum2: time slice per level in ms
        boost_ms: logical time between priority boosts
    """
    if n < 0 or n > len(processes):
        raise ValueError(f"n={n} out of range for {len(processes)} processes")
    scheduler = MLFQScheduler(list(processes[:n]), (quantum0, quantum1, quantum2),
                              boost_ms, **kwargs)
    return scheduler.run(verbose=verbose)
