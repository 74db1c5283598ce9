"""
Scheduler base framework: dispatch bookkeeping, context switch trace and
statistics shared by every policy
"""

import os
import sys
from typing import List, Dict, Optional, TextIO, Union
from dataclasses import dataclass

from .clock import Clock, SystemClock
from .errors import SpawnError
from .harness import ChildProcess, ExecutionHarness
from .process import Process, ProcessState, Workload
from .report import write_summary

# number of MLFQ priority levels
NUM_QUEUES = 3


@dataclass
class GanttEntry:
    """One dispatch window: the process ran from start_time to end_time"""
    index: int
    command: str
    start_time: int
    end_time: int
    state: ProcessState  # state the process was left in
    queue: Optional[int] = None  # MLFQ level during the window

    def trace_line(self) -> str:
        return f"{self.command}|{self.start_time}|{self.end_time}"


class SchedulerStats:
    """Scheduling statistics"""

    def __init__(self):
        self.total_waiting_time = 0
        self.total_turnaround_time = 0
        self.total_response_time = 0
        self.context_switches = 0
        self.cpu_busy_time = 0
        self.total_simulation_time = 0
        self.process_count = 0
        self.error_count = 0

    def calculate_averages(self):
        """Averages"""
        if self.process_count == 0:
            return {
                'avg_waiting_time': 0,
                'avg_turnaround_time': 0,
                'avg_response_time': 0,
                'cpu_utilization': 0,
                'context_switches': 0,
                'errors': 0
            }

        return {
            'avg_waiting_time': self.total_waiting_time / self.process_count,
            'avg_turnaround_time': self.total_turnaround_time / self.process_count,
            'avg_response_time': self.total_response_time / self.process_count,
            'cpu_utilization': (self.cpu_busy_time / self.total_simulation_time * 100)
                               if self.total_simulation_time > 0 else 0,
            'context_switches': self.context_switches,
            'errors': self.error_count
        }


class BaseScheduler:
    """
    Base scheduler class

    Owns the workload context for one run and everything the policies have
    in common: launching or resuming a process, pausing it, recording the
    trace, finishing it and writing the summary file. There is exactly one
    driver; nothing here is shared across threads.
    """

    result_file: Optional[str] = None

    def __init__(self, workload: Union[Workload, List[Process]], name: str = "Base Scheduler",
                 harness: Optional[ExecutionHarness] = None,
                 clock: Optional[Clock] = None,
                 output_dir: str = ".",
                 trace_stream: Optional[TextIO] = None):
        if not isinstance(workload, Workload):
            workload = Workload(list(workload))
        self.workload = workload
        self.processes = workload.processes
        self.name = name
        self.harness = harness if harness is not None else ExecutionHarness()
        self.clock = clock if clock is not None else SystemClock()
        self.output_dir = output_dir
        self.trace_stream = trace_stream

        # logical time in ms since the run started
        self.current_time = 0
        self.running_process: Optional[Process] = None
        self.previous_process: Optional[Process] = None
        self.children: Dict[int, ChildProcess] = {}

        self.gantt_chart: List[GanttEntry] = []
        self.stats = SchedulerStats()
        self.event_log: List[str] = []

    @property
    def result_path(self) -> str:
        return os.path.join(self.output_dir, self.result_file)

    def log_event(self, message: str):
        """Record an event"""
        log_entry = f"[T={self.current_time:6d}] {message}"
        self.event_log.append(log_entry)

    def add_to_gantt_chart(self, process: Process, start: int, end: int,
                           queue: Optional[int] = None):
        """Record a dispatch window and print its trace line."""
        entry = GanttEntry(process.index, process.command, start, end,
                           process.state, queue)
        self.gantt_chart.append(entry)
        print(entry.trace_line(), file=self.trace_stream or sys.stdout, flush=True)

    def prepare(self):
        """Reset every process for a batch where everything arrives at 0."""
        for process in self.processes:
            process.reset()
            process.arrival_time = 0
            process.state = ProcessState.READY

    def launch(self, process: Process) -> ChildProcess:
        """
        Start the process's command.

        Exec failures are recorded on the process and the run goes on. A
        spawn failure aborts the batch: live children are killed and
        SpawnError propagates.
        """
        try:
            child = self.harness.spawn(process.command)
        except SpawnError as e:
            self.log_event(f"P{process.index} spawn failed: {e}")
            self.abort()
            raise
        if child.error:
            self.log_event(f"P{process.index} exec failed: {process.command!r}")

        process.pid = child.pid
        process.error = child.error
        process.started = True
        process.start_time = self.current_time
        self.children[process.index] = child
        return child

    def dispatch(self, process: Process) -> ChildProcess:
        """
        Switch `process` in: start it if new, otherwise continue it.

        Returns:
            the child handle
        """
        if self.previous_process is not None and self.previous_process is not process:
            self.stats.context_switches += 1
            self.log_event(f"Context Switch: P{self.previous_process.index} → P{process.index}")
        self.previous_process = process

        process.switch_in_time = self.current_time
        if not process.started:
            child = self.launch(process)
        else:
            child = self.children[process.index]
            child.resume()

        process.state = ProcessState.RUNNING
        self.running_process = process
        self.log_event(f"P{process.index} → Running")
        return child

    def run_slice(self, process: Process, child: ChildProcess, quantum: int) -> bool:
        """
        Let a dispatched process run for at most one quantum, then stop it.

        The burst credited is the full quantum if the process is still alive,
        otherwise only the time elapsed since dispatch.

        Returns:
            whether the process finished
        """
        dispatched_at = self.clock.now_ms()
        exited = child.wait(quantum)
        elapsed = min(self.clock.now_ms() - dispatched_at, quantum)

        if not exited:
            child.pause()
            exited = child.poll_exited()

        credited = elapsed if exited else quantum
        process.burst_time += credited
        self.stats.cpu_busy_time += credited
        self.current_time += credited

        if exited:
            self.terminate_process(process)
        else:
            process.state = ProcessState.STOPPED
            self.running_process = None
            self.log_event(f"P{process.index} quantum expired → Stopped")
        return exited

    def terminate_process(self, process: Process):
        """Process finished"""
        child = self.children.pop(process.index, None)
        if child is not None:
            process.output = child.close()

        process.state = ProcessState.DONE
        process.completed = True
        if process.completion_time is None:
            process.completion_time = self.current_time
        process.calculate_time_metrics()
        if self.running_process is process:
            self.running_process = None

        self.log_event(f"P{process.index} → Done (BT={process.burst_time}, "
                       f"WT={process.waiting_time}, TT={process.turnaround_time})")

    def abort(self):
        """Kill every child still held by this run."""
        for index, child in list(self.children.items()):
            child.kill()
            del self.children[index]
        self.running_process = None
        self.log_event("Batch aborted")

    def record_switch_out(self, process: Process, queue: Optional[int] = None):
        """Close the current dispatch window of `process`."""
        process.switch_out_time = self.current_time
        self.add_to_gantt_chart(process, process.switch_in_time,
                                process.switch_out_time, queue)

    def update_statistics(self):
        """Final statistics"""
        self.stats.total_simulation_time = self.current_time
        finished = [p for p in self.processes if p.completed]
        self.stats.process_count = len(finished)
        self.stats.error_count = sum(1 for p in finished if p.error)
        self.stats.total_waiting_time = 0
        self.stats.total_turnaround_time = 0
        self.stats.total_response_time = 0

        for process in finished:
            self.stats.total_waiting_time += process.waiting_time
            self.stats.total_turnaround_time += process.turnaround_time
            self.stats.total_response_time += process.response_time

    def select_next_process(self) -> Optional[Process]:
        """
        Pick the next process to run (implemented by subclasses)

        Returns:
            selected process or None
        """
        raise NotImplementedError("Subclasses must implement select_next_process()")

    def is_simulation_complete(self) -> bool:
        return self.workload.all_completed()

    def run(self, verbose: bool = False) -> Dict:
        """
        Run the policy to completion

        Args:
            verbose: print the event log to stderr afterwards

        Returns:
            results dictionary
        """
        raise NotImplementedError("Subclasses must implement run()")

    def finish_run(self, verbose: bool = False) -> Dict:
        """Write the summary file and collect results for an offline run."""
        self.log_event(f"===== {self.name} Scheduling Completed =====")
        write_summary(self.result_path, self.processes)

        if verbose:
            self.print_event_log()

        return self.get_results()

    def print_event_log(self):
        for log in self.event_log:
            print(log, file=sys.stderr)

    def get_results(self) -> Dict:
        """
        Results of the run

        Returns:
            dict with statistics, gantt chart, event log and processes
        """
        self.update_statistics()

        return {
            'algorithm': self.name,
            'statistics': self.stats.calculate_averages(),
            'gantt_chart': self.gantt_chart,
            'event_log': self.event_log,
            'processes': list(self.processes),
            'result_file': self.result_path
        }
