"""
Online scheduling: commands arrive on a line stream while the engine runs
- SJF (Shortest Job First, non-preemptive)
"""

from typing import Dict, Optional

from core.errors import SpawnError
from core.harness import ChildProcess
from core.process import Process, ProcessState, Workload
from core.report import SummaryWriter
from core.scheduler_base import BaseScheduler
from core.stats import CommandStatsStore
from utils.input_parser import StdinCommandSource

# line that stops the online engine
EXIT_COMMAND = "exit"

# delay between checks for newly arrived commands
ONLINE_POLL_INTERVAL_MS = 100


class SJFScheduler(BaseScheduler):
    """
    Online SJF scheduler

    Among arrived, unfinished commands the one with the smallest predicted
    burst runs next, to completion; ties go to the earliest arrival. The
    prediction is the running average of past runs of the same command text
    (default 1000 ms) and is updated after every run.
    """

    result_file = "result_online_SJF.csv"

    def __init__(self, source=None, command_stats: Optional[CommandStatsStore] = None,
                 poll_interval: int = ONLINE_POLL_INTERVAL_MS, **kwargs):
        super().__init__(Workload(), "SJF (online)", **kwargs)
        self.source = source if source is not None else StdinCommandSource()
        self.command_stats = command_stats if command_stats is not None else CommandStatsStore()
        self.poll_interval = poll_interval
        self.exit_requested = False
        self.start_ms = 0

    def now(self) -> int:
        """Milliseconds since the engine started"""
        return self.clock.now_ms() - self.start_ms

    def admit_arrivals(self):
        """Add every newly arrived command to the workload"""
        for command in self.source.poll():
            self.current_time = self.now()
            if command == EXIT_COMMAND:
                self.exit_requested = True
                self.log_event("exit received")
                break

            process = self.workload.add(command, arrival_time=self.current_time)
            process.state = ProcessState.READY
            self.command_stats.register(command, process.index)
            self.log_event(f"P{process.index} arrived: {command!r} "
                           f"(predicted {self.command_stats.predicted_burst(command)} ms)")

    def select_next_process(self) -> Optional[Process]:
        """Smallest predicted burst, earliest arrival on ties"""
        shortest = None
        shortest_time = None
        for process in self.workload.unfinished():
            burst = self.command_stats.predicted_burst(process.command)
            if shortest is None or burst < shortest_time:
                shortest = process
                shortest_time = burst
        return shortest

    def execute(self, process: Process) -> Process:
        """Run one command to completion and record its timing."""
        self.current_time = self.now()
        if self.previous_process is not None:
            self.stats.context_switches += 1
        self.previous_process = process

        process.start_time = self.current_time
        process.switch_in_time = self.current_time
        process.started = True
        process.state = ProcessState.RUNNING
        self.running_process = process
        self.log_event(f"P{process.index} → Running")

        try:
            child = self.harness.run_to_completion(process.command)
        except SpawnError as e:
            child = ChildProcess.failed(process.command)
            self.log_event(f"P{process.index} spawn failed: {e}")
        if child.error:
            self.log_event(f"P{process.index} failed: {process.command!r}")

        self.current_time = self.now()
        process.pid = child.pid
        process.error = child.error
        process.burst_time = self.current_time - process.start_time
        process.completion_time = self.current_time
        self.stats.cpu_busy_time += process.burst_time
        self.children[process.index] = child

        self.terminate_process(process)
        self.record_switch_out(process)
        self.command_stats.record(process.command, process.burst_time)
        return process

    def run(self, verbose: bool = False) -> Dict:
        """
        Serve commands until `exit` (or end of input).

        Commands read before `exit` are still run. Each finished command is
        appended to result_online_SJF.csv right away.
        """
        self.start_ms = self.clock.now_ms()
        self.log_event(f"===== {self.name} Scheduling Started =====")

        try:
            with SummaryWriter(self.result_path) as writer:
                while True:
                    if not self.exit_requested:
                        self.admit_arrivals()

                    process = self.select_next_process()
                    if process is not None:
                        writer.write_row(self.execute(process))
                    elif self.exit_requested or self.source.closed:
                        break

                    self.clock.sleep_ms(self.poll_interval)
        finally:
            self.source.close()

        self.current_time = self.now()
        self.log_event(f"===== {self.name} Scheduling Completed =====")
        if verbose:
            self.print_event_log()
        return self.get_results()


def ShortestJobFirst(verbose: bool = False, **kwargs) -> Dict:
    """
    Run the online SJF engine on stdin until the `exit` line.

    Keyword arguments go to SJFScheduler (source, harness, clock, output_dir).
    """
    return SJFScheduler(**kwargs).run(verbose=verbose)
