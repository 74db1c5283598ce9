"""
Workload ingestion: command batches from files or lists, and the line
stream the online scheduler reads from stdin
"""

import os
import sys
from typing import Iterable, List, Optional, TextIO
from core.process import Process

READ_CHUNK = 4096


class InputParser:
    """Workload file parser"""

    @staticmethod
    def parse_file(filename: str) -> List[Process]:
        """
        Read one command per line

        Blank lines and lines starting with '#' are skipped.

        Args:
            filename: workload file path

        Returns:
            process list, in file order

        Raises:
            OSError: the file cannot be read
        """
        with open(filename, 'r', encoding='utf-8') as f:
            processes = InputParser.parse_lines(f)

        print(f"Loaded {len(processes)} commands from {filename}", file=sys.stderr)
        return processes

    @staticmethod
    def parse_lines(lines: Iterable[str]) -> List[Process]:
        """Build processes from command lines"""
        processes = []
        for line in lines:
            command = line.strip("\r\n")
            if not command.strip() or command.lstrip().startswith('#'):
                continue
            processes.append(Process(command, 0, len(processes)))
        return processes

    @staticmethod
    def save_processes_to_file(processes: List[Process], filename: str):
        """
        Write a workload file that parse_file() reads back

        Args:
            processes: processes to save
            filename: output path
        """
        with open(filename, 'w', encoding='utf-8') as f:
            f.write("# Scheduler workload: one command per line\n")
            for process in processes:
                f.write(process.command + "\n")

    @staticmethod
    def print_process_summary(processes: List[Process]):
        """Print the workload"""
        print("\n" + "="*80)
        print("Workload")
        print("="*80)
        print(f"{'#':<6} {'Command'}")
        print("-"*80)

        for p in processes:
            print(f"{p.index:<6} {p.command}")

        print("="*80)
        print(f"Total: {len(processes)} commands, "
              f"{len(set(p.command for p in processes))} distinct\n")


class StdinCommandSource:
    """
    Non-blocking line reader for the online scheduler.

    poll() returns the complete lines that have arrived since the last call
    and never waits for more. `closed` becomes true at end of input.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream
        self.closed = False
        self._fd: Optional[int] = None
        self._buffer = b""

    def _fileno(self) -> int:
        if self._fd is None:
            stream = self.stream or sys.stdin
            self._fd = stream.fileno()
            os.set_blocking(self._fd, False)
        return self._fd

    def poll(self) -> List[str]:
        if self.closed:
            return []

        fd = self._fileno()
        while True:
            try:
                data = os.read(fd, READ_CHUNK)
            except BlockingIOError:
                break
            if not data:
                self.closed = True
                break
            self._buffer += data

        *complete, self._buffer = self._buffer.split(b"\n")
        if self.closed and self._buffer:
            complete.append(self._buffer)
            self._buffer = b""

        lines = [raw.decode("utf-8", errors="replace").rstrip("\r") for raw in complete]
        return [line for line in lines if line.strip()]

    def close(self):
        """Put the descriptor back into blocking mode."""
        if self._fd is not None:
            os.set_blocking(self._fd, True)
            self._fd = None
