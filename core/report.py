"""
Per-policy summary file (result_*.csv)
"""

from typing import Iterable, Optional, TextIO

from .errors import ReportError
from .process import Process

SUMMARY_HEADER = "Command,Finished,Error,Burst Time,Turnaround Time,Waiting Time,Response Time"


def format_row(process: Process) -> str:
    """
    One summary row.

    Finished is "No" and Error is "Yes" exactly when the error flag is set.
    The command is written as-is, without CSV quoting.
    """
    finished = "No" if process.error else "Yes"
    error = "Yes" if process.error else "No"
    return f"{process.command},{finished},{error}," \
           f"{process.burst_time},{process.turnaround_time}," \
           f"{process.waiting_time},{process.response_time}"


class SummaryWriter:
    """
    Writes the header on open and one flushed row per completed process,
    so the online scheduler can append as it goes.
    """

    def __init__(self, path: str):
        self.path = path
        self._fp: Optional[TextIO] = None

    def open(self) -> "SummaryWriter":
        try:
            self._fp = open(self.path, 'w', encoding='utf-8')
            self._fp.write(SUMMARY_HEADER + "\n")
            self._fp.flush()
        except OSError as e:
            raise ReportError(f"cannot create {self.path}: {e}") from e
        return self

    def write_row(self, process: Process):
        if self._fp is None:
            raise ReportError(f"{self.path} is not open")
        try:
            self._fp.write(format_row(process) + "\n")
            self._fp.flush()
        except OSError as e:
            raise ReportError(f"cannot write {self.path}: {e}") from e

    def close(self):
        if self._fp is not None:
            self._fp.close()
            self._fp = None

    def __enter__(self) -> "SummaryWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def write_summary(path: str, processes: Iterable[Process]):
    """Write a complete summary file for an offline run."""
    with SummaryWriter(path) as writer:
        for process in processes:
            writer.write_row(process)


def read_summary(path: str) -> list:
    """
    Read a summary file back as a list of dicts keyed by header column

    Raises:
        ReportError: file missing or header mismatch
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            lines = [line.rstrip("\n") for line in f if line.strip()]
    except OSError as e:
        raise ReportError(f"cannot read {path}: {e}") from e

    if not lines or lines[0] != SUMMARY_HEADER:
        raise ReportError(f"{path} is not a scheduler summary")

    columns = SUMMARY_HEADER.split(",")
    rows = []
    for line in lines[1:]:
        # the command may itself contain commas; the six trailing fields never do
        parts = line.rsplit(",", len(columns) - 1)
        rows.append(dict(zip(columns, parts)))
    return rows
