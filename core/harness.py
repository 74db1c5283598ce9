"""
Execution harness: runs one external command per process and lets the
scheduler pause, resume and poll it.

The child's stdout and stderr are merged into one pipe. Exec failures are
reported back by subprocess over its own private error pipe, so a missing
program surfaces here as an error flag instead of an exception.
"""

import errno
import os
import signal
import subprocess
from typing import List, Optional

from .errors import SpawnError


# errno values that mean "the program could not be executed"
EXEC_ERRNOS = {
    errno.ENOENT, errno.EACCES, errno.ENOEXEC, errno.ENOTDIR,
    errno.EISDIR, errno.ELOOP, errno.ENAMETOOLONG, errno.EPERM,
}

READ_CHUNK = 4096


def split_command(command: str) -> List[str]:
    """
    Split a command line on spaces into an argument vector.

    No quoting or escaping; runs of spaces collapse like strtok().
    """
    return [token for token in command.split(" ") if token]


class ChildProcess:
    """
    Handle on a spawned command.

    Exposes the capabilities preemptive policies need: pause(), resume()
    and poll_exited(), plus wait() for run-to-completion policies.
    """

    def __init__(self, command: str, popen: Optional[subprocess.Popen] = None,
                 error: bool = False, non_blocking: bool = True):
        self.command = command
        self.error = error
        self.output = ""
        self._popen = popen
        self._chunks: List[bytes] = []
        self._non_blocking = non_blocking

    @classmethod
    def failed(cls, command: str) -> "ChildProcess":
        """A child that never started"""
        return cls(command, error=True)

    @property
    def pid(self) -> Optional[int]:
        return self._popen.pid if self._popen is not None else None

    @property
    def returncode(self) -> Optional[int]:
        return self._popen.returncode if self._popen is not None else None

    def resume(self):
        """Continue a stopped child (SIGCONT)."""
        if self._popen is not None:
            self._popen.send_signal(signal.SIGCONT)

    def pause(self):
        """Stop the child (SIGSTOP) and drain what it wrote so far."""
        if self._popen is not None:
            self._popen.send_signal(signal.SIGSTOP)
        self.read_output()

    def poll_exited(self) -> bool:
        """Non-blocking exit check"""
        if self._popen is None:
            return True
        return self._popen.poll() is not None

    def wait(self, timeout_ms: Optional[int] = None) -> bool:
        """
        Wait for the child to exit.

        Args:
            timeout_ms: upper bound in milliseconds, None blocks until exit

        Returns:
            whether the child has exited
        """
        if self._popen is None:
            return True

        if timeout_ms is None:
            if self._non_blocking:
                self.read_output()
                os.set_blocking(self._popen.stdout.fileno(), True)
                self._non_blocking = False
            out, _ = self._popen.communicate()
            if out:
                self._chunks.append(out)
            self._finish_output()
            return True

        try:
            self._popen.wait(timeout=timeout_ms / 1000)
        except subprocess.TimeoutExpired:
            return False
        return True

    def exited_abnormally(self) -> bool:
        """Terminated by a signal instead of a normal exit"""
        return self.returncode is not None and self.returncode < 0

    def read_output(self) -> str:
        """Collect whatever is readable on the output pipe without blocking."""
        if self._popen is None or self._popen.stdout is None or self._popen.stdout.closed:
            return self.output
        if self._non_blocking:
            fd = self._popen.stdout.fileno()
            while True:
                try:
                    data = os.read(fd, READ_CHUNK)
                except BlockingIOError:
                    break
                if not data:
                    break
                self._chunks.append(data)
        self._finish_output()
        return self.output

    def kill(self):
        """SIGKILL the child (stopped or not) and reap it."""
        if self._popen is not None and self._popen.poll() is None:
            self._popen.kill()
            self._popen.wait()
        self.close()

    def close(self) -> str:
        """Drain and close the output pipe once the child is done."""
        output = self.read_output()
        if self._popen is not None and self._popen.stdout is not None:
            self._popen.stdout.close()
        return output

    def _finish_output(self):
        self.output = b"".join(self._chunks).decode("utf-8", errors="replace")


class ExecutionHarness:
    """
    Spawns external commands.

    Two disciplines:
      - spawn(): output pipe non-blocking, returns as soon as the command
        started (FCFS, RR, MLFQ)
      - run_to_completion(): blocks until the child exits, then flags
        exec failures and abnormal exits (online SJF)
    """

    def spawn(self, command: str, non_blocking: bool = True) -> ChildProcess:
        """
        Start `command`.

        Returns:
            child handle; `error` is set when the program could not be executed

        Raises:
            SpawnError: the process or its pipes could not be created
        """
        argv = split_command(command)
        if not argv:
            return ChildProcess.failed(command)

        try:
            popen = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            if e.errno in EXEC_ERRNOS:
                child = ChildProcess.failed(command)
                child.output = f"{argv[0]}: {e.strerror}\n"
                return child
            raise SpawnError(f"could not spawn {command!r}: {e}") from e
        except subprocess.SubprocessError as e:
            raise SpawnError(f"could not spawn {command!r}: {e}") from e

        if non_blocking:
            os.set_blocking(popen.stdout.fileno(), False)
        return ChildProcess(command, popen, non_blocking=non_blocking)

    def run_to_completion(self, command: str) -> ChildProcess:
        """Spawn `command` and block until it exits."""
        child = self.spawn(command, non_blocking=False)
        child.wait()
        if child.exited_abnormally():
            child.error = True
        child.close()
        return child
