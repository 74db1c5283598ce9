"""
Command statistics store for the online scheduler

Keeps a running average of measured burst time per exact command text,
used to predict how long a command will run before it runs.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

DEFAULT_PREDICTED_BURST_MS = 1000


@dataclass
class CommandStatistic:
    """Running average for one command text"""
    command: str
    index: int
    burst_time: int = DEFAULT_PREDICTED_BURST_MS
    count: int = 0

    def update(self, observed: int):
        """avg' = (avg * count + observed) / (count + 1)"""
        self.burst_time = (self.burst_time * self.count + observed) // (self.count + 1)
        self.count += 1


class CommandStatsStore:
    """
    Lookup by exact command text.

    Entries are created lazily the first time a command is seen; their
    prediction stays at the default until a run of that text completes.
    """

    def __init__(self, default_burst: int = DEFAULT_PREDICTED_BURST_MS):
        self.default_burst = default_burst
        self._entries: Dict[str, CommandStatistic] = {}

    def get(self, command: str) -> Optional[CommandStatistic]:
        return self._entries.get(command)

    def register(self, command: str, index: int) -> CommandStatistic:
        """Add `command` if it has not been seen yet."""
        entry = self._entries.get(command)
        if entry is None:
            entry = CommandStatistic(command, index, self.default_burst)
            self._entries[command] = entry
        return entry

    def predicted_burst(self, command: str) -> int:
        entry = self._entries.get(command)
        if entry is None:
            return self.default_burst
        return entry.burst_time

    def record(self, command: str, observed: int) -> CommandStatistic:
        """Fold one measured burst into the command's average."""
        entry = self.register(command, len(self._entries))
        entry.update(observed)
        return entry

    def entries(self) -> List[CommandStatistic]:
        return list(self._entries.values())

    def __contains__(self, command: str) -> bool:
        return command in self._entries

    def __len__(self) -> int:
        return len(self._entries)
