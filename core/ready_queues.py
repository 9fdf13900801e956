"""
Ready queue set: one FIFO queue per priority level
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional, Sequence, Tuple

from .exceptions import ConfigurationError, InvariantError


@dataclass(frozen=True)
class QueueConfig:
    """Per-level scheduling budget; None means unbounded"""
    quantum: Optional[int] = None
    allotment: Optional[int] = None

    def to_dict(self) -> dict:
        return {'quantum': self.quantum, 'allotment': self.allotment}


class ReadyQueueSet:
    """
    Fixed number of FIFO queues indexed by level.

    Level 0 is the highest priority. A pid may sit in at most one queue.
    """

    def __init__(self, configs: Sequence[QueueConfig]):
        if not configs:
            raise ConfigurationError("At least one ready queue is required")
        self.configs: Tuple[QueueConfig, ...] = tuple(configs)
        self._queues: Tuple[Deque[int], ...] = tuple(deque() for _ in self.configs)

    def __len__(self) -> int:
        return len(self._queues)

    @property
    def lowest_level(self) -> int:
        return len(self._queues) - 1

    def clamp_level(self, level: int) -> int:
        return max(0, min(level, self.lowest_level))

    def quantum(self, level: int) -> Optional[int]:
        return self.configs[level].quantum

    def allotment(self, level: int) -> Optional[int]:
        return self.configs[level].allotment

    def queue(self, level: int) -> Tuple[int, ...]:
        """Read-only view of one queue, head first"""
        return tuple(self._queues[level])

    def levels(self) -> Iterator[Tuple[int, Tuple[int, ...]]]:
        for level, queue in enumerate(self._queues):
            yield level, tuple(queue)

    def level_of(self, pid: int) -> Optional[int]:
        for level, queue in enumerate(self._queues):
            if pid in queue:
                return level
        return None

    def contains(self, pid: int) -> bool:
        return self.level_of(pid) is not None

    def enqueue(self, level: int, pid: int):
        """Append pid to the tail of the queue at `level`."""
        if not 0 <= level < len(self._queues):
            raise InvariantError(f"Ready queue level {level} does not exist")
        if self.contains(pid):
            raise InvariantError(f"Process {pid} is already in a ready queue")
        self._queues[level].append(pid)

    def dequeue(self, level: int, index: int = 0) -> int:
        """Remove and return the pid at `index` in the queue at `level`."""
        queue = self._queues[level]
        if not 0 <= index < len(queue):
            raise InvariantError(f"Ready queue {level} has no entry at position {index}")
        pid = queue[index]
        del queue[index]
        return pid

    def drain(self, level: int) -> List[int]:
        """Empty the queue at `level`, returning its pids head first."""
        queue = self._queues[level]
        pids = list(queue)
        queue.clear()
        return pids

    def snapshot(self) -> List[List[int]]:
        return [list(queue) for queue in self._queues]

    def __repr__(self):
        return f"ReadyQueueSet({self.snapshot()})"
