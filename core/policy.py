"""
Scheduling policy interface

A policy is a set of decision functions the engine consults. It keeps its
configuration only; all simulation state lives in the process table and the
ready queues passed to each call.
"""

from typing import List, Optional, Protocol, Sequence, Tuple

from .process import Process
from .process_table import ProcessControlTable
from .ready_queues import QueueConfig, ReadyQueueSet


class SchedulingPolicy(Protocol):
    name: str
    boost_interval: Optional[int]

    def queue_configs(self) -> Sequence[QueueConfig]:
        """Topology of the ready queue set, level 0 first"""
        ...

    def initial_priority(self) -> int:
        ...

    def select_next(self, queues: ReadyQueueSet,
                    table: ProcessControlTable) -> Optional[Tuple[int, int]]:
        """(level, position) of the process to dispatch, or None"""
        ...

    def should_preempt_on_arrival(self, running: Process, queues: ReadyQueueSet,
                                  table: ProcessControlTable) -> bool:
        ...

    def should_preempt_on_timeout(self) -> bool:
        ...

    def should_preempt_on_io_return(self, running: Process, returned: List[Process],
                                    queues: ReadyQueueSet,
                                    table: ProcessControlTable) -> bool:
        ...
