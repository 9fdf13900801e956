"""
Basic scheduling policies
- FCFS (First-Come, First-Served)
- SJF (Shortest Job First, non-preemptive)
- RR (Round Robin)
- STCF (Shortest Time-to-Completion First, preemptive SRTF)
"""

from typing import List, Optional, Sequence, Tuple

from core.exceptions import ConfigurationError
from core.process import Process
from core.process_table import ProcessControlTable
from core.ready_queues import QueueConfig, ReadyQueueSet

DEFAULT_TIME_SLICE = 4


class FCFSPolicy:
    """
    FCFS (First-Come, First-Served)
    Non-preemptive: the head of the single ready queue runs to completion or I/O
    """

    name = "FCFS"
    boost_interval = None

    def queue_configs(self) -> Sequence[QueueConfig]:
        return [QueueConfig()]

    def initial_priority(self) -> int:
        return 0

    def select_next(self, queues: ReadyQueueSet,
                    table: ProcessControlTable) -> Optional[Tuple[int, int]]:
        """Head of the queue (arrival order, ties by pid)"""
        if not queues.queue(0):
            return None
        return 0, 0

    def should_preempt_on_arrival(self, running: Process, queues: ReadyQueueSet,
                                  table: ProcessControlTable) -> bool:
        return False

    def should_preempt_on_timeout(self) -> bool:
        return False

    def should_preempt_on_io_return(self, running: Process, returned: List[Process],
                                    queues: ReadyQueueSet,
                                    table: ProcessControlTable) -> bool:
        return False


class SJFPolicy:
    """
    SJF (Shortest Job First)
    Non-preemptive: the ready process with the smallest total burst runs next
    """

    name = "SJF"
    boost_interval = None

    def queue_configs(self) -> Sequence[QueueConfig]:
        return [QueueConfig()]

    def initial_priority(self) -> int:
        return 0

    def select_next(self, queues: ReadyQueueSet,
                    table: ProcessControlTable) -> Optional[Tuple[int, int]]:
        """Smallest burst time; the earlier queue position wins a tie"""
        ready = queues.queue(0)
        if not ready:
            return None

        min_index = 0
        for index in range(1, len(ready)):
            if table.get(ready[index]).burst_time < table.get(ready[min_index]).burst_time:
                min_index = index
        return 0, min_index

    def should_preempt_on_arrival(self, running: Process, queues: ReadyQueueSet,
                                  table: ProcessControlTable) -> bool:
        return False

    def should_preempt_on_timeout(self) -> bool:
        return False

    def should_preempt_on_io_return(self, running: Process, returned: List[Process],
                                    queues: ReadyQueueSet,
                                    table: ProcessControlTable) -> bool:
        return False


class RRPolicy:
    """
    Round Robin
    Each dispatch gets the same time slice; on expiry the process goes to the
    tail of the single ready queue
    """

    name = "RR"
    boost_interval = None

    def __init__(self, quantum: int = DEFAULT_TIME_SLICE):
        """
        Args:
            quantum: time slice per dispatch

        Raises:
            ConfigurationError: quantum is not a positive integer
        """
        if not isinstance(quantum, int) or quantum <= 0:
            raise ConfigurationError("Round Robin quantum must be a positive integer")
        self.quantum = quantum

    def queue_configs(self) -> Sequence[QueueConfig]:
        return [QueueConfig(quantum=self.quantum)]

    def initial_priority(self) -> int:
        return 0

    def select_next(self, queues: ReadyQueueSet,
                    table: ProcessControlTable) -> Optional[Tuple[int, int]]:
        if not queues.queue(0):
            return None
        return 0, 0

    def should_preempt_on_arrival(self, running: Process, queues: ReadyQueueSet,
                                  table: ProcessControlTable) -> bool:
        return False

    def should_preempt_on_timeout(self) -> bool:
        return True

    def should_preempt_on_io_return(self, running: Process, returned: List[Process],
                                    queues: ReadyQueueSet,
                                    table: ProcessControlTable) -> bool:
        return False


class STCFPolicy:
    """
    STCF (Shortest Time-to-Completion First)
    Preemptive: the ready process with the least remaining burst runs

    The single ready queue only tracks membership; position breaks ties so
    the earliest enqueued process wins among equal remaining times.
    """

    name = "STCF"
    boost_interval = None

    def __init__(self, legacy_trace: bool = False):
        """
        Args:
            legacy_trace: deschedule the running process on every arrival, even
                when it is still the shortest. The trace gains a
                deschedule/reschedule pair, and on an exact tie in remaining
                time the earlier-queued process takes the CPU.
        """
        self.legacy_trace = legacy_trace

    def queue_configs(self) -> Sequence[QueueConfig]:
        return [QueueConfig()]

    def initial_priority(self) -> int:
        return 0

    def select_next(self, queues: ReadyQueueSet,
                    table: ProcessControlTable) -> Optional[Tuple[int, int]]:
        ready = queues.queue(0)
        if not ready:
            return None

        min_index = 0
        for index in range(1, len(ready)):
            if table.get(ready[index]).remaining_time < table.get(ready[min_index]).remaining_time:
                min_index = index
        return 0, min_index

    def _shorter_job_waiting(self, running: Process, queues: ReadyQueueSet,
                             table: ProcessControlTable) -> bool:
        return any(table.get(pid).remaining_time < running.remaining_time
                   for pid in queues.queue(0))

    def should_preempt_on_arrival(self, running: Process, queues: ReadyQueueSet,
                                  table: ProcessControlTable) -> bool:
        if self.legacy_trace:
            return True
        return self._shorter_job_waiting(running, queues, table)

    def should_preempt_on_timeout(self) -> bool:
        return False

    def should_preempt_on_io_return(self, running: Process, returned: List[Process],
                                    queues: ReadyQueueSet,
                                    table: ProcessControlTable) -> bool:
        if self.legacy_trace:
            return True
        return any(p.remaining_time < running.remaining_time for p in returned)
