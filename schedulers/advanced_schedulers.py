"""
Advanced scheduling policies
- MLFQ (Multi-Level Feedback Queue)
"""

from typing import Iterable, List, Optional, Sequence, Tuple, Union

from core.exceptions import ConfigurationError
from core.process import Process
from core.process_table import ProcessControlTable
from core.ready_queues import QueueConfig, ReadyQueueSet

# (quantum, allotment) per level, highest priority first; None = unbounded
DEFAULT_MLFQ_QUEUES = [
    QueueConfig(quantum=2, allotment=4),
    QueueConfig(quantum=4, allotment=8),
    QueueConfig(quantum=8, allotment=None),
]
DEFAULT_BOOST_INTERVAL = 20


def _to_queue_config(raw: Union[QueueConfig, dict, Tuple]) -> QueueConfig:
    if isinstance(raw, QueueConfig):
        return raw
    if isinstance(raw, dict):
        allotment = raw.get('allotment', raw.get('allotmentTime'))
        return QueueConfig(quantum=raw.get('quantum'), allotment=allotment)
    quantum, allotment = raw
    return QueueConfig(quantum=quantum, allotment=allotment)


class MLFQPolicy:
    """
    Multi-Level Feedback Queue

    - New processes enter queue 0 (highest priority)
    - Strict priority between queues, FIFO within a queue
    - Quantum expiry re-queues at the same level
    - Allotment exhaustion demotes one level (clamped at the lowest)
    - Every boost_interval ticks all processes return to queue 0
    """

    name = "MLFQ"

    def __init__(self, queues: Optional[Iterable] = None,
                 boost_interval: Optional[int] = DEFAULT_BOOST_INTERVAL):
        """
        Args:
            queues: per-level QueueConfig, {quantum, allotment} dicts or
                (quantum, allotment) pairs
            boost_interval: ticks between boosts, None to disable

        Raises:
            ConfigurationError: no queues, or a non-positive quantum/allotment/interval
        """
        configs = [_to_queue_config(q) for q in (queues if queues is not None
                                                  else DEFAULT_MLFQ_QUEUES)]
        if not configs:
            raise ConfigurationError("MLFQ requires at least one queue")

        for level, config in enumerate(configs):
            for label, value in (('quantum', config.quantum), ('allotment', config.allotment)):
                if value is not None and (not isinstance(value, int) or value <= 0):
                    raise ConfigurationError(
                        f"Queue {level}: {label} must be a positive integer or unbounded")

        if boost_interval is not None and (not isinstance(boost_interval, int)
                                           or boost_interval <= 0):
            raise ConfigurationError("Boost interval must be a positive integer")

        self.configs = configs
        self.boost_interval = boost_interval

    def queue_configs(self) -> Sequence[QueueConfig]:
        return list(self.configs)

    def initial_priority(self) -> int:
        return 0

    def select_next(self, queues: ReadyQueueSet,
                    table: ProcessControlTable) -> Optional[Tuple[int, int]]:
        """Head of the first non-empty queue, starting from the top"""
        for level, queue in queues.levels():
            if queue:
                return level, 0
        return None

    def should_preempt_on_arrival(self, running: Process, queues: ReadyQueueSet,
                                  table: ProcessControlTable) -> bool:
        # Arrivals enter queue 0, so anything below it loses the CPU
        return running.queue_level > 0

    def should_preempt_on_timeout(self) -> bool:
        return True

    def should_preempt_on_io_return(self, running: Process, returned: List[Process],
                                    queues: ReadyQueueSet,
                                    table: ProcessControlTable) -> bool:
        return any(p.queue_level < running.queue_level for p in returned)
