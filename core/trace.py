"""
Execution trace recorder

Turns raw state transitions into a step-indexed replay log. A step is closed
on every process state change; each closed step carries snapshots of the
ready queues, the wait set, per-process states, the metrics table known so
far, and the Gantt markers accumulated up to that point.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from .clock import Clock
from .process import ProcessState

if TYPE_CHECKING:
    from .process_table import ProcessControlTable
    from .ready_queues import ReadyQueueSet


@dataclass
class GraphicPoint:
    """Gantt marker; pid None means the CPU goes idle"""
    pid: Optional[int]
    time: int

    def to_dict(self) -> dict:
        return {'pid': self.pid, 'time': self.time}


@dataclass
class TraceStep:
    """One replayable snapshot"""
    index: int
    time: int = 0
    explanation: List[str] = field(default_factory=list)
    ready_queues: List[List[int]] = field(default_factory=list)
    wait_queue: List[int] = field(default_factory=list)
    new_processes: List[int] = field(default_factory=list)
    arrivals: List[int] = field(default_factory=list)
    process_states: Dict[int, dict] = field(default_factory=dict)
    graphic_table: List[dict] = field(default_factory=list)
    graphic: List[GraphicPoint] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'time': self.time,
            'explanation': list(self.explanation),
            'ready_queues': [list(q) for q in self.ready_queues],
            'wait_queue': list(self.wait_queue),
            'new_processes': list(self.new_processes),
            'arrivals': list(self.arrivals),
            'process_states': {str(pid): dict(entry) for pid, entry in self.process_states.items()},
            'graphic_table': [dict(row) for row in self.graphic_table],
            'graphic': [point.to_dict() for point in self.graphic],
        }


class TraceRecorder:
    """
    Step log for one simulation run.

    The recorder reads the process table and ready queues it is attached to
    whenever a step is closed; it never mutates them.
    """

    def __init__(self, clock: Clock):
        self.clock = clock
        self.table: Optional["ProcessControlTable"] = None
        self.ready_queues: Optional["ReadyQueueSet"] = None
        self.reset()

    def attach(self, table: "ProcessControlTable", ready_queues: "ReadyQueueSet"):
        """Wire the snapshot sources for this run."""
        self.table = table
        self.ready_queues = ready_queues

    def reset(self):
        self.steps: List[TraceStep] = []
        self.points: List[GraphicPoint] = []
        self._temporary_points: List[GraphicPoint] = []
        self._current: Optional[TraceStep] = None
        self.open_step()

    @property
    def step_index(self) -> int:
        return len(self.steps)

    def open_step(self) -> TraceStep:
        """Create the current step if it does not exist yet."""
        if self._current is None:
            self._current = TraceStep(index=len(self.steps), time=self.clock.current())
            self._temporary_points = []
        return self._current

    def close_step(self):
        """Snapshot the simulation into the current step and move to the next."""
        step = self.open_step()

        step.graphic = [GraphicPoint(p.pid, p.time) for p in self.points]
        step.graphic.extend(GraphicPoint(p.pid, p.time) for p in self._temporary_points)

        if self.ready_queues is not None:
            step.ready_queues = self.ready_queues.snapshot()

        if self.table is not None:
            records = self.table.records()
            step.wait_queue = [p.pid for p in records if p.state == ProcessState.WAIT]
            step.new_processes = [p.pid for p in records if p.state == ProcessState.NEW]
            step.process_states = {
                p.pid: {'pid': p.pid, 'state': p.state.value, 'queue_level': p.queue_level}
                for p in records
            }
            step.graphic_table = self.table.metrics_table()

        self.steps.append(step)
        self._current = None
        self.open_step()

    def log_explanation(self, text: str):
        self.open_step().explanation.append(text)

    def stamp(self, offset: int = 0):
        """Attribute the current step to `current() + offset`."""
        self.open_step().time = self.clock.current() + offset

    def note_arrival(self, pid: int):
        self.open_step().arrivals.append(pid)

    def mark_point(self, pid: int, offset: int = 0):
        """
        Record a Gantt event for pid.

        Args:
            pid: process id
            offset: 1 when the event completes at the end of the current tick
        """
        self.points.append(GraphicPoint(pid, self.clock.current() + offset))

    def mark_idle_point(self):
        self.points.append(GraphicPoint(None, self.clock.current()))

    def buffer_running_segment(self, pid: int):
        """Show the running segment so far in the next closed step only."""
        self.open_step()
        self._temporary_points.append(GraphicPoint(pid, self.clock.current()))

    def finalize(self) -> List[TraceStep]:
        """Discard the open (always incomplete) step and return the log."""
        self._current = None
        self._temporary_points = []
        return list(self.steps)
