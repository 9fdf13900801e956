"""
Process and PCB (Process Control Block) records
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .exceptions import ConfigurationError


class ProcessState(Enum):
    """Process state"""
    NEW = "NEW"
    READY = "READY"
    RUNNING = "RUNNING"
    WAIT = "WAIT"
    DONE = "DONE"


# Only these edges are legal; DONE is terminal.
LEGAL_TRANSITIONS = {
    ProcessState.NEW: {ProcessState.READY},
    ProcessState.READY: {ProcessState.RUNNING},
    ProcessState.RUNNING: {ProcessState.READY, ProcessState.WAIT, ProcessState.DONE},
    ProcessState.WAIT: {ProcessState.READY},
    ProcessState.DONE: set(),
}


@dataclass
class IoEvent:
    """I/O request issued once `offset` units of the burst have run"""
    offset: int
    duration: int

    def to_dict(self) -> dict:
        return {'offset': self.offset, 'duration': self.duration}


@dataclass
class ProcessSpec:
    """A submitted process, before pids are assigned"""
    arrival_time: int
    burst_time: int
    io_events: List[IoEvent] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ProcessSpec":
        """
        Build a spec from a plain mapping.

        Accepts both snake_case keys and the camelCase keys used by the
        browser client (`arrivalTime`, `burstTime`, `io` with `start`).
        """
        arrival = data.get('arrival_time', data.get('arrivalTime'))
        burst = data.get('burst_time', data.get('burstTime'))
        raw_io = data.get('io_events', data.get('io')) or []
        io_events = [
            IoEvent(offset=io.get('offset', io.get('start')), duration=io.get('duration'))
            for io in raw_io
        ]
        return cls(arrival_time=arrival, burst_time=burst, io_events=io_events)

    def to_dict(self) -> dict:
        return {
            'arrival_time': self.arrival_time,
            'burst_time': self.burst_time,
            'io_events': [io.to_dict() for io in self.io_events],
        }

    def total_io_time(self) -> int:
        return sum(io.duration for io in self.io_events)


def validate_processes(specs: Sequence[ProcessSpec]) -> List[ProcessSpec]:
    """
    Validate submitted processes and return normalized copies.

    I/O events are sorted by offset (stable) so they are consumed in order.

    Raises:
        ConfigurationError: empty list, negative arrival/burst, or an I/O event
            outside the burst
    """
    if not specs:
        raise ConfigurationError("Process list must not be empty")

    normalized = []
    for index, spec in enumerate(specs, 1):
        if not isinstance(spec.arrival_time, int) or spec.arrival_time < 0:
            raise ConfigurationError(
                f"Process {index}: arrival time must be a non-negative integer")
        if not isinstance(spec.burst_time, int) or spec.burst_time < 0:
            raise ConfigurationError(
                f"Process {index}: burst time must be a non-negative integer")

        for j, io in enumerate(spec.io_events, 1):
            if not isinstance(io.offset, int) or io.offset < 0:
                raise ConfigurationError(
                    f"Process {index}, I/O {j}: offset must be a non-negative integer")
            if not isinstance(io.duration, int) or io.duration <= 0:
                raise ConfigurationError(
                    f"Process {index}, I/O {j}: duration must be a positive integer")
            if io.offset >= spec.burst_time:
                raise ConfigurationError(
                    f"Process {index}, I/O {j}: offset ({io.offset}) must be less than "
                    f"burst time ({spec.burst_time})")

        io_events = sorted((IoEvent(io.offset, io.duration) for io in spec.io_events),
                           key=lambda io: io.offset)
        normalized.append(ProcessSpec(spec.arrival_time, spec.burst_time, io_events))

    return normalized


class Process:
    """
    Process control block (PCB)

    Holds one process's input, its mutable run state, and the metrics
    derived as the simulation progresses.
    """

    def __init__(self, pid: int, arrival_time: int, burst_time: int,
                 io_events: Optional[List[IoEvent]] = None):
        """
        Args:
            pid: process id (1..N in arrival order)
            arrival_time: tick at which the process arrives
            burst_time: total CPU demand, I/O excluded
            io_events: I/O requests ordered by offset
        """
        self.pid = pid
        self.arrival_time = arrival_time
        self.burst_time = burst_time
        self.io_events = list(io_events or [])

        # Run state
        self.state = ProcessState.NEW
        self.cpu_time = 0
        self.remaining_time = burst_time
        self.io_time_remaining = 0

        # Priority level and counters; None means unbounded
        self.queue_level = 0
        self.quantum_remaining: Optional[int] = None
        self.allotment_remaining: Optional[int] = None

        # Statistics
        self.scheduled_time: Optional[int] = None  # first dispatch
        self.end_time: Optional[int] = None
        self.waiting_time: Optional[int] = None
        self.turnaround_time: Optional[int] = None

    def next_io(self) -> Optional[IoEvent]:
        return self.io_events[0] if self.io_events else None

    def metrics(self) -> dict:
        """Row of the per-process metrics table"""
        return {
            'pid': self.pid,
            'arrival_time': self.arrival_time,
            'burst_time': self.burst_time,
            'scheduled_time': self.scheduled_time,
            'waiting_time': self.waiting_time,
            'turnaround_time': self.turnaround_time,
            'end_time': self.end_time,
        }

    def __repr__(self):
        return f"P{self.pid}[{self.state.value}]"

    def __str__(self):
        return f"Process {self.pid}: State={self.state.value}, Level={self.queue_level}, " \
               f"Remaining={self.remaining_time}"
