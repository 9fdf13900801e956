"""
Process control table: one PCB per submitted process, keyed by pid
"""

from typing import Dict, Iterable, List, Optional, Sequence

from .clock import Clock
from .exceptions import InvariantError
from .process import LEGAL_TRANSITIONS, Process, ProcessSpec, ProcessState
from .trace import TraceRecorder


class ProcessControlTable:
    """
    Owns the PCBs of one run.

    pids are assigned 1..N after ordering the input by arrival time, ties
    keeping submission order. Every state change closes a trace step.
    """

    def __init__(self, specs: Sequence[ProcessSpec], clock: Clock,
                 recorder: Optional[TraceRecorder] = None):
        self.clock = clock
        self.recorder = recorder

        ordered = sorted(enumerate(specs), key=lambda item: (item[1].arrival_time, item[0]))
        self._records: Dict[int, Process] = {}
        for pid, (_, spec) in enumerate(ordered, 1):
            self._records[pid] = Process(pid, spec.arrival_time, spec.burst_time,
                                         list(spec.io_events))

    def __len__(self) -> int:
        return len(self._records)

    def get(self, pid: int) -> Process:
        try:
            return self._records[pid]
        except KeyError:
            raise InvariantError(f"Unknown process id: {pid}") from None

    def records(self) -> List[Process]:
        return list(self._records.values())

    def pids_in_state(self, state: ProcessState) -> List[int]:
        return [p.pid for p in self._records.values() if p.state == state]

    # ----- queries -----

    def is_all_done(self) -> bool:
        return all(p.state == ProcessState.DONE for p in self._records.values())

    def is_any_running(self) -> bool:
        return any(p.state == ProcessState.RUNNING for p in self._records.values())

    def next_arrival(self, tick: int) -> Optional[int]:
        """Lowest pid still NEW whose arrival time is `tick`"""
        for pid, process in self._records.items():
            if process.state == ProcessState.NEW and process.arrival_time == tick:
                return pid
        return None

    def has_io_now(self, pid: int) -> bool:
        process = self.get(pid)
        io = process.next_io()
        return io is not None and io.offset == process.cpu_time

    # ----- mutations -----

    def set_state(self, pid: int, new_state: ProcessState):
        """
        Move pid to `new_state` and close the current trace step.

        Raises:
            InvariantError: the edge is not a legal transition
        """
        process = self.get(pid)
        if new_state not in LEGAL_TRANSITIONS[process.state]:
            raise InvariantError(
                f"Illegal transition for process {pid}: "
                f"{process.state.value} -> {new_state.value}")
        process.state = new_state
        if self.recorder is not None:
            self.recorder.close_step()

    def tick_cpu(self, pid: int) -> bool:
        """Run pid for one unit. Returns whether any work was done."""
        process = self.get(pid)
        if process.remaining_time <= 0:
            return False
        process.cpu_time += 1
        process.remaining_time -= 1
        return True

    def begin_io(self, pid: int):
        """Consume the I/O event due at the current offset and start its countdown."""
        process = self.get(pid)
        for index, io in enumerate(process.io_events):
            if io.offset == process.cpu_time:
                del process.io_events[index]
                process.io_time_remaining = io.duration
                return
        raise InvariantError(f"Process {pid} has no I/O due at offset {process.cpu_time}")

    def tick_io_all(self, skip: Iterable[int] = ()) -> List[int]:
        """
        Count down one unit of I/O for every waiting process.

        Args:
            skip: pids that blocked during this tick; their countdown starts next tick

        Returns:
            pids whose I/O just completed, ascending
        """
        skipped = set(skip)
        finished = []
        for pid, process in self._records.items():
            if pid in skipped or process.state != ProcessState.WAIT:
                continue
            if process.io_time_remaining > 0:
                process.io_time_remaining -= 1
                if process.io_time_remaining == 0:
                    finished.append(pid)
        return finished

    def assign_level(self, pid: int, level: int, allotment: Optional[int]):
        """Place pid at a priority level with a fresh allotment."""
        process = self.get(pid)
        process.queue_level = level
        process.allotment_remaining = allotment

    def start_quantum(self, pid: int, quantum: Optional[int]):
        self.get(pid).quantum_remaining = quantum

    def tick_counters(self, pid: int):
        """Charge one unit against the quantum and allotment."""
        process = self.get(pid)
        if process.quantum_remaining is not None and process.quantum_remaining > 0:
            process.quantum_remaining -= 1
        if process.allotment_remaining is not None and process.allotment_remaining > 0:
            process.allotment_remaining -= 1

    def mark_scheduled(self, pid: int):
        """Record the first dispatch; later calls are no-ops."""
        process = self.get(pid)
        if process.scheduled_time is not None:
            return
        process.scheduled_time = self.clock.current()
        process.waiting_time = process.scheduled_time - process.arrival_time

    def mark_ended(self, pid: int, offset: int = 0):
        """Record completion at `current() + offset`; later calls are no-ops."""
        process = self.get(pid)
        if process.end_time is not None:
            return
        process.end_time = self.clock.current() + offset
        process.turnaround_time = process.end_time - process.arrival_time

    def metrics_table(self) -> List[dict]:
        return [p.metrics() for p in self._records.values()]
