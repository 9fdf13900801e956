"""
Scheduling engine: the tick loop shared by every policy
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .clock import Clock
from .exceptions import ConfigurationError, InvariantError
from .policy import SchedulingPolicy
from .process import ProcessSpec, ProcessState, validate_processes
from .process_table import ProcessControlTable
from .ready_queues import ReadyQueueSet
from .trace import TraceRecorder, TraceStep

logger = logging.getLogger(__name__)

# Maximum simulated tick; a run still going past it is aborted
SAFETY_BOUND = 1000


class SchedulerStats:
    """Scheduling statistics"""

    def __init__(self):
        self.total_waiting_time = 0
        self.total_turnaround_time = 0
        self.context_switches = 0
        self.cpu_busy_time = 0
        self.total_simulation_time = 0
        self.process_count = 0

    def calculate_averages(self) -> Dict:
        """Averages over completed processes"""
        utilization = (self.cpu_busy_time / self.total_simulation_time * 100
                       if self.total_simulation_time > 0 else 0)
        if self.process_count == 0:
            return {
                'avg_waiting_time': 0,
                'avg_turnaround_time': 0,
                'cpu_utilization': utilization,
                'cpu_busy_time': self.cpu_busy_time,
                'context_switches': self.context_switches,
                'completed_processes': 0,
            }

        return {
            'avg_waiting_time': self.total_waiting_time / self.process_count,
            'avg_turnaround_time': self.total_turnaround_time / self.process_count,
            'cpu_utilization': utilization,
            'cpu_busy_time': self.cpu_busy_time,
            'context_switches': self.context_switches,
            'completed_processes': self.process_count,
        }


@dataclass
class SimulationResult:
    """Everything a run produces: the replay trace plus the flat metrics table"""
    algorithm: str
    completed: bool
    final_time: int
    steps: List[TraceStep] = field(default_factory=list)
    metrics: List[dict] = field(default_factory=list)
    statistics: Dict = field(default_factory=dict)
    event_log: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'algorithm': self.algorithm,
            'completed': self.completed,
            'final_time': self.final_time,
            'steps': [step.to_dict() for step in self.steps],
            'metrics': [dict(row) for row in self.metrics],
            'statistics': dict(self.statistics),
            'event_log': list(self.event_log),
        }


class SchedulingEngine:
    """
    Discrete-time single-CPU simulation driven by an injected policy.

    Each tick runs, in this order: arrivals, timeout check, dispatch,
    execution, I/O completion, clock advance, and (MLFQ) the periodic boost.
    The order decides who runs on ties and must not change.
    """

    def __init__(self, processes: Sequence[ProcessSpec], policy: SchedulingPolicy,
                 safety_bound: Optional[int] = None):
        """
        Args:
            processes: submitted processes, in submission order
            policy: decision functions for queue topology, selection and preemption
            safety_bound: last tick that may be simulated (defaults to SAFETY_BOUND)

        Raises:
            ConfigurationError: invalid processes or safety bound
        """
        self.specs = validate_processes(processes)
        if safety_bound is None:
            safety_bound = SAFETY_BOUND
        if not isinstance(safety_bound, int) or safety_bound < 0:
            raise ConfigurationError("Safety bound must be a non-negative integer")

        self.policy = policy
        self.name = policy.name
        self.safety_bound = safety_bound

        self.clock = Clock()
        self.trace = TraceRecorder(self.clock)
        self._prepare()

    def _prepare(self):
        """Fresh table, queues, trace and counters for one run"""
        self.clock.reset()
        self.table = ProcessControlTable(self.specs, self.clock, self.trace)
        self.ready_queues = ReadyQueueSet(self.policy.queue_configs())
        self.trace.attach(self.table, self.ready_queues)
        self.trace.reset()

        self.running_pid: Optional[int] = None
        self.previous_pid: Optional[int] = None
        self.stats = SchedulerStats()
        self.event_log: List[str] = []
        self.completed = False
        self._blocked_this_tick: List[int] = []

    # ----- logging -----

    def log_event(self, message: str, offset: int = 0):
        """Append a line to the event log"""
        log_entry = f"[T={self.clock.current() + offset:3d}] {message}"
        self.event_log.append(log_entry)
        logger.debug("%s: %s", self.name, log_entry)

    def explain(self, text: str, offset: int = 0):
        """Explanation shown in the replay, mirrored in the event log"""
        self.trace.log_explanation(text)
        self.log_event(text, offset)

    # ----- main loop -----

    def run(self, verbose: bool = False) -> SimulationResult:
        """
        Simulate until every process is done or the safety bound trips.

        Args:
            verbose: print the event log when finished

        Returns:
            SimulationResult; `completed` is False when the run was aborted
        """
        self._prepare()
        self.log_event(f"===== {self.name} Scheduling Started =====")
        logger.info("Running %s with %d processes", self.name, len(self.table))

        while not self.table.is_all_done():
            if self.clock.current() > self.safety_bound:
                self.log_event(f"WARNING: Simulation exceeded safety bound ({self.safety_bound})")
                logger.warning("%s aborted at tick %d: safety bound %d exceeded",
                               self.name, self.clock.current(), self.safety_bound)
                break
            self.execute_one_step()

        self.completed = self.table.is_all_done()
        if self.completed:
            self.log_event(f"===== {self.name} Scheduling Completed =====")
        logger.info("%s finished at tick %d (completed=%s)",
                    self.name, self.clock.current(), self.completed)

        if verbose:
            for line in self.event_log:
                print(line)

        return self.get_results()

    def execute_one_step(self) -> bool:
        """
        Simulate one tick.

        Returns:
            whether every process is done
        """
        self._blocked_this_tick = []

        # 1. Arrivals
        self.handle_process_arrival()

        # 2. Quantum / allotment expiry
        self.check_timeout()

        # 3. Dispatch
        self.schedule()

        # 4. Run the CPU for one unit
        self.execute_process()

        # 5. I/O completion
        self.handle_io_completion()

        # 6. Advance
        self.clock.advance()

        # 7. Priority boost
        self.boost()

        return self.table.is_all_done()

    # ----- tick phases -----

    def handle_process_arrival(self):
        """Admit every process arriving at the current tick"""
        now = self.clock.current()
        arrived = False

        pid = self.table.next_arrival(now)
        while pid is not None:
            level = self.ready_queues.clamp_level(self.policy.initial_priority())
            self.explain(f"Process {pid} arrived and joined ready queue {level}.")
            if self.running_pid is not None:
                self.trace.buffer_running_segment(self.running_pid)
            self.trace.stamp()
            self.trace.note_arrival(pid)

            self.table.assign_level(pid, level, self.ready_queues.allotment(level))
            self.ready_queues.enqueue(level, pid)
            self.table.set_state(pid, ProcessState.READY)
            arrived = True
            pid = self.table.next_arrival(now)

        if arrived and self.running_pid is not None:
            running = self.table.get(self.running_pid)
            if self.policy.should_preempt_on_arrival(running, self.ready_queues, self.table):
                self.deschedule(f"Process {running.pid} descheduled due to new process.")

    def check_timeout(self):
        """Take the CPU away from a process whose quantum or allotment ran out"""
        pid = self.running_pid
        if pid is None:
            return

        process = self.table.get(pid)
        # Finishing and I/O are handled by execute_process
        if process.remaining_time == 0 or self.table.has_io_now(pid):
            return

        quantum_expired = (self.policy.should_preempt_on_timeout()
                           and process.quantum_remaining == 0)
        allotment_expired = process.allotment_remaining == 0
        if not quantum_expired and not allotment_expired:
            return

        if allotment_expired:
            old_level = process.queue_level
            new_level = self.demote(pid)
            reason = (f"Process {pid} used its allotment in queue {old_level}, "
                      f"moved to queue {new_level}.")
        else:
            reason = f"Process {pid} timed out, stays in queue {process.queue_level}."

        self.deschedule(reason)

    def schedule(self):
        """Dispatch the policy's choice if the CPU is idle"""
        if self.running_pid is not None:
            return

        choice = self.policy.select_next(self.ready_queues, self.table)
        if choice is None:
            return

        if self.table.is_any_running():
            raise InvariantError("Dispatch while another process is still running")

        level, index = choice
        pid = self.ready_queues.dequeue(level, index)
        process = self.table.get(pid)
        if process.queue_level != level:
            raise InvariantError(
                f"Process {pid} was queued at level {level} but belongs to level "
                f"{process.queue_level}")

        self.explain(f"Process {pid} scheduled from ready queue {level}.")
        self.trace.mark_point(pid)
        self.trace.stamp()

        if self.previous_pid is not None and self.previous_pid != pid:
            self.stats.context_switches += 1
            self.log_event(f"Context Switch: P{self.previous_pid} → P{pid}")
        self.previous_pid = pid

        self.table.mark_scheduled(pid)
        self.table.start_quantum(pid, self.ready_queues.quantum(level))
        self.table.set_state(pid, ProcessState.RUNNING)
        self.running_pid = pid

    def execute_process(self):
        """Run the dispatched process for one unit, or finish / block it"""
        # Zero-burst processes finish on dispatch; the CPU is handed over
        # within the same tick.
        while (self.running_pid is not None
               and self.table.get(self.running_pid).remaining_time == 0):
            self.finish_process(self.running_pid)
            self.schedule()

        pid = self.running_pid
        if pid is None:
            return

        if self.table.has_io_now(pid):
            self.start_io(pid)
            return

        self.table.tick_cpu(pid)
        self.table.tick_counters(pid)
        self.stats.cpu_busy_time += 1

        if self.table.get(pid).remaining_time == 0:
            # The last unit completes at the end of this tick
            self.finish_process(pid, offset=1)

    def handle_io_completion(self):
        """Count down I/O and return finished processes to their queues"""
        finished = self.table.tick_io_all(skip=self._blocked_this_tick)
        if not finished:
            return

        for pid in finished:
            process = self.table.get(pid)
            self.explain(f"Process {pid} finished I/O, back to ready queue "
                         f"{process.queue_level}.", offset=1)
            self.trace.stamp(1)
            self.ready_queues.enqueue(process.queue_level, pid)
            self.table.set_state(pid, ProcessState.READY)

        if self.running_pid is None:
            return
        running = self.table.get(self.running_pid)
        returned = [self.table.get(pid) for pid in finished]
        if self.policy.should_preempt_on_io_return(running, returned,
                                                   self.ready_queues, self.table):
            self.deschedule(f"Process {running.pid} descheduled due to I/O completion.",
                            offset=1)

    def boost(self):
        """Move every process back to level 0 on each boost interval"""
        interval = self.policy.boost_interval
        if not interval or self.table.is_all_done():
            return
        if self.clock.current() % interval != 0:
            return

        top_allotment = self.ready_queues.allotment(0)
        boosted = []
        for level in range(len(self.ready_queues)):
            for pid in self.ready_queues.drain(level):
                self.table.assign_level(pid, 0, top_allotment)
                self.ready_queues.enqueue(0, pid)
                boosted.append(pid)

        for process in self.table.records():
            if process.state == ProcessState.RUNNING:
                self.table.assign_level(process.pid, 0, top_allotment)
                self.table.start_quantum(process.pid, self.ready_queues.quantum(0))
                boosted.append(process.pid)
            elif process.state == ProcessState.WAIT:
                self.table.assign_level(process.pid, 0, top_allotment)
                boosted.append(process.pid)

        if not boosted:
            return

        self.explain("Boosting processes")
        self.explain(f"Boosted processes: {', '.join(str(pid) for pid in sorted(boosted))}")
        self.trace.stamp()
        self.trace.close_step()

    # ----- helpers -----

    def deschedule(self, reason: str, offset: int = 0):
        """Return the running process to the tail of its queue"""
        pid = self.running_pid
        process = self.table.get(pid)

        self.explain(reason, offset)
        self.trace.mark_point(pid, offset)
        self.trace.stamp(offset)

        # A preempted process with a spent allotment is demoted like a timed-out one
        if process.allotment_remaining == 0:
            old_level = process.queue_level
            new_level = self.demote(pid)
            self.explain(f"Process {pid} used its allotment in queue {old_level}, "
                         f"moved to queue {new_level}.", offset)

        self.ready_queues.enqueue(process.queue_level, pid)
        self.table.set_state(pid, ProcessState.READY)
        self.running_pid = None

    def demote(self, pid: int) -> int:
        """Drop pid one level (clamped) with that level's allotment"""
        process = self.table.get(pid)
        level = self.ready_queues.clamp_level(process.queue_level + 1)
        self.table.assign_level(pid, level, self.ready_queues.allotment(level))
        return level

    def finish_process(self, pid: int, offset: int = 0):
        """Terminate pid at `current() + offset`"""
        self.explain(f"Process {pid} finished.", offset)
        self.trace.mark_point(pid, offset)
        self.trace.stamp(offset)

        self.table.mark_ended(pid, offset)
        self.table.set_state(pid, ProcessState.DONE)
        self.running_pid = None

        process = self.table.get(pid)
        self.log_event(f"P{pid} → Done (WT={process.waiting_time}, "
                       f"TT={process.turnaround_time})", offset)

    def start_io(self, pid: int):
        """Block pid on its next I/O request"""
        self.explain(f"Process {pid} has I/O.")
        self.trace.mark_point(pid)
        self.trace.mark_idle_point()
        self.trace.stamp()

        self.table.begin_io(pid)
        process = self.table.get(pid)
        self.explain(f"Process {pid} added to wait queue for "
                     f"{process.io_time_remaining} units.")

        if process.allotment_remaining == 0:
            old_level = process.queue_level
            new_level = self.demote(pid)
            self.explain(f"Process {pid} used its allotment in queue {old_level}, "
                         f"moved to queue {new_level}.")

        self.table.set_state(pid, ProcessState.WAIT)
        self.running_pid = None
        self._blocked_this_tick.append(pid)

    def update_statistics(self):
        """Final statistics update"""
        self.stats.total_simulation_time = self.clock.current()
        done = [self.table.get(pid) for pid in self.table.pids_in_state(ProcessState.DONE)]
        self.stats.process_count = len(done)
        self.stats.total_waiting_time = sum(p.waiting_time for p in done)
        self.stats.total_turnaround_time = sum(p.turnaround_time for p in done)

    def get_results(self) -> SimulationResult:
        """
        Finalize the trace and collect the run's outputs.

        Returns:
            SimulationResult with the step log, metrics, statistics and event log
        """
        self.update_statistics()
        return SimulationResult(
            algorithm=self.name,
            completed=self.completed,
            final_time=self.clock.current(),
            steps=self.trace.finalize(),
            metrics=self.table.metrics_table(),
            statistics=self.stats.calculate_averages(),
            event_log=list(self.event_log),
        )
