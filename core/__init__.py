"""
Core modules for the CPU scheduling simulator
"""

from .clock import Clock
from .exceptions import ConfigurationError, InvariantError
from .policy import SchedulingPolicy
from .process import IoEvent, Process, ProcessSpec, ProcessState, validate_processes
from .process_table import ProcessControlTable
from .ready_queues import QueueConfig, ReadyQueueSet
from .scheduler_base import SAFETY_BOUND, SchedulerStats, SchedulingEngine, SimulationResult
from .trace import GraphicPoint, TraceRecorder, TraceStep

__all__ = [
    'Clock',
    'ConfigurationError',
    'InvariantError',
    'SchedulingPolicy',
    'IoEvent',
    'Process',
    'ProcessSpec',
    'ProcessState',
    'validate_processes',
    'ProcessControlTable',
    'QueueConfig',
    'ReadyQueueSet',
    'SAFETY_BOUND',
    'SchedulerStats',
    'SchedulingEngine',
    'SimulationResult',
    'GraphicPoint',
    'TraceRecorder',
    'TraceStep',
]
