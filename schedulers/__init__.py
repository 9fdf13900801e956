"""
CPU scheduling policies and the simulation entry point
"""

from typing import Dict, Iterable, Optional, Union

from core.exceptions import ConfigurationError
from core.process import ProcessSpec
from core.scheduler_base import SchedulingEngine, SimulationResult

from .advanced_schedulers import DEFAULT_BOOST_INTERVAL, DEFAULT_MLFQ_QUEUES, MLFQPolicy
from .basic_schedulers import DEFAULT_TIME_SLICE, FCFSPolicy, RRPolicy, SJFPolicy, STCFPolicy

# Algorithm mapping
ALGORITHM_MAP = {
    'FCFS': {
        'name': 'FCFS (First-Come, First-Served)',
        'class': FCFSPolicy,
        'params': {},
        'preemptive': False,
    },
    'SJF': {
        'name': 'SJF (Shortest Job First)',
        'class': SJFPolicy,
        'params': {},
        'preemptive': False,
    },
    'RR': {
        'name': 'Round Robin',
        'class': RRPolicy,
        'params': {'quantum': DEFAULT_TIME_SLICE},
        'preemptive': True,
    },
    'STCF': {
        'name': 'STCF (Shortest Time-to-Completion First)',
        'class': STCFPolicy,
        'params': {'legacy_trace': False},
        'preemptive': True,
    },
    'MLFQ': {
        'name': 'MLFQ (Multi-Level Feedback Queue)',
        'class': MLFQPolicy,
        'params': {
            'queues': [q.to_dict() for q in DEFAULT_MLFQ_QUEUES],
            'boost_interval': DEFAULT_BOOST_INTERVAL,
        },
        'preemptive': True,
    },
}

ALIASES = {'SRTF': 'STCF', 'ROUNDROBIN': 'RR', 'ROUND_ROBIN': 'RR'}


def resolve_algorithm(algorithm: str) -> str:
    """Canonical algorithm id for a user-supplied name"""
    key = algorithm.strip().upper()
    key = ALIASES.get(key, key)
    if key not in ALGORITHM_MAP:
        raise ConfigurationError(f"Unknown algorithm: {algorithm}")
    return key


def create_policy(algorithm: str, params: Optional[Dict] = None):
    """
    Build a policy from its id and per-run parameter overrides.

    Unknown parameters are rejected rather than silently ignored.
    """
    key = resolve_algorithm(algorithm)
    algo_info = ALGORITHM_MAP[key]
    merged = dict(algo_info['params'])
    for name, value in (params or {}).items():
        if name not in merged:
            raise ConfigurationError(f"{key} does not accept parameter '{name}'")
        merged[name] = value
    return algo_info['class'](**merged)


def run_simulation(processes: Iterable[Union[ProcessSpec, dict]], algorithm: str,
                   params: Optional[Dict] = None,
                   safety_bound: Optional[int] = None) -> SimulationResult:
    """
    Run one simulation.

    Args:
        processes: ProcessSpec objects or {arrival_time, burst_time, io_events} mappings
        algorithm: 'FCFS', 'SJF', 'RR', 'STCF' (or 'SRTF') or 'MLFQ'
        params: policy parameters overriding the defaults
        safety_bound: last tick that may be simulated

    Returns:
        SimulationResult with the finalized trace and metrics table

    Raises:
        ConfigurationError: invalid input, rejected before the run starts
    """
    specs = [p if isinstance(p, ProcessSpec) else ProcessSpec.from_dict(p) for p in processes]
    policy = create_policy(algorithm, params)
    engine = SchedulingEngine(specs, policy, safety_bound=safety_bound)
    return engine.run()


__all__ = [
    'ALGORITHM_MAP',
    'DEFAULT_BOOST_INTERVAL',
    'DEFAULT_MLFQ_QUEUES',
    'DEFAULT_TIME_SLICE',
    'FCFSPolicy',
    'MLFQPolicy',
    'RRPolicy',
    'SJFPolicy',
    'STCFPolicy',
    'create_policy',
    'resolve_algorithm',
    'run_simulation',
]
