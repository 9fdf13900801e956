import pytest

from core.clock import Clock
from core.exceptions import ConfigurationError
from core.process_table import ProcessControlTable
from core.ready_queues import QueueConfig, ReadyQueueSet
from schedulers import create_policy, resolve_algorithm
from schedulers.advanced_schedulers import DEFAULT_MLFQ_QUEUES, MLFQPolicy
from schedulers.basic_schedulers import FCFSPolicy, RRPolicy, SJFPolicy, STCFPolicy


def table_with(make_spec, *bursts):
    return ProcessControlTable([make_spec(0, b) for b in bursts], Clock())


def test_fcfs_takes_head(make_spec):
    table = table_with(make_spec, 5, 1)
    policy = FCFSPolicy()
    queues = ReadyQueueSet(policy.queue_configs())
    assert policy.select_next(queues, table) is None
    queues.enqueue(0, 2)
    queues.enqueue(0, 1)
    assert policy.select_next(queues, table) == (0, 0)
    assert not policy.should_preempt_on_arrival(table.get(1), queues, table)
    assert not policy.should_preempt_on_timeout()


def test_sjf_picks_smallest_burst_earliest_on_ties(make_spec):
    table = table_with(make_spec, 6, 2, 2)
    policy = SJFPolicy()
    queues = ReadyQueueSet(policy.queue_configs())
    for pid in (1, 3, 2):
        queues.enqueue(0, pid)
    assert policy.select_next(queues, table) == (0, 1)

    # Selection is by total burst, not by what is left
    table.get(1).remaining_time = 1
    assert policy.select_next(queues, table) == (0, 1)
    assert not policy.should_preempt_on_arrival(table.get(1), queues, table)
    assert not policy.should_preempt_on_timeout()


def test_rr_single_queue_with_time_slice(make_spec):
    table = table_with(make_spec, 5, 1)
    policy = RRPolicy(quantum=3)
    queues = ReadyQueueSet(policy.queue_configs())
    assert policy.queue_configs() == [QueueConfig(quantum=3)]
    queues.enqueue(0, 2)
    queues.enqueue(0, 1)
    assert policy.select_next(queues, table) == (0, 0)
    assert policy.should_preempt_on_timeout()
    assert not policy.should_preempt_on_arrival(table.get(1), queues, table)
    assert not policy.should_preempt_on_io_return(table.get(1), [table.get(2)], queues, table)


@pytest.mark.parametrize("quantum", [0, -2, 1.5])
def test_rr_rejects_bad_quantum(quantum):
    with pytest.raises(ConfigurationError):
        RRPolicy(quantum=quantum)


def test_stcf_picks_least_remaining_earliest_on_ties(make_spec):
    table = table_with(make_spec, 5, 2, 2)
    policy = STCFPolicy()
    queues = ReadyQueueSet(policy.queue_configs())
    for pid in (1, 3, 2):
        queues.enqueue(0, pid)
    assert policy.select_next(queues, table) == (0, 1)


def test_stcf_preempts_only_for_strictly_shorter(make_spec):
    table = table_with(make_spec, 3, 3, 1)
    policy = STCFPolicy()
    queues = ReadyQueueSet(policy.queue_configs())
    queues.enqueue(0, 2)
    assert not policy.should_preempt_on_arrival(table.get(1), queues, table)
    queues.enqueue(0, 3)
    assert policy.should_preempt_on_arrival(table.get(1), queues, table)


def test_stcf_legacy_always_preempts(make_spec):
    table = table_with(make_spec, 1, 9)
    policy = STCFPolicy(legacy_trace=True)
    queues = ReadyQueueSet(policy.queue_configs())
    queues.enqueue(0, 2)
    assert policy.should_preempt_on_arrival(table.get(1), queues, table)
    assert policy.should_preempt_on_io_return(table.get(1), [table.get(2)], queues, table)


def test_stcf_io_return(make_spec):
    table = table_with(make_spec, 4, 2, 6)
    policy = STCFPolicy()
    queues = ReadyQueueSet(policy.queue_configs())
    running = table.get(1)
    assert policy.should_preempt_on_io_return(running, [table.get(2)], queues, table)
    assert not policy.should_preempt_on_io_return(running, [table.get(3)], queues, table)


def test_mlfq_defaults():
    policy = MLFQPolicy()
    assert policy.queue_configs() == DEFAULT_MLFQ_QUEUES
    assert policy.boost_interval == 20
    assert policy.should_preempt_on_timeout()


def test_mlfq_accepts_dicts_and_pairs():
    policy = MLFQPolicy(queues=[{'quantum': 1, 'allotmentTime': 3}, (2, None)], boost_interval=None)
    assert policy.queue_configs() == [QueueConfig(1, 3), QueueConfig(2, None)]
    assert policy.boost_interval is None


@pytest.mark.parametrize("kwargs", [
    {'queues': []},
    {'queues': [(0, 4)]},
    {'queues': [(2, -1)]},
    {'queues': [(2, 4)], 'boost_interval': 0},
])
def test_mlfq_rejects_bad_config(kwargs):
    with pytest.raises(ConfigurationError):
        MLFQPolicy(**kwargs)


def test_mlfq_selects_highest_nonempty_level(make_spec):
    table = table_with(make_spec, 5, 5, 5)
    policy = MLFQPolicy()
    queues = ReadyQueueSet(policy.queue_configs())
    queues.enqueue(2, 1)
    queues.enqueue(1, 3)
    queues.enqueue(1, 2)
    assert policy.select_next(queues, table) == (1, 0)


def test_mlfq_preemption_by_level(make_spec):
    table = table_with(make_spec, 5, 5)
    policy = MLFQPolicy()
    queues = ReadyQueueSet(policy.queue_configs())
    running, returned = table.get(1), table.get(2)

    assert not policy.should_preempt_on_arrival(running, queues, table)
    running.queue_level = 1
    assert policy.should_preempt_on_arrival(running, queues, table)

    returned.queue_level = 1
    assert not policy.should_preempt_on_io_return(running, [returned], queues, table)
    returned.queue_level = 0
    assert policy.should_preempt_on_io_return(running, [returned], queues, table)


def test_registry():
    assert resolve_algorithm('srtf') == 'STCF'
    assert isinstance(create_policy('rr', {'quantum': 3}), RRPolicy)
    assert create_policy('RR').quantum == 4
    assert isinstance(create_policy('MLFQ', {'boost_interval': 5}), MLFQPolicy)
    with pytest.raises(ConfigurationError):
        resolve_algorithm('LOTTERY')
    with pytest.raises(ConfigurationError):
        create_policy('FCFS', {'quantum': 2})
