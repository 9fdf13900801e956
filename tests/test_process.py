import pytest

from core.exceptions import ConfigurationError
from core.process import IoEvent, Process, ProcessSpec, ProcessState, validate_processes


def test_from_dict_snake_case():
    spec = ProcessSpec.from_dict({
        'arrival_time': 2,
        'burst_time': 6,
        'io_events': [{'offset': 1, 'duration': 3}],
    })
    assert spec == ProcessSpec(2, 6, [IoEvent(1, 3)])


def test_from_dict_camel_case():
    spec = ProcessSpec.from_dict({
        'arrivalTime': 0,
        'burstTime': 4,
        'io': [{'start': 2, 'duration': 1}],
    })
    assert spec.arrival_time == 0
    assert spec.burst_time == 4
    assert spec.io_events == [IoEvent(2, 1)]


def test_to_dict():
    spec = ProcessSpec(1, 5, [IoEvent(2, 3), IoEvent(4, 1)])
    assert spec.to_dict() == {
        'arrival_time': 1,
        'burst_time': 5,
        'io_events': [{'offset': 2, 'duration': 3}, {'offset': 4, 'duration': 1}],
    }
    assert spec.total_io_time() == 4


def test_validate_sorts_io_by_offset(make_spec):
    [normalized] = validate_processes([make_spec(0, 10, (5, 1), (2, 3))])
    assert [io.offset for io in normalized.io_events] == [2, 5]


def test_validate_does_not_mutate_input(make_spec):
    original = make_spec(0, 10, (5, 1), (2, 3))
    validate_processes([original])
    assert [io.offset for io in original.io_events] == [5, 2]


def test_zero_burst_is_allowed(make_spec):
    assert validate_processes([make_spec(0, 0)])[0].burst_time == 0


@pytest.mark.parametrize("specs", [
    [],
    [ProcessSpec(-1, 3)],
    [ProcessSpec(0, -2)],
    [ProcessSpec(0, 3.5)],
    [ProcessSpec(0, 3, [IoEvent(-1, 2)])],
    [ProcessSpec(0, 3, [IoEvent(1, 0)])],
    [ProcessSpec(0, 3, [IoEvent(3, 2)])],
])
def test_validate_rejects_bad_input(specs):
    with pytest.raises(ConfigurationError):
        validate_processes(specs)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        validate_processes([])


def test_new_process_defaults():
    p = Process(1, 0, 5, [IoEvent(2, 1)])
    assert p.state == ProcessState.NEW
    assert p.remaining_time == 5
    assert p.cpu_time == 0
    assert p.next_io() == IoEvent(2, 1)
    assert p.metrics() == {
        'pid': 1,
        'arrival_time': 0,
        'burst_time': 5,
        'scheduled_time': None,
        'waiting_time': None,
        'turnaround_time': None,
        'end_time': None,
    }
    assert repr(p) == "P1[NEW]"
