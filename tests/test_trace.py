from core.clock import Clock
from core.process import ProcessState
from core.process_table import ProcessControlTable
from core.ready_queues import QueueConfig, ReadyQueueSet
from core.trace import GraphicPoint, TraceRecorder


def build(make_spec):
    clock = Clock()
    recorder = TraceRecorder(clock)
    table = ProcessControlTable([make_spec(0, 3), make_spec(0, 2)], clock, recorder)
    queues = ReadyQueueSet([QueueConfig()])
    recorder.attach(table, queues)
    return clock, recorder, table, queues


def test_close_step_snapshots_state(make_spec):
    clock, recorder, table, queues = build(make_spec)
    recorder.log_explanation("Process 1 arrived and joined ready queue 0.")
    recorder.note_arrival(1)
    queues.enqueue(0, 1)
    table.set_state(1, ProcessState.READY)

    [step] = recorder.steps
    assert step.index == 0
    assert step.time == 0
    assert step.explanation == ["Process 1 arrived and joined ready queue 0."]
    assert step.arrivals == [1]
    assert step.ready_queues == [[1]]
    assert step.new_processes == [2]
    assert step.process_states[1] == {'pid': 1, 'state': 'READY', 'queue_level': 0}
    assert [row['pid'] for row in step.graphic_table] == [1, 2]


def test_snapshots_are_copies(make_spec):
    clock, recorder, table, queues = build(make_spec)
    queues.enqueue(0, 1)
    table.set_state(1, ProcessState.READY)
    queues.enqueue(0, 2)
    table.set_state(2, ProcessState.READY)
    assert recorder.steps[0].ready_queues == [[1]]
    assert recorder.steps[1].ready_queues == [[1, 2]]


def test_stamp_uses_offset(make_spec):
    clock, recorder, table, queues = build(make_spec)
    clock.advance()
    recorder.stamp(1)
    recorder.close_step()
    assert recorder.steps[0].time == 2


def test_graphic_accumulates(make_spec):
    clock, recorder, table, queues = build(make_spec)
    recorder.mark_point(1)
    recorder.close_step()
    clock.advance()
    recorder.mark_point(1, offset=1)
    recorder.mark_idle_point()
    recorder.close_step()

    assert recorder.steps[0].graphic == [GraphicPoint(1, 0)]
    assert recorder.steps[1].graphic == [GraphicPoint(1, 0), GraphicPoint(1, 2), GraphicPoint(None, 1)]


def test_buffered_segment_only_in_next_step(make_spec):
    clock, recorder, table, queues = build(make_spec)
    recorder.mark_point(1)
    clock.advance()
    recorder.buffer_running_segment(1)
    recorder.close_step()
    recorder.close_step()

    assert recorder.steps[0].graphic == [GraphicPoint(1, 0), GraphicPoint(1, 1)]
    assert recorder.steps[1].graphic == [GraphicPoint(1, 0)]


def test_finalize_drops_open_step(make_spec):
    clock, recorder, table, queues = build(make_spec)
    recorder.close_step()
    recorder.log_explanation("never closed")
    steps = recorder.finalize()
    assert len(steps) == 1
    assert all("never closed" not in step.explanation for step in steps)


def test_to_dict_uses_string_keys(make_spec):
    clock, recorder, table, queues = build(make_spec)
    recorder.close_step()
    data = recorder.steps[0].to_dict()
    assert set(data['process_states']) == {'1', '2'}
    assert data['graphic'] == []
