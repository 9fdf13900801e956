from core.trace import GraphicPoint
from schedulers import run_simulation
from utils.visualization import Visualizer, segments_from_graphic


def points(*pairs):
    return [GraphicPoint(pid, time) for pid, time in pairs]


def test_marker_for_occupant_closes_segment():
    assert segments_from_graphic(points((1, 0), (1, 3)), 10) == [(1, 0, 3)]


def test_marker_for_other_pid_switches():
    assert segments_from_graphic(points((1, 0), (2, 2), (2, 5)), 5) == [(1, 0, 2), (2, 2, 5)]


def test_idle_marker():
    assert segments_from_graphic(points((1, 0), (1, 1), (None, 1), (2, 4)), 6) == [
        (1, 0, 1), (2, 4, 6)]


def test_open_segment_runs_to_end_and_empty_ones_drop():
    assert segments_from_graphic(points((1, 0), (1, 0), (2, 0)), 3) == [(2, 0, 3)]
    assert segments_from_graphic([], 5) == []


def test_draw_gantt_chart(tmp_path, make_spec):
    result = run_simulation([make_spec(0, 3, (1, 2)), make_spec(1, 2)], 'MLFQ')
    path = tmp_path / "gantt.png"
    Visualizer().draw_gantt_chart(result, save_path=str(path), show=False)
    assert path.exists()


def test_compare_algorithms(tmp_path, make_spec):
    specs = [make_spec(0, 5), make_spec(1, 2)]
    results = [run_simulation(specs, algo) for algo in ('FCFS', 'STCF', 'MLFQ')]
    path = tmp_path / "comparison.png"
    Visualizer().compare_algorithms(results, save_path=str(path), show=False)
    assert path.exists()


def test_print_tables(capsys, make_spec):
    result = run_simulation([make_spec(0, 2), make_spec(0, 1)], 'FCFS')
    visualizer = Visualizer()
    visualizer.print_statistics_table([result])
    visualizer.print_process_details(result)
    out = capsys.readouterr().out
    assert "FCFS" in out
    assert "Process Details - FCFS" in out
    assert any(line.split()[:2] == ['P2', '0'] for line in out.splitlines())
