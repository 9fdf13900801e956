import pytest

from core.process import IoEvent, ProcessSpec
from utils.input_parser import InputParser


def test_parse_file(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text(
        "# comment\n"
        "\n"
        '0,8,"5:1;2:3"\n'
        "3,4\n"
        '1,2,""\n',
        encoding='utf-8',
    )
    specs = InputParser.parse_file(str(path))
    assert specs == [
        ProcessSpec(0, 8, [IoEvent(2, 3), IoEvent(5, 1)]),
        ProcessSpec(3, 4, []),
        ProcessSpec(1, 2, []),
    ]


def test_bad_lines_are_skipped(tmp_path, capsys):
    path = tmp_path / "input.txt"
    path.write_text('0,4\nx,3\n0,2,"2:1"\n1,-1\n2,3,"1-2"\n', encoding='utf-8')
    specs = InputParser.parse_file(str(path))
    assert specs == [ProcessSpec(0, 4, [])]
    out = capsys.readouterr().out
    assert out.count("Warning: failed to parse line") == 4


def test_missing_file_returns_empty(tmp_path, capsys):
    assert InputParser.parse_file(str(tmp_path / "missing.txt")) == []
    assert "not found" in capsys.readouterr().out


def test_parse_io_events():
    assert InputParser.parse_io_events('"1:2; 4:1;"') == [IoEvent(1, 2), IoEvent(4, 1)]
    assert InputParser.parse_io_events('') == []
    with pytest.raises(ValueError):
        InputParser.parse_io_events('1:2:3')
    with pytest.raises(ValueError):
        InputParser.parse_io_events('a:2')


def test_saved_file_parses_back(tmp_path):
    processes = [ProcessSpec(0, 6, [IoEvent(1, 2), IoEvent(3, 4)]), ProcessSpec(2, 3, [])]
    path = tmp_path / "out.txt"
    InputParser.save_processes_to_file(processes, str(path))
    assert InputParser.parse_file(str(path)) == processes


def test_random_processes_are_reproducible_and_valid():
    first = InputParser.generate_random_processes(num_processes=20, seed=3)
    second = InputParser.generate_random_processes(num_processes=20, seed=3)
    assert first == second
    assert len(first) == 20
    for spec in first:
        assert spec.burst_time >= 1
        offsets = [io.offset for io in spec.io_events]
        assert offsets == sorted(set(offsets))
        assert all(0 < offset < spec.burst_time for offset in offsets)


def test_print_process_summary(capsys):
    InputParser.print_process_summary([ProcessSpec(4, 2, []), ProcessSpec(0, 5, [IoEvent(1, 3)])])
    out = capsys.readouterr().out
    assert "Total processes: 2" in out
    assert "I/O-bound: 1" in out
    lines = [line for line in out.splitlines() if line[:2] in ('P1', 'P2')]
    assert lines[0].split()[:3] == ['P1', '0', '5']
    assert lines[1].split()[:3] == ['P2', '4', '2']
