"""
Input file parser and random process generator
"""

import random
from typing import List, Optional

from core.process import IoEvent, ProcessSpec, validate_processes


class InputParser:
    """Input file parser"""

    @staticmethod
    def parse_file(filename: str) -> List[ProcessSpec]:
        """
        Read processes from a CSV-like file

        File format: ArrivalTime,BurstTime,"offset:duration;offset:duration"
        e.g. 0,8,"2:3;5:1"
        The I/O field may be omitted or left empty.

        Args:
            filename: input file path

        Returns:
            list of process specs (pids are assigned by the engine)
        """
        processes = []

        try:
            with open(filename, 'r', encoding='utf-8') as f:
                for line_no, line in enumerate(f, 1):
                    line = line.strip()

                    # Skip comments and blank lines
                    if not line or line.startswith('#'):
                        continue

                    try:
                        parts = InputParser._parse_line(line)
                        if parts:
                            processes.append(InputParser._create_spec_from_parts(parts))
                    except ValueError as e:
                        print(f"Warning: failed to parse line {line_no}: {line}")
                        print(f"Error: {e}")
                        continue

            print(f"Loaded {len(processes)} processes from {filename}")
            return processes

        except FileNotFoundError:
            print(f"Error: file '{filename}' not found")
            return []
        except OSError as e:
            print(f"Error reading file: {e}")
            return []

    @staticmethod
    def _parse_line(line: str) -> List[str]:
        """Split a CSV line, honouring double quotes"""
        parts = []
        current = ""
        in_quotes = False

        for char in line:
            if char == '"':
                in_quotes = not in_quotes
            elif char == ',' and not in_quotes:
                parts.append(current.strip())
                current = ""
            else:
                current += char

        if current or parts:
            parts.append(current.strip())

        return parts

    @staticmethod
    def parse_io_events(text: str) -> List[IoEvent]:
        """
        Parse an I/O field such as "2:3;5:1"

        Args:
            text: semicolon-separated offset:duration pairs

        Returns:
            I/O events in the order written

        Raises:
            ValueError: malformed pair or non-integer value
        """
        events = []
        text = text.strip().strip('"\'')
        for chunk in text.split(';'):
            chunk = chunk.strip()
            if not chunk:
                continue
            if chunk.count(':') != 1:
                raise ValueError(f"Invalid I/O event '{chunk}': expected offset:duration")
            offset_str, duration_str = chunk.split(':')
            try:
                events.append(IoEvent(int(offset_str), int(duration_str)))
            except ValueError:
                raise ValueError(f"Invalid I/O event '{chunk}': values must be integers") from None
        return events

    @staticmethod
    def _create_spec_from_parts(parts: List[str]) -> ProcessSpec:
        """Build a process spec from the parsed fields"""
        if len(parts) < 2:
            raise ValueError(f"Invalid format: expected at least 2 fields, got {len(parts)}")

        try:
            arrival_time = int(parts[0])
            burst_time = int(parts[1])
        except ValueError as e:
            raise ValueError(f"Numeric field conversion error: {e}") from None

        io_events = InputParser.parse_io_events(parts[2]) if len(parts) > 2 else []
        spec = ProcessSpec(arrival_time, burst_time, io_events)

        # Same checks the engine applies; ConfigurationError is a ValueError
        return validate_processes([spec])[0]

    @staticmethod
    def generate_random_processes(num_processes: int = 10,
                                  max_arrival: int = 20,
                                  max_burst: int = 15,
                                  max_io: int = 6,
                                  seed: Optional[int] = None) -> List[ProcessSpec]:
        """
        Generate random processes

        Args:
            num_processes: number of processes
            max_arrival: latest arrival time
            max_burst: longest CPU burst
            max_io: longest single I/O duration
            seed: random seed for reproducible workloads

        Returns:
            list of process specs
        """
        rng = random.Random(seed)
        processes = []

        for _ in range(num_processes):
            arrival_time = rng.randint(0, max_arrival)
            burst_time = rng.randint(1, max_burst)

            # 40% of the processes are I/O-bound
            io_events = []
            if burst_time >= 2 and rng.random() < 0.4:
                num_io = rng.randint(1, min(2, burst_time - 1))
                offsets = sorted(rng.sample(range(1, burst_time), num_io))
                io_events = [IoEvent(offset, rng.randint(1, max_io)) for offset in offsets]

            processes.append(ProcessSpec(arrival_time, burst_time, io_events))

        print(f"Generated {num_processes} random processes")
        return processes

    @staticmethod
    def save_processes_to_file(processes: List[ProcessSpec], filename: str):
        """
        Save processes in the input file format

        Args:
            processes: processes to save
            filename: output file path
        """
        try:
            with open(filename, 'w', encoding='utf-8') as f:
                f.write("# CPU Scheduling Simulator Input Data\n")
                f.write("# Format: ArrivalTime,BurstTime,\"offset:duration;offset:duration\"\n\n")

                for spec in processes:
                    io_str = ';'.join(f"{io.offset}:{io.duration}" for io in spec.io_events)
                    f.write(f'{spec.arrival_time},{spec.burst_time},"{io_str}"\n')

            print(f"Saved {len(processes)} processes to {filename}")

        except OSError as e:
            print(f"Error saving file: {e}")

    @staticmethod
    def print_process_summary(processes: List[ProcessSpec]):
        """Print a summary of the workload in pid order"""
        print("\n" + "=" * 80)
        print("Process Summary")
        print("=" * 80)
        print(f"{'PID':<6} {'Arrival':>8} {'Burst':>8} {'I/O count':>10} {'I/O total':>10}  I/O events")
        print("-" * 80)

        ordered = sorted(enumerate(processes), key=lambda item: (item[1].arrival_time, item[0]))
        for pid, (_, p) in enumerate(ordered, 1):
            events = ', '.join(f"{io.offset}:{io.duration}" for io in p.io_events) or '-'
            print(f"{'P' + str(pid):<6} {p.arrival_time:>8} {p.burst_time:>8} "
                  f"{len(p.io_events):>10} {p.total_io_time():>10}  {events}")

        print("=" * 80 + "\n")

        io_bound = sum(1 for p in processes if p.io_events)
        print(f"Total processes: {len(processes)}")
        print(f"  - CPU-bound: {len(processes) - io_bound}")
        print(f"  - I/O-bound: {io_bound}")
        print()
