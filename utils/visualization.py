"""
Visualization module: Gantt charts and statistics graphs
"""

from typing import List, Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches

from core.scheduler_base import SimulationResult
from core.trace import GraphicPoint

# (pid, start, end)
Segment = Tuple[int, int, int]


def segments_from_graphic(points: Sequence[GraphicPoint], end_time: int) -> List[Segment]:
    """
    Rebuild CPU occupancy from Gantt markers

    A marker for the current occupant closes its segment, a marker for any
    other pid opens one (closing the previous occupant), and a None marker
    leaves the CPU idle. A segment still open at the end runs to end_time.

    Args:
        points: markers in the order they were recorded
        end_time: time at which an open segment is cut off

    Returns:
        non-empty segments in chronological order
    """
    segments = []
    occupant: Optional[int] = None
    start = 0

    def close(at: int):
        if occupant is not None and at > start:
            segments.append((occupant, start, at))

    for point in points:
        if point.pid is None:
            close(point.time)
            occupant = None
        elif point.pid == occupant:
            close(point.time)
            occupant = None
        else:
            close(point.time)
            occupant = point.pid
            start = point.time

    close(end_time)
    return segments


class Visualizer:
    """Scheduling result visualization"""

    def __init__(self):
        # Per-process colors
        self.colors = plt.cm.Set3.colors
        self.idle_color = '#CCCCCC'

    def draw_gantt_chart(self, result: SimulationResult,
                         save_path: Optional[str] = None, show: bool = True):
        """
        Draw a Gantt chart

        Args:
            result: simulation result
            save_path: output path (None to skip saving)
            show: whether to display the chart
        """
        points = result.steps[-1].graphic if result.steps else []
        segments = segments_from_graphic(points, result.final_time)
        if not segments:
            print(f"No Gantt chart data for {result.algorithm}")
            return

        fig, ax = plt.subplots(figsize=(16, 6))

        pids = sorted(row['pid'] for row in result.metrics)
        pid_to_y = {pid: idx for idx, pid in enumerate(pids)}

        for pid, start, end in segments:
            duration = end - start
            y_pos = pid_to_y[pid]
            color = self.colors[pid % len(self.colors)]

            ax.barh(y_pos, duration, left=start, height=0.8,
                    color=color, edgecolor='black', linewidth=0.5)

            # Label only bars wide enough to hold it
            if duration > 1:
                ax.text(start + duration / 2, y_pos, f'P{pid}',
                        ha='center', va='center', fontsize=8, fontweight='bold')

        ax.set_yticks(range(len(pids)))
        ax.set_yticklabels([f'P{pid}' for pid in pids])
        ax.set_xlim(0, max(result.final_time, segments[-1][2]))
        ax.set_xlabel('Time', fontsize=12)
        ax.set_ylabel('Process', fontsize=12)
        title = f'Gantt Chart - {result.algorithm}'
        if not result.completed:
            title += ' (aborted)'
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.grid(axis='x', alpha=0.3)

        legend_elements = [mpatches.Patch(color=self.colors[pid % len(self.colors)],
                                          label=f'P{pid}') for pid in pids]
        ax.legend(handles=legend_elements, loc='upper right')

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Gantt chart saved to {save_path}")

        if show:
            plt.show()
        else:
            plt.close(fig)

    def compare_algorithms(self, results: List[SimulationResult],
                           save_path: Optional[str] = None, show: bool = True):
        """
        Performance comparison across algorithms

        Args:
            results: one result per algorithm
            save_path: output path
            show: whether to display the chart
        """
        if not results:
            print("No results to compare")
            return

        algorithms = [r.algorithm for r in results]
        panels = [
            ('avg_waiting_time', 'Average Waiting Time', 'skyblue', '{:.2f}'),
            ('avg_turnaround_time', 'Average Turnaround Time', 'lightcoral', '{:.2f}'),
            ('cpu_utilization', 'CPU Utilization (%)', 'lightgreen', '{:.1f}%'),
            ('context_switches', 'Context Switches', 'plum', '{:.0f}'),
        ]

        fig, axes = plt.subplots(2, 2, figsize=(14, 10))
        fig.suptitle('Scheduling Algorithms Performance Comparison',
                     fontsize=16, fontweight='bold')

        for ax, (key, label, color, fmt) in zip(axes.flat, panels):
            values = [r.statistics[key] for r in results]
            bars = ax.bar(range(len(algorithms)), values, color=color, edgecolor='black')
            ax.set_xticks(range(len(algorithms)))
            ax.set_xticklabels(algorithms, fontsize=10)
            ax.set_ylabel(label, fontsize=11)
            ax.set_title(f'{label} Comparison', fontsize=12, fontweight='bold')
            ax.grid(axis='y', alpha=0.3)
            if key == 'cpu_utilization':
                ax.set_ylim(0, 100)

            for bar, value in zip(bars, values):
                ax.text(bar.get_x() + bar.get_width() / 2., bar.get_height(),
                        fmt.format(value), ha='center', va='bottom', fontsize=9)

        plt.tight_layout()

        if save_path:
            plt.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"Comparison chart saved to {save_path}")

        if show:
            plt.show()
        else:
            plt.close(fig)

    def print_statistics_table(self, results: List[SimulationResult]):
        """
        Print statistics as a table

        Args:
            results: one result per algorithm
        """
        print("\n" + "=" * 100)
        print("Scheduling Algorithm Performance Comparison")
        print("=" * 100)
        print(f"{'Algorithm':<12} {'Avg Wait':>12} {'Avg Turnaround':>16} "
              f"{'CPU Util(%)':>12} {'Ctx Switch':>12} {'Final Time':>12} {'Completed':>10}")
        print("-" * 100)

        for result in results:
            stats = result.statistics
            print(f"{result.algorithm:<12} "
                  f"{stats['avg_waiting_time']:>12.2f} "
                  f"{stats['avg_turnaround_time']:>16.2f} "
                  f"{stats['cpu_utilization']:>12.2f} "
                  f"{stats['context_switches']:>12} "
                  f"{result.final_time:>12} "
                  f"{'yes' if result.completed else 'no':>10}")

        print("=" * 100 + "\n")

    def print_process_details(self, result: SimulationResult):
        """
        Print per-process metrics

        Args:
            result: simulation result
        """
        def show(value):
            return '-' if value is None else value

        print(f"\n{'=' * 72}")
        print(f"Process Details - {result.algorithm}")
        print(f"{'=' * 72}")
        print(f"{'PID':<6} {'Arrival':>8} {'Burst':>8} {'Scheduled':>10} {'End':>8} "
              f"{'Waiting':>10} {'Turnaround':>12}")
        print(f"{'-' * 72}")

        for row in result.metrics:
            print(f"{'P' + str(row['pid']):<6} "
                  f"{row['arrival_time']:>8} "
                  f"{row['burst_time']:>8} "
                  f"{show(row['scheduled_time']):>10} "
                  f"{show(row['end_time']):>8} "
                  f"{show(row['waiting_time']):>10} "
                  f"{show(row['turnaround_time']):>12}")

        print(f"{'=' * 72}\n")
