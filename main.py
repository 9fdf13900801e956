#!/usr/bin/env python3
"""
CPU Scheduling Simulator - command line entry point
Includes algorithm selection
"""

import logging
import os
import sys

from core.exceptions import ConfigurationError
from schedulers import run_simulation
from utils.input_parser import InputParser
from utils.visualization import Visualizer


# Available algorithms
ALGORITHMS = {
    '1': {
        'name': 'FCFS (First-Come, First-Served)',
        'algorithm': 'FCFS',
        'params': {}
    },
    '2': {
        'name': 'SJF (Shortest Job First)',
        'algorithm': 'SJF',
        'params': {}
    },
    '3': {
        'name': 'Round Robin (q=4)',
        'algorithm': 'RR',
        'params': {'quantum': 4}
    },
    '4': {
        'name': 'STCF (Shortest Time-to-Completion First)',
        'algorithm': 'STCF',
        'params': {}
    },
    '5': {
        'name': 'STCF (legacy trace: deschedule on every arrival)',
        'algorithm': 'STCF',
        'params': {'legacy_trace': True}
    },
    '6': {
        'name': 'MLFQ (Multi-Level Feedback Queue)',
        'algorithm': 'MLFQ',
        'params': {}
    },
    'all': {
        'name': 'All Algorithms',
        'algorithm': None,
        'params': {}
    }
}

RUN_ALL_KEYS = ['1', '2', '3', '4', '6']


def print_banner():
    """Print the banner"""
    print("\n" + "=" * 80)
    print(" " * 26 + "CPU Scheduling Simulator")
    print("=" * 80 + "\n")


def print_algorithm_menu():
    """Print the algorithm menu"""
    print("\n" + "=" * 80)
    print("Select a scheduling algorithm")
    print("=" * 80)
    print("\n[Single queue]")
    print("  1. FCFS (First-Come, First-Served)")
    print("  2. SJF (Shortest Job First)")
    print("  3. Round Robin (time slice 4)")
    print("  4. STCF (Shortest Time-to-Completion First / SRTF)")
    print("  5. STCF with legacy trace")
    print("\n[Feedback]")
    print("  6. MLFQ (3 levels, quantum 2/4/8, boost every 20)")
    print("\n[Other]")
    print("  all. Run every algorithm")
    print("  0. Exit")
    print("=" * 80)


def get_user_choice():
    """Read a menu choice"""
    while True:
        choice = input("\nChoice: ").strip().lower()

        if choice == '0':
            print("\nExiting...")
            sys.exit(0)

        if choice in ALGORITHMS:
            return choice

        print("[Error] Invalid choice, try again.")


def run_single_algorithm(algorithm_key, processes, verbose=True):
    """Run one algorithm"""
    algo_info = ALGORITHMS[algorithm_key]

    print(f"\n{'=' * 80}")
    print(f"Running: {algo_info['name']}")
    print(f"{'=' * 80}\n")

    try:
        result = run_simulation(processes, algo_info['algorithm'], algo_info['params'])
    except ConfigurationError as e:
        print(f"[Error] {algo_info['name']} rejected the input: {e}")
        return None

    if verbose:
        for line in result.event_log:
            print(line)
    if not result.completed:
        print(f"[Warning] {algo_info['name']} stopped at the safety bound "
              f"(t={result.final_time})")
    return result


def run_all_algorithms(processes, verbose=True):
    """Run every algorithm"""
    results = []

    print("\n" + "=" * 80)
    print("Running every scheduling algorithm")
    print("=" * 80 + "\n")

    for i, key in enumerate(RUN_ALL_KEYS, 1):
        algo_info = ALGORITHMS[key]
        print(f"[{i}/{len(RUN_ALL_KEYS)}] Running {algo_info['name']}...")

        result = run_single_algorithm(key, processes, verbose=verbose)
        if result is not None:
            results.append(result)
            print(f"[Done] {algo_info['name']}\n")

    return results


def save_results(results, output_dir="simulation_results"):
    """Save charts and the text report"""
    os.makedirs(output_dir, exist_ok=True)

    visualizer = Visualizer()

    print("\n" + "=" * 80)
    print("Results")
    print("=" * 80 + "\n")
    visualizer.print_statistics_table(results)
    for result in results:
        visualizer.print_process_details(result)

    print("Generating Gantt charts...")
    for result in results:
        save_path = os.path.join(output_dir, f"gantt_{result.algorithm}.png")
        visualizer.draw_gantt_chart(result, save_path=save_path, show=False)
    print(f"[Done] Gantt charts saved under '{output_dir}/'\n")

    # Comparison chart only for two or more results
    if len(results) > 1:
        print("Generating comparison chart...")
        comparison_path = os.path.join(output_dir, "comparison.png")
        visualizer.compare_algorithms(results, save_path=comparison_path, show=False)
        print("[Done] Comparison chart saved\n")

    results_file = os.path.join(output_dir, "results.txt")
    save_results_to_file(results, results_file)

    print(f"\n{'=' * 80}")
    print("Simulation complete")
    print(f"{'=' * 80}")
    print(f"\nResults saved under '{output_dir}/':")
    print("  - Gantt charts: gantt_*.png")
    if len(results) > 1:
        print("  - Comparison chart: comparison.png")
    print("  - Detailed report: results.txt")
    print("=" * 80 + "\n")


def save_results_to_file(results, filename):
    """Write the results as a text report"""
    def show(value):
        return '-' if value is None else value

    try:
        with open(filename, 'w', encoding='utf-8') as f:
            f.write("=" * 100 + "\n")
            f.write("CPU Scheduling Simulation Results\n")
            f.write("=" * 100 + "\n\n")

            f.write("Performance comparison\n")
            f.write("-" * 100 + "\n")
            f.write(f"{'Algorithm':<12} {'Avg Wait':>12} {'Avg Turnaround':>16} "
                    f"{'CPU Util(%)':>12} {'Ctx Switch':>12} {'Final Time':>12} {'Completed':>10}\n")
            f.write("-" * 100 + "\n")

            for result in results:
                stats = result.statistics
                f.write(f"{result.algorithm:<12} "
                        f"{stats['avg_waiting_time']:>12.2f} "
                        f"{stats['avg_turnaround_time']:>16.2f} "
                        f"{stats['cpu_utilization']:>12.2f} "
                        f"{stats['context_switches']:>12} "
                        f"{result.final_time:>12} "
                        f"{'yes' if result.completed else 'no':>10}\n")

            f.write("=" * 100 + "\n\n")

            for result in results:
                f.write("\n" + "=" * 100 + "\n")
                f.write(f"Algorithm: {result.algorithm}\n")
                f.write("=" * 100 + "\n\n")

                f.write("Processes:\n")
                f.write("-" * 72 + "\n")
                f.write(f"{'PID':<6} {'Arrival':>8} {'Burst':>8} {'Scheduled':>10} {'End':>8} "
                        f"{'Waiting':>10} {'Turnaround':>12}\n")
                f.write("-" * 72 + "\n")

                for row in result.metrics:
                    f.write(f"{'P' + str(row['pid']):<6} "
                            f"{row['arrival_time']:>8} "
                            f"{row['burst_time']:>8} "
                            f"{show(row['scheduled_time']):>10} "
                            f"{show(row['end_time']):>8} "
                            f"{show(row['waiting_time']):>10} "
                            f"{show(row['turnaround_time']):>12}\n")

                f.write("\nEvent log:\n")
                for line in result.event_log:
                    f.write(f"  {line}\n")
                f.write("\n")

        print(f"[Done] Results saved to {filename}")

    except OSError as e:
        print(f"[Error] Failed to save results: {e}")


def select_input_file():
    """Choose the input source"""
    print("\n" + "=" * 80)
    print("Select input")
    print("=" * 80)

    script_dir = os.path.dirname(os.path.abspath(__file__))
    data_dir = os.path.join(script_dir, "data")
    sample_data = os.path.join(data_dir, "sample_input.txt")

    print("\n[Input options]")
    print("  0. Sample data (recommended) - sample_input.txt")
    print("  1. Random data (generated) - generated_input.txt")
    print("  2. Custom data (pick a file from data/)")
    print("=" * 80)

    while True:
        choice = input("\nInput option (0-2): ").strip()

        if choice == '0':
            if os.path.exists(sample_data):
                return sample_data
            print(f"[Error] Sample data not found: {sample_data}")

        elif choice == '1':
            return "GENERATE_RANDOM"

        elif choice == '2':
            if not os.path.exists(data_dir):
                print("[Error] data/ directory not found.")
                continue

            files = sorted(f for f in os.listdir(data_dir) if f.endswith('.txt'))
            if not files:
                print("[Error] No .txt files in data/.")
                continue

            print("\n" + "-" * 80)
            print("Files available in data/:")
            for i, file in enumerate(files, 1):
                print(f"  {i}. {file}")
            print("-" * 80)

            file_choice = input("File number: ").strip()
            try:
                idx = int(file_choice) - 1
            except ValueError:
                print("[Error] Invalid input.")
                continue
            if 0 <= idx < len(files):
                return os.path.join(data_dir, files[idx])
            print("[Error] Invalid file number.")

        else:
            print("[Error] Invalid choice, enter 0, 1 or 2.")


def main():
    """Main function"""
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    print_banner()

    input_file = select_input_file()

    if input_file == "GENERATE_RANDOM":
        print("\n[Info] Generating random processes...")
        processes = InputParser.generate_random_processes(num_processes=10, seed=None)
        script_dir = os.path.dirname(os.path.abspath(__file__))
        generated_file = os.path.join(script_dir, "data", "generated_input.txt")
        os.makedirs(os.path.dirname(generated_file), exist_ok=True)
        InputParser.save_processes_to_file(processes, generated_file)
    else:
        print(f"\nLoading processes from '{input_file}'...")
        processes = InputParser.parse_file(input_file)

        if not processes:
            print("\n[Error] Failed to load processes or the file is empty.")
            sys.exit(1)

    InputParser.print_process_summary(processes)

    while True:
        print_algorithm_menu()
        choice = get_user_choice()

        if choice == 'all':
            results = run_all_algorithms(processes, verbose=False)
            if results:
                save_results(results)
        else:
            result = run_single_algorithm(choice, processes, verbose=True)
            if result:
                save_results([result])

        print("\n" + "=" * 80)
        continue_choice = input("Run another simulation? (y/n): ").strip().lower()
        if continue_choice != 'y':
            print("\nThanks for using the CPU Scheduling Simulator!")
            print("=" * 80 + "\n")
            break


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nSimulation interrupted by user.")
        print("=" * 80 + "\n")
        sys.exit(0)
