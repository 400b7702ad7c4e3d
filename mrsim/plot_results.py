#!/usr/bin/env python3
"""
Generate plots from benchmark results.
"""

import json
import sys
from collections import defaultdict
from pathlib import Path

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

PLOTS_DIR = Path("benchmark_results/plots")


def load_results(json_file):
    """Load benchmark results from JSON file."""
    with open(json_file, 'r') as f:
        return json.load(f)


def aggregate_runs(results):
    """
    Aggregate multiple runs of the same benchmark.
    Returns dict: benchmark_name -> {avg_runtime, std_runtime, config, ...}
    """
    by_benchmark = defaultdict(list)

    for r in results:
        if r['success']:  # Only include successful runs
            by_benchmark[r['benchmark_name']].append(r)

    aggregated = {}
    for name, runs in by_benchmark.items():
        runtimes = [r['total_runtime_seconds'] for r in runs]
        throughputs = [r['throughput_mbps'] for r in runs]

        # Use first run for configuration data
        first = runs[0]

        aggregated[name] = {
            'benchmark_name': name,
            'description': first['description'],
            'num_map_tasks': first['num_map_tasks'],
            'num_reduce_tasks': first['num_reduce_tasks'],
            'num_workers': first['num_workers'],
            'input_size_mb': first['input_size_mb'],
            'avg_runtime': float(np.mean(runtimes)),
            'std_runtime': float(np.std(runtimes)),
            'min_runtime': float(np.min(runtimes)),
            'max_runtime': float(np.max(runtimes)),
            'avg_throughput': float(np.mean(throughputs)),
            'num_runs': len(runs)
        }

    return aggregated


def _select(aggregated, prefix, x_field):
    data = [(v[x_field], v['avg_runtime'], v['std_runtime'])
            for k, v in aggregated.items()
            if k.startswith(prefix)]
    data.sort()
    return data


def _save(fig, output_file):
    fig.tight_layout()
    fig.savefig(output_file, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"✓ Saved: {output_file}")


def _errorbar_plot(data, output_file, xlabel, title, marker, color):
    xs, runtimes, stds = zip(*data)

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.errorbar(xs, runtimes, yerr=stds, marker=marker, capsize=5,
                linewidth=2, markersize=8, color=color)
    ax.set_xlabel(xlabel, fontsize=12)
    ax.set_ylabel('Runtime (seconds)', fontsize=12)
    ax.set_title(title, fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)
    _save(fig, output_file)


def plot_input_size_scaling(aggregated, output_file):
    """Plot runtime vs input size."""
    data = _select(aggregated, 'input_size_', 'input_size_mb')
    if not data:
        print("⚠️  No input size scaling data found")
        return False
    _errorbar_plot(data, output_file, 'Input Size (MB)',
                   'Simulator Runtime by Input Size', 'o', 'steelblue')
    return True


def plot_map_task_scaling(aggregated, output_file):
    """Plot runtime vs number of map tasks."""
    data = _select(aggregated, 'map_scaling_', 'num_map_tasks')
    if not data:
        print("⚠️  No map scaling data found")
        return False
    _errorbar_plot(data, output_file, 'Map Units (input files)',
                   'Simulator Runtime by Map Unit Count', 's', 'orangered')
    return True


def plot_reduce_task_scaling(aggregated, output_file):
    """Plot runtime vs number of partitions."""
    data = _select(aggregated, 'reduce_scaling_', 'num_reduce_tasks')
    if not data:
        print("⚠️  No partition scaling data found")
        return False
    _errorbar_plot(data, output_file, 'Partitions (reduce units)',
                   'Simulator Runtime by Partition Count', '^', 'green')
    return True


def plot_worker_speedup(aggregated, output_file):
    """Plot speedup against worker pool size, next to the ideal linear speedup."""
    points = sorted((v['num_workers'], v['avg_runtime'])
                    for k, v in aggregated.items()
                    if k.startswith('worker_scaling_'))
    if len(points) < 2:
        print("⚠️  Insufficient data for speedup plot")
        return False

    workers = np.array([p[0] for p in points])
    runtimes = np.array([p[1] for p in points])
    # relative to the smallest pool
    speedup = runtimes[0] / runtimes
    ideal = workers / workers[0]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(workers, speedup, marker='o', linewidth=2, markersize=8,
            label='Measured', color='blue')
    ax.plot(workers, ideal, linestyle='--', linewidth=2,
            label='Linear', color='gray', alpha=0.7)
    ax.set_xlabel('Worker Threads', fontsize=12)
    ax.set_ylabel('Speedup', fontsize=12)
    ax.set_title('Speedup by Worker Pool Size', fontsize=14, fontweight='bold')
    ax.set_xticks(workers)
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)
    _save(fig, output_file)
    return True


def runtime_matrix(aggregated, prefix='combined_'):
    """
    Build a (partitions x maps) runtime matrix.

    Returns:
        (map_values, reduce_values, matrix); cells without data are 0
    """
    cells = {(v['num_reduce_tasks'], v['num_map_tasks']): v['avg_runtime']
             for k, v in aggregated.items()
             if k.startswith(prefix)}

    map_values = sorted({m for _, m in cells})
    reduce_values = sorted({r for r, _ in cells})

    matrix = np.zeros((len(reduce_values), len(map_values)))
    for (r, m), runtime in cells.items():
        matrix[reduce_values.index(r), map_values.index(m)] = runtime
    return map_values, reduce_values, matrix


def plot_combined_heatmap(aggregated, output_file):
    """Plot heatmap of runtime for different (map, partition) combinations."""
    map_values, reduce_values, matrix = runtime_matrix(aggregated)
    if not map_values:
        print("⚠️  No combined scaling data found")
        return False

    fig, ax = plt.subplots(figsize=(10, 8))
    image = ax.imshow(matrix, cmap='YlOrRd', aspect='auto')

    ax.set_xticks(range(len(map_values)))
    ax.set_xticklabels(map_values)
    ax.set_yticks(range(len(reduce_values)))
    ax.set_yticklabels(reduce_values)
    ax.set_xlabel('Map Units', fontsize=12)
    ax.set_ylabel('Partitions', fontsize=12)
    ax.set_title('Runtime by Map Units and Partitions (seconds)', fontsize=14, fontweight='bold')
    fig.colorbar(image, ax=ax).set_label('Runtime (seconds)', fontsize=11)

    for (i, j), runtime in np.ndenumerate(matrix):
        if runtime > 0:
            ax.text(j, i, f'{runtime:.2f}', ha='center', va='center', fontsize=10)

    _save(fig, output_file)
    return True


def generate_summary_table(aggregated, output_file):
    """Generate a markdown table summarizing all results."""
    lines = [
        "# Benchmark Results Summary\n",
        "| Benchmark | Maps | Partitions | Workers | Input (MB) | Avg Runtime (s) | Std Dev | Throughput (MB/s) |",
        "|-----------|------|------------|---------|------------|-----------------|---------|-------------------|"
    ]

    for name in sorted(aggregated.keys()):
        v = aggregated[name]
        lines.append(
            f"| {v['benchmark_name']:<21} | {v['num_map_tasks']:>4} | "
            f"{v['num_reduce_tasks']:>10} | {v['num_workers']:>7} | "
            f"{v['input_size_mb']:>10.2f} | "
            f"{v['avg_runtime']:>15.3f} | {v['std_runtime']:>7.3f} | "
            f"{v['avg_throughput']:>17.3f} |"
        )

    with open(output_file, 'w') as f:
        f.write('\n'.join(lines) + '\n')

    print(f"✓ Saved: {output_file}")


def generate_all(json_file, plots_dir=PLOTS_DIR):
    """Load results and write every plot plus the summary table."""
    plots_dir = Path(plots_dir)
    results = load_results(json_file)
    print(f"✓ Loaded {len(results)} benchmark results")

    aggregated = aggregate_runs(results)
    print(f"✓ Aggregated into {len(aggregated)} unique benchmarks")

    plots_dir.mkdir(parents=True, exist_ok=True)

    print("\nGenerating plots...")
    plot_input_size_scaling(aggregated, plots_dir / "1_input_size_scaling.png")
    plot_map_task_scaling(aggregated, plots_dir / "2_map_task_scaling.png")
    plot_reduce_task_scaling(aggregated, plots_dir / "3_reduce_task_scaling.png")
    plot_worker_speedup(aggregated, plots_dir / "4_worker_speedup.png")
    plot_combined_heatmap(aggregated, plots_dir / "5_combined_heatmap.png")

    generate_summary_table(aggregated, plots_dir / "results_table.md")
    return aggregated


def main(argv=None):
    """Generate all plots from benchmark results."""
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print("Usage: python -m mrsim.plot_results <results.json> [plots_dir]")
        return 1

    json_file = argv[0]
    if not Path(json_file).exists():
        print(f"❌ File not found: {json_file}")
        return 1

    plots_dir = Path(argv[1]) if len(argv) > 1 else PLOTS_DIR
    print(f"Loading results from: {json_file}")
    generate_all(json_file, plots_dir)

    print(f"\n{'='*70}")
    print(f"All plots saved to: {plots_dir}/")
    print(f"{'='*70}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
