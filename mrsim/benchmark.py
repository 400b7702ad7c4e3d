#!/usr/bin/env python3
"""
Automated benchmarking for the MapReduce simulator.
Runs word count over generated inputs for several configurations and
collects performance metrics.
"""

import argparse
import csv
import json
import os
import shutil
import sys
import tempfile
import time
from datetime import datetime
from pathlib import Path

from mrsim.client.runner import run_job
from mrsim.config import configure_logging
from mrsim.errors import JobFailedError

RESULTS_DIR = Path("benchmark_results")

SOURCE_TEXT = """The quick brown fox jumps over the lazy dog.
The dog was really lazy and the fox was very quick.
Quick brown foxes are amazing animals and lazy dogs sleep all day.
"""

# maps = number of input files, partitions = reduce tasks, input_kb = total input size
BENCHMARKS = [
    # Experiment 1: Input Size Scaling (fixed parallelism)
    {"name": "input_size_small", "maps": 4, "partitions": 2, "workers": 4, "input_kb": 16,
     "description": "Small input (16KB), baseline"},
    {"name": "input_size_medium", "maps": 4, "partitions": 2, "workers": 4, "input_kb": 256,
     "description": "Medium input (256KB)"},
    {"name": "input_size_large", "maps": 4, "partitions": 2, "workers": 4, "input_kb": 1024,
     "description": "Large input (~1MB)"},

    # Experiment 2: Map Task Scaling (fixed input)
    {"name": "map_scaling_1", "maps": 1, "partitions": 2, "workers": 4, "input_kb": 512,
     "description": "1 map task"},
    {"name": "map_scaling_2", "maps": 2, "partitions": 2, "workers": 4, "input_kb": 512,
     "description": "2 map tasks"},
    {"name": "map_scaling_4", "maps": 4, "partitions": 2, "workers": 4, "input_kb": 512,
     "description": "4 map tasks"},
    {"name": "map_scaling_8", "maps": 8, "partitions": 2, "workers": 4, "input_kb": 512,
     "description": "8 map tasks"},

    # Experiment 3: Partition Scaling (fixed input)
    {"name": "reduce_scaling_1", "maps": 4, "partitions": 1, "workers": 4, "input_kb": 512,
     "description": "1 partition"},
    {"name": "reduce_scaling_2", "maps": 4, "partitions": 2, "workers": 4, "input_kb": 512,
     "description": "2 partitions"},
    {"name": "reduce_scaling_4", "maps": 4, "partitions": 4, "workers": 4, "input_kb": 512,
     "description": "4 partitions"},
    {"name": "reduce_scaling_8", "maps": 4, "partitions": 8, "workers": 4, "input_kb": 512,
     "description": "8 partitions"},

    # Experiment 4: Worker Pool Scaling
    {"name": "worker_scaling_1", "maps": 8, "partitions": 4, "workers": 1, "input_kb": 512,
     "description": "1 worker"},
    {"name": "worker_scaling_2", "maps": 8, "partitions": 4, "workers": 2, "input_kb": 512,
     "description": "2 workers"},
    {"name": "worker_scaling_4", "maps": 8, "partitions": 4, "workers": 4, "input_kb": 512,
     "description": "4 workers"},
    {"name": "worker_scaling_8", "maps": 8, "partitions": 4, "workers": 8, "input_kb": 512,
     "description": "8 workers"},

    # Experiment 5: Combined Scaling
    {"name": "combined_1_1", "maps": 1, "partitions": 1, "workers": 4, "input_kb": 1024,
     "description": "Combined: 1 map, 1 partition"},
    {"name": "combined_2_2", "maps": 2, "partitions": 2, "workers": 4, "input_kb": 1024,
     "description": "Combined: 2 maps, 2 partitions"},
    {"name": "combined_4_4", "maps": 4, "partitions": 4, "workers": 4, "input_kb": 1024,
     "description": "Combined: 4 maps, 4 partitions"},
    {"name": "combined_8_8", "maps": 8, "partitions": 8, "workers": 4, "input_kb": 1024,
     "description": "Combined: 8 maps, 8 partitions"},
]


def word_count_map(content):
    """Emit (word, 1) for every whitespace-separated token."""
    for word in content.split():
        yield (word.lower(), 1)


def word_count_reduce(key, values):
    """Count the values received for a word."""
    return sum(int(v) for v in values)


def generate_inputs(directory, num_files, total_bytes, source_text=SOURCE_TEXT):
    """
    Generate input files by replicating source text.

    Args:
        directory: Where the files are written
        num_files: Number of files; total_bytes is split evenly between them
        total_bytes: Approximate combined size of all files
        source_text: The content to replicate

    Returns:
        List of generated file paths
    """
    if not source_text:
        raise ValueError("Source text is empty!")

    os.makedirs(directory, exist_ok=True)
    per_file = max(len(source_text), total_bytes // num_files)
    replications = max(1, per_file // len(source_text))

    paths = []
    for i in range(num_files):
        path = os.path.join(directory, f"input-{i}.txt")
        with open(path, 'w', encoding='utf-8') as f:
            for _ in range(replications):
                f.write(source_text)
        paths.append(path)
    return paths


def run_benchmark(config, scratch_dir, run_number=1):
    """Run a single benchmark configuration."""
    print(f"\n{'='*70}")
    print(f"Benchmark: {config['name']} (Run {run_number})")
    print(f"Description: {config['description']}")
    print(f"Config: {config['maps']} maps, {config['partitions']} partitions, "
          f"{config['workers']} workers")
    print(f"{'='*70}")

    input_dir = os.path.join(scratch_dir, config['name'], 'input')
    work_dir = os.path.join(scratch_dir, config['name'], f'work-{run_number}')
    inputs = generate_inputs(input_dir, config['maps'], config['input_kb'] * 1024)
    input_size = sum(os.path.getsize(p) for p in inputs)
    print(f"Input size: {input_size / 1024 / 1024:.2f} MB")

    start_time = time.time()
    try:
        result = run_job(
            inputs, word_count_map, word_count_reduce,
            work_dir=work_dir,
            num_workers=config['workers'],
            partition_count=config['partitions'],
        )
        success = True
        metrics = result.metrics
        status = result.status['status']
    except JobFailedError as e:
        print(f"  ❌ Job failed: {e}")
        success = False
        metrics = None
        status = 'failed'
    duration = time.time() - start_time

    if success:
        print(f"  ✓ Job completed in {duration:.2f}s")

    record = {
        "benchmark_name": config["name"],
        "description": config["description"],
        "run_number": run_number,
        "timestamp": datetime.now().isoformat(),
        "input_size_bytes": input_size,
        "input_size_mb": round(input_size / 1024 / 1024, 2),
        "num_map_tasks": config["maps"],
        "num_reduce_tasks": config["partitions"],
        "num_workers": config["workers"],
        "success": success,
        "total_runtime_seconds": round(duration, 4),
        "throughput_mbps": round((input_size / 1024 / 1024) / duration, 3) if duration > 0 else 0,
        "status": status,
    }
    if metrics is not None:
        record.update({
            "map_phase_seconds": round(metrics.map_phase_time_seconds, 4),
            "reduce_phase_seconds": round(metrics.reduce_phase_time_seconds, 4),
            "intermediate_size_bytes": metrics.intermediate_size_bytes,
            "peak_rss_bytes": metrics.peak_rss_bytes,
        })
    return record


def save_results(results, timestamp, results_dir=RESULTS_DIR):
    """Save results to JSON and CSV files."""
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)

    json_file = results_dir / f"benchmark_results_{timestamp}.json"
    with open(json_file, 'w') as f:
        json.dump(results, f, indent=2)
    print(f"\n✓ Results saved to: {json_file}")

    csv_file = results_dir / f"benchmark_results_{timestamp}.csv"
    if results:
        fieldnames = []
        for r in results:
            for key in r:
                if key not in fieldnames:
                    fieldnames.append(key)
        with open(csv_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(results)
        print(f"✓ Results saved to: {csv_file}")

    return json_file, csv_file


def print_summary(results):
    """Print a summary table of results."""
    print(f"\n{'='*70}")
    print("BENCHMARK SUMMARY")
    print(f"{'='*70}")
    print(f"{'Benchmark':<25} {'Maps':>5} {'Parts':>6} {'Workers':>8} {'Runtime':>10} {'Status':>8}")
    print(f"{'-'*70}")

    for r in results:
        print(f"{r['benchmark_name']:<25} {r['num_map_tasks']:>5} "
              f"{r['num_reduce_tasks']:>6} {r['num_workers']:>8} "
              f"{r['total_runtime_seconds']:>9.2f}s "
              f"{'✓' if r['success'] else '✗':>8}")

    print(f"{'='*70}")

    successful = sum(1 for r in results if r['success'])
    print(f"Total: {len(results)} benchmarks, {successful} successful, "
          f"{len(results) - successful} failed")


def main(argv=None):
    """Main benchmarking workflow."""
    parser = argparse.ArgumentParser(description="Benchmark the MapReduce simulator")
    parser.add_argument('--runs', type=int, default=1, help='Runs per benchmark (1-5, default=1)')
    parser.add_argument('--only', help='Only run benchmarks whose name starts with this prefix')
    parser.add_argument('--results-dir', default=str(RESULTS_DIR), help='Where to save results')
    parser.add_argument('--log-level', default='WARNING', help='Logging level (default: WARNING)')
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    runs_per_benchmark = max(1, min(5, args.runs))
    selected = [c for c in BENCHMARKS if not args.only or c['name'].startswith(args.only)]
    if not selected:
        print(f"❌ No benchmarks match prefix {args.only!r}")
        return 1

    print("=" * 70)
    print("MapReduce Simulator Benchmark Suite")
    print("=" * 70)
    print(f"\nRunning {len(selected)} benchmarks × {runs_per_benchmark} runs = "
          f"{len(selected) * runs_per_benchmark} total jobs")

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    scratch_dir = tempfile.mkdtemp(prefix="mrsim-bench-")
    all_results = []
    try:
        for config in selected:
            for run in range(1, runs_per_benchmark + 1):
                all_results.append(run_benchmark(config, scratch_dir, run_number=run))
    finally:
        shutil.rmtree(scratch_dir, ignore_errors=True)

    json_file, _ = save_results(all_results, timestamp, args.results_dir)
    print_summary(all_results)

    print(f"\n{'='*70}")
    print("Next steps:")
    print(f"  1. Review results: cat {json_file}")
    print(f"  2. Generate plots: python -m mrsim.plot_results {json_file}")
    print(f"{'='*70}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
