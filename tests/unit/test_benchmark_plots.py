"""
Unit tests for the benchmark harness and result plotting
"""

import csv
import json
import os

import pytest

from mrsim import benchmark
from mrsim import plot_results


def _record(name, runtime, success=True, maps=4, partitions=2, workers=4, input_mb=0.5):
    return {
        'benchmark_name': name,
        'description': name,
        'num_map_tasks': maps,
        'num_reduce_tasks': partitions,
        'num_workers': workers,
        'input_size_mb': input_mb,
        'success': success,
        'total_runtime_seconds': runtime,
        'throughput_mbps': input_mb / runtime,
    }


@pytest.fixture
def sample_results():
    return [
        _record('input_size_small', 1.0, input_mb=0.25),
        _record('input_size_small', 3.0, input_mb=0.25),
        _record('input_size_large', 4.0, input_mb=1.0),
        _record('input_size_large', 99.0, success=False, input_mb=1.0),
        _record('map_scaling_1', 2.0, maps=1),
        _record('map_scaling_4', 1.0, maps=4),
        _record('reduce_scaling_1', 2.0, partitions=1),
        _record('reduce_scaling_4', 1.5, partitions=4),
        _record('worker_scaling_1', 4.0, workers=1),
        _record('worker_scaling_4', 2.0, workers=4),
        _record('combined_1_1', 3.0, maps=1, partitions=1),
        _record('combined_2_2', 2.0, maps=2, partitions=2),
    ]


class TestGenerateInputs:
    """Tests for benchmark input generation"""

    def test_creates_requested_files(self, temp_dir):
        paths = benchmark.generate_inputs(os.path.join(temp_dir, 'in'), 3, 3000, "abc def\n")

        assert [os.path.basename(p) for p in paths] == ['input-0.txt', 'input-1.txt', 'input-2.txt']
        for path in paths:
            assert 900 <= os.path.getsize(path) <= 1000

    def test_at_least_one_copy_of_source(self, temp_dir):
        (path,) = benchmark.generate_inputs(temp_dir, 1, 1, "hello world\n")

        with open(path) as f:
            assert f.read() == "hello world\n"

    def test_rejects_empty_source(self, temp_dir):
        with pytest.raises(ValueError):
            benchmark.generate_inputs(temp_dir, 1, 100, "")


class TestRunBenchmark:
    """Tests for a single benchmark run"""

    def test_word_count_functions(self):
        assert list(benchmark.word_count_map("A b a")) == [('a', 1), ('b', 1), ('a', 1)]
        assert benchmark.word_count_reduce('a', ['1', '1']) == 2

    def test_small_run_succeeds(self, temp_dir):
        config = {"name": "tiny", "maps": 2, "partitions": 2, "workers": 2, "input_kb": 1,
                  "description": "tiny run"}

        record = benchmark.run_benchmark(config, temp_dir)

        assert record['success'] is True
        assert record['status'] == 'done'
        assert record['num_map_tasks'] == 2
        assert record['input_size_bytes'] > 0
        assert 'map_phase_seconds' in record
        assert 'peak_rss_bytes' in record

    def test_benchmark_names_match_plot_prefixes(self):
        prefixes = ('input_size_', 'map_scaling_', 'reduce_scaling_', 'worker_scaling_', 'combined_')
        assert all(c['name'].startswith(prefixes) for c in benchmark.BENCHMARKS)


class TestSaveResults:
    """Tests for result persistence"""

    def test_writes_json_and_csv(self, temp_dir, sample_results):
        json_file, csv_file = benchmark.save_results(sample_results, "20260101_000000", temp_dir)

        with open(json_file) as f:
            assert json.load(f) == sample_results
        with open(csv_file, newline='') as f:
            rows = list(csv.DictReader(f))
        assert len(rows) == len(sample_results)
        assert rows[0]['benchmark_name'] == 'input_size_small'


class TestAggregation:
    """Tests for run aggregation"""

    def test_averages_successful_runs(self, sample_results):
        aggregated = plot_results.aggregate_runs(sample_results)

        small = aggregated['input_size_small']
        assert small['avg_runtime'] == pytest.approx(2.0)
        assert small['std_runtime'] == pytest.approx(1.0)
        assert small['min_runtime'] == pytest.approx(1.0)
        assert small['max_runtime'] == pytest.approx(3.0)
        assert small['num_runs'] == 2

    def test_failed_runs_ignored(self, sample_results):
        aggregated = plot_results.aggregate_runs(sample_results)

        assert aggregated['input_size_large']['num_runs'] == 1
        assert aggregated['input_size_large']['avg_runtime'] == pytest.approx(4.0)

    def test_runtime_matrix(self, sample_results):
        aggregated = plot_results.aggregate_runs(sample_results)

        map_values, reduce_values, matrix = plot_results.runtime_matrix(aggregated)

        assert map_values == [1, 2]
        assert reduce_values == [1, 2]
        assert matrix[0, 0] == pytest.approx(3.0)
        assert matrix[1, 1] == pytest.approx(2.0)
        assert matrix[0, 1] == 0


class TestPlots:
    """Tests for plot generation"""

    def test_generate_all_writes_every_plot(self, temp_dir, sample_results):
        json_file, _ = benchmark.save_results(sample_results, "t", temp_dir)
        plots_dir = os.path.join(temp_dir, 'plots')

        plot_results.generate_all(json_file, plots_dir)

        assert sorted(os.listdir(plots_dir)) == [
            '1_input_size_scaling.png',
            '2_map_task_scaling.png',
            '3_reduce_task_scaling.png',
            '4_worker_speedup.png',
            '5_combined_heatmap.png',
            'results_table.md',
        ]

    def test_speedup_needs_two_points(self, temp_dir):
        aggregated = plot_results.aggregate_runs([_record('worker_scaling_1', 1.0, workers=1)])

        assert plot_results.plot_worker_speedup(aggregated, os.path.join(temp_dir, 'x.png')) is False

    def test_missing_data_skips_plot(self, temp_dir):
        assert plot_results.plot_input_size_scaling({}, os.path.join(temp_dir, 'x.png')) is False
        assert plot_results.plot_combined_heatmap({}, os.path.join(temp_dir, 'y.png')) is False
        assert not os.listdir(temp_dir)

    def test_summary_table(self, temp_dir, sample_results):
        path = os.path.join(temp_dir, 'table.md')

        plot_results.generate_summary_table(plot_results.aggregate_runs(sample_results), path)

        with open(path) as f:
            lines = f.read().splitlines()
        assert lines[0] == "# Benchmark Results Summary"
        assert sum(1 for line in lines if line.startswith("| combined_")) == 2

    def test_main_missing_file(self, temp_dir):
        assert plot_results.main([os.path.join(temp_dir, 'missing.json')]) == 1
        assert plot_results.main([]) == 1
