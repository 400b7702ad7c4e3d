"""
Integration tests for the mrsim command line
"""

import json
import os

import pytest

from mrsim.client.cli import build_parser, format_size, main


@pytest.fixture
def inputs(write_input):
    return [write_input("a.txt", "foo bar"), write_input("b.txt", "bar baz")]


def _run(work_dir, *args):
    return main(['--work-dir', work_dir, '--log-level', 'WARNING', *args])


class TestFormatSize:
    """Tests for human-readable sizes"""

    def test_units(self):
        assert format_size(512) == "512.00 B"
        assert format_size(2048) == "2.00 KB"
        assert format_size(3 * 1024 * 1024) == "3.00 MB"


class TestParser:
    """Tests for argument parsing"""

    def test_run_arguments(self):
        args = build_parser().parse_args(['run', 'a.txt', 'b.txt', '--job-file', 'job.py',
                                          '--workers', '4', '--partitions', '3'])

        assert args.inputs == ['a.txt', 'b.txt']
        assert args.job_file == 'job.py'
        assert args.workers == 4
        assert args.partitions == 3

    def test_run_requires_job_file(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(['run', 'a.txt'])

    def test_no_command(self, capsys):
        assert main([]) == 1


@pytest.mark.integration
class TestCommands:
    """Tests for run, show and clean"""

    def test_run_show_clean(self, inputs, wordcount_job_file, work_dir, capsys):
        assert _run(work_dir, 'run', *inputs, '--job-file', wordcount_job_file,
                    '--partitions', '2') == 0
        out = capsys.readouterr().out
        assert "✓ Job" in out
        assert "Map tasks: 2/2" in out
        assert "Reduce tasks: 2/2" in out

        assert _run(work_dir, 'show') == 0
        assert capsys.readouterr().out.splitlines() == ["bar 2", "baz 1", "foo 1"]

        assert _run(work_dir, 'clean', '--dry-run') == 0
        assert "Would delete" in capsys.readouterr().out
        assert os.listdir(work_dir)

        assert _run(work_dir, 'clean') == 0
        assert "Deleted" in capsys.readouterr().out
        assert os.listdir(work_dir) == []

    def test_run_writes_metrics(self, inputs, wordcount_job_file, work_dir, temp_dir):
        metrics_file = os.path.join(temp_dir, 'metrics.json')

        assert _run(work_dir, 'run', *inputs, '--job-file', wordcount_job_file,
                    '--workers', '1', '--metrics-out', metrics_file) == 0

        with open(metrics_file) as f:
            metrics = json.load(f)
        assert metrics['num_workers'] == 1
        assert metrics['num_map_tasks'] == 2
        assert metrics['final_phase'] == 'done'

    def test_environment_configures_run(self, inputs, wordcount_job_file, work_dir,
                                        monkeypatch, capsys):
        monkeypatch.setenv('MRSIM_WORK_DIR', work_dir)
        monkeypatch.setenv('MRSIM_PARTITIONS', '3')

        assert main(['--log-level', 'WARNING', 'run', *inputs,
                     '--job-file', wordcount_job_file]) == 0
        assert "Reduce tasks: 3/3" in capsys.readouterr().out

    def test_bad_job_file(self, inputs, temp_dir, work_dir, capsys):
        assert _run(work_dir, 'run', *inputs,
                    '--job-file', os.path.join(temp_dir, 'missing.py')) == 1
        assert "cannot load job file" in capsys.readouterr().out

    def test_failed_run(self, inputs, wordcount_job_file, temp_dir, work_dir, capsys):
        missing = os.path.join(temp_dir, 'missing.txt')

        assert _run(work_dir, 'run', inputs[0], missing, '--job-file', wordcount_job_file,
                    '--partitions', '2') == 1
        assert "❌ Job failed" in capsys.readouterr().out

    def test_show_empty_work_dir(self, work_dir, capsys):
        assert _run(work_dir, 'show') == 1
        assert "No output files" in capsys.readouterr().out

    def test_invalid_log_level(self, work_dir, capsys):
        assert main(['--work-dir', work_dir, '--log-level', 'CHATTY', 'show']) == 1
        assert "Unknown log level" in capsys.readouterr().out

    def test_invalid_environment(self, work_dir, monkeypatch, capsys):
        monkeypatch.setenv('MRSIM_NUM_WORKERS', 'lots')

        assert _run(work_dir, 'show') == 1
        assert "MRSIM_NUM_WORKERS" in capsys.readouterr().out
