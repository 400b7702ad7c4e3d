#!/usr/bin/env python3
"""
MapReduce Simulator CLI
Provides commands to run a job file over local inputs, show merged results,
and clean a work directory
"""

import argparse
import sys

from mrsim.client.runner import read_outputs, run_job
from mrsim.common.function_loader import FunctionLoader
from mrsim.common.storage import ArtifactStore
from mrsim.config import JobConfig, configure_logging
from mrsim.errors import JobFailedError, MapReduceError


def format_size(size_bytes: float) -> str:
    """Format bytes into human-readable size."""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.2f} TB"


def run_command(args, config: JobConfig):
    """Load a job file and run it over the given inputs"""
    loader = FunctionLoader(args.job_file)
    try:
        map_fn = loader.get_map_function()
        reduce_fn = loader.get_reduce_function()
    except (FileNotFoundError, ImportError, AttributeError, SyntaxError) as e:
        print(f"Error: cannot load job file: {e}")
        return 1

    try:
        result = run_job(
            args.inputs,
            map_fn,
            reduce_fn,
            work_dir=config.work_dir,
            num_workers=config.num_workers,
            partition_count=config.partition_count,
            words_per_partition=config.words_per_partition,
            wait_timeout=config.wait_timeout,
        )
    except JobFailedError as e:
        print(f"❌ Job failed: {e}")
        return 1
    except (MapReduceError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    metrics = result.metrics
    print(f"✓ Job {result.run_id} completed")
    print(f"  Map tasks: {result.status['map_completed']}/{result.status['map_total']}")
    print(f"  Reduce tasks: {result.status['reduce_completed']}/{result.status['reduce_total']}")
    print(f"  Runtime: {metrics.total_time_seconds:.3f}s "
          f"(map {metrics.map_phase_time_seconds:.3f}s, reduce {metrics.reduce_phase_time_seconds:.3f}s)")
    print(f"  Intermediate data: {format_size(metrics.intermediate_size_bytes)}")
    print(f"  Peak memory: {format_size(metrics.peak_rss_bytes)}")
    print(f"  Output files: {len(result.output_files)}")
    for path in result.output_files:
        print(f"    {path}")

    if args.metrics_out:
        metrics.save_to_file(args.metrics_out)
        print(f"✓ Metrics saved to {args.metrics_out}")
    return 0


def show_command(args, config: JobConfig):
    """Print the merged final output of a work directory"""
    store = ArtifactStore(config.work_dir)
    paths = store.list_outputs()
    if not paths:
        print(f"No output files in {store.work_dir}")
        return 1

    merged = read_outputs(paths)
    for key in sorted(merged):
        print(f"{key} {merged[key]}")
    return 0


def clean_command(args, config: JobConfig):
    """Remove artifacts from a work directory"""
    store = ArtifactStore(config.work_dir)
    files, size = store.clear(dry_run=args.dry_run)
    verb = "Would delete" if args.dry_run else "Deleted"
    print(f"✓ {verb} {files} artifacts ({format_size(size)}) from {store.work_dir}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mrsim',
        description='In-process MapReduce simulator',
        epilog='Example: %(prog)s run data/*.txt --job-file examples/wordcount.py --workers 4'
    )
    parser.add_argument('--work-dir', help='Directory for intermediate and output artifacts '
                                           '(default: $MRSIM_WORK_DIR or ./mr-work)')
    parser.add_argument('--log-level', help='Logging level (default: $MRSIM_LOG_LEVEL or INFO)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    run_parser = subparsers.add_parser(
        'run',
        help='Run a MapReduce job',
        description='Run a job file over one or more input files'
    )
    run_parser.add_argument('inputs', nargs='+', help='Input files, one map task each')
    run_parser.add_argument('--job-file', required=True,
                            help='Python file defining map_function and reduce_function')
    run_parser.add_argument('--workers', type=int, help='Worker pool size (default: one per input)')
    run_parser.add_argument('--partitions', type=int,
                            help='Number of partitions (default: derived from word count)')
    run_parser.add_argument('--wait-timeout', type=float,
                            help='Seconds a worker may wait for its next task')
    run_parser.add_argument('--metrics-out', help='Write run metrics as JSON to this file')
    run_parser.set_defaults(func=run_command)

    show_parser = subparsers.add_parser(
        'show',
        help='Show results',
        description='Print the merged output of the work directory'
    )
    show_parser.set_defaults(func=show_command)

    clean_parser = subparsers.add_parser(
        'clean',
        help='Delete artifacts',
        description='Delete intermediate and output artifacts from the work directory'
    )
    clean_parser.add_argument('--dry-run', action='store_true',
                              help='Show what would be deleted without deleting')
    clean_parser.set_defaults(func=clean_command)

    return parser


def main(argv=None):
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = JobConfig.from_env()
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    if args.work_dir:
        config.work_dir = args.work_dir
    if args.log_level:
        config.log_level = args.log_level
    if getattr(args, 'workers', None) is not None:
        config.num_workers = args.workers
    if getattr(args, 'partitions', None) is not None:
        config.partition_count = args.partitions
    if getattr(args, 'wait_timeout', None) is not None:
        config.wait_timeout = args.wait_timeout

    try:
        configure_logging(config.log_level)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    return args.func(args, config)


if __name__ == '__main__':
    sys.exit(main())
