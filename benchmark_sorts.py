#!/usr/bin/env python3
"""
Hybrid Sort Crossover Benchmark - Main Runner
=============================================

Finds the input size n0 where merge sort starts beating insertion sort,
then times insertion, merge and hybrid (merge + insertion below n0) sort
on sorted and reverse-sorted inputs over repeated rounds.

Usage:
    python benchmark_sorts.py
    python benchmark_sorts.py --quick
    python benchmark_sorts.py --rounds 20 --size 5000 --output report.json
"""

import argparse
import json
import logging
import sys

from benchmark_core import (
    ExperimentConfig, BenchmarkEngine, TqdmProgress,
    build_report, export_to_excel,
    print_header, print_threshold_table, print_summary,
    Colors,
)

QUICK_ROUNDS = 10
QUICK_SIZE = 2000


def run_threshold_search(engine: BenchmarkEngine, quiet: bool = False):
    """Discover the crossover size used as hybrid sort's base case."""
    if not quiet:
        print_header("Threshold Search")
        sizes = engine.config.search_sizes()
        print(f"  Sizes: {sizes[0]}..{sizes[-1]} (x{engine.config.search_factor})\n")

    search = engine.find_threshold()

    if not quiet:
        print_threshold_table(search)

    return search


def run_experiments(engine: BenchmarkEngine, n0: int, quiet: bool = False, progress: bool = True):
    """Time all three sorters on every input shape."""
    if not quiet:
        print_header("Experiment")
        print(f"  n = {engine.config.array_size}, rounds = {engine.config.rounds}, n0 = {n0}\n")

    factory = TqdmProgress if progress and not quiet else None
    return engine.run_all(n0, progress_factory=factory)


def build_config(args) -> ExperimentConfig:
    rounds, size = args.rounds, args.size
    if args.quick:
        rounds = rounds if rounds is not None else QUICK_ROUNDS
        size = size if size is not None else QUICK_SIZE
    defaults = ExperimentConfig()
    return ExperimentConfig(
        rounds=rounds if rounds is not None else defaults.rounds,
        array_size=size if size is not None else defaults.array_size,
        output_path=args.xlsx,
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Hybrid Sort Crossover Benchmark",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                   Full run (100 rounds, n=100000)
  %(prog)s --quick                           Small run for a sanity check
  %(prog)s --rounds 20 --size 5000 -o r.json Custom run with JSON report
        """
    )

    defaults = ExperimentConfig()
    parser.add_argument("--quick", action="store_true",
                        help=f"Quick run (rounds={QUICK_ROUNDS}, n={QUICK_SIZE} unless overridden)")
    parser.add_argument("--rounds", type=int, default=None,
                        help=f"Rounds per experiment (default: {defaults.rounds})")
    parser.add_argument("--size", type=int, default=None,
                        help=f"Input array size (default: {defaults.array_size})")
    parser.add_argument("--xlsx", type=str, default=defaults.output_path,
                        help=f"Spreadsheet output path (default: {defaults.output_path})")
    parser.add_argument("--output", "-o", type=str, help="JSON output path")
    parser.add_argument("--no-progress", action="store_true", help="Disable progress bars")
    parser.add_argument("--quiet", "-q", action="store_true", help="Minimal output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except ValueError as e:
        print(f"{Colors.RED}Invalid configuration: {e}{Colors.END}", file=sys.stderr)
        return 2

    engine = BenchmarkEngine(config)

    if not args.quiet:
        print(f"\n{Colors.BOLD}Hybrid Sort Crossover Benchmark v1.0{Colors.END}")
        print(f"Python {sys.version.split()[0]}\n")

    search = run_threshold_search(engine, args.quiet)
    results = run_experiments(engine, search.n0, args.quiet, progress=not args.no_progress)

    export_to_excel(results, config.output_path)

    report = build_report(config, search, results)

    if not args.quiet:
        print_summary(report.stats)
        print(f"\n{Colors.GREEN}Spreadsheet saved to {config.output_path}{Colors.END}")

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(report.to_dict(), f, indent=2, default=str)
        if not args.quiet:
            print(f"{Colors.GREEN}JSON report saved to {args.output}{Colors.END}")

    if not args.quiet:
        print(f"\n{Colors.CYAN}Benchmark complete.{Colors.END}\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
