"""
Hybrid Sort Crossover Benchmark - Core Module
=============================================

Contains: configuration, timing engine, input generators, algorithm
definitions, threshold search, experiment runner, statistics, and
report generation.
"""

from __future__ import annotations
import gc, logging, platform, statistics, sys, time
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
from contextlib import contextmanager

import numpy as np
import pandas as pd
from tqdm import tqdm

from hybrid_sort import insertion_sort, merge_sort, make_hybrid

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
Measure = Callable[[Callable, List[int]], float]
ProgressCallback = Callable[[int, int, float], None]

# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class ExperimentConfig:
    rounds: int = 100
    array_size: int = 100_000
    search_start: int = 10
    search_limit: int = 10_000
    search_factor: int = 2
    gc_between_runs: bool = True
    output_path: str = "experiment_results.xlsx"

    def __post_init__(self):
        if self.rounds < 1:
            raise ValueError("rounds must be at least 1")
        if self.array_size < 0:
            raise ValueError("array_size must be non-negative")
        if self.search_start < 1:
            raise ValueError("search_start must be positive")
        if self.search_factor < 2:
            raise ValueError("search_factor must be at least 2")
        if self.search_limit < self.search_start:
            raise ValueError("search_limit must not be below search_start")

    def search_sizes(self) -> List[int]:
        sizes, n = [], self.search_start
        while n <= self.search_limit:
            sizes.append(n)
            n *= self.search_factor
        return sizes


class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    BOLD = '\033[1m'
    UNDERLINE = '\033[4m'
    END = '\033[0m'

    @classmethod
    def disable(cls):
        for a in ['HEADER','BLUE','CYAN','GREEN','YELLOW','RED','BOLD','UNDERLINE','END']:
            setattr(cls, a, '')

if not sys.stdout.isatty():
    Colors.disable()


class SortVerificationError(RuntimeError):
    """Raised when a sorter returns wrong output before being benchmarked."""


# =============================================================================
# Statistics
# =============================================================================

@dataclass
class SeriesStatistics:
    """
    Descriptive statistics of one sample series.

    Mean and standard deviation use population formulas. The mode is the
    most frequent exact value (first encountered wins ties); on continuous
    timing data nearly every value is unique, so it usually degenerates to
    the first sample and carries little information.
    """
    n: int
    mean: float
    median: float
    min_val: float
    max_val: float
    mode: float
    std_dev: float

    @classmethod
    def from_samples(cls, samples) -> "SeriesStatistics":
        s = list(samples)
        if not s:
            raise ValueError("statistics require at least one sample")
        return cls(n=len(s), mean=statistics.fmean(s), median=statistics.median(s),
                   min_val=min(s), max_val=max(s), mode=statistics.mode(s),
                   std_dev=statistics.pstdev(s))

    def to_dict(self):
        return {
            "n_samples": self.n,
            "mean_seconds": self.mean,
            "median_seconds": self.median,
            "min": self.min_val,
            "max": self.max_val,
            "mode": self.mode,
            "std_dev": self.std_dev,
        }


# =============================================================================
# Input Generators
# =============================================================================

class InputGenerator(ABC):
    @property
    @abstractmethod
    def name(self) -> str: pass

    @property
    @abstractmethod
    def label(self) -> str: pass

    @property
    @abstractmethod
    def description(self) -> str: pass

    @abstractmethod
    def generate(self, n: int) -> List[int]: pass


class AlreadySorted(InputGenerator):
    name = "sorted"
    label = "Sorted Array"
    description = "Ascending 0..n-1"
    def generate(self, n):
        return np.arange(n, dtype=np.int64).tolist()

class ReverseSorted(InputGenerator):
    name = "reverse"
    label = "Reverse Array"
    description = "Descending n-1..0"
    def generate(self, n):
        return np.arange(n - 1, -1, -1, dtype=np.int64).tolist()


INPUT_GENERATORS: Dict[str, InputGenerator] = {g.name: g for g in [
    AlreadySorted(), ReverseSorted(),
]}


# =============================================================================
# Algorithms
# =============================================================================

@dataclass
class AlgorithmInfo:
    key: str
    name: str
    function: Callable
    expected_complexity: str
    stable: bool
    description: str

    def __call__(self, arr):
        return self.function(arr)


def get_algorithms(n0: int) -> Dict[str, AlgorithmInfo]:
    return {
        "insertion": AlgorithmInfo(
            "insertion", "Insertion Sort", insertion_sort,
            "O(n^2)", True, "Shift-based insertion sort"),
        "merge": AlgorithmInfo(
            "merge", "Merge Sort", merge_sort,
            "O(n log n)", True, "Top-down merge sort"),
        "hybrid": AlgorithmInfo(
            "hybrid", "Hybrid Sort", make_hybrid(n0),
            "O(n log n)", True, f"Merge sort with insertion sort below n0={n0}"),
    }


ALGORITHM_KEYS = ("insertion", "merge", "hybrid")
ALGORITHM_NAMES = {"insertion": "Insertion Sort", "merge": "Merge Sort", "hybrid": "Hybrid Sort"}


# =============================================================================
# Result Types
# =============================================================================

@dataclass(frozen=True)
class ThresholdProbe:
    size: int
    insertion_avg: float
    merge_avg: float

    @property
    def merge_wins(self) -> bool:
        return self.merge_avg < self.insertion_avg


@dataclass(frozen=True)
class ThresholdSearch:
    n0: int
    found: bool
    probes: Tuple[ThresholdProbe, ...] = ()

    def to_dict(self):
        return {
            "n0": self.n0,
            "found": self.found,
            "probes": [asdict(p) for p in self.probes],
        }


class ResultsBundle:
    """
    Raw sample series keyed by input shape, then by algorithm key.

    Built once per run; series are stored as tuples and only exposed
    through read-only accessors.
    """

    def __init__(self, series: Dict[str, Dict[str, List[float]]]):
        self._series = {shape: {algo: tuple(times) for algo, times in algos.items()}
                        for shape, algos in series.items()}

    def __getitem__(self, shape) -> Dict[str, Tuple[float, ...]]:
        return dict(self._series[shape])

    def __iter__(self):
        return iter(self._series)

    def __len__(self):
        return len(self._series)

    def shapes(self) -> List[str]:
        return list(self._series)

    def rows(self, shape: str) -> Iterator[Tuple[int, float, float, float]]:
        s = self._series[shape]
        for i, row in enumerate(zip(*(s[k] for k in ALGORITHM_KEYS))):
            yield (i + 1,) + row

    def statistics(self) -> Dict[str, Dict[str, SeriesStatistics]]:
        return {shape: {algo: SeriesStatistics.from_samples(times)
                        for algo, times in algos.items()}
                for shape, algos in self._series.items()}

    def to_dict(self):
        return {shape: {algo: list(times) for algo, times in algos.items()}
                for shape, algos in self._series.items()}


@dataclass
class BenchmarkReport:
    metadata: Dict[str, Any]
    config: ExperimentConfig
    threshold: ThresholdSearch
    results: ResultsBundle
    stats: Dict[str, Dict[str, SeriesStatistics]] = field(default_factory=dict)

    def to_dict(self):
        return {
            "metadata": self.metadata,
            "config": asdict(self.config),
            "threshold": self.threshold.to_dict(),
            "statistics": {shape: {algo: s.to_dict() for algo, s in algos.items()}
                           for shape, algos in self.stats.items()},
            "results": self.results.to_dict(),
        }


# =============================================================================
# Benchmark Engine
# =============================================================================

class BenchmarkEngine:
    def __init__(self, config: ExperimentConfig = ExperimentConfig(), clock: Clock = time.perf_counter):
        self.config = config
        self.clock = clock

    @contextmanager
    def _gc_pause(self):
        if self.config.gc_between_runs:
            gc.collect()
            gc.disable()
        try:
            yield
        finally:
            if self.config.gc_between_runs:
                gc.enable()

    def time_once(self, fn, arr):
        a = arr[:]
        with self._gc_pause():
            t0 = self.clock()
            result = fn(a)
            t1 = self.clock()
        return (t1 - t0, result if result is not None else a)

    def measure(self, fn, arr) -> float:
        return self.time_once(fn, arr)[0]

    def verify(self, fn, arr):
        try:
            result = fn(arr[:])
            return (list(result) == sorted(arr), None)
        except Exception as e:
            return (False, str(e))

    def find_threshold(self, measure: Optional[Measure] = None) -> ThresholdSearch:
        """
        Search doubling sizes for the first one where merge sort beats
        insertion sort on the average of a sorted and a reversed input.

        Falls back to n0 = 0 (hybrid degenerates to merge sort) when no
        size in range crosses over.
        """
        measure = measure or self.measure
        asc, desc = INPUT_GENERATORS["sorted"], INPUT_GENERATORS["reverse"]
        probes = []

        for size in self.config.search_sizes():
            sorted_arr, reverse_arr = asc.generate(size), desc.generate(size)

            t_ins_sorted = measure(insertion_sort, sorted_arr)
            t_merge_sorted = measure(merge_sort, sorted_arr)
            t_ins_reverse = measure(insertion_sort, reverse_arr)
            t_merge_reverse = measure(merge_sort, reverse_arr)

            probe = ThresholdProbe(size,
                                   (t_ins_sorted + t_ins_reverse) / 2,
                                   (t_merge_sorted + t_merge_reverse) / 2)
            probes.append(probe)
            logger.debug("n=%d insertion=%.3gs merge=%.3gs", size, probe.insertion_avg, probe.merge_avg)

            if probe.merge_wins:
                return ThresholdSearch(size, True, tuple(probes))

        logger.warning("No crossover found up to n=%d; falling back to n0=0", self.config.search_limit)
        return ThresholdSearch(0, False, tuple(probes))

    def run_experiment(self, arr, n0: int, progress: Optional[ProgressCallback] = None) -> Dict[str, List[float]]:
        """
        Time every algorithm once per round on a fresh copy of `arr`.

        Progress is reported between rounds, never inside a timed call.
        """
        algos = get_algorithms(n0)
        for algo in algos.values():
            ok, err = self.verify(algo.function, arr)
            if not ok:
                raise SortVerificationError(f"{algo.name} failed verification: {err or 'wrong output'}")

        results = {key: [] for key in algos}
        total = self.config.rounds
        start = self.clock()

        for i in range(total):
            for key, algo in algos.items():
                results[key].append(self.measure(algo.function, arr))

            if progress is not None:
                done = i + 1
                elapsed = self.clock() - start
                progress(done, total, elapsed / done * (total - done))

        return results

    def run_all(self, n0: int, progress_factory=None) -> ResultsBundle:
        series = {}
        for shape, gen in INPUT_GENERATORS.items():
            arr = gen.generate(self.config.array_size)
            logger.info("Running %s experiment (n=%d, rounds=%d, n0=%d)",
                        shape, len(arr), self.config.rounds, n0)
            if progress_factory is None:
                series[shape] = self.run_experiment(arr, n0)
            else:
                with progress_factory(gen.label, self.config.rounds) as progress:
                    series[shape] = self.run_experiment(arr, n0, progress)
        return ResultsBundle(series)


def find_threshold(config: ExperimentConfig = ExperimentConfig(), clock: Clock = time.perf_counter) -> int:
    """Convenience wrapper returning only the crossover size n0."""
    return BenchmarkEngine(config, clock).find_threshold().n0


# =============================================================================
# Progress
# =============================================================================

class TqdmProgress:
    """tqdm progress bar fed by the experiment runner's round callback."""

    def __init__(self, label: str, total: int, disable: bool = False):
        self.bar = tqdm(total=total, desc=f"{label} experiment", unit="round",
                        disable=disable, file=sys.stderr)

    def __call__(self, current: int, total: int, remaining: float):
        self.bar.set_postfix(remaining=f"{remaining:.2f}s", refresh=False)
        self.bar.update(current - self.bar.n)

    def close(self):
        self.bar.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


# =============================================================================
# Formatting & Output
# =============================================================================

def fmt_time(t):
    """Format time with appropriate units."""
    if t == float('inf'):
        return "timeout"
    if t < 1e-6:
        return f"{t*1e9:.1f}ns"
    if t < 1e-3:
        return f"{t*1e6:.1f}us"
    if t < 1:
        return f"{t*1e3:.2f}ms"
    return f"{t:.3f}s"


def get_system_info():
    """Gather system information for reproducibility."""
    return {
        "timestamp": datetime.now().isoformat(),
        "python_version": sys.version,
        "platform": platform.platform(),
        "processor": platform.processor() or "unknown",
        "machine": platform.machine(),
        "numpy_version": np.__version__,
        "pandas_version": pd.__version__,
    }


def print_header(text):
    print(f"\n{Colors.BOLD}{Colors.HEADER}{'='*70}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.HEADER}{text.center(70)}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.HEADER}{'='*70}{Colors.END}\n")


def print_subheader(text):
    print(f"\n{Colors.BOLD}{Colors.CYAN}{text}{Colors.END}")
    print(f"{Colors.CYAN}{'-'*len(text)}{Colors.END}")


def print_threshold_table(search: ThresholdSearch):
    """Print every size probed by the threshold search."""
    hdr = f"{'n':>8} {'Insertion avg':>14} {'Merge avg':>12} {'Winner':>10}"
    print(f"{Colors.BOLD}{hdr}{Colors.END}")
    print("-" * len(hdr))

    for p in search.probes:
        winner = f"{Colors.GREEN}merge{Colors.END}" if p.merge_wins else "insertion"
        print(f"{p.size:>8} {fmt_time(p.insertion_avg):>14} {fmt_time(p.merge_avg):>12} {winner:>10}")

    if search.found:
        print(f"\n  Crossover n0 = {Colors.BOLD}{search.n0}{Colors.END}")
    else:
        print(f"\n  {Colors.YELLOW}No crossover in range; n0 = 0 (hybrid = merge sort){Colors.END}")


def print_statistics_table(stats: Dict[str, SeriesStatistics]):
    """Print per-algorithm statistics for one input shape."""
    best = min(s.mean for s in stats.values())

    hdr = (f"{'Algorithm':<16} {'Mean':>10} {'Median':>10} {'Min':>10} {'Max':>10} "
           f"{'Mode':>10} {'Std Dev':>10} {'vs Best':>8}")
    print(f"{Colors.BOLD}{hdr}{Colors.END}")
    print("-" * len(hdr))

    for key, s in stats.items():
        ratio = s.mean / best if best else 1.0
        if ratio <= 1.1:
            clr = Colors.GREEN
        elif ratio <= 2:
            clr = Colors.YELLOW
        else:
            clr = Colors.RED
        print(f"{ALGORITHM_NAMES.get(key, key):<16} {fmt_time(s.mean):>10} {fmt_time(s.median):>10} "
              f"{fmt_time(s.min_val):>10} {fmt_time(s.max_val):>10} {fmt_time(s.mode):>10} "
              f"{fmt_time(s.std_dev):>10} {clr}{ratio:>7.2f}x{Colors.END}")


def print_summary(stats: Dict[str, Dict[str, SeriesStatistics]]):
    for shape, per_algo in stats.items():
        print_subheader(f"Statistics: {INPUT_GENERATORS[shape].label}")
        print_statistics_table(per_algo)


# =============================================================================
# Export
# =============================================================================

EXCEL_SHEET = "Results"
EXCEL_COLUMNS = ["Execution"] + [ALGORITHM_NAMES[k] for k in ALGORITHM_KEYS]


def results_frame(bundle: ResultsBundle, shape: str) -> pd.DataFrame:
    rows = [(f"Exec {i}",) + tuple(times) for i, *times in bundle.rows(shape)]
    return pd.DataFrame(rows, columns=EXCEL_COLUMNS)


def export_to_excel(bundle: ResultsBundle, path: str):
    """
    Write raw timings (seconds) to one sheet: for each input shape a label
    row, a header row, then one row per round.
    """
    row = 0
    with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
        for shape in bundle.shapes():
            frame = results_frame(bundle, shape)
            frame.to_excel(writer, sheet_name=EXCEL_SHEET, startrow=row + 1, index=False)
            writer.sheets[EXCEL_SHEET].write(row, 0, INPUT_GENERATORS[shape].label)
            row += len(frame) + 2
    logger.info("Wrote %s", path)


def build_report(config: ExperimentConfig, threshold: ThresholdSearch,
                 results: ResultsBundle) -> BenchmarkReport:
    """Build complete benchmark report."""
    metadata = get_system_info()
    metadata["benchmark_version"] = "1.0.0"
    return BenchmarkReport(
        metadata=metadata,
        config=config,
        threshold=threshold,
        results=results,
        stats=results.statistics(),
    )
