"""Shared fixtures: deterministic clocks for the timing engine."""

from __future__ import annotations

import pytest

from benchmark_core import BenchmarkEngine, ExperimentConfig


class ScriptedClock:
    """Clock whose consecutive start/stop reads produce preset durations."""

    def __init__(self, durations):
        self.stamps = []
        t = 0.0
        for d in durations:
            self.stamps += [t, t + d]
            t += d
        self.calls = 0

    def __call__(self) -> float:
        value = self.stamps[self.calls]
        self.calls += 1
        return value


class TickClock:
    """Clock that advances by a fixed step on every read."""

    def __init__(self, step: float = 1.0):
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture()
def tick_clock() -> TickClock:
    return TickClock(0.5)


@pytest.fixture()
def small_config() -> ExperimentConfig:
    return ExperimentConfig(rounds=3, array_size=40, gc_between_runs=False)


@pytest.fixture()
def engine(small_config: ExperimentConfig, tick_clock: TickClock) -> BenchmarkEngine:
    return BenchmarkEngine(small_config, clock=tick_clock)
