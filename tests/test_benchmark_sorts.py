"""Tests for the benchmark_sorts command-line runner."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from openpyxl import load_workbook

import benchmark_sorts
from benchmark_core import BenchmarkEngine, ExperimentConfig, ThresholdProbe, ThresholdSearch


@pytest.fixture()
def fixed_threshold(monkeypatch):
    search = ThresholdSearch(20, True, (ThresholdProbe(10, 2e-5, 3e-5), ThresholdProbe(20, 5e-5, 4e-5)))
    monkeypatch.setattr(BenchmarkEngine, "find_threshold", lambda self, measure=None: search)
    return search


class TestBuildConfig:
    def test_defaults_match_fixed_constants(self):
        config = benchmark_sorts.build_config(benchmark_sorts.parse_args([]))
        assert config == ExperimentConfig()

    def test_quick_preset(self):
        config = benchmark_sorts.build_config(benchmark_sorts.parse_args(["--quick"]))
        assert config.rounds == benchmark_sorts.QUICK_ROUNDS
        assert config.array_size == benchmark_sorts.QUICK_SIZE

    def test_explicit_values_override_quick(self):
        config = benchmark_sorts.build_config(
            benchmark_sorts.parse_args(["--quick", "--rounds", "4", "--size", "12", "--xlsx", "out.xlsx"]))
        assert (config.rounds, config.array_size, config.output_path) == (4, 12, "out.xlsx")


class TestMain:
    def test_full_run_writes_spreadsheet_and_json(self, tmp_path: Path, fixed_threshold, capsys):
        xlsx = tmp_path / "results.xlsx"
        report = tmp_path / "report.json"

        code = benchmark_sorts.main(["--rounds", "2", "--size", "30", "--xlsx", str(xlsx),
                                     "-o", str(report), "--no-progress"])

        assert code == 0
        ws = load_workbook(xlsx)["Results"]
        assert ws["A1"].value == "Sorted Array"
        assert ws["A5"].value == "Reverse Array"

        data = json.loads(report.read_text(encoding="utf-8"))
        assert data["threshold"]["n0"] == 20
        assert len(data["results"]["reverse"]["hybrid"]) == 2
        assert set(data["statistics"]) == {"sorted", "reverse"}

        out = capsys.readouterr().out
        assert "Threshold Search" in out
        assert "Statistics: Sorted Array" in out
        assert "Statistics: Reverse Array" in out

    def test_quiet_run_prints_nothing(self, tmp_path: Path, fixed_threshold, capsys):
        xlsx = tmp_path / "results.xlsx"
        code = benchmark_sorts.main(["-q", "--rounds", "1", "--size", "10", "--xlsx", str(xlsx)])
        assert code == 0
        assert xlsx.exists()
        assert capsys.readouterr().out == ""

    def test_invalid_config_exits_with_error(self, capsys):
        assert benchmark_sorts.main(["--rounds", "0"]) == 2
        assert "Invalid configuration" in capsys.readouterr().err

    def test_export_failure_propagates(self, tmp_path: Path, fixed_threshold):
        with pytest.raises(Exception):
            benchmark_sorts.main(["-q", "--rounds", "1", "--size", "10",
                                  "--xlsx", str(tmp_path / "missing" / "r.xlsx")])
