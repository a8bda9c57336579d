"""
Unit Tests for Position Sweeps
==============================

Critical tests:
    - The nominal stop coordinate is always visited
    - The jammer safe distance is found within one step of the
      sensitivity crossover (~15.04 m at equal power)
    - One CSV row per point, header first

Run with: python -m pytest tests/test_sweep.py -v

Author: WBAN Jamming Team
"""

import sys
import os
import csv
import logging

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wban_jamming.experiment.config import ScenarioConfig
from wban_jamming.experiment.context import create_simulation_context
from wban_jamming.experiment.jamming import JammingExperiment
from wban_jamming.experiment.sweep import (
    CSV_COLUMNS,
    DEFAULT_SCAN_DIR,
    ScanAxis,
    ScanCsvWriter,
    SweepRunner,
    parse_axis,
    resolve_csv_path,
    sweep_coordinates,
)
from wban_jamming.physics.propagation import crossover_distance


BASE = ScenarioConfig(no_jam_packets=10, with_jam_packets=10)


def read_rows(path):
    with open(path, newline="") as f:
        return list(csv.reader(f))


class TestSweepCoordinates:
    """Sweep grid."""

    def test_stop_included(self):
        xs = sweep_coordinates(0.1, 2.0, 0.1)
        assert len(xs) == 20
        assert xs[0] == pytest.approx(0.1)
        assert xs[-1] == pytest.approx(2.0)

    def test_integer_grid(self):
        assert np.allclose(sweep_coordinates(10.0, 20.0, 1.0), np.arange(10.0, 21.0))

    def test_single_point(self):
        assert np.allclose(sweep_coordinates(1.0, 1.0, 0.5), [1.0])

    def test_stop_below_start(self):
        assert len(sweep_coordinates(2.0, 1.0, 0.1)) == 0

    def test_stop_not_on_grid(self):
        xs = sweep_coordinates(0.0, 1.0, 0.3)
        assert np.allclose(xs, [0.0, 0.3, 0.6, 0.9])

    @pytest.mark.parametrize("step", [0.0, -0.1])
    def test_non_positive_step(self, step):
        with pytest.raises(ValueError):
            sweep_coordinates(0.1, 2.0, step)


class TestParseAxis:
    """Swept node names."""

    @pytest.mark.parametrize("name", ["jam", "Jammer", "J", " jam "])
    def test_jam_aliases(self, name):
        assert parse_axis(name) is ScanAxis.JAM

    def test_rx(self):
        assert parse_axis("RX") is ScanAxis.RX

    def test_unknown_falls_back_to_rx(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert parse_axis("tx") is ScanAxis.RX
        assert "tx" in caplog.text


class TestCsvPath:
    """Output path resolution."""

    def test_none_and_empty(self):
        assert resolve_csv_path(None) is None
        assert resolve_csv_path("") is None

    def test_absolute(self, tmp_path):
        target = tmp_path / "scan.csv"
        assert resolve_csv_path(str(target)) == target

    def test_relative_goes_under_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        expected = tmp_path / "output" / "scan" / "a" / "b.csv"
        assert resolve_csv_path("a/b.csv").resolve() == expected.resolve()
        assert DEFAULT_SCAN_DIR.parts == ("output", "scan")

    def test_relative_with_explicit_base(self, tmp_path):
        assert resolve_csv_path("b.csv", tmp_path) == tmp_path / "b.csv"


class TestScanCsvWriter:
    """CSV trace."""

    def test_creates_directories_and_header(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "scan.csv"
        with ScanCsvWriter(path) as writer:
            assert writer.rows_written == 0
        assert read_rows(path) == [CSV_COLUMNS]

    def test_directory_failure_creates_nothing(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        path = blocker / "scan.csv"
        with pytest.raises(OSError):
            ScanCsvWriter(path)
        assert blocker.is_file()
        assert not path.exists()


class TestJammerSweep:
    """Sweep of the jammer position with the receiver at 0.3 m."""

    def setup_method(self):
        self.runner = SweepRunner(
            JammingExperiment(create_simulation_context()),
            threshold=0.05,
            axis=ScanAxis.JAM,
        )

    def test_safe_distance_near_crossover(self):
        result = self.runner.run(BASE, 10.0, 20.0, 1.0)

        assert len(result.points) == 11
        assert not result.cancelled
        jammed = [p.jammed for p in result.points]
        # 10..15 m jammed, 16..20 m safe
        assert jammed == [True] * 6 + [False] * 5
        assert result.first_safe_distance == pytest.approx(15.7)
        assert abs(result.first_safe_distance - crossover_distance(-16.0, -98.0)) <= 1.0
        assert "Minimum JAM-RX distance" in result.summary()

    def test_jammed_points_block_everything(self):
        result = self.runner.run(BASE, 10.0, 11.0, 1.0)
        for point in result.points:
            assert point.jam_success_rate == 0.0
            assert point.no_jam_success_rate == 1.0
            assert point.result.jam[0] == point.coordinate

    def test_still_jammed(self):
        result = self.runner.run(BASE, 1.0, 3.0, 1.0)
        assert result.still_jammed
        assert result.first_safe_distance is None
        assert "remains inside the jamming zone" in result.summary()

    def test_csv_rows(self, tmp_path):
        path = tmp_path / "jam.csv"
        with ScanCsvWriter(path) as writer:
            result = self.runner.run(BASE, 14.0, 17.0, 1.0, writer=writer)

        rows = read_rows(path)
        assert rows[0] == CSV_COLUMNS
        assert len(rows) == 1 + len(result.points) == 5
        records = [dict(zip(CSV_COLUMNS, row)) for row in rows[1:]]
        assert [r["scanCoordinate"] for r in records] == ["14", "15", "16", "17"]
        assert [r["isJammed"] for r in records] == ["1", "1", "0", "0"]
        assert records[0]["rxX"] == "0.3"
        assert records[0]["rxJamDistance"] == "13.7"
        assert records[2]["jamPacketsRx"] == "10"
        assert records[0]["jamPacketsRx"] == "0"

    def test_cancellation(self, tmp_path):
        calls = []

        def should_stop():
            calls.append(1)
            return len(calls) > 2

        path = tmp_path / "cancel.csv"
        with ScanCsvWriter(path) as writer:
            result = self.runner.run(BASE, 10.0, 20.0, 1.0, writer=writer, should_stop=should_stop)

        assert result.cancelled
        assert len(result.points) == 2
        assert len(read_rows(path)) == 3

    def test_invalid_step_runs_nothing(self):
        with pytest.raises(ValueError):
            self.runner.run(BASE, 10.0, 20.0, 0.0)
        assert self.runner.experiment.counters.no_jam_sent == 0


class TestReceiverSweep:
    """Sweep of the receiver position against a distant jammer."""

    def test_default_range(self):
        runner = SweepRunner(JammingExperiment(create_simulation_context()))
        base = ScenarioConfig(no_jam_packets=5, with_jam_packets=5)
        result = runner.run(base, 0.1, 2.0, 0.1)

        assert len(result.points) == 20
        assert result.points[-1].coordinate == pytest.approx(2.0)
        assert not any(p.jammed for p in result.points)
        assert result.first_safe_distance == pytest.approx(0.1)
        assert "TX-RX distance" in result.summary()

    def test_threshold_one_marks_everything_jammed(self):
        runner = SweepRunner(JammingExperiment(create_simulation_context()), threshold=1.0)
        result = runner.run(BASE, 0.3, 0.5, 0.1)
        assert all(p.jammed for p in result.points)
        assert result.still_jammed
