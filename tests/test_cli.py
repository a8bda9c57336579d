"""
Tests for the Command Line Entry Point
======================================

Run with: python -m pytest tests/test_cli.py -v

Author: WBAN Jamming Team
"""

import sys
import os
import csv
import json
import logging

import pytest

# Add project root and src to path for imports
ROOT = os.path.join(os.path.dirname(__file__), '..')
sys.path.insert(0, ROOT)
sys.path.insert(0, os.path.join(ROOT, 'src'))

import run_jamming
from wban_jamming.experiment.sweep import CSV_COLUMNS
from wban_jamming.physics.tissue import BodyOrganOption


@pytest.fixture(autouse=True)
def reset_package_logger():
    """main() installs stdout handlers; drop them after each test."""
    yield
    logger = logging.getLogger("wban_jamming")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


class TestArguments:
    """Argument parsing and overrides."""

    def test_defaults_leave_config_untouched(self):
        args = run_jamming.parse_args([])
        config = run_jamming.get_config(args)
        assert config.scenario.rx_x == 0.3
        assert config.scenario.no_jam_packets == 5000
        assert config.sweep.csv_path is None

    def test_overrides(self):
        args = run_jamming.parse_args([
            "--preset", "debug",
            "--rxX", "0.5", "--jamX", "12", "--jamPackets", "7",
            "--bodyOrgan", "Kidney-402", "--jamBoost", "3",
            "--scanTarget", "jammer", "--jamThreshold", "0.2",
        ])
        config = run_jamming.get_config(args)
        assert config.scenario.rx_x == 0.5
        assert config.scenario.jam_x == 12.0
        assert config.scenario.with_jam_packets == 7
        assert config.scenario.no_jam_packets == 10
        assert config.scenario.organ is BodyOrganOption.KIDNEY_402_MHZ
        assert config.radio.jam_power_dbm == -13.0
        assert config.sweep.axis == "jammer"
        assert config.sweep.threshold == 0.2


class TestMain:
    """Exit codes and outputs."""

    def test_single_run(self, capsys):
        assert run_jamming.main(["--preset", "debug"]) == 0
        out = capsys.readouterr().out
        assert "Baseline Results" in out
        assert "Success with jammer:     1.000" in out

    def test_bad_step_exits_before_writing(self, tmp_path, capsys):
        path = tmp_path / "scan.csv"
        code = run_jamming.main([
            "--preset", "debug", "--scanStep", "0", "--scanCsv", str(path),
        ])
        assert code == 1
        assert not path.exists()
        assert "Sweep step" in capsys.readouterr().err

    def test_jammer_sweep_writes_csv(self, tmp_path, capsys):
        path = tmp_path / "out" / "jam.csv"
        code = run_jamming.main([
            "--preset", "debug", "--scanTarget", "jam",
            "--scanStart", "10", "--scanStop", "20", "--scanStep", "1",
            "--scanCsv", str(path),
        ])
        assert code == 0
        with open(path, newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0] == CSV_COLUMNS
        assert len(rows) == 12
        out = capsys.readouterr().out
        assert "Minimum JAM-RX distance" in out
        assert "15.7 m" in out

    def test_stop_below_start_skips_sweep(self, tmp_path):
        path = tmp_path / "scan.csv"
        code = run_jamming.main([
            "--preset", "debug", "--scanStart", "2", "--scanStop", "1",
            "--scanCsv", str(path),
        ])
        assert code == 0
        assert not path.exists()

    def test_threshold_clamped(self, tmp_path, capsys):
        path = tmp_path / "scan.csv"
        code = run_jamming.main([
            "--preset", "debug", "--jamThreshold", "5",
            "--scanStart", "0.3", "--scanStop", "0.3", "--scanCsv", str(path),
        ])
        assert code == 0
        out = capsys.readouterr().out
        assert "threshold=1" in out
        assert "remains inside the jamming zone" in out

    def test_unwritable_csv(self, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        code = run_jamming.main([
            "--preset", "debug", "--scanCsv", str(blocker / "scan.csv"),
        ])
        assert code == 1
        assert "Cannot create directory" in capsys.readouterr().err

    def test_save_and_reload_config(self, tmp_path):
        saved = tmp_path / "config.json"
        assert run_jamming.main([
            "--preset", "debug", "--bodyOrgan", "skin-402", "--save-config", str(saved),
        ]) == 0
        data = json.loads(saved.read_text())
        assert data["scenario"]["organ"] == "skin-402"
        assert data["scenario"]["no_jam_packets"] == 10

        args = run_jamming.parse_args(["--config", str(saved)])
        config = run_jamming.get_config(args)
        assert config.scenario.organ is BodyOrganOption.SKIN_402_MHZ

    def test_missing_config_file(self, tmp_path, capsys):
        code = run_jamming.main(["--config", str(tmp_path / "missing.json")])
        assert code == 1
        assert "invalid configuration" in capsys.readouterr().err

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        assert run_jamming.main(["--preset", "debug", "--log-file", str(log_file)]) == 0
        logging.getLogger("wban_jamming").handlers[-1].close()
        assert "=== SUMMARY ===" in log_file.read_text()

    def test_bad_step_leaves_no_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        code = run_jamming.main([
            "--preset", "debug", "--scanStep", "0", "--log-file", str(log_file),
        ])
        assert code == 1
        assert not log_file.exists()
        assert not log_file.parent.exists()

    def test_unwritable_save_config(self, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        target = blocker / "config.json"
        code = run_jamming.main(["--preset", "debug", "--save-config", str(target)])
        assert code == 1
        err = capsys.readouterr().err
        assert "cannot write output" in err
        assert "blocker" in err
        assert not target.exists()

    def test_relative_csv_lands_under_project_scan_dir(self):
        project = os.path.dirname(os.path.realpath(run_jamming.__file__))
        assert str(run_jamming.SCAN_DIR) == os.path.join(project, "output", "scan")
