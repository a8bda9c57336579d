"""
Position Sweep Module
=====================

Repeats the jamming experiment while moving either the receiver or the
jammer along the x axis, writes one CSV row per position and reports the
first position at which the link escapes jamming.

Sweep grid:
    x_i = start + i * step,   kept while x_i <= stop + step / 2

The half-step tolerance keeps the nominal last point (e.g. 2.0 for
0.1..2.0 step 0.1) despite floating-point drift.

Classification:
    jammed = jam-phase legitimate success rate <= threshold

Author: WBAN Jamming Team
"""

import csv
import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

import numpy as np

from .config import ScenarioConfig
from .jamming import JammingExperiment, RunResult

logger = logging.getLogger(__name__)

# Relative to the working directory unless a caller supplies its own base
DEFAULT_SCAN_DIR = Path("output") / "scan"

CSV_COLUMNS = [
    "rxX",
    "rxY",
    "txRxDistance",
    "rxJamDistance",
    "scanCoordinate",
    "bodyLossDb",
    "bodyRxPowerDbm",
    "jamRxPowerDbm",
    "jamLossDb",
    "noJamSuccessRate",
    "jamSuccessRate",
    "isJammed",
    "noJamPacketsRx",
    "jamPacketsRx",
    "jamPacketsFromJammerRx",
]


class ScanAxis(Enum):
    RX = "rx"
    JAM = "jam"


_JAM_ALIASES = ("jam", "jammer", "j")


def parse_axis(value: str) -> ScanAxis:
    """
    Parse the swept node name.

    "jam", "jammer" and "j" select the jammer (case-insensitive). "rx"
    selects the receiver; any other value falls back to the receiver with a
    warning.
    """
    key = value.strip().lower()
    if key in _JAM_ALIASES:
        return ScanAxis.JAM
    if key != "rx":
        logger.warning("Unknown scan target '%s', scanning rx", value)
    return ScanAxis.RX


def sweep_coordinates(start: float, stop: float, step: float) -> np.ndarray:
    """
    Coordinates visited by a sweep, in increasing order.

    Raises:
        ValueError: If step <= 0

    Example:
        >>> len(sweep_coordinates(0.1, 2.0, 0.1))
        20
    """
    if step <= 0:
        raise ValueError(f"Sweep step must be > 0, got {step}")
    if stop < start:
        return np.array([], dtype=float)
    count = int(np.floor((stop + step * 0.5 - start) / step)) + 1
    coordinates = start + np.arange(count) * step
    # Guard the floor() against rounding in either direction
    return coordinates[coordinates <= stop + step * 0.5]


def _fmt(value: float) -> str:
    return format(value, ".6g")


@dataclass(frozen=True)
class SweepPoint:
    """One swept coordinate and its run outcome."""

    coordinate: float
    result: RunResult
    jammed: bool

    @property
    def no_jam_success_rate(self) -> float:
        return self.result.no_jam_success_rate

    @property
    def jam_success_rate(self) -> float:
        return self.result.jam_success_rate

    def csv_row(self) -> Dict[str, str]:
        r = self.result
        values = [
            _fmt(r.rx[0]),
            _fmt(r.rx[1]),
            _fmt(r.tx_rx_distance),
            _fmt(r.rx_jam_distance),
            _fmt(self.coordinate),
            _fmt(r.body_loss_db),
            _fmt(r.body_rx_power_dbm),
            _fmt(r.jam_rx_power_dbm),
            _fmt(r.jam_loss_db),
            _fmt(r.no_jam_success_rate),
            _fmt(r.jam_success_rate),
            "1" if self.jammed else "0",
            str(r.no_jam_rx),
            str(r.jam_rx_tx),
            str(r.jam_rx_jam),
        ]
        return dict(zip(CSV_COLUMNS, values))


@dataclass
class SweepResult:
    """Outcome of a sweep."""

    axis: ScanAxis
    threshold: float
    points: List[SweepPoint] = field(default_factory=list)
    first_safe_distance: Optional[float] = None
    cancelled: bool = False

    @property
    def still_jammed(self) -> bool:
        return self.first_safe_distance is None

    def summary(self) -> str:
        """Human-readable safe-distance report."""
        if self.still_jammed:
            return (
                f"[Threshold] Node remains inside the jamming zone over the whole "
                f"range (threshold={_fmt(self.threshold)})"
            )
        if self.axis is ScanAxis.JAM:
            return (
                f"[Threshold] Minimum JAM-RX distance without jamming "
                f"(threshold={_fmt(self.threshold)}) ~ {_fmt(self.first_safe_distance)} m"
            )
        return (
            f"[Threshold] First RX position outside the jamming zone "
            f"(threshold={_fmt(self.threshold)}) at TX-RX distance "
            f"~ {_fmt(self.first_safe_distance)} m"
        )


# =============================================================================
# CSV OUTPUT
# =============================================================================

def resolve_csv_path(requested: Optional[str], default_dir: Optional[Path] = None) -> Optional[Path]:
    """
    Resolve the output CSV path.

    Absolute paths are kept, relative ones are placed under default_dir
    (default: output/scan below the current working directory).
    Empty or None means no CSV output.
    """
    if not requested:
        return None
    path = Path(requested)
    if path.is_absolute():
        return path
    if default_dir is None:
        default_dir = Path.cwd() / DEFAULT_SCAN_DIR
    return Path(default_dir) / path


class ScanCsvWriter:
    """
    Row-per-point CSV trace of a sweep.

    The parent directory is created before the file is opened, so a failed
    directory creation leaves no partial file behind. Rows are flushed as
    they are written.

    Raises:
        OSError: If the directory cannot be created or the file opened
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OSError(f"Cannot create directory '{self.path.parent}': {e}") from e
        try:
            self._file = open(self.path, "w", newline="")
        except OSError as e:
            raise OSError(f"Cannot open '{self.path}' for writing: {e}") from e
        self._writer = csv.DictWriter(self._file, fieldnames=CSV_COLUMNS, lineterminator="\n")
        self._writer.writeheader()
        self.rows_written = 0

    def write_point(self, point: SweepPoint):
        self._writer.writerow(point.csv_row())
        self._file.flush()
        self.rows_written += 1

    def close(self):
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


# =============================================================================
# SWEEP
# =============================================================================

class SweepRunner:
    """
    Drives JammingExperiment over a range of one coordinate.

    Example:
        >>> from wban_jamming.experiment.context import create_simulation_context
        >>> ctx = create_simulation_context()
        >>> base = ScenarioConfig(no_jam_packets=10, with_jam_packets=10)
        >>> runner = SweepRunner(JammingExperiment(ctx), threshold=0.05, axis=ScanAxis.JAM)
        >>> result = runner.run(base, start=10.0, stop=20.0, step=1.0)
        >>> round(result.first_safe_distance, 1)
        15.7
    """

    def __init__(
        self,
        experiment: JammingExperiment,
        threshold: float = 0.05,
        axis: ScanAxis = ScanAxis.RX,
    ):
        self.experiment = experiment
        self.threshold = threshold
        self.axis = axis

    def scenario_at(self, base: ScenarioConfig, coordinate: float) -> ScenarioConfig:
        """Base scenario with the swept node moved to x = coordinate."""
        if self.axis is ScanAxis.JAM:
            return dataclasses.replace(base, jam_x=float(coordinate))
        return dataclasses.replace(base, rx_x=float(coordinate))

    def run(
        self,
        base: ScenarioConfig,
        start: float,
        stop: float,
        step: float,
        writer: Optional[ScanCsvWriter] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> SweepResult:
        """
        Sweep the selected axis.

        Args:
            base: Scenario supplying the fixed endpoints, organ and traffic
            start: First coordinate (m)
            stop: Last coordinate (m), inclusive within step / 2
            step: Increment (m), must be > 0
            writer: Optional CSV trace, one row per point
            should_stop: Polled between points; True ends the sweep early

        Returns:
            SweepResult with all completed points

        Raises:
            ValueError: If step <= 0 (before any run)
        """
        coordinates = sweep_coordinates(start, stop, step)
        sweep = SweepResult(axis=self.axis, threshold=self.threshold)

        for coordinate in coordinates:
            if should_stop is not None and should_stop():
                sweep.cancelled = True
                logger.info("Sweep cancelled after %d points", len(sweep.points))
                break

            result = self.experiment.run(self.scenario_at(base, coordinate))
            jammed = result.jam_success_rate <= self.threshold
            point = SweepPoint(coordinate=float(coordinate), result=result, jammed=jammed)
            sweep.points.append(point)
            if writer is not None:
                writer.write_point(point)

            logger.debug(
                "%s=%.4f no-jam success %.3f, jam success %.3f, jammed=%s",
                self.axis.value, coordinate,
                result.no_jam_success_rate, result.jam_success_rate, jammed,
            )

            if not jammed and sweep.first_safe_distance is None:
                if self.axis is ScanAxis.JAM:
                    sweep.first_safe_distance = result.rx_jam_distance
                else:
                    sweep.first_safe_distance = result.tx_rx_distance

        return sweep
