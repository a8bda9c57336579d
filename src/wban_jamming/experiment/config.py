"""
Experiment Configuration Module
===============================

Centralized configuration for jamming runs and position sweeps.

Author: WBAN Jamming Team
"""

from dataclasses import dataclass, field, fields, asdict
from typing import Optional, Dict, Any
import json
from pathlib import Path

import numpy as np

from wban_jamming.physics.propagation import noise_power_dbm
from wban_jamming.physics.tissue import (
    BodyOrganOption,
    DEFAULT_ORGAN,
    organ_name,
    parse_organ,
)


@dataclass
class RadioConfig:
    """Transceiver configuration shared by all nodes."""

    tx_power_dbm: float = -16.0         # Legitimate transmitter power
    jam_boost_db: float = 0.0           # Jammer power above tx_power_dbm
    rx_sensitivity_dbm: float = -98.0   # Receiver lock threshold
    channel_number: int = 1
    payload_bytes: int = 32             # PSDU size of every packet

    # Narrowband 402 MHz PHY
    data_rate_bps: float = 75_900.0
    phy_overhead_bits: int = 121        # Preamble + SFD + PHY header
    bandwidth_hz: float = 300e3
    noise_figure_db: float = 0.0
    sinr_threshold_db: float = 6.0

    @property
    def jam_power_dbm(self) -> float:
        return self.tx_power_dbm + self.jam_boost_db

    @property
    def noise_floor_dbm(self) -> float:
        return noise_power_dbm(self.bandwidth_hz, self.noise_figure_db)


@dataclass
class TimingConfig:
    """Fixed schedule of one two-phase run (seconds)."""

    warmup_s: float = 0.2               # Radios switched on
    first_packet_s: float = 0.5         # First phase-1 send
    packet_gap_s: float = 0.02          # Inter-packet gap in both phases
    phase_gap_s: float = 1.0            # Silence between phases
    trailing_margin_s: float = 1.0      # Run continues after the last send
    print_every: int = 500              # Progress interval (sends)


@dataclass
class ScenarioConfig:
    """Node placement, tissue stack and traffic of one run."""

    tx_x: float = 0.0
    tx_y: float = 0.0
    rx_x: float = 0.3
    rx_y: float = 0.0
    jam_x: float = 43.0
    jam_y: float = 0.0
    organ: BodyOrganOption = DEFAULT_ORGAN
    no_jam_packets: int = 5000          # Phase 1 sends
    with_jam_packets: int = 5000        # Phase 2 sends per stream
    fat_layer: int = 1                  # Fat layer override
    muscle_layer: int = 1               # Muscle layer override


@dataclass
class SweepConfig:
    """Position sweep of the receiver or the jammer."""

    start: float = 0.1
    stop: float = 2.0
    step: float = 0.1
    threshold: float = 0.05             # Jammed iff jam-phase success <= threshold
    axis: str = "rx"                    # "rx" or "jam"
    csv_path: Optional[str] = None


@dataclass
class ExperimentConfig:
    """Complete experiment configuration."""

    scenario: ScenarioConfig = field(default_factory=ScenarioConfig)
    radio: RadioConfig = field(default_factory=RadioConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    sweep: SweepConfig = field(default_factory=SweepConfig)

    def validate(self):
        """
        Reject configurations that cannot be scheduled.

        Raises:
            ValueError: On a non-positive packet gap or sweep step, negative
                packet counts, or non-positive layer overrides
        """
        validate_run(self.scenario, self.timing)
        if self.sweep.step <= 0:
            raise ValueError(f"Sweep step must be > 0, got {self.sweep.step}")
        if self.radio.payload_bytes < 0:
            raise ValueError(f"payload_bytes must be >= 0, got {self.radio.payload_bytes}")
        if self.radio.data_rate_bps <= 0:
            raise ValueError(f"data_rate_bps must be > 0, got {self.radio.data_rate_bps}")

    def clamp_threshold(self):
        """Clamp the jam classification threshold into [0, 1]."""
        self.sweep.threshold = float(np.clip(self.sweep.threshold, 0.0, 1.0))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data = asdict(self)
        data["scenario"]["organ"] = organ_name(self.scenario.organ)
        return data

    def save(self, path: str):
        """Save configuration to JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExperimentConfig":
        config = cls()
        for section in ("scenario", "radio", "timing", "sweep"):
            target = getattr(config, section)
            known = {f.name for f in fields(target)}
            for k, v in data.get(section, {}).items():
                if k in known:
                    setattr(target, k, v)
        if isinstance(config.scenario.organ, str):
            config.scenario.organ = parse_organ(config.scenario.organ)
        return config

    @classmethod
    def load(cls, path: str) -> "ExperimentConfig":
        """Load configuration from JSON."""
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)


def validate_run(scenario: ScenarioConfig, timing: TimingConfig):
    """Checks shared by the experiment engine and ExperimentConfig.validate."""
    if timing.packet_gap_s <= 0:
        raise ValueError(f"Inter-packet gap must be > 0, got {timing.packet_gap_s}")
    if scenario.no_jam_packets < 0 or scenario.with_jam_packets < 0:
        raise ValueError(
            "Packet counts must be >= 0, got "
            f"{scenario.no_jam_packets}/{scenario.with_jam_packets}"
        )
    if timing.print_every < 1:
        raise ValueError(f"print_every must be >= 1, got {timing.print_every}")
    for name in ("fat_layer", "muscle_layer"):
        if getattr(scenario, name) < 1:
            raise ValueError(f"{name} must be >= 1, got {getattr(scenario, name)}")


# =============================================================================
# PRESETS
# =============================================================================

def get_default_config() -> ExperimentConfig:
    """Full-length runs: 5000 packets per phase."""
    return ExperimentConfig()


def get_quick_config() -> ExperimentConfig:
    """Shorter runs for exploratory sweeps."""
    config = ExperimentConfig()
    config.scenario.no_jam_packets = 500
    config.scenario.with_jam_packets = 500
    config.timing.print_every = 100
    return config


def get_debug_config() -> ExperimentConfig:
    """Tiny runs for debugging the schedule."""
    config = ExperimentConfig()
    config.scenario.no_jam_packets = 10
    config.scenario.with_jam_packets = 10
    config.timing.print_every = 5
    config.sweep.step = 0.5
    return config


PRESETS = {
    "default": get_default_config,
    "quick": get_quick_config,
    "debug": get_debug_config,
}
