"""
Free-Space Propagation Module
=============================

Distance-based path loss and power unit conversions used by the spectrum
channel and by the jammer-path figures of an experiment run.

Log-Distance Path Loss (in dB):
    PL(d) = PL(d0)                                for d <= d0
    PL(d) = PL(d0) + 10 * n * log10(d / d0)       for d >  d0

where:
    d0 = reference distance (1 m)
    PL(d0) = loss at the reference distance (46.6777 dB, free space at 5.15 GHz)
    n  = path loss exponent (3.0)

Received power:
    P_R(dBm) = P_tx(dBm) - PL(d)

Author: WBAN Jamming Team
"""

import numpy as np
from typing import Union

# =============================================================================
# PHYSICAL CONSTANTS
# =============================================================================

# Thermal noise power spectral density at 290 K (dBm/Hz)
THERMAL_NOISE_DBM_PER_HZ = -174.0

# Log-distance defaults
DEFAULT_PATH_LOSS_EXPONENT = 3.0
DEFAULT_REFERENCE_DISTANCE_M = 1.0
DEFAULT_REFERENCE_LOSS_DB = 46.6777


# =============================================================================
# UNIT CONVERSION FUNCTIONS
# =============================================================================

def dbm_to_watts(power_dbm: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Convert power from dBm to Watts.

    Formula: P_watts = 10^((P_dBm - 30) / 10)

    Example:
        >>> dbm_to_watts(-90.0)
        1e-12
    """
    return 10 ** ((power_dbm - 30) / 10)


def watts_to_dbm(power_watts: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Convert power from Watts to dBm.

    Formula: P_dBm = 10*log10(P_watts) + 30
    """
    return 10 * np.log10(power_watts) + 30


def noise_power_dbm(bandwidth_hz: float, noise_figure_db: float = 0.0) -> float:
    """
    Thermal noise floor of a receiver.

    Args:
        bandwidth_hz: Receiver noise bandwidth in Hz
        noise_figure_db: Receiver noise figure in dB

    Returns:
        Noise power in dBm

    Example:
        >>> round(noise_power_dbm(300e3), 1)
        -119.2
    """
    return float(THERMAL_NOISE_DBM_PER_HZ + 10 * np.log10(bandwidth_hz) + noise_figure_db)


# =============================================================================
# PATH LOSS
# =============================================================================

def log_distance_loss_db(
    distance: Union[float, np.ndarray],
    exponent: float = DEFAULT_PATH_LOSS_EXPONENT,
    reference_distance: float = DEFAULT_REFERENCE_DISTANCE_M,
    reference_loss_db: float = DEFAULT_REFERENCE_LOSS_DB,
) -> Union[float, np.ndarray]:
    """
    Calculate log-distance path loss in dB.

    Distances at or below the reference distance get exactly the reference
    loss, so the model never produces a gain for co-located nodes.

    Args:
        distance: Distance(s) between transmitter and receiver in meters
        exponent: Path loss exponent n
        reference_distance: d0 in meters
        reference_loss_db: PL(d0) in dB

    Returns:
        Path loss in dB (scalar in, scalar out)
    """
    d = np.asarray(distance, dtype=float)
    ratio = np.maximum(d, reference_distance) / reference_distance
    loss = reference_loss_db + 10 * exponent * np.log10(ratio)
    if loss.ndim == 0:
        return float(loss)
    return loss


def crossover_distance(
    tx_power_dbm: float,
    threshold_dbm: float,
    exponent: float = DEFAULT_PATH_LOSS_EXPONENT,
    reference_distance: float = DEFAULT_REFERENCE_DISTANCE_M,
    reference_loss_db: float = DEFAULT_REFERENCE_LOSS_DB,
) -> float:
    """
    Distance at which the log-distance received power falls to a threshold.

    Derived by solving P_tx - PL(d) = threshold for d. For a jammer and a
    receiver sensitivity this is the range beyond which the jammer can no
    longer be heard.

    Example:
        >>> round(crossover_distance(-16.0, -98.0), 2)
        15.04
    """
    margin_db = tx_power_dbm - threshold_dbm - reference_loss_db
    if margin_db <= 0:
        return reference_distance
    return float(reference_distance * 10 ** (margin_db / (10 * exponent)))


class LogDistancePropagationLossModel:
    """
    Log-distance loss model operating on positions from a PositionTable.

    Example:
        >>> from wban_jamming.channel.mobility import PositionTable
        >>> positions = PositionTable()
        >>> a = positions.add((0, 0, 0)); b = positions.add((10, 0, 0))
        >>> model = LogDistancePropagationLossModel(positions)
        >>> round(model.calc_rx_power(0.0, a, b), 4)
        -76.6777
    """

    def __init__(
        self,
        positions,
        exponent: float = DEFAULT_PATH_LOSS_EXPONENT,
        reference_distance: float = DEFAULT_REFERENCE_DISTANCE_M,
        reference_loss_db: float = DEFAULT_REFERENCE_LOSS_DB,
    ):
        if reference_distance <= 0:
            raise ValueError(f"reference_distance must be > 0, got {reference_distance}")
        self.positions = positions
        self.exponent = exponent
        self.reference_distance = reference_distance
        self.reference_loss_db = reference_loss_db

    def loss_db(self, a: int, b: int) -> float:
        """Path loss between two position handles."""
        return log_distance_loss_db(
            self.positions.distance(a, b),
            self.exponent,
            self.reference_distance,
            self.reference_loss_db,
        )

    def calc_rx_power(self, tx_power_dbm: float, a: int, b: int) -> float:
        """Received power in dBm at b for a transmission from a."""
        return tx_power_dbm - self.loss_db(a, b)
