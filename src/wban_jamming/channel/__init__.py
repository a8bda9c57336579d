"""
Channel Module
==============

Simulation substrate that carries packets between nodes:
    - mobility: handle-addressed node positions
    - packet: packets and the 1-byte source tag
    - events: callback scheduling over simpy
    - spectrum_channel: shared medium with stacked loss models
    - phy: power/SINR-gated transceiver
"""

from .mobility import PositionTable
from .packet import Packet, SourceTag
from .events import schedule_in, schedule_at
from .spectrum_channel import SpectrumChannel
from .phy import (
    PhyState,
    Transceiver,
    TxPowerSpectralDensity,
    create_tx_power_spectral_density,
)

__all__ = [
    "PositionTable",
    "Packet",
    "SourceTag",
    "schedule_in",
    "schedule_at",
    "SpectrumChannel",
    "PhyState",
    "Transceiver",
    "TxPowerSpectralDensity",
    "create_tx_power_spectral_density",
]
