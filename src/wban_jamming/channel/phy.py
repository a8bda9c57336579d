"""
Transceiver PHY Module
======================

Power-threshold-gated packet transceiver.

Reception model:
    1. A receiver in RX_ON locks onto the first same-channel signal whose
       received power is at or above its sensitivity.
    2. While locked (BUSY_RX) every further signal is interference for the
       locked packet and is itself lost.
    3. When the locked packet ends it is delivered iff
           SINR = P_signal / (P_noise + peak P_interference) >= threshold
       and the receive-indication callback is invoked synchronously.

Transmission model:
    A transceiver in TX_ON accepts a data request, occupies the channel for
    the packet airtime (BUSY_TX) and then returns to TX_ON.

    airtime = (PHY overhead bits + 8 * PSDU bytes) / data rate

State requests made while busy are applied when the busy period ends.

Author: WBAN Jamming Team
"""

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional

import numpy as np

from wban_jamming.physics.propagation import dbm_to_watts
from .events import schedule_in
from .packet import Packet

logger = logging.getLogger(__name__)


class PhyState(Enum):
    TRX_OFF = "TRX_OFF"
    RX_ON = "RX_ON"
    TX_ON = "TX_ON"
    BUSY_RX = "BUSY_RX"
    BUSY_TX = "BUSY_TX"


_REQUESTABLE_STATES = (PhyState.TRX_OFF, PhyState.RX_ON, PhyState.TX_ON)


@dataclass(frozen=True)
class TxPowerSpectralDensity:
    """Transmit power concentrated on one channel."""

    power_dbm: float
    channel_number: int


def create_tx_power_spectral_density(power_dbm: float, channel_number: int) -> TxPowerSpectralDensity:
    if channel_number < 0:
        raise ValueError(f"channel_number must be >= 0, got {channel_number}")
    return TxPowerSpectralDensity(float(power_dbm), int(channel_number))


RxIndicationCallback = Callable[[int, Packet, float], None]


class Transceiver:
    """
    One radio attached to a SpectrumChannel.

    Attributes:
        name: Label used in logs
        mobility: Position handle of the node carrying the radio
        state: Current PhyState
        channel_number: Channel the radio listens on
        rx_sensitivity_dbm: Minimum power to lock onto a packet
        stats: Counter of delivery outcomes for diagnostics

    Example:
        >>> from wban_jamming.channel import PositionTable, SpectrumChannel
        >>> positions = PositionTable()
        >>> channel = SpectrumChannel()
        >>> phy = Transceiver("rx", mobility=positions.add((0.3, 0.0)))
        >>> channel.attach(phy)
        >>> phy.set_rx_sensitivity(-98.0)
        >>> round(phy.airtime(32) * 1e3, 2)   # ms
        4.97
    """

    def __init__(
        self,
        name: str,
        mobility: int,
        data_rate_bps: float = 75_900.0,
        phy_overhead_bits: int = 121,
        noise_floor_dbm: float = -119.2,
        sinr_threshold_db: float = 6.0,
        channel_number: int = 1,
    ):
        if data_rate_bps <= 0:
            raise ValueError(f"data_rate_bps must be > 0, got {data_rate_bps}")
        self.name = name
        self.mobility = mobility
        self.data_rate_bps = data_rate_bps
        self.phy_overhead_bits = phy_overhead_bits
        self.noise_floor_dbm = noise_floor_dbm
        self.sinr_threshold_db = sinr_threshold_db
        self.channel_number = channel_number

        self.channel = None
        self.tx_psd: Optional[TxPowerSpectralDensity] = None
        self.rx_sensitivity_dbm = -np.inf
        self._rx_callback: Optional[RxIndicationCallback] = None
        self.reset()

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def reset(self):
        """Return to TRX_OFF and forget any in-flight signals."""
        self.state = PhyState.TRX_OFF
        self._pending_state: Optional[PhyState] = None
        self._signals: Dict[int, float] = {}
        self._locked: Optional[Packet] = None
        self._locked_power_w = 0.0
        self._locked_length = 0
        self._peak_interference_w = 0.0
        self.stats = Counter()

    def set_tx_power_spectral_density(self, psd: TxPowerSpectralDensity):
        self.tx_psd = psd
        self.channel_number = psd.channel_number

    def set_rx_sensitivity(self, sensitivity_dbm: float):
        self.rx_sensitivity_dbm = float(sensitivity_dbm)

    def set_rx_indication_callback(self, callback: Optional[RxIndicationCallback]):
        """Register the handler called as callback(psdu_length, packet, sinr_db)."""
        self._rx_callback = callback

    def set_trx_state(self, state: PhyState):
        """
        Request a transceiver state.

        Only TRX_OFF, RX_ON and TX_ON can be requested. A request made while
        the radio is busy takes effect when the busy period ends.
        """
        if state not in _REQUESTABLE_STATES:
            raise ValueError(f"Cannot request state {state.name}")
        if self.state in (PhyState.BUSY_RX, PhyState.BUSY_TX):
            self._pending_state = state
            logger.debug("%s busy, deferring %s", self.name, state.name)
            return
        self.state = state

    def airtime(self, psdu_length: int) -> float:
        """Time on air in seconds for a PSDU of psdu_length bytes."""
        return (self.phy_overhead_bits + 8 * psdu_length) / self.data_rate_bps

    @property
    def env(self):
        return self.channel.env

    # -------------------------------------------------------------------------
    # Transmit path
    # -------------------------------------------------------------------------

    def data_request(self, psdu_length: int, packet: Packet) -> bool:
        """
        Transmit a packet.

        Returns:
            True if the packet went on air, False if the radio was not in
            TX_ON or has no transmit PSD configured
        """
        if self.state is not PhyState.TX_ON or self.tx_psd is None:
            self.stats["tx_refused"] += 1
            logger.debug("%s refused data request in state %s", self.name, self.state.name)
            return False
        duration = self.airtime(psdu_length)
        self.state = PhyState.BUSY_TX
        self.stats["tx"] += 1
        self.channel.start_tx(
            self, packet, self.tx_psd.power_dbm, self.tx_psd.channel_number, duration
        )
        schedule_in(self.env, duration, self._end_tx)
        return True

    def _end_tx(self):
        self.state = PhyState.TX_ON
        self._apply_pending()

    # -------------------------------------------------------------------------
    # Receive path
    # -------------------------------------------------------------------------

    def start_rx(self, packet: Packet, rx_power_dbm: float, channel_number: int, duration: float):
        """Called by the channel when a signal starts arriving at this radio."""
        if channel_number != self.channel_number:
            return
        power_w = float(dbm_to_watts(rx_power_dbm))
        self._signals[packet.uid] = power_w
        schedule_in(self.env, duration, self._signal_end, packet.uid)

        if self.state is PhyState.BUSY_RX:
            self._peak_interference_w = max(self._peak_interference_w, self._interference_w())
            self.stats["rx_lost_busy"] += 1
            logger.debug("%s busy, packet %d lost", self.name, packet.uid)
            return
        if self.state is not PhyState.RX_ON:
            self.stats["rx_not_listening"] += 1
            return
        if rx_power_dbm < self.rx_sensitivity_dbm:
            self.stats["rx_below_sensitivity"] += 1
            logger.debug(
                "%s packet %d below sensitivity (%.2f < %.2f dBm)",
                self.name, packet.uid, rx_power_dbm, self.rx_sensitivity_dbm,
            )
            return

        self._locked = packet
        self._locked_power_w = power_w
        self._locked_length = packet.size
        self._peak_interference_w = self._interference_w()
        self.state = PhyState.BUSY_RX
        schedule_in(self.env, duration, self._end_rx)

    def _interference_w(self) -> float:
        uid = self._locked.uid if self._locked is not None else None
        return sum(power for key, power in self._signals.items() if key != uid)

    def _signal_end(self, uid: int):
        self._signals.pop(uid, None)

    def _end_rx(self):
        packet = self._locked
        noise_w = float(dbm_to_watts(self.noise_floor_dbm))
        sinr_db = 10 * np.log10(self._locked_power_w / (noise_w + self._peak_interference_w))

        self._locked = None
        self.state = PhyState.RX_ON
        self._apply_pending()

        if sinr_db < self.sinr_threshold_db:
            self.stats["rx_sinr_fail"] += 1
            logger.debug("%s packet %d failed, SINR %.2f dB", self.name, packet.uid, sinr_db)
            return
        self.stats["rx_ok"] += 1
        if self._rx_callback is not None:
            self._rx_callback(self._locked_length, packet, float(sinr_db))

    def _apply_pending(self):
        if self._pending_state is not None:
            self.state = self._pending_state
            self._pending_state = None
