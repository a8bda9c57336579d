"""
Spectrum Channel
================

Shared medium connecting all transceivers of a simulation context.

The channel holds an ordered stack of loss models. The received power of a
transmission is obtained by feeding the transmit power through every model
in turn, each one subtracting its own loss:

    P_R = model_k( ... model_2( model_1(P_tx, a, b), a, b) ..., a, b)

Every transmission is delivered, with zero propagation delay, to every
attached transceiver except the sender, in attachment order.

Author: WBAN Jamming Team
"""

import logging
from typing import List

logger = logging.getLogger(__name__)


class SpectrumChannel:
    """
    Single-medium channel with stacked propagation loss models.

    Attributes:
        env: simpy environment of the current run
        loss_models: Models applied in insertion order
        transceivers: Attached transceivers in attachment order
    """

    def __init__(self):
        self.env = None
        self.loss_models: List = []
        self.transceivers: List = []

    def add_propagation_loss_model(self, model):
        """Append a loss model exposing calc_rx_power(tx_dbm, a, b)."""
        self.loss_models.append(model)

    def attach(self, transceiver):
        if transceiver not in self.transceivers:
            self.transceivers.append(transceiver)
            transceiver.channel = self

    def reset(self, env):
        """Bind a fresh simpy environment and reset every transceiver."""
        self.env = env
        for transceiver in self.transceivers:
            transceiver.reset()

    def calc_rx_power(self, tx_power_dbm: float, a: int, b: int) -> float:
        """Combined received power in dBm across all stacked models."""
        power = tx_power_dbm
        for model in self.loss_models:
            power = model.calc_rx_power(power, a, b)
        return power

    def start_tx(self, sender, packet, tx_power_dbm: float, channel_number: int, duration: float):
        """
        Deliver a transmission to every other attached transceiver.

        Args:
            sender: Transmitting transceiver
            packet: Packet being sent
            tx_power_dbm: Transmit power in dBm
            channel_number: Channel the signal occupies
            duration: Airtime in seconds
        """
        for receiver in self.transceivers:
            if receiver is sender:
                continue
            rx_power = self.calc_rx_power(tx_power_dbm, sender.mobility, receiver.mobility)
            logger.debug(
                "t=%.6f %s -> %s packet %d rx power %.2f dBm",
                self.env.now, sender.name, receiver.name, packet.uid, rx_power,
            )
            receiver.start_rx(packet.copy(), rx_power, channel_number, duration)
