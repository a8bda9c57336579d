"""
Simulation Context
==================

Builds the three-node topology shared by every run of an experiment:

    tx  (implant, in-body)  --->  rx (hub)  <---  jam (external jammer)

All three radios share one SpectrumChannel whose loss stack is the body
attenuation model followed by the log-distance model. The implant's
position handle is registered as in-body, so only links touching the
implant are attenuated by tissue.

Author: WBAN Jamming Team
"""

from dataclasses import dataclass
from typing import Optional

import simpy

from wban_jamming.channel.mobility import PositionTable
from wban_jamming.channel.phy import Transceiver, create_tx_power_spectral_density
from wban_jamming.channel.spectrum_channel import SpectrumChannel
from wban_jamming.physics.body_loss import BodyPropagationLossModel
from wban_jamming.physics.propagation import LogDistancePropagationLossModel
from wban_jamming.physics.tissue import BodyOrganOption, DEFAULT_ORGAN
from .config import RadioConfig


@dataclass
class SimulationContext:
    """Nodes, radios and loss models reused across sequential runs."""

    positions: PositionTable
    tx_handle: int
    rx_handle: int
    jam_handle: int
    body_loss: BodyPropagationLossModel
    path_loss: LogDistancePropagationLossModel
    channel: SpectrumChannel
    tx_phy: Transceiver
    rx_phy: Transceiver
    jam_phy: Transceiver
    radio: RadioConfig

    def reset(self) -> simpy.Environment:
        """Start a fresh simulated timeline and return its environment."""
        env = simpy.Environment()
        self.channel.reset(env)
        return env

    def set_positions(self, tx, rx, jam):
        self.positions.set_position(self.tx_handle, tx)
        self.positions.set_position(self.rx_handle, rx)
        self.positions.set_position(self.jam_handle, jam)


def create_simulation_context(
    radio: Optional[RadioConfig] = None,
    organ: BodyOrganOption = DEFAULT_ORGAN,
) -> SimulationContext:
    """
    Create the tx/rx/jam topology.

    Args:
        radio: Radio parameters (default RadioConfig())
        organ: Initial tissue profile

    Returns:
        A SimulationContext ready for JammingExperiment.run
    """
    radio = RadioConfig() if radio is None else radio

    positions = PositionTable()
    tx_handle = positions.add()
    rx_handle = positions.add()
    jam_handle = positions.add()

    body_loss = BodyPropagationLossModel(organ)
    path_loss = LogDistancePropagationLossModel(positions)
    channel = SpectrumChannel()
    channel.add_propagation_loss_model(body_loss)
    channel.add_propagation_loss_model(path_loss)

    def make_phy(name, handle):
        phy = Transceiver(
            name,
            handle,
            data_rate_bps=radio.data_rate_bps,
            phy_overhead_bits=radio.phy_overhead_bits,
            noise_floor_dbm=radio.noise_floor_dbm,
            sinr_threshold_db=radio.sinr_threshold_db,
            channel_number=radio.channel_number,
        )
        channel.attach(phy)
        return phy

    tx_phy = make_phy("tx", tx_handle)
    rx_phy = make_phy("rx", rx_handle)
    jam_phy = make_phy("jam", jam_handle)

    body_loss.clear_in_body()
    body_loss.register_in_body(tx_handle)

    tx_phy.set_tx_power_spectral_density(
        create_tx_power_spectral_density(radio.tx_power_dbm, radio.channel_number)
    )
    jam_phy.set_tx_power_spectral_density(
        create_tx_power_spectral_density(radio.jam_power_dbm, radio.channel_number)
    )
    rx_phy.set_rx_sensitivity(radio.rx_sensitivity_dbm)

    return SimulationContext(
        positions=positions,
        tx_handle=tx_handle,
        rx_handle=rx_handle,
        jam_handle=jam_handle,
        body_loss=body_loss,
        path_loss=path_loss,
        channel=channel,
        tx_phy=tx_phy,
        rx_phy=rx_phy,
        jam_phy=jam_phy,
        radio=radio,
    )
