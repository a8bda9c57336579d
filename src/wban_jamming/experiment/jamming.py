"""
Jamming Experiment Module
=========================

One two-phase run of the implant-to-hub link against an external jammer.

Timeline (defaults, seconds):
    0.0    run start: counters reset, static power figures computed
    0.2    warm-up done: tx -> TX_ON, rx -> RX_ON, jamming inactive
    0.5    phase 1: N1 legitimate sends, one every gap
    P2     phase 2 start = 0.5 + N1 * gap + phase_gap:
           jammer -> TX_ON, jamming active
    P2..   phase 2: N2 jammer sends and N2 legitimate sends, same instants
    stop   P2 + N2 * gap + trailing margin

Tie-break:
    The jammer stream is registered before the legitimate stream, so at
    every shared instant the jam send fires first and a receiver able to
    hear the jammer is already locked when the legitimate packet arrives.

Attribution:
    The receive-indication callback reads the packet's source tag and the
    jamming_active flag and increments exactly one "received" counter.

Author: WBAN Jamming Team
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

from wban_jamming.channel.events import schedule_at
from wban_jamming.channel.packet import Packet, SourceTag
from wban_jamming.channel.phy import PhyState
from wban_jamming.physics.tissue import BodyOrganOption, TissueProfile, organ_name
from .config import ScenarioConfig, TimingConfig, validate_run
from .context import SimulationContext
from .counters import DeliveryCounters, success_rate

logger = logging.getLogger(__name__)


class ExperimentPhase(Enum):
    IDLE = "idle"
    PHASE1_WARMUP = "phase1_warmup"
    PHASE1_ACTIVE = "phase1_active"
    PHASE2_WARMUP = "phase2_warmup"
    PHASE2_ACTIVE = "phase2_active"
    COMPLETE = "complete"


@dataclass(frozen=True)
class RunResult:
    """Snapshot taken at the end of one run."""

    no_jam_sent: int
    no_jam_rx: int
    jam_sent_tx: int
    jam_rx_tx: int
    jam_sent_jam: int
    jam_rx_jam: int
    body_rx_power_dbm: float
    body_loss_db: float
    jam_rx_power_dbm: float
    jam_loss_db: float
    organ: BodyOrganOption
    profile: TissueProfile
    tx: Tuple[float, float]
    rx: Tuple[float, float]
    jam: Tuple[float, float]

    @property
    def no_jam_success_rate(self) -> float:
        return success_rate(self.no_jam_rx, self.no_jam_sent)

    @property
    def jam_success_rate(self) -> float:
        return success_rate(self.jam_rx_tx, self.jam_sent_tx)

    @property
    def tx_rx_distance(self) -> float:
        return float(np.hypot(self.rx[0] - self.tx[0], self.rx[1] - self.tx[1]))

    @property
    def rx_jam_distance(self) -> float:
        return float(np.hypot(self.rx[0] - self.jam[0], self.rx[1] - self.jam[1]))


@dataclass(frozen=True)
class RunSchedule:
    """Analytically derived instants of one run."""

    phase1_arm: float
    last_phase1_send: float
    phase2_start: float
    stop: float


def compute_schedule(scenario: ScenarioConfig, timing: TimingConfig) -> RunSchedule:
    """
    Derive the run timeline from packet counts and gaps.

    Example:
        >>> s = compute_schedule(ScenarioConfig(no_jam_packets=10, with_jam_packets=10), TimingConfig())
        >>> round(s.phase2_start, 6), round(s.stop, 6)
        (1.7, 2.9)
    """
    n1 = scenario.no_jam_packets
    n2 = scenario.with_jam_packets
    gap = timing.packet_gap_s
    if n1:
        last_phase1_send = timing.first_packet_s + (n1 - 1) * gap
    else:
        last_phase1_send = timing.warmup_s
    phase2_start = timing.first_packet_s + n1 * gap + timing.phase_gap_s
    stop = phase2_start + n2 * gap + timing.trailing_margin_s
    return RunSchedule(timing.warmup_s, last_phase1_send, phase2_start, stop)


class JammingExperiment:
    """
    Two-phase jamming run over a SimulationContext.

    The experiment owns its DeliveryCounters and registers itself as the
    receiver's receive-indication handler, so counters never leak between
    experiments sharing nothing but a context.

    Attributes:
        context: Topology, radios and loss models
        timing: Fixed schedule parameters
        counters: Counters of the current (or last) run
        phase: Current ExperimentPhase
        phase_history: (time, phase) transitions of the last run

    Example:
        >>> from wban_jamming.experiment.context import create_simulation_context
        >>> ctx = create_simulation_context()
        >>> experiment = JammingExperiment(ctx)
        >>> result = experiment.run(ScenarioConfig(no_jam_packets=10, with_jam_packets=10))
        >>> result.no_jam_success_rate
        1.0
    """

    def __init__(self, context: SimulationContext, timing: Optional[TimingConfig] = None):
        self.context = context
        self.timing = TimingConfig() if timing is None else timing
        self.counters = DeliveryCounters()
        self.phase = ExperimentPhase.IDLE
        self.phase_history: List[Tuple[float, ExperimentPhase]] = []
        self._env = None
        self._enable_logs = False
        context.rx_phy.set_rx_indication_callback(self._on_rx_indication)

    # -------------------------------------------------------------------------
    # Run
    # -------------------------------------------------------------------------

    def run(self, scenario: ScenarioConfig, enable_logs: bool = False) -> RunResult:
        """
        Execute one complete run.

        Args:
            scenario: Positions, organ, packet counts and layer overrides
            enable_logs: Log static figures, phase banners and progress

        Returns:
            RunResult snapshot

        Raises:
            ValueError: For a non-positive packet gap, negative packet counts
                or invalid layer overrides. Nothing is scheduled in that case.
        """
        validate_run(scenario, self.timing)
        ctx = self.context
        radio = ctx.radio
        timing = self.timing
        schedule = compute_schedule(scenario, timing)

        self._env = env = ctx.reset()
        self._enable_logs = enable_logs
        self.counters.reset()
        self.phase_history = []
        self.phase = ExperimentPhase.IDLE
        self._set_phase(ExperimentPhase.PHASE1_WARMUP)

        ctx.body_loss.set_body_option(scenario.organ)
        ctx.body_loss.fat_layer = scenario.fat_layer
        ctx.body_loss.muscle_layer = scenario.muscle_layer
        ctx.set_positions(
            (scenario.tx_x, scenario.tx_y, 0.0),
            (scenario.rx_x, scenario.rx_y, 0.0),
            (scenario.jam_x, scenario.jam_y, 0.0),
        )

        body_rx_power = ctx.body_loss.calc_rx_power(radio.tx_power_dbm, ctx.tx_handle, ctx.rx_handle)
        body_loss = radio.tx_power_dbm - body_rx_power
        jam_rx_power = ctx.path_loss.calc_rx_power(radio.jam_power_dbm, ctx.jam_handle, ctx.rx_handle)
        jam_loss = radio.jam_power_dbm - jam_rx_power

        if enable_logs:
            profile = ctx.body_loss.profile
            logger.info(
                "[BodyPropagationLossModel] organ=%s calc_rx_power(tx_power_dbm=%.2f, "
                "tx_pos=%s, rx_pos=%s) = %.4f dBm",
                organ_name(scenario.organ), radio.tx_power_dbm,
                ctx.positions.get_position(ctx.tx_handle),
                ctx.positions.get_position(ctx.rx_handle),
                body_rx_power,
            )
            logger.info("    -> attenuation due to body = %.4f dB", body_loss)
            logger.info("    -> jammer path rx power = %.4f dBm", jam_rx_power)
            logger.info("    -> jammer path loss = %.4f dB", jam_loss)
            logger.info(
                "    -> dielectric params: organ_conductivity=%g, organ_permittivity=%g, "
                "skin_conductivity=%g, skin_permittivity=%g",
                profile.organ_conductivity, profile.organ_permittivity,
                profile.skin_conductivity, profile.skin_permittivity,
            )

        n1 = scenario.no_jam_packets
        n2 = scenario.with_jam_packets
        gap = timing.packet_gap_s

        schedule_at(env, schedule.phase1_arm, self._arm_phase1)
        for i in range(n1):
            schedule_at(env, timing.first_packet_s + i * gap, self._send_phase1, i)
        schedule_at(env, schedule.last_phase1_send, self._set_phase, ExperimentPhase.PHASE2_WARMUP)

        schedule_at(env, schedule.phase2_start, self._arm_phase2)
        # Jammer stream first: it wins same-instant ties.
        for i in range(n2):
            schedule_at(env, schedule.phase2_start + i * gap, self._send_jam, i)
        for i in range(n2):
            schedule_at(env, schedule.phase2_start + i * gap, self._send_phase2, i)

        env.run(until=schedule.stop)
        self._set_phase(ExperimentPhase.COMPLETE)

        c = self.counters
        if enable_logs:
            logger.info("=== SUMMARY ===")
            logger.info(
                "PHASE 1 (no jammer): TX sent %d | RX received %d | lost %d",
                c.no_jam_sent, c.no_jam_rx, c.no_jam_sent - c.no_jam_rx,
            )
            logger.info(
                "PHASE 2 (jammer): TX sent %d | RX received %d | lost %d",
                c.jam_sent_tx, c.jam_rx_tx, c.jam_sent_tx - c.jam_rx_tx,
            )
            logger.info(
                "PHASE 2 (jammer): JAM sent %d | RX received %d | lost %d",
                c.jam_sent_jam, c.jam_rx_jam, c.jam_sent_jam - c.jam_rx_jam,
            )

        return RunResult(
            no_jam_sent=c.no_jam_sent,
            no_jam_rx=c.no_jam_rx,
            jam_sent_tx=c.jam_sent_tx,
            jam_rx_tx=c.jam_rx_tx,
            jam_sent_jam=c.jam_sent_jam,
            jam_rx_jam=c.jam_rx_jam,
            body_rx_power_dbm=body_rx_power,
            body_loss_db=body_loss,
            jam_rx_power_dbm=jam_rx_power,
            jam_loss_db=jam_loss,
            organ=scenario.organ,
            profile=ctx.body_loss.profile,
            tx=(scenario.tx_x, scenario.tx_y),
            rx=(scenario.rx_x, scenario.rx_y),
            jam=(scenario.jam_x, scenario.jam_y),
        )

    # -------------------------------------------------------------------------
    # Scheduled events
    # -------------------------------------------------------------------------

    def _set_phase(self, phase: ExperimentPhase):
        self.phase = phase
        now = self._env.now if self._env is not None else 0.0
        self.phase_history.append((now, phase))

    def _arm_phase1(self):
        if self._enable_logs:
            logger.info("=== PHASE 1: no jamming ===")
        self.context.tx_phy.set_trx_state(PhyState.TX_ON)
        self.context.rx_phy.set_trx_state(PhyState.RX_ON)
        self.counters.jamming_active = False
        self._set_phase(ExperimentPhase.PHASE1_ACTIVE)

    def _arm_phase2(self):
        if self._enable_logs:
            logger.info("=== PHASE 2: with jammer ===")
        self.context.jam_phy.set_trx_state(PhyState.TX_ON)
        self.counters.jamming_active = True
        self._set_phase(ExperimentPhase.PHASE2_ACTIVE)

    def _new_packet(self, tag: SourceTag) -> Packet:
        packet = Packet(self.context.radio.payload_bytes)
        packet.add_source_tag(tag)
        return packet

    def _send_phase1(self, index: int):
        packet = self._new_packet(SourceTag.TX)
        self.context.tx_phy.data_request(packet.size, packet)
        self.counters.no_jam_sent += 1
        if self._enable_logs and (index + 1) % self.timing.print_every == 0:
            logger.info("Phase 1: TX sent %d, RX received %d", index + 1, self.counters.no_jam_rx)

    def _send_jam(self, index: int):
        packet = self._new_packet(SourceTag.JAM)
        self.context.jam_phy.data_request(packet.size, packet)
        self.counters.jam_sent_jam += 1

    def _send_phase2(self, index: int):
        packet = self._new_packet(SourceTag.TX)
        self.context.tx_phy.data_request(packet.size, packet)
        self.counters.jam_sent_tx += 1
        if self._enable_logs and (index + 1) % self.timing.print_every == 0:
            logger.info(
                "Phase 2: TX sent %d, RX received TX %d, RX received JAM %d",
                index + 1, self.counters.jam_rx_tx, self.counters.jam_rx_jam,
            )

    def _on_rx_indication(self, psdu_length: int, packet: Packet, sinr_db: float):
        if not self.counters.record_received(packet.source_tag):
            logger.debug("Ignoring packet %d without a recognisable source tag", packet.uid)
