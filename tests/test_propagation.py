"""
Unit Tests for Path Loss Module
===============================

Run with: python -m pytest tests/test_propagation.py -v

Author: WBAN Jamming Team
"""

import sys
import os

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wban_jamming.channel.mobility import PositionTable
from wban_jamming.physics.propagation import (
    DEFAULT_REFERENCE_LOSS_DB,
    LogDistancePropagationLossModel,
    crossover_distance,
    dbm_to_watts,
    log_distance_loss_db,
    noise_power_dbm,
    watts_to_dbm,
)


class TestUnitConversion:
    """dBm <-> Watts."""

    def test_zero_dbm_is_one_milliwatt(self):
        assert dbm_to_watts(0.0) == pytest.approx(1e-3)

    def test_thirty_dbm_is_one_watt(self):
        assert dbm_to_watts(30.0) == pytest.approx(1.0)

    def test_inverse(self):
        values = np.array([-120.0, -98.0, -16.0, 0.0, 20.0])
        assert np.allclose(watts_to_dbm(dbm_to_watts(values)), values)

    def test_noise_floor(self):
        assert noise_power_dbm(300e3) == pytest.approx(-119.23, abs=0.01)
        assert noise_power_dbm(300e3, 5.0) == pytest.approx(-114.23, abs=0.01)


class TestLogDistanceLoss:
    """Log-distance path loss."""

    def test_reference_distance(self):
        assert log_distance_loss_db(1.0) == pytest.approx(DEFAULT_REFERENCE_LOSS_DB)

    def test_ten_metres(self):
        assert log_distance_loss_db(10.0) == pytest.approx(46.6777 + 30.0)

    def test_clamped_below_reference(self):
        assert log_distance_loss_db(0.05) == pytest.approx(DEFAULT_REFERENCE_LOSS_DB)
        assert log_distance_loss_db(0.0) == pytest.approx(DEFAULT_REFERENCE_LOSS_DB)

    def test_monotonic(self):
        d = np.linspace(1.0, 100.0, 50)
        assert np.all(np.diff(log_distance_loss_db(d)) > 0)

    def test_scalar_in_scalar_out(self):
        assert isinstance(log_distance_loss_db(3.0), float)

    def test_custom_exponent(self):
        assert log_distance_loss_db(10.0, exponent=2.0) == pytest.approx(46.6777 + 20.0)


class TestCrossoverDistance:
    """Range at which a transmitter drops below a threshold."""

    def test_jammer_crossover(self):
        assert crossover_distance(-16.0, -98.0) == pytest.approx(15.04, abs=0.01)

    def test_round_trip(self):
        d = crossover_distance(-6.0, -98.0)
        assert -6.0 - log_distance_loss_db(d) == pytest.approx(-98.0)

    def test_threshold_within_reference_loss(self):
        assert crossover_distance(-16.0, -40.0) == 1.0


class TestLogDistanceModel:
    """Model bound to a PositionTable."""

    def test_calc_rx_power(self):
        positions = PositionTable()
        a = positions.add((0.0, 0.0, 0.0))
        b = positions.add((10.0, 0.0, 0.0))
        model = LogDistancePropagationLossModel(positions)
        assert model.calc_rx_power(0.0, a, b) == pytest.approx(-76.6777)
        assert model.loss_db(a, b) == model.loss_db(b, a)

    def test_follows_position_updates(self):
        positions = PositionTable()
        a = positions.add((0.0, 0.0))
        b = positions.add((2.0, 0.0))
        model = LogDistancePropagationLossModel(positions)
        before = model.loss_db(a, b)
        positions.set_position(b, (20.0, 0.0))
        assert model.loss_db(a, b) == pytest.approx(before + 30.0)

    def test_invalid_reference_distance(self):
        with pytest.raises(ValueError):
            LogDistancePropagationLossModel(PositionTable(), reference_distance=0.0)


class TestPositionTable:
    """Handle-addressed positions."""

    def test_handles_are_sequential(self):
        table = PositionTable()
        assert table.add() == 0
        assert table.add() == 1
        assert len(table) == 2

    def test_distance(self):
        table = PositionTable()
        a = table.add((0.0, 0.0, 0.0))
        b = table.add((3.0, 4.0, 0.0))
        assert table.distance(a, b) == pytest.approx(5.0)

    def test_two_d_positions_on_plane(self):
        table = PositionTable()
        h = table.add((1.5, -2.0))
        assert table.get_position(h) == (1.5, -2.0, 0.0)

    def test_unknown_handle(self):
        with pytest.raises(KeyError):
            PositionTable().get_position(0)

    def test_bad_dimension(self):
        with pytest.raises(ValueError):
            PositionTable().add((1.0,))
