"""
Unit Tests for Delivery Counters and Packets
============================================

Run with: python -m pytest tests/test_counters.py -v

Author: WBAN Jamming Team
"""

import sys
import os

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from wban_jamming.channel.packet import Packet, SourceTag
from wban_jamming.experiment.counters import DeliveryCounters, success_rate


class TestSourceTag:
    """1-byte source tag."""

    def test_serialize(self):
        assert SourceTag.TX.serialize() == b"\x01"
        assert SourceTag.JAM.serialize() == b"\x02"

    def test_deserialize(self):
        assert SourceTag.deserialize(b"\x01") is SourceTag.TX
        assert SourceTag.deserialize(b"\x02") is SourceTag.JAM

    def test_unknown_value(self):
        assert SourceTag.deserialize(b"\x07") is None

    def test_wrong_length(self):
        assert SourceTag.deserialize(b"") is None
        assert SourceTag.deserialize(b"\x01\x02") is None


class TestPacket:
    """Packet tags and copies."""

    def test_untagged(self):
        assert Packet(32).source_tag is None

    def test_tagged(self):
        packet = Packet(32)
        packet.add_source_tag(SourceTag.JAM)
        assert packet.source_tag is SourceTag.JAM

    def test_unique_ids(self):
        assert Packet(32).uid != Packet(32).uid

    def test_copy_keeps_uid_and_tags(self):
        packet = Packet(16)
        packet.add_source_tag(SourceTag.TX)
        clone = packet.copy()
        assert clone.uid == packet.uid
        assert clone.size == 16
        assert clone.source_tag is SourceTag.TX
        clone.tags.clear()
        assert packet.source_tag is SourceTag.TX


class TestDeliveryCounters:
    """Attribution of received packets."""

    def test_phase1_counts_everything_as_no_jam(self):
        counters = DeliveryCounters()
        assert counters.record_received(SourceTag.TX)
        assert counters.record_received(SourceTag.JAM)
        assert counters.no_jam_rx == 2
        assert counters.jam_rx_tx == 0
        assert counters.jam_rx_jam == 0

    def test_phase2_splits_by_source(self):
        counters = DeliveryCounters(jamming_active=True)
        counters.record_received(SourceTag.TX)
        counters.record_received(SourceTag.JAM)
        counters.record_received(SourceTag.JAM)
        assert counters.no_jam_rx == 0
        assert counters.jam_rx_tx == 1
        assert counters.jam_rx_jam == 2

    def test_missing_tag_ignored(self):
        counters = DeliveryCounters(jamming_active=True)
        assert not counters.record_received(None)
        assert counters.jam_rx_tx == 0
        assert counters.jam_rx_jam == 0

    def test_reset(self):
        counters = DeliveryCounters(no_jam_sent=5, jam_rx_jam=3, jamming_active=True)
        counters.reset()
        assert counters == DeliveryCounters()

    def test_success_rates(self):
        counters = DeliveryCounters(no_jam_sent=10, no_jam_rx=9, jam_sent_tx=10, jam_rx_tx=2)
        assert counters.no_jam_success_rate == pytest.approx(0.9)
        assert counters.jam_success_rate == pytest.approx(0.2)

    def test_success_rate_without_sends(self):
        assert success_rate(0, 0) == 0.0
        assert DeliveryCounters().jam_success_rate == 0.0
