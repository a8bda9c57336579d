"""
Delivery Counters
=================

Per-run packet counters split by phase and by source.

Only the scheduled send events increment the "sent" counters and only the
receive-indication callback increments the "received" counters.

Author: WBAN Jamming Team
"""

from dataclasses import dataclass
from typing import Optional

from wban_jamming.channel.packet import SourceTag


@dataclass
class DeliveryCounters:
    """
    Sent/received counters of one two-phase run.

    Attributes:
        no_jam_sent / no_jam_rx: Phase 1 legitimate traffic
        jam_sent_tx / jam_rx_tx: Phase 2 legitimate traffic
        jam_sent_jam / jam_rx_jam: Phase 2 jammer traffic
        jamming_active: True once phase 2 has started
    """

    no_jam_sent: int = 0
    no_jam_rx: int = 0
    jam_sent_tx: int = 0
    jam_rx_tx: int = 0
    jam_sent_jam: int = 0
    jam_rx_jam: int = 0
    jamming_active: bool = False

    def reset(self):
        self.no_jam_sent = 0
        self.no_jam_rx = 0
        self.jam_sent_tx = 0
        self.jam_rx_tx = 0
        self.jam_sent_jam = 0
        self.jam_rx_jam = 0
        self.jamming_active = False

    def record_received(self, tag: Optional[SourceTag]) -> bool:
        """
        Attribute one delivered packet.

        Args:
            tag: Decoded source tag, None when missing or unrecognised

        Returns:
            True if a counter was incremented
        """
        if tag is None:
            return False
        if not self.jamming_active:
            self.no_jam_rx += 1
        elif tag is SourceTag.TX:
            self.jam_rx_tx += 1
        else:
            self.jam_rx_jam += 1
        return True

    @property
    def no_jam_success_rate(self) -> float:
        return success_rate(self.no_jam_rx, self.no_jam_sent)

    @property
    def jam_success_rate(self) -> float:
        return success_rate(self.jam_rx_tx, self.jam_sent_tx)


def success_rate(received: int, sent: int) -> float:
    """received / sent, or 0.0 when nothing was sent."""
    return received / sent if sent else 0.0
