"""
Simulated Packets
=================

Packets carry no payload bytes, only a size and a set of tags. The source
tag marks a packet as legitimate-transmitter or jammer traffic so that the
receiver side can attribute arrivals. On the wire it is a single byte.

Author: WBAN Jamming Team
"""

import itertools
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, Optional

_packet_ids = itertools.count()


class SourceTag(IntEnum):
    """Origin of a packet."""

    TX = 1
    JAM = 2

    def serialize(self) -> bytes:
        return bytes([self.value])

    @classmethod
    def deserialize(cls, data: bytes) -> Optional["SourceTag"]:
        """Decode a 1-byte tag; unknown values decode to None."""
        if len(data) != 1:
            return None
        try:
            return cls(data[0])
        except ValueError:
            return None


@dataclass
class Packet:
    """
    A simulated packet.

    Tags are stored serialized, keyed by name, the same way they would
    travel with a real frame.

    Example:
        >>> p = Packet(32)
        >>> p.add_source_tag(SourceTag.JAM)
        >>> p.source_tag
        <SourceTag.JAM: 2>
    """

    size: int
    uid: int = field(default_factory=lambda: next(_packet_ids))
    tags: Dict[str, bytes] = field(default_factory=dict)

    def add_source_tag(self, tag: SourceTag):
        self.tags["src"] = tag.serialize()

    @property
    def source_tag(self) -> Optional[SourceTag]:
        raw = self.tags.get("src")
        if raw is None:
            return None
        return SourceTag.deserialize(raw)

    def copy(self) -> "Packet":
        """Copy delivered to one receiver; keeps uid and tags."""
        return Packet(self.size, self.uid, dict(self.tags))
