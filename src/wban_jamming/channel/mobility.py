"""
Position Storage
================

Constant-position storage for the nodes of a simulation context.

Every node position is addressed by a stable integer handle issued by the
table. Loss models and the body attenuation model refer to endpoints by
handle only, never by object identity.

Author: WBAN Jamming Team
"""

import numpy as np
from typing import List, Sequence, Tuple

Position = Tuple[float, float, float]


class PositionTable:
    """
    Handle-addressed store of 3-D node positions.

    Example:
        >>> table = PositionTable()
        >>> tx = table.add((0.0, 0.0, 0.0))
        >>> rx = table.add((3.0, 4.0, 0.0))
        >>> table.distance(tx, rx)
        5.0
    """

    def __init__(self):
        self._positions: List[np.ndarray] = []

    def add(self, position: Sequence[float] = (0.0, 0.0, 0.0)) -> int:
        """Store a new position and return its handle."""
        self._positions.append(_as_vector(position))
        return len(self._positions) - 1

    def set_position(self, handle: int, position: Sequence[float]):
        self._check(handle)
        self._positions[handle] = _as_vector(position)

    def get_position(self, handle: int) -> Position:
        self._check(handle)
        x, y, z = self._positions[handle]
        return (float(x), float(y), float(z))

    def distance(self, a: int, b: int) -> float:
        """Euclidean distance between two stored positions (m)."""
        self._check(a)
        self._check(b)
        return float(np.linalg.norm(self._positions[a] - self._positions[b]))

    def __len__(self) -> int:
        return len(self._positions)

    def _check(self, handle: int):
        if not 0 <= handle < len(self._positions):
            raise KeyError(f"Unknown position handle {handle}")


def _as_vector(position: Sequence[float]) -> np.ndarray:
    # 2-D positions are placed on the z = 0 plane
    vector = np.zeros(3)
    values = np.asarray(position, dtype=float).ravel()
    if values.size not in (2, 3):
        raise ValueError(f"Position must have 2 or 3 coordinates, got {values.size}")
    vector[:values.size] = values
    return vector
