"""
Topology: the fixed neighbour table of a periodic N-dimensional grid.

The topology stores ONLY connectivity:
- Neighbour index per node per slot (wraparound on every axis)
- The opposite slot of each slot (the direction pointing back)

It does NOT store occupancy, fields or any per-tick quantity.
"""

from __future__ import annotations
from typing import Iterator, Sequence

import numpy as np

from stigsim.core.errors import ConfigurationError


# Slot order and offsets, in (row, col) / (z, y, x) coordinates
DIRECTIONS_2D = {
    "top": (-1, 0),     # row decreases
    "right": (0, 1),    # col increases
    "bottom": (1, 0),   # row increases
    "left": (0, -1),    # col decreases
}

DIRECTIONS_3D = {
    "top": (-1, 0, 0),
    "right": (0, 0, 1),
    "bottom": (1, 0, 0),
    "left": (0, 0, -1),
    "front": (0, -1, 0),
    "back": (0, 1, 0),
}


def directions_for(ndim: int) -> dict[str, tuple[int, ...]]:
    """
    Ordered direction table for a grid of the given dimensionality.

    2D and 3D use named directions; any other dimensionality gets a
    minus/plus pair per axis.
    """
    if ndim == 2:
        return dict(DIRECTIONS_2D)
    if ndim == 3:
        return dict(DIRECTIONS_3D)

    table = {}
    for axis in range(ndim):
        for sign, suffix in ((-1, "-"), (1, "+")):
            offset = [0] * ndim
            offset[axis] = sign
            table[f"axis{axis}{suffix}"] = tuple(offset)
    return table


class Topology:
    """
    Neighbour table of a torus with `size` cells along each of `ndim` axes.

    Built once and shared read-only for the lifetime of a universe.
    """

    def __init__(self, size: int, ndim: int = 2):
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)) or size < 1:
            raise ConfigurationError("size", size, "grid size must be an integer >= 1")
        if isinstance(ndim, bool) or not isinstance(ndim, (int, np.integer)) or ndim < 1:
            raise ConfigurationError("ndim", ndim, "dimensionality must be an integer >= 1")

        self.size = int(size)
        self.ndim = int(ndim)
        self._directions = directions_for(self.ndim)

        offsets = np.array(list(self._directions.values()), dtype=np.int64)
        self.offsets = offsets

        # opposite[k] is the slot whose offset is -offsets[k]
        lookup = {tuple(o): k for k, o in enumerate(offsets.tolist())}
        self.opposite = np.array(
            [lookup[tuple((-offsets[k]).tolist())] for k in range(len(offsets))],
            dtype=np.int64,
        )

        # coords: [n_nodes, ndim], row-major
        coords = np.stack(
            np.unravel_index(np.arange(self.n_nodes), self.shape), axis=1
        )
        self.neighbors = np.empty((self.n_nodes, self.arity), dtype=np.int64)
        for k, offset in enumerate(offsets):
            shifted = (coords + self.size + offset) % self.size
            self.neighbors[:, k] = np.ravel_multi_index(shifted.T, self.shape)

        self.neighbors.setflags(write=False)
        self.opposite.setflags(write=False)
        self.offsets.setflags(write=False)

    @property
    def shape(self) -> tuple[int, ...]:
        """Grid shape, one entry per axis."""
        return (self.size,) * self.ndim

    @property
    def n_nodes(self) -> int:
        return self.size ** self.ndim

    @property
    def arity(self) -> int:
        """Number of neighbour slots per node."""
        return len(self._directions)

    @property
    def directions(self) -> list[str]:
        """Direction names in slot order."""
        return list(self._directions.keys())

    def slot_of(self, direction: str) -> int:
        """Slot number of a named direction."""
        try:
            return self.directions.index(direction)
        except ValueError:
            raise KeyError(f"Unknown direction {direction!r}; expected one of {self.directions}") from None

    def index_of(self, coords: Sequence[int]) -> int:
        """Linear index of a coordinate tuple (wrapped onto the torus)."""
        if len(coords) != self.ndim:
            raise ValueError(f"Expected {self.ndim} coordinates, got {len(coords)}")
        wrapped = tuple(int(c) % self.size for c in coords)
        return int(np.ravel_multi_index(wrapped, self.shape))

    def coords_of(self, index: int) -> tuple[int, ...]:
        """Coordinate tuple of a linear index."""
        if not 0 <= index < self.n_nodes:
            raise IndexError(f"Node index {index} out of range [0, {self.n_nodes})")
        return tuple(int(c) for c in np.unravel_index(index, self.shape))

    def neighbor_of(self, index: int, direction: str) -> int:
        """Index of the neighbour of `index` in the given direction."""
        return int(self.neighbors[index, self.slot_of(direction)])

    def get_all_neighbors(self, index: int) -> dict[str, int]:
        """Neighbour indices of a node keyed by direction name."""
        return {
            direction: int(self.neighbors[index, k])
            for k, direction in enumerate(self.directions)
        }

    def iter_nodes(self) -> Iterator[tuple[int, ...]]:
        """Iterate over all node coordinates in index order."""
        for index in range(self.n_nodes):
            yield self.coords_of(index)

    def __repr__(self) -> str:
        return f"Topology(size={self.size}, ndim={self.ndim}, arity={self.arity})"
