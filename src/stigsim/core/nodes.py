"""
Node state: the per-cell quantities of the whole grid, stored as arrays.

- occupancy[s, n]   agents of species s at node n (int64, never negative)
- field[s, n]       marker concentration (float64)
- weight[s, n]      exp(-beta * field) (float64)
- outflow[s, n, k]  agents of species s leaving node n through slot k this tick

Each node owns column n of every array. Phases write fresh arrays, so a
reader always sees a fully settled previous phase.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    from stigsim.core.topology import Topology


COUNT_DTYPE = np.int64


@dataclass
class NodeState:
    """Authoritative arrays for every node of a universe."""

    occupancy: np.ndarray
    field: np.ndarray
    weight: np.ndarray
    outflow: np.ndarray

    @classmethod
    def empty(cls, n_species: int, n_nodes: int, arity: int) -> "NodeState":
        """Zero occupancy, zero field, zero weight, empty outflow."""
        return cls(
            occupancy=np.zeros((n_species, n_nodes), dtype=COUNT_DTYPE),
            field=np.zeros((n_species, n_nodes), dtype=np.float64),
            weight=np.zeros((n_species, n_nodes), dtype=np.float64),
            outflow=np.zeros((n_species, n_nodes, arity), dtype=COUNT_DTYPE),
        )

    @property
    def n_species(self) -> int:
        return self.occupancy.shape[0]

    @property
    def n_nodes(self) -> int:
        return self.occupancy.shape[1]

    @property
    def arity(self) -> int:
        return self.outflow.shape[2]

    def population(self) -> np.ndarray:
        """Total agents per species."""
        return self.occupancy.sum(axis=1)

    def copy(self) -> "NodeState":
        return NodeState(
            occupancy=self.occupancy.copy(),
            field=self.field.copy(),
            weight=self.weight.copy(),
            outflow=self.outflow.copy(),
        )

    def view(
        self,
        index: int,
        topology: "Topology",
        species: Sequence[str],
    ) -> "Node":
        """Read-only snapshot of a single node."""
        if not 0 <= index < self.n_nodes:
            raise IndexError(f"Node index {index} out of range [0, {self.n_nodes})")

        return Node(
            index=index,
            coords=topology.coords_of(index),
            neighbors=tuple(int(m) for m in topology.neighbors[index]),
            occupancy={name: int(self.occupancy[s, index]) for s, name in enumerate(species)},
            field={name: float(self.field[s, index]) for s, name in enumerate(species)},
            weight={name: float(self.weight[s, index]) for s, name in enumerate(species)},
            outflow={
                name: tuple(int(c) for c in self.outflow[s, index])
                for s, name in enumerate(species)
            },
        )


@dataclass(frozen=True)
class Node:
    """One grid position as seen from outside the engine."""

    index: int
    coords: tuple[int, ...]
    neighbors: tuple[int, ...]
    occupancy: dict[str, int]
    field: dict[str, float]
    weight: dict[str, float]
    outflow: dict[str, tuple[int, ...]]

    @property
    def total(self) -> int:
        """All agents at this node, every species."""
        return sum(self.occupancy.values())
