"""
Segregation measures derived from a universe's state.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.

- dominance_map: which species' marker leads in each cell
- smoothed_dominance: coarse-grained marker difference between two species
- segregation_index: how often neighbouring agents share a species
- population_history: per-species totals over a run (conservation check)
"""

from __future__ import annotations
from typing import TYPE_CHECKING

import numpy as np
from scipy.ndimage import gaussian_filter

if TYPE_CHECKING:
    from stigsim.core.universe import Universe


def dominance_map(universe: "Universe", threshold: float = 0.1) -> np.ndarray:
    """
    Index of the species with the highest marker in each cell.

    A cell counts as dominated only if the leader's marker exceeds the
    runner-up's by at least `threshold`; otherwise it is -1.

    Returns:
        Integer grid of shape universe.shape
    """
    field = universe.state.field
    if field.shape[0] == 1:
        lead = field[0]
    else:
        ordered = np.sort(field, axis=0)
        lead = ordered[-1] - ordered[-2]

    dominant = np.where(lead >= threshold, np.argmax(field, axis=0), -1)
    return dominant.reshape(universe.shape)


def smoothed_dominance(
    universe: "Universe",
    sigma: float = 1.0,
    first: str | None = None,
    second: str | None = None,
) -> np.ndarray:
    """
    Marker difference field(first) - field(second), smoothed on the torus.

    Positive where `first` dominates. Defaults to the first two species.

    Args:
        sigma: Gaussian sigma in cells (0 disables smoothing)
    """
    species = universe.species
    if len(species) < 2 and (first is None or second is None):
        raise ValueError("smoothed_dominance needs two species")

    a = universe.species_index(first) if first is not None else 0
    b = universe.species_index(second) if second is not None else 1
    if a == b:
        raise ValueError(f"smoothed_dominance needs two different species, got {species[a]!r} twice")

    diff = (universe.state.field[a] - universe.state.field[b]).reshape(universe.shape)
    if sigma > 0:
        return gaussian_filter(diff, sigma=sigma, mode="wrap")
    return diff.copy()


def segregation_index(universe: "Universe") -> float:
    """
    Fraction of neighbouring agent pairs that belong to the same species.

    With agents spread independently the index is close to sum_s p_s**2
    (0.5 for two equal species); it approaches 1 as species separate.
    Returns nan when no agent has a neighbour.
    """
    occupancy = universe.state.occupancy.astype(np.float64)
    neighbors = universe.topology.neighbors

    # Agents of each species in the neighbour slots of every node
    around = occupancy[:, neighbors].sum(axis=2)

    same = float((occupancy * around).sum())
    total = float((occupancy.sum(axis=0) * around.sum(axis=0)).sum())
    if total == 0.0:
        return float("nan")
    return same / total


def population_history(universe: "Universe", n_ticks: int) -> np.ndarray:
    """
    Run n_ticks ticks and record per-species totals before and after each.

    Returns:
        [n_ticks + 1, n_species] integer array
    """
    history = np.empty((n_ticks + 1, len(universe.species)), dtype=np.int64)
    history[0] = universe.state.population()
    for t in range(1, n_ticks + 1):
        universe.tick()
        history[t] = universe.state.population()
    return history
