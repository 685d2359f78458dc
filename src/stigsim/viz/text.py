"""
Plain-text renders of a universe.

- counts:    per-cell index, agent counts and marker per species
- dominance: one character per cell naming the species whose marker leads

Purely observational; nothing here feeds back into the engine.
"""

from __future__ import annotations
from typing import TYPE_CHECKING

import numpy as np

from stigsim.analysis.segregation import dominance_map

if TYPE_CHECKING:
    from stigsim.core.universe import Universe


RULE_WIDTH = 30
NEUTRAL_SYMBOL = "="
DOMINANCE_THRESHOLD = 0.1


def render_header(universe: "Universe") -> list[str]:
    bar = "=" * 10
    return [
        f"{bar} UNIVERSE {universe.ndim}D {bar}",
        f"size: {universe.size}",
        f"node size: {universe.topology.n_nodes}",
        f"iterations: {universe.tick_count}",
        "=" * RULE_WIDTH,
    ]


def _layers(grid: np.ndarray) -> list[tuple[tuple[int, ...], np.ndarray]]:
    """
    Split an N-d grid into 2D slices.

    Returns (leading index, slice) pairs; 1D and 2D grids give a single pair.
    """
    if grid.ndim == 1:
        return [((), grid.reshape(1, -1))]
    if grid.ndim == 2:
        return [((), grid)]
    leading = grid.shape[:-2]
    return [(idx, grid[idx]) for idx in np.ndindex(*leading)]


def _layer_title(idx: tuple[int, ...]) -> str:
    return "-- layer " + ",".join(f"z{i}={v}" if len(idx) > 1 else f"z={v}" for i, v in enumerate(idx))


def render_counts(universe: "Universe") -> str:
    """Cell-by-cell table of agent counts and marker per species."""
    n_species = len(universe.species)
    occupancy = universe.state.occupancy
    field = universe.state.field
    index_grid = np.arange(universe.topology.n_nodes).reshape(universe.shape)

    lines = render_header(universe)
    for idx, layer in _layers(index_grid):
        if idx:
            lines.append(_layer_title(idx))
        for row in layer:
            cells = []
            for n in row:
                counts = ",".join(str(int(occupancy[s, n])) for s in range(n_species))
                marker = ",".join(f"{field[s, n]:.2f}" for s in range(n_species))
                cells.append(f"|{int(n):>2} a({counts}) g:({marker})")
            lines.append("".join(cells) + "|")
    return "\n".join(lines)


def render_dominance(universe: "Universe", threshold: float = DOMINANCE_THRESHOLD) -> str:
    """One character per cell: the leading species' initial, or '=' for a tie."""
    symbols = [name[0].upper() for name in universe.species]
    dominant = dominance_map(universe, threshold=threshold)

    lines = render_header(universe)
    for idx, layer in _layers(dominant):
        if idx:
            lines.append(_layer_title(idx))
        for row in layer:
            lines.append(
                "".join(NEUTRAL_SYMBOL if s < 0 else symbols[s] for s in row) + "|"
            )
    return "\n".join(lines)


def render_snapshot(universe: "Universe", mode: str = "counts") -> str:
    """Render a universe in the given mode ("counts" or "dominance")."""
    if mode == "counts":
        return render_counts(universe)
    if mode == "dominance":
        return render_dominance(universe)
    raise ValueError(f"Unknown snapshot mode: {mode!r}; expected 'counts' or 'dominance'")
