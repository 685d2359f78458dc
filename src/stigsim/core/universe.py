"""
Universe: the grid engine that advances every node one tick at a time.

Each tick is a strict three-phase pipeline with a barrier between phases:

    A. Field update   - each node decays its marker, deposits for its own
                        agents and derives weight and movement signal.
    B. Outflow        - each node splits its agents among its neighbour
                        slots, weighted by the neighbours' movement signal.
    C. Inflow         - each node gathers what its neighbours sent towards
                        it; this replaces the old occupancy.

Within a phase every node reads only the previous phase's settled arrays and
writes only its own slice of a fresh buffer. Random draws are keyed by
(cell, tick), so the result is the same for any number of workers and any
processing order. Nothing is committed until all three phases (and the
conservation check) have completed.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from typing import Callable
import logging

import numpy as np

from stigsim.core.config import HyperParams, UniverseConfig
from stigsim.core.errors import ConservationError
from stigsim.core.field_model import FieldModel, create_default_field_model
from stigsim.core.nodes import COUNT_DTYPE, Node, NodeState
from stigsim.core.rng import MOVE, PLACEMENT, CounterRng
from stigsim.core.topology import Topology

logger = logging.getLogger(__name__)

# Chunks per worker when running phases on a thread pool
_CHUNKS_PER_WORKER = 2


def distribute_agents(
    counts: np.ndarray,
    cells: np.ndarray,
    weights: np.ndarray,
    rng: CounterRng,
    tick: int,
    species: int,
) -> np.ndarray:
    """
    Weighted categorical placement of discrete agents into neighbour slots.

    For every agent j of cell i a draw u ~ U[0, 1) is taken from the stream
    (cell i, tick, species, j). With cumulative weights C and total T, the
    agent goes to the first slot k with C[k] >= u * T. A cell whose weights
    sum to zero falls back to slot floor(u * arity).

    Args:
        counts: [n_cells] agents to place per cell
        cells: [n_cells] global node index of each cell (RNG key)
        weights: [n_cells, arity] non-negative slot weights
        rng: Counter-based generator
        tick: Tick number (RNG key)
        species: Species index (RNG key)

    Returns:
        [n_cells, arity] agents per slot; each row sums to counts[i]
    """
    counts = np.asarray(counts, dtype=COUNT_DTYPE)
    weights = np.asarray(weights, dtype=np.float64)
    n_cells, arity = weights.shape

    total = int(counts.sum())
    if total == 0:
        return np.zeros((n_cells, arity), dtype=COUNT_DTYPE)

    # One entry per agent: owning cell (local) and ordinal within that cell
    owner = np.repeat(np.arange(n_cells), counts)
    starts = np.cumsum(counts) - counts
    ordinal = np.arange(total, dtype=np.int64) - starts[owner]

    u = rng.uniform(MOVE, tick, np.asarray(cells)[owner], species, ordinal)

    cumulative = np.cumsum(weights, axis=1)
    totals = cumulative[:, -1]
    r = u * totals[owner]

    # First slot whose cumulative weight reaches r (ties go to the lower slot)
    slot = np.argmax(cumulative[owner] >= r[:, None], axis=1)

    degenerate = ~(totals[owner] > 0.0)
    if np.any(degenerate):
        slot[degenerate] = np.minimum(
            (u[degenerate] * arity).astype(np.int64), arity - 1
        )

    per_slot = np.bincount(owner * arity + slot, minlength=n_cells * arity)
    return per_slot.reshape(n_cells, arity).astype(COUNT_DTYPE)


# ═══════════════════════════════════════════════════════════════
# PHASE KERNELS (pure; each returns the slice it owns)
# ═══════════════════════════════════════════════════════════════

def _field_phase(
    sl: slice,
    field: np.ndarray,
    occupancy: np.ndarray,
    params: HyperParams,
    model: FieldModel,
    policy: str,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    new_field, new_weight = model.update(field[:, sl], occupancy[:, sl], params)
    signal = model.movement_signal(new_weight, policy)
    return new_field, new_weight, signal


def _outflow_phase(
    sl: slice,
    occupancy: np.ndarray,
    signal: np.ndarray,
    neighbors: np.ndarray,
    rng: CounterRng,
    tick: int,
) -> np.ndarray:
    n_species = occupancy.shape[0]
    nb = neighbors[sl]
    cells = np.arange(sl.start, sl.stop, dtype=np.int64)

    out = np.empty((n_species, len(cells), nb.shape[1]), dtype=COUNT_DTYPE)
    for s in range(n_species):
        out[s] = distribute_agents(occupancy[s, sl], cells, signal[s][nb], rng, tick, s)
    return out


def _inflow_phase(
    sl: slice,
    outflow: np.ndarray,
    neighbors: np.ndarray,
    opposite: np.ndarray,
) -> np.ndarray:
    # Neighbour m = neighbors[n, k] sends to n through its slot opposite[k]
    incoming = outflow[:, neighbors[sl], opposite]
    return incoming.sum(axis=2)


class Universe:
    """
    A torus of nodes populated by competing species.

    Owns the topology, the node arrays, the hyperparameters and the tick
    counter.

    With workers > 1 the universe holds a thread pool; call close() or use
    it as a context manager to release it. After close() ticks run serially.
    """

    def __init__(
        self,
        config: UniverseConfig,
        params: HyperParams | None = None,
        model: FieldModel | None = None,
    ):
        self.config = config.validate()
        self.params = (params if params is not None else HyperParams()).validate()
        self.model = model if model is not None else create_default_field_model()

        self.topology = Topology(config.size, config.ndim)
        self.rng = CounterRng(config.seed)
        self.tick_count = 0

        self.state = NodeState.empty(
            config.n_species, self.topology.n_nodes, self.topology.arity
        )
        self._seed_agents()
        self.initial_population = self.state.population()
        self.initial_population.setflags(write=False)

        self._chunks = self._make_chunks()
        self._executor = (
            ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="stigsim")
            if config.workers > 1 else None
        )

        logger.info(
            "Universe created: size=%d ndim=%d species=%s agents=%d/species seed=%d workers=%d",
            config.size, config.ndim, ",".join(config.species),
            config.agents, config.seed, config.workers,
        )

    # ═══════════════════════════════════════════════════════════════
    # CONSTRUCTION
    # ═══════════════════════════════════════════════════════════════

    def _seed_agents(self):
        """
        Place agents * n_species agents uniformly at random.

        Agent j has species j % n_species; its cell is drawn from the
        placement stream keyed by j.
        """
        n_species = self.config.n_species
        n_nodes = self.topology.n_nodes
        ids = np.arange(self.config.agents * n_species, dtype=np.int64)

        cells = self.rng.integers(n_nodes, PLACEMENT, 0, ids)
        species_of = ids % n_species

        for s in range(n_species):
            self.state.occupancy[s] = np.bincount(
                cells[species_of == s], minlength=n_nodes
            )

    def _make_chunks(self) -> list[slice]:
        n_nodes = self.topology.n_nodes
        n_chunks = 1 if self.config.workers == 1 else self.config.workers * _CHUNKS_PER_WORKER
        n_chunks = max(1, min(n_chunks, n_nodes))
        bounds = np.linspace(0, n_nodes, n_chunks + 1).astype(np.int64)
        return [slice(int(a), int(b)) for a, b in zip(bounds[:-1], bounds[1:])]

    # ═══════════════════════════════════════════════════════════════
    # SIMULATION
    # ═══════════════════════════════════════════════════════════════

    def configure(self, params: HyperParams):
        """
        Replace the hyperparameters; they take effect at the next tick.

        Invalid parameters raise ConfigurationError and leave the current
        ones in place.
        """
        self.params = params.validate()
        logger.info(
            "Hyperparameters set: lambda=%g gamma=%g beta=%g",
            params.lam, params.gamma, params.beta,
        )

    def _run_phase(self, kernel: Callable, *args) -> list:
        """Map a phase kernel over all node chunks; returns results in chunk order."""
        if self._executor is None:
            return [kernel(sl, *args) for sl in self._chunks]
        return list(self._executor.map(lambda sl: kernel(sl, *args), self._chunks))

    def tick(self):
        """Advance the simulation by one step."""
        params = self.params
        tick = self.tick_count
        state = self.state
        topology = self.topology

        # Phase A: fields, weights and movement signals
        parts = self._run_phase(
            _field_phase, state.field, state.occupancy, params, self.model, self.config.policy
        )
        field = np.concatenate([p[0] for p in parts], axis=1)
        weight = np.concatenate([p[1] for p in parts], axis=1)
        signal = np.concatenate([p[2] for p in parts], axis=1)

        # Phase B: agents leaving each node, per neighbour slot
        outflow = np.concatenate(
            self._run_phase(
                _outflow_phase, state.occupancy, signal, topology.neighbors, self.rng, tick
            ),
            axis=1,
        )

        # Phase C: agents arriving at each node
        occupancy = np.concatenate(
            self._run_phase(_inflow_phase, outflow, topology.neighbors, topology.opposite),
            axis=1,
        )

        if self.config.check_conservation:
            totals = occupancy.sum(axis=1)
            if not np.array_equal(totals, self.initial_population):
                logger.error(
                    "Conservation violated at tick %d: expected %s, got %s",
                    tick, self.initial_population.tolist(), totals.tolist(),
                )
                raise ConservationError(tick, self.initial_population, totals)

        self.state = NodeState(
            occupancy=occupancy, field=field, weight=weight, outflow=outflow
        )
        self.tick_count += 1
        logger.debug("Tick %d complete", self.tick_count)

    def iterate(self, n_ticks: int) -> dict:
        """
        Run n_ticks sequential ticks.

        Returns:
            Statistics dictionary
        """
        if n_ticks < 0:
            raise ValueError(f"n_ticks must be >= 0, got {n_ticks}")

        logger.debug("Iterating %d ticks from tick %d", n_ticks, self.tick_count)
        for _ in range(n_ticks):
            self.tick()

        return {
            "n_ticks": n_ticks,
            "current_tick": self.tick_count,
            "population": self.population(),
            "max_occupancy": int(self.state.occupancy.max(initial=0)),
            "mean_field": float(self.state.field.mean()),
            "max_field": float(self.state.field.max(initial=0.0)),
        }

    def close(self):
        """Shut down the worker pool (if any)."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "Universe":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # ═══════════════════════════════════════════════════════════════
    # READ ACCESS
    # ═══════════════════════════════════════════════════════════════

    @property
    def size(self) -> int:
        return self.topology.size

    @property
    def ndim(self) -> int:
        return self.topology.ndim

    @property
    def shape(self) -> tuple[int, ...]:
        return self.topology.shape

    @property
    def species(self) -> tuple[str, ...]:
        return self.config.species

    @property
    def iteration(self) -> int:
        """Alias of tick_count."""
        return self.tick_count

    def species_index(self, name: str) -> int:
        try:
            return self.config.species.index(name)
        except ValueError:
            raise KeyError(f"Unknown species {name!r}; expected one of {self.config.species}") from None

    def _grid(self, values: np.ndarray, species: str | None) -> np.ndarray:
        if species is None:
            return values.reshape((values.shape[0],) + self.shape).copy()
        return values[self.species_index(species)].reshape(self.shape).copy()

    def occupancy(self, species: str | None = None) -> np.ndarray:
        """Agent counts on the grid; [n_species, *shape] if species is None."""
        return self._grid(self.state.occupancy, species)

    def field(self, species: str | None = None) -> np.ndarray:
        """Marker concentration on the grid."""
        return self._grid(self.state.field, species)

    def weight(self, species: str | None = None) -> np.ndarray:
        """Push/pull weight on the grid."""
        return self._grid(self.state.weight, species)

    def population(self) -> dict[str, int]:
        """Total agents per species."""
        totals = self.state.population()
        return {name: int(totals[s]) for s, name in enumerate(self.species)}

    def node(self, index: int) -> Node:
        """Read-only view of one node."""
        return self.state.view(index, self.topology, self.species)

    def snapshot(self, mode: str = "counts") -> str:
        """Textual render of the grid (diagnostic only)."""
        from stigsim.viz.text import render_snapshot
        return render_snapshot(self, mode=mode)

    def __str__(self) -> str:
        return self.snapshot(mode="dominance")

    def __repr__(self) -> str:
        return (
            f"Universe(size={self.size}, ndim={self.ndim}, species={self.species}, "
            f"tick={self.tick_count}, population={self.population()})"
        )


def construct(
    size: int,
    agents: int,
    seed: int = 100,
    params: HyperParams | None = None,
    **kwargs,
) -> Universe:
    """
    Build a universe of size**ndim nodes seeded with `agents` agents per species.

    Extra keyword arguments go to UniverseConfig (ndim, species, policy, workers, ...).
    With workers > 1 the caller owns the thread pool and must close() the
    universe (or use it in a `with` block).
    """
    config = UniverseConfig(size=size, agents=agents, seed=seed, **kwargs)
    return Universe(config, params=params)
