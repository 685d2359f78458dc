"""
Configuration values for the engine.

HyperParams are the three field constants (decay, deposit, steepness).
They are plain values handed to each phase, never module-level state, and
may be replaced between ticks.

UniverseConfig fixes everything that cannot change after construction:
grid geometry, species, seeding and the movement policy.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, asdict
from typing import Literal, Mapping
import math
import numbers

import numpy as np

from stigsim.core.errors import ConfigurationError


MovementPolicy = Literal["cross", "same"]
POLICIES = ("cross", "same")

DEFAULT_SPECIES = ("red", "blue")


@dataclass(frozen=True)
class HyperParams:
    """Field hyperparameters."""

    lam: float = 0.5     # Decay: fraction of the previous field kept each tick, in [0, 1]
    gamma: float = 0.5   # Deposit: field added per occupying agent
    beta: float = 0.01   # Steepness: weight = exp(-beta * field)

    def validate(self) -> "HyperParams":
        """Raise ConfigurationError for the first invalid value; return self."""
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real):
                raise ConfigurationError(f.name, value, "must be a real number")
            if not math.isfinite(value):
                raise ConfigurationError(f.name, value, "must be finite")

        if not 0.0 <= self.lam <= 1.0:
            raise ConfigurationError("lam", self.lam, "decay factor must lie in [0, 1]")
        if self.gamma < 0.0:
            raise ConfigurationError("gamma", self.gamma, "deposit rate must be >= 0")
        if self.beta < 0.0:
            raise ConfigurationError("beta", self.beta, "weight steepness must be >= 0")
        return self

    @classmethod
    def from_dict(cls, raw: Mapping[str, float]) -> "HyperParams":
        """
        Build validated hyperparameters from a mapping.

        Accepts `lambda` as an alias for `lam`. Missing keys keep defaults.
        """
        values = dict(raw)
        if "lambda" in values:
            if "lam" in values:
                raise ConfigurationError("lambda", values["lambda"], "given together with 'lam'")
            values["lam"] = values.pop("lambda")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(unknown[0], values[unknown[0]], "unknown hyperparameter")

        return cls(**values).validate()

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass
class UniverseConfig:
    """Construction-time configuration of a universe."""

    size: int                   # Cells along each axis
    agents: int                 # Agents seeded per species
    seed: int = 100             # Key of the counter-based RNG
    ndim: int = 2               # Grid dimensionality (2 = von Neumann square, 3 = cube)
    species: tuple[str, ...] = field(default=DEFAULT_SPECIES)
    policy: MovementPolicy = "cross"  # Which species' weight attracts movers
    workers: int = 1            # Threads per phase; results do not depend on it
    check_conservation: bool = True

    def validate(self) -> "UniverseConfig":
        """Raise ConfigurationError for the first invalid value; return self."""
        if not _is_int(self.size) or self.size < 1:
            raise ConfigurationError("size", self.size, "grid size must be an integer >= 1")
        if not _is_int(self.ndim) or self.ndim < 1:
            raise ConfigurationError("ndim", self.ndim, "dimensionality must be an integer >= 1")
        if not _is_int(self.agents) or self.agents < 0:
            raise ConfigurationError("agents", self.agents, "agent count must be an integer >= 0")
        if not _is_int(self.seed):
            raise ConfigurationError("seed", self.seed, "seed must be an integer")
        if not _is_int(self.workers) or self.workers < 1:
            raise ConfigurationError("workers", self.workers, "worker count must be an integer >= 1")
        if self.policy not in POLICIES:
            raise ConfigurationError("policy", self.policy, f"expected one of {POLICIES}")

        species = tuple(self.species)
        if not species:
            raise ConfigurationError("species", self.species, "at least one species is required")
        for name in species:
            if not isinstance(name, str) or not name:
                raise ConfigurationError("species", self.species, "names must be non-empty strings")
        if len(set(species)) != len(species):
            raise ConfigurationError("species", self.species, "names must be unique")
        self.species = species
        return self

    @property
    def n_species(self) -> int:
        return len(self.species)


def _is_int(value) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)
