"""
Field model: the marker each species leaves behind and the weight derived from it.

Per species, per node:
    field  <- lam * field + gamma * occupancy
    weight <- exp(-beta * field)

More marker means lower weight. The weights feed the movement signal used
when agents pick a neighbour. Everything is float64 so weight comparisons
are reproducible within a tick.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from stigsim.core.config import POLICIES
from stigsim.core.errors import ConfigurationError

if TYPE_CHECKING:
    from stigsim.core.config import HyperParams


FIELD_DTYPE = np.float64


@dataclass(frozen=True)
class FieldModel:
    """
    Stateless field update.

    Arrays are shaped [n_species, n_nodes] (or any [n_species, ...] slice).
    Inputs are never modified.
    """

    def update(
        self,
        field: np.ndarray,
        occupancy: np.ndarray,
        params: "HyperParams",
    ) -> tuple[np.ndarray, np.ndarray]:
        """
        Decay, deposit and derive the weight.

        Args:
            field: Previous marker concentration
            occupancy: Current agent counts (same shape as field)
            params: Hyperparameters for this tick

        Returns:
            (new_field, new_weight)
        """
        new_field = np.asarray(field, dtype=FIELD_DTYPE) * params.lam
        new_field += params.gamma * np.asarray(occupancy, dtype=FIELD_DTYPE)
        return new_field, self.weight(new_field, params.beta)

    @staticmethod
    def weight(field: np.ndarray, beta: float) -> np.ndarray:
        """Push/pull weight: exp(-beta * field)."""
        return np.exp(-beta * np.asarray(field, dtype=FIELD_DTYPE))

    @staticmethod
    def movement_signal(weight: np.ndarray, policy: str = "cross") -> np.ndarray:
        """
        Per-species attraction signal used to choose a neighbour.

        "cross": species s follows the product of every other species' weight,
                 so agents drift away from foreign marker (segregation).
                 With two species this is the opposite species' weight.
        "same":  species s follows its own weight.

        Args:
            weight: [n_species, ...] weights

        Returns:
            [n_species, ...] signal, same shape as weight
        """
        weight = np.asarray(weight, dtype=FIELD_DTYPE)

        if policy == "same":
            return weight.copy()

        if policy == "cross":
            n_species = weight.shape[0]
            signal = np.ones_like(weight)
            for s in range(n_species):
                for other in range(n_species):
                    if other != s:
                        signal[s] *= weight[other]
            return signal

        raise ConfigurationError("policy", policy, f"expected one of {POLICIES}")


def create_default_field_model() -> FieldModel:
    """Factory for the default field model."""
    return FieldModel()
