"""
Core engine primitives.

This layer knows NOTHING about segregation measures or rendering.
It only knows:
- Topology: neighbour slots on a periodic grid
- Field model: marker decay/deposit and the derived weight
- Counter-based RNG keyed by (cell, tick)
- Node state arrays (occupancy, field, weight, outflow)
- Universe: the three-phase tick and the conservation check
"""

from stigsim.core.errors import StigsimError, ConfigurationError, ConservationError
from stigsim.core.topology import Topology, DIRECTIONS_2D, DIRECTIONS_3D, directions_for
from stigsim.core.config import HyperParams, UniverseConfig, POLICIES, DEFAULT_SPECIES
from stigsim.core.field_model import FieldModel, create_default_field_model
from stigsim.core.rng import CounterRng, splitmix64
from stigsim.core.nodes import Node, NodeState
from stigsim.core.universe import Universe, construct, distribute_agents

__all__ = [
    "StigsimError",
    "ConfigurationError",
    "ConservationError",
    "Topology",
    "DIRECTIONS_2D",
    "DIRECTIONS_3D",
    "directions_for",
    "HyperParams",
    "UniverseConfig",
    "POLICIES",
    "DEFAULT_SPECIES",
    "FieldModel",
    "create_default_field_model",
    "CounterRng",
    "splitmix64",
    "Node",
    "NodeState",
    "Universe",
    "construct",
    "distribute_agents",
]
