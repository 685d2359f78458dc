"""
Analysis layer: derived quantities for inspection and comparison.

IMPORTANT: This is NOT seen by the engine. One-way derivation only.

- dominance_map / smoothed_dominance: where each species' marker leads
- segregation_index: same-species share of neighbouring agent pairs
- population_history: totals per tick (conservation diagnostics)
"""

from stigsim.analysis.segregation import (
    dominance_map,
    smoothed_dominance,
    segregation_index,
    population_history,
)

__all__ = [
    "dominance_map",
    "smoothed_dominance",
    "segregation_index",
    "population_history",
]
