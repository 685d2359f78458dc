"""
Text rendering of grid state.

- Count tables (agents and marker per cell)
- Dominance maps (one character per cell)
"""

from stigsim.viz.text import (
    render_counts,
    render_dominance,
    render_header,
    render_snapshot,
)

__all__ = [
    "render_counts",
    "render_dominance",
    "render_header",
    "render_snapshot",
]
