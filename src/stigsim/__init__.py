"""
stigsim: stigmergic segregation on a toroidal grid

Competing species move across a periodic lattice. Every species leaves a
decaying marker; agents prefer neighbours where the other species' marker
is weak, and the population sorts itself into single-species territories.

Core concepts:
- Occupancy: integer agent counts per species per cell
- Field: marker that decays (lambda) and accumulates (gamma) every tick
- Weight: exp(-beta * field), the movement bias read by neighbours
- Tick: field update -> outflow -> inflow, with a barrier between phases
- Conservation: no tick creates or destroys an agent
"""

__version__ = "0.1.0"
