"""
Pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def small_config():
    """Configuration for the 4x4 reference grid with 100 agents per species."""
    from stigsim.core import UniverseConfig
    return UniverseConfig(size=4, agents=100, seed=100)


@pytest.fixture
def medium_config():
    """Configuration for a 20x20 grid."""
    from stigsim.core import UniverseConfig
    return UniverseConfig(size=20, agents=2_000, seed=7)


@pytest.fixture
def default_params():
    """Default field hyperparameters."""
    from stigsim.core import HyperParams
    return HyperParams()


@pytest.fixture
def rng():
    """Reproducible counter-based generator."""
    from stigsim.core import CounterRng
    return CounterRng(seed=42)
