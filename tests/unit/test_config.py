"""Unit tests for HyperParams and UniverseConfig."""

import math

import numpy as np
import pytest

from stigsim.core.config import HyperParams, UniverseConfig
from stigsim.core.errors import ConfigurationError


class TestHyperParams:
    """Tests for HyperParams."""

    def test_defaults(self):
        hp = HyperParams()
        assert hp.lam == 0.5
        assert hp.gamma == 0.5
        assert hp.beta == 0.01

    def test_validate_returns_self(self):
        hp = HyperParams(lam=0.9, gamma=1.0, beta=0.2)
        assert hp.validate() is hp

    @pytest.mark.parametrize("lam", [0.0, 1.0])
    def test_decay_bounds_inclusive(self, lam):
        HyperParams(lam=lam).validate()

    @pytest.mark.parametrize("kwargs,name", [
        ({"lam": -0.1}, "lam"),
        ({"lam": 1.5}, "lam"),
        ({"gamma": -1.0}, "gamma"),
        ({"beta": -0.01}, "beta"),
        ({"beta": math.nan}, "beta"),
        ({"gamma": math.inf}, "gamma"),
        ({"lam": "0.5"}, "lam"),
    ])
    def test_invalid_values(self, kwargs, name):
        with pytest.raises(ConfigurationError) as excinfo:
            HyperParams(**kwargs).validate()
        assert excinfo.value.parameter == name
        assert name in str(excinfo.value)

    def test_numpy_scalars_accepted(self):
        hp = HyperParams(lam=np.float32(0.5), gamma=np.int32(2), beta=np.float64(0.1))
        assert hp.validate() is hp

    def test_numpy_nan_rejected(self):
        with pytest.raises(ConfigurationError) as excinfo:
            HyperParams(beta=np.float32(np.nan)).validate()
        assert excinfo.value.parameter == "beta"

    def test_frozen(self):
        hp = HyperParams()
        with pytest.raises(AttributeError):
            hp.lam = 0.1

    def test_from_dict_lambda_alias(self):
        hp = HyperParams.from_dict({"lambda": 0.25, "gamma": 2.0})
        assert hp.lam == 0.25
        assert hp.gamma == 2.0
        assert hp.beta == 0.01

    def test_from_dict_unknown_key(self):
        with pytest.raises(ConfigurationError, match="delta"):
            HyperParams.from_dict({"delta": 1.0})

    def test_from_dict_validates(self):
        with pytest.raises(ConfigurationError):
            HyperParams.from_dict({"lam": 2.0})

    def test_round_trip_dict(self):
        hp = HyperParams(lam=0.3, gamma=0.7, beta=0.05)
        assert HyperParams.from_dict(hp.to_dict()) == hp


class TestUniverseConfig:
    """Tests for UniverseConfig."""

    def test_defaults(self):
        cfg = UniverseConfig(size=10, agents=50).validate()
        assert cfg.ndim == 2
        assert cfg.species == ("red", "blue")
        assert cfg.policy == "cross"
        assert cfg.workers == 1
        assert cfg.n_species == 2

    @pytest.mark.parametrize("kwargs,name", [
        ({"size": 0}, "size"),
        ({"size": -3}, "size"),
        ({"size": 2.5}, "size"),
        ({"agents": -1}, "agents"),
        ({"ndim": 0}, "ndim"),
        ({"workers": 0}, "workers"),
        ({"policy": "random"}, "policy"),
        ({"species": ()}, "species"),
        ({"species": ("red", "red")}, "species"),
        ({"species": ("red", "")}, "species"),
        ({"seed": "abc"}, "seed"),
    ])
    def test_invalid(self, kwargs, name):
        values = {"size": 4, "agents": 10}
        values.update(kwargs)
        with pytest.raises(ConfigurationError) as excinfo:
            UniverseConfig(**values).validate()
        assert excinfo.value.parameter == name

    def test_species_list_becomes_tuple(self):
        cfg = UniverseConfig(size=3, agents=1, species=["a", "b", "c"]).validate()
        assert cfg.species == ("a", "b", "c")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            UniverseConfig(size=0, agents=1).validate()
