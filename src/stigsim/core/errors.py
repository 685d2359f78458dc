"""
Exceptions raised by the engine.

Configuration problems are reported before any node is built.
A conservation failure is a fatal internal fault: the tick that produced it
is never committed.
"""


class StigsimError(Exception):
    """Base class for all engine errors."""


class ConfigurationError(StigsimError, ValueError):
    """Invalid grid, species, policy or hyperparameter value."""

    def __init__(self, parameter: str, value, reason: str):
        self.parameter = parameter
        self.value = value
        super().__init__(f"Invalid {parameter}={value!r}: {reason}")


class ConservationError(StigsimError, RuntimeError):
    """A tick changed the total number of agents of some species."""

    def __init__(self, tick: int, expected, actual):
        self.tick = tick
        self.expected = tuple(int(v) for v in expected)
        self.actual = tuple(int(v) for v in actual)
        super().__init__(
            f"Population not conserved at tick {tick}: "
            f"expected {self.expected}, got {self.actual}"
        )
