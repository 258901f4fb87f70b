"""
Exception types for flakesim.

Simulated failures subclass AssertionError so any test runner records them
as ordinary test failures rather than errors in the harness.
"""


class SimulatedFailure(AssertionError):
    """Base class for failures a demo scenario raises on purpose."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SimulatedFlakyFailure(SimulatedFailure):
    """Raised when a random draw lands under the scenario's threshold."""


class SimulatedRegression(SimulatedFailure):
    """Raised by regression scenarios on every invocation."""


class ThresholdError(ValueError):
    """A failure threshold is not a number in [0, 1]."""

    def __init__(self, value, source: str = None):
        self.value = value
        self.source = source
        where = f" for {source}" if source else ""
        super().__init__(
            f"Invalid failure threshold{where}: {value!r} (expected a number between 0 and 1)"
        )


class EntropyExhausted(RuntimeError):
    """A scripted entropy source ran out of samples."""


class ScenarioNotFound(KeyError):
    """No scenario or suite matches the requested name."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"No scenario or suite named {self.name!r}"
