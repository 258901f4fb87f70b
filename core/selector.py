"""
Randomized outcome selector.

Decides whether a simulated scenario fails by comparing one fresh sample
against a fixed threshold: ``fail = sample < threshold``.
"""

import logging
import math
from numbers import Real

from .entropy import EntropySource
from .errors import SimulatedFlakyFailure, ThresholdError


logger = logging.getLogger(__name__)


def validate_threshold(value, source: str = None) -> float:
    """
    Check that ``value`` is a real number in [0, 1].

    Args:
        value: Candidate threshold
        source: Optional label used in the error message

    Returns:
        The threshold as a float

    Raises:
        ThresholdError: If the value is not a number, is NaN, or lies outside [0, 1]
    """
    # bool is a Real subclass but True/False as a rate is always a typo
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ThresholdError(value, source)
    value = float(value)
    if math.isnan(value) or value < 0.0 or value > 1.0:
        raise ThresholdError(value, source)
    return value


class OutcomeSelector:
    """Threshold-vs-sample decision bound to one entropy source."""

    def __init__(self, threshold, entropy: EntropySource):
        self.threshold = validate_threshold(threshold)
        self.entropy = entropy

    def decide(self) -> bool:
        """Draw a sample; True means this invocation fails."""
        sample = self.entropy.next_sample()
        failed = sample < self.threshold
        logger.debug(
            f"Outcome draw: sample={sample:.6f} threshold={self.threshold:.3f} "
            f"-> {'fail' if failed else 'pass'}"
        )
        return failed

    def check(self, message: str):
        """
        Raise if this invocation's draw says fail.

        Raises:
            SimulatedFlakyFailure: With ``message`` when the draw falls under the threshold
        """
        if self.decide():
            raise SimulatedFlakyFailure(message)


def maybe_fail(threshold, entropy: EntropySource, message: str):
    """One-shot form of ``OutcomeSelector(threshold, entropy).check(message)``."""
    OutcomeSelector(threshold, entropy).check(message)
