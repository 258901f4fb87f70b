"""
Scenario model for the demo test catalog.

A scenario is a named body that either passes, raises a simulated flaky
failure, or raises a simulated regression. Each invocation receives its own
ScenarioContext; nothing a body writes is visible to any other invocation,
so a scenario's outcome can never depend on what ran before it.
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Dict, Iterable, List, Optional

import psutil

from .entropy import EntropySource, choice
from .errors import ScenarioNotFound, ThresholdError
from .selector import OutcomeSelector, validate_threshold


logger = logging.getLogger(__name__)


class ScenarioKind(Enum):
    """How a scenario is designed to behave."""
    STABLE = auto()      # Always passes
    FLAKY = auto()       # Fails according to its threshold
    REGRESSION = auto()  # Always fails with a fixed message


def process_memory_bytes() -> int:
    """Resident memory of the current process."""
    return psutil.Process().memory_info().rss


class ScenarioContext:
    """
    Everything one scenario invocation may touch.

    Created by the runner for a single invocation and discarded afterwards.
    """

    def __init__(
        self,
        entropy: EntropySource,
        threshold: Optional[float] = None,
        memory_probe: Optional[Callable[[], int]] = None
    ):
        self.entropy = entropy
        self.threshold = threshold
        self.memory_probe = memory_probe or process_memory_bytes
        self.state: Dict[str, object] = {}

    def draw(self) -> float:
        """Raw sample in [0, 1)."""
        return self.entropy.next_sample()

    def fails(self, threshold: Optional[float] = None) -> bool:
        """Selector decision against ``threshold`` (defaults to the scenario's)."""
        return OutcomeSelector(self._threshold(threshold), self.entropy).decide()

    def check(self, message: str, threshold: Optional[float] = None):
        """Raise SimulatedFlakyFailure(message) when the selector says fail."""
        OutcomeSelector(self._threshold(threshold), self.entropy).check(message)

    def choose(self, options):
        return choice(self.entropy, options)

    def memory_usage(self) -> int:
        return self.memory_probe()

    def _threshold(self, threshold: Optional[float]) -> float:
        if threshold is not None:
            return threshold
        if self.threshold is None:
            raise ThresholdError(None, "scenario without a threshold")
        return self.threshold


@dataclass(frozen=True)
class Scenario:
    """A single demo test case."""
    suite: str
    name: str
    kind: ScenarioKind
    body: Callable[[ScenarioContext], None] = field(repr=False, compare=False)
    threshold: Optional[float] = None
    description: str = ''

    def __post_init__(self):
        if self.kind is ScenarioKind.FLAKY and self.threshold is None:
            raise ThresholdError(None, self.id)
        if self.threshold is not None:
            object.__setattr__(self, 'threshold', validate_threshold(self.threshold, self.id))

    @property
    def id(self) -> str:
        return f"{self.suite}::{self.name}"

    def new_context(
        self,
        entropy: EntropySource,
        memory_probe: Optional[Callable[[], int]] = None
    ) -> ScenarioContext:
        """Fresh context for one invocation of this scenario."""
        return ScenarioContext(entropy, threshold=self.threshold, memory_probe=memory_probe)

    def invoke(self, context: ScenarioContext):
        """Run the body once; raises on failure."""
        self.body(context)

    def with_threshold(self, threshold) -> 'Scenario':
        """
        Copy of this scenario with a different failure threshold.

        Raises:
            ValueError: If this is not a flaky scenario
            ThresholdError: If the threshold is outside [0, 1]
        """
        if self.kind is not ScenarioKind.FLAKY:
            raise ValueError(f"Only flaky scenarios take a threshold: {self.id}")
        return dataclasses.replace(self, threshold=validate_threshold(threshold, self.id))


def run_steps(context: ScenarioContext, steps: Iterable[Callable[[ScenarioContext], None]]):
    """Run dependent steps in order against the same context."""
    for step in steps:
        step(context)


def flaky(suite: str, name: str, threshold: float, message: str, description: str = '') -> Scenario:
    """Scenario that fails with ``message`` at rate ``threshold`` and otherwise passes."""
    def body(context: ScenarioContext):
        context.check(message)

    return Scenario(suite, name, ScenarioKind.FLAKY, body, threshold, description)


class ScenarioCatalog:
    """Ordered, id-addressable collection of scenarios."""

    def __init__(self, scenarios: Iterable[Scenario] = ()):
        self._scenarios: Dict[str, Scenario] = {}
        for scenario in scenarios:
            self.add(scenario)

    def add(self, scenario: Scenario):
        if scenario.id in self._scenarios:
            raise ValueError(f"Duplicate scenario id: {scenario.id}")
        self._scenarios[scenario.id] = scenario

    def __iter__(self):
        return iter(self._scenarios.values())

    def __len__(self):
        return len(self._scenarios)

    def __contains__(self, scenario_id):
        return scenario_id in self._scenarios

    def get(self, scenario_id: str) -> Scenario:
        try:
            return self._scenarios[scenario_id]
        except KeyError:
            raise ScenarioNotFound(scenario_id) from None

    def suites(self) -> List[str]:
        """Suite names in catalog order."""
        seen = []
        for scenario in self:
            if scenario.suite not in seen:
                seen.append(scenario.suite)
        return seen

    def by_suite(self, suite: str) -> List[Scenario]:
        matches = [s for s in self if s.suite == suite]
        if not matches:
            raise ScenarioNotFound(suite)
        return matches

    def by_kind(self, kind: ScenarioKind) -> List[Scenario]:
        return [s for s in self if s.kind is kind]

    def select(self, suite: Optional[str] = None, scenario_id: Optional[str] = None) -> List[Scenario]:
        """Filter by suite and/or exact scenario id; no filters returns everything."""
        if scenario_id:
            selected = [self.get(scenario_id)]
            if suite and selected[0].suite != suite:
                raise ScenarioNotFound(scenario_id)
            return selected
        if suite:
            return self.by_suite(suite)
        return list(self)

    def with_overrides(self, overrides: Dict[str, float]) -> 'ScenarioCatalog':
        """
        New catalog with flaky thresholds replaced.

        Every override is validated before any scenario is copied.

        Raises:
            ScenarioNotFound: For an unknown scenario id
            ThresholdError: For a threshold outside [0, 1]
            ValueError: When the target is not a flaky scenario
        """
        validated = {}
        for scenario_id, threshold in overrides.items():
            scenario = self.get(scenario_id)
            validated[scenario_id] = scenario.with_threshold(threshold)
            logger.info(f"Threshold override: {scenario_id} {scenario.threshold} -> {threshold}")
        return ScenarioCatalog(validated.get(s.id, s) for s in self)
