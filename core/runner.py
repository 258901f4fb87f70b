"""
Scenario runner.

Invokes scenarios repeatedly, each invocation with a fresh ScenarioContext,
and tallies pass/fail counts. Only assertion-style failures (which include
every simulated failure) count as test failures; anything else is a bug in a
scenario body and propagates.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from .entropy import EntropySource
from .scenarios import Scenario, ScenarioKind
from .structured_events import EventBuilder


logger = logging.getLogger(__name__)


@dataclass
class InvocationResult:
    """Outcome of one scenario invocation."""
    scenario_id: str
    invocation: int
    passed: bool
    duration_seconds: float
    message: Optional[str] = None
    error_type: Optional[str] = None


@dataclass
class ScenarioSummary:
    """Pass/fail tally for one scenario across a run."""
    scenario_id: str
    suite: str
    name: str
    kind: ScenarioKind
    threshold: Optional[float]
    invocations: int = 0
    failures: int = 0
    messages: List[str] = field(default_factory=list)

    @property
    def passes(self) -> int:
        return self.invocations - self.failures

    @property
    def failure_rate(self) -> float:
        return self.failures / self.invocations if self.invocations else 0.0

    def to_dict(self) -> dict:
        return {
            'scenario_id': self.scenario_id,
            'suite': self.suite,
            'name': self.name,
            'kind': self.kind.name,
            'threshold': self.threshold,
            'invocations': self.invocations,
            'failures': self.failures,
            'failure_rate': self.failure_rate,
            'messages': self.messages,
        }


@dataclass
class RunReport:
    """Everything a run produced."""
    summaries: List[ScenarioSummary]
    results: List[InvocationResult]
    iterations: int
    duration_seconds: float = 0.0

    @property
    def total_invocations(self) -> int:
        return len(self.results)

    @property
    def total_failures(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def any_failed(self) -> bool:
        return self.total_failures > 0

    def results_for(self, scenario_id: str) -> List[InvocationResult]:
        return [r for r in self.results if r.scenario_id == scenario_id]

    def to_dict(self) -> dict:
        return {
            'iterations': self.iterations,
            'duration_seconds': self.duration_seconds,
            'total_invocations': self.total_invocations,
            'total_failures': self.total_failures,
            'scenarios': [s.to_dict() for s in self.summaries],
        }


class ScenarioRunner:
    """Runs scenarios against one entropy source."""

    def __init__(
        self,
        entropy: EntropySource,
        memory_probe: Optional[Callable[[], int]] = None,
        events: Optional[EventBuilder] = None,
        progress=None
    ):
        """
        Args:
            entropy: Source shared by every invocation of the run
            memory_probe: Replacement for the psutil RSS probe
            events: Structured event builder for per-invocation reporting
            progress: Optional ProgressTracker, advanced once per invocation
        """
        self.entropy = entropy
        self.memory_probe = memory_probe
        self.events = events
        self.progress = progress

    def invoke(self, scenario: Scenario, invocation: int = 1) -> InvocationResult:
        """Run one invocation with a brand-new context."""
        context = scenario.new_context(self.entropy, memory_probe=self.memory_probe)
        start = time.perf_counter()
        try:
            scenario.invoke(context)
        except AssertionError as e:
            duration = time.perf_counter() - start
            result = InvocationResult(
                scenario_id=scenario.id,
                invocation=invocation,
                passed=False,
                duration_seconds=duration,
                message=str(e),
                error_type=type(e).__name__
            )
            if self.events:
                self.events.scenario_failed(
                    scenario.id, invocation, duration, result.error_type, result.message
                )
            return result

        duration = time.perf_counter() - start
        if self.events:
            self.events.scenario_passed(scenario.id, invocation, duration)
        return InvocationResult(scenario.id, invocation, True, duration)

    def run_scenario(self, scenario: Scenario, iterations: int) -> tuple:
        """
        Invoke ``scenario`` ``iterations`` times.

        Returns:
            Tuple of (ScenarioSummary, list of InvocationResult)

        Raises:
            ValueError: If iterations is less than 1
        """
        _check_iterations(iterations)
        summary = ScenarioSummary(
            scenario_id=scenario.id,
            suite=scenario.suite,
            name=scenario.name,
            kind=scenario.kind,
            threshold=scenario.threshold
        )
        results = []
        for invocation in range(1, iterations + 1):
            result = self.invoke(scenario, invocation)
            results.append(result)
            summary.invocations += 1
            if not result.passed:
                summary.failures += 1
                if result.message not in summary.messages:
                    summary.messages.append(result.message)
            if self.progress:
                self.progress.update(1)

        logger.info(
            f"{scenario.id}: {summary.failures}/{summary.invocations} failed "
            f"({summary.failure_rate:.1%})"
        )
        return summary, results

    def run(self, scenarios: Iterable[Scenario], iterations: int = 1) -> RunReport:
        """Run every scenario ``iterations`` times, in order."""
        _check_iterations(iterations)
        scenarios = list(scenarios)
        if self.events:
            self.events.session_started(len(scenarios), iterations, repr(self.entropy))

        start = time.perf_counter()
        summaries = []
        results = []
        for scenario in scenarios:
            summary, scenario_results = self.run_scenario(scenario, iterations)
            summaries.append(summary)
            results.extend(scenario_results)

        report = RunReport(summaries, results, iterations, time.perf_counter() - start)
        if self.events:
            self.events.session_completed(
                report.total_invocations, report.total_failures, report.duration_seconds
            )
        return report


def _check_iterations(iterations: int):
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise ValueError(f"iterations must be a positive integer, got {iterations!r}")
