"""
CI pipeline declaration for the flaky test demo.

This is a declarative description consumed by the hosted CI platform: two
build steps and a set of feature toggles. Values are validated for shape and
range here; their meaning belongs to the platform.
"""

import json
import logging
import math
from dataclasses import asdict, dataclass, field
from numbers import Real
from pathlib import Path
from typing import Any, Dict, List, Tuple


logger = logging.getLogger(__name__)


@dataclass
class BuildStep:
    """One shell step of the build."""
    name: str
    script: str


@dataclass
class AutomaticRetry:
    number_of_retries: int = 2
    retry_flaky_tests_only: bool = True
    continue_on_flaky_failure: bool = True


@dataclass
class MuteRule:
    condition: str = "test.flakinessRate > 0.3 && test.flakinessRate < 1.0"
    investigation_assignee: str = "developer.responsible"
    continue_running: bool = True


@dataclass
class CustomMetric:
    metric: str = "test.flakinessRate"
    threshold: float = 0.5
    description: str = "Alert if overall test flakiness exceeds 50%"


@dataclass
class FailureConditions:
    stop_build_on_failure: bool = True
    exclude_flaky_tests: bool = True
    execution_timeout_min: int = 10
    custom_metric: CustomMetric = field(default_factory=CustomMetric)


@dataclass
class PipelineConfig:
    """Build configuration plus the feature toggles the demo advertises."""
    name: str = "Flaky Test Intelligence Demo"
    description: str = "Demonstrates intelligent flaky test detection"
    version: str = "2023.11"
    steps: List[BuildStep] = field(default_factory=lambda: [
        BuildStep("Install Dependencies", "pip install -e .[test]"),
        BuildStep("Run Tests with Intelligence",
                  "pytest demo_suites/scenario_suite.py --junitxml=reports/junit.xml"),
    ])
    test_history: bool = True
    test_intelligence: bool = True
    automatic_retry: AutomaticRetry = field(default_factory=AutomaticRetry)
    mute_rules: List[MuteRule] = field(default_factory=lambda: [MuteRule()])
    build_failure_analysis: bool = True
    test_duration_analysis: bool = True
    parallel_batches: int = 4
    failure_conditions: FailureConditions = field(default_factory=FailureConditions)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PipelineConfig':
        """
        Build from a dictionary; missing keys take their defaults.

        Raises:
            TypeError: On unknown keys or a non-object where an object is expected
        """
        data = dict(data)
        if 'steps' in data:
            data['steps'] = [BuildStep(**step) for step in data['steps']]
        if 'automatic_retry' in data:
            data['automatic_retry'] = AutomaticRetry(**data['automatic_retry'])
        if 'mute_rules' in data:
            data['mute_rules'] = [MuteRule(**rule) for rule in data['mute_rules']]
        if 'failure_conditions' in data:
            conditions = dict(data['failure_conditions'])
            if 'custom_metric' in conditions:
                conditions['custom_metric'] = CustomMetric(**conditions['custom_metric'])
            data['failure_conditions'] = FailureConditions(**conditions)
        return cls(**data)

    @classmethod
    def load(cls, path: Path) -> 'PipelineConfig':
        """Read a pipeline declaration from JSON."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError(f"{path}: pipeline declaration must be a JSON object")
        logger.info(f"Loaded pipeline declaration from {path}")
        return cls.from_dict(data)

    def save(self, path: Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=4)

    def validate(self) -> Tuple[bool, List[str]]:
        """
        Check shapes and ranges.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        errors.extend(_check_str('name', self.name, "Flaky Test Intelligence Demo"))
        errors.extend(_check_str('description', self.description, "Demonstrates flaky test detection",
                                 allow_empty=True))
        errors.extend(_check_str('version', self.version, "2023.11"))
        if not self.steps:
            errors.append("at least one build step is required")
        for index, step in enumerate(self.steps):
            errors.extend(_check_str(f'steps[{index}].name', step.name, "Install Dependencies"))
            errors.extend(_check_str(f'steps[{index}].script', step.script, "pip install -e .[test]"))

        errors.extend(_check_int(
            'automatic_retry.number_of_retries', self.automatic_retry.number_of_retries, 0, 10, 2))
        errors.extend(_check_int('parallel_batches', self.parallel_batches, 1, 64, 4))
        errors.extend(_check_int(
            'failure_conditions.execution_timeout_min',
            self.failure_conditions.execution_timeout_min, 1, 1440, 10))

        metric_threshold = self.failure_conditions.custom_metric.threshold
        if isinstance(metric_threshold, bool) or not isinstance(metric_threshold, Real) \
                or math.isnan(metric_threshold) or not 0.0 <= metric_threshold <= 1.0:
            errors.append(
                f"ERROR: Invalid pipeline value\n"
                f"  Field: failure_conditions.custom_metric.threshold\n"
                f"  Value: {metric_threshold!r}\n"
                f"  Expected: number between 0 and 1\n"
                f"  Example: 0.5"
            )

        for index, rule in enumerate(self.mute_rules):
            condition_errors = _check_str(
                f'mute_rules[{index}].condition', rule.condition, "test.flakinessRate > 0.3")
            errors.extend(condition_errors)
            if not condition_errors and 'test.flakinessRate' not in rule.condition:
                errors.append(
                    f"mute_rules[{index}].condition must reference test.flakinessRate, "
                    f"got {rule.condition!r}"
                )
            errors.extend(_check_str(
                f'mute_rules[{index}].investigation_assignee', rule.investigation_assignee,
                "developer.responsible"))

        return (len(errors) == 0, errors)


def _check_int(field_name: str, value, min_val: int, max_val: int, example: int) -> List[str]:
    if isinstance(value, bool) or not isinstance(value, int):
        return [
            f"ERROR: Invalid pipeline value\n"
            f"  Field: {field_name}\n"
            f"  Value: {repr(value)} ({type(value).__name__})\n"
            f"  Expected: number (integer)\n"
            f"  Example: {example}"
        ]
    if value < min_val or value > max_val:
        return [
            f"ERROR: Invalid pipeline value\n"
            f"  Field: {field_name}\n"
            f"  Value: {value}\n"
            f"  Expected: number between {min_val} and {max_val}\n"
            f"  Example: {example}"
        ]
    return []


def _check_str(field_name: str, value, example: str, allow_empty: bool = False) -> List[str]:
    if not isinstance(value, str):
        return [
            f"ERROR: Invalid pipeline value\n"
            f"  Field: {field_name}\n"
            f"  Value: {repr(value)} ({type(value).__name__})\n"
            f"  Expected: string\n"
            f"  Example: {example}"
        ]
    if not allow_empty and not value.strip():
        return [
            f"ERROR: Invalid pipeline value\n"
            f"  Field: {field_name}\n"
            f"  Value: {value!r}\n"
            f"  Expected: non-empty string\n"
            f"  Example: {example}"
        ]
    return []
