import json

import pytest

from core.entropy import ScriptedEntropy, SeededEntropy
from core.runner import ScenarioRunner
from core.scenarios import Scenario, ScenarioKind, flaky
from core.structured_events import EventType
from core.errors import SimulatedRegression


def _always_fail(ctx):
    raise SimulatedRegression('Memory leak detected in validation module')


def _broken_body(ctx):
    raise RuntimeError('bug in scenario body')


def _passing(ctx):
    pass


ALWAYS_FAIL = Scenario('Known Regression Tests', 'leak', ScenarioKind.REGRESSION, _always_fail)
ALWAYS_PASS = Scenario('Stable Test Suite', 'ok', ScenarioKind.STABLE, _passing)


class DummyProgress:
    def __init__(self):
        self.updated = 0

    def update(self, n=1, desc=None):
        self.updated += n


def test_always_fail_scenario_hundred_runs_same_message():
    summary, results = ScenarioRunner(SeededEntropy(1)).run_scenario(ALWAYS_FAIL, 100)
    assert summary.failures == 100
    assert summary.failure_rate == 1.0
    assert summary.messages == ['Memory leak detected in validation module']
    assert all(r.message == 'Memory leak detected in validation module' for r in results)


def test_always_pass_scenario_hundred_runs():
    summary, results = ScenarioRunner(SeededEntropy(1)).run_scenario(ALWAYS_PASS, 100)
    assert summary.failures == 0
    assert summary.passes == 100
    assert all(r.passed and r.message is None for r in results)


def test_invocations_are_numbered_from_one():
    _, results = ScenarioRunner(SeededEntropy(1)).run_scenario(ALWAYS_PASS, 3)
    assert [r.invocation for r in results] == [1, 2, 3]


def test_scripted_outcomes_are_tallied():
    scenario = flaky('IntegrationTest', 'cycle', 0.35, 'Integration cycle incomplete')
    runner = ScenarioRunner(ScriptedEntropy([0.1, 0.9, 0.2, 0.5]))
    summary, results = runner.run_scenario(scenario, 4)
    assert [r.passed for r in results] == [False, True, False, True]
    assert summary.failures == 2
    assert summary.messages == ['Integration cycle incomplete']
    assert results[0].error_type == 'SimulatedFlakyFailure'


@pytest.mark.parametrize("bad", [0, -3, True, 2.5])
def test_iterations_must_be_positive_int(bad):
    with pytest.raises(ValueError):
        ScenarioRunner(SeededEntropy(1)).run_scenario(ALWAYS_PASS, bad)


def test_bad_iterations_rejected_before_any_invocation(event_builder):
    runner = ScenarioRunner(SeededEntropy(1), events=event_builder)
    with pytest.raises(ValueError):
        runner.run([ALWAYS_PASS], 0)
    assert event_builder.emitter.get_session_events() == []


def test_non_assertion_errors_propagate():
    scenario = Scenario('S', 'broken', ScenarioKind.STABLE, _broken_body)
    with pytest.raises(RuntimeError, match='bug in scenario body'):
        ScenarioRunner(SeededEntropy(1)).run_scenario(scenario, 1)


def test_run_report_totals():
    report = ScenarioRunner(SeededEntropy(1)).run([ALWAYS_PASS, ALWAYS_FAIL], iterations=5)
    assert report.total_invocations == 10
    assert report.total_failures == 5
    assert report.any_failed is True
    assert [s.scenario_id for s in report.summaries] == [ALWAYS_PASS.id, ALWAYS_FAIL.id]
    assert len(report.results_for(ALWAYS_FAIL.id)) == 5


def test_run_report_all_passing():
    report = ScenarioRunner(SeededEntropy(1)).run([ALWAYS_PASS], iterations=2)
    assert report.any_failed is False


def test_run_report_is_json_serializable():
    report = ScenarioRunner(SeededEntropy(1)).run([ALWAYS_PASS, ALWAYS_FAIL], iterations=2)
    data = json.loads(json.dumps(report.to_dict()))
    assert data['total_failures'] == 2
    assert data['scenarios'][1]['kind'] == 'REGRESSION'
    assert data['scenarios'][1]['failure_rate'] == 1.0


def test_events_emitted_per_invocation(event_builder):
    runner = ScenarioRunner(SeededEntropy(1), events=event_builder)
    runner.run([ALWAYS_PASS, ALWAYS_FAIL], iterations=2)

    emitter = event_builder.emitter
    types = [e.event_type for e in emitter.get_session_events()]
    assert types[0] == EventType.SESSION_STARTED
    assert types[-1] == EventType.SESSION_COMPLETED
    assert len(emitter.query_events(EventType.SCENARIO_PASSED)) == 2
    failed = emitter.query_events(EventType.SCENARIO_FAILED)
    assert len(failed) == 2
    assert failed[0].context['error'] == 'Memory leak detected in validation module'
    assert failed[0].context['error_type'] == 'SimulatedRegression'


def test_progress_advanced_once_per_invocation():
    progress = DummyProgress()
    ScenarioRunner(SeededEntropy(1), progress=progress).run([ALWAYS_PASS, ALWAYS_FAIL], iterations=3)
    assert progress.updated == 6
