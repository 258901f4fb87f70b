"""
Demo test suite for CI test-report screenshots.

Every catalog scenario becomes one pytest test. Flaky scenarios fail at their
designed rate on each run, regressions always fail, stable ones always pass.
Not collected by the regular test run; invoke it explicitly:

    pytest demo_suites/scenario_suite.py --junitxml=reports/junit.xml

Set FLAKESIM_SEED to replay a specific run.
"""

import os
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.catalog import build_default_catalog
from core.entropy import create_entropy


CATALOG = build_default_catalog()


@pytest.fixture(scope="module")
def entropy():
    seed = os.getenv("FLAKESIM_SEED")
    return create_entropy(int(seed) if seed else None)


@pytest.mark.parametrize("scenario", list(CATALOG), ids=lambda s: s.id)
def test_scenario(scenario, entropy):
    scenario.invoke(scenario.new_context(entropy))
