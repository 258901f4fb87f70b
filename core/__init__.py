"""
flakesim Core Module
Randomized outcome selection, demo scenarios and the scenario runner.
"""

from .config import Config
from .entropy import EntropySource, SeededEntropy, SystemEntropy, ScriptedEntropy, create_entropy
from .selector import OutcomeSelector, validate_threshold, maybe_fail
from .scenarios import Scenario, ScenarioCatalog, ScenarioContext, ScenarioKind
from .catalog import build_default_catalog
from .runner import ScenarioRunner, RunReport
from .pipeline_config import PipelineConfig
from .logger import setup_logging

__all__ = [
    'Config',
    'EntropySource',
    'SeededEntropy',
    'SystemEntropy',
    'ScriptedEntropy',
    'create_entropy',
    'OutcomeSelector',
    'validate_threshold',
    'maybe_fail',
    'Scenario',
    'ScenarioCatalog',
    'ScenarioContext',
    'ScenarioKind',
    'build_default_catalog',
    'ScenarioRunner',
    'RunReport',
    'PipelineConfig',
    'setup_logging'
]
