"""
Configuration management for flakesim.
Loads and validates configuration settings.
"""

import json
import math
from numbers import Real
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class Config:
    """Manages application configuration."""

    # Default configuration values
    DEFAULT_CONFIG = {
        'seed': None,
        'iterations': 1,
        'threshold_overrides': {},
        'events_file': None,
        'junit_suite_name': 'flakesim',
        'max_log_files': 5,
        'log_folder': 'logs'
    }

    def __init__(self, config_path: Path = None, fallback_to_defaults: bool = True):
        """
        Initialize configuration.

        Args:
            config_path: Path to config.json file. If None, uses defaults.
            fallback_to_defaults: Announce the default fallback on invalid files;
                callers that refuse to run on errors pass False
        """
        self.fallback_to_defaults = fallback_to_defaults
        self.config = json.loads(json.dumps(self.DEFAULT_CONFIG))
        self.errors: List[str] = []

        if config_path and Path(config_path).exists():
            self.load_config(Path(config_path))

    def load_config(self, config_path: Path):
        """Load configuration from JSON file."""
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                user_config = json.load(f)
        except json.JSONDecodeError as e:
            self.errors = [f"Invalid JSON: {e}"]
            print(f"\nERROR: Invalid JSON in config file")
            print(f"  Config file: {config_path.absolute()}")
            print(f"  Problem: {e}")
            print(f"  Line: {e.lineno}, Column: {e.colno}")
            print()
            print("Fix the JSON syntax and try again.")
            self._print_fallback()
            return
        except OSError as e:
            self.errors = [str(e)]
            print(f"\nERROR: Could not load config file")
            print(f"  Config file: {config_path.absolute()}")
            print(f"  Problem: {e}")
            print()
            self._print_fallback()
            return

        if not isinstance(user_config, dict):
            self.errors = ["Top-level value must be a JSON object"]
            print(f"\nERROR: Config file must contain a JSON object")
            print(f"  Config file: {config_path.absolute()}")
            self._print_fallback()
            return

        # Validate loaded config before applying
        is_valid, errors = self._validate_config(user_config)
        if not is_valid:
            self.errors = errors
            print(f"\nConfiguration validation failed:")
            print(f"  Config file: {config_path.absolute()}")
            print()
            for error in errors:
                print(error)
                print()
            self._print_fallback()
            return

        self.config.update(user_config)

    def _print_fallback(self):
        if self.fallback_to_defaults:
            print("Using default configuration instead.")
        else:
            print("Not running with an invalid configuration.")

    def save_config(self, config_path: Path):
        """Save current configuration to JSON file."""
        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(self.config, f, indent=4)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value."""
        self.config[key] = value

    def _validate_config(self, config: Dict[str, Any]) -> Tuple[bool, List[str]]:
        """
        Validate configuration dictionary.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        numeric_fields = {
            'iterations': (1, 100000, "Iterations per scenario", 100),
            'max_log_files': (1, 100, "Maximum log files", 5),
        }

        for field, (min_val, max_val, display_name, example) in numeric_fields.items():
            if field in config:
                value = config[field]
                if isinstance(value, bool) or not isinstance(value, int):
                    errors.append(
                        f"ERROR: Invalid config value\n"
                        f"  Field: {field}\n"
                        f"  Value: {repr(value)} ({type(value).__name__})\n"
                        f"  Expected: number (integer)\n"
                        f"  Example: {example}\n"
                        f"  Valid range: {min_val} to {max_val}"
                    )
                elif value < min_val or value > max_val:
                    errors.append(
                        f"ERROR: Invalid config value\n"
                        f"  Field: {field}\n"
                        f"  Value: {value}\n"
                        f"  Expected: number between {min_val} and {max_val}\n"
                        f"  Example: {example}"
                    )

        if 'seed' in config:
            seed = config['seed']
            if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
                errors.append(
                    f"ERROR: Invalid config value\n"
                    f"  Field: seed\n"
                    f"  Value: {repr(seed)} ({type(seed).__name__})\n"
                    f"  Expected: integer, or null for system entropy\n"
                    f"  Example: 1234"
                )

        if 'threshold_overrides' in config:
            overrides = config['threshold_overrides']
            if not isinstance(overrides, dict):
                errors.append(
                    f"ERROR: Invalid config value\n"
                    f"  Field: threshold_overrides\n"
                    f"  Value: {repr(overrides)} ({type(overrides).__name__})\n"
                    f"  Expected: object mapping scenario id to failure rate\n"
                    f"  Example: {{\"IntegrationTest::testIntegration18 should complete integration cycle\": 0.5}}"
                )
            else:
                for scenario_id, rate in overrides.items():
                    if not _is_rate(rate):
                        errors.append(
                            f"ERROR: Invalid config value\n"
                            f"  Field: threshold_overrides['{scenario_id}']\n"
                            f"  Value: {repr(rate)}\n"
                            f"  Expected: number between 0 and 1\n"
                            f"  Example: 0.3"
                        )

        for field in ('log_folder', 'junit_suite_name'):
            if field in config and not isinstance(config[field], str):
                errors.append(f"{field} must be a string, got {type(config[field]).__name__}")

        if 'events_file' in config:
            events_file = config['events_file']
            if events_file is not None and not isinstance(events_file, str):
                errors.append(f"events_file must be a string or null, got {type(events_file).__name__}")

        return (len(errors) == 0, errors)

    @property
    def seed(self) -> Optional[int]:
        """Get entropy seed (None means system entropy)."""
        return self.config['seed']

    @property
    def iterations(self) -> int:
        """Get default iterations per scenario."""
        return self.config['iterations']

    @property
    def threshold_overrides(self) -> Dict[str, float]:
        """Get per-scenario failure rate overrides."""
        return self.config['threshold_overrides']

    @property
    def events_file(self) -> Optional[str]:
        """Get structured events output path."""
        return self.config['events_file']

    @property
    def junit_suite_name(self) -> str:
        return self.config['junit_suite_name']

    @property
    def max_log_files(self) -> int:
        """Get maximum number of log files to keep."""
        return self.config['max_log_files']

    @property
    def log_folder(self) -> str:
        """Get log folder path."""
        return self.config['log_folder']


def _is_rate(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not math.isnan(value) and 0.0 <= value <= 1.0
