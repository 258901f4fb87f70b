"""
flakesim: randomized flaky-test scenarios for CI demos

Runs a catalog of demo test scenarios whose failures are drawn from an
injectable random source, and exports the outcomes in the formats a CI
platform's test report imports (JUnit XML, JSON-lines events).
"""

import json
import logging
import sys
from pathlib import Path

from colorama import init, deinit, Fore, Style

from core import Config, setup_logging
from core.catalog import build_default_catalog
from core.entropy import create_entropy
from core.errors import ScenarioNotFound, ThresholdError
from core.pipeline_config import PipelineConfig
from core.runner import RunReport, ScenarioRunner
from core.scenarios import ScenarioKind
from core.structured_events import EventBuilder, EventEmitter
from utils.cli_runtime import build_flakesim_arg_parser, color_enabled, progress_enabled
from utils.error_messages import (format_error, format_pipeline_error,
                                  format_threshold_error, format_unknown_scenario_error)
from utils.junit_report import write_junit_report
from utils.progress import ProgressTracker


EXIT_OK = 0
EXIT_TEST_FAILURES = 1
EXIT_USAGE = 2

KIND_COLORS = {
    ScenarioKind.STABLE: Fore.GREEN,
    ScenarioKind.FLAKY: Fore.YELLOW,
    ScenarioKind.REGRESSION: Fore.RED,
}


def print_error(message: str):
    print(Fore.RED + message + Style.RESET_ALL)


def command_list(args, config: Config) -> int:
    """Print suites and scenarios with their designed behavior."""
    catalog = build_default_catalog()
    suites = [args.suite] if args.suite else catalog.suites()
    for suite in suites:
        scenarios = catalog.by_suite(suite)
        print(Style.BRIGHT + suite + Style.RESET_ALL)
        for scenario in scenarios:
            color = KIND_COLORS[scenario.kind]
            rate = f" p={scenario.threshold:.2f}" if scenario.threshold is not None else ""
            print(f"  {color}{scenario.kind.name:<10}{Style.RESET_ALL}{rate:<8} {scenario.name}")
    print(f"\n{len(catalog)} scenarios in {len(catalog.suites())} suites")
    return EXIT_OK


def print_report(report: RunReport):
    """Summary table: one line per scenario, then totals."""
    for summary in report.summaries:
        if summary.failures == 0:
            status, color = "PASS", Fore.GREEN
        elif summary.failures == summary.invocations:
            status, color = "FAIL", Fore.RED
        else:
            status, color = "MIXED", Fore.YELLOW
        print(
            f"{color}[{status:<5}]{Style.RESET_ALL} "
            f"{summary.failures:>4}/{summary.invocations:<4} {summary.scenario_id}"
        )
        if summary.messages:
            print(f"         {Style.DIM}{summary.messages[0]}{Style.RESET_ALL}")

    color = Fore.RED if report.any_failed else Fore.GREEN
    print(
        f"\n{color}{report.total_failures} of {report.total_invocations} invocations failed"
        f"{Style.RESET_ALL} ({report.duration_seconds:.2f}s)"
    )


def command_run(args, config: Config) -> int:
    """Run the selected scenarios and export the results."""
    base_catalog = build_default_catalog()
    try:
        catalog = base_catalog.with_overrides(config.threshold_overrides)
    except ThresholdError as e:
        print_error(format_threshold_error(e, location=args.config or 'config.json'))
        return EXIT_USAGE
    except ScenarioNotFound as e:
        print_error(format_unknown_scenario_error(e.name, len(base_catalog)))
        return EXIT_USAGE
    except ValueError as e:
        print_error(format_error("Invalid threshold override", str(e),
                                 "Only flaky scenarios accept threshold_overrides"))
        return EXIT_USAGE

    try:
        scenarios = catalog.select(suite=args.suite, scenario_id=args.scenario)
    except ScenarioNotFound as e:
        print_error(format_unknown_scenario_error(e.name, len(catalog)))
        return EXIT_USAGE

    log_file = setup_logging(config.log_folder, config.max_log_files)
    logging.info("=" * 70)
    logging.info("flakesim run started")
    logging.info(f"Log file: {log_file}")

    seed = args.seed if args.seed is not None else config.seed
    iterations = args.iterations or config.iterations
    entropy = create_entropy(seed)
    logging.info(f"Entropy: {entropy!r}, iterations: {iterations}")

    events_path = args.events or config.events_file
    builder = EventBuilder(EventEmitter(
        log_file=Path(events_path) if events_path else None,
        buffer_events=False
    ))
    for scenario_id, threshold in config.threshold_overrides.items():
        builder.threshold_overridden(scenario_id, base_catalog.get(scenario_id).threshold, threshold)

    with ProgressTracker(disable=not progress_enabled()) as progress:
        progress.start(total=len(scenarios) * iterations)
        runner = ScenarioRunner(entropy, events=builder, progress=progress)
        report = runner.run(scenarios, iterations)

    print_report(report)

    if args.junit:
        path = write_junit_report(report, Path(args.junit), config.junit_suite_name)
        print(f"{Fore.CYAN}JUnit report: {path}{Style.RESET_ALL}")
        logging.info(f"JUnit report written to {path}")
    if events_path:
        print(f"{Fore.CYAN}Events: {events_path}{Style.RESET_ALL}")

    logging.info(f"Run finished: {report.total_failures}/{report.total_invocations} failed")
    return EXIT_TEST_FAILURES if report.any_failed else EXIT_OK


def command_pipeline(args, config: Config) -> int:
    """Validate the CI pipeline declaration, print it, optionally write it."""
    if args.file:
        path = Path(args.file)
        try:
            pipeline = PipelineConfig.load(path)
        except FileNotFoundError:
            print_error(format_pipeline_error(path, "File not found"))
            return EXIT_USAGE
        except json.JSONDecodeError as e:
            print_error(format_pipeline_error(path, "Invalid JSON", details=str(e)))
            return EXIT_USAGE
        except (TypeError, ValueError) as e:
            print_error(format_pipeline_error(path, "Unexpected structure", details=str(e)))
            return EXIT_USAGE
    else:
        pipeline = PipelineConfig()

    is_valid, errors = pipeline.validate()
    if not is_valid:
        print_error("Pipeline declaration is invalid:")
        for error in errors:
            print(error)
        return EXIT_USAGE

    print(json.dumps(pipeline.to_dict(), indent=2))
    if args.write:
        pipeline.save(Path(args.write))
        print(f"{Fore.CYAN}Pipeline written to {args.write}{Style.RESET_ALL}")
    return EXIT_OK


COMMANDS = {
    'list': command_list,
    'run': command_run,
    'pipeline': command_pipeline,
}


def main(argv=None) -> int:
    """Main entry point; returns the process exit code."""
    parser = build_flakesim_arg_parser()
    args = parser.parse_args(argv)

    init(strip=not color_enabled(args.no_color))
    try:
        if args.config:
            config_path = Path(args.config)
            if not config_path.exists():
                print_error(format_error(
                    what_failed="Config file not found",
                    reason="The path given with --config does not exist",
                    action="Check the path, or omit --config to use ./config.json or defaults",
                    location=config_path
                ))
                return EXIT_USAGE
        else:
            config_path = Path('config.json')
        config = Config(config_path if config_path.exists() else None, fallback_to_defaults=False)
        if config.errors:
            return EXIT_USAGE

        try:
            return COMMANDS[args.command](args, config)
        except ScenarioNotFound as e:
            print_error(format_unknown_scenario_error(e.name, len(build_default_catalog())))
            return EXIT_USAGE
    except KeyboardInterrupt:
        print(Fore.YELLOW + "\n\nOperation interrupted by user" + Style.RESET_ALL)
        logging.info("User interrupted operation")
        return EXIT_TEST_FAILURES
    finally:
        deinit()


if __name__ == '__main__':
    sys.exit(main())
