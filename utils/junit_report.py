"""
JUnit XML export of a run report.

One <testsuite> per scenario suite, one <testcase> per invocation; failed
invocations carry a <failure> element with the simulated message. Test names
get an ``[n]`` suffix when a scenario ran more than once so the importer
treats each invocation as a separate test run of the same case.
"""

import xml.etree.ElementTree as ET
from collections import OrderedDict
from pathlib import Path

from core.runner import RunReport


def build_junit_tree(report: RunReport, name: str = 'flakesim') -> ET.ElementTree:
    """Build the XML tree for ``report``."""
    summaries = {s.scenario_id: s for s in report.summaries}
    suites = OrderedDict()
    for result in report.results:
        suites.setdefault(summaries[result.scenario_id].suite, []).append(result)

    root = ET.Element('testsuites', {
        'name': name,
        'tests': str(report.total_invocations),
        'failures': str(report.total_failures),
        'time': f"{report.duration_seconds:.3f}",
    })

    for suite_name, results in suites.items():
        failures = sum(1 for r in results if not r.passed)
        suite_el = ET.SubElement(root, 'testsuite', {
            'name': suite_name,
            'tests': str(len(results)),
            'failures': str(failures),
            'errors': '0',
            'time': f"{sum(r.duration_seconds for r in results):.3f}",
        })
        for result in results:
            case_name = summaries[result.scenario_id].name
            if report.iterations > 1:
                case_name = f"{case_name} [{result.invocation}]"
            case_el = ET.SubElement(suite_el, 'testcase', {
                'classname': suite_name,
                'name': case_name,
                'time': f"{result.duration_seconds:.3f}",
            })
            if not result.passed:
                failure = ET.SubElement(case_el, 'failure', {
                    'message': result.message or '',
                    'type': result.error_type or 'AssertionError',
                })
                failure.text = result.message

    return ET.ElementTree(root)


def write_junit_report(report: RunReport, path: Path, name: str = 'flakesim') -> Path:
    """Write the JUnit XML file, creating parent folders as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    build_junit_tree(report, name).write(path, encoding='utf-8', xml_declaration=True)
    return path
