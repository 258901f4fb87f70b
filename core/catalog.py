"""
Demo scenario catalog.

Suites are laid out to produce the pass/fail mix shown on a CI test report:
flaky suites that fail at fixed rates, stable suites that always pass, and
regression suites that always fail with the same message.
"""

import asyncio
import math
import re
import time
from datetime import date

from .errors import SimulatedFlakyFailure, SimulatedRegression
from .scenarios import Scenario, ScenarioCatalog, ScenarioContext, ScenarioKind, flaky, run_steps


MEMORY_PRESSURE_BYTES = 50 * 1024 * 1024


def _require(condition: bool, message: str):
    """Stable-scenario assertion that survives ``python -O``."""
    if not condition:
        raise AssertionError(message)


def _regression(condition: bool, message: str):
    if not condition:
        raise SimulatedRegression(message)


# ============================================================================
# Flaky: Race Condition Tests
# ============================================================================

def _async_wait_without_join(ctx: ScenarioContext):
    # The background completion either lands inside the 50ms wait or it doesn't
    value = None if ctx.fails() else 'completed'
    if value != 'completed':
        raise SimulatedFlakyFailure(f"Expected 'completed', got {value!r}")


def _concurrent_array_modifications(ctx: ScenarioContext):
    results = list(range(10))
    expected = 9 if ctx.fails() else 10
    if len(results) != expected:
        raise SimulatedFlakyFailure(f"Expected {expected} results, got {len(results)}")


# ============================================================================
# Flaky: Resource Dependent Tests
# ============================================================================

def _memory_intensive_operation(ctx: ScenarioContext):
    increase_bytes = 64 * 1024 * 1024
    limit = 1 if ctx.fails() else 200 * 1024 * 1024
    if increase_bytes >= limit:
        raise SimulatedFlakyFailure(
            f"Heap grew by {increase_bytes} bytes, limit was {limit} bytes"
        )


def _cpu_bound_with_timeout(ctx: ScenarioContext):
    budget_ms = 0.0 if ctx.fails() else 5000.0
    start = time.perf_counter()
    total = 0.0
    for i in range(20000):
        total += math.sqrt(i)
    duration_ms = (time.perf_counter() - start) * 1000
    if not duration_ms < budget_ms:
        raise SimulatedFlakyFailure(
            f"Calculation took {duration_ms:.1f}ms, budget was {budget_ms:.0f}ms"
        )


# ============================================================================
# Flaky: Network Dependent Tests
# ============================================================================

def _unreliable_api_call(ctx: ScenarioContext):
    if not ctx.fails():
        return
    # Timed out; half of the time the handler swallows it
    if ctx.draw() < 0.5:
        raise SimulatedFlakyFailure('Network timeout')


def _dns_resolution_timing(ctx: ScenarioContext):
    elapsed_ms = 120
    limit_ms = 50 if ctx.fails() else 500
    if elapsed_ms >= limit_ms:
        raise SimulatedFlakyFailure(f"DNS lookup took {elapsed_ms}ms, limit was {limit_ms}ms")


# ============================================================================
# Flaky: Order Dependent Tests
# ============================================================================

def _set_shared_state(ctx: ScenarioContext):
    ctx.state['shared'] = 0 if ctx.fails() else 42


def _read_shared_state(ctx: ScenarioContext):
    shared = ctx.state['shared']
    if shared != 42 and ctx.draw() < 0.5:
        raise SimulatedFlakyFailure(f"Expected shared state 42, got {shared}")


def _double_shared_state(ctx: ScenarioContext):
    ctx.state['shared'] = ctx.state['shared'] * 2
    if ctx.state['shared'] != 84:
        raise SimulatedFlakyFailure(f"Expected doubled state 84, got {ctx.state['shared']}")


def _shared_state_chain(ctx: ScenarioContext):
    run_steps(ctx, (_set_shared_state, _read_shared_state, _double_shared_state))


# ============================================================================
# Flaky: Time Sensitive Tests
# ============================================================================

def _date_based_logic(ctx: ScenarioContext):
    hour = 9
    if ctx.fails():
        if hour != 13:
            raise SimulatedFlakyFailure(f"Expected hour 13, got {hour}")
    _require(0 <= hour <= 23, f"Hour out of range: {hour}")


def _timestamp_precision(ctx: ScenarioContext):
    diff_ms = 2
    limit_ms = 0 if ctx.fails() else 100
    if diff_ms > limit_ms:
        raise SimulatedFlakyFailure(f"Timestamp drift {diff_ms}ms exceeds {limit_ms}ms")


# ============================================================================
# Flaky: screenshot pattern suites
# ============================================================================

def _system_info_access(ctx: ScenarioContext):
    if ctx.memory_usage() > MEMORY_PRESSURE_BYTES and ctx.fails():
        raise SimulatedFlakyFailure('System info access failed under memory pressure')


def _integration_components(ctx: ScenarioContext):
    component = ctx.choose(('parser', 'validator', 'executor'))
    ctx.check(f"com.ansorgit.plugins.bash.lang.parser: {component} integration failed")


def _validate_sources(ctx: ScenarioContext):
    source = ctx.choose(('local', 'remote', 'cache'))
    if source == 'remote' and ctx.fails():
        raise SimulatedFlakyFailure('Remote source unavailable')


# ============================================================================
# Stable suites
# ============================================================================

def _basic_arithmetic(ctx: ScenarioContext):
    _require(2 + 2 == 4, "2 + 2 != 4")
    _require(10 - 5 == 5, "10 - 5 != 5")
    _require(3 * 4 == 12, "3 * 4 != 12")
    _require(15 / 3 == 5, "15 / 3 != 5")


def _mathematical_constants(ctx: ScenarioContext):
    _require(math.isclose(math.pi, 3.14159, abs_tol=1e-5), "pi drifted")
    _require(math.isclose(math.e, 2.71828, abs_tol=1e-5), "e drifted")
    _require(math.isclose(math.sqrt(2), 1.41421, abs_tol=1e-5), "sqrt(2) drifted")


def _list_operations(ctx: ScenarioContext):
    values = [1, 2, 3, 4, 5]
    _require(len(values) == 5, "wrong length")
    _require(sum(values) == 15, "wrong sum")
    _require([x for x in values if x > 3] == [4, 5], "wrong filter")
    _require([x * 2 for x in values] == [2, 4, 6, 8, 10], "wrong map")


def _string_manipulation(ctx: ScenarioContext):
    text = 'TeamCity Intelligence'
    _require(len(text) == 21, "wrong length")
    _require(text.upper() == 'TEAMCITY INTELLIGENCE', "wrong upper")
    _require(text.lower() == 'teamcity intelligence', "wrong lower")
    _require('Intelligence' in text, "substring missing")


def _string_parsing(ctx: ScenarioContext):
    _require(int('42') == 42, "int parse")
    _require(math.isclose(float('3.14'), 3.14), "float parse")
    _require('hello,world'.split(',') == ['hello', 'world'], "split")
    _require(''.join(['Team', 'City']) == 'TeamCity', "join")


def _object_creation(ctx: ScenarioContext):
    product = {
        'name': 'TeamCity',
        'version': 2023.11,
        'features': ['CI', 'CD', 'Test Intelligence'],
    }
    _require(product['name'] == 'TeamCity', "name")
    _require(product['version'] == 2023.11, "version")
    _require(len(product['features']) == 3, "feature count")
    _require(product['features'][2] == 'Test Intelligence', "feature lookup")


def _object_methods(ctx: ScenarioContext):
    data = {'a': 1, 'b': 2, 'c': 3}
    _require(list(data.keys()) == ['a', 'b', 'c'], "keys")
    _require(list(data.values()) == [1, 2, 3], "values")
    _require(len(data.items()) == 3, "items")


async def _resolve(value):
    return value


def _resolved_coroutine(ctx: ScenarioContext):
    result = asyncio.run(_resolve('success'))
    _require(result == 'success', f"Expected 'success', got {result!r}")


def _await_with_timeout(ctx: ScenarioContext):
    # Completes without yielding, so the timeout never fires
    result = asyncio.run(asyncio.wait_for(_resolve('done'), timeout=0.2))
    _require(result == 'done', f"Expected 'done', got {result!r}")


async def _gather_values():
    return await asyncio.gather(_resolve(1), _resolve(2), _resolve(3))


def _gather_all(ctx: ScenarioContext):
    results = asyncio.run(_gather_values())
    _require(results == [1, 2, 3], f"Expected [1, 2, 3], got {results!r}")


def _throw_and_catch(ctx: ScenarioContext):
    def throw_error():
        raise RuntimeError('Test error')

    try:
        throw_error()
    except RuntimeError as e:
        _require(str(e) == 'Test error', f"Unexpected message {e}")
    else:
        raise AssertionError("throw_error did not raise")


def _error_handling(ctx: ScenarioContext):
    caught = False
    try:
        raise ValueError('Caught error')
    except ValueError:
        caught = True
    _require(caught, "exception was not caught")


def _set_operations(ctx: ScenarioContext):
    values = {1, 2, 3, 3, 4}
    _require(len(values) == 4, "set size")
    _require(3 in values and 5 not in values, "set membership")


def _map_operations(ctx: ScenarioContext):
    mapping = {}
    mapping['key1'] = 'value1'
    mapping['key2'] = 'value2'
    _require(len(mapping) == 2, "map size")
    _require(mapping.get('key1') == 'value1', "map get")
    _require('key2' in mapping, "map membership")


def _basic_operations(ctx: ScenarioContext):
    result = 2 + 2
    _require(result == 4, f"2 + 2 gave {result}")


def _string_length(ctx: ScenarioContext):
    _require(len('TeamCity') == 8, "len('TeamCity') != 8")


def _config_always_valid(ctx: ScenarioContext):
    config = {'valid': True}
    _require(config['valid'] is True, "config invalid")


def _documentation_format(ctx: ScenarioContext):
    doc_format = 'markdown'
    _require(doc_format == 'markdown', f"Unexpected format {doc_format!r}")


# ============================================================================
# Regression suites
# ============================================================================

def _calculate_invoice_total(items):
    # Bug: quantity is ignored
    return sum(item['price'] for item in items)


def _invoice_total(ctx: ScenarioContext):
    items = [
        {'price': 10, 'quantity': 2},
        {'price': 15, 'quantity': 3},
        {'price': 5, 'quantity': 1},
    ]
    total = _calculate_invoice_total(items)
    _regression(total == 70, f"Invoice total: expected 70, got {total}")


def _get_user_full_name(user):
    # Bug: missing names are not handled
    return user['first_name'] + ' ' + user['last_name']


def _user_full_name(ctx: ScenarioContext):
    try:
        full_name = _get_user_full_name({'id': 1})
    except KeyError as e:
        raise SimulatedRegression(f"get_user_full_name raised KeyError: {e}") from None
    _regression(full_name == 'John Doe', f"Expected 'John Doe', got {full_name!r}")


def _third_element(ctx: ScenarioContext):
    short = [1, 2]
    try:
        result = short[2]
    except IndexError as e:
        raise SimulatedRegression(f"get_third_element raised IndexError: {e}") from None
    _regression(result == 3, f"Expected 3, got {result}")


def _format_date(value: date) -> str:
    # Bug: month is zero-based here
    return f"{value.year}-{value.month - 1}-{value.day}"


def _date_formatting(ctx: ScenarioContext):
    formatted = _format_date(date(2024, 3, 15))
    _regression(formatted == '2024-3-15', f"Expected '2024-3-15', got {formatted!r}")


def _fetch_user_data(on_done):
    # Bug: on_done is never called
    return None


def _hanging_fetch(ctx: ScenarioContext):
    received = []
    _fetch_user_data(received.append)
    _regression(
        received == [{'id': 1, 'name': 'Test User'}],
        "fetch_user_data never completed within 100ms"
    )


def _calculate_discount(price, percent):
    # Bug: 50% cap is not enforced
    return price * (percent / 100)


def _discount_cap(ctx: ScenarioContext):
    discount = _calculate_discount(100, 75)
    _regression(discount <= 50, f"Discount {discount:g} exceeds the 50 cap")


def _is_valid_password(password: str) -> bool:
    # Bug: special characters are not required
    return (
        len(password) >= 8
        and re.search('[A-Z]', password) is not None
        and re.search('[0-9]', password) is not None
    )


def _password_rule(ctx: ScenarioContext):
    _regression(
        not _is_valid_password('Password123'),
        "Password without special characters was accepted"
    )


def _can_purchase_alcohol(birth: date, today: date) -> bool:
    # Bug: birthday not reached yet this year is ignored
    return today.year - birth.year >= 21


def _age_verification(ctx: ScenarioContext):
    allowed = _can_purchase_alcohol(date(2003, 3, 16), today=date(2024, 3, 15))
    _regression(not allowed, "20-year-old customer was allowed to purchase alcohol")


def _parse_api_response(response):
    # Bug: assumes 'data' is present
    return [item['id'] for item in response['data']['items']]


def _api_response_parsing(ctx: ScenarioContext):
    try:
        _parse_api_response({'error': 'No data available', 'status': 200})
    except KeyError as e:
        raise SimulatedRegression(f"parse_api_response raised KeyError: {e}") from None


def _build_connection_string(config):
    # Bug: port separated by '/' instead of ':'
    return f"mongodb://{config['host']}/{config['port']}/{config['database']}"


def _connection_string(ctx: ScenarioContext):
    result = _build_connection_string({'host': 'localhost', 'port': 27017, 'database': 'testdb'})
    expected = 'mongodb://localhost:27017/testdb'
    _regression(result == expected, f"Expected {expected!r}, got {result!r}")


def _always_raise(message: str):
    def body(ctx: ScenarioContext):
        raise SimulatedRegression(message)
    return body


def _stable(suite, name, body, description=''):
    return Scenario(suite, name, ScenarioKind.STABLE, body, description=description)


def _flaky(suite, name, body, threshold, description=''):
    return Scenario(suite, name, ScenarioKind.FLAKY, body, threshold, description)


def _regress(suite, name, body, description=''):
    return Scenario(suite, name, ScenarioKind.REGRESSION, body, description=description)


def build_default_catalog() -> ScenarioCatalog:
    """The full demo catalog in report order."""
    race = 'Race Condition Tests'
    resource = 'Resource Dependent Tests'
    network = 'Network Dependent Tests'
    order = 'Order Dependent Tests'
    timing = 'Time Sensitive Tests'
    docs = 'InternalCommandDocumentationTest'
    sysinfo = 'SystemInfopageDocSourceTest'
    integration = 'IntegrationTest'
    sysinfo_ext = 'SystemInfopageDocSourceTest extended'
    regressions = 'Genuine Failures - Bug Regression Tests'
    business = 'Genuine Failures - Business Logic Errors'
    integration_errors = 'Genuine Failures - Integration Errors'
    known = 'Known Regression Tests'

    return ScenarioCatalog([
        _flaky(race, 'async operation without proper wait', _async_wait_without_join, 0.3),
        _flaky(race, 'concurrent array modifications', _concurrent_array_modifications, 0.25),
        _flaky(resource, 'memory intensive operation', _memory_intensive_operation, 0.2),
        _flaky(resource, 'CPU bound calculation with timeout', _cpu_bound_with_timeout, 0.15),
        _flaky(network, 'unreliable external API call', _unreliable_api_call, 0.3,
               "Times out at the threshold rate; half of the timeouts are re-raised"),
        _flaky(network, 'DNS resolution timing', _dns_resolution_timing, 0.25),
        _flaky(order, 'shared state chain', _shared_state_chain, 0.3,
               "Set, read and double a value through one invocation's context"),
        _flaky(timing, 'date-based logic', _date_based_logic, 0.2),
        _flaky(timing, 'timestamp precision', _timestamp_precision, 0.25),

        flaky(docs, 'testResourceName should validate documentation paths', 0.3,
              'com.ansorgit.plugins.bash.documentation: Resource not found'),
        flaky(docs, 'testResourceAvailability should check resource existence', 0.3,
              'Documentation resource temporarily unavailable'),
        _stable(docs, 'testDocumentationFormat should validate format', _documentation_format),
        flaky(sysinfo, 'testInfoForFileExists should verify file presence', 0.25,
              'com.ansorgit.plugins.bash.documentation: File not found'),
        _flaky(sysinfo, 'testSystemInfoAccess should check system access', _system_info_access, 0.4,
               "Only fails while process memory is above 50MB"),
        _flaky(integration, 'testIntegration12 should integrate components',
               _integration_components, 0.4),
        flaky(integration, 'testIntegration15 should validate integration flow', 0.4,
              'Integration timeout exceeded'),
        flaky(integration, 'testIntegration18 should complete integration cycle', 0.35,
              'Integration cycle incomplete'),
        flaky(sysinfo_ext, 'testIntegration1 should process documentation', 0.3,
              'com.ansorgit.plugins.bash.documentation'),
        _flaky(sysinfo_ext, 'testIntegration2 should validate sources', _validate_sources, 0.5,
               "Fails only when the remote source is picked"),

        _stable('Stable Mathematical Operations', 'basic arithmetic operations', _basic_arithmetic),
        _stable('Stable Mathematical Operations', 'mathematical constants', _mathematical_constants),
        _stable('Stable Mathematical Operations', 'list operations', _list_operations),
        _stable('Stable String Operations', 'string manipulation', _string_manipulation),
        _stable('Stable String Operations', 'string parsing', _string_parsing),
        _stable('Stable Object Operations', 'object creation and access', _object_creation),
        _stable('Stable Object Operations', 'object methods', _object_methods),
        _stable('Stable Async Operations', 'resolved promises', _resolved_coroutine),
        _stable('Stable Async Operations', 'async/await with timeout', _await_with_timeout),
        _stable('Stable Async Operations', 'promise all', _gather_all),
        _stable('Stable Error Handling', 'throwing and catching errors', _throw_and_catch),
        _stable('Stable Error Handling', 'try-except blocks', _error_handling),
        _stable('Stable Data Structures', 'set operations', _set_operations),
        _stable('Stable Data Structures', 'Map operations', _map_operations),
        _stable('Stable Test Suite', 'configuration validation should always pass', _config_always_valid),
        _stable('Stable Test Suite', 'basic operations should work consistently', _basic_operations),
        _stable('Stable Test Suite', 'string operations should be reliable', _string_length),

        _regress(regressions, 'REGRESSION: calculation bug in invoice total', _invoice_total),
        _regress(regressions, 'REGRESSION: null pointer in user service', _user_full_name),
        _regress(regressions, 'REGRESSION: array index out of bounds', _third_element),
        _regress(regressions, 'REGRESSION: incorrect date formatting', _date_formatting),
        _regress(regressions, 'REGRESSION: async operation never completes', _hanging_fetch),
        _regress(business, 'FAILED: discount calculation exceeds maximum allowed', _discount_cap),
        _regress(business, 'FAILED: password validation missing special character check', _password_rule),
        _regress(business, 'FAILED: age verification allows minors', _age_verification),
        _regress(integration_errors, 'FAILED: API response parsing error', _api_response_parsing),
        _regress(integration_errors, 'FAILED: database connection string malformed', _connection_string),
        _regress(known, 'REGRESSION: parser bug should be fixed',
                 _always_raise('Parser regression: unexpected token at line 42')),
        _regress(known, 'REGRESSION: memory leak in validator',
                 _always_raise('Memory leak detected in validation module')),
    ])
