"""
Chaos Testing Infrastructure

Fault injection for the environmental inputs scenario bodies depend on.
Each test pins one fault and checks that the runner still reports
outcomes correctly and never mistakes a harness fault for a test failure.

Chaos testing philosophy:
- Inject failures systematically, not randomly
- Test one failure mode at a time for clarity
- Harness faults must propagate, never be tallied as test failures
"""

from .fault_injectors import (
    MemoryPressureInjector,
    SlowClockInjector,
    FailingEntropy,
    multiple_faults,
)

__all__ = [
    'MemoryPressureInjector',
    'SlowClockInjector',
    'FailingEntropy',
    'multiple_faults',
]
