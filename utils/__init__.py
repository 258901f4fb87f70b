"""
flakesim Utilities
Progress display, report export and CLI helpers.
"""

from .progress import ProgressTracker

__all__ = ['ProgressTracker']
