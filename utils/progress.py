"""
Progress tracking and display for flakesim runs.
"""

import threading
from tqdm import tqdm
from typing import Optional


class ProgressTracker:
    """Manages progress bar display and updates with thread safety."""

    def __init__(self, disable: bool = False):
        """
        Initialize the progress tracker.

        Args:
            disable: Keep the tracker silent (non-interactive output)
        """
        self.pbar: Optional[tqdm] = None
        self.disable = disable
        self._lock = threading.Lock()

    def start(self, total: int, desc: str = "Running", unit: str = "run"):
        """
        Start a new progress bar.

        Args:
            total: Total number of invocations
            desc: Description to display
            unit: Unit name for progress
        """
        with self._lock:
            self.pbar = tqdm(total=total, desc=desc, unit=unit, disable=self.disable, leave=False)

    def update(self, n: int = 1, desc: Optional[str] = None):
        """
        Update progress bar.

        Args:
            n: Number of items to increment
            desc: New description (optional)
        """
        with self._lock:
            if self.pbar:
                if desc:
                    self.pbar.set_description(desc)
                self.pbar.update(n)

    def close(self):
        """Close the progress bar."""
        with self._lock:
            if self.pbar:
                self.pbar.close()
                self.pbar = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
