"""
Clear, actionable error message formatting.

All error messages follow the pattern:
  ERROR: [What failed]
    Reason: [Why it failed]
    Action: [What user should do]
    Location: [Where the problem is]
"""

import logging
from pathlib import Path
from typing import Optional


def format_error(
    what_failed: str,
    reason: str,
    action: str,
    location: Optional[Path] = None,
    details: Optional[str] = None
) -> str:
    """
    Format a clear, actionable error message.

    Args:
        what_failed: What operation failed (e.g., "Could not load scenarios")
        reason: Why it failed (e.g., "Threshold 1.5 is outside [0, 1]")
        action: What user should do (e.g., "Fix threshold_overrides in config.json")
        location: Where the problem occurred (file path, scenario id, etc.)
        details: Optional additional details

    Returns:
        Formatted error message
    """
    lines = [f"ERROR: {what_failed}"]
    lines.append(f"  Reason: {reason}")
    lines.append(f"  Action: {action}")

    if location:
        lines.append(f"  Location: {location}")

    if details:
        lines.append(f"  Details: {details}")

    return "\n".join(lines)


def log_error(
    what_failed: str,
    reason: str,
    action: str,
    location: Optional[Path] = None,
    details: Optional[str] = None
):
    """
    Log a clear, actionable error message.

    Same parameters as format_error, but logs it directly.
    """
    message = format_error(what_failed, reason, action, location, details)
    logging.error(message)


def format_threshold_error(error, location=None) -> str:
    """Format a rejected failure threshold."""
    return format_error(
        what_failed="Invalid failure threshold",
        reason=str(error),
        action="Use a failure rate between 0 and 1 (for example 0.3 for 30%)",
        location=location
    )


def format_unknown_scenario_error(name: str, available: int) -> str:
    """Format an unknown suite or scenario id."""
    return format_error(
        what_failed=f"Unknown scenario or suite: {name}",
        reason=f"None of the {available} catalog entries match",
        action="Run 'flakesim list' to see suite names and scenario ids"
    )


def format_pipeline_error(path: Path, reason: str, details: Optional[str] = None) -> str:
    """Format a pipeline declaration that could not be read."""
    if details and len(details) > 500:
        details = details[:500] + "..."
    return format_error(
        what_failed="Could not read pipeline declaration",
        reason=reason,
        action="Fix the JSON or regenerate it with 'flakesim pipeline --write'",
        location=path,
        details=details
    )
