"""
Structured Event Logging

Every scenario invocation is reported as a structured event:
- Machine-readable (JSON lines, one event per line)
- Mirrored to standard logging for the run log
- Grouped by session so a report importer can tell runs apart

The event stream is the test-report boundary: pass or fail-with-message per
invocation, nothing more.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any, Dict, List, Optional


logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur."""
    # Session tracking
    SESSION_STARTED = auto()
    SESSION_COMPLETED = auto()

    # Scenario outcomes
    SCENARIO_PASSED = auto()
    SCENARIO_FAILED = auto()

    # Configuration
    THRESHOLD_OVERRIDDEN = auto()


class EventSeverity(Enum):
    """Severity levels for events."""
    DEBUG = auto()
    INFO = auto()
    WARNING = auto()
    ERROR = auto()


@dataclass
class StructuredEvent:
    """
    A structured event with consistent format.

    All events have these core fields plus event-specific context.
    """
    event_id: str
    event_type: EventType
    timestamp: datetime
    severity: EventSeverity
    message: str
    context: Dict[str, Any] = field(default_factory=dict)
    session_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'event_id': self.event_id,
            'event_type': self.event_type.name,
            'timestamp': self.timestamp.isoformat(),
            'severity': self.severity.name,
            'message': self.message,
            'context': self.context,
            'session_id': self.session_id,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data: dict) -> 'StructuredEvent':
        """Create from dictionary."""
        data = data.copy()
        data['event_type'] = EventType[data['event_type']]
        data['severity'] = EventSeverity[data['severity']]
        data['timestamp'] = datetime.fromisoformat(data['timestamp'])
        return cls(**data)


class EventEmitter:
    """
    Emits structured events to an in-memory buffer, standard logging and,
    when a path is given, a JSON lines file.
    """

    def __init__(
        self,
        log_file: Optional[Path] = None,
        session_id: Optional[str] = None,
        enable_console: bool = True,
        buffer_events: bool = True
    ):
        """
        Initialize event emitter.

        Args:
            log_file: Path to event log file (JSON lines format); None keeps events in memory
            session_id: Session identifier for grouping events
            enable_console: Emit to the run log via standard logging
            buffer_events: Keep emitted events in memory for get_session_events/query_events;
                long CLI runs turn this off and rely on the file
        """
        self.log_file = Path(log_file) if log_file else None
        self.session_id = session_id or str(uuid.uuid4())
        self.enable_console = enable_console
        self.buffer_events = buffer_events
        self.event_buffer: List[StructuredEvent] = []

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

    def emit(
        self,
        event_type: EventType,
        message: str,
        severity: EventSeverity = EventSeverity.INFO,
        context: Optional[Dict] = None
    ) -> StructuredEvent:
        """
        Emit a structured event.

        Args:
            event_type: Type of event
            message: Human-readable message
            severity: Event severity
            context: Event-specific data

        Returns:
            The emitted event
        """
        event = StructuredEvent(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            timestamp=datetime.now(),
            severity=severity,
            message=message,
            context=context or {},
            session_id=self.session_id
        )

        if self.buffer_events:
            self.event_buffer.append(event)

        if self.enable_console:
            self._emit_to_console(event)

        if self.log_file:
            self._emit_to_file(event)

        return event

    def _emit_to_console(self, event: StructuredEvent):
        """Emit event via standard logging."""
        level_map = {
            EventSeverity.DEBUG: logging.DEBUG,
            EventSeverity.INFO: logging.INFO,
            EventSeverity.WARNING: logging.WARNING,
            EventSeverity.ERROR: logging.ERROR,
        }
        logger.log(
            level_map.get(event.severity, logging.INFO),
            f"[{event.event_type.name}] {event.message}"
        )

    def _emit_to_file(self, event: StructuredEvent):
        """Append event to the JSON lines file."""
        try:
            with open(self.log_file, 'a', encoding='utf-8') as f:
                f.write(event.to_json() + '\n')
        except OSError as e:
            logger.error(f"Failed to write event to file: {e}")

    def get_session_events(self) -> List[StructuredEvent]:
        """Get all events for current session."""
        return self.event_buffer.copy()

    def query_events(
        self,
        event_type: Optional[EventType] = None,
        severity: Optional[EventSeverity] = None
    ) -> List[StructuredEvent]:
        """Filter buffered events by type and/or severity."""
        filtered = self.event_buffer
        if event_type:
            filtered = [e for e in filtered if e.event_type == event_type]
        if severity:
            filtered = [e for e in filtered if e.severity == severity]
        return filtered


class EventBuilder:
    """Convenience methods for the events a run produces."""

    def __init__(self, emitter: EventEmitter):
        self.emitter = emitter

    def session_started(self, scenario_count: int, iterations: int, entropy: str) -> StructuredEvent:
        return self.emitter.emit(
            EventType.SESSION_STARTED,
            f"Running {scenario_count} scenarios x {iterations} iterations",
            context={
                'scenario_count': scenario_count,
                'iterations': iterations,
                'entropy': entropy
            }
        )

    def scenario_passed(self, scenario_id: str, invocation: int, duration: float) -> StructuredEvent:
        return self.emitter.emit(
            EventType.SCENARIO_PASSED,
            f"PASS {scenario_id} #{invocation}",
            severity=EventSeverity.DEBUG,
            context={
                'scenario_id': scenario_id,
                'invocation': invocation,
                'duration_seconds': duration
            }
        )

    def scenario_failed(
        self,
        scenario_id: str,
        invocation: int,
        duration: float,
        error_type: str,
        message: str
    ) -> StructuredEvent:
        return self.emitter.emit(
            EventType.SCENARIO_FAILED,
            f"FAIL {scenario_id} #{invocation}: {message}",
            severity=EventSeverity.WARNING,
            context={
                'scenario_id': scenario_id,
                'invocation': invocation,
                'duration_seconds': duration,
                'error_type': error_type,
                'error': message
            }
        )

    def threshold_overridden(self, scenario_id: str, old: float, new: float) -> StructuredEvent:
        return self.emitter.emit(
            EventType.THRESHOLD_OVERRIDDEN,
            f"Threshold for {scenario_id}: {old} -> {new}",
            context={'scenario_id': scenario_id, 'old': old, 'new': new}
        )

    def session_completed(self, invocations: int, failures: int, duration: float) -> StructuredEvent:
        return self.emitter.emit(
            EventType.SESSION_COMPLETED,
            f"Session completed: {failures}/{invocations} invocations failed in {duration:.2f}s",
            context={
                'invocations': invocations,
                'failures': failures,
                'duration_seconds': duration,
                'session_id': self.emitter.session_id
            }
        )


class EventLogReader:
    """
    Reads a JSON lines event log back for reporting.

    Malformed lines are skipped.
    """

    def __init__(self, log_file: Path):
        self.log_file = Path(log_file)
        self.events: List[StructuredEvent] = []

    def load_events(self, session_id: Optional[str] = None) -> List[StructuredEvent]:
        """Load events, optionally restricted to one session."""
        self.events = []
        if not self.log_file.exists():
            return self.events

        with open(self.log_file, 'r', encoding='utf-8') as f:
            for line in f:
                try:
                    event = StructuredEvent.from_dict(json.loads(line))
                except (json.JSONDecodeError, KeyError, ValueError, TypeError):
                    continue
                if session_id and event.session_id != session_id:
                    continue
                self.events.append(event)

        logger.info(f"Loaded {len(self.events)} events from {self.log_file}")
        return self.events

    def outcome_counts(self) -> Dict[str, Dict[str, int]]:
        """Map scenario id to its pass/fail counts."""
        counts: Dict[str, Dict[str, int]] = {}
        for event in self.events:
            if event.event_type not in (EventType.SCENARIO_PASSED, EventType.SCENARIO_FAILED):
                continue
            entry = counts.setdefault(event.context['scenario_id'], {'passed': 0, 'failed': 0})
            if event.event_type is EventType.SCENARIO_PASSED:
                entry['passed'] += 1
            else:
                entry['failed'] += 1
        return counts
