"""
Test suite for structured_events module.

Tests cover:
- Event creation and serialization
- Event emission to memory and JSON lines file
- Event querying and filtering
- Reading an event log back into outcome counts
"""

import pytest
import json
from pathlib import Path
import sys
from datetime import datetime

sys.path.insert(0, str(Path(__file__).parent.parent))

from core.structured_events import (
    StructuredEvent,
    EventType,
    EventSeverity,
    EventEmitter,
    EventBuilder,
    EventLogReader
)


class TestStructuredEvent:
    """Test structured event data structure."""

    def test_event_serialization(self):
        """Test event serialization to dict/JSON."""
        event = StructuredEvent(
            event_id="test123",
            event_type=EventType.SCENARIO_FAILED,
            timestamp=datetime(2024, 3, 15, 12, 0, 0),
            severity=EventSeverity.WARNING,
            message="FAIL IntegrationTest::x #1",
            context={'scenario_id': 'IntegrationTest::x'}
        )

        data = json.loads(event.to_json())
        assert data['event_id'] == "test123"
        assert data['event_type'] == 'SCENARIO_FAILED'
        assert data['severity'] == 'WARNING'
        assert data['timestamp'] == '2024-03-15T12:00:00'
        assert data['context']['scenario_id'] == 'IntegrationTest::x'

    def test_event_from_dict(self):
        """Test event deserialization restores enums and timestamp."""
        event = StructuredEvent(
            event_id="abc",
            event_type=EventType.SESSION_STARTED,
            timestamp=datetime(2024, 1, 1, 8, 30),
            severity=EventSeverity.INFO,
            message="Running",
            session_id="s1"
        )

        restored = StructuredEvent.from_dict(event.to_dict())
        assert restored == event


class TestEventEmitter:
    """Test event emission."""

    def test_emit_buffers_event(self):
        emitter = EventEmitter(enable_console=False)
        event = emitter.emit(EventType.SESSION_STARTED, "Running 3 scenarios")

        assert event.session_id == emitter.session_id
        assert emitter.get_session_events() == [event]

    def test_session_id_defaults_to_unique(self):
        assert EventEmitter(enable_console=False).session_id != EventEmitter(enable_console=False).session_id

    def test_emit_writes_json_lines(self, tmp_path):
        log_file = tmp_path / 'nested' / 'events.jsonl'
        emitter = EventEmitter(log_file=log_file, session_id='s1', enable_console=False)
        emitter.emit(EventType.SESSION_STARTED, "start")
        emitter.emit(EventType.SESSION_COMPLETED, "done")

        lines = log_file.read_text(encoding='utf-8').splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])['session_id'] == 's1'
        assert json.loads(lines[1])['event_type'] == 'SESSION_COMPLETED'

    def test_no_file_without_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        EventEmitter(enable_console=False).emit(EventType.SESSION_STARTED, "start")
        assert list(tmp_path.iterdir()) == []

    def test_console_emission_uses_logging(self, caplog):
        emitter = EventEmitter()
        with caplog.at_level('WARNING', logger='core.structured_events'):
            emitter.emit(EventType.SCENARIO_FAILED, "boom", severity=EventSeverity.WARNING)
        assert "[SCENARIO_FAILED] boom" in caplog.text

    def test_query_events(self):
        emitter = EventEmitter(enable_console=False)
        emitter.emit(EventType.SCENARIO_PASSED, "p", severity=EventSeverity.DEBUG)
        emitter.emit(EventType.SCENARIO_FAILED, "f", severity=EventSeverity.WARNING)
        emitter.emit(EventType.SCENARIO_PASSED, "p2", severity=EventSeverity.DEBUG)

        assert len(emitter.query_events(event_type=EventType.SCENARIO_PASSED)) == 2
        assert [e.message for e in emitter.query_events(severity=EventSeverity.WARNING)] == ["f"]
        assert len(emitter.query_events()) == 3


class TestEventBuilder:
    """Test convenience builders."""

    def test_scenario_failed_context(self, event_builder):
        event = event_builder.scenario_failed(
            'Known Regression Tests::leak', 3, 0.01, 'SimulatedRegression', 'Memory leak'
        )
        assert event.severity == EventSeverity.WARNING
        assert event.context == {
            'scenario_id': 'Known Regression Tests::leak',
            'invocation': 3,
            'duration_seconds': 0.01,
            'error_type': 'SimulatedRegression',
            'error': 'Memory leak'
        }
        assert "FAIL Known Regression Tests::leak #3: Memory leak" == event.message

    def test_threshold_overridden(self, event_builder):
        event = event_builder.threshold_overridden('IntegrationTest::x', 0.4, 0.9)
        assert event.event_type == EventType.THRESHOLD_OVERRIDDEN
        assert event.context['new'] == 0.9

    def test_session_completed_carries_session_id(self, event_builder):
        event = event_builder.session_completed(10, 4, 1.5)
        assert event.context['session_id'] == event_builder.emitter.session_id
        assert "4/10" in event.message


class TestEventLogReader:
    """Test reading events back."""

    @pytest.fixture
    def log_file(self, tmp_path):
        path = tmp_path / 'events.jsonl'
        builder = EventBuilder(EventEmitter(log_file=path, session_id='run-1', enable_console=False))
        builder.session_started(2, 2, 'SeededEntropy(seed=1)')
        builder.scenario_passed('S::a', 1, 0.0)
        builder.scenario_failed('S::a', 2, 0.0, 'SimulatedFlakyFailure', 'flaky')
        builder.scenario_failed('S::b', 1, 0.0, 'SimulatedRegression', 'broken')
        builder.scenario_failed('S::b', 2, 0.0, 'SimulatedRegression', 'broken')
        other = EventBuilder(EventEmitter(log_file=path, session_id='run-2', enable_console=False))
        other.scenario_passed('S::a', 1, 0.0)
        return path

    def test_missing_file_returns_empty(self, tmp_path):
        assert EventLogReader(tmp_path / 'absent.jsonl').load_events() == []

    def test_load_all_sessions(self, log_file):
        assert len(EventLogReader(log_file).load_events()) == 6

    def test_load_one_session(self, log_file):
        events = EventLogReader(log_file).load_events(session_id='run-2')
        assert len(events) == 1
        assert events[0].event_type == EventType.SCENARIO_PASSED

    def test_malformed_lines_skipped(self, log_file):
        with open(log_file, 'a', encoding='utf-8') as f:
            f.write("not json\n")
            f.write(json.dumps({'event_type': 'NOPE'}) + "\n")
        assert len(EventLogReader(log_file).load_events()) == 6

    def test_outcome_counts(self, log_file):
        reader = EventLogReader(log_file)
        reader.load_events(session_id='run-1')
        assert reader.outcome_counts() == {
            'S::a': {'passed': 1, 'failed': 1},
            'S::b': {'passed': 0, 'failed': 2},
        }

    def test_unbuffered_emitter_still_writes_file(self, tmp_path):
        log_file = tmp_path / 'events.jsonl'
        emitter = EventEmitter(log_file=log_file, enable_console=False, buffer_events=False)
        for i in range(50):
            emitter.emit(EventType.SCENARIO_PASSED, f"PASS #{i}", severity=EventSeverity.DEBUG)

        assert emitter.get_session_events() == []
        assert emitter.query_events(EventType.SCENARIO_PASSED) == []
        assert len(log_file.read_text(encoding='utf-8').splitlines()) == 50
