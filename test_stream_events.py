#!/usr/bin/env python3
"""
Tests for the stream state machine.
"""

from unittest.mock import Mock

import pytest

from task_stream.streaming.events import process_sse_event
from task_stream.streaming.models import StreamResult, StreamState, StreamStatus


@pytest.fixture
def state():
    return StreamState()


@pytest.fixture
def log():
    return Mock()


class TestEventTypes:
    """Test the effect of each event type."""

    def test_start(self, state, log):
        """Test that start only logs."""
        process_sse_event("start", "{}", state, log=log)
        assert state == StreamState()
        log.info.assert_called_once_with("[Stream] Task execution started")

    def test_stdout_appends(self, state, log):
        """Test that stdout text is appended and echoed."""
        process_sse_event("stdout", '{"data":"a"}', state, log=log)
        process_sse_event("stdout", '{"data":"b"}', state, log=log)
        assert state.output_buffer == "ab"
        assert log.info.call_count == 2
        log.info.assert_called_with("b")

    def test_stdout_empty_text(self, state, log):
        """Test that empty or missing stdout text is neither stored nor echoed."""
        process_sse_event("stdout", '{"data":""}', state, log=log)
        process_sse_event("stdout", "{}", state, log=log)
        assert state.output_buffer == ""
        log.info.assert_not_called()

    def test_stderr_is_logged_not_accumulated(self, state, log):
        """Test that stderr text is a warning and not part of the output."""
        process_sse_event("stderr", '{"data":"oops"}', state, log=log)
        assert state.output_buffer == ""
        log.warning.assert_called_once_with("[stderr] oops")

    def test_stderr_empty_text(self, state, log):
        """Test that empty stderr text is not logged."""
        process_sse_event("stderr", '{"data":""}', state, log=log)
        log.warning.assert_not_called()

    def test_complete_with_cost(self, state, log):
        """Test that complete sets the status and cost."""
        process_sse_event("complete", '{"costUsd": 1.5}', state, log=log)
        assert state.status is StreamStatus.COMPLETED
        assert state.cost_usd == 1.5
        log.info.assert_called_once_with("[Stream] Task completed")

    def test_complete_without_cost(self, state, log):
        """Test that complete without a cost leaves cost unset."""
        process_sse_event("complete", "{}", state, log=log)
        assert state.status is StreamStatus.COMPLETED
        assert state.cost_usd is None

    def test_complete_ignores_non_numeric_cost(self, state, log):
        """Test that a non-numeric cost is ignored."""
        process_sse_event("complete", '{"costUsd": "free"}', state, log=log)
        assert state.status is StreamStatus.COMPLETED
        assert state.cost_usd is None

    def test_error_with_message(self, state, log):
        """Test that error sets the status and message."""
        process_sse_event("error", '{"error":"disk full"}', state, log=log)
        assert state.status is StreamStatus.FAILED
        assert state.error == "disk full"
        log.error.assert_called_once_with("[Stream] Task failed: disk full")

    def test_error_without_message(self, state, log):
        """Test that error without a message falls back to Unknown error."""
        process_sse_event("error", "{}", state, log=log)
        assert state.status is StreamStatus.FAILED
        assert state.error == "Unknown error"

    def test_unknown_event_type(self, state, log):
        """Test that an unknown event type is logged at debug only."""
        process_sse_event("progress", '{"pct": 50}', state, log=log)
        assert state == StreamState()
        log.debug.assert_called_once_with("Unknown event type", event_type="progress")


class TestPermissiveParsing:
    """Malformed input never mutates state or raises."""

    @pytest.mark.parametrize("raw", ["not json", "", '{"data":', "[1, 2]", "42", "null"])
    def test_invalid_payload(self, state, log, raw):
        """Test that invalid or non-object payloads are skipped."""
        process_sse_event("stdout", raw, state, log=log)
        process_sse_event("error", raw, state, log=log)
        assert state == StreamState()
        assert log.debug.called

    def test_unrecognized_fields_ignored(self, state, log):
        """Test that extra payload fields do not matter."""
        process_sse_event("stdout", '{"data":"x","extra":true}', state, log=log)
        assert state.output_buffer == "x"


class TestTerminality:
    """Terminal status is never overwritten."""

    def test_error_after_complete_is_ignored(self, state, log):
        """Test that a late error does not replace completed."""
        process_sse_event("complete", '{"costUsd": 2}', state, log=log)
        process_sse_event("error", '{"error":"late"}', state, log=log)
        assert state.status is StreamStatus.COMPLETED
        assert state.error is None

    def test_second_complete_does_not_change_cost(self, state, log):
        """Test that the first cost wins."""
        process_sse_event("complete", '{"costUsd": 2}', state, log=log)
        process_sse_event("complete", '{"costUsd": 3}', state, log=log)
        assert state.cost_usd == 2.0

    def test_output_after_failure_is_ignored(self, state, log):
        """Test that stdout after failure is not accumulated."""
        process_sse_event("error", '{"error":"boom"}', state, log=log)
        process_sse_event("stdout", '{"data":"late"}', state, log=log)
        assert state.output_buffer == ""


class TestStreamResult:
    """Test conversion of state into results."""

    def test_empty_output_becomes_none(self, state):
        """Test that an empty buffer becomes a missing output."""
        result = state.to_result()
        assert result == StreamResult(status=StreamStatus.UNKNOWN)
        assert result.to_dict() == {"status": "unknown", "error": None}

    def test_wire_shape(self):
        """Test the dictionary handed to the calling environment."""
        result = StreamResult(status=StreamStatus.COMPLETED, output="hi", cost_usd=0.1)
        assert result.to_dict() == {
            "status": "completed",
            "output": "hi",
            "costUsd": 0.1,
            "error": None,
        }

    def test_failed_requires_error(self):
        """Test that a failed result must carry an error."""
        with pytest.raises(ValueError):
            StreamResult(status=StreamStatus.FAILED)

    def test_timeout_requires_error(self):
        """Test that a timeout result must carry an error."""
        with pytest.raises(ValueError):
            StreamResult(status=StreamStatus.TIMEOUT)

    def test_terminal_statuses(self):
        """Test which statuses stop the read loop."""
        assert StreamStatus.COMPLETED.is_terminal
        assert StreamStatus.FAILED.is_terminal
        assert not StreamStatus.UNKNOWN.is_terminal
        assert not StreamStatus.TIMEOUT.is_terminal
