"""Unit tests for custom exception hierarchy"""
import pytest
import psycopg
from datetime import datetime
from sprintdesk.exceptions import (
    SprintDeskError,
    DatabaseError,
    ConnectionError,
    QueryError,
    ConcurrentUpdateError,
    ConfigurationError,
    AchievementError,
    wrap_external_exception
)


class TestSprintDeskError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = SprintDeskError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)
        assert error.timestamp.tzinfo is not None

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = SprintDeskError(
            message="Save failed",
            user_id="u1",
            operation="save_record",
            context={"version": 3},
            user_message="Could not save your achievements"
        )
        assert error.user_id == "u1"
        assert error.operation == "save_record"
        assert error.context["version"] == 3
        assert error.user_message == "Could not save your achievements"

    def test_to_dict(self):
        """Test API serialization"""
        error = SprintDeskError("Test error", request_id="req-1")
        data = error.to_dict()

        assert data["error"] == "SprintDeskError"
        assert data["message"] == "Test error"
        assert data["request_id"] == "req-1"
        assert "timestamp" in data

    def test_logs_on_creation(self, caplog):
        """Test errors log themselves with their request id"""
        error = SprintDeskError("Logged error", operation="evaluate")

        assert "SprintDeskError: Logged error" in caplog.text
        assert caplog.records[-1].request_id == error.request_id


class TestSubclasses:
    """Test specific exception types"""

    def test_database_hierarchy(self):
        assert issubclass(ConnectionError, DatabaseError)
        assert issubclass(QueryError, DatabaseError)
        assert issubclass(ConcurrentUpdateError, DatabaseError)
        assert issubclass(DatabaseError, SprintDeskError)

    def test_concurrent_update_error(self):
        error = ConcurrentUpdateError("stale record", expected_version=4, user_id="u1")
        assert error.expected_version == 4
        assert error.context == {"expected_version": 4}
        assert error.user_id == "u1"

    def test_configuration_error(self):
        error = ConfigurationError("bad catalog", config_key="BADGES")
        assert error.config_key == "BADGES"

    def test_achievement_error(self):
        error = AchievementError("handler failed", event="task_completed")
        assert error.event == "task_completed"
        assert error.context == {"event": "task_completed"}


class TestWrapExternalException:
    """Test mapping of third-party errors"""

    def test_passthrough(self):
        original = QueryError("already wrapped")
        assert wrap_external_exception(original, operation="op") is original

    def test_operational_error(self):
        cause = psycopg.OperationalError("connection refused")
        wrapped = wrap_external_exception(cause, operation="get_record", user_id="u1")

        assert isinstance(wrapped, ConnectionError)
        assert wrapped.cause is cause
        assert wrapped.user_id == "u1"

    def test_query_error(self):
        cause = psycopg.errors.UndefinedTable("relation does not exist")
        wrapped = wrap_external_exception(cause, operation="save_record", context={"query": "UPDATE"})

        assert isinstance(wrapped, QueryError)
        assert wrapped.operation == "save_record"

    def test_generic_error(self):
        wrapped = wrap_external_exception(ValueError("bad"), operation="evaluate", context={"k": 1})

        assert type(wrapped) is SprintDeskError
        assert wrapped.message == "evaluate failed: bad"
        assert wrapped.context == {"k": 1}
