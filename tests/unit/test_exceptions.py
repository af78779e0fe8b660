"""Unit tests for custom exception hierarchy"""
import json
from datetime import datetime

from src.exceptions import (
    CoachBotError,
    ConfigurationError,
    StorageError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
    wrap_storage_exception,
)


class TestCoachBotError:
    """Test base exception class"""

    def test_basic_exception(self):
        """Test basic exception creation"""
        error = CoachBotError("Test error")
        assert error.message == "Test error"
        assert error.user_message == "An error occurred. Please try again."
        assert error.request_id is not None
        assert isinstance(error.timestamp, datetime)
        assert not error.retryable

    def test_exception_with_context(self):
        """Test exception with full context"""
        error = CoachBotError(
            message="Save failed",
            user_id="u1",
            operation="apply_message",
            context={"day": 3},
            user_message="Could not save"
        )
        assert error.user_id == "u1"
        assert error.operation == "apply_message"
        assert error.context["day"] == 3
        assert error.user_message == "Could not save"

    def test_to_dict(self):
        """Test API serialization"""
        data = CoachBotError("Test error").to_dict()
        assert data["error"] == "CoachBotError"
        assert data["message"] == "Test error"
        assert data["retryable"] is False
        json.dumps(data)

    def test_logged_on_creation(self, caplog):
        """Test errors are logged when constructed"""
        CoachBotError("Logged error", user_id="u1")
        assert "Logged error" in caplog.text


class TestValidationError:
    """Test validation errors"""

    def test_field_and_value(self):
        """Test field context and user message"""
        error = ValidationError("Day must be between 1 and 15", field="day", value=16)
        assert error.field == "day"
        assert error.value == 16
        assert error.context == {"field": "day", "value": 16}
        assert error.user_message.startswith("Invalid day")


class TestStorageErrors:
    """Test storage errors"""

    def test_write_error_is_retryable(self):
        """Test write failures are marked retryable"""
        error = StorageWriteError("disk full", store="journal.json")
        assert isinstance(error, StorageError)
        assert error.retryable
        assert error.store == "journal.json"
        assert error.to_dict()["retryable"] is True

    def test_read_error_not_retryable(self):
        """Test read failures are not retryable"""
        assert not StorageReadError("unreadable", store="meta.json").retryable


class TestConfigurationError:
    """Test configuration errors"""

    def test_config_key(self):
        """Test the offending key is kept"""
        error = ConfigurationError("Unknown timezone", config_key="APP_TIMEZONE")
        assert error.config_key == "APP_TIMEZONE"
        assert error.context == {"config_key": "APP_TIMEZONE"}


class TestWrapStorageException:
    """Test low-level exception wrapping"""

    def test_os_error_becomes_write_error(self):
        """Test I/O failures are wrapped as StorageWriteError"""
        original = OSError("No space left on device")
        wrapped = wrap_storage_exception(original, operation="save_all", store="data.json", user_id="u1")
        assert isinstance(wrapped, StorageWriteError)
        assert wrapped.cause is original
        assert wrapped.user_id == "u1"
        assert "data.json" in wrapped.message

    def test_already_wrapped_passthrough(self):
        """Test our own errors are returned unchanged"""
        original = StorageWriteError("disk full")
        assert wrap_storage_exception(original, operation="save_all") is original

    def test_unknown_error_generic(self):
        """Test other errors become a generic CoachBotError"""
        wrapped = wrap_storage_exception(RuntimeError("boom"), operation="save_all")
        assert type(wrapped) is CoachBotError
        assert wrapped.operation == "save_all"
