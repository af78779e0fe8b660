"""
Standardized exception hierarchy for coachbot
Provides rich context, consistent logging, and user-friendly error messages
"""

from datetime import datetime, timezone
from typing import Optional, Dict, Any
from uuid import uuid4
import json
import logging

logger = logging.getLogger(__name__)


class CoachBotError(Exception):
    """
    Base exception for all coachbot errors

    Provides:
    - Automatic timestamping
    - Request ID for tracing
    - User-friendly messages
    - Structured context
    - Automatic logging

    Example:
        raise CoachBotError(
            message="Failed to save progression record",
            user_id="123456",
            operation="apply_message",
            context={"day": 3}
        )
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        user_id: Optional[str] = None,
        request_id: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        user_message: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.user_id = user_id
        self.request_id = request_id or str(uuid4())
        self.operation = operation
        self.context = context or {}
        self.cause = cause
        self.user_message = user_message or "An error occurred. Please try again."
        self.timestamp = datetime.now(timezone.utc)

        # Auto-log on creation
        self._log_error()

    def _log_error(self) -> None:
        """Log error with full context"""
        log_data = {
            "error_type": self.__class__.__name__,
            "error_message": self.message,  # Avoid conflict with logging's 'message' field
            "request_id": self.request_id,
            "user_id": self.user_id,
            "operation": self.operation,
            "error_context": self.context,
            "timestamp": self.timestamp.isoformat()
        }

        if self.cause:
            log_data["cause"] = str(self.cause)
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data, exc_info=self.cause)
        else:
            logger.error(f"{self.__class__.__name__}: {self.message}", extra=log_data)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for API responses"""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "request_id": self.request_id,
            "retryable": self.retryable,
            "timestamp": self.timestamp.isoformat()
        }


# ==========================================
# Validation Errors (User Input)
# ==========================================

class ValidationError(CoachBotError):
    """
    Raised when caller input fails validation

    Examples:
    - Program day outside 1..N
    - Empty user id

    Example:
        raise ValidationError(
            message="Day must be between 1 and 15",
            field="day",
            value=16,
            user_id="123456"
        )
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        **kwargs
    ):
        self.field = field
        self.value = value
        super().__init__(
            message=message,
            user_message=f"Invalid {field}: {message}" if field else message,
            context={"field": field, "value": value},
            **kwargs
        )


# ==========================================
# Storage Errors
# ==========================================

class StorageError(CoachBotError):
    """
    Base class for persistence-related errors
    """

    def __init__(
        self,
        message: str,
        store: Optional[str] = None,
        **kwargs
    ):
        self.store = store
        kwargs.setdefault("context", {"store": store})
        super().__init__(message=message, **kwargs)


class StorageReadError(StorageError):
    """A store could not be read

    Never raised by the JSON stores themselves (they degrade to empty data);
    available to adapters that cannot degrade on their own.
    """

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="We couldn't load your progress. Your conversation will still work.",
            **kwargs
        )


class StorageWriteError(StorageError):
    """A store could not be written; the operation may be retried"""

    retryable = True

    def __init__(self, message: str, **kwargs):
        super().__init__(
            message=message,
            user_message="We encountered an issue saving your progress. Please try again.",
            **kwargs
        )


# ==========================================
# Configuration Errors
# ==========================================

class ConfigurationError(CoachBotError):
    """System configuration or static catalog is invalid"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs
    ):
        self.config_key = config_key
        super().__init__(
            message=message,
            user_message="The system is not properly configured. Please contact support.",
            context={"config_key": config_key},
            **kwargs
        )


# ==========================================
# Helper Functions
# ==========================================

def wrap_storage_exception(
    error: Exception,
    operation: str,
    store: Optional[str] = None,
    user_id: Optional[str] = None
) -> CoachBotError:
    """
    Wrap low-level persistence exceptions into our exception hierarchy

    Args:
        error: Original exception
        operation: What operation was being performed
        store: Name or path of the store involved
        user_id: User ID if applicable

    Returns:
        StorageWriteError for I/O and serialization failures,
        CoachBotError otherwise

    Example:
        try:
            path.write_text(payload)
        except OSError as e:
            raise wrap_storage_exception(e, operation="save_all", store=str(path))
    """
    if isinstance(error, CoachBotError):
        return error

    if isinstance(error, (OSError, TypeError, ValueError, json.JSONDecodeError)):
        return StorageWriteError(
            message=f"{operation} failed on {store or 'store'}: {str(error)}",
            store=store,
            user_id=user_id,
            operation=operation,
            cause=error
        )

    # Generic fallback
    return CoachBotError(
        message=f"{operation} failed: {str(error)}",
        user_id=user_id,
        operation=operation,
        context={"store": store},
        cause=error
    )
