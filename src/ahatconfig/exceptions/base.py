"""Base exception classes for ahatconfig.

All ahatconfig exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery
"""

from typing import Any, Dict, Optional


class AhatConfigError(Exception):
    """Base exception for all configuration loading errors.

    Attributes:
        code: Machine-readable error code (e.g., "COERCION_ERROR")
        message: Human-readable error message
        details: Optional additional context for debugging/recovery
    """

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with structured information.

        Args:
            code: Machine-readable error code
            message: Human-readable error message
            details: Optional additional context
        """
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.code}: {self.message} (details: {self.details})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(AhatConfigError):
    """Design-time problem with a record type.

    Raised for record types that are not dataclasses, or for field kinds
    the coercion layer cannot produce.
    """

    def __init__(
        self, message: str, code: str = "CONFIGURATION_ERROR", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(code=code, message=message, details=details)


class FileDecodeError(AhatConfigError):
    """A config file exists but cannot be decoded into the record type."""

    def __init__(self, path: str, reason: str, field: Optional[str] = None):
        details: Dict[str, Any] = {"path": path}
        if field is not None:
            details["field"] = field
        super().__init__(
            code="FILE_DECODE_ERROR",
            message=f"failed to decode config file '{path}': {reason}",
            details=details,
        )
        self.path = path
        self.reason = reason
        self.field = field


class CoercionError(AhatConfigError):
    """A raw string cannot be converted to the field's type."""

    def __init__(self, field: str, raw_value: str, target_type: str):
        super().__init__(
            code="COERCION_ERROR",
            message=f"cannot convert {raw_value!r} to {target_type} for field '{field}'",
            details={"field": field, "raw_value": raw_value, "target_type": target_type},
        )
        self.field = field
        self.raw_value = raw_value
        self.target_type = target_type


class MissingRequiredFieldError(AhatConfigError):
    """A required field still holds its zero value after loading."""

    def __init__(self, display_name: str, env_key: Optional[str] = None):
        details: Dict[str, Any] = {"field": display_name}
        if env_key is not None:
            details["env_key"] = env_key
        super().__init__(
            code="MISSING_REQUIRED_FIELD",
            message=f"required field '{display_name}' is missing or empty",
            details=details,
        )
        self.display_name = display_name
        self.env_key = env_key


class NotInitializedError(AhatConfigError):
    """Config retrieval attempted before any successful load."""

    def __init__(self, message: str = "config not initialized, call init_config first"):
        super().__init__(code="NOT_INITIALIZED", message=message)


class TypeMismatchError(AhatConfigError):
    """Config retrieval requested with a different record type."""

    def __init__(self, expected: type, actual: type):
        super().__init__(
            code="TYPE_MISMATCH",
            message=(
                f"config was initialized as {actual.__name__}, "
                f"not {expected.__name__}"
            ),
            details={"expected": expected.__name__, "actual": actual.__name__},
        )
        self.expected = expected
        self.actual = actual
