"""Exceptions raised while loading configuration.

All exceptions include structured error information:
- code: Machine-readable error identifier
- message: Human-readable error description
- details: Additional context for debugging/recovery

Usage:
    from ahatconfig.exceptions import (
        AhatConfigError,
        CoercionError,
        MissingRequiredFieldError,
    )
"""

from ahatconfig.exceptions.base import (
    AhatConfigError,
    CoercionError,
    ConfigurationError,
    FileDecodeError,
    MissingRequiredFieldError,
    NotInitializedError,
    TypeMismatchError,
)

__all__ = [
    "AhatConfigError",
    "ConfigurationError",
    "FileDecodeError",
    "CoercionError",
    "MissingRequiredFieldError",
    "NotInitializedError",
    "TypeMismatchError",
]
