"""ahatconfig - Layered TOML and environment configuration for dataclasses.

This package provides:
- config: Schema-driven loading of dataclass records from a TOML file and
  environment variables, with defaults, required fields and secret masking
- exceptions: Structured error classes with code, message and details
- logger: Structured logging used by the loader
"""

__version__ = "1.0.0"

from ahatconfig.config import (
    ConfigLoader,
    EnvLoader,
    FieldKind,
    MASK_TOKEN,
    format_config,
    get_config,
    get_config_safe,
    get_schema,
    init_config,
    init_config_safe,
    init_config_with_path,
    init_config_with_path_safe,
    load_config,
    mask_config,
    print_config,
    reset_config,
    setting,
)

from ahatconfig.exceptions import (
    AhatConfigError,
    CoercionError,
    ConfigurationError,
    FileDecodeError,
    MissingRequiredFieldError,
    NotInitializedError,
    TypeMismatchError,
)

from ahatconfig.logger import (
    Logger,
    StructuredLogger,
    create_logger,
    get_logger,
)

__all__ = [
    "__version__",
    # Config
    "setting",
    "FieldKind",
    "get_schema",
    "EnvLoader",
    "ConfigLoader",
    "load_config",
    "init_config",
    "init_config_with_path",
    "init_config_safe",
    "init_config_with_path_safe",
    "get_config",
    "get_config_safe",
    "mask_config",
    "format_config",
    "print_config",
    "reset_config",
    "MASK_TOKEN",
    # Exceptions
    "AhatConfigError",
    "ConfigurationError",
    "FileDecodeError",
    "CoercionError",
    "MissingRequiredFieldError",
    "NotInitializedError",
    "TypeMismatchError",
    # Logger
    "Logger",
    "StructuredLogger",
    "get_logger",
    "create_logger",
]
