"""Layered configuration loading for dataclass records.

A record type declares its fields with binding tags; the loader fills
it from ``<app>.toml`` and then from ``<APP>_*`` environment variables,
applies defaults, checks required fields and can produce a masked
snapshot for logging.

Example:
    from dataclasses import dataclass
    from ahatconfig.config import load_config, setting

    @dataclass
    class Server:
        host: str = setting(toml="host", env="HOST", required=True)
        port: int = setting(toml="port", env="PORT", default="8080")

    @dataclass
    class AppConfig:
        server: Server = setting(toml="server", env="SERVER")

    cfg = load_config(AppConfig, "myapp")
"""

from ahatconfig.config.coercion import coerce, coerce_list, coerce_scalar, is_zero, new_record, zero_value
from ahatconfig.config.env_loader import EnvLoader
from ahatconfig.config.env_source import EnvSource, build_env_key, load_env
from ahatconfig.config.file_source import (
    CONFIG_FILE_EXTENSION,
    decode_record,
    load_file,
    locate_config_file,
    search_dirs,
)
from ahatconfig.config.loader import CONFIG_TYPE_SUFFIX, ENV_ONLY_MODE, ConfigLoader, load_config
from ahatconfig.config.masking import MASK_TOKEN, SecretMasker, format_snapshot, mask_secrets
from ahatconfig.config.schema import (
    FieldDescriptor,
    FieldKind,
    Schema,
    SchemaVisitor,
    clear_schema_cache,
    get_schema,
    setting,
)
from ahatconfig.config.state import (
    format_config,
    get_app_name,
    get_config,
    get_config_safe,
    init_config,
    init_config_safe,
    init_config_with_path,
    init_config_with_path_safe,
    mask_config,
    print_config,
    reset_config,
)
from ahatconfig.config.validator import RequiredFieldValidator, validate_required

__all__ = [
    # Schema
    "FieldKind",
    "FieldDescriptor",
    "Schema",
    "SchemaVisitor",
    "get_schema",
    "clear_schema_cache",
    "setting",
    # Coercion
    "coerce",
    "coerce_scalar",
    "coerce_list",
    "zero_value",
    "is_zero",
    "new_record",
    # Sources
    "EnvLoader",
    "EnvSource",
    "build_env_key",
    "load_env",
    "CONFIG_FILE_EXTENSION",
    "search_dirs",
    "locate_config_file",
    "decode_record",
    "load_file",
    # Merge
    "ConfigLoader",
    "load_config",
    "CONFIG_TYPE_SUFFIX",
    "ENV_ONLY_MODE",
    # Validation and masking
    "RequiredFieldValidator",
    "validate_required",
    "MASK_TOKEN",
    "SecretMasker",
    "mask_secrets",
    "format_snapshot",
    # Global instance
    "init_config",
    "init_config_with_path",
    "init_config_safe",
    "init_config_with_path_safe",
    "get_config",
    "get_config_safe",
    "get_app_name",
    "mask_config",
    "format_config",
    "print_config",
    "reset_config",
]
