"""Merge controller: file pass, environment pass, validation.

Sources are layered in this order:
1) ``<app>.toml`` (skipped in environment-only mode, absence tolerated)
2) Environment variables prefixed with the uppercased app name
   (present keys override, defaults fill remaining zero fields)
3) Required field validation on the merged record

Setting ``<APP>_CONFIG_TYPE=env`` selects environment-only mode.

Example:
    from ahatconfig import load_config

    cfg = load_config(AppConfig, "myapp")
"""

from pathlib import Path
from typing import Any, Mapping, Optional, Type, TypeVar

from ahatconfig.config.coercion import new_record
from ahatconfig.config.env_loader import EnvLoader
from ahatconfig.config.env_source import EnvSource
from ahatconfig.config.file_source import load_file
from ahatconfig.config.schema import get_schema, normalize_segment
from ahatconfig.config.validator import validate_required
from ahatconfig.exceptions import AhatConfigError
from ahatconfig.logger import Logger, create_logger

T = TypeVar("T")

CONFIG_TYPE_SUFFIX = "CONFIG_TYPE"
ENV_ONLY_MODE = "env"

_default_logger: Optional[Logger] = None


def _module_logger() -> Logger:
    """Logger shared by every loader built without one."""
    global _default_logger
    if _default_logger is None:
        _default_logger = create_logger()
    return _default_logger


class ConfigLoader:
    """Loads one application's configuration into a record type.

    Args:
        app_name: Application name; names the config file and is the
            environment prefix (uppercased)
        base_path: Directory (or file inside it) holding ``<app>.toml``;
            when omitted the working directory and program directory are
            searched
        environ: Mapping used instead of the process environment
        env_file: Optional .env file merged under the process environment
            (or under ``environ``); ./.env is used when it exists
        logger: Logger instance. Shares one package logger if not provided.
    """

    def __init__(
        self,
        app_name: str,
        base_path: Optional[Path | str] = None,
        environ: Optional[Mapping[str, str]] = None,
        env_file: Optional[Path | str] = None,
        logger: Optional[Logger] = None,
    ):
        if not app_name:
            raise ValueError("app_name must not be empty")
        self.app_name = app_name
        self.base_path = Path(base_path) if base_path is not None else None
        self.env_file = env_file
        self._environ = environ
        self.logger = logger if logger is not None else _module_logger()

    @property
    def env_prefix(self) -> str:
        return normalize_segment(self.app_name)

    @property
    def config_type_key(self) -> str:
        return f"{self.env_prefix}_{CONFIG_TYPE_SUFFIX}"

    def environment(self) -> Mapping[str, str]:
        """Return the mapping the environment pass reads from."""
        return EnvLoader(self.env_file, environ=self._environ).load()

    def is_env_only(self, environ: Mapping[str, str]) -> bool:
        return environ.get(self.config_type_key, "").strip().lower() == ENV_ONLY_MODE

    def load(self, record_type: Type[T], localns: Optional[Mapping[str, Any]] = None) -> T:
        """Run the file, environment and validation passes.

        ``localns`` resolves string annotations naming types declared in a
        function body (see :func:`get_schema`).

        Raises:
            ConfigurationError: If ``record_type`` is not a usable record
            FileDecodeError: If the config file exists but cannot be decoded
            CoercionError: If a value cannot be converted to its field type
            MissingRequiredFieldError: If a required field ends up empty
        """
        get_schema(record_type, localns)
        environ = self.environment()
        env_only = self.is_env_only(environ)

        try:
            if env_only:
                self.logger.info(
                    "Environment-only mode, skipping config file",
                    app=self.app_name,
                    selector=self.config_type_key,
                )
                record: Any = new_record(record_type)
            else:
                record, _ = load_file(record_type, self.app_name, self.base_path, self.logger)

            applied = EnvSource(environ, strict=env_only).apply(record, (self.env_prefix,))
            self.logger.info("Environment overrides applied", app=self.app_name, overrides=applied)

            validate_required(record)
        except AhatConfigError as exc:
            self.logger.error("Config load failed", app=self.app_name, code=exc.code, error=exc.message)
            raise

        return record


def load_config(
    record_type: Type[T],
    app_name: str,
    base_path: Optional[Path | str] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path | str] = None,
    logger: Optional[Logger] = None,
    localns: Optional[Mapping[str, Any]] = None,
) -> T:
    """Load, merge and validate configuration without touching global state."""
    loader = ConfigLoader(
        app_name,
        base_path=base_path,
        environ=environ,
        env_file=env_file,
        logger=logger,
    )
    return loader.load(record_type, localns)
