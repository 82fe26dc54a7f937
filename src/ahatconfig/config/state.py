"""Process-wide config instance.

``init_config`` loads once: after the first successful load further calls
return immediately. ``init_config_safe`` always performs a fresh load and
replaces the stored instance; it is meant for tests and explicit reloads
and is not safe to call concurrently.

Example:
    from ahatconfig import get_config, init_config

    init_config(AppConfig, "myapp")
    cfg = get_config(AppConfig)
"""

import sys
import threading
from pathlib import Path
from typing import Any, Optional, TextIO, Type, TypeVar

from ahatconfig.config.loader import load_config
from ahatconfig.config.masking import format_snapshot, mask_secrets
from ahatconfig.exceptions import AhatConfigError, NotInitializedError, TypeMismatchError

T = TypeVar("T")

_instance: Optional[Any] = None
_app_name: Optional[str] = None
_init_lock = threading.Lock()


def _install(record: Any, app_name: Optional[str]) -> None:
    global _instance, _app_name
    _instance = record
    _app_name = app_name


def init_config(record_type: Type[T], app_name: str, **kwargs: Any) -> None:
    """Load config into the global instance unless one is already loaded.

    Extra keyword arguments (``environ``, ``env_file``, ``logger``,
    ``localns``) are passed to :func:`load_config`.

    Raises:
        AhatConfigError: If the first load fails
    """
    with _init_lock:
        if _instance is not None:
            return
        _install(load_config(record_type, app_name, **kwargs), app_name)


def init_config_with_path(record_type: Type[T], app_name: str, path: Path | str, **kwargs: Any) -> None:
    """Like :func:`init_config`, reading ``<app_name>.toml`` next to ``path``."""
    init_config(record_type, app_name, base_path=path, **kwargs)


def init_config_safe(record_type: Type[T], app_name: str, **kwargs: Any) -> T:
    """Always reload config, replace the global instance and return it.

    Raises:
        AhatConfigError: If loading fails; the previous instance is kept
    """
    record = load_config(record_type, app_name, **kwargs)
    with _init_lock:
        _install(record, app_name)
    return record


def init_config_with_path_safe(
    record_type: Type[T], app_name: str, path: Path | str, **kwargs: Any
) -> T:
    """Like :func:`init_config_safe`, reading ``<app_name>.toml`` next to ``path``."""
    return init_config_safe(record_type, app_name, base_path=path, **kwargs)


def get_config(record_type: Optional[Type[T]] = None) -> T:
    """Return the global config instance.

    Raises:
        NotInitializedError: If no load has succeeded yet
        TypeMismatchError: If the instance is not a ``record_type``
    """
    if _instance is None:
        raise NotInitializedError()
    if record_type is not None and not isinstance(_instance, record_type):
        raise TypeMismatchError(expected=record_type, actual=type(_instance))
    return _instance


def get_config_safe(record_type: Optional[Type[T]] = None) -> Optional[T]:
    """Return the global config instance, or None when unavailable."""
    try:
        return get_config(record_type)
    except AhatConfigError:
        return None


def get_app_name() -> Optional[str]:
    """Return the app name of the loaded instance, if any."""
    return _app_name


def mask_config(record: Optional[Any] = None) -> Any:
    """Masked snapshot of ``record`` (default: the global instance)."""
    return mask_secrets(record if record is not None else get_config())


def format_config(record: Optional[Any] = None) -> str:
    """Indented JSON of the masked snapshot."""
    return format_snapshot(record if record is not None else get_config())


def print_config(stream: Optional[TextIO] = None) -> None:
    """Write the masked global config as JSON to ``stream`` (default stdout).

    Raises:
        NotInitializedError: If no load has succeeded yet
    """
    text = format_config()
    output = stream if stream is not None else sys.stdout
    print("config:", file=output)
    print(text, file=output)


def reset_config() -> None:
    """Forget the global instance (primarily for testing)."""
    with _init_lock:
        _install(None, None)
