"""TOML file source.

Looks for ``<app_name>.toml`` and decodes it into a record. Search order:

1. An explicit base path, when given (a directory, or a file whose
   directory is searched)
2. The current working directory
3. The directory of the running program (``sys.argv[0]``)

A missing file is not an error: the caller gets a zero-valued record and
the environment pass supplies everything. A file that exists but cannot
be decoded is fatal.
"""

import sys
import tomllib
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from ahatconfig.config.coercion import new_record
from ahatconfig.config.schema import FieldDescriptor, FieldKind, get_schema
from ahatconfig.exceptions import FileDecodeError
from ahatconfig.logger import Logger

CONFIG_FILE_EXTENSION = "toml"


def config_file_name(app_name: str) -> str:
    return f"{app_name}.{CONFIG_FILE_EXTENSION}"


def _program_dir() -> Path:
    entry = sys.argv[0] if sys.argv and sys.argv[0] else sys.executable
    return Path(entry).resolve().parent


def search_dirs(base_path: Optional[Path | str] = None) -> List[Path]:
    """Directories searched for the config file, in priority order."""
    if base_path is not None:
        path = Path(base_path)
        return [path.parent if path.is_file() else path]

    dirs = [Path.cwd()]
    program_dir = _program_dir()
    if program_dir not in dirs:
        dirs.append(program_dir)
    return dirs


def locate_config_file(app_name: str, base_path: Optional[Path | str] = None) -> Optional[Path]:
    """Return the first existing ``<app_name>.toml`` candidate, or None."""
    name = config_file_name(app_name)
    for directory in search_dirs(base_path):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def _decode_scalar(raw: Any, kind: FieldKind, path: str, where: str) -> Any:
    if kind is FieldKind.STRING and isinstance(raw, str):
        return raw
    if kind is FieldKind.INTEGER and isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if kind is FieldKind.FLOAT and isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    if kind is FieldKind.BOOLEAN and isinstance(raw, bool):
        return raw
    raise FileDecodeError(
        path,
        f"expected {kind.value} at '{where}', got {type(raw).__name__}",
        field=where,
    )


def _decode_value(raw: Any, descriptor: FieldDescriptor, path: str, where: str) -> Any:
    kind = descriptor.kind

    if kind is FieldKind.RECORD:
        return decode_record(raw, descriptor.type, path, where)

    if kind in (FieldKind.LIST, FieldKind.RECORD_LIST):
        if not isinstance(raw, list):
            raise FileDecodeError(
                path, f"expected an array at '{where}', got {type(raw).__name__}", field=where
            )
        if kind is FieldKind.RECORD_LIST:
            return [
                decode_record(item, descriptor.item_type, path, f"{where}[{index}]")
                for index, item in enumerate(raw)
            ]
        return [
            _decode_scalar(item, descriptor.item_kind, path, f"{where}[{index}]")
            for index, item in enumerate(raw)
        ]

    if kind is FieldKind.UNSUPPORTED:
        return raw

    return _decode_scalar(raw, kind, path, where)


def decode_record(table: Any, record_type: type, path: str, where: str = "") -> Any:
    """Build a ``record_type`` instance from a decoded TOML table.

    Keys are matched against each field's ``toml`` tag (or its name),
    falling back to a case-insensitive match. Unknown keys are ignored.

    Raises:
        FileDecodeError: If a value has the wrong shape for its field
    """
    if not isinstance(table, Mapping):
        raise FileDecodeError(
            path, f"expected a table at '{where or '<root>'}', got {type(table).__name__}", field=where
        )

    record = new_record(record_type)
    folded = {str(key).lower(): key for key in table}
    for descriptor in get_schema(record_type).fields:
        key = descriptor.file_key
        if key not in table:
            key = folded.get(key.lower(), key)
            if key not in table:
                continue
        child = f"{where}.{key}" if where else key
        setattr(record, descriptor.name, _decode_value(table[key], descriptor, path, child))
    return record


def load_file(
    record_type: type,
    app_name: str,
    base_path: Optional[Path | str] = None,
    logger: Optional[Logger] = None,
) -> Tuple[Any, Optional[Path]]:
    """Load the config file for ``app_name`` into a new record.

    Returns:
        The populated record and the path it came from; a zero-valued
        record and None when no file exists.

    Raises:
        FileDecodeError: If the file exists but cannot be read or decoded
    """
    path = locate_config_file(app_name, base_path)
    if path is None:
        if logger is not None:
            logger.debug(
                "Config file not found, continuing without it",
                file=config_file_name(app_name),
                searched=[str(d) for d in search_dirs(base_path)],
            )
        return new_record(record_type), None

    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise FileDecodeError(str(path), str(exc)) from exc
    except OSError as exc:
        raise FileDecodeError(str(path), exc.strerror or str(exc)) from exc

    record = decode_record(data, record_type, str(path))
    if logger is not None:
        logger.info("Config file loaded", path=str(path))
    return record, path
