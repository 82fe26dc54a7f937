"""Schema introspection for dataclass config records.

A record is a plain dataclass whose fields carry binding tags in
``dataclasses.field(metadata=...)``:

    env       fragment used to build environment variable names
    default   textual fallback applied when no source provides a value
    required  the field must be non-zero after loading
    secret    the value is replaced by a mask token in display snapshots
    toml      key used in the config file (defaults to the field name)

Example:
    @dataclass
    class Server:
        host: str = setting(toml="host", env="HOST", required=True)
        port: int = setting(toml="port", env="PORT", default="8080")

The schema for a type is computed once and cached for the lifetime of
the process.
"""

from __future__ import annotations

import dataclasses
import sys
import threading
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ahatconfig.exceptions import ConfigurationError


class FieldKind(Enum):
    """Semantic type of a config field."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    RECORD = "record"
    LIST = "list"
    RECORD_LIST = "record_list"
    UNSUPPORTED = "unsupported"

    @property
    def is_scalar(self) -> bool:
        return self in _SCALAR_KINDS


_SCALAR_KINDS = frozenset({FieldKind.STRING, FieldKind.INTEGER, FieldKind.FLOAT, FieldKind.BOOLEAN})

_SCALAR_TYPES: Dict[Any, FieldKind] = {
    str: FieldKind.STRING,
    int: FieldKind.INTEGER,
    float: FieldKind.FLOAT,
    bool: FieldKind.BOOLEAN,
}


def normalize_segment(segment: str) -> str:
    """Turn a name fragment into an environment key segment."""
    return segment.upper().replace("-", "_")


@dataclass(frozen=True)
class FieldDescriptor:
    """Binding metadata for one declared field of a record type.

    Attributes:
        name: Python attribute name
        kind: Semantic type of the field
        type: Resolved annotation
        item_type: Element type for LIST and RECORD_LIST fields
        item_kind: Element kind for LIST fields
        env_tag: Declared environment fragment, if any
        file_tag: Declared config file key, if any
        default: Textual default, if any
        required: Whether a non-zero value is mandatory
        secret: Whether the value is masked in snapshots
        has_init_default: Whether the dataclass declares its own default
    """

    name: str
    kind: FieldKind
    type: Any
    item_type: Any = None
    item_kind: Optional[FieldKind] = None
    env_tag: Optional[str] = None
    file_tag: Optional[str] = None
    default: Optional[str] = None
    required: bool = False
    secret: bool = False
    has_init_default: bool = False

    @property
    def display_name(self) -> str:
        """Name used in error messages: the env tag, else the identifier."""
        return self.env_tag or self.name

    @property
    def env_segment(self) -> str:
        return normalize_segment(self.env_tag or self.name)

    @property
    def file_key(self) -> str:
        return self.file_tag or self.name


@dataclass(frozen=True)
class Schema:
    """Ordered field descriptors of a record type."""

    record_type: type
    fields: Tuple[FieldDescriptor, ...]

    def __iter__(self):
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def field_named(self, name: str) -> FieldDescriptor:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        raise KeyError(name)


def setting(
    *,
    env: Optional[str] = None,
    default: Any = None,
    required: bool = False,
    secret: bool = False,
    toml: Optional[str] = None,
    **field_kwargs: Any,
) -> Any:
    """Declare a config field with binding tags.

    The field is keyword-only and has no dataclass default unless one is
    passed through ``field_kwargs``; the loader fills it with the zero
    value of its kind when building records.

    Args:
        env: Environment variable fragment (defaults to the field name)
        default: Fallback applied when no source provides a value
        required: Fail loading when the field ends up empty
        secret: Mask the value in display snapshots
        toml: Config file key (defaults to the field name)
        **field_kwargs: Passed through to ``dataclasses.field``
    """
    metadata: Dict[str, Any] = dict(field_kwargs.pop("metadata", None) or {})
    if env is not None:
        metadata["env"] = env
    if default is not None:
        metadata["default"] = default
    if required:
        metadata["required"] = True
    if secret:
        metadata["secret"] = True
    if toml is not None:
        metadata["toml"] = toml
    field_kwargs.setdefault("kw_only", True)
    return dataclasses.field(metadata=metadata, **field_kwargs)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_as_text(item) or "" for item in value)
    return str(value)


def _is_record_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and dataclasses.is_dataclass(annotation)


def _classify(annotation: Any) -> Tuple[FieldKind, Any, Optional[FieldKind]]:
    """Return (kind, item_type, item_kind) for an annotation."""
    try:
        scalar = _SCALAR_TYPES.get(annotation)
    except TypeError:
        scalar = None
    if scalar is not None:
        return scalar, None, None
    if _is_record_type(annotation):
        return FieldKind.RECORD, None, None

    if typing.get_origin(annotation) is list:
        args = typing.get_args(annotation)
        item = args[0] if args else str
        if _is_record_type(item):
            return FieldKind.RECORD_LIST, item, None
        item_kind = _SCALAR_TYPES.get(item)
        if item_kind is not None:
            return FieldKind.LIST, item, item_kind

    return FieldKind.UNSUPPORTED, None, None


def _describe(record_field: dataclasses.Field, annotation: Any) -> FieldDescriptor:
    kind, item_type, item_kind = _classify(annotation)
    metadata = record_field.metadata
    return FieldDescriptor(
        name=record_field.name,
        kind=kind,
        type=annotation,
        item_type=item_type,
        item_kind=item_kind,
        env_tag=metadata.get("env") or None,
        file_tag=metadata.get("toml") or None,
        default=_as_text(metadata.get("default")),
        required=_flag(metadata.get("required", False)),
        secret=_flag(metadata.get("secret", False)),
        has_init_default=(
            record_field.default is not dataclasses.MISSING
            or record_field.default_factory is not dataclasses.MISSING
        ),
    )


def _resolve_annotation(
    record_type: type,
    record_field: dataclasses.Field,
    localns: Optional[Mapping[str, Any]],
) -> Any:
    """Resolve one field's annotation when the whole-class lookup failed."""
    annotation = record_field.type
    if not isinstance(annotation, str):
        return annotation

    module = sys.modules.get(record_type.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    names: Dict[str, Any] = dict(vars(record_type))
    if localns:
        names.update(localns)
    try:
        return eval(annotation, globalns, names)
    except (NameError, AttributeError, SyntaxError, TypeError) as exc:
        raise ConfigurationError(
            f"annotation {annotation!r} of field '{record_field.name}' on "
            f"{record_type.__qualname__} cannot be resolved: {exc}",
            code="UNRESOLVED_ANNOTATION",
            details={
                "type": record_type.__qualname__,
                "field": record_field.name,
                "annotation": annotation,
            },
        ) from exc


def _build_schema(record_type: type, localns: Optional[Mapping[str, Any]] = None) -> Schema:
    if not _is_record_type(record_type):
        raise ConfigurationError(
            f"{record_type!r} is not a dataclass type",
            code="NOT_A_RECORD",
            details={"type": repr(record_type)},
        )

    # Records declared in a function body under postponed annotations
    # name types get_type_hints cannot see; fall back to field by field.
    try:
        hints: Optional[Dict[str, Any]] = typing.get_type_hints(
            record_type, localns=dict(localns) if localns else None
        )
    except (NameError, AttributeError, SyntaxError, TypeError):
        hints = None

    descriptors: List[FieldDescriptor] = []
    for record_field in dataclasses.fields(record_type):
        if not record_field.init:
            continue
        if hints is not None and record_field.name in hints:
            annotation = hints[record_field.name]
        else:
            annotation = _resolve_annotation(record_type, record_field, localns)
        descriptors.append(_describe(record_field, annotation))
    return Schema(record_type=record_type, fields=tuple(descriptors))


_schema_cache: Dict[type, Schema] = {}
_schema_lock = threading.Lock()


def get_schema(record_type: type, localns: Optional[Mapping[str, Any]] = None) -> Schema:
    """Return the cached schema for ``record_type``, building it once.

    Args:
        record_type: Dataclass record type
        localns: Extra names for resolving string annotations, such as
            ``locals()`` of the function that declares the record. Only
            consulted on the first, uncached lookup.

    Raises:
        ConfigurationError: If ``record_type`` is not a dataclass type, or
            a string annotation names a type that cannot be resolved
    """
    schema = _schema_cache.get(record_type)
    if schema is not None:
        return schema

    with _schema_lock:
        schema = _schema_cache.get(record_type)
        if schema is None:
            schema = _build_schema(record_type, localns)
            _schema_cache[record_type] = schema
    return schema


def clear_schema_cache() -> None:
    """Drop all cached schemas (primarily for testing)."""
    with _schema_lock:
        _schema_cache.clear()


class SchemaVisitor:
    """Walks a record field by field in declaration order.

    Subclasses override the ``visit_*`` hooks and recurse by calling
    :meth:`walk` on child records with whatever context they carry.
    """

    def walk(self, record: Any) -> List[Tuple[FieldDescriptor, Any]]:
        results: List[Tuple[FieldDescriptor, Any]] = []
        for descriptor in get_schema(type(record)).fields:
            value = getattr(record, descriptor.name)
            if descriptor.kind is FieldKind.RECORD:
                result = self.visit_record(record, descriptor, value)
            elif descriptor.kind is FieldKind.RECORD_LIST:
                result = self.visit_record_list(record, descriptor, value)
            else:
                result = self.visit_scalar(record, descriptor, value)
            results.append((descriptor, result))
        return results

    def visit_scalar(self, record: Any, descriptor: FieldDescriptor, value: Any) -> Any:
        """Visit a scalar or list-of-scalar field."""
        return None

    def visit_record(self, record: Any, descriptor: FieldDescriptor, value: Any) -> Any:
        """Visit a nested record field."""
        return None

    def visit_record_list(self, record: Any, descriptor: FieldDescriptor, value: Any) -> Any:
        """Visit a list-of-records field."""
        return None
