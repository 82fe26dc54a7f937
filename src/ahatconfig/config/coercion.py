"""String to field value coercion and the zero-value policy.

Zero values:
    string   ""
    integer  0
    float    0.0
    boolean  False
    list     []
    record   a record whose fields are all zero
"""

import dataclasses
import re
from typing import Any, Dict, List

from ahatconfig.config.schema import FieldDescriptor, FieldKind, get_schema
from ahatconfig.exceptions import CoercionError, ConfigurationError

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")

_SCALAR_ZEROS: Dict[FieldKind, Any] = {
    FieldKind.STRING: "",
    FieldKind.INTEGER: 0,
    FieldKind.FLOAT: 0.0,
    FieldKind.BOOLEAN: False,
}


def zero_value(descriptor: FieldDescriptor) -> Any:
    """Return a fresh zero value for the descriptor's kind."""
    if descriptor.kind.is_scalar:
        return _SCALAR_ZEROS[descriptor.kind]
    if descriptor.kind in (FieldKind.LIST, FieldKind.RECORD_LIST):
        return []
    if descriptor.kind is FieldKind.RECORD:
        return new_record(descriptor.type)
    return None


def new_record(record_type: type) -> Any:
    """Instantiate ``record_type`` with every undeclared field at its zero value."""
    kwargs = {
        descriptor.name: zero_value(descriptor)
        for descriptor in get_schema(record_type).fields
        if not descriptor.has_init_default
    }
    return record_type(**kwargs)


def is_zero(value: Any) -> bool:
    """Check a value against the zero-value policy."""
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return all(
            is_zero(getattr(value, descriptor.name))
            for descriptor in get_schema(type(value)).fields
        )
    return False


def coerce_scalar(raw: str, kind: FieldKind, field: str) -> Any:
    """Convert one string to a scalar of ``kind``.

    Raises:
        CoercionError: If the string does not parse as ``kind``
    """
    if kind is FieldKind.STRING:
        return raw

    text = raw.strip()
    if text == "":
        return _SCALAR_ZEROS[kind]

    if kind is FieldKind.INTEGER:
        if not _INTEGER_RE.match(text):
            raise CoercionError(field, raw, kind.value)
        return int(text)

    if kind is FieldKind.FLOAT:
        try:
            return float(text)
        except ValueError:
            raise CoercionError(field, raw, kind.value) from None

    if kind is FieldKind.BOOLEAN:
        lowered = text.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise CoercionError(field, raw, kind.value)

    raise ConfigurationError(
        f"field '{field}' has no scalar coercion for kind {kind.value}",
        code="UNSUPPORTED_FIELD_TYPE",
        details={"field": field, "kind": kind.value},
    )


def coerce_list(raw: str, item_kind: FieldKind, field: str) -> List[Any]:
    """Split a comma separated string and coerce each non-empty element."""
    items: List[Any] = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        items.append(coerce_scalar(part, item_kind, field))
    return items


def coerce(raw: str, descriptor: FieldDescriptor) -> Any:
    """Convert ``raw`` to the type declared by ``descriptor``.

    An empty string yields the zero value of the field's kind.

    Raises:
        CoercionError: If ``raw`` cannot be parsed
        ConfigurationError: If the field kind cannot be built from a string
    """
    if descriptor.kind.is_scalar:
        return coerce_scalar(raw, descriptor.kind, descriptor.name)
    if descriptor.kind is FieldKind.LIST:
        return coerce_list(raw, descriptor.item_kind, descriptor.name)

    raise ConfigurationError(
        f"field '{descriptor.name}' of type {descriptor.type!r} cannot be set from a string",
        code="UNSUPPORTED_FIELD_TYPE",
        details={"field": descriptor.name, "type": repr(descriptor.type)},
    )
