"""Display snapshots with secret values redacted.

The snapshot is a plain nested structure (dicts keyed by field name,
lists, scalars) that mirrors the record's layout, so it can be rendered
with ``json.dumps`` or any pretty printer.
"""

import dataclasses
import json
from typing import Any, Dict

from ahatconfig.config.schema import FieldDescriptor, SchemaVisitor

MASK_TOKEN = "****"


class SecretMasker(SchemaVisitor):
    """Build a snapshot of a record with secret leaves replaced."""

    def mask(self, record: Any) -> Dict[str, Any]:
        return {descriptor.name: result for descriptor, result in self.walk(record)}

    def visit_scalar(self, record: Any, descriptor: FieldDescriptor, value: Any) -> Any:
        if isinstance(value, list):
            if descriptor.secret:
                return [MASK_TOKEN for _ in value]
            return list(value)
        if descriptor.secret:
            return MASK_TOKEN
        return value

    def visit_record(self, record: Any, descriptor: FieldDescriptor, value: Any) -> Any:
        if value is None:
            return None
        return self.mask(value)

    def visit_record_list(self, record: Any, descriptor: FieldDescriptor, value: Any) -> Any:
        return [self.mask(element) for element in value or ()]


def mask_secrets(value: Any) -> Any:
    """Return a display-safe copy of a record (or list of records)."""
    if isinstance(value, (list, tuple)):
        return [mask_secrets(item) for item in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return SecretMasker().mask(value)
    return value


def format_snapshot(value: Any, indent: int = 2) -> str:
    """Render the masked snapshot of ``value`` as indented JSON."""
    return json.dumps(mask_secrets(value), indent=indent, default=str)
