"""Post-merge required field validation."""

from typing import Any

from ahatconfig.config.coercion import is_zero
from ahatconfig.config.schema import FieldDescriptor, SchemaVisitor
from ahatconfig.exceptions import MissingRequiredFieldError


class RequiredFieldValidator(SchemaVisitor):
    """Depth-first check that every required field holds a non-zero value.

    Nested records and every element of a record list are visited; the
    first violation in declaration order is raised.
    """

    def validate(self, record: Any) -> None:
        self.walk(record)

    def visit_scalar(self, record: Any, descriptor: FieldDescriptor, value: Any) -> None:
        if descriptor.required and is_zero(value):
            raise MissingRequiredFieldError(descriptor.display_name)

    def visit_record(self, record: Any, descriptor: FieldDescriptor, value: Any) -> None:
        if value is not None:
            self.walk(value)

    def visit_record_list(self, record: Any, descriptor: FieldDescriptor, value: Any) -> None:
        for element in value or ():
            self.walk(element)


def validate_required(record: Any) -> None:
    """Raise MissingRequiredFieldError for the first empty required field."""
    RequiredFieldValidator().validate(record)
