"""Environment variable source.

Keys are built from a prefix chain and each field's env tag:

    <APP>_<SECTION>[_<SUBSECTION>...]_<FIELD>
    <APP>_<LIST>_<index>_<FIELD>          (lists of records)

All segments are uppercased and hyphens become underscores.

For each scalar field:
- a present key always overwrites the current value
- an absent key leaves a non-zero value (e.g. from the file) untouched
- an absent key on a zero field applies the declared default
- in strict mode (environment-only loading) a required field with no
  value and no default fails immediately

Lists of records are probed from index 0 upwards and stop at the first
index with no key set. Any materialized element replaces the whole list.
"""

import itertools
from typing import Any, Mapping, Optional, Sequence, Tuple

from ahatconfig.config.coercion import coerce, is_zero, new_record
from ahatconfig.config.schema import FieldDescriptor, SchemaVisitor, normalize_segment
from ahatconfig.config.validator import validate_required
from ahatconfig.exceptions import MissingRequiredFieldError


def build_env_key(prefix_chain: Sequence[str], segment: str) -> str:
    """Join a prefix chain and a field segment into an environment key."""
    return "_".join(normalize_segment(part) for part in (*prefix_chain, segment))


class _EnvPass(SchemaVisitor):
    """One walk over a record under a fixed prefix chain."""

    def __init__(self, environ: Mapping[str, str], prefix: Tuple[str, ...], strict: bool):
        self.environ = environ
        self.prefix = prefix
        self.strict = strict
        # Number of keys found in the environment under this prefix
        self.observed = 0

    def _child(self, *segments: str, strict: Optional[bool] = None) -> "_EnvPass":
        return _EnvPass(
            self.environ,
            self.prefix + segments,
            self.strict if strict is None else strict,
        )

    def visit_scalar(self, record: Any, descriptor: FieldDescriptor, value: Any) -> None:
        key = build_env_key(self.prefix, descriptor.env_segment)
        raw = self.environ.get(key)

        if raw is not None:
            self.observed += 1
            setattr(record, descriptor.name, coerce(raw, descriptor))
            return

        if not is_zero(value):
            return

        if descriptor.default is not None:
            setattr(record, descriptor.name, coerce(descriptor.default, descriptor))
        elif descriptor.required and self.strict:
            raise MissingRequiredFieldError(descriptor.display_name, env_key=key)

    def visit_record(self, record: Any, descriptor: FieldDescriptor, value: Any) -> None:
        if value is None:
            value = new_record(descriptor.type)
            setattr(record, descriptor.name, value)
        child = self._child(descriptor.env_segment)
        child.walk(value)
        self.observed += child.observed

    def visit_record_list(self, record: Any, descriptor: FieldDescriptor, value: Any) -> None:
        elements = []
        for index in itertools.count():
            element = new_record(descriptor.item_type)
            # Required checks wait until the element is known to exist
            probe = self._child(descriptor.env_segment, str(index), strict=False)
            probe.walk(element)
            if not probe.observed:
                break
            if self.strict:
                validate_required(element)
            self.observed += probe.observed
            elements.append(element)

        if elements:
            setattr(record, descriptor.name, elements)


class EnvSource:
    """Applies environment overrides to a record in place.

    Args:
        environ: Key/value mapping to read from
        strict: Raise for missing required fields during the pass instead
            of leaving them to post-merge validation
    """

    def __init__(self, environ: Mapping[str, str], strict: bool = False):
        self.environ = environ
        self.strict = strict

    def apply(self, record: Any, prefix_chain: Sequence[str]) -> int:
        """Walk ``record`` under ``prefix_chain``.

        Returns:
            Number of environment keys that were applied
        """
        env_pass = _EnvPass(self.environ, tuple(prefix_chain), self.strict)
        env_pass.walk(record)
        return env_pass.observed


def load_env(
    record: Any,
    prefix_chain: Sequence[str],
    environ: Mapping[str, str],
    strict: bool = False,
) -> int:
    """Convenience wrapper around :class:`EnvSource`."""
    return EnvSource(environ, strict=strict).apply(record, prefix_chain)
