"""Record descriptors: which dataclass fields are written, and under which key."""

import dataclasses
from functools import lru_cache
from typing import Any, get_type_hints

from .errors import GodTypeError
from .types import FieldSpec, Table

# Field metadata entry holding an explicit key name
KEY_METADATA = "god"


def god_field(key: str, **kwargs: Any) -> Any:
    """
    Declare a dataclass field written under an explicit key name.

    Equivalent to ``dataclasses.field(metadata={"god": key}, ...)``.

    Args:
        key: The key used in GOD text.
        **kwargs: Passed through to ``dataclasses.field``.

    Returns:
        The dataclass field.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[KEY_METADATA] = key
    return dataclasses.field(metadata=metadata, **kwargs)


def is_record(value: Any) -> bool:
    """Check if a value is a record instance (a dataclass instance)."""
    if isinstance(value, (type, Table)):
        return False
    return dataclasses.is_dataclass(value)


def is_record_type(tp: Any) -> bool:
    """Check if a type is a record type (a dataclass class)."""
    return isinstance(tp, type) and tp is not Table and dataclasses.is_dataclass(tp)


def is_exported(name: str) -> bool:
    """Fields with a leading underscore are private and never encoded."""
    return not name.startswith("_")


def resolve_key(field: dataclasses.Field) -> str:
    """Return the explicit key name of a field, or its name lowercased."""
    key = field.metadata.get(KEY_METADATA)
    if key:
        return key
    return field.name.lower()


@lru_cache(maxsize=None)
def field_types(cls: type) -> dict[str, Any]:
    """Resolve the annotations of a record type."""
    try:
        return get_type_hints(cls)
    except NameError as exc:
        raise GodTypeError(f"Cannot resolve annotations of {cls.__name__}: {exc}") from exc


@lru_cache(maxsize=None)
def _descriptor(cls: type) -> tuple[FieldSpec, ...]:
    hints = field_types(cls)
    return tuple(
        FieldSpec(name=f.name, key=resolve_key(f), type=hints.get(f.name, Any))
        for f in dataclasses.fields(cls)
        if is_exported(f.name)
    )


def record_fields(cls: Any) -> list[FieldSpec]:
    """
    Build the record descriptor of a record type.

    Args:
        cls: A dataclass class or instance.

    Returns:
        The exported fields, in declaration order.

    Raises:
        GodTypeError: If cls is not a dataclass.
    """
    if is_record(cls):
        cls = type(cls)
    if not is_record_type(cls):
        raise GodTypeError(f"Not a record type: {cls!r}")
    return list(_descriptor(cls))


def fields_by_key(cls: Any) -> dict[str, FieldSpec]:
    """Map resolved key names to their fields."""
    return {spec.key: spec for spec in record_fields(cls)}
