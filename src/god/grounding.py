"""
Grounding policy shared by the encoder and the decoder.

GOD has no null. An empty or absent value stands for the zero value of its
type; a value whose type is unknown is written as the two-character sentinel
``\\0``.
"""

import dataclasses
import datetime
from types import NoneType, UnionType
from typing import Any, Union, get_args, get_origin

from .errors import GodTypeError, UsageError
from .records import field_types, is_exported, is_record_type
from .types import Shape

# The unknown/absent sentinel as it appears in GOD text
UNKNOWN_LITERAL = "\\0"

# Containers a sequence decodes into
SEQUENCE_TYPES = (list, tuple, set, frozenset)


def is_optional(tp: Any) -> bool:
    """Check if an annotation is ``X | None`` (``Optional[X]``)."""
    if get_origin(tp) not in (Union, UnionType):
        return False
    args = get_args(tp)
    return len(args) == 2 and NoneType in args


def shape_of(tp: Any) -> Shape:
    """
    Classify a type annotation into one of the destination shapes.

    Args:
        tp: The type annotation.

    Returns:
        The destination shape.

    Raises:
        GodTypeError: For annotations the codec cannot fill.
    """
    if tp is Any or tp is object:
        return Shape.DYNAMIC

    origin = get_origin(tp)

    if origin is Union or origin is UnionType:
        if is_optional(tp):
            return Shape.OPTIONAL
        raise GodTypeError(f"Unsupported union type: {tp!r}")

    # bool first, it is a subclass of int
    if tp is bool:
        return Shape.BOOL
    if tp is int:
        return Shape.INTEGER
    if tp is float:
        return Shape.FLOAT
    if tp is str:
        return Shape.STRING

    if tp in SEQUENCE_TYPES or origin in SEQUENCE_TYPES:
        return Shape.SEQUENCE

    if tp is dict or origin is dict:
        args = get_args(tp)
        if args and args[0] is not str:
            raise GodTypeError(f"Mapping keys must be str, got {tp!r}")
        return Shape.MAPPING

    # datetime is a subclass of date
    if isinstance(tp, type) and issubclass(tp, (datetime.date, datetime.time)):
        return Shape.TEMPORAL

    if is_record_type(tp):
        return Shape.RECORD

    raise GodTypeError(f"Unsupported destination type: {tp!r}")


def unwrap_optional(tp: Any) -> Any:
    """Return X for an ``X | None`` annotation."""
    return next(arg for arg in get_args(tp) if arg is not NoneType)


def container_type(tp: Any) -> type:
    """Return the concrete container of a sequence annotation."""
    return get_origin(tp) or tp


def element_type(tp: Any, index: int = 0) -> Any:
    """
    Return the element type of a sequence annotation (Any if bare).

    Fixed-length tuple annotations (``tuple[int, str]``) type each position;
    positions past the end are Any.
    """
    args = get_args(tp)
    if not args:
        return Any
    if container_type(tp) is tuple and args[-1] is not Ellipsis:
        return args[index] if index < len(args) else Any
    return args[0]


def value_type(tp: Any) -> Any:
    """Return the value type of a mapping annotation (Any if bare)."""
    args = get_args(tp)
    return args[1] if len(args) == 2 else Any


def zero_value(tp: Any) -> Any:
    """
    Return the zero value of a type.

    Args:
        tp: The type annotation.

    Returns:
        A fresh zero value ("" / 0 / 0.0 / False / empty container / zeroed
        record / the earliest date or time, None for optional and dynamic
        types).
    """
    shape = shape_of(tp)

    if shape is Shape.STRING:
        return ""
    if shape is Shape.INTEGER:
        return 0
    if shape is Shape.FLOAT:
        return 0.0
    if shape is Shape.BOOL:
        return False
    if shape is Shape.SEQUENCE:
        return container_type(tp)()
    if shape is Shape.MAPPING:
        return {}
    if shape is Shape.TEMPORAL:
        return tp.min
    if shape is Shape.RECORD:
        return new_record(tp)
    return None


def new_record(cls: type, values: dict[str, Any] | None = None) -> Any:
    """
    Construct a record from decoded field values.

    Exported fields missing from ``values`` are set to their zero value;
    dataclass defaults of exported fields are ignored, so a fresh record is
    grounded. Private fields keep their defaults when they have one. The
    record is built in one constructor call, so frozen records work too.

    Args:
        cls: The record type.
        values: Field values by attribute name.

    Raises:
        UsageError: If a value targets a field of a frozen record that the
            constructor does not accept.
    """
    values = dict(values or {})
    hints = field_types(cls)
    kwargs = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        if f.name in values:
            kwargs[f.name] = values.pop(f.name)
            continue
        has_default = (
            f.default is not dataclasses.MISSING
            or f.default_factory is not dataclasses.MISSING
        )
        if not is_exported(f.name) and has_default:
            continue
        kwargs[f.name] = zero_value(hints.get(f.name, Any))
    record = cls(**kwargs)

    # Fields declared with init=False
    if values and cls.__dataclass_params__.frozen:
        raise UsageError(f"Cannot set field '{next(iter(values))}' of frozen {cls.__name__}")
    for name, value in values.items():
        setattr(record, name, value)
    return record


def is_zero(value: Any) -> bool:
    """
    Check if a value is the zero value of its own type.

    Records are never zero, whatever their fields hold.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return not value
    if isinstance(value, (int, float)):
        return value == 0
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def is_empty(value: Any, tp: Any = Any) -> bool:
    """
    Check if a value is written with an empty right-hand side.

    For an optional annotation only None is empty: ``0`` in an ``int | None``
    field is a present value and must be written.
    """
    if is_optional(tp):
        return value is None
    return is_zero(value)
