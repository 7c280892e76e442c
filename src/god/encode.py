"""GOD encoder implementation."""

from collections.abc import Mapping
from typing import Any

from .errors import GodTypeError
from .grounding import (
    SEQUENCE_TYPES,
    UNKNOWN_LITERAL,
    container_type,
    element_type,
    is_empty,
    is_optional,
    unwrap_optional,
    value_type,
)
from .primitives import encode_primitive
from .records import is_record, record_fields
from .string_utils import encode_string, is_bare_key
from .table import format_table
from .types import EncodeOptions, Table


def marshal(value: Any) -> bytes:
    """
    Encode a Python value to compact GOD.

    Args:
        value: The value to encode (record, mapping, sequence or scalar).

    Returns:
        The UTF-8 encoded document.
    """
    return encode(value, EncodeOptions(compact=True)).encode("utf-8")


def marshal_beautify(value: Any) -> bytes:
    """
    Encode a Python value to indented GOD.

    Args:
        value: The value to encode (record, mapping, sequence or scalar).

    Returns:
        The UTF-8 encoded document.
    """
    return encode(value, EncodeOptions(compact=False)).encode("utf-8")


def encode(value: Any, options: EncodeOptions | None = None) -> str:
    """
    Encode a Python value to GOD text.

    The document root is always an object. Records and mappings are written
    as the document itself; any other value is wrapped as the single raw
    value of the root object, e.g. ``{"John"}`` or ``{[1,2,3]}``.

    Args:
        value: The value to encode.
        options: Encoding options.

    Returns:
        The GOD-formatted string.

    Raises:
        GodTypeError: If the value (or anything inside it) has no GOD form.
    """
    opts = options or EncodeOptions()
    normalized = _normalize_value(value)

    if is_record(normalized) or isinstance(normalized, Mapping):
        return _encode_value(normalized, opts, 1)

    body = _encode_value(normalized, opts, 1)
    if not body:
        return "{}"
    if opts.compact:
        return "{" + body + "}"
    return "{\n" + _pad(opts, 1) + body + "\n}"


def _encode_value(value: Any, opts: EncodeOptions, level: int, tp: Any = Any) -> str:
    """Encode any value; None contributes nothing. tp is the declared type, if known."""
    value = _normalize_value(value)

    if value is None:
        return ""

    if is_optional(tp):
        tp = unwrap_optional(tp)

    if isinstance(value, Table):
        return format_table(value, level, opts.compact, opts.indent)

    if is_record(value):
        items = [
            (spec.key, getattr(value, spec.name), spec.type) for spec in record_fields(value)
        ]
        return _encode_object(items, opts, level)

    if isinstance(value, Mapping):
        vtype = value_type(tp) if container_type(tp) is dict else Any
        return _encode_object(_mapping_items(value, vtype), opts, level)

    if isinstance(value, list):
        return _encode_sequence(value, opts, level, tp)

    return encode_primitive(value)


def _encode_object(items: list[tuple[str, Any, Any]], opts: EncodeOptions, level: int) -> str:
    """Encode key=value pairs; empty values leave the right-hand side empty."""
    entries = []
    for key, value, tp in items:
        rendered = "" if is_empty(value, tp) else _encode_value(value, opts, level + 1, tp)
        entries.append(f"{key}={rendered}")

    if opts.compact:
        return "{" + ";".join(entries) + "}"

    indent = _pad(opts, level)
    lines = ["{"]
    lines.extend(f"{indent}{entry};" for entry in entries)
    lines.append(_pad(opts, level - 1) + "}")
    return "\n".join(lines)


def _encode_sequence(items: list, opts: EncodeOptions, level: int, tp: Any = Any) -> str:
    """Encode a sequence as a table (records of one type) or a list."""
    if not items:
        return "[]"

    if _is_table_sequence(items):
        return format_table(_build_table(items, opts), level, opts.compact, opts.indent)

    typed = container_type(tp) in SEQUENCE_TYPES
    values = [
        UNKNOWN_LITERAL
        if item is None
        else _encode_value(item, opts, level, element_type(tp, i) if typed else Any)
        for i, item in enumerate(items)
    ]
    return "[" + ",".join(values) + "]"


def _is_table_sequence(items: list) -> bool:
    """Check if a sequence holds records that all share one type."""
    first = items[0]
    if not is_record(first):
        return False
    record_type = type(first)
    return all(type(item) is record_type for item in items)


def _build_table(records: list, opts: EncodeOptions) -> Table:
    """Build the header and rendered cells for a sequence of records."""
    fields = record_fields(records[0])
    header = [spec.key for spec in fields]
    rows = [
        [_encode_cell(getattr(record, spec.name), opts, spec.type) for spec in fields]
        for record in records
    ]
    return Table(header=header, rows=rows)


def _encode_cell(value: Any, opts: EncodeOptions, tp: Any = Any) -> str:
    """
    Encode one table cell.

    Position carries meaning in a table, so a cell is never left out: an
    empty string is written ``""`` and a missing or empty composite value is
    written as the ``\\0`` sentinel. An empty composite in an optional field
    is present, not missing, so like every other composite it is written as
    the quoted compact encoding of the value.
    """
    value = _normalize_value(value)

    if value is None:
        return UNKNOWN_LITERAL

    if isinstance(value, (str, bool, int, float)):
        return encode_primitive(value)

    if is_empty(value, tp):
        return UNKNOWN_LITERAL

    compact = EncodeOptions(compact=True, indent=opts.indent)
    return encode_string(_encode_value(value, compact, 1, tp))


def _mapping_items(mapping: Mapping, vtype: Any = Any) -> list[tuple[str, Any, Any]]:
    """Return mapping entries with their keys as bare tokens."""
    items = []
    for key, value in mapping.items():
        key = key if isinstance(key, str) else str(key)
        if not is_bare_key(key):
            raise GodTypeError(f"Cannot encode mapping key {key!r} as a bare token")
        items.append((key, value, vtype))
    return items


def _pad(opts: EncodeOptions, level: int) -> str:
    """Indentation for a level (always empty in compact mode)."""
    if opts.compact or level <= 0:
        return ""
    return " " * (opts.indent * level)


def _normalize_value(value: Any) -> Any:
    """
    Normalize a value to a shape the encoder dispatches on.

    Converts:
    - Tuples to lists
    - Sets to lists (sorted by their string form)
    - Date objects to ISO strings

    Args:
        value: The value to normalize.

    Returns:
        The normalized value (unchanged when no conversion applies).

    Raises:
        GodTypeError: If the value has no GOD form.
    """
    if value is None or isinstance(value, (bool, int, float, str, list, Table)):
        return value

    if is_record(value) or isinstance(value, Mapping):
        return value

    if isinstance(value, tuple):
        return list(value)

    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)

    # Date, time and datetime objects
    if hasattr(value, "isoformat"):
        return value.isoformat()

    raise GodTypeError(f"Cannot encode value of type {type(value).__name__}")
