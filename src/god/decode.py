"""GOD decoder implementation."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, get_origin

from .errors import GodTypeError, StructuralError, UsageError
from .grounding import (
    UNKNOWN_LITERAL,
    container_type,
    element_type,
    is_optional,
    new_record,
    shape_of,
    unwrap_optional,
    value_type,
    zero_value,
)
from .primitives import parse_bool, parse_number, parse_scalar, parse_temporal
from .records import fields_by_key, is_record
from .scanner import EOF, Scanner, skip_value
from .table import Cell, parse_header, parse_rows
from .types import DecodeOptions, Shape

if TYPE_CHECKING:
    from collections.abc import Generator

logger = logging.getLogger(__name__)

SCALAR_SHAPES = (Shape.STRING, Shape.INTEGER, Shape.FLOAT, Shape.BOOL)


class _RootContent(Enum):
    """What the root object holds."""

    EMPTY = "empty"
    KEYED = "keyed"
    RAW = "raw"


def unmarshal(data: bytes | str, target: Any, options: DecodeOptions | None = None) -> Any:
    """
    Decode a GOD document.

    Args:
        data: UTF-8 encoded bytes, or text.
        target: Either a type (``Person``, ``list[Person]``, ``dict[str, int]``,
            ``str``, ``Any`` ...), in which case a new value is allocated, or a
            mutable instance (dataclass instance, list or dict) decoded in place.
        options: Decoding options.

    Returns:
        The decoded value (the target itself when decoding in place).

    Raises:
        UsageError: If the target cannot receive a value.
        StructuralError: For malformed input.
        GodTypeError: For unsupported targets and malformed literals.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise StructuralError(f"Input is not valid UTF-8: {exc}") from exc
    else:
        text = data
    return decode(text, target, options)


def decode(text: str, target: Any = Any, options: DecodeOptions | None = None) -> Any:
    """
    Decode GOD text.

    Args:
        text: The GOD-formatted string.
        target: A type to allocate, or a mutable instance to fill (see
            ``unmarshal``). Defaults to schema-less decoding.
        options: Decoding options.

    Returns:
        The decoded value.
    """
    opts = options or DecodeOptions()
    scanner = Scanner(text, strict=opts.strict)

    if _is_type_form(target):
        result = _decode_root(scanner, target)
    else:
        result = _decode_root_into(scanner, target)

    scanner.skip_whitespace()
    if opts.strict and not scanner.eof():
        raise scanner.error("Unexpected trailing data after document")

    return result


def _is_type_form(target: Any) -> bool:
    """Check if a target is a type annotation rather than an instance."""
    return target is Any or isinstance(target, type) or get_origin(target) is not None


def _decode_root_into(scanner: Scanner, target: Any) -> Any:
    """Decode the document into an existing mutable instance."""
    if target is None:
        raise UsageError("Decode target must not be None")

    if is_record(target):
        if type(target).__dataclass_params__.frozen:
            raise UsageError(f"Cannot decode into frozen {type(target).__name__}")
        scanner.skip_whitespace()
        for name, value in _record_entries(scanner, type(target)):
            setattr(target, name, value)
        return target

    if isinstance(target, dict):
        scanner.skip_whitespace()
        _decode_mapping(scanner, Any, target)
        return target

    if isinstance(target, list):
        target[:] = _decode_root(scanner, list)
        return target

    raise UsageError(f"Cannot decode into a {type(target).__name__} instance: not settable")


def _decode_root(scanner: Scanner, tp: Any) -> Any:
    """
    Decode the root object into a new value of the given type.

    Records and mappings read the root as an object. Every other type needs
    the root to hold a single raw value: ``{"Hello"}`` decodes into ``str``
    but ``{data="Hello"}`` does not.
    """
    scanner.skip_whitespace()
    if scanner.peek() != "{":
        raise scanner.error(f"Expected '{{' at start of document, got {scanner.describe()}")

    shape = shape_of(tp)
    if shape is Shape.OPTIONAL:
        return _decode_root(scanner, unwrap_optional(tp))

    if shape in (Shape.RECORD, Shape.MAPPING):
        return _decode_value(scanner, tp)

    content = _root_content(scanner)

    if content is _RootContent.EMPTY:
        if shape is Shape.DYNAMIC:
            return _decode_mapping(scanner, Any)
        scanner.expect("{", "at start of document")
        scanner.skip_whitespace()
        scanner.expect("}", "at end of document")
        return zero_value(tp)

    if content is _RootContent.KEYED:
        if shape is Shape.DYNAMIC:
            return _decode_mapping(scanner, Any)
        raise GodTypeError(f"Document holds key=value pairs and cannot decode into {tp!r}")

    # Single raw value. For a sequence type this includes the bare table
    # root, {(header:rows)}, which decodes straight into the list.
    scanner.expect("{", "at start of document")
    value = _decode_value(scanner, tp)
    scanner.skip_whitespace()
    scanner.expect("}", "after root value")
    return value


def _root_content(scanner: Scanner) -> _RootContent:
    """Look inside the root braces without consuming anything."""
    probe = scanner.fork()
    probe.advance()
    probe.skip_whitespace()
    if probe.peek() == "}":
        return _RootContent.EMPTY
    if probe.peek() == '"':
        return _RootContent.RAW
    key = probe.read_bare_token()
    probe.skip_whitespace()
    if key and probe.peek() == "=":
        return _RootContent.KEYED
    return _RootContent.RAW


def _decode_value(scanner: Scanner, tp: Any) -> Any:
    """Decode one value into a new value of the given type."""
    scanner.skip_whitespace()
    shape = shape_of(tp)

    if scanner.peek_ahead(2) == UNKNOWN_LITERAL:
        scanner.advance()
        scanner.advance()
        return zero_value(tp)

    if shape is Shape.RECORD:
        return new_record(tp, dict(_record_entries(scanner, tp)))

    if shape is Shape.MAPPING:
        return _decode_mapping(scanner, value_type(tp))

    if shape is Shape.SEQUENCE:
        return _decode_sequence(scanner, tp)

    if shape is Shape.OPTIONAL:
        return _decode_value(scanner, unwrap_optional(tp))

    if shape is Shape.DYNAMIC:
        return _decode_dynamic(scanner)

    if shape is Shape.STRING:
        return _decode_string(scanner)

    if shape is Shape.TEMPORAL:
        return parse_temporal(_decode_string(scanner), tp)

    return parse_scalar(_read_token(scanner, shape.value), shape)


def _object_entries(scanner: Scanner, context: str) -> Generator[tuple[str, bool], None, None]:
    """
    Walk the ``key=value`` pairs of an object.

    Yields each key with a flag telling whether a value follows. When the
    flag is set the consumer must read (or skip) exactly one value before
    asking for the next key. Separators between pairs are optional.

    Raises:
        StructuralError: On a missing key, ``=`` or closing ``}``.
    """
    scanner.expect("{", f"for {context}")

    while True:
        scanner.skip_whitespace()
        char = scanner.peek()
        if char == "}":
            scanner.advance()
            return
        if char == EOF:
            raise scanner.error(f"Expected '}}' at end of {context}")
        if char == ";":
            scanner.advance()
            continue

        key = scanner.read_bare_token()
        if not key:
            raise scanner.error(f"Expected key in {context}, got {scanner.describe()}")

        scanner.skip_whitespace()
        scanner.expect("=", f"after key '{key}'")
        scanner.skip_whitespace()

        if scanner.eof():
            raise scanner.error(f"Expected value or '}}' after '{key}=' in {context}")

        # Empty right-hand side: the zero value
        has_value = scanner.peek() not in (";", "}")
        yield key, has_value

        scanner.skip_whitespace()
        if scanner.peek() == ";":
            scanner.advance()


def _record_entries(scanner: Scanner, cls: type) -> Generator[tuple[str, Any], None, None]:
    """
    Read an object as record field values, skipping keys without a field.

    Yields:
        Attribute name and decoded value of each known key, in input order.
    """
    name = cls.__name__
    fields = fields_by_key(cls)

    for key, has_value in _object_entries(scanner, name):
        spec = fields.get(key)
        if spec is None:
            if scanner.strict:
                raise scanner.error(f"Unknown key '{key}' for {name}")
            logger.debug("Skipping unknown key %r for %s", key, name)
            if has_value:
                skip_value(scanner)
            continue

        value = _decode_value(scanner, spec.type) if has_value else zero_value(spec.type)
        yield spec.name, value


def _decode_mapping(scanner: Scanner, vtype: Any, into: dict | None = None) -> dict:
    """Decode an object into a string-keyed dict."""
    result = {} if into is None else into

    for key, has_value in _object_entries(scanner, "mapping"):
        result[key] = _decode_value(scanner, vtype) if has_value else zero_value(vtype)

    return result


def _decode_sequence(scanner: Scanner, tp: Any) -> Any:
    """
    Decode a ``[...]`` list, or a ``(...)`` table of records.

    The result is built as the annotated container (list, tuple, set or
    frozenset).
    """
    container = container_type(tp)
    scanner.skip_whitespace()
    if scanner.peek() == "(":
        return container(_decode_table(scanner, element_type(tp)))

    if scanner.peek() != "[":
        raise scanner.error(f"Expected '[' or '(' for sequence, got {scanner.describe()}")
    scanner.advance()

    items = []
    while True:
        scanner.skip_whitespace()
        char = scanner.peek()
        if char == "]":
            scanner.advance()
            return container(items)
        if char == EOF:
            raise scanner.error("Expected ']' at end of list")

        items.append(_decode_value(scanner, element_type(tp, len(items))))

        scanner.skip_whitespace()
        if scanner.peek() == ",":
            scanner.advance()


def _decode_table(scanner: Scanner, etype: Any) -> list:
    """
    Decode a table into a list of records.

    Cells map to fields by position through the header. Columns without a
    matching field and cells past the end of the header are read and
    dropped. Every row starts as a zero-valued record, so missing, empty and
    ``\\0`` cells leave their field grounded.
    """
    if shape_of(etype) is not Shape.RECORD:
        raise GodTypeError(f"Table format is only supported for sequences of records, not {etype!r}")

    header = parse_header(scanner)
    if header is None:
        return []

    fields = fields_by_key(etype)
    columns = [fields.get(name) for name in header]
    for name, spec in zip(header, columns):
        if spec is not None:
            continue
        if scanner.strict:
            raise scanner.error(f"Unknown table column '{name}' for {etype.__name__}")
        logger.debug("Discarding table column %r for %s", name, etype.__name__)

    records = []
    for cells in parse_rows(scanner):
        if len(cells) > len(header):
            if scanner.strict:
                raise scanner.error(f"Row has {len(cells)} cells for {len(header)} columns")
            logger.debug("Discarding %d excess cells in table row", len(cells) - len(header))

        values = {}
        for spec, cell in zip(columns, cells):
            if spec is None:
                continue
            if not cell.grounded:
                values[spec.name] = _decode_cell(cell, spec.type, scanner.strict)
            elif cell.quoted and is_optional(spec.type):
                # "" is a present empty value, \0 and an empty cell are absent
                values[spec.name] = zero_value(unwrap_optional(spec.type))
        records.append(new_record(etype, values))

    return records


def _decode_cell(cell: Cell, tp: Any, strict: bool) -> Any:
    """Convert a table cell to a field value."""
    shape = shape_of(tp)

    if shape is Shape.OPTIONAL:
        return _decode_cell(cell, unwrap_optional(tp), strict)

    if shape in SCALAR_SHAPES:
        return parse_scalar(cell.text, shape)

    if shape is Shape.TEMPORAL:
        return parse_temporal(cell.text, tp)

    if shape is Shape.DYNAMIC and cell.quoted:
        return cell.text

    # Composite cells hold an encoded value
    nested = Scanner(cell.text, strict)
    value = _decode_value(nested, tp)
    nested.skip_whitespace()
    if not nested.eof():
        raise nested.error("Unexpected data in table cell")
    return value


def _read_token(scanner: Scanner, expected: str) -> str:
    """Read a bare token that must not be empty."""
    token = scanner.read_bare_token()
    if not token:
        raise scanner.error(f"Expected {expected}, got {scanner.describe()}")
    return token


def _decode_string(scanner: Scanner) -> str:
    """Decode a quoted, triple-quoted or bare string."""
    if scanner.peek() == '"':
        return scanner.read_string_value()
    return _read_token(scanner, "string")


def _decode_dynamic(scanner: Scanner) -> Any:
    """
    Decode a value of unknown type by looking at its first character.

    Returns:
        dict, list, str, bool, int or float. The ``\\0`` sentinel (None) is
        handled by the caller.

    Raises:
        GodTypeError: For tables, which need a record type to decode into.
    """
    char = scanner.peek()

    if char == "{":
        return _decode_mapping(scanner, Any)

    if char == "[":
        return _decode_sequence(scanner, list)

    if char == "(":
        raise GodTypeError("Generic table decoding is not supported; decode into a list of records")

    if char == '"':
        return scanner.read_string_value()

    if char in ("t", "f"):
        return parse_bool(scanner.read_bare_token())

    return parse_number(_read_token(scanner, "value"))
