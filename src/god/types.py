"""Type definitions for GOD encoder/decoder."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Decoded value type aliases
GodScalar = str | int | float | bool
GodList = list["GodValue"]
GodObject = dict[str, "GodValue"]
GodValue = GodScalar | GodList | GodObject | None


class Shape(Enum):
    """Destination shapes the decoder knows how to fill."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOL = "bool"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    RECORD = "record"
    TEMPORAL = "temporal"
    OPTIONAL = "optional"
    DYNAMIC = "dynamic"


@dataclass
class EncodeOptions:
    """Options for GOD encoding."""

    compact: bool = True
    """Emit compact text. False selects the indented layout."""

    indent: int = 2
    """Number of spaces per indentation level (indented layout only)."""


@dataclass
class DecodeOptions:
    """Options for GOD decoding."""

    strict: bool = False
    """Reject unknown keys, unknown table headers, excess cells, unknown
    escape sequences and trailing data instead of skipping them."""


@dataclass(frozen=True)
class FieldSpec:
    """One exported record field and the key it is written under."""

    name: str
    """Attribute name on the record."""

    key: str
    """Resolved key name in GOD text."""

    type: Any
    """Resolved type annotation."""


@dataclass
class Table:
    """A table ready for output: header names and pre-rendered cells."""

    header: list[str] = field(default_factory=list)
    """Column key names, in field declaration order."""

    rows: list[list[str]] = field(default_factory=list)
    """Rows of cell text, each cell already rendered (quotes included)."""
