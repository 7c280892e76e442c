"""
GOD (Grounded Object Data) - Python Implementation

A compact, human-readable JSON alternative with no null: empty or absent
values stand for the zero value of their type, and sequences of records are
written as tables.

Usage:
    from dataclasses import dataclass

    import god

    @dataclass
    class Person:
        name: str
        age: int
        address: str = god.god_field("addr", default="")

    # Encode Python data to GOD
    god.marshal(Person("John", 30))
    # b'{name="John";age=30;addr=}'

    god.marshal([Person("Alice", 30, "NYC"), Person("Bob", 25)])
    # b'{(name,age,addr:"Alice",30,"NYC";"Bob",25,"";)}'

    # Decode GOD to Python data
    person = god.unmarshal(b'{name="John";age=30}', Person)
    people = god.unmarshal(b'{(name,age:"Alice",30;)}', list[Person])
    data = god.unmarshal(b'{status=200;tags=["a","b"]}', dict)

    # With options
    from god import DecodeOptions, EncodeOptions

    text = god.encode(person, EncodeOptions(compact=False, indent=4))
    person = god.decode(text, Person, DecodeOptions(strict=True))
"""

__version__ = "1.0.0"

from .decode import decode, unmarshal
from .encode import encode, marshal, marshal_beautify
from .errors import GodError, GodTypeError, StructuralError, UsageError
from .grounding import UNKNOWN_LITERAL, is_zero, zero_value
from .records import god_field, record_fields
from .types import DecodeOptions, EncodeOptions, FieldSpec, GodValue, Shape, Table

__all__ = [
    # Version
    "__version__",
    # Main API
    "marshal",
    "marshal_beautify",
    "unmarshal",
    "encode",
    "decode",
    # Options
    "EncodeOptions",
    "DecodeOptions",
    # Records
    "god_field",
    "record_fields",
    "FieldSpec",
    # Grounding
    "UNKNOWN_LITERAL",
    "is_zero",
    "zero_value",
    # Types
    "GodValue",
    "Shape",
    "Table",
    # Errors
    "GodError",
    "UsageError",
    "StructuralError",
    "GodTypeError",
]
