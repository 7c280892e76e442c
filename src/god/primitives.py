"""Scalar value encoding and parsing for GOD."""

import math
import re
from typing import Any

from .errors import GodTypeError
from .grounding import UNKNOWN_LITERAL
from .string_utils import encode_string
from .types import Shape

# Optional sign, digits, optional fraction, optional exponent
NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")


def encode_primitive(value: Any) -> str:
    """
    Encode a scalar value to GOD format.

    Args:
        value: The scalar (bool, int, float or str).

    Returns:
        The encoded literal.

    Raises:
        GodTypeError: If the value is not a scalar.
    """
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, int):
        return str(value)

    if isinstance(value, float):
        return _encode_float(value)

    if isinstance(value, str):
        return encode_string(value)

    raise GodTypeError(f"Cannot encode value of type {type(value).__name__}")


def _encode_float(value: float) -> str:
    """Encode a float; whole values are written like integers."""
    if math.isnan(value) or math.isinf(value):
        return UNKNOWN_LITERAL
    if value.is_integer():
        # Also normalizes -0.0 to 0
        return str(int(value))
    return repr(value)


def parse_int(token: str) -> int:
    """
    Parse an integer literal.

    Whole-valued float text ("30.0", "1e3") is accepted.

    Raises:
        GodTypeError: If the token is not an integral number.
    """
    if not NUMBER_PATTERN.match(token):
        raise GodTypeError(f"Invalid integer: {token!r}")
    try:
        return int(token)
    except ValueError:
        number = float(token)
    if not number.is_integer():
        raise GodTypeError(f"Invalid integer: {token!r}")
    return int(number)


def parse_float(token: str) -> float:
    """
    Parse a float literal.

    Raises:
        GodTypeError: If the token is not a number.
    """
    if not NUMBER_PATTERN.match(token):
        raise GodTypeError(f"Invalid number: {token!r}")
    return float(token)


def parse_bool(token: str) -> bool:
    """
    Parse a boolean literal. Only ``true`` and ``false`` are accepted.

    Raises:
        GodTypeError: For any other token.
    """
    if token == "true":
        return True
    if token == "false":
        return False
    raise GodTypeError(f"Invalid boolean: {token!r}")


def parse_number(token: str) -> int | float:
    """
    Parse a number of unknown type.

    Returns an int when the text has no fraction or exponent, else a float.
    """
    if not NUMBER_PATTERN.match(token):
        raise GodTypeError(f"Invalid number: {token!r}")
    if any(c in token for c in ".eE"):
        return float(token)
    return int(token)


def parse_scalar(token: str, shape: Shape) -> Any:
    """
    Convert token text to a scalar of the given shape.

    Raises:
        GodTypeError: If the shape is not a scalar shape or the text does not
            parse.
    """
    if shape is Shape.STRING:
        return token
    if shape is Shape.INTEGER:
        return parse_int(token)
    if shape is Shape.FLOAT:
        return parse_float(token)
    if shape is Shape.BOOL:
        return parse_bool(token)
    raise GodTypeError(f"Not a scalar shape: {shape.value}")


def parse_temporal(token: str, tp: type) -> Any:
    """
    Parse an ISO 8601 date, time or datetime into the given type.

    Raises:
        GodTypeError: If the text is not in ISO format.
    """
    try:
        return tp.fromisoformat(token)
    except ValueError as exc:
        raise GodTypeError(f"Invalid {tp.__name__}: {token!r}") from exc
