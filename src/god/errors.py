"""Exceptions raised by the GOD codec."""


class GodError(Exception):
    """Base class for all GOD encoding and decoding errors."""


class UsageError(GodError, ValueError):
    """The decode target cannot receive a value."""


class StructuralError(GodError, SyntaxError):
    """The text does not follow the grammar (missing or unbalanced delimiters)."""


class GodTypeError(GodError, TypeError):
    """A value or destination shape is unsupported, or a literal does not fit its type."""
