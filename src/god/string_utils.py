"""String utilities for GOD encoding/decoding."""

# GOD only writes these 5 escape sequences
ESCAPE_MAP = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

UNESCAPE_MAP = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

TRIPLE_QUOTE = '"""'

WHITESPACE = frozenset(" \t\r\n")

# Characters that end a bare token
BARE_DELIMITERS = WHITESPACE | frozenset("=;{}[](),:")


def escape_string(value: str) -> str:
    """
    Escape a string for use in GOD quoted strings.

    Only the 5 valid GOD escape sequences are produced:
    - \\\\ (backslash)
    - \\" (double quote)
    - \\n (newline)
    - \\r (carriage return)
    - \\t (tab)

    Args:
        value: The string to escape.

    Returns:
        The escaped string (without surrounding quotes).
    """
    return "".join(ESCAPE_MAP.get(char, char) for char in value)


def encode_string(value: str) -> str:
    """
    Encode a string literal.

    Strings containing a newline are written triple-quoted and verbatim,
    unless they also contain a triple quote or end with a quote, which the
    verbatim form cannot hold. Every other string is double-quoted and escaped.

    Args:
        value: The string to encode.

    Returns:
        The quoted literal.
    """
    if "\n" in value and TRIPLE_QUOTE not in value and not value.endswith('"'):
        return f"{TRIPLE_QUOTE}{value}{TRIPLE_QUOTE}"
    return f'"{escape_string(value)}"'


def is_bare_key(key: str) -> bool:
    """
    Check if a key can be written as a bare token.

    Keys are never quoted in GOD, so they must be non-empty and free of
    whitespace, quotes, backslashes and grammar delimiters.
    """
    if not key:
        return False
    return not any(c in BARE_DELIMITERS or c in '"\\' for c in key)
