"""Character-level cursor over GOD text."""

from .errors import StructuralError
from .string_utils import BARE_DELIMITERS, TRIPLE_QUOTE, UNESCAPE_MAP, WHITESPACE

# Returned by peek/advance past the end of input
EOF = ""

CLOSING_BRACKETS = {"{": "}", "[": "]", "(": ")"}


class Scanner:
    """
    Cursor over an immutable GOD document.

    The position only moves forward and never passes the end of the text.
    Reading at the end of input yields EOF instead of raising; only
    ``expect`` and the string readers fail, and they raise StructuralError.
    """

    def __init__(self, text: str, strict: bool = False):
        self.text = text
        self.strict = strict
        self.pos = 0

    def eof(self) -> bool:
        return self.pos >= len(self.text)

    def fork(self) -> "Scanner":
        """Return an independent cursor at the same position, for lookahead."""
        probe = Scanner(self.text, self.strict)
        probe.pos = self.pos
        return probe

    def peek(self) -> str:
        """Look at the current character without advancing."""
        if self.eof():
            return EOF
        return self.text[self.pos]

    def advance(self) -> str:
        """Return the current character and move past it."""
        if self.eof():
            return EOF
        char = self.text[self.pos]
        self.pos += 1
        return char

    def peek_ahead(self, n: int) -> str:
        """Look at up to n characters, truncated at the end of input."""
        return self.text[self.pos : self.pos + n]

    def skip_whitespace(self) -> None:
        while not self.eof() and self.text[self.pos] in WHITESPACE:
            self.pos += 1

    def read_bare_token(self) -> str:
        """Read an unquoted token up to the next delimiter or whitespace."""
        self.skip_whitespace()
        start = self.pos
        while not self.eof() and self.text[self.pos] not in BARE_DELIMITERS:
            self.pos += 1
        return self.text[start : self.pos].strip()

    def read_until(self, delimiters: str) -> str:
        """Read up to (not including) the first of the given delimiters."""
        start = self.pos
        while not self.eof() and self.text[self.pos] not in delimiters:
            self.pos += 1
        return self.text[start : self.pos]

    def expect(self, char: str, context: str) -> None:
        """Consume a required character."""
        if self.peek() != char:
            raise self.error(f"Expected '{char}' {context}, got {self.describe()}")
        self.pos += 1

    def describe(self) -> str:
        """Describe the current character for error messages."""
        if self.eof():
            return "end of input"
        return repr(self.peek())

    def error(self, message: str) -> StructuralError:
        """Build a StructuralError pointing at the current position."""
        return StructuralError(f"{message} at position {self.pos}")

    def read_string_value(self) -> str:
        """Read a triple-quoted, quoted or bare string."""
        if self.peek_ahead(3) == TRIPLE_QUOTE:
            return self.read_triple_string()
        if self.peek() == '"':
            return self.read_string()
        return self.read_bare_token()

    def read_string(self) -> str:
        """
        Read a double-quoted string and process its escape sequences.

        Raises:
            StructuralError: If the string is unterminated, or (strict mode)
                contains an unknown escape sequence.
        """
        self.expect('"', "at start of string")
        chunks = []
        while not self.eof():
            char = self.advance()
            if char == "\\":
                if self.eof():
                    raise self.error("Unterminated escape in string")
                escaped = self.advance()
                if escaped in UNESCAPE_MAP:
                    chunks.append(UNESCAPE_MAP[escaped])
                elif self.strict:
                    raise self.error(f"Invalid escape sequence: \\{escaped}")
                else:
                    chunks.append(escaped)
                continue
            if char == '"':
                return "".join(chunks)
            chunks.append(char)
        raise self.error("Unterminated string")

    def read_triple_string(self) -> str:
        """Read a verbatim triple-quoted string."""
        if self.peek_ahead(3) != TRIPLE_QUOTE:
            raise self.error(f"Expected triple quote, got {self.describe()}")
        start = self.pos + 3
        end = self.text.find(TRIPLE_QUOTE, start)
        if end == -1:
            self.pos = len(self.text)
            raise self.error("Unterminated triple-quoted string")
        self.pos = end + 3
        return self.text[start:end]


def skip_value(scanner: Scanner) -> None:
    """
    Consume one well-formed value without interpreting it.

    Bracketed values are matched across all three bracket kinds, and strings
    inside them are read whole so their contents never count as brackets.

    Raises:
        StructuralError: On a mismatched closing bracket or unexpected end
            of input.
    """
    scanner.skip_whitespace()
    char = scanner.peek()

    if char == '"':
        scanner.read_string_value()
        return

    if char not in CLOSING_BRACKETS:
        scanner.read_bare_token()
        return

    pending: list[str] = []
    while True:
        char = scanner.peek()
        if char == EOF:
            raise scanner.error("Unterminated value")
        if char == '"':
            scanner.read_string_value()
            continue
        scanner.advance()
        if char in CLOSING_BRACKETS:
            pending.append(CLOSING_BRACKETS[char])
        elif char in ")]}":
            expected = pending.pop()
            if char != expected:
                raise scanner.error(f"Mismatched '{char}', expected '{expected}'")
            if not pending:
                return
