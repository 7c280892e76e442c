"""
Tabular sub-format shared by the encoder and the decoder.

A table is written ``(header:rows)``: the header lists key names separated by
commas, and every row lists one cell per header name, separated by commas and
terminated by ``;``::

    (name,age,addr:"John",12,"";"Alice",25,"Boston";)

The encoder renders cells and hands a Table to ``format_table``; the decoder
reads the header and rows here and maps cells onto record fields itself.
"""

from collections.abc import Generator
from typing import NamedTuple

from .grounding import UNKNOWN_LITERAL
from .scanner import CLOSING_BRACKETS, EOF, Scanner, skip_value
from .types import Table


class Cell(NamedTuple):
    """One decoded table cell."""

    text: str
    """Cell text, unescaped if it was quoted."""

    quoted: bool
    """Whether the cell was a quoted string."""

    @property
    def grounded(self) -> bool:
        """True for empty and ``\\0`` cells, which leave their field at zero."""
        if self.quoted:
            return not self.text
        return not self.text or self.text == UNKNOWN_LITERAL


def format_table(table: Table, level: int = 0, compact: bool = True, indent: int = 2) -> str:
    """
    Render a table.

    Args:
        table: Header and pre-rendered cells.
        level: Indentation level of the rows (indented layout).
        compact: Compact or indented layout.
        indent: Spaces per level (indented layout).

    Returns:
        The table text.
    """
    if not table.rows:
        return "()"

    header = "(" + ",".join(table.header) + ":"
    rows = [",".join(cells) + ";" for cells in table.rows]

    if compact:
        return header + "".join(rows) + ")"

    row_indent = " " * (indent * level)
    close_indent = " " * (indent * max(level - 1, 0))
    lines = [header]
    lines.extend(row_indent + row for row in rows)
    lines.append(close_indent + ")")
    return "\n".join(lines)


def parse_header(scanner: Scanner) -> list[str] | None:
    """
    Read ``(`` and the header names through ``:``.

    Returns:
        The header names, or None for a table closed before any ``:``
        (``()``), in which case the closing ``)`` has been consumed.

    Raises:
        StructuralError: If the input ends inside the header.
    """
    scanner.skip_whitespace()
    scanner.expect("(", "at start of table")

    header = []
    while True:
        scanner.skip_whitespace()
        char = scanner.peek()
        if char == ":":
            scanner.advance()
            return header
        if char == ")":
            scanner.advance()
            return None
        if char == EOF:
            raise scanner.error("Unterminated table header")

        name = scanner.read_until(",:)").strip()
        if name:
            header.append(name)

        scanner.skip_whitespace()
        if scanner.peek() == ",":
            scanner.advance()


def parse_rows(scanner: Scanner) -> Generator[list[Cell], None, None]:
    """
    Read table rows through the closing ``)``.

    The ``;`` after the last row is optional.

    Yields:
        The cells of each row.

    Raises:
        StructuralError: If the input ends before the table is closed.
    """
    while True:
        scanner.skip_whitespace()
        char = scanner.peek()
        if char == ")":
            scanner.advance()
            return
        if char == EOF:
            raise scanner.error("Unterminated table")
        yield _parse_row(scanner)


def _parse_row(scanner: Scanner) -> list[Cell]:
    """Read the cells of one row, consuming its ``;`` terminator."""
    cells = []
    while True:
        scanner.skip_whitespace()
        char = scanner.peek()
        if char == ";":
            scanner.advance()
            return cells
        if char == ")":
            return cells
        if char == EOF:
            raise scanner.error("Unterminated table row")

        cells.append(_parse_cell(scanner))

        scanner.skip_whitespace()
        if scanner.peek() == ",":
            scanner.advance()


def _parse_cell(scanner: Scanner) -> Cell:
    """Read one cell: a quoted string, a bracketed value or a bare token."""
    char = scanner.peek()
    if char == '"':
        return Cell(scanner.read_string_value(), True)
    if char in CLOSING_BRACKETS:
        start = scanner.pos
        skip_value(scanner)
        return Cell(scanner.text[start : scanner.pos], False)
    return Cell(scanner.read_until(",;)").strip(), False)
