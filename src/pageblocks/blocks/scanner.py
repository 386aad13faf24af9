"""Line scanner for markdown block structure.

The scanner makes a single forward pass over the lines of a document and
groups them into spans (a heading line, a run of list items, a fenced code
block...). It is a small state machine: the current mode selects the
handler for the next line, and each line's leading token decides whether
the mode stays, changes, or the line is handed back to normal mode.
End of input closes whatever span is still open.

Spans keep their source lines untouched; turning them into blocks is the
parser's job.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum


class ScanMode(str, Enum):
    NORMAL = "normal"
    LIST = "list"
    FENCE = "fence"
    TABLE = "table"
    TOGGLE = "toggle"


class LineToken(str, Enum):
    """Leading token of a single line."""

    BLANK = "blank"
    FENCE = "fence"
    MATH_FENCE = "math_fence"
    HEADING = "heading"
    RULE = "rule"
    LIST_ITEM = "list_item"
    QUOTE = "quote"
    TOGGLE_OPEN = "toggle_open"
    TOGGLE_CLOSE = "toggle_close"
    TABLE_ROW = "table_row"
    INDENTED = "indented"
    TEXT = "text"


class SpanKind(str, Enum):
    TEXT = "text"
    QUOTE = "quote"
    HEADING = "heading"
    RULE = "rule"
    LIST = "list"
    FENCE = "fence"
    MATH = "math"
    TABLE = "table"
    TOGGLE = "toggle"


@dataclass
class Span:
    """A run of source lines that forms one block-level construct.

    ``closed`` is False when end of input cut a fence or toggle short.
    """

    kind: SpanKind
    lines: list[str] = field(default_factory=list)
    start_line: int = 1
    closed: bool = True

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


# =============================================================================
# Line Classification
# =============================================================================

FENCE_RE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
MATH_FENCE_RE = re.compile(r"^ {0,3}\$\$\s*$")
HEADING_RE = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
RULE_RE = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
LIST_ITEM_RE = re.compile(r"^([ \t]*)([-*+]|\d{1,9}[.)])(?:[ \t]+(.*))?$")
QUOTE_RE = re.compile(r"^ {0,3}>")
TOGGLE_OPEN_RE = re.compile(r"^ {0,3}<details(\s+open)?\s*>\s*$", re.IGNORECASE)
TOGGLE_CLOSE_RE = re.compile(r"^ {0,3}</details>\s*$", re.IGNORECASE)
DELIMITER_CELL_RE = re.compile(r"^:?-+:?$")


def classify(line: str) -> LineToken:
    """Get the leading token of a line."""
    if not line.strip():
        return LineToken.BLANK
    if FENCE_RE.match(line) and not _is_inline_backticks(line):
        return LineToken.FENCE
    if MATH_FENCE_RE.match(line):
        return LineToken.MATH_FENCE
    if HEADING_RE.match(line):
        return LineToken.HEADING
    if RULE_RE.match(line):
        return LineToken.RULE
    if LIST_ITEM_RE.match(line):
        return LineToken.LIST_ITEM
    if QUOTE_RE.match(line):
        return LineToken.QUOTE
    if TOGGLE_OPEN_RE.match(line):
        return LineToken.TOGGLE_OPEN
    if TOGGLE_CLOSE_RE.match(line):
        return LineToken.TOGGLE_CLOSE
    if "|" in line:
        return LineToken.TABLE_ROW
    if line[0] in " \t":
        return LineToken.INDENTED
    return LineToken.TEXT


def _is_inline_backticks(line: str) -> bool:
    # A backtick fence's info string may not contain backticks
    match = FENCE_RE.match(line)
    return bool(match and match.group(1)[0] == "`" and "`" in match.group(2))


def split_table_row(line: str) -> list[str]:
    """Split a pipe table row into stripped cells, keeping escaped pipes."""
    body = line.strip()
    if body.startswith("|"):
        body = body[1:]
    if body.endswith("|") and not body.endswith("\\|"):
        body = body[:-1]
    cells: list[str] = []
    current: list[str] = []
    escaped = False
    for char in body:
        if char == "|" and not escaped:
            cells.append("".join(current).strip())
            current = []
            continue
        escaped = char == "\\" and not escaped
        current.append(char)
    cells.append("".join(current).strip())
    return cells


def is_delimiter_row(line: str, columns: int | None = None) -> bool:
    """Check for a table delimiter row such as ``| --- | :-: |``."""
    if "|" not in line:
        return False
    cells = split_table_row(line)
    if not cells or not all(DELIMITER_CELL_RE.match(cell) for cell in cells):
        return False
    return columns is None or len(cells) == columns


# =============================================================================
# Scanner
# =============================================================================


class BlockScanner:
    """Groups markdown lines into spans.

    Usage:
        spans = BlockScanner(text.splitlines()).scan()
    """

    def __init__(self, lines: list[str]) -> None:
        self.lines = lines
        self.mode = ScanMode.NORMAL
        self.spans: list[Span] = []
        self._open: Span | None = None
        self._fence_marker: str | None = None
        # Scans the body of an open toggle the way its content is parsed later
        self._body: BlockScanner | None = None

    def scan(self) -> list[Span]:
        """Run the scan and return the spans in source order."""
        for index, line in enumerate(self.lines):
            self._feed(index, line)
        self._close(closed=self.mode not in (ScanMode.FENCE, ScanMode.TOGGLE))
        return self.spans

    # -------------------------------------------------------------------------
    # Span bookkeeping
    # -------------------------------------------------------------------------

    def _start(self, kind: SpanKind, index: int, line: str, mode: ScanMode = ScanMode.NORMAL) -> None:
        self._close()
        self._open = Span(kind=kind, lines=[line], start_line=index + 1)
        self.mode = mode

    def _close(self, closed: bool = True) -> None:
        if self._open is not None:
            self._open.closed = closed
            self.spans.append(self._open)
        self._open = None
        self._fence_marker = None
        self._body = None
        self.mode = ScanMode.NORMAL

    def _feed(self, index: int, line: str) -> None:
        # A handler returns False to hand the line back in normal mode
        while not self._HANDLERS[self.mode](self, index, line):
            pass

    def _emit(self, kind: SpanKind, index: int, line: str) -> None:
        self._close()
        self.spans.append(Span(kind=kind, lines=[line], start_line=index + 1))

    def _append(self, line: str) -> None:
        assert self._open is not None
        self._open.lines.append(line)

    # -------------------------------------------------------------------------
    # Mode handlers
    # -------------------------------------------------------------------------

    def _scan_normal(self, index: int, line: str) -> bool:
        token = classify(line)
        open_kind = self._open.kind if self._open is not None else None

        if token is LineToken.BLANK:
            self._close()
        elif token is LineToken.FENCE:
            self._start(SpanKind.FENCE, index, line, ScanMode.FENCE)
            self._fence_marker = FENCE_RE.match(line).group(1)
        elif token is LineToken.MATH_FENCE:
            self._start(SpanKind.MATH, index, line, ScanMode.FENCE)
            self._fence_marker = "$$"
        elif token is LineToken.TOGGLE_OPEN:
            self._start(SpanKind.TOGGLE, index, line, ScanMode.TOGGLE)
            self._body = BlockScanner(self.lines)
        elif token is LineToken.HEADING:
            self._emit(SpanKind.HEADING, index, line)
        elif token is LineToken.RULE:
            self._emit(SpanKind.RULE, index, line)
        elif token is LineToken.LIST_ITEM:
            self._start(SpanKind.LIST, index, line, ScanMode.LIST)
        elif token is LineToken.QUOTE:
            if open_kind is SpanKind.QUOTE:
                self._append(line)
            else:
                self._start(SpanKind.QUOTE, index, line)
        elif token is LineToken.TABLE_ROW and self._table_starts_at(index):
            self._start(SpanKind.TABLE, index, line, ScanMode.TABLE)
        elif open_kind is SpanKind.TEXT:
            self._append(line)
        else:
            self._start(SpanKind.TEXT, index, line)
        return True

    def _scan_list(self, index: int, line: str) -> bool:
        token = classify(line)
        # Indented lines belong to the list whatever they look like
        if token is LineToken.LIST_ITEM or (token is not LineToken.BLANK and line[0] in " \t"):
            self._append(line)
            return True
        self._close()
        return False

    def _scan_fence(self, index: int, line: str) -> bool:
        self._append(line)
        if self._closes_fence(line):
            self._close()
        return True

    def _scan_table(self, index: int, line: str) -> bool:
        if line.strip() and "|" in line:
            self._append(line)
            return True
        self._close()
        return False

    def _scan_toggle(self, index: int, line: str) -> bool:
        """Track the toggle body until its closing tag.

        The body is fed to a nested scanner. A ``</details>`` line closes the
        toggle only where that scanner would start a new line with it; inside
        a fence or as list continuation it is body text.
        """
        self._append(line)
        body = self._body
        assert body is not None
        if classify(line) is LineToken.TOGGLE_CLOSE and body._takes_as_new_line(line):
            self._close()
        else:
            body._feed(index, line)
        return True

    _HANDLERS: dict[ScanMode, Callable[[BlockScanner, int, str], bool]] = {
        ScanMode.NORMAL: _scan_normal,
        ScanMode.LIST: _scan_list,
        ScanMode.FENCE: _scan_fence,
        ScanMode.TABLE: _scan_table,
        ScanMode.TOGGLE: _scan_toggle,
    }

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _closes_fence(self, line: str) -> bool:
        marker = self._fence_marker
        if marker is None:
            return False
        if marker == "$$":
            return bool(MATH_FENCE_RE.match(line))
        stripped = line.strip()
        return (
            len(line) - len(line.lstrip(" ")) <= 3
            and len(stripped) >= len(marker)
            and set(stripped) == {marker[0]}
        )

    def _takes_as_new_line(self, line: str) -> bool:
        """Check whether the line would be handled in normal mode."""
        if self.mode is ScanMode.NORMAL:
            return True
        if self.mode is ScanMode.LIST:
            return not line.strip() or line[0] not in " \t"
        if self.mode is ScanMode.TABLE:
            return not line.strip() or "|" not in line
        return False

    def _table_starts_at(self, index: int) -> bool:
        if index + 1 >= len(self.lines):
            return False
        header = split_table_row(self.lines[index])
        return is_delimiter_row(self.lines[index + 1], columns=len(header))


def scan(text: str) -> list[Span]:
    """Split markdown text into spans."""
    return BlockScanner(text.splitlines()).scan()
