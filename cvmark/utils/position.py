"""
Source Position Primitives

Zero-based line/character coordinates compatible with editor protocols.
Characters count UTF-16 code units so ranges line up with what editors
report for non-BMP text (emoji, rare kanji).

Preconditions: line and character are non-negative. Negative inputs are a
caller bug and are not checked.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Generic, List, Tuple, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class Position:
    """
    A position in a text document.

    Ordering compares line first, then character.
    """

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """
    A span in a text document, end not before start.

    Attributes:
        start: First position of the span
        end: Position just past the span
    """

    start: Position
    end: Position

    def contains(self, position: Position) -> bool:
        """True if position lies within the range, both ends inclusive."""
        return self.start <= position <= self.end

    def encloses(self, other: "Range") -> bool:
        """True if other lies entirely within this range."""
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True)
class Located(Generic[T]):
    """
    A value paired with the source span it was parsed from.

    Attributes:
        value: Parsed value (any type, including None)
        range: Source span of the value
    """

    value: T
    range: Range


def create_position(line: int, character: int) -> Position:
    return Position(line=line, character=character)


def create_range(start: Position, end: Position) -> Range:
    return Range(start=start, end=end)


def create_range_from_numbers(
    start_line: int, start_character: int, end_line: int, end_character: int
) -> Range:
    return Range(
        start=Position(start_line, start_character),
        end=Position(end_line, end_character),
    )


def located(value: T, range: Range) -> Located[T]:
    return Located(value=value, range=range)


def utf16_length(text: str) -> int:
    """Length of text in UTF-16 code units."""
    return len(text) + sum(1 for char in text if ord(char) > 0xFFFF)


class LineIndex:
    """
    Maps code-point offsets in a document to editor positions.

    Built once per parse. Line boundaries are "\\n" or "\\r\\n"; lines are
    stored without the "\\r" while offsets still count it.

    Example:
        >>> index = LineIndex("ab\\ncd")
        >>> index.position_at(4)
        Position(line=1, character=1)
    """

    def __init__(self, text: str):
        self.text = text
        raw_lines = text.split("\n")
        self._line_starts: List[int] = [0]
        for line in raw_lines[:-1]:
            self._line_starts.append(self._line_starts[-1] + len(line) + 1)
        self.lines: List[str] = [line[:-1] if line.endswith("\r") else line for line in raw_lines]

    def locate(self, offset: int) -> Tuple[int, int]:
        """Line and code-point column of an offset (clamped to the document)."""
        offset = max(0, min(offset, len(self.text)))
        line = bisect_right(self._line_starts, offset) - 1
        return line, offset - self._line_starts[line]

    def position_at(self, offset: int) -> Position:
        """Position of a code-point offset (clamped to the document)."""
        line, column = self.locate(offset)
        return self.position_in_line(line, column)

    def position_in_line(self, line: int, column: int) -> Position:
        """Position of a code-point column within a given line."""
        if line >= len(self.lines):
            return self.end_position()
        return Position(line, utf16_length(self.lines[line][:column]))

    def line_range(self, line: int, start_column: int = 0) -> Range:
        """Range from start_column to the end of a line."""
        text = self.lines[line] if line < len(self.lines) else ""
        return Range(
            self.position_in_line(line, start_column),
            Position(line, utf16_length(text)),
        )

    def end_position(self) -> Position:
        last = len(self.lines) - 1
        return Position(last, utf16_length(self.lines[last]))
