from bisect import bisect_right
from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True, slots=True, order=True)
class TextSize:
    """Opaque measure of text length / index into text."""

    value: int

    def __post_init__(self):
        if self.value < 0:
            raise ValueError("TextSize cannot be negative")

    @staticmethod
    def of(text: str) -> "TextSize":
        """Create a TextSize from a string's length."""
        return TextSize(len(text))

    @staticmethod
    def from_int(value: int) -> "TextSize":
        return TextSize(value)

    def __add__(self, other: "TextSize") -> "TextSize":
        return TextSize(self.value + other.value)

    def __repr__(self) -> str:
        return f"TextSize({self.value})"


ZERO: Final[TextSize] = TextSize(0)


@dataclass(frozen=True, slots=True, order=True)
class TextRange:
    """
    Half-open range [start, end) of code point offsets into the source.

    Invariant:
    - 0 <= start <= end
    """

    _start: int
    _end: int

    def __post_init__(self):
        if self._start < 0 or self._end < 0:
            raise ValueError("TextRange positions cannot be negative")
        if self._start > self._end:
            raise ValueError("TextRange invariant violated: start > end")

    @staticmethod
    def new(start: TextSize, end: TextSize) -> "TextRange":
        return TextRange(start.value, end.value)

    @staticmethod
    def at(offset: TextSize, length: TextSize) -> "TextRange":
        return TextRange(offset.value, offset.value + length.value)

    @staticmethod
    def empty(offset: TextSize) -> "TextRange":
        return TextRange(offset.value, offset.value)

    @staticmethod
    def from_offsets(start: int, end: int) -> "TextRange":
        return TextRange(start, end)

    @property
    def start(self) -> TextSize:
        return TextSize(self._start)

    @property
    def end(self) -> TextSize:
        return TextSize(self._end)

    def len(self) -> TextSize:
        return TextSize(self._end - self._start)

    def is_empty(self) -> bool:
        return self._start == self._end

    def as_tuple(self) -> tuple[int, int]:
        return (self._start, self._end)

    def contains(self, offset: TextSize) -> bool:
        return self._start <= offset.value < self._end

    def contains_inclusive(self, offset: TextSize) -> bool:
        return self._start <= offset.value <= self._end

    def contains_range(self, other: "TextRange") -> bool:
        return self._start <= other._start and other._end <= self._end

    def cover(self, other: "TextRange") -> "TextRange":
        """Get the minimal range that covers both this range and another range."""
        return TextRange(min(self._start, other._start), max(self._end, other._end))

    def __repr__(self) -> str:
        return f"TextRange({self._start}, {self._end})"


def slice_text_range(source: str, range: TextRange) -> str:
    """Coord system matches python string indices so we can just slice."""
    return source[range.start.value : range.end.value]


@dataclass(frozen=True, slots=True)
class LineCol:
    """0-based line and UTF-8 byte column."""

    line: int
    col: int


@dataclass(frozen=True, slots=True)
class Span:
    """Byte span with derived 0-based line/column positions for both ends."""

    start_byte: int
    end_byte: int
    start_line: int
    start_col: int
    end_line: int
    end_col: int

    def as_tuple(self) -> tuple[int, int, int, int, int, int]:
        return (
            self.start_byte,
            self.end_byte,
            self.start_line,
            self.start_col,
            self.end_line,
            self.end_col,
        )


class LineIndex:
    """Maps code point offsets to UTF-8 byte offsets and line/column pairs.

    Line breaks are `\\n`, `\\r\\n` and a lone `\\r`, matching the lexer.
    """

    __slots__ = ("_text", "_line_starts", "_line_start_bytes")

    def __init__(self, text: str) -> None:
        self._text = text
        starts = [0]
        index = 0
        length = len(text)
        while index < length:
            ch = text[index]
            if ch == "\r":
                if index + 1 < length and text[index + 1] == "\n":
                    index += 1
                starts.append(index + 1)
            elif ch == "\n":
                starts.append(index + 1)
            index += 1
        self._line_starts = starts

        byte_starts: list[int] = []
        previous_char = 0
        previous_byte = 0
        for start in starts:
            previous_byte += _utf8_len(text[previous_char:start])
            previous_char = start
            byte_starts.append(previous_byte)
        self._line_start_bytes = byte_starts

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def line_of(self, offset: int) -> int:
        return bisect_right(self._line_starts, offset) - 1

    def byte_offset(self, offset: int) -> int:
        line = self.line_of(offset)
        line_start = self._line_starts[line]
        return self._line_start_bytes[line] + _utf8_len(self._text[line_start:offset])

    def line_col(self, offset: int) -> LineCol:
        line = self.line_of(offset)
        line_start = self._line_starts[line]
        return LineCol(line, _utf8_len(self._text[line_start:offset]))

    def span(self, range: TextRange) -> Span:
        start, end = range.as_tuple()
        start_pos = self.line_col(start)
        end_pos = self.line_col(end)
        return Span(
            start_byte=self.byte_offset(start),
            end_byte=self.byte_offset(end),
            start_line=start_pos.line,
            start_col=start_pos.col,
            end_line=end_pos.line,
            end_col=end_pos.col,
        )


def _utf8_len(text: str) -> int:
    if text.isascii():
        return len(text)
    try:
        # Undecodable input bytes are carried as U+DC80..U+DCFF, one per byte.
        return len(text.encode("utf-8", errors="surrogateescape"))
    except UnicodeEncodeError:
        return len(text.encode("utf-8", errors="surrogatepass"))
