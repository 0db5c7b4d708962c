"""Text offsets, ranges and line/column mapping."""

from nxpy.text.text import (
    ZERO,
    LineCol,
    LineIndex,
    Span,
    TextRange,
    TextSize,
    slice_text_range,
)

__all__ = [
    "ZERO",
    "LineCol",
    "LineIndex",
    "Span",
    "TextRange",
    "TextSize",
    "slice_text_range",
]
