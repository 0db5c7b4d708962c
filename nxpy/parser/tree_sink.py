"""Lossless tree sink for parser events."""

from dataclasses import dataclass

from nxpy.cst import GreenNode, TreeBuilder
from nxpy.diagnostics import Diagnostic
from nxpy.lexer import Trivia, TriviaPiece
from nxpy.syntax import NxSyntaxKind
from nxpy.text import TextSize


@dataclass(frozen=True, slots=True)
class ParsedGreenTree:
    root: GreenNode
    diagnostics: list[Diagnostic]


class LosslessTreeSink:
    """Converts parser events + trivia ownership into a green CST."""

    def __init__(
        self,
        text: str,
        trivia: list[Trivia],
        builder: TreeBuilder | None = None,
    ) -> None:
        self._text = text
        self._trivia = trivia
        self._text_pos = TextSize.from_int(0)
        self._trivia_pos = 0
        self._parents_count = 0
        self._builder = builder if builder is not None else TreeBuilder()
        self._needs_eof = True
        self._trivia_pieces: list[TriviaPiece] = []

    def token(self, kind: NxSyntaxKind, end: TextSize, field: str | None = None) -> None:
        self._do_token(kind, end, field)

    def start_node(self, kind: NxSyntaxKind, field: str | None = None) -> None:
        self._builder.start_node(kind, field)
        self._parents_count += 1

    def finish_node(self) -> None:
        self._parents_count -= 1
        if self._parents_count < 0:
            raise RuntimeError("finish_node called more often than start_node")

        if self._parents_count == 0 and self._needs_eof:
            self._do_token(NxSyntaxKind.EOF, TextSize.from_int(len(self._text)), None)

        self._builder.finish_node()

    def finish(self) -> GreenNode:
        return self._builder.finish()

    def _do_token(self, kind: NxSyntaxKind, token_end: TextSize, field: str | None) -> None:
        if kind == NxSyntaxKind.EOF:
            self._needs_eof = False

        # Attach all trivia up to token start as leading trivia.
        self._eat_trivia(trailing=False, token_end=token_end)
        token_start = self._text_pos
        trailing_start = len(self._trivia_pieces)

        self._text_pos = token_end

        # Attach trailing trivia until next newline boundary.
        self._eat_trivia(trailing=True, token_end=token_end)

        token_text = self._text[token_start.value : token_end.value]
        leading = tuple(self._trivia_pieces[:trailing_start])
        trailing = tuple(self._trivia_pieces[trailing_start:])

        self._builder.token_with_trivia(
            kind=kind,
            text=token_text,
            leading=leading,
            trailing=trailing,
            field=field,
        )
        self._trivia_pieces.clear()

    def _eat_trivia(self, trailing: bool, token_end: TextSize) -> None:
        while self._trivia_pos < len(self._trivia):
            trivia = self._trivia[self._trivia_pos]
            trivia_start = trivia.range.start
            trivia_end = trivia.range.end

            if trivia.trailing != trailing:
                break
            if self._text_pos != trivia_start:
                break
            if not trailing and trivia_end > token_end:
                break

            self._trivia_pieces.append(TriviaPiece(kind=trivia.kind, length=trivia.range.len()))
            self._text_pos = trivia_end
            self._trivia_pos += 1
