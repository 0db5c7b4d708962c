"""Buffered lexer with lookahead and checkpoint support."""

from collections import deque
from dataclasses import dataclass
from typing import Iterator

from nxpy.diagnostics import Diagnostic
from nxpy.lexer.lexer import Lexer, LexerCheckpoint
from nxpy.lexer.tokens import NORMAL_CONTEXT, LexContext, TokenFlags, TokenKind
from nxpy.text import TextRange, TextSize


@dataclass(frozen=True, slots=True)
class LookaheadToken:
    kind: TokenKind
    range: TextRange
    flags: TokenFlags

    def has_preceding_line_break(self) -> bool:
        return bool(self.flags & TokenFlags.PRECEDING_LINE_BREAK)


def _lookahead_token(checkpoint: LexerCheckpoint) -> LookaheadToken:
    return LookaheadToken(
        checkpoint.current_kind,
        TextRange.new(checkpoint.current_start, TextSize.from_int(checkpoint.position)),
        checkpoint.current_flags,
    )


class Lookahead:
    """Stores checkpoints for all and non-trivia tokens."""

    def __init__(self) -> None:
        self._all: deque[LexerCheckpoint] = deque()
        self._non_trivia: deque[LexerCheckpoint] = deque()

    @property
    def is_empty(self) -> bool:
        return not self._all

    def push_back(self, checkpoint: LexerCheckpoint) -> None:
        if not checkpoint.current_kind.is_trivia:
            self._non_trivia.append(checkpoint)
        self._all.append(checkpoint)

    def pop_front(self) -> LexerCheckpoint | None:
        if not self._all:
            return None
        checkpoint = self._all.popleft()
        if not checkpoint.current_kind.is_trivia and self._non_trivia:
            self._non_trivia.popleft()
        return checkpoint

    def get_checkpoint(self, index: int) -> LexerCheckpoint | None:
        if index < 0 or index >= len(self._all):
            return None
        return self._all[index]

    def get_non_trivia_checkpoint(self, index: int) -> LexerCheckpoint | None:
        if index < 0 or index >= len(self._non_trivia):
            return None
        return self._non_trivia[index]

    def clear(self) -> None:
        self._all.clear()
        self._non_trivia.clear()

    def all_len(self) -> int:
        return len(self._all)

    def non_trivia_len(self) -> int:
        return len(self._non_trivia)


class BufferedLexer:
    """Lexer wrapper for lookahead.

    Lookahead is always lexed in the normal context. Any request for a token in
    another context drops the buffered tokens and re-lexes from the current
    position, so stale normal-mode tokens never leak into text or tag content.
    """

    def __init__(self, lexer: Lexer) -> None:
        self._inner = lexer
        self._current_checkpoint: LexerCheckpoint | None = None
        self._lookahead = Lookahead()

    def _reset_lookahead(self) -> None:
        if self._current_checkpoint is not None:
            self._inner.rewind(self._current_checkpoint)
            self._lookahead.clear()
            self._current_checkpoint = None

    @property
    def inner(self) -> Lexer:
        return self._inner

    @property
    def lookahead(self) -> Lookahead:
        return self._lookahead

    def next_token(self, context: LexContext = NORMAL_CONTEXT) -> TokenKind:
        if not context.is_regular_context:
            self._reset_lookahead()
        elif (next_checkpoint := self._lookahead.pop_front()) is not None:
            if self._lookahead.is_empty:
                self._current_checkpoint = None
            else:
                self._current_checkpoint = next_checkpoint
            return next_checkpoint.current_kind

        self._current_checkpoint = None
        return self._inner.next_token(context).kind

    @property
    def current(self) -> TokenKind:
        if self._current_checkpoint is not None:
            return self._current_checkpoint.current_kind
        return self._inner.current

    @property
    def current_range(self) -> TextRange:
        if self._current_checkpoint is not None:
            return _lookahead_token(self._current_checkpoint).range
        return self._inner.current_range

    @property
    def current_flags(self) -> TokenFlags:
        if self._current_checkpoint is not None:
            return self._current_checkpoint.current_flags
        return self._inner.current_flags

    @property
    def source(self) -> str:
        return self._inner.source

    @property
    def checkpoint(self) -> LexerCheckpoint:
        if self._current_checkpoint is not None:
            return self._current_checkpoint
        return self._inner.checkpoint

    def rewind(self, checkpoint: LexerCheckpoint) -> None:
        self._inner.rewind(checkpoint)
        self._lookahead.clear()
        self._current_checkpoint = None

    def lookahead_iter(self) -> "LookaheadIterator":
        return LookaheadIterator(self)

    def nth_non_trivia(self, n: int) -> LookaheadToken | None:
        if n <= 0:
            raise ValueError("n must be >= 1")
        checkpoint = self._lookahead.get_non_trivia_checkpoint(n - 1)
        if checkpoint is not None:
            return _lookahead_token(checkpoint)

        remaining = n - self._lookahead.non_trivia_len()
        current_length = self._lookahead.all_len()

        for item in self.lookahead_iter().skip(current_length):
            if not item.kind.is_trivia:
                remaining -= 1
                if remaining == 0:
                    return item

        return None

    def finish(self) -> list[Diagnostic]:
        # Buffered tokens past the parser's position must not report twice.
        self._reset_lookahead()
        return self._inner.diagnostics


class LookaheadIterator:
    def __init__(self, lexer: BufferedLexer) -> None:
        self._buffered = lexer
        self._nth = 0

    def __iter__(self) -> Iterator[LookaheadToken]:
        return self

    def __next__(self) -> LookaheadToken:
        self._nth += 1

        if (checkpoint := self._buffered.lookahead.get_checkpoint(self._nth - 1)) is not None:
            return _lookahead_token(checkpoint)

        lexer = self._buffered.inner

        if lexer.current == TokenKind.EOF:
            raise StopIteration

        if self._buffered._current_checkpoint is None:
            self._buffered._current_checkpoint = lexer.checkpoint

        lexer.next_token(NORMAL_CONTEXT)
        checkpoint = lexer.checkpoint
        self._buffered.lookahead.push_back(checkpoint)
        return _lookahead_token(checkpoint)

    def skip(self, count: int) -> "LookaheadIterator":
        for _ in range(count):
            try:
                next(self)
            except StopIteration:
                break
        return self
