"""Token source that hides trivia and records it separately."""

from dataclasses import dataclass

from nxpy.diagnostics import Diagnostic
from nxpy.lexer import NORMAL_CONTEXT, BufferedLexer, LexContext, LexerCheckpoint
from nxpy.lexer.tokens import (
    TokenFlags,
    TokenKind,
    Trivia,
    TriviaKind,
    trivia_kind_from_token_kind,
)
from nxpy.text import TextRange, TextSize


@dataclass(frozen=True, slots=True)
class TokenSourceCheckpoint:
    lexer_checkpoint: LexerCheckpoint
    trivia_len: int
    current_kind: TokenKind
    current_range: TextRange
    current_context: LexContext
    preceding_line_break: bool
    has_preceding_trivia: bool
    before_current: LexerCheckpoint
    before_current_trivia_len: int

    @property
    def current_start(self) -> TextSize:
        return self.current_range.start

    @property
    def trivia_position(self) -> int:
        return self.trivia_len


class TokenSource:
    """Bridge between lexer and parser that strips trivia but records ownership.

    The current token remembers the lexer state right after the previous
    non-trivia token, so it can be re-lexed (leading trivia included) when the
    grammar switches to another lexing context.
    """

    def __init__(self, lexer: BufferedLexer, context: LexContext = NORMAL_CONTEXT) -> None:
        self._lexer = lexer
        self._trivia: list[Trivia] = []
        self._current_kind: TokenKind = TokenKind.EOF
        self._current_range: TextRange = TextRange.empty(TextSize.from_int(0))
        self._current_context = context
        self._preceding_line_break = False
        self._current_has_preceding_trivia = False
        self._before_current: LexerCheckpoint = lexer.checkpoint
        self._before_current_trivia_len = 0
        self._next_non_trivia_token(context)

    @property
    def current(self) -> TokenKind:
        return self._current_kind

    @property
    def current_range(self) -> TextRange:
        return self._current_range

    @property
    def current_context(self) -> LexContext:
        return self._current_context

    @property
    def text(self) -> str:
        return self._lexer.source

    @property
    def position(self) -> TextSize:
        return self._current_range.start

    @property
    def has_preceding_line_break(self) -> bool:
        return self._preceding_line_break

    @property
    def trivia(self) -> list[Trivia]:
        return self._trivia

    @property
    def lexer_diagnostics(self) -> list[Diagnostic]:
        return self._lexer.inner.diagnostics

    @property
    def lexer_diagnostics_len(self) -> int:
        return len(self._lexer.inner.diagnostics)

    @property
    def checkpoint(self) -> TokenSourceCheckpoint:
        return TokenSourceCheckpoint(
            lexer_checkpoint=self._lexer.checkpoint,
            trivia_len=len(self._trivia),
            current_kind=self._current_kind,
            current_range=self._current_range,
            current_context=self._current_context,
            preceding_line_break=self._preceding_line_break,
            has_preceding_trivia=self._current_has_preceding_trivia,
            before_current=self._before_current,
            before_current_trivia_len=self._before_current_trivia_len,
        )

    @property
    def has_preceding_trivia(self) -> bool:
        return self._current_has_preceding_trivia

    def bump(self) -> None:
        self.bump_with_context(NORMAL_CONTEXT)

    def bump_with_context(self, context: LexContext) -> None:
        if self._current_kind != TokenKind.EOF:
            self._next_non_trivia_token(context)

    def relex(self, context: LexContext) -> None:
        """Re-lex the current token, with its leading trivia, in `context`."""
        if context == self._current_context:
            return
        self._lexer.rewind(self._before_current)
        del self._trivia[self._before_current_trivia_len :]
        self._next_non_trivia_token(context)

    def nth(self, n: int) -> TokenKind:
        """Kind of the n-th non-trivia token ahead, always lexed in the normal context."""
        if n == 0:
            return self._current_kind
        lookahead = self._lexer.nth_non_trivia(n)
        return lookahead.kind if lookahead is not None else TokenKind.EOF

    def nth_range(self, n: int) -> TextRange:
        if n == 0:
            return self._current_range
        lookahead = self._lexer.nth_non_trivia(n)
        if lookahead is not None:
            return lookahead.range
        return TextRange.empty(self._current_range.end)

    def has_nth_preceding_line_break(self, n: int) -> bool:
        if n == 0:
            return self._preceding_line_break
        lookahead = self._lexer.nth_non_trivia(n)
        return lookahead.has_preceding_line_break() if lookahead is not None else False

    def has_nth_preceding_trivia(self, n: int) -> bool:
        if n == 0:
            return self.has_preceding_trivia
        next_range = self.nth_range(n)
        if n == 1:
            prev_range = self._current_range
        else:
            prev_range = self.nth_range(n - 1)
        return next_range.start > prev_range.end

    def rewind(self, checkpoint: TokenSourceCheckpoint) -> None:
        self._lexer.rewind(checkpoint.lexer_checkpoint)
        del self._trivia[checkpoint.trivia_len :]

        self._current_kind = checkpoint.current_kind
        self._current_range = checkpoint.current_range
        self._current_context = checkpoint.current_context
        self._preceding_line_break = checkpoint.preceding_line_break
        self._current_has_preceding_trivia = checkpoint.has_preceding_trivia
        self._before_current = checkpoint.before_current
        self._before_current_trivia_len = checkpoint.before_current_trivia_len

    def finish(self) -> tuple[list[Trivia], list[Diagnostic]]:
        return (self._trivia, self._lexer.finish())

    def _next_non_trivia_token(self, context: LexContext) -> None:
        self._before_current = self._lexer.checkpoint
        self._before_current_trivia_len = len(self._trivia)
        self._current_context = context

        # Trivia before the first token of the file is always leading.
        trailing = self._before_current.position > 0
        self._preceding_line_break = False
        saw_trivia = False

        while True:
            kind = self._lexer.next_token(context)
            token_range = self._lexer.current_range

            if kind.is_trivia:
                saw_trivia = True
                trivia_kind = trivia_kind_from_token_kind(kind)
                if trivia_kind == TriviaKind.NEWLINE:
                    trailing = False
                    self._preceding_line_break = True
                self._trivia.append(Trivia(trivia_kind, token_range, trailing))
                continue

            self._current_kind = kind
            self._current_range = token_range
            self._current_has_preceding_trivia = saw_trivia
            if self._lexer.current_flags & TokenFlags.PRECEDING_LINE_BREAK:
                self._preceding_line_break = True
            break
