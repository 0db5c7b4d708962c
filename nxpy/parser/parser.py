"""Event-based parser core."""

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TypeVar

from nxpy.diagnostics import Diagnostic
from nxpy.lexer import NORMAL_CONTEXT, LexContext, TokenKind
from nxpy.parser.event import Event, StartEvent, TokenEvent
from nxpy.parser.marker import Marker
from nxpy.parser.options import ParserOptions
from nxpy.parser.token_source import TokenSource, TokenSourceCheckpoint
from nxpy.syntax import NxSyntaxKind
from nxpy.text import TextRange, TextSize

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ParserCheckpoint:
    source_checkpoint: TokenSourceCheckpoint
    events_len: int
    diagnostics_len: int
    error_count: int
    lexer_diagnostics_len: int
    speculative_depth: int
    depth: int


@dataclass(slots=True)
class ParserProgress:
    """Detect parser stalls inside list-style loops."""

    _position: TextSize | None = None

    def has_progressed(self, parser: "Parser") -> bool:
        has_progressed = self._position is None or self._position < parser.position
        self._position = parser.position
        return has_progressed

    def assert_progressing(self, parser: "Parser") -> None:
        if not self.has_progressed(parser):
            raise RuntimeError(f"Parser stopped making progress at {parser.current.name} {parser.current_range}")


class Parser:
    """Event-based parser.

    Besides the event stream the parser owns two pieces of per-parse state:
    a memo table for speculative decisions keyed by `(rule, offset)`, and the
    current nesting depth used to stop runaway recursion.
    """

    def __init__(
        self,
        source: TokenSource,
        options: ParserOptions | None = None,
        *,
        file_name: str = "<input>",
    ) -> None:
        self._source = source
        self._options = options or ParserOptions()
        self._file_name = file_name
        self._events: list[Event] = []
        self._diagnostics: list[Diagnostic] = []
        self._error_count = 0
        self._speculative_depth = 0
        self._depth = 0
        self._memo: dict[tuple[str, int], object] = {}

    @property
    def source(self) -> TokenSource:
        return self._source

    @property
    def options(self) -> ParserOptions:
        return self._options

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def events(self) -> list[Event]:
        return self._events

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self._diagnostics

    @property
    def current(self) -> TokenKind:
        return self._source.current

    @property
    def current_range(self) -> TextRange:
        return self._source.current_range

    @property
    def current_text(self) -> str:
        rng = self._source.current_range
        return self._source.text[rng.start.value : rng.end.value]

    @property
    def position(self) -> TextSize:
        return self._source.position

    @property
    def has_preceding_line_break(self) -> bool:
        return self._source.has_preceding_line_break

    @property
    def has_preceding_trivia(self) -> bool:
        return self._source.has_preceding_trivia

    @property
    def depth(self) -> int:
        return self._depth

    def at(self, kind: TokenKind) -> bool:
        return self.current == kind

    def at_set(self, kinds: frozenset[TokenKind] | set[TokenKind]) -> bool:
        return self.current in kinds

    def at_text(self, kind: TokenKind, text: str) -> bool:
        return self.current == kind and self.current_text == text

    def nth(self, n: int) -> TokenKind:
        return self._source.nth(n)

    def nth_at(self, n: int, kind: TokenKind) -> bool:
        return self.nth(n) == kind

    def nth_range(self, n: int) -> TextRange:
        return self._source.nth_range(n)

    def has_nth_preceding_line_break(self, n: int) -> bool:
        return self._source.has_nth_preceding_line_break(n)

    def has_nth_preceding_trivia(self, n: int) -> bool:
        return self._source.has_nth_preceding_trivia(n)

    def start(self) -> Marker:
        pos = len(self._events)
        self._events.append(StartEvent.tombstone())
        return Marker(pos=pos, start=self.position, old_start=pos)

    def checkpoint(self) -> ParserCheckpoint:
        return ParserCheckpoint(
            source_checkpoint=self._source.checkpoint,
            events_len=len(self._events),
            diagnostics_len=len(self._diagnostics),
            error_count=self._error_count,
            lexer_diagnostics_len=self._source.lexer_diagnostics_len,
            speculative_depth=self._speculative_depth,
            depth=self._depth,
        )

    def rewind(self, checkpoint: ParserCheckpoint) -> None:
        self._source.rewind(checkpoint.source_checkpoint)
        del self._events[checkpoint.events_len :]
        del self._diagnostics[checkpoint.diagnostics_len :]
        self._error_count = checkpoint.error_count
        self._speculative_depth = checkpoint.speculative_depth
        self._depth = checkpoint.depth

    def has_errors_since(self, checkpoint: ParserCheckpoint) -> bool:
        """True if any parser or lexer error was reported after `checkpoint`."""
        return (
            self._error_count > checkpoint.error_count
            or self._source.lexer_diagnostics_len > checkpoint.lexer_diagnostics_len
        )

    @contextmanager
    def speculative_parsing(self) -> Iterator[None]:
        self._speculative_depth += 1
        try:
            yield
        finally:
            self._speculative_depth -= 1

    def is_speculative_parsing(self) -> bool:
        return self._speculative_depth > 0

    def memoized(self, rule: str, compute: Callable[[], T]) -> T:
        """Run `compute` at most once per `(rule, offset)`."""
        key = (rule, self.position.value)
        if key in self._memo:
            return self._memo[key]  # type: ignore[return-value]
        result = compute()
        self._memo[key] = result
        logger.debug("speculation %s at %d -> %r", rule, key[1], result)
        return result

    def recall(self, rule: str, offset: int) -> object | None:
        """Outcome remembered for `rule` at `offset`, if any."""
        return self._memo.get((rule, offset))

    def remember(self, rule: str, offset: int, outcome: object) -> None:
        """Record the outcome of a real parse so a re-parse after rewind can reuse it.

        Outcomes seen while speculating are dropped: recovery is off there, so
        they may differ from what the real parse decides.
        """
        if self.is_speculative_parsing():
            return
        self._memo[(rule, offset)] = outcome
        logger.debug("remembered %s at %d -> %r", rule, offset, outcome)

    def enter_nesting(self) -> bool:
        """Increase the nesting depth; False once `max_nesting_depth` is exceeded."""
        if self._depth >= self._options.max_nesting_depth:
            return False
        self._depth += 1
        return True

    def exit_nesting(self) -> None:
        self._depth -= 1

    def bump(
        self,
        field: str | None = None,
        *,
        kind: NxSyntaxKind | None = None,
        context: LexContext = NORMAL_CONTEXT,
    ) -> None:
        """Consume the current token and lex the next one in `context`."""
        if self.current == TokenKind.EOF:
            return
        self._events.append(
            TokenEvent(
                kind=kind if kind is not None else NxSyntaxKind.from_token_kind(self.current),
                end=self.current_range.end,
                field=field,
            )
        )
        self._source.bump_with_context(context)

    def bump_any(self) -> None:
        self.bump()

    def relex(self, context: LexContext) -> None:
        self._source.relex(context)

    def eat(self, kind: TokenKind, field: str | None = None, *, context: LexContext = NORMAL_CONTEXT) -> bool:
        if self.current == kind:
            self.bump(field, context=context)
            return True
        return False

    def expect(
        self,
        kind: TokenKind,
        diagnostic: Diagnostic,
        field: str | None = None,
        *,
        context: LexContext = NORMAL_CONTEXT,
    ) -> bool:
        if self.eat(kind, field, context=context):
            return True
        self.error(diagnostic)
        return False

    def error(self, diagnostic: Diagnostic) -> None:
        self._error_count += 1
        if self._diagnostics:
            previous = self._diagnostics[-1]
            if previous.range.start == diagnostic.range.start:
                return
        self._diagnostics.append(diagnostic)

    def finish(self) -> tuple[list[Event], list[Diagnostic]]:
        return self._events, self._diagnostics
