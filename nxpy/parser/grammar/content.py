"""Element bodies: element sequences, mixed content, embed text and raw text."""

from dataclasses import dataclass
from typing import Final

from nxpy.diagnostics.codes import PARSER_CONTROL_IN_MIXED_CONTENT, PARSER_EXPECTED_EXPRESSION
from nxpy.lexer import (
    EMBED_TEXT_CONTEXT,
    NORMAL_CONTEXT,
    TEXT_CONTEXT,
    LexContext,
    TokenKind,
    TriviaKind,
)
from nxpy.parser.event import TokenEvent
from nxpy.parser.grammar.common import at_close_tag, expect, missing, unexpected_token
from nxpy.parser.marker import CompletedMarker, Marker
from nxpy.parser.parser import Parser, ParserCheckpoint, ParserProgress
from nxpy.syntax import NxSyntaxKind
from nxpy.text import TextRange, TextSize

_TEXT_TOKENS: Final[frozenset[TokenKind]] = frozenset(
    {
        TokenKind.TEXT_CHUNK,
        TokenKind.ENTITY,
        TokenKind.ESCAPED_LBRACE,
        TokenKind.ESCAPED_RBRACE,
    }
)
_EMBED_TEXT_TOKENS: Final[frozenset[TokenKind]] = _TEXT_TOKENS | {TokenKind.ESCAPED_AT}

# Trivia in the normal context that reads as text in the text context.
_TEXT_LIKE_TRIVIA: Final[frozenset[TriviaKind]] = frozenset({TriviaKind.COMMENT, TriviaKind.SKIPPED})


@dataclass(frozen=True, slots=True)
class ContentShape:
    """How an element body was read.

    `control_range` is the first control construct that parsed cleanly in a
    body that turned out to be mixed content; it is reported as misplaced.
    """

    is_elements: bool
    control_range: TextRange | None = None


def parse_element_content(parser: Parser) -> CompletedMarker:
    """Parse the body of a plain element up to (not including) its close tag.

    The body is read once as an element sequence. If text turns up before the
    close tag, the items read so far are kept and the rest continues as mixed
    content; only a misplaced control construct (or trivia that is text in
    mixed content) makes the parser step back.
    """
    parser.relex(NORMAL_CONTEXT)
    offset = parser.position.value
    shape = parser.recall("element_content", offset)
    if isinstance(shape, ContentShape) and not shape.is_elements:
        return _parse_mixed_body(parser, parser.start(), shape)

    marker = parser.start()
    body = parser.checkpoint()
    progress = ParserProgress()
    saw_markup = False
    reads_as_text = False
    first_control: ParserCheckpoint | None = None
    control_range: TextRange | None = None

    while True:
        parser.relex(NORMAL_CONTEXT)
        if _gap_has_text_like_trivia(parser):
            reads_as_text = True
            break
        if parser.at(TokenKind.EOF) or at_close_tag(parser) or not can_start_elements_item(parser):
            break
        progress.assert_progressing(parser)

        item_checkpoint = parser.checkpoint()
        start = parser.current_range.start
        item = parse_elements_item(parser)
        if item is None:
            break
        kind = item.kind_in(parser)
        if kind.is_control:
            if first_control is None:
                first_control = item_checkpoint
            if _has_header_error(parser, item_checkpoint):
                # `for more info` is prose, not a broken loop.
                reads_as_text = True
                break
            if control_range is None and not parser.has_errors_since(item_checkpoint):
                control_range = TextRange.new(start, parser.current_range.start)
        if kind == NxSyntaxKind.ELEMENT or kind.is_control:
            saw_markup = True

    parser.relex(NORMAL_CONTEXT)
    if saw_markup and not reads_as_text and at_close_tag(parser):
        parser.remember("element_content", offset, ContentShape(is_elements=True))
        return marker.complete(parser, NxSyntaxKind.ELEMENTS_EXPRESSION).with_field(parser, "content")

    shape = ContentShape(is_elements=False, control_range=control_range)
    parser.remember("element_content", offset, shape)
    if _has_text_like_trivia_since(parser, body):
        parser.rewind(body)
    elif first_control is not None:
        parser.rewind(first_control)
    return _parse_mixed_body(parser, marker, shape)


def _parse_mixed_body(parser: Parser, marker: Marker, shape: ContentShape) -> CompletedMarker:
    if shape.control_range is not None:
        parser.error(PARSER_CONTROL_IN_MIXED_CONTENT.at(shape.control_range, parser.file_name))
    _parse_mixed_items(parser)
    return marker.complete(parser, NxSyntaxKind.MIXED_CONTENT).with_field(parser, "content")


def _gap_has_text_like_trivia(parser: Parser) -> bool:
    checkpoint = parser.source.checkpoint
    gap = parser.source.trivia[checkpoint.before_current_trivia_len : checkpoint.trivia_len]
    return any(trivia.kind in _TEXT_LIKE_TRIVIA for trivia in gap)


def _has_text_like_trivia_since(parser: Parser, checkpoint: ParserCheckpoint) -> bool:
    trivia = parser.source.trivia[checkpoint.source_checkpoint.before_current_trivia_len :]
    return any(piece.kind in _TEXT_LIKE_TRIVIA for piece in trivia)


def _has_header_error(parser: Parser, checkpoint: ParserCheckpoint) -> bool:
    """True if the control construct started at `checkpoint` failed before its opening `{`."""
    if not parser.has_errors_since(checkpoint):
        return False
    brace_end = next(
        (
            event.end
            for event in parser.events[checkpoint.events_len :]
            if isinstance(event, TokenEvent) and event.kind == NxSyntaxKind.LBRACE
        ),
        None,
    )
    first_error = _first_error_start(parser, checkpoint)
    if brace_end is None or first_error is None:
        return True
    return first_error < brace_end


def _first_error_start(parser: Parser, checkpoint: ParserCheckpoint) -> TextSize | None:
    new_errors = (
        parser.diagnostics[checkpoint.diagnostics_len :]
        + parser.source.lexer_diagnostics[checkpoint.lexer_diagnostics_len :]
    )
    if not new_errors:
        return None
    return min(diagnostic.range.start for diagnostic in new_errors)


def parse_mixed_content(parser: Parser, field: str | None = None) -> CompletedMarker:
    """Text runs, child elements and `{ value }` interpolations; no control constructs."""
    marker = parser.start()
    _parse_mixed_items(parser)
    return marker.complete(parser, NxSyntaxKind.MIXED_CONTENT).with_field(parser, field)


def _parse_mixed_items(parser: Parser) -> None:
    progress = ParserProgress()

    while True:
        parser.relex(TEXT_CONTEXT)
        if parser.at(TokenKind.EOF) or at_close_tag(parser):
            break
        progress.assert_progressing(parser)

        if parser.at_set(_TEXT_TOKENS):
            _parse_text_run(parser, NxSyntaxKind.TEXT_RUN, _TEXT_TOKENS, TEXT_CONTEXT)
        elif parser.at(TokenKind.LESS_THAN):
            parse_element(parser)
        elif parser.at(TokenKind.LBRACE):
            parse_interpolation(parser)
        else:
            # A stray `}` is the only other token text content produces.
            parser.error(unexpected_token(parser))
            error = parser.start()
            parser.bump(context=TEXT_CONTEXT)
            error.complete(parser, NxSyntaxKind.ERROR)


def parse_text_content(parser: Parser) -> CompletedMarker:
    """Body of an untyped embed element: text runs and `{ value }` interpolations."""
    marker = parser.start()
    progress = ParserProgress()

    while True:
        parser.relex(TEXT_CONTEXT)
        if parser.at(TokenKind.EOF) or parser.at(TokenKind.LESS_THAN):
            break
        progress.assert_progressing(parser)

        if parser.at_set(_TEXT_TOKENS):
            _parse_text_run(parser, NxSyntaxKind.TEXT_RUN, _TEXT_TOKENS, TEXT_CONTEXT)
        elif parser.at(TokenKind.LBRACE):
            parse_interpolation(parser)
        else:
            parser.error(unexpected_token(parser))
            error = parser.start()
            parser.bump(context=TEXT_CONTEXT)
            error.complete(parser, NxSyntaxKind.ERROR)

    return marker.complete(parser, NxSyntaxKind.TEXT_CONTENT).with_field(parser, "content")


def parse_embed_content(parser: Parser) -> CompletedMarker:
    """Body of a typed embed element: text and `@{ value }` interpolations."""
    marker = parser.start()
    progress = ParserProgress()

    while True:
        parser.relex(EMBED_TEXT_CONTEXT)
        if parser.at(TokenKind.EOF) or parser.at(TokenKind.LESS_THAN):
            break
        progress.assert_progressing(parser)

        if parser.at(TokenKind.AT_LBRACE):
            _parse_embed_interpolation(parser)
        else:
            _parse_text_run(parser, NxSyntaxKind.EMBED_TEXT_RUN, _EMBED_TEXT_TOKENS, EMBED_TEXT_CONTEXT)

    return marker.complete(parser, NxSyntaxKind.EMBED_CONTENT).with_field(parser, "content")


def parse_raw_text_run(parser: Parser) -> CompletedMarker:
    """Raw embed body, captured verbatim up to the closing tag."""
    marker = parser.start()
    while parser.at(TokenKind.RAW_TEXT_CHUNK):
        parser.bump(context=parser.source.current_context)
    return marker.complete(parser, NxSyntaxKind.RAW_TEXT_RUN).with_field(parser, "content")


def parse_interpolation(parser: Parser, field: str | None = None) -> CompletedMarker:
    """`{ value }`; the current token is `{`."""
    marker = parser.start()
    parser.bump()  # {
    if parse_value_expression(parser, "value") is None:
        missing(parser, "value", PARSER_EXPECTED_EXPRESSION)
    expect(parser, TokenKind.RBRACE)
    return marker.complete(parser, NxSyntaxKind.INTERPOLATION_EXPRESSION).with_field(parser, field)


def _parse_embed_interpolation(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()  # @{
    if parse_value_expression(parser, "value") is None:
        missing(parser, "value", PARSER_EXPECTED_EXPRESSION)
    expect(parser, TokenKind.RBRACE, context=EMBED_TEXT_CONTEXT)
    return marker.complete(parser, NxSyntaxKind.EMBED_INTERPOLATION_EXPRESSION)


def _parse_text_run(
    parser: Parser,
    kind: NxSyntaxKind,
    tokens: frozenset[TokenKind],
    context: LexContext,
) -> CompletedMarker:
    marker = parser.start()
    while parser.at_set(tokens):
        parser.bump(context=context)
    return marker.complete(parser, kind)


from nxpy.parser.grammar.expressions import parse_value_expression
from nxpy.parser.grammar.markup import (
    can_start_elements_item,
    parse_element,
    parse_elements_expression,
    parse_elements_item,
)
