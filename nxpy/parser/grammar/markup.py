"""Markup grammar: elements, embed elements, property lists and element sequences."""

from typing import Final

from nxpy.diagnostics.codes import PARSER_EXPECTED_NAME, PARSER_EXPECTED_VALUE
from nxpy.lexer import (
    EMBED_TEXT_CONTEXT,
    NORMAL_CONTEXT,
    TAG_CONTEXT,
    TEXT_CONTEXT,
    LexContext,
    TokenKind,
)
from nxpy.parser.grammar.common import (
    ARM_START_TOKENS,
    MARKUP_NAME_TOKENS,
    at_close_tag,
    expect,
    expected_token,
    missing,
    nesting_too_deep,
    parse_literal,
    parse_qualified_markup_name,
    report,
)
from nxpy.parser.marker import CompletedMarker
from nxpy.parser.parse_lists import ParseNodeList
from nxpy.parser.parse_recovery import ParseRecoveryTokenSet
from nxpy.parser.parser import Parser
from nxpy.syntax import NxSyntaxKind

RAW_MODIFIER: Final[str] = "raw"

_NAME_CONTINUATION: Final[frozenset[TokenKind]] = MARKUP_NAME_TOKENS | {TokenKind.DOT, TokenKind.MINUS}
_TAG_END: Final[frozenset[TokenKind]] = frozenset({TokenKind.GREATER_THAN, TokenKind.SLASH, TokenKind.EOF})


def parse_element(parser: Parser, field: str | None = None) -> CompletedMarker:
    """Parse a plain or embed element; the current token is `<`."""
    if not parser.enter_nesting():
        return nesting_too_deep(parser, field)
    try:
        return _parse_element(parser).with_field(parser, field)
    finally:
        parser.exit_nesting()


def _parse_element(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump(context=TAG_CONTEXT)  # <

    name = parse_qualified_markup_name(parser, "name")
    if name is None:
        report(parser, PARSER_EXPECTED_NAME, message="Expected an element name after `<`")

    if parser.at(TokenKind.COLON):
        tag_name = name.text(parser) if name is not None else None
        _parse_embed_element_rest(parser, tag_name)
        return marker.complete(parser, NxSyntaxKind.ELEMENT)

    parse_property_list(parser, "properties")

    if parser.at(TokenKind.SLASH):
        parser.bump(context=TAG_CONTEXT)
        expect(parser, TokenKind.GREATER_THAN)
        return marker.complete(parser, NxSyntaxKind.ELEMENT)

    if not expect(parser, TokenKind.GREATER_THAN):
        return marker.complete(parser, NxSyntaxKind.ELEMENT)

    parse_element_content(parser)
    parse_close_tag(parser)
    return marker.complete(parser, NxSyntaxKind.ELEMENT)


def _parse_embed_element_rest(parser: Parser, tag_name: str | None) -> None:
    parser.bump(context=TAG_CONTEXT)  # :

    text_type = False
    if parser.at(TokenKind.IDENTIFIER) and parser.current_text != RAW_MODIFIER and not _at_property_start(parser):
        parser.bump("text_type", context=TAG_CONTEXT)
        text_type = True

    raw = False
    if parser.at_text(TokenKind.IDENTIFIER, RAW_MODIFIER) and not _at_property_start(parser):
        parser.bump("raw", kind=NxSyntaxKind.RAW_KW, context=TAG_CONTEXT)
        raw = True

    parse_property_list(parser, "properties")

    if raw:
        content_context = LexContext.raw(tag_name)
    elif text_type:
        content_context = EMBED_TEXT_CONTEXT
    else:
        content_context = TEXT_CONTEXT

    if not expect(parser, TokenKind.GREATER_THAN, context=content_context):
        return

    if raw:
        parse_raw_text_run(parser)
    elif text_type:
        parse_embed_content(parser)
    else:
        parse_text_content(parser)
    parse_close_tag(parser)


def parse_close_tag(parser: Parser) -> None:
    """`'<' '/' close_name '>'`; the close name is kept even when it differs."""
    parser.relex(NORMAL_CONTEXT)
    if not at_close_tag(parser):
        parser.error(expected_token(parser, TokenKind.LESS_THAN))
        return
    parser.bump(context=TAG_CONTEXT)  # <
    parser.bump(context=TAG_CONTEXT)  # /
    if parse_qualified_markup_name(parser, "close_name") is None:
        report(parser, PARSER_EXPECTED_NAME, message="Expected a closing tag name")
    expect(parser, TokenKind.GREATER_THAN)


def parse_property_list(
    parser: Parser,
    field: str | None = None,
    *,
    in_arm: bool = False,
) -> CompletedMarker | None:
    """One or more properties; returns None when there are none.

    With `in_arm` the list also ends quietly where the next control arm begins.
    """
    parser.relex(TAG_CONTEXT)
    if not _can_start_property_item(parser):
        return None

    return (
        ParseNodeList(
            list_kind=NxSyntaxKind.PROPERTY_LIST,
            context=TAG_CONTEXT,
            is_at_list_end=_at_property_list_end,
            parse_item=_parse_property_item,
            recovery=_PROPERTY_RECOVERY,
            ends_quietly=_at_arm_start if in_arm else None,
        )
        .parse_list(parser)
        .with_field(parser, field)
    )


def _at_property_list_end(parser: Parser) -> bool:
    return parser.at_set(_TAG_END) or parser.at(TokenKind.RBRACE)


def _at_arm_start(parser: Parser) -> bool:
    return parser.at_set(ARM_START_TOKENS)


def _can_start_property_item(parser: Parser) -> bool:
    if _at_property_start(parser):
        return True
    return parser.at(TokenKind.IF_KW) or parser.at(TokenKind.FOR_KW)


def _at_property_start(parser: Parser) -> bool:
    """True at `name[.name]* =`, where the name tokens are not separated by trivia.

    Keywords are property names here: `<label for="x">` and `<input type="y">`.
    """
    if not parser.at_set(MARKUP_NAME_TOKENS):
        return False
    n = 1
    while True:
        kind = parser.nth(n)
        if kind == TokenKind.EQUAL:
            return True
        if kind not in _NAME_CONTINUATION or parser.has_nth_preceding_trivia(n):
            return False
        n += 1


# A bad token inside a tag is skipped up to the end of the tag or the next
# property, so later properties survive.
_PROPERTY_RECOVERY: Final[ParseRecoveryTokenSet] = ParseRecoveryTokenSet(
    node_kind=NxSyntaxKind.ERROR,
    recovery_set=frozenset({TokenKind.GREATER_THAN, TokenKind.SLASH, TokenKind.RBRACE}),
    resume_at=_can_start_property_item,
)


def _parse_property_item(parser: Parser) -> CompletedMarker | None:
    if _at_property_start(parser):
        return _parse_property_value(parser)
    if parser.at(TokenKind.IF_KW):
        return parse_if_expression(parser, PROPERTY_LIST_DOMAIN)
    if parser.at(TokenKind.FOR_KW):
        return parse_for_expression(parser, PROPERTY_LIST_DOMAIN)
    return None


def _parse_property_value(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parse_qualified_markup_name(parser, "name")
    expect(parser, TokenKind.EQUAL)
    parse_rhs(parser, "value")
    return marker.complete(parser, NxSyntaxKind.PROPERTY_VALUE)


def parse_rhs(parser: Parser, field: str | None = None) -> CompletedMarker:
    """Right-hand side of a property or definition: element, literal or `{ value }`."""
    parser.relex(NORMAL_CONTEXT)
    if parser.at(TokenKind.LESS_THAN):
        return parse_element(parser, field)
    if parser.at(TokenKind.LBRACE):
        return parse_interpolation(parser, field)
    literal = parse_literal(parser, field)
    if literal is not None:
        return literal
    return missing(parser, field, PARSER_EXPECTED_VALUE)


def can_start_elements_item(parser: Parser) -> bool:
    if parser.at(TokenKind.LESS_THAN):
        return not parser.nth_at(1, TokenKind.SLASH)
    return parser.at_set(_ELEMENTS_ITEM_KEYWORDS) or parser.at(TokenKind.LBRACE)


_ELEMENTS_ITEM_KEYWORDS: Final[frozenset[TokenKind]] = frozenset({TokenKind.IF_KW, TokenKind.FOR_KW})


def parse_elements_item(parser: Parser) -> CompletedMarker | None:
    """One element-sequence item, or None when the current token starts none."""
    parser.relex(NORMAL_CONTEXT)
    if not can_start_elements_item(parser):
        return None
    match parser.current:
        case TokenKind.IF_KW:
            return parse_if_expression(parser, ELEMENTS_DOMAIN)
        case TokenKind.FOR_KW:
            return parse_for_expression(parser, ELEMENTS_DOMAIN)
        case TokenKind.LBRACE:
            return parse_interpolation(parser)
        case _:
            return parse_element(parser)


_ELEMENTS_RECOVERY: Final[ParseRecoveryTokenSet] = ParseRecoveryTokenSet(
    node_kind=NxSyntaxKind.ERROR,
    recovery_set=frozenset({TokenKind.RBRACE}),
).enable_recovery_on_close_tag()


def parse_elements_expression(
    parser: Parser,
    field: str | None = None,
    *,
    in_arm: bool = False,
) -> CompletedMarker | None:
    """A sequence of elements, elements-level control constructs and interpolations.

    Stops at `}`, a close tag or end of file, and with `in_arm` where the next
    control arm begins. Returns None for an empty sequence.
    """
    parser.relex(NORMAL_CONTEXT)
    if not can_start_elements_item(parser):
        return None

    return (
        ParseNodeList(
            list_kind=NxSyntaxKind.ELEMENTS_EXPRESSION,
            context=NORMAL_CONTEXT,
            is_at_list_end=_at_elements_end,
            parse_item=parse_elements_item,
            recovery=_ELEMENTS_RECOVERY,
            ends_quietly=_at_arm_start if in_arm else None,
        )
        .parse_list(parser)
        .with_field(parser, field)
    )


def _at_elements_end(parser: Parser) -> bool:
    parser.relex(NORMAL_CONTEXT)
    return parser.at(TokenKind.RBRACE) or at_close_tag(parser)


from nxpy.parser.grammar.content import (
    parse_element_content,
    parse_embed_content,
    parse_interpolation,
    parse_raw_text_run,
    parse_text_content,
)
from nxpy.parser.grammar.control import (
    ELEMENTS_DOMAIN,
    PROPERTY_LIST_DOMAIN,
    parse_for_expression,
    parse_if_expression,
)
