"""Control constructs (`if`, `if ... is`, condition lists, `for`) over body domains.

One algorithm serves the Value, Elements and PropertyList domains. A
`BodyDomain` supplies the node kinds of its family and the parser for a body;
condition, scrutinee and pattern syntax is identical across domains.
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from nxpy.diagnostics.codes import (
    PARSER_EXPECTED_EXPRESSION,
    PARSER_EXPECTED_NAME,
    PARSER_EXPECTED_PATTERN,
    PARSER_MALFORMED_IF,
)
from nxpy.lexer import NORMAL_CONTEXT, TAG_CONTEXT, LexContext, TokenKind
from nxpy.parser.grammar.common import (
    at_arm_separator,
    expect,
    expected_token,
    missing,
    parse_literal,
    parse_qualified_name,
    report,
    token_display,
    unexpected_token,
)
from nxpy.parser.marker import CompletedMarker, Marker
from nxpy.parser.parse_recovery import ParseRecoveryTokenSet
from nxpy.parser.parser import Parser, ParserProgress
from nxpy.syntax import NxSyntaxKind


class IfForm(StrEnum):
    SIMPLE = "simple"
    CONDITION_LIST = "condition_list"


@dataclass(frozen=True, slots=True)
class BodyDomain:
    """Node kinds and body parser of one control-construct family.

    `parse_body` returns None when no body is present; `optional_body` says
    whether that is legal (property-list bodies may be empty).
    """

    name: str
    if_simple: NxSyntaxKind
    if_match: NxSyntaxKind
    match_arm: NxSyntaxKind
    if_condition_list: NxSyntaxKind
    condition_arm: NxSyntaxKind
    for_expression: NxSyntaxKind
    parse_body: Callable[[Parser, str], CompletedMarker | None]
    body_context: LexContext = NORMAL_CONTEXT
    optional_body: bool = False


def parse_if_expression(parser: Parser, domain: BodyDomain) -> CompletedMarker:
    """Parse any `if` form; the current token is `if`."""
    marker = parser.start()
    parser.bump()  # if

    if parser.at(TokenKind.LBRACE):
        # `if {` never has a condition, so it can only be a condition list.
        return _parse_condition_list_rest(parser, marker, domain)

    leading = parse_value_expression(parser)
    if leading is None:
        if parser.at(TokenKind.IS_KW):
            return _parse_match_rest(parser, marker, domain)
        report(parser, PARSER_MALFORMED_IF, message="Expected a condition or scrutinee after `if`")
        missing(parser, "condition", PARSER_EXPECTED_EXPRESSION)
        if not parser.at(TokenKind.LBRACE):
            return marker.complete(parser, domain.if_simple)
        return _parse_simple_rest(parser, marker, domain)

    if parser.at(TokenKind.IS_KW):
        leading.with_field(parser, "scrutinee")
        return _parse_match_rest(parser, marker, domain)

    if not parser.at(TokenKind.LBRACE):
        leading.with_field(parser, "condition")
        report(
            parser,
            PARSER_MALFORMED_IF,
            message=f"Expected `{{` or `is` after the `if` condition, found {_found(parser)}",
        )
        return marker.complete(parser, domain.if_simple)

    form = parser.memoized("if_form", lambda: _speculate_if_form(parser))
    if form is IfForm.CONDITION_LIST:
        leading.with_field(parser, "scrutinee")
        return _parse_condition_list_rest(parser, marker, domain)

    leading.with_field(parser, "condition")
    return _parse_simple_rest(parser, marker, domain)


def _speculate_if_form(parser: Parser) -> IfForm:
    """Decide between simple and condition-list forms at `{`.

    The brace holds a condition list when its first inner expression (or an
    `else`) is followed by an arm separator.
    """
    checkpoint = parser.checkpoint()
    with parser.speculative_parsing():
        parser.bump()  # {
        if parser.at(TokenKind.ELSE_KW):
            parser.bump()
            is_condition_list = at_arm_separator(parser)
        else:
            first = parse_value_expression(parser)
            is_condition_list = first is not None and at_arm_separator(parser)
    parser.rewind(checkpoint)
    return IfForm.CONDITION_LIST if is_condition_list else IfForm.SIMPLE


def _parse_simple_rest(parser: Parser, marker: Marker, domain: BodyDomain) -> CompletedMarker:
    _parse_braced_body(parser, domain, "then")
    if parser.at(TokenKind.ELSE_KW):
        parser.bump()
        _parse_braced_body(parser, domain, "else")
    return marker.complete(parser, domain.if_simple)


def _parse_braced_body(parser: Parser, domain: BodyDomain, field: str) -> None:
    if not expect(parser, TokenKind.LBRACE, context=domain.body_context):
        return
    _parse_body(parser, domain, field)
    _expect_closing_brace(parser, domain)


def _parse_match_rest(parser: Parser, marker: Marker, domain: BodyDomain) -> CompletedMarker:
    parser.bump()  # is
    if expect(parser, TokenKind.LBRACE):
        _parse_arms(parser, domain, _parse_match_arm)
        _expect_closing_brace(parser, domain)
    return marker.complete(parser, domain.if_match)


def _parse_condition_list_rest(parser: Parser, marker: Marker, domain: BodyDomain) -> CompletedMarker:
    parser.bump()  # {
    _parse_arms(parser, domain, _parse_condition_arm)
    _expect_closing_brace(parser, domain)
    return marker.complete(parser, domain.if_condition_list)


def _parse_arms(
    parser: Parser,
    domain: BodyDomain,
    parse_arm: Callable[[Parser, BodyDomain], CompletedMarker | None],
) -> None:
    recovery = ParseRecoveryTokenSet(
        node_kind=NxSyntaxKind.ERROR,
        recovery_set=_ARM_RECOVERY,
    ).enable_recovery_on_close_tag()
    progress = ParserProgress()
    arm_count = 0

    while True:
        # Property-list bodies leave the next token lexed inside the tag.
        parser.relex(NORMAL_CONTEXT)
        if parser.at(TokenKind.EOF) or parser.at(TokenKind.RBRACE):
            break
        progress.assert_progressing(parser)
        if parser.at(TokenKind.ELSE_KW):
            _parse_else_arm(parser, domain)
            arm_count += 1
            break
        if parse_arm(parser, domain) is not None:
            arm_count += 1
            continue
        parser.error(unexpected_token(parser))
        _, recovery_error = recovery.recover(parser)
        if recovery_error is not None:
            break

    if arm_count == 0:
        report(parser, PARSER_MALFORMED_IF, message="Expected at least one arm")


_ARM_RECOVERY: Final[frozenset[TokenKind]] = frozenset({TokenKind.RBRACE, TokenKind.ELSE_KW})


def _parse_else_arm(parser: Parser, domain: BodyDomain) -> None:
    parser.bump()  # else
    if at_arm_separator(parser):
        parser.bump(context=domain.body_context)
    else:
        parser.error(expected_token(parser, TokenKind.FAT_ARROW))
    _parse_body(parser, domain, "else")


def _parse_match_arm(parser: Parser, domain: BodyDomain) -> CompletedMarker | None:
    marker = parser.start()
    if parse_pattern(parser) is None:
        marker.abandon(parser)
        return None
    while parser.at(TokenKind.COMMA):
        parser.bump()
        if parse_pattern(parser) is None:
            missing(parser, "pattern", PARSER_EXPECTED_PATTERN)
    _parse_arm_tail(parser, domain)
    return marker.complete(parser, domain.match_arm)


def _parse_condition_arm(parser: Parser, domain: BodyDomain) -> CompletedMarker | None:
    marker = parser.start()
    if parse_value_expression(parser, "condition") is None:
        marker.abandon(parser)
        return None
    _parse_arm_tail(parser, domain)
    return marker.complete(parser, domain.condition_arm)


def _parse_arm_tail(parser: Parser, domain: BodyDomain) -> None:
    if at_arm_separator(parser):
        parser.bump(context=domain.body_context)
    else:
        parser.error(expected_token(parser, TokenKind.FAT_ARROW))
    _parse_body(parser, domain, "body")


def _parse_body(parser: Parser, domain: BodyDomain, field: str) -> None:
    parser.relex(domain.body_context)
    body = domain.parse_body(parser, field)
    if body is None and not domain.optional_body:
        missing(parser, field, PARSER_EXPECTED_EXPRESSION)


def _expect_closing_brace(parser: Parser, domain: BodyDomain) -> None:
    parser.relex(NORMAL_CONTEXT)
    expect(parser, TokenKind.RBRACE)


def parse_pattern(parser: Parser) -> CompletedMarker | None:
    """A pattern is a literal or a qualified name."""
    marker = parser.start()
    if parse_literal(parser) is None and parse_qualified_name(parser) is None:
        marker.abandon(parser)
        return None
    return marker.complete(parser, NxSyntaxKind.PATTERN).with_field(parser, "pattern")


def parse_for_expression(parser: Parser, domain: BodyDomain) -> CompletedMarker:
    """`for item[, index] in iterable { body }`; the current token is `for`."""
    marker = parser.start()
    parser.bump()  # for

    if parser.at(TokenKind.IDENTIFIER):
        parser.bump("item")
    else:
        report(parser, PARSER_EXPECTED_NAME)

    if parser.at(TokenKind.COMMA):
        parser.bump()
        if parser.at(TokenKind.IDENTIFIER):
            parser.bump("index")
        else:
            report(parser, PARSER_EXPECTED_NAME)

    expect(parser, TokenKind.IN_KW)
    if parse_value_expression(parser, "iterable") is None:
        missing(parser, "iterable", PARSER_EXPECTED_EXPRESSION)
    _parse_braced_body(parser, domain, "body")
    return marker.complete(parser, domain.for_expression)


def _found(parser: Parser) -> str:
    return token_display(parser.current)


def _parse_value_body(parser: Parser, field: str) -> CompletedMarker | None:
    return parse_value_expression(parser, field)


def _parse_elements_body(parser: Parser, field: str) -> CompletedMarker | None:
    return parse_elements_expression(parser, field, in_arm=True)


def _parse_property_list_body(parser: Parser, field: str) -> CompletedMarker | None:
    return parse_property_list(parser, field, in_arm=True)


VALUE_DOMAIN: Final[BodyDomain] = BodyDomain(
    name="value",
    if_simple=NxSyntaxKind.VALUE_IF_SIMPLE_EXPRESSION,
    if_match=NxSyntaxKind.VALUE_IF_MATCH_EXPRESSION,
    match_arm=NxSyntaxKind.VALUE_IF_MATCH_ARM,
    if_condition_list=NxSyntaxKind.VALUE_IF_CONDITION_LIST_EXPRESSION,
    condition_arm=NxSyntaxKind.VALUE_IF_CONDITION_ARM,
    for_expression=NxSyntaxKind.VALUE_FOR_EXPRESSION,
    parse_body=_parse_value_body,
)

ELEMENTS_DOMAIN: Final[BodyDomain] = BodyDomain(
    name="elements",
    if_simple=NxSyntaxKind.ELEMENTS_IF_SIMPLE_EXPRESSION,
    if_match=NxSyntaxKind.ELEMENTS_IF_MATCH_EXPRESSION,
    match_arm=NxSyntaxKind.ELEMENTS_IF_MATCH_ARM,
    if_condition_list=NxSyntaxKind.ELEMENTS_IF_CONDITION_LIST_EXPRESSION,
    condition_arm=NxSyntaxKind.ELEMENTS_IF_CONDITION_ARM,
    for_expression=NxSyntaxKind.ELEMENTS_FOR_EXPRESSION,
    parse_body=_parse_elements_body,
)

PROPERTY_LIST_DOMAIN: Final[BodyDomain] = BodyDomain(
    name="property_list",
    if_simple=NxSyntaxKind.PROPERTY_LIST_IF_SIMPLE_EXPRESSION,
    if_match=NxSyntaxKind.PROPERTY_LIST_IF_MATCH_EXPRESSION,
    match_arm=NxSyntaxKind.PROPERTY_LIST_IF_MATCH_ARM,
    if_condition_list=NxSyntaxKind.PROPERTY_LIST_IF_CONDITION_LIST_EXPRESSION,
    condition_arm=NxSyntaxKind.PROPERTY_LIST_IF_CONDITION_ARM,
    for_expression=NxSyntaxKind.PROPERTY_LIST_FOR_EXPRESSION,
    parse_body=_parse_property_list_body,
    body_context=TAG_CONTEXT,
    optional_body=True,
)

DOMAINS: Final[tuple[BodyDomain, ...]] = (VALUE_DOMAIN, ELEMENTS_DOMAIN, PROPERTY_LIST_DOMAIN)


from nxpy.parser.grammar.expressions import parse_value_expression
from nxpy.parser.grammar.markup import parse_elements_expression, parse_property_list
