"""Value expressions: precedence climbing over the NX operator table."""

from typing import Final

from nxpy.diagnostics.codes import PARSER_EXPECTED_EXPRESSION, PARSER_EXPECTED_NAME
from nxpy.lexer import TokenKind
from nxpy.parser.grammar.common import (
    expect,
    missing,
    nesting_too_deep,
    parse_literal,
    report,
)
from nxpy.parser.marker import CompletedMarker
from nxpy.parser.parser import Parser
from nxpy.syntax import NxSyntaxKind

# Higher binds tighter. All binary operators are left-associative.
BINARY_PRECEDENCE: Final[dict[TokenKind, int]] = {
    TokenKind.STAR: 120,
    TokenKind.SLASH: 120,
    TokenKind.PLUS: 110,
    TokenKind.MINUS: 110,
    TokenKind.LESS_THAN: 90,
    TokenKind.GREATER_THAN: 90,
    TokenKind.LESS_THAN_OR_EQUAL: 90,
    TokenKind.GREATER_THAN_OR_EQUAL: 90,
    TokenKind.EQUAL_EQUAL: 80,
    TokenKind.NOT_EQUAL: 80,
    TokenKind.AMP_AMP: 40,
    TokenKind.PIPE_PIPE: 30,
}
POSTFIX_PRECEDENCE: Final[int] = 140
UNARY_PRECEDENCE: Final[int] = 130
TERNARY_PRECEDENCE: Final[int] = 20

_POSTFIX_PRIMARIES: Final[frozenset[NxSyntaxKind]] = frozenset(
    {
        NxSyntaxKind.IDENTIFIER_EXPRESSION,
        NxSyntaxKind.PARENTHESIZED_EXPRESSION,
        NxSyntaxKind.UNIT_LITERAL,
        NxSyntaxKind.STRING_LITERAL,
        NxSyntaxKind.INT_LITERAL,
        NxSyntaxKind.REAL_LITERAL,
        NxSyntaxKind.HEX_LITERAL,
        NxSyntaxKind.BOOL_LITERAL,
        NxSyntaxKind.NULL_LITERAL,
    }
)


def can_start_value_expression(parser: Parser) -> bool:
    return parser.current in _EXPRESSION_START


_EXPRESSION_START: Final[frozenset[TokenKind]] = frozenset(
    {
        TokenKind.STRING,
        TokenKind.INT,
        TokenKind.REAL,
        TokenKind.HEX,
        TokenKind.TRUE_KW,
        TokenKind.FALSE_KW,
        TokenKind.NULL_KW,
        TokenKind.IDENTIFIER,
        TokenKind.LPAREN,
        TokenKind.MINUS,
        TokenKind.LESS_THAN,
        TokenKind.IF_KW,
        TokenKind.FOR_KW,
    }
)


def parse_value_expression(parser: Parser, field: str | None = None) -> CompletedMarker | None:
    """Parse a full value expression, or return None without consuming anything."""
    if not can_start_value_expression(parser):
        return None
    if not parser.enter_nesting():
        return nesting_too_deep(parser, field)
    try:
        expression = _parse_expression(parser, 0)
    finally:
        parser.exit_nesting()
    if expression is not None:
        expression.with_field(parser, field)
    return expression


def expect_value_expression(parser: Parser, field: str | None = None) -> CompletedMarker:
    expression = parse_value_expression(parser, field)
    if expression is None:
        return missing(parser, field, PARSER_EXPECTED_EXPRESSION)
    return expression


def _parse_expression(parser: Parser, min_precedence: int) -> CompletedMarker | None:
    lhs = _parse_unary(parser)
    if lhs is None:
        return None
    # Elements and control expressions are never operands: `<a/> <b/>` is two items.
    if lhs.kind_in(parser) == NxSyntaxKind.ELEMENT or lhs.kind_in(parser).is_control:
        return lhs

    while True:
        if parser.at(TokenKind.QUESTION):
            if TERNARY_PRECEDENCE < min_precedence:
                break
            lhs = _parse_conditional(parser, lhs)
            continue

        precedence = BINARY_PRECEDENCE.get(parser.current)
        if precedence is None or precedence < min_precedence:
            break

        lhs.with_field(parser, "left")
        marker = lhs.precede(parser)
        parser.bump("operator")
        rhs = _parse_expression(parser, precedence + 1)
        if rhs is None:
            missing(parser, "right", PARSER_EXPECTED_EXPRESSION)
        else:
            rhs.with_field(parser, "right")
        lhs = marker.complete(parser, NxSyntaxKind.BINARY_EXPRESSION)

    return lhs


def _parse_conditional(parser: Parser, condition: CompletedMarker) -> CompletedMarker:
    condition.with_field(parser, "condition")
    marker = condition.precede(parser)
    parser.bump()  # ?
    expect_value_expression(parser, "consequent")
    expect(parser, TokenKind.COLON)
    # Right-associative: `a ? b : c ? d : e` nests in the alternative.
    alternative = _parse_expression(parser, TERNARY_PRECEDENCE)
    if alternative is None:
        missing(parser, "alternative", PARSER_EXPECTED_EXPRESSION)
    else:
        alternative.with_field(parser, "alternative")
    return marker.complete(parser, NxSyntaxKind.CONDITIONAL_EXPRESSION)


def _parse_unary(parser: Parser) -> CompletedMarker | None:
    if not parser.at(TokenKind.MINUS):
        return _parse_postfix(parser)

    if not parser.enter_nesting():
        return nesting_too_deep(parser)
    try:
        marker = parser.start()
        parser.bump("operator")
        operand = _parse_expression(parser, UNARY_PRECEDENCE)
        if operand is None:
            missing(parser, "operand", PARSER_EXPECTED_EXPRESSION)
        else:
            operand.with_field(parser, "operand")
        return marker.complete(parser, NxSyntaxKind.PREFIX_UNARY_EXPRESSION)
    finally:
        parser.exit_nesting()


def _parse_postfix(parser: Parser) -> CompletedMarker | None:
    lhs = _parse_primary(parser)
    if lhs is None or lhs.kind_in(parser) not in _POSTFIX_PRIMARIES:
        return lhs

    while True:
        if parser.at(TokenKind.DOT):
            lhs.with_field(parser, "target")
            marker = lhs.precede(parser)
            parser.bump()
            if parser.at(TokenKind.IDENTIFIER):
                parser.bump("member")
            else:
                report(parser, PARSER_EXPECTED_NAME)
            lhs = marker.complete(parser, NxSyntaxKind.MEMBER_ACCESS_EXPRESSION)
        elif parser.at(TokenKind.LPAREN):
            lhs.with_field(parser, "callee")
            marker = lhs.precede(parser)
            _parse_argument_list(parser)
            lhs = marker.complete(parser, NxSyntaxKind.CALL_EXPRESSION)
        else:
            return lhs


def _parse_argument_list(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()  # (
    if not parser.at(TokenKind.RPAREN):
        expect_value_expression(parser, "argument")
        while parser.at(TokenKind.COMMA):
            parser.bump()
            expect_value_expression(parser, "argument")
    expect(parser, TokenKind.RPAREN)
    return marker.complete(parser, NxSyntaxKind.ARGUMENT_LIST).with_field(parser, "arguments")


def _parse_primary(parser: Parser) -> CompletedMarker | None:
    literal = parse_literal(parser)
    if literal is not None:
        return literal

    match parser.current:
        case TokenKind.IDENTIFIER:
            marker = parser.start()
            parser.bump("name")
            return marker.complete(parser, NxSyntaxKind.IDENTIFIER_EXPRESSION)
        case TokenKind.LPAREN:
            return _parse_parenthesized(parser)
        case TokenKind.LESS_THAN:
            return parse_element(parser)
        case TokenKind.IF_KW:
            return parse_if_expression(parser, VALUE_DOMAIN)
        case TokenKind.FOR_KW:
            return parse_for_expression(parser, VALUE_DOMAIN)
        case _:
            return None


def _parse_parenthesized(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()  # (
    if parser.at(TokenKind.RPAREN):
        parser.bump()
        return marker.complete(parser, NxSyntaxKind.UNIT_LITERAL)
    expect_value_expression(parser, "expression")
    expect(parser, TokenKind.RPAREN)
    return marker.complete(parser, NxSyntaxKind.PARENTHESIZED_EXPRESSION)


from nxpy.parser.grammar.control import VALUE_DOMAIN, parse_for_expression, parse_if_expression
from nxpy.parser.grammar.markup import parse_element
