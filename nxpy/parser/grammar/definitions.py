"""Module-level grammar: imports, type/enum/value/function definitions and types."""

from typing import Final

from nxpy.diagnostics.codes import PARSER_EXPECTED_NAME, PARSER_EXPECTED_TYPE
from nxpy.lexer import TAG_CONTEXT, TokenKind
from nxpy.parser.grammar.common import (
    MARKUP_NAME_TOKENS,
    TOP_LEVEL_KEYWORDS,
    expect,
    missing,
    parse_qualified_markup_name,
    parse_qualified_name,
    report,
    unexpected_token,
)
from nxpy.parser.marker import CompletedMarker
from nxpy.parser.parse_recovery import ParseRecoveryTokenSet
from nxpy.parser.parser import Parser, ParserProgress
from nxpy.syntax import NxSyntaxKind

PRIMITIVE_TYPES: Final[frozenset[str]] = frozenset(
    {"string", "int", "long", "float", "double", "boolean", "void", "object"}
)

_MODULE_RECOVERY: Final[frozenset[TokenKind]] = TOP_LEVEL_KEYWORDS | {TokenKind.LESS_THAN}


def parse_module(parser: Parser) -> CompletedMarker:
    """Parse a whole source file into a MODULE_DEFINITION node."""
    marker = parser.start()
    recovery = ParseRecoveryTokenSet(
        node_kind=NxSyntaxKind.ERROR,
        recovery_set=_MODULE_RECOVERY,
    )
    progress = ParserProgress()

    while not parser.at(TokenKind.EOF):
        progress.assert_progressing(parser)
        if parse_module_item(parser) is not None:
            continue
        parser.error(unexpected_token(parser))
        _, recovery_error = recovery.recover(parser)
        if recovery_error is not None:
            # Already at a synchronising token that no item accepts, e.g. a stray `<`.
            error = parser.start()
            parser.bump_any()
            error.complete(parser, NxSyntaxKind.ERROR)

    return marker.complete(parser, NxSyntaxKind.MODULE_DEFINITION)


def parse_module_item(parser: Parser) -> CompletedMarker | None:
    match parser.current:
        case TokenKind.IMPORT_KW:
            return parse_import_statement(parser)
        case TokenKind.TYPE_KW:
            return parse_type_definition(parser)
        case TokenKind.ENUM_KW:
            return parse_enum_definition(parser)
        case TokenKind.LET_KW:
            if _at_function_definition(parser):
                return parse_function_definition(parser)
            return parse_value_definition(parser)
        case TokenKind.LESS_THAN if not parser.nth_at(1, TokenKind.SLASH):
            return parse_element(parser, "element")
        case TokenKind.LBRACE:
            return parse_interpolation(parser, "value")
        case _:
            return None


def _at_function_definition(parser: Parser) -> bool:
    if parser.nth_at(1, TokenKind.LESS_THAN):
        return True
    return parser.nth_at(1, TokenKind.IDENTIFIER) and parser.nth_at(2, TokenKind.LPAREN)


def parse_import_statement(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()  # import
    if parse_qualified_name(parser, "name") is None:
        report(parser, PARSER_EXPECTED_NAME, message="Expected a module name after `import`")
    return marker.complete(parser, NxSyntaxKind.IMPORT_STATEMENT)


def parse_type_definition(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()  # type
    _expect_name(parser)
    expect(parser, TokenKind.EQUAL)
    expect_type(parser, "type")
    return marker.complete(parser, NxSyntaxKind.TYPE_DEFINITION)


def parse_enum_definition(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.bump()  # enum
    _expect_name(parser)
    expect(parser, TokenKind.EQUAL)
    _parse_enum_member_list(parser)
    return marker.complete(parser, NxSyntaxKind.ENUM_DEFINITION)


def _parse_enum_member_list(parser: Parser) -> CompletedMarker:
    marker = parser.start()
    parser.eat(TokenKind.PIPE)
    _parse_enum_member(parser)
    while parser.at(TokenKind.PIPE):
        parser.bump()
        _parse_enum_member(parser)
    return marker.complete(parser, NxSyntaxKind.ENUM_MEMBER_LIST).with_field(parser, "members")


def _parse_enum_member(parser: Parser) -> None:
    if not parser.at(TokenKind.IDENTIFIER):
        report(parser, PARSER_EXPECTED_NAME, message="Expected an enum member name")
        return
    marker = parser.start()
    parser.bump("name")
    marker.complete(parser, NxSyntaxKind.ENUM_MEMBER)


def parse_value_definition(parser: Parser) -> CompletedMarker:
    """`let name [: type] = rhs`"""
    marker = parser.start()
    parser.bump()  # let
    _expect_name(parser)
    if parser.eat(TokenKind.COLON):
        expect_type(parser, "type")
    expect(parser, TokenKind.EQUAL)
    parse_rhs(parser, "value")
    return marker.complete(parser, NxSyntaxKind.VALUE_DEFINITION)


def parse_function_definition(parser: Parser) -> CompletedMarker:
    """`let name(params) [: type] = rhs` or `let <Name params /> [: type] = rhs`"""
    marker = parser.start()
    parser.bump()  # let

    if parser.at(TokenKind.LESS_THAN):
        parser.bump(context=TAG_CONTEXT)
        if parse_qualified_markup_name(parser, "name") is None:
            report(parser, PARSER_EXPECTED_NAME, message="Expected a component name after `<`")
        progress = ParserProgress()
        while parser.at_set(MARKUP_NAME_TOKENS):
            progress.assert_progressing(parser)
            parse_property_definition(parser)
            parser.relex(TAG_CONTEXT)
        expect(parser, TokenKind.SLASH, context=TAG_CONTEXT)
        expect(parser, TokenKind.GREATER_THAN)
    else:
        parser.bump("name")
        parser.bump()  # (
        if not parser.at(TokenKind.RPAREN):
            parse_property_definition(parser)
            while parser.eat(TokenKind.COMMA):
                parse_property_definition(parser)
        expect(parser, TokenKind.RPAREN)

    if parser.eat(TokenKind.COLON):
        expect_type(parser, "return_type")
    expect(parser, TokenKind.EQUAL)
    parse_rhs(parser, "body")
    return marker.complete(parser, NxSyntaxKind.FUNCTION_DEFINITION)


def parse_property_definition(parser: Parser) -> CompletedMarker:
    """`name : type [= default]`; the name may be hyphenated."""
    marker = parser.start()
    parser.relex(TAG_CONTEXT)
    if parser.at_set(MARKUP_NAME_TOKENS):
        parser.bump("name")
    else:
        report(parser, PARSER_EXPECTED_NAME, message="Expected a property name")
    expect(parser, TokenKind.COLON)
    expect_type(parser, "type")
    if parser.eat(TokenKind.EQUAL):
        parse_rhs(parser, "default")
    return marker.complete(parser, NxSyntaxKind.PROPERTY_DEFINITION).with_field(parser, "parameter")


def parse_type(parser: Parser, field: str | None = None) -> CompletedMarker | None:
    """Primitive or user-defined type with an optional `?` or `[]` suffix."""
    if not parser.at(TokenKind.IDENTIFIER):
        return None
    marker = parser.start()
    if parser.current_text in PRIMITIVE_TYPES and not parser.nth_at(1, TokenKind.DOT):
        primitive = parser.start()
        parser.bump()
        primitive.complete(parser, NxSyntaxKind.PRIMITIVE_TYPE)
    else:
        user_defined = parser.start()
        parse_qualified_name(parser, "name")
        user_defined.complete(parser, NxSyntaxKind.USER_DEFINED_TYPE)

    if parser.at(TokenKind.QUESTION):
        parser.bump("nullable")
    elif parser.at(TokenKind.LBRACKET):
        parser.bump()
        expect(parser, TokenKind.RBRACKET)
    return marker.complete(parser, NxSyntaxKind.TYPE).with_field(parser, field)


def expect_type(parser: Parser, field: str) -> CompletedMarker:
    parsed = parse_type(parser, field)
    if parsed is None:
        return missing(parser, field, PARSER_EXPECTED_TYPE)
    return parsed


def _expect_name(parser: Parser) -> None:
    if parser.at(TokenKind.IDENTIFIER):
        parser.bump("name")
    else:
        report(parser, PARSER_EXPECTED_NAME)


from nxpy.parser.grammar.content import parse_interpolation
from nxpy.parser.grammar.markup import parse_element, parse_rhs
