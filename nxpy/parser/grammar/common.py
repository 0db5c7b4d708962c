"""Shared grammar helpers: names, literals, diagnostics and missing nodes."""

from typing import Final

from nxpy.diagnostics import Diagnostic
from nxpy.diagnostics.codes import (
    PARSER_EXPECTED_NAME,
    PARSER_EXPECTED_TOKEN,
    PARSER_NESTING_TOO_DEEP,
    PARSER_UNEXPECTED_TOKEN,
    DiagnosticSpec,
)
from nxpy.lexer import NORMAL_CONTEXT, TAG_CONTEXT, LexContext, TokenKind
from nxpy.parser.marker import CompletedMarker
from nxpy.parser.parser import Parser
from nxpy.syntax import NxSyntaxKind

LITERAL_KINDS: Final[dict[TokenKind, NxSyntaxKind]] = {
    TokenKind.STRING: NxSyntaxKind.STRING_LITERAL,
    TokenKind.INT: NxSyntaxKind.INT_LITERAL,
    TokenKind.REAL: NxSyntaxKind.REAL_LITERAL,
    TokenKind.HEX: NxSyntaxKind.HEX_LITERAL,
    TokenKind.TRUE_KW: NxSyntaxKind.BOOL_LITERAL,
    TokenKind.FALSE_KW: NxSyntaxKind.BOOL_LITERAL,
    TokenKind.NULL_KW: NxSyntaxKind.NULL_LITERAL,
}

# Markup names may reuse keywords: `<input type="text">`, `<label for="x">`.
MARKUP_NAME_TOKENS: Final[frozenset[TokenKind]] = frozenset(
    {TokenKind.IDENTIFIER, TokenKind.MARKUP_IDENTIFIER}
    | {kind for kind in TokenKind if kind.is_keyword}
)

TOP_LEVEL_KEYWORDS: Final[frozenset[TokenKind]] = frozenset(
    {TokenKind.LET_KW, TokenKind.TYPE_KW, TokenKind.ENUM_KW, TokenKind.IMPORT_KW}
)

# Tokens that can begin the next arm of a match or condition list.
ARM_START_TOKENS: Final[frozenset[TokenKind]] = frozenset(LITERAL_KINDS) | {
    TokenKind.IDENTIFIER,
    TokenKind.ELSE_KW,
    TokenKind.LPAREN,
}

_TOKEN_DISPLAY: Final[dict[TokenKind, str]] = {
    TokenKind.EOF: "end of file",
    TokenKind.IDENTIFIER: "identifier",
    TokenKind.MARKUP_IDENTIFIER: "markup identifier",
    TokenKind.STRING: "string literal",
    TokenKind.INT: "integer literal",
    TokenKind.REAL: "real literal",
    TokenKind.HEX: "hex literal",
    TokenKind.EQUAL: "`=`",
    TokenKind.EQUAL_EQUAL: "`==`",
    TokenKind.NOT_EQUAL: "`!=`",
    TokenKind.LESS_THAN_OR_EQUAL: "`<=`",
    TokenKind.GREATER_THAN_OR_EQUAL: "`>=`",
    TokenKind.LESS_THAN: "`<`",
    TokenKind.GREATER_THAN: "`>`",
    TokenKind.PLUS: "`+`",
    TokenKind.MINUS: "`-`",
    TokenKind.STAR: "`*`",
    TokenKind.SLASH: "`/`",
    TokenKind.AMP_AMP: "`&&`",
    TokenKind.PIPE_PIPE: "`||`",
    TokenKind.PIPE: "`|`",
    TokenKind.QUESTION: "`?`",
    TokenKind.FAT_ARROW: "`=>`",
    TokenKind.COLON: "`:`",
    TokenKind.COMMA: "`,`",
    TokenKind.DOT: "`.`",
    TokenKind.LBRACE: "`{`",
    TokenKind.RBRACE: "`}`",
    TokenKind.LPAREN: "`(`",
    TokenKind.RPAREN: "`)`",
    TokenKind.LBRACKET: "`[`",
    TokenKind.RBRACKET: "`]`",
    TokenKind.AT_LBRACE: "`@{`",
    TokenKind.TEXT_CHUNK: "text",
    TokenKind.ENTITY: "entity",
    TokenKind.RAW_TEXT_CHUNK: "raw text",
}


def token_display(kind: TokenKind) -> str:
    if kind.is_keyword:
        return f"`{kind.name.removesuffix('_KW').lower()}`"
    return _TOKEN_DISPLAY.get(kind, kind.name)


def report(parser: Parser, spec: DiagnosticSpec, *, message: str | None = None) -> None:
    parser.error(spec.at(parser.current_range, parser.file_name, message=message))


def expected_token(parser: Parser, kind: TokenKind) -> Diagnostic:
    return PARSER_EXPECTED_TOKEN.at(
        parser.current_range,
        parser.file_name,
        message=f"Expected {token_display(kind)} but found {token_display(parser.current)}",
    )


def unexpected_token(parser: Parser) -> Diagnostic:
    return PARSER_UNEXPECTED_TOKEN.at(
        parser.current_range,
        parser.file_name,
        message=f"Unexpected {token_display(parser.current)}",
    )


def expect(
    parser: Parser,
    kind: TokenKind,
    field: str | None = None,
    *,
    context: LexContext = NORMAL_CONTEXT,
) -> bool:
    if parser.at(kind):
        parser.bump(field, context=context)
        return True
    parser.error(expected_token(parser, kind))
    return False


def missing(parser: Parser, field: str | None, spec: DiagnosticSpec) -> CompletedMarker:
    """Report `spec` and leave an empty ERROR node in `field`."""
    report(parser, spec)
    marker = parser.start()
    return marker.complete(parser, NxSyntaxKind.ERROR).with_field(parser, field)


def nesting_too_deep(parser: Parser, field: str | None = None) -> CompletedMarker:
    """Wrap one balanced token group in an ERROR node once nesting is exhausted."""
    report(parser, PARSER_NESTING_TOO_DEEP)
    marker = parser.start()
    balance = 0
    while not parser.at(TokenKind.EOF):
        if parser.at_set(_GROUP_OPENERS):
            balance += 1
        elif parser.at_set(_GROUP_CLOSERS):
            if balance == 0:
                break
            balance -= 1
        parser.bump_any()
        if balance == 0:
            break
    return marker.complete(parser, NxSyntaxKind.ERROR).with_field(parser, field)


_GROUP_OPENERS: Final[frozenset[TokenKind]] = frozenset(
    {TokenKind.LPAREN, TokenKind.LBRACE, TokenKind.LBRACKET, TokenKind.AT_LBRACE}
)
_GROUP_CLOSERS: Final[frozenset[TokenKind]] = frozenset(
    {TokenKind.RPAREN, TokenKind.RBRACE, TokenKind.RBRACKET}
)


def at_close_tag(parser: Parser) -> bool:
    return parser.at(TokenKind.LESS_THAN) and parser.nth_at(1, TokenKind.SLASH)


def at_arm_separator(parser: Parser) -> bool:
    options = parser.options
    return (options.allow_colon_arms and parser.at(TokenKind.COLON)) or (
        options.allow_arrow_arms and parser.at(TokenKind.FAT_ARROW)
    )


def parse_literal(parser: Parser, field: str | None = None) -> CompletedMarker | None:
    kind = LITERAL_KINDS.get(parser.current)
    if kind is None:
        return None
    marker = parser.start()
    parser.bump()
    return marker.complete(parser, kind).with_field(parser, field)


def parse_qualified_name(parser: Parser, field: str | None = None) -> CompletedMarker | None:
    """`identifier ('.' identifier)*`"""
    if not parser.at(TokenKind.IDENTIFIER):
        return None
    marker = parser.start()
    parser.bump()
    while parser.at(TokenKind.DOT) and parser.nth_at(1, TokenKind.IDENTIFIER):
        parser.bump()
        parser.bump()
    return marker.complete(parser, NxSyntaxKind.QUALIFIED_NAME).with_field(parser, field)


def parse_qualified_markup_name(
    parser: Parser,
    field: str | None = None,
    *,
    context: LexContext = TAG_CONTEXT,
) -> CompletedMarker | None:
    """Dotted markup name; every segment is lexed inside the tag.

    The token after the name is lexed in `context`.
    """
    parser.relex(TAG_CONTEXT)
    if not parser.at_set(MARKUP_NAME_TOKENS):
        return None
    marker = parser.start()
    parser.bump(context=TAG_CONTEXT)
    while parser.at(TokenKind.DOT):
        parser.bump(context=TAG_CONTEXT)
        if parser.at_set(MARKUP_NAME_TOKENS):
            parser.bump(context=TAG_CONTEXT)
        else:
            report(parser, PARSER_EXPECTED_NAME)
            break
    completed = marker.complete(parser, NxSyntaxKind.QUALIFIED_MARKUP_NAME).with_field(parser, field)
    parser.relex(context)
    return completed
