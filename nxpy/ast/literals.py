"""Decoding of literal tokens and text runs into Python values."""

from __future__ import annotations

import html
from typing import TypeAlias
import re

from nxpy.cst import SyntaxNode, SyntaxToken, SyntaxTriviaPiece
from nxpy.lexer import TriviaKind
from nxpy.syntax import NxSyntaxKind

LiteralValue: TypeAlias = str | int | float | bool | None

_STRING_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|.)", re.DOTALL)
_STRING_ESCAPES: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "{": "{",
    "}": "}",
}

_TEXT_ESCAPES: dict[NxSyntaxKind, str] = {
    NxSyntaxKind.ESCAPED_LBRACE: "{",
    NxSyntaxKind.ESCAPED_RBRACE: "}",
    NxSyntaxKind.ESCAPED_AT: "@",
}


def unescape_string(text: str) -> str:
    """Value of a string literal token, quotes included in `text`.

    Unknown escapes are kept verbatim, backslash included.
    """
    body = text[1:-1] if len(text) >= 2 and text.endswith('"') else text[1:]

    def replace(match: re.Match[str]) -> str:
        escape = match.group(1)
        if escape.startswith("u{"):
            return chr(int(escape[2:-1], 16))
        return _STRING_ESCAPES.get(escape, match.group(0))

    return _STRING_ESCAPE_RE.sub(replace, body)


def literal_value(node: SyntaxNode) -> LiteralValue:
    """Python value of a literal node (`STRING_LITERAL`, `INT_LITERAL`, ...)."""
    token = node.first_token()
    if token is None:
        raise ValueError(f"Literal node without a token: {node!r}")

    match node.kind:
        case NxSyntaxKind.STRING_LITERAL:
            return unescape_string(token.text)
        case NxSyntaxKind.INT_LITERAL:
            return int(token.text)
        case NxSyntaxKind.HEX_LITERAL:
            return int(token.text, 16)
        case NxSyntaxKind.REAL_LITERAL:
            return float(token.text)
        case NxSyntaxKind.BOOL_LITERAL:
            return token.kind == NxSyntaxKind.TRUE_KW
        case NxSyntaxKind.NULL_LITERAL:
            return None
        case _:
            raise ValueError(f"Not a literal node: {node.kind.name}")


def decode_text_token(token: SyntaxToken) -> str:
    if token.kind == NxSyntaxKind.ENTITY:
        return html.unescape(token.text)
    return _TEXT_ESCAPES.get(token.kind, token.text)


def text_run_value(node: SyntaxNode) -> str:
    """Text of a `TEXT_RUN`/`EMBED_TEXT_RUN`/`RAW_TEXT_RUN` with escapes and entities decoded.

    Whitespace between the run's tokens is kept; comments are dropped. Raw runs
    are returned verbatim.
    """
    tokens = node.descendants_tokens()
    if node.kind == NxSyntaxKind.RAW_TEXT_RUN:
        return "".join(token.text for token in tokens)

    parts: list[str] = []
    for index, token in enumerate(tokens):
        if index > 0:
            parts.extend(_whitespace(token.leading_trivia))
        parts.append(decode_text_token(token))
        if index < len(tokens) - 1:
            parts.extend(_whitespace(token.trailing_trivia))
    return "".join(parts)


def _whitespace(pieces: tuple[SyntaxTriviaPiece, ...]) -> list[str]:
    return [piece.text for piece in pieces if piece.kind in (TriviaKind.WHITESPACE, TriviaKind.NEWLINE)]
