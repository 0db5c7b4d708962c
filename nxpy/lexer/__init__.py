"""Lexer."""

from nxpy.lexer.buffered_lexer import BufferedLexer, LookaheadToken
from nxpy.lexer.lexer import Lexer, LexerCheckpoint, dump_tokens, token_text
from nxpy.lexer.tokens import (
    EMBED_TEXT_CONTEXT,
    NORMAL_CONTEXT,
    TAG_CONTEXT,
    TEXT_CONTEXT,
    LexContext,
    LexMode,
    Token,
    TokenFlags,
    TokenKind,
    Trivia,
    TriviaKind,
    TriviaPiece,
)

__all__ = [
    "EMBED_TEXT_CONTEXT",
    "NORMAL_CONTEXT",
    "TAG_CONTEXT",
    "TEXT_CONTEXT",
    "BufferedLexer",
    "LexContext",
    "LexMode",
    "Lexer",
    "LexerCheckpoint",
    "LookaheadToken",
    "Token",
    "TokenFlags",
    "TokenKind",
    "Trivia",
    "TriviaKind",
    "TriviaPiece",
    "dump_tokens",
    "token_text",
]
