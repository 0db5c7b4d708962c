"""Lexer tokens and lexing contexts."""

from dataclasses import dataclass
from enum import Enum, IntEnum, IntFlag
from typing import Final

from nxpy.text import TextRange, TextSize


class TokenKind(IntEnum):
    # -------------------------
    # Special / sentinels
    # -------------------------
    EOF = 1

    # -------------------------
    # Trivia tokens (emitted by the lexer)
    # -------------------------
    WHITESPACE = 10
    NEWLINE = 11
    COMMENT = 12
    SKIPPED = 13  # invalid input or recovery bytes, kept as trivia

    # -------------------------
    # Identifiers / literals
    # -------------------------
    IDENTIFIER = 20
    MARKUP_IDENTIFIER = 21  # hyphenated name, InsideTag mode only
    STRING = 22
    INT = 23
    REAL = 24
    HEX = 25

    # -------------------------
    # Keywords
    # -------------------------
    IMPORT_KW = 30
    TYPE_KW = 31
    ENUM_KW = 32
    LET_KW = 33
    IF_KW = 34
    ELSE_KW = 35
    IS_KW = 36
    FOR_KW = 37
    IN_KW = 38
    TRUE_KW = 39
    FALSE_KW = 40
    NULL_KW = 41

    # -------------------------
    # Operators (multi-char included)
    # -------------------------
    EQUAL = 50  # =
    EQUAL_EQUAL = 51  # ==
    NOT_EQUAL = 52  # !=
    LESS_THAN_OR_EQUAL = 53  # <=
    GREATER_THAN_OR_EQUAL = 54  # >=
    LESS_THAN = 55  # <
    GREATER_THAN = 56  # >
    PLUS = 57  # +
    MINUS = 58  # -
    STAR = 59  # *
    SLASH = 60  # /
    AMP_AMP = 61  # &&
    PIPE_PIPE = 62  # ||
    PIPE = 63  # |
    QUESTION = 64  # ?
    FAT_ARROW = 65  # =>

    # -------------------------
    # Punctuation / separators
    # -------------------------
    COLON = 70  # :
    COMMA = 71  # ,
    DOT = 72  # .
    LBRACE = 73  # {
    RBRACE = 74  # }
    LPAREN = 75  # (
    RPAREN = 76  # )
    LBRACKET = 77  # [
    RBRACKET = 78  # ]
    AT_LBRACE = 79  # @{

    # -------------------------
    # Text content (InsideTextContent / InsideRawEmbed modes)
    # -------------------------
    TEXT_CHUNK = 90
    ENTITY = 91
    ESCAPED_LBRACE = 92  # \{
    ESCAPED_RBRACE = 93  # \}
    ESCAPED_AT = 94  # \@
    RAW_TEXT_CHUNK = 95

    @property
    def is_trivia(self) -> bool:
        return self in (
            TokenKind.WHITESPACE,
            TokenKind.NEWLINE,
            TokenKind.COMMENT,
            TokenKind.SKIPPED,
        )

    @property
    def is_keyword(self) -> bool:
        return TokenKind.IMPORT_KW <= self <= TokenKind.NULL_KW


KEYWORDS: Final[dict[str, TokenKind]] = {
    "import": TokenKind.IMPORT_KW,
    "type": TokenKind.TYPE_KW,
    "enum": TokenKind.ENUM_KW,
    "let": TokenKind.LET_KW,
    "if": TokenKind.IF_KW,
    "else": TokenKind.ELSE_KW,
    "is": TokenKind.IS_KW,
    "for": TokenKind.FOR_KW,
    "in": TokenKind.IN_KW,
    "true": TokenKind.TRUE_KW,
    "false": TokenKind.FALSE_KW,
    "null": TokenKind.NULL_KW,
}


class TriviaKind(IntEnum):
    """The trivia vocabulary (separate from TokenKind for type-safety)."""

    WHITESPACE = 1
    NEWLINE = 2
    COMMENT = 3
    SKIPPED = 4


def trivia_kind_from_token_kind(kind: TokenKind) -> TriviaKind:
    """Map lexer trivia token kinds to TriviaKind.

    Raises if called with a non-trivia TokenKind.
    """
    match kind:
        case TokenKind.NEWLINE:
            return TriviaKind.NEWLINE
        case TokenKind.WHITESPACE:
            return TriviaKind.WHITESPACE
        case TokenKind.COMMENT:
            return TriviaKind.COMMENT
        case TokenKind.SKIPPED:
            return TriviaKind.SKIPPED
        case _:
            raise ValueError(f"Not a trivia token kind: {kind!r}")


class TokenFlags(IntFlag):
    """Token metadata flags."""

    NONE = 0
    PRECEDING_LINE_BREAK = 1 << 0
    HAS_ESCAPE = 1 << 1


class LexMode(Enum):
    NORMAL = "normal"
    INSIDE_TAG = "inside_tag"
    INSIDE_TEXT_CONTENT = "inside_text_content"
    INSIDE_RAW_EMBED = "inside_raw_embed"


@dataclass(frozen=True, slots=True)
class LexContext:
    """Lexing context passed to every `Lexer.next_token` call.

    `embed` selects typed-text rules inside text content (`@{` interpolation,
    literal braces). `raw_tag` is the element name whose closing tag ends a
    raw embed body.
    """

    mode: LexMode = LexMode.NORMAL
    embed: bool = False
    raw_tag: str | None = None

    @property
    def is_regular_context(self) -> bool:
        return self.mode is LexMode.NORMAL

    @staticmethod
    def raw(tag: str | None) -> "LexContext":
        return LexContext(mode=LexMode.INSIDE_RAW_EMBED, raw_tag=tag)


NORMAL_CONTEXT: Final[LexContext] = LexContext()
TAG_CONTEXT: Final[LexContext] = LexContext(mode=LexMode.INSIDE_TAG)
TEXT_CONTEXT: Final[LexContext] = LexContext(mode=LexMode.INSIDE_TEXT_CONTENT)
EMBED_TEXT_CONTEXT: Final[LexContext] = LexContext(mode=LexMode.INSIDE_TEXT_CONTENT, embed=True)


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexed token (trivia or non-trivia)."""

    kind: TokenKind
    range: TextRange
    flags: TokenFlags = TokenFlags.NONE

    def has_preceding_line_break(self) -> bool:
        return bool(self.flags & TokenFlags.PRECEDING_LINE_BREAK)


@dataclass(frozen=True, slots=True)
class Trivia:
    """Range-based trivia recorded by the TokenSource."""

    kind: TriviaKind
    range: TextRange
    trailing: bool


@dataclass(frozen=True, slots=True)
class TriviaPiece:
    """Compact trivia unit stored in the CST (kind + length)."""

    kind: TriviaKind
    length: TextSize


EOF_TOKEN: Final[Token] = Token(TokenKind.EOF, TextRange.empty(TextSize.from_int(0)))
