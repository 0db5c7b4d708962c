"""Mode-aware lossless lexer."""

import re
from dataclasses import dataclass
from functools import lru_cache

from nxpy.diagnostics import Diagnostic
from nxpy.diagnostics.codes import (
    LEXER_INVALID_CHARACTER,
    LEXER_UNTERMINATED_COMMENT,
    LEXER_UNTERMINATED_RAW_TEXT,
    LEXER_UNTERMINATED_STRING,
    DiagnosticSpec,
)
from nxpy.lexer.tokens import (
    KEYWORDS,
    NORMAL_CONTEXT,
    LexContext,
    LexMode,
    Token,
    TokenFlags,
    TokenKind,
)
from nxpy.text import TextRange, TextSize, slice_text_range

_WHITESPACE = frozenset(" \t\r\n")

_SINGLE_CHAR_TOKENS: dict[str, TokenKind] = {
    "=": TokenKind.EQUAL,
    "<": TokenKind.LESS_THAN,
    ">": TokenKind.GREATER_THAN,
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "|": TokenKind.PIPE,
    "?": TokenKind.QUESTION,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
}

_TWO_CHAR_TOKENS: dict[str, TokenKind] = {
    "==": TokenKind.EQUAL_EQUAL,
    "!=": TokenKind.NOT_EQUAL,
    "<=": TokenKind.LESS_THAN_OR_EQUAL,
    ">=": TokenKind.GREATER_THAN_OR_EQUAL,
    "&&": TokenKind.AMP_AMP,
    "||": TokenKind.PIPE_PIPE,
    "=>": TokenKind.FAT_ARROW,
    "@{": TokenKind.AT_LBRACE,
}

# Inside a tag header `<`, `>` and `=` never fuse with the next character:
# `<p>=</p>` and `<a b=>` must split at the angle bracket.
_TAG_SPLIT_PREFIXES = frozenset("<>=")


@dataclass(frozen=True, slots=True)
class LexerCheckpoint:
    """Lexer checkpoint."""

    position: int
    current_start: TextSize
    current_kind: TokenKind
    current_flags: TokenFlags
    after_newline: bool
    diagnostics_position: int


class Lexer:
    """Lossless lexer that emits trivia and non-trivia tokens.

    The lexer holds no mode of its own: every `next_token` call receives the
    `LexContext` chosen by the parser for that position.
    """

    def __init__(self, source: str, *, file_name: str = "<input>") -> None:
        self._source = source
        self._file_name = file_name
        self._position = 0
        self._after_newline = False
        self._current_start = TextSize.from_int(0)
        self._current_kind = TokenKind.EOF
        self._current_flags = TokenFlags.NONE
        self._diagnostics: list[Diagnostic] = []

    @property
    def source(self) -> str:
        return self._source

    @property
    def file_name(self) -> str:
        return self._file_name

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self._diagnostics

    @property
    def current(self) -> TokenKind:
        return self._current_kind

    @property
    def current_range(self) -> TextRange:
        return TextRange.new(self._current_start, TextSize.from_int(self._position))

    @property
    def current_flags(self) -> TokenFlags:
        return self._current_flags

    @property
    def position(self) -> int:
        return self._position

    @property
    def is_eof(self) -> bool:
        return self._position >= len(self._source)

    @property
    def checkpoint(self) -> LexerCheckpoint:
        return LexerCheckpoint(
            position=self._position,
            current_start=self._current_start,
            current_kind=self._current_kind,
            current_flags=self._current_flags,
            after_newline=self._after_newline,
            diagnostics_position=len(self._diagnostics),
        )

    def rewind(self, checkpoint: LexerCheckpoint) -> None:
        self._position = checkpoint.position
        self._current_start = checkpoint.current_start
        self._current_kind = checkpoint.current_kind
        self._current_flags = checkpoint.current_flags
        self._after_newline = checkpoint.after_newline
        del self._diagnostics[checkpoint.diagnostics_position :]

    def next_token(self, context: LexContext = NORMAL_CONTEXT) -> Token:
        self._current_start = TextSize.from_int(self._position)
        self._current_flags = TokenFlags.NONE

        if self.is_eof:
            self._current_kind = TokenKind.EOF
            if self._after_newline:
                self._current_flags |= TokenFlags.PRECEDING_LINE_BREAK
            return Token(TokenKind.EOF, TextRange.empty(self._current_start), self._current_flags)

        match context.mode:
            case LexMode.INSIDE_RAW_EMBED:
                kind = self._lex_raw_text(context.raw_tag)
            case LexMode.INSIDE_TEXT_CONTENT:
                kind = self._lex_text_content(embed=context.embed)
            case LexMode.INSIDE_TAG:
                kind = self._lex_normal(in_tag=True)
            case _:
                kind = self._lex_normal(in_tag=False)

        if self._after_newline:
            self._current_flags |= TokenFlags.PRECEDING_LINE_BREAK
        self._current_kind = kind

        if not kind.is_trivia:
            self._after_newline = False

        return Token(kind, self.current_range, self._current_flags)

    def lex(self, context: LexContext = NORMAL_CONTEXT) -> list[Token]:
        """Lex the whole input in a single context."""
        tokens: list[Token] = []
        while True:
            token = self.next_token(context)
            tokens.append(token)
            if token.kind == TokenKind.EOF:
                break
        return tokens

    # -------------------------
    # Normal / InsideTag modes
    # -------------------------

    def _lex_normal(self, *, in_tag: bool) -> TokenKind:
        ch = self._current_char()

        if ch in _WHITESPACE:
            return self._consume_newline_or_whitespaces()

        if ch == "/" and self._peek_char() == "/":
            return self._lex_line_comment()
        if ch == "/" and self._peek_char() == "*":
            return self._lex_block_comment("*/", 2)
        if self._source.startswith("<!--", self._position):
            return self._lex_block_comment("-->", 4)

        if ch == '"':
            return self._lex_string()

        if ch.isdigit():
            return self._lex_number()

        if _is_ident_start(ch):
            return self._lex_identifier(allow_hyphen=in_tag)

        if not (in_tag and ch in _TAG_SPLIT_PREFIXES):
            two = self._source[self._position : self._position + 2]
            kind = _TWO_CHAR_TOKENS.get(two)
            if kind is not None:
                self._advance(2)
                return kind

        kind = _SINGLE_CHAR_TOKENS.get(ch)
        if kind is not None:
            self._advance(1)
            return kind

        # Preserve invalid characters as SKIPPED trivia. Undecodable bytes were
        # already reported when the input was decoded.
        self._advance(1)
        if not _is_escaped_byte(ch):
            self._report(LEXER_INVALID_CHARACTER, message=f"Invalid character {ch!r}")
        return TokenKind.SKIPPED

    def _lex_line_comment(self) -> TokenKind:
        # Do not consume the newline itself.
        self._advance(2)
        while not self.is_eof:
            ch = self._current_char()
            if ch == "\n" or ch == "\r":
                break
            self._advance(1)
        return TokenKind.COMMENT

    def _lex_block_comment(self, terminator: str, opener_len: int) -> TokenKind:
        self._advance(opener_len)
        end = self._source.find(terminator, self._position)
        if end == -1:
            self._position = len(self._source)
            self._report(LEXER_UNTERMINATED_COMMENT)
        else:
            self._position = end + len(terminator)
        return TokenKind.COMMENT

    def _lex_string(self) -> TokenKind:
        self._advance(1)
        closed = False

        while not self.is_eof:
            ch = self._current_char()
            if ch == '"':
                self._advance(1)
                closed = True
                break
            if ch == "\\":
                self._current_flags |= TokenFlags.HAS_ESCAPE
                self._advance(2 if self._position + 1 < len(self._source) else 1)
                continue
            self._advance(1)

        if not closed:
            self._report(LEXER_UNTERMINATED_STRING)

        return TokenKind.STRING

    def _lex_number(self) -> TokenKind:
        if self._current_char() == "0" and self._peek_char() in "xX" and _is_hex(self._peek_char(2)):
            self._advance(2)
            while _is_hex(self._current_char()):
                self._advance(1)
            return TokenKind.HEX

        self._consume_digits()
        if self._current_char() != "." or not self._peek_char().isdigit():
            return TokenKind.INT

        self._advance(1)
        self._consume_digits()
        if self._current_char() in "eE":
            sign_offset = 2 if self._peek_char() in "+-" else 1
            if self._peek_char(sign_offset).isdigit():
                self._advance(sign_offset)
                self._consume_digits()
        return TokenKind.REAL

    def _consume_digits(self) -> None:
        while not self.is_eof and self._current_char().isdigit():
            self._advance(1)

    def _lex_identifier(self, *, allow_hyphen: bool) -> TokenKind:
        start = self._position
        saw_hyphen = False
        self._advance(1)
        while not self.is_eof:
            ch = self._current_char()
            if ch.isalnum() or ch == "_":
                self._advance(1)
                continue
            if allow_hyphen and ch == "-":
                saw_hyphen = True
                self._advance(1)
                continue
            break

        if saw_hyphen:
            return TokenKind.MARKUP_IDENTIFIER
        return KEYWORDS.get(self._source[start : self._position], TokenKind.IDENTIFIER)

    # -------------------------
    # InsideTextContent mode
    # -------------------------

    def _lex_text_content(self, *, embed: bool) -> TokenKind:
        ch = self._current_char()
        next_ch = self._peek_char()

        if ch == "\\":
            if next_ch == "{":
                self._advance(2)
                return TokenKind.ESCAPED_LBRACE
            if next_ch == "}":
                self._advance(2)
                return TokenKind.ESCAPED_RBRACE
            if embed and next_ch == "@":
                self._advance(2)
                return TokenKind.ESCAPED_AT

        if ch == "&" and self._entity_length() > 0:
            self._advance(self._entity_length())
            return TokenKind.ENTITY

        if embed:
            if ch == "@" and next_ch == "{":
                self._advance(2)
                return TokenKind.AT_LBRACE
            if ch == "<" and next_ch == "/":
                self._advance(1)
                return TokenKind.LESS_THAN
        else:
            if self._source.startswith("<!--", self._position):
                return self._lex_block_comment("-->", 4)
            if ch == "<":
                self._advance(1)
                return TokenKind.LESS_THAN
            if ch == "{":
                self._advance(1)
                return TokenKind.LBRACE
            if ch == "}":
                self._advance(1)
                return TokenKind.RBRACE

        end = self._text_chunk_end(embed=embed)
        if all(c in _WHITESPACE for c in self._source[self._position : end]):
            # Whitespace between markup items is trivia, not text.
            return self._consume_newline_or_whitespaces()
        self._position = end
        return TokenKind.TEXT_CHUNK

    def _text_chunk_end(self, *, embed: bool) -> int:
        source = self._source
        index = self._position
        length = len(source)
        while index < length:
            ch = source[index]
            next_ch = source[index + 1] if index + 1 < length else "\0"
            if embed:
                if ch == "<" and next_ch == "/":
                    break
                if ch == "@" and next_ch == "{":
                    break
                if ch == "\\" and next_ch in "{}@":
                    break
            else:
                if ch in "<{}":
                    break
                if ch == "\\" and next_ch in "{}":
                    break
            if ch == "&" and index > self._position and _entity_length_at(source, index) > 0:
                break
            index += 1
        return max(index, self._position + 1)

    def _entity_length(self) -> int:
        return _entity_length_at(self._source, self._position)

    # -------------------------
    # InsideRawEmbed mode
    # -------------------------

    def _lex_raw_text(self, raw_tag: str | None) -> TokenKind:
        pattern = _raw_terminator(raw_tag)
        match = pattern.search(self._source, self._position)
        if match is not None and match.start() == self._position:
            self._advance(1)
            return TokenKind.LESS_THAN

        if match is None:
            self._position = len(self._source)
            self._report(LEXER_UNTERMINATED_RAW_TEXT)
        else:
            self._position = match.start()
        return TokenKind.RAW_TEXT_CHUNK

    # -------------------------
    # Whitespace
    # -------------------------

    def _consume_newline_or_whitespaces(self) -> TokenKind:
        if self._consume_newline():
            self._after_newline = True
            return TokenKind.NEWLINE
        while not self.is_eof:
            ch = self._current_char()
            if ch == " " or ch == "\t":
                self._advance(1)
                continue
            break
        return TokenKind.WHITESPACE

    def _consume_newline(self) -> bool:
        if self._current_char() == "\n":
            self._advance(1)
            return True
        if self._current_char() == "\r":
            if self._peek_char() == "\n":
                self._advance(2)
            else:
                self._advance(1)
            return True
        return False

    def _current_char(self) -> str:
        if self.is_eof:
            return "\0"
        return self._source[self._position]

    def _peek_char(self, ahead: int = 1) -> str:
        index = self._position + ahead
        if index >= len(self._source):
            return "\0"
        return self._source[index]

    def _advance(self, steps: int) -> None:
        self._position += steps

    def _report(self, spec: DiagnosticSpec, *, message: str | None = None) -> None:
        self._diagnostics.append(
            spec.at(
                TextRange.new(self._current_start, TextSize.from_int(self._position)),
                self._file_name,
                message=message,
            )
        )


def _is_ident_start(ch: str) -> bool:
    return ch.isalpha() or ch == "_"


def _is_hex(ch: str) -> bool:
    return ch in "0123456789abcdefABCDEF" and ch != ""


def _is_escaped_byte(ch: str) -> bool:
    return "\udc80" <= ch <= "\udcff"


def _entity_length_at(source: str, index: int) -> int:
    """Length of a well-formed `&name;`, `&#digits;` or `&#xhex;` at index, else 0."""
    length = len(source)
    if index >= length or source[index] != "&":
        return 0
    cursor = index + 1
    if cursor < length and source[cursor] == "#":
        cursor += 1
        hexadecimal = cursor < length and source[cursor] in "xX"
        if hexadecimal:
            cursor += 1
        digits_start = cursor
        while cursor < length and (_is_hex(source[cursor]) if hexadecimal else source[cursor].isdigit()):
            cursor += 1
        if cursor == digits_start:
            return 0
    else:
        if cursor >= length or not source[cursor].isascii() or not source[cursor].isalpha():
            return 0
        while cursor < length and source[cursor].isascii() and source[cursor].isalnum():
            cursor += 1
    if cursor < length and source[cursor] == ";":
        return cursor + 1 - index
    return 0


@lru_cache(maxsize=128)
def _raw_terminator(raw_tag: str | None) -> re.Pattern[str]:
    if raw_tag is None:
        return re.compile(r"</")
    return re.compile(r"<\s*/\s*" + re.escape(raw_tag) + r"\s*>")


def token_text(source: str, token: Token) -> str:
    """Get the text of a token from the source string based on its range."""
    if token.kind == TokenKind.EOF:
        return ""
    return slice_text_range(source, token.range)


def dump_tokens(tokens: list[Token], source: str, diagnostics: list[Diagnostic] | None = None) -> None:
    """Print token list with kind, range, flags, and text for debugging."""
    for i, tok in enumerate(tokens):
        text = token_text(source, tok)
        print(f"{i:03d} {tok.kind.name:<22} range={tok.range.as_tuple()} flags={tok.flags} text={text!r}")

    if diagnostics is not None:
        print("\nDiagnostics:")
        for d in diagnostics:
            print(f"- {d.severity.upper()} {d.code} range={d.range.as_tuple()} message={d.message}")
