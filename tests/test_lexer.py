from nxpy.lexer import (
    EMBED_TEXT_CONTEXT,
    NORMAL_CONTEXT,
    TAG_CONTEXT,
    TEXT_CONTEXT,
    BufferedLexer,
    LexContext,
    Lexer,
    Token,
    TokenKind,
    token_text,
)
from nxpy.parser import TokenSource
from tests._debug import debug_dump_tokens


def lex(text: str, context: LexContext = NORMAL_CONTEXT) -> list[Token]:
    tokens = Lexer(text).lex(context)
    debug_dump_tokens("lex", text, tokens)
    return tokens


def significant(text: str, context: LexContext = NORMAL_CONTEXT) -> list[tuple[TokenKind, str]]:
    return [(token.kind, token_text(text, token)) for token in lex(text, context) if not token.kind.is_trivia]


def test_normal_mode_literals_and_operators() -> None:
    source = "let x = 0x1F + 2.5e3 * 7"
    assert significant(source) == [
        (TokenKind.LET_KW, "let"),
        (TokenKind.IDENTIFIER, "x"),
        (TokenKind.EQUAL, "="),
        (TokenKind.HEX, "0x1F"),
        (TokenKind.PLUS, "+"),
        (TokenKind.REAL, "2.5e3"),
        (TokenKind.STAR, "*"),
        (TokenKind.INT, "7"),
        (TokenKind.EOF, ""),
    ]


def test_two_character_operators_fuse_in_normal_mode() -> None:
    kinds = [kind for kind, _ in significant("== != <= >= && || => @{")]
    assert kinds == [
        TokenKind.EQUAL_EQUAL,
        TokenKind.NOT_EQUAL,
        TokenKind.LESS_THAN_OR_EQUAL,
        TokenKind.GREATER_THAN_OR_EQUAL,
        TokenKind.AMP_AMP,
        TokenKind.PIPE_PIPE,
        TokenKind.FAT_ARROW,
        TokenKind.AT_LBRACE,
        TokenKind.EOF,
    ]


def test_keywords_are_recognized() -> None:
    kinds = [kind for kind, _ in significant("import type enum let if else is for in true false null")]
    assert kinds[:-1] == [
        TokenKind.IMPORT_KW,
        TokenKind.TYPE_KW,
        TokenKind.ENUM_KW,
        TokenKind.LET_KW,
        TokenKind.IF_KW,
        TokenKind.ELSE_KW,
        TokenKind.IS_KW,
        TokenKind.FOR_KW,
        TokenKind.IN_KW,
        TokenKind.TRUE_KW,
        TokenKind.FALSE_KW,
        TokenKind.NULL_KW,
    ]


def test_tag_mode_lexes_hyphenated_names_as_markup_identifiers() -> None:
    assert significant("data-id=7", TAG_CONTEXT)[:3] == [
        (TokenKind.MARKUP_IDENTIFIER, "data-id"),
        (TokenKind.EQUAL, "="),
        (TokenKind.INT, "7"),
    ]
    assert [kind for kind, _ in significant("data-id=7")][:3] == [
        TokenKind.IDENTIFIER,
        TokenKind.MINUS,
        TokenKind.IDENTIFIER,
    ]


def test_tag_mode_never_fuses_angle_brackets_or_equal() -> None:
    tag_kinds = [kind for kind, _ in significant("<p>=</p>", TAG_CONTEXT)]
    assert tag_kinds[:4] == [
        TokenKind.LESS_THAN,
        TokenKind.IDENTIFIER,
        TokenKind.GREATER_THAN,
        TokenKind.EQUAL,
    ]

    normal_kinds = [kind for kind, _ in significant("<p>=</p>")]
    assert normal_kinds[:3] == [
        TokenKind.LESS_THAN,
        TokenKind.IDENTIFIER,
        TokenKind.GREATER_THAN_OR_EQUAL,
    ]


def test_self_closing_slash_is_its_own_token() -> None:
    kinds = [kind for kind, _ in significant("<br/>", TAG_CONTEXT)]
    assert kinds == [
        TokenKind.LESS_THAN,
        TokenKind.IDENTIFIER,
        TokenKind.SLASH,
        TokenKind.GREATER_THAN,
        TokenKind.EOF,
    ]


def test_text_mode_splits_entities_escapes_and_markup() -> None:
    source = "Hello &amp; \\{x\\} <"
    assert significant(source, TEXT_CONTEXT) == [
        (TokenKind.TEXT_CHUNK, "Hello "),
        (TokenKind.ENTITY, "&amp;"),
        (TokenKind.ESCAPED_LBRACE, "\\{"),
        (TokenKind.TEXT_CHUNK, "x"),
        (TokenKind.ESCAPED_RBRACE, "\\}"),
        (TokenKind.LESS_THAN, "<"),
        (TokenKind.EOF, ""),
    ]


def test_text_mode_whitespace_only_runs_are_trivia() -> None:
    tokens = lex("  \n  {", TEXT_CONTEXT)
    assert [token.kind for token in tokens] == [
        TokenKind.WHITESPACE,
        TokenKind.NEWLINE,
        TokenKind.WHITESPACE,
        TokenKind.LBRACE,
        TokenKind.EOF,
    ]


def test_text_mode_keeps_unknown_backslash_sequences_and_bare_ampersands() -> None:
    source = "a \\n & b"
    assert significant(source, TEXT_CONTEXT) == [
        (TokenKind.TEXT_CHUNK, "a \\n & b"),
        (TokenKind.EOF, ""),
    ]


def test_text_mode_markup_comment_is_trivia() -> None:
    tokens = lex("a<!-- note -->b", TEXT_CONTEXT)
    assert [token.kind for token in tokens] == [
        TokenKind.TEXT_CHUNK,
        TokenKind.COMMENT,
        TokenKind.TEXT_CHUNK,
        TokenKind.EOF,
    ]


def test_embed_text_mode_recognizes_at_interpolation_and_closing_tag() -> None:
    source = "a @{x} \\@ </s>"
    assert significant(source, EMBED_TEXT_CONTEXT)[:5] == [
        (TokenKind.TEXT_CHUNK, "a "),
        (TokenKind.AT_LBRACE, "@{"),
        (TokenKind.TEXT_CHUNK, "x} "),
        (TokenKind.ESCAPED_AT, "\\@"),
        (TokenKind.LESS_THAN, "<"),
    ]


def test_embed_text_mode_treats_braces_and_lone_angle_as_text() -> None:
    assert significant("a < b { c }", EMBED_TEXT_CONTEXT) == [
        (TokenKind.TEXT_CHUNK, "a < b { c }"),
        (TokenKind.EOF, ""),
    ]


def test_raw_mode_captures_until_matching_closing_tag() -> None:
    source = "{not <b>interpolated</b>}< / p >"
    lexer = Lexer(source)
    context = LexContext.raw("p")

    chunk = lexer.next_token(context)
    assert chunk.kind == TokenKind.RAW_TEXT_CHUNK
    assert token_text(source, chunk) == "{not <b>interpolated</b>}"

    closing = lexer.next_token(context)
    assert closing.kind == TokenKind.LESS_THAN
    assert lexer.diagnostics == []


def test_raw_mode_without_terminator_reports_unterminated_raw_text() -> None:
    source = "never closed"
    lexer = Lexer(source)
    token = lexer.next_token(LexContext.raw("p"))

    assert token.kind == TokenKind.RAW_TEXT_CHUNK
    assert token_text(source, token) == source
    assert [diagnostic.code for diagnostic in lexer.diagnostics] == ["LEXER_UNTERMINATED_RAW_TEXT"]


def test_comments_are_trivia_in_normal_mode() -> None:
    source = "// line\nx /* block */ y <!-- markup --> z"
    tokens = lex(source)
    assert [token_text(source, token) for token in tokens if token.kind == TokenKind.IDENTIFIER] == ["x", "y", "z"]
    assert sum(1 for token in tokens if token.kind == TokenKind.COMMENT) == 3


def test_lexer_diagnostics_for_bad_input() -> None:
    lexer = Lexer('$ "open')
    tokens = lexer.lex()

    assert tokens[0].kind == TokenKind.SKIPPED
    assert [diagnostic.code for diagnostic in lexer.diagnostics] == [
        "LEXER_INVALID_CHARACTER",
        "LEXER_UNTERMINATED_STRING",
    ]


def test_unterminated_block_comment_is_reported() -> None:
    lexer = Lexer("x /* never")
    lexer.lex()
    assert [diagnostic.code for diagnostic in lexer.diagnostics] == ["LEXER_UNTERMINATED_COMMENT"]


def test_preceding_line_break_flag() -> None:
    tokens = [token for token in lex("a\nb c") if not token.kind.is_trivia]
    assert not tokens[0].has_preceding_line_break()
    assert tokens[1].has_preceding_line_break()
    assert not tokens[2].has_preceding_line_break()


def test_lossless_token_stream_reproduces_source() -> None:
    source = "let x = { a + b } // done\n<p>Hi</p>\r\n"
    tokens = lex(source)
    assert "".join(token_text(source, token) for token in tokens) == source


def test_token_source_relex_switches_context_in_place() -> None:
    source = "data-id=1"
    token_source = TokenSource(BufferedLexer(Lexer(source)))
    assert token_source.current == TokenKind.IDENTIFIER
    assert token_source.current_range.as_tuple() == (0, 4)

    token_source.relex(TAG_CONTEXT)
    assert token_source.current == TokenKind.MARKUP_IDENTIFIER
    assert token_source.current_range.as_tuple() == (0, 7)
    assert token_source.nth(1) == TokenKind.EQUAL

    token_source.relex(NORMAL_CONTEXT)
    assert token_source.current == TokenKind.IDENTIFIER
