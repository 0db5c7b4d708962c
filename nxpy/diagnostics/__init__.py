"""Diagnostics."""

from nxpy.diagnostics.codes import (
    LEXER_INVALID_CHARACTER,
    LEXER_INVALID_UTF8,
    LEXER_UNTERMINATED_COMMENT,
    LEXER_UNTERMINATED_RAW_TEXT,
    LEXER_UNTERMINATED_STRING,
    PARSER_CONTROL_IN_MIXED_CONTENT,
    PARSER_DUPLICATE_ROOT,
    PARSER_EXPECTED_EXPRESSION,
    PARSER_EXPECTED_NAME,
    PARSER_EXPECTED_PATTERN,
    PARSER_EXPECTED_TOKEN,
    PARSER_EXPECTED_TYPE,
    PARSER_EXPECTED_VALUE,
    PARSER_MALFORMED_IF,
    PARSER_NESTING_TOO_DEEP,
    PARSER_TAG_MISMATCH,
    PARSER_UNEXPECTED_TOKEN,
    DiagnosticSpec,
)
from nxpy.diagnostics.diagnostic import Diagnostic, Label, Severity
from nxpy.diagnostics.report import (
    collect_diagnostics,
    has_errors,
    is_lex_error,
    is_syntax_error,
)

__all__ = [
    "LEXER_INVALID_CHARACTER",
    "LEXER_INVALID_UTF8",
    "LEXER_UNTERMINATED_COMMENT",
    "LEXER_UNTERMINATED_RAW_TEXT",
    "LEXER_UNTERMINATED_STRING",
    "PARSER_CONTROL_IN_MIXED_CONTENT",
    "PARSER_DUPLICATE_ROOT",
    "PARSER_EXPECTED_EXPRESSION",
    "PARSER_EXPECTED_NAME",
    "PARSER_EXPECTED_PATTERN",
    "PARSER_EXPECTED_TOKEN",
    "PARSER_EXPECTED_TYPE",
    "PARSER_EXPECTED_VALUE",
    "PARSER_MALFORMED_IF",
    "PARSER_NESTING_TOO_DEEP",
    "PARSER_TAG_MISMATCH",
    "PARSER_UNEXPECTED_TOKEN",
    "Diagnostic",
    "DiagnosticSpec",
    "Label",
    "Severity",
    "collect_diagnostics",
    "has_errors",
    "is_lex_error",
    "is_syntax_error",
]
