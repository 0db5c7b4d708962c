"""Diagnostic codes and messages."""

from dataclasses import dataclass
from typing import Final

from nxpy.diagnostics.diagnostic import Diagnostic, Label, Severity
from nxpy.text import TextRange

LEX: Final[str] = "lex"
SYNTAX: Final[str] = "syntax"


@dataclass(frozen=True, slots=True)
class DiagnosticSpec:
    code: str
    message: str
    hint: str | None = None
    severity: Severity = "error"
    category: str | None = None

    def at(
        self,
        range: TextRange,
        file: str,
        *,
        message: str | None = None,
        label: str | None = None,
        secondary: tuple[Label, ...] = (),
        note: str | None = None,
        severity: Severity | None = None,
    ) -> Diagnostic:
        return Diagnostic(
            code=self.code,
            message=message if message is not None else self.message,
            range=range,
            severity=severity if severity is not None else self.severity,
            labels=(Label(file=file, range=range, message=label, primary=True), *secondary),
            help=self.hint,
            note=note,
            category=self.category,
        )


LEXER_INVALID_UTF8: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_INVALID_UTF8",
    message="Source contains an invalid UTF-8 byte sequence.",
    hint="Re-save the file as UTF-8.",
    category=LEX,
)

LEXER_INVALID_CHARACTER: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_INVALID_CHARACTER",
    message="Invalid character.",
    category=LEX,
)

LEXER_UNTERMINATED_STRING: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_UNTERMINATED_STRING",
    message="Unterminated string literal.",
    hint="Close the string with a double quote.",
    category=LEX,
)

LEXER_UNTERMINATED_COMMENT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_UNTERMINATED_COMMENT",
    message="Unterminated block comment.",
    hint="Close the comment with `*/` or `-->`.",
    category=LEX,
)

LEXER_UNTERMINATED_RAW_TEXT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="LEXER_UNTERMINATED_RAW_TEXT",
    message="Unterminated raw text block.",
    hint="Close the raw element with its matching closing tag.",
    category=LEX,
)

PARSER_EXPECTED_TOKEN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_TOKEN",
    message="Expected token",
    category=SYNTAX,
)

PARSER_EXPECTED_EXPRESSION: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_EXPRESSION",
    message="Expected an expression",
    category=SYNTAX,
)

PARSER_EXPECTED_VALUE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_VALUE",
    message="Expected an element, literal or `{ expression }`",
    category=SYNTAX,
)

PARSER_EXPECTED_NAME: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_NAME",
    message="Expected a name",
    category=SYNTAX,
)

PARSER_EXPECTED_TYPE: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_TYPE",
    message="Expected a type",
    category=SYNTAX,
)

PARSER_EXPECTED_PATTERN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_EXPECTED_PATTERN",
    message="Expected a pattern (literal or qualified name)",
    category=SYNTAX,
)

PARSER_UNEXPECTED_TOKEN: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_UNEXPECTED_TOKEN",
    message="Unexpected token",
    category=SYNTAX,
)

PARSER_MALFORMED_IF: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_MALFORMED_IF",
    message="Malformed `if` expression",
    hint="Use `if cond { ... }`, `if value is { pattern: ... }` or `if { cond: ... }`.",
    category=SYNTAX,
)

PARSER_CONTROL_IN_MIXED_CONTENT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_CONTROL_IN_MIXED_CONTENT",
    message="Control flow is not allowed directly in text content",
    hint="Wrap the expression in braces: `{ if ... }`.",
    category=SYNTAX,
)

PARSER_NESTING_TOO_DEEP: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_NESTING_TOO_DEEP",
    message="Nesting is too deep",
    category=SYNTAX,
)

PARSER_TAG_MISMATCH: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_TAG_MISMATCH",
    message="Element closing tag does not match opening tag",
    category=SYNTAX,
)

PARSER_DUPLICATE_ROOT: Final[DiagnosticSpec] = DiagnosticSpec(
    code="PARSER_DUPLICATE_ROOT",
    message="Duplicate definition of 'root'",
    category=SYNTAX,
)
