"""Diagnostics helpers."""

from __future__ import annotations

from collections.abc import Iterable

from nxpy.diagnostics.diagnostic import Diagnostic


def collect_diagnostics(*groups: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Merge diagnostic groups into one list ordered by primary offset.

    The sort is stable, so diagnostics at the same offset keep group order.
    """
    diagnostics: list[Diagnostic] = []
    for group in groups:
        diagnostics.extend(group)
    diagnostics.sort(key=lambda diagnostic: diagnostic.range.start.value)
    return diagnostics


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.severity == "error" for d in diagnostics)


def is_lex_error(diagnostic: Diagnostic) -> bool:
    return diagnostic.category == "lex"


def is_syntax_error(diagnostic: Diagnostic) -> bool:
    return diagnostic.category == "syntax"
