"""Diagnostics core types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from nxpy.text import TextRange

if TYPE_CHECKING:
    from nxpy.text import LineIndex

Severity = Literal["error", "warning", "info"]


@dataclass(frozen=True, slots=True)
class Label:
    """A labelled source location attached to a diagnostic."""

    file: str
    range: TextRange
    message: str | None = None
    primary: bool = True


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Structured diagnostic emitted by the lexer, parser and validation pass.

    `range` is the primary location and is always mirrored by the first label.
    The serialized shape (`to_dict`) is consumed by host-language bindings, so
    its keys must stay stable.
    """

    code: str
    message: str
    range: TextRange
    severity: Severity = "error"
    labels: tuple[Label, ...] = ()
    help: str | None = None
    note: str | None = None
    category: str | None = None

    @property
    def primary_label(self) -> Label | None:
        for label in self.labels:
            if label.primary:
                return label
        return None

    def to_dict(self, line_index: LineIndex) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "labels": [
                {
                    "file": label.file,
                    "span": line_index.span(label.range).as_tuple(),
                    "message": label.message,
                    "primary": label.primary,
                }
                for label in self.labels
            ],
            "help": self.help,
            "note": self.note,
        }
