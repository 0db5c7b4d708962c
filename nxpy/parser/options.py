"""Parser modes and configuration options."""

from dataclasses import dataclass
from enum import StrEnum

from nxpy.diagnostics import Severity


class ParseMode(StrEnum):
    """Top-level parser behavior profile."""

    STRICT = "strict"
    PERMISSIVE = "permissive"


@dataclass(frozen=True, slots=True)
class ParserOptions:
    """Feature flags controlling grammar compatibility and post-parse checks."""

    mode: ParseMode = ParseMode.STRICT
    report_tag_mismatch: bool = True
    tag_mismatch_severity: Severity = "error"
    report_duplicate_root: bool = True
    max_nesting_depth: int = 64
    allow_arrow_arms: bool = True
    allow_colon_arms: bool = True

    @staticmethod
    def for_mode(mode: ParseMode) -> "ParserOptions":
        if mode == ParseMode.PERMISSIVE:
            return ParserOptions(
                mode=mode,
                report_tag_mismatch=True,
                tag_mismatch_severity="warning",
                report_duplicate_root=False,
            )

        return ParserOptions(
            mode=mode,
            report_tag_mismatch=True,
            tag_mismatch_severity="error",
            report_duplicate_root=True,
        )
