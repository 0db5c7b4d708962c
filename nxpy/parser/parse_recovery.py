"""Biome-style parser recovery primitives."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import StrEnum

from nxpy.lexer import TokenKind
from nxpy.parser.marker import CompletedMarker
from nxpy.syntax import NxSyntaxKind

logger = logging.getLogger(__name__)

_OPENERS = frozenset({TokenKind.LBRACE, TokenKind.AT_LBRACE})


class RecoveryError(StrEnum):
    EOF = "eof"
    ALREADY_RECOVERED = "already_recovered"
    RECOVERY_DISABLED = "recovery_disabled"


@dataclass(frozen=True, slots=True)
class ParseRecoveryTokenSet:
    """Recover by consuming tokens into an ERROR node until a safe token is reached.

    Braces opened inside the skipped region are balanced, so a `}` only stops
    recovery when it closes the enclosing scope. `resume_at` marks further
    safe positions that a token kind alone cannot describe, such as the start
    of the next `name=value` property.
    """

    node_kind: NxSyntaxKind
    recovery_set: frozenset[TokenKind]
    close_tag: bool = False
    resume_at: Callable[["Parser"], bool] | None = None

    def enable_recovery_on_close_tag(self) -> "ParseRecoveryTokenSet":
        return replace(self, close_tag=True)

    def recover(self, parser: "Parser") -> tuple[CompletedMarker | None, RecoveryError | None]:
        if parser.at(TokenKind.EOF):
            return None, RecoveryError.EOF

        if self.is_at_recovered(parser):
            return None, RecoveryError.ALREADY_RECOVERED

        if parser.is_speculative_parsing():
            return None, RecoveryError.RECOVERY_DISABLED

        start = parser.position.value
        marker = parser.start()
        open_braces = 0
        while not parser.at(TokenKind.EOF):
            if open_braces == 0 and self.is_at_recovered(parser):
                break
            if parser.at_set(_OPENERS):
                open_braces += 1
            elif parser.at(TokenKind.RBRACE) and open_braces > 0:
                open_braces -= 1
            parser.bump_any()

        logger.debug("recovered %s over %d..%d", self.node_kind.name, start, parser.position.value)
        return marker.complete(parser, self.node_kind), None

    def is_at_recovered(self, parser: "Parser") -> bool:
        if parser.at_set(self.recovery_set):
            return True
        if self.close_tag and parser.at(TokenKind.LESS_THAN) and parser.nth_at(1, TokenKind.SLASH):
            return True
        return self.resume_at is not None and self.resume_at(parser)


from nxpy.parser.parser import Parser
