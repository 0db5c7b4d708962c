"""List loop shared by property lists and element sequences."""

from collections.abc import Callable
from dataclasses import dataclass

from nxpy.lexer import LexContext, TokenKind
from nxpy.parser.marker import CompletedMarker
from nxpy.parser.parse_recovery import ParseRecoveryTokenSet
from nxpy.parser.parser import Parser, ParserProgress
from nxpy.syntax import NxSyntaxKind


@dataclass(frozen=True, slots=True)
class ParseNodeList:
    """Items up to `is_at_list_end`, each started in `context`.

    `parse_item` returns None, without consuming anything, when the current
    token starts no item. Such a token is reported and skipped through
    `recovery`, unless `ends_quietly` holds there: then the list just ends and
    leaves the token to the enclosing construct.
    """

    list_kind: NxSyntaxKind
    context: LexContext
    is_at_list_end: Callable[[Parser], bool]
    parse_item: Callable[[Parser], CompletedMarker | None]
    recovery: ParseRecoveryTokenSet
    ends_quietly: Callable[[Parser], bool] | None = None

    def parse_list(self, parser: Parser) -> CompletedMarker:
        marker = parser.start()
        progress = ParserProgress()

        while True:
            parser.relex(self.context)
            if parser.at(TokenKind.EOF) or self.is_at_list_end(parser):
                break
            progress.assert_progressing(parser)

            if self.parse_item(parser) is not None:
                continue
            if self.ends_quietly is not None and self.ends_quietly(parser):
                break

            parser.error(unexpected_token(parser))
            _, recovery_error = self.recovery.recover(parser)
            if recovery_error is not None:
                break

        return marker.complete(parser, self.list_kind)


from nxpy.parser.grammar.common import unexpected_token
