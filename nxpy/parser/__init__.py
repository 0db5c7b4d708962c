"""Parser infrastructure (token source + event-based parser + tree sink)."""

from nxpy.parser.event import (
    Event,
    FinishEvent,
    StartEvent,
    TokenEvent,
    process_events,
)
from nxpy.parser.grammar import (
    DOMAINS,
    ELEMENTS_DOMAIN,
    PROPERTY_LIST_DOMAIN,
    VALUE_DOMAIN,
    BodyDomain,
    parse_module,
)
from nxpy.parser.marker import CompletedMarker, Marker
from nxpy.parser.nx import decode_source, parse, parse_file, parse_result
from nxpy.parser.options import ParseMode, ParserOptions
from nxpy.parser.parse_lists import ParseNodeList
from nxpy.parser.parse_recovery import ParseRecoveryTokenSet, RecoveryError
from nxpy.parser.parser import Parser, ParserCheckpoint, ParserProgress
from nxpy.parser.token_source import TokenSource, TokenSourceCheckpoint
from nxpy.parser.tree_sink import LosslessTreeSink, ParsedGreenTree
from nxpy.parser.validation import validate_tree

__all__ = [
    "DOMAINS",
    "ELEMENTS_DOMAIN",
    "PROPERTY_LIST_DOMAIN",
    "VALUE_DOMAIN",
    "BodyDomain",
    "CompletedMarker",
    "Event",
    "FinishEvent",
    "LosslessTreeSink",
    "Marker",
    "ParseMode",
    "ParseNodeList",
    "ParseRecoveryTokenSet",
    "ParsedGreenTree",
    "Parser",
    "ParserCheckpoint",
    "ParserOptions",
    "ParserProgress",
    "RecoveryError",
    "StartEvent",
    "TokenEvent",
    "TokenSource",
    "TokenSourceCheckpoint",
    "decode_source",
    "parse",
    "parse_file",
    "parse_module",
    "parse_result",
    "process_events",
    "validate_tree",
]
