"""High-level parse entrypoint for NX source text."""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path
from typing import TYPE_CHECKING

from nxpy.cst import from_green
from nxpy.diagnostics import LEXER_INVALID_UTF8, Diagnostic, collect_diagnostics
from nxpy.lexer import BufferedLexer, Lexer
from nxpy.parser.event import process_events
from nxpy.parser.grammar import parse_module
from nxpy.parser.options import ParseMode, ParserOptions
from nxpy.parser.parser import Parser
from nxpy.parser.token_source import TokenSource
from nxpy.parser.tree_sink import LosslessTreeSink, ParsedGreenTree
from nxpy.parser.validation import validate_tree
from nxpy.text import TextRange

if TYPE_CHECKING:
    from nxpy.pipeline import NxParseResult

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "<input>"


def _resolve_options(
    options: ParserOptions | None,
    mode: ParseMode | None,
) -> ParserOptions:
    if mode is not None and options is not None:
        raise ValueError("Pass either options or mode, not both")

    if options is not None:
        return options

    if mode is not None:
        return ParserOptions.for_mode(mode)

    return ParserOptions()


def decode_source(source: str | bytes, file_name: str = DEFAULT_FILE_NAME) -> tuple[str, list[Diagnostic]]:
    """Decode UTF-8 input, reporting the first invalid sequence once.

    Invalid bytes are kept as lone surrogates, one per byte, so every
    character still maps back to the byte it came from.
    """
    if isinstance(source, str):
        return source, []
    try:
        return source.decode("utf-8"), []
    except UnicodeDecodeError as error:
        text = source.decode("utf-8", errors="surrogateescape")
        offset = len(source[: error.start].decode("utf-8"))
        diagnostic = LEXER_INVALID_UTF8.at(TextRange.from_offsets(offset, offset + 1), file_name)
        return text, [diagnostic]


def parse(
    text: str | bytes,
    options: ParserOptions | None = None,
    *,
    mode: ParseMode | None = None,
    file_name: str = DEFAULT_FILE_NAME,
) -> ParsedGreenTree:
    resolved_options = _resolve_options(options=options, mode=mode)
    source_text, decode_diagnostics = decode_source(text, file_name)
    return _parse_decoded(source_text, decode_diagnostics, resolved_options, file_name)


def _parse_decoded(
    source_text: str,
    decode_diagnostics: list[Diagnostic],
    options: ParserOptions,
    file_name: str,
) -> ParsedGreenTree:
    logger.debug("parsing %s (%d chars, mode=%s)", file_name, len(source_text), options.mode)

    lexer = Lexer(source_text, file_name=file_name)
    buffered = BufferedLexer(lexer)
    source = TokenSource(buffered)
    parser = Parser(source, options=options, file_name=file_name)

    parse_module(parser)
    events, parser_diagnostics = parser.finish()
    trivia, lexer_diagnostics = source.finish()

    sink = LosslessTreeSink(text=source_text, trivia=trivia)
    process_events(sink, events)
    root = sink.finish()

    validation_diagnostics = validate_tree(from_green(root, source_text), options, file_name)
    diagnostics = collect_diagnostics(
        decode_diagnostics,
        lexer_diagnostics,
        parser_diagnostics,
        validation_diagnostics,
    )
    logger.debug("parsed %s: %d events, %d diagnostics", file_name, len(events), len(diagnostics))
    return ParsedGreenTree(root=root, diagnostics=diagnostics)


def parse_result(
    text: str | bytes,
    options: ParserOptions | None = None,
    *,
    mode: ParseMode | None = None,
    file_name: str = DEFAULT_FILE_NAME,
) -> NxParseResult:
    from nxpy.pipeline import NxParseResult

    resolved_options = _resolve_options(options=options, mode=mode)
    source_text, decode_diagnostics = decode_source(text, file_name)
    parsed = _parse_decoded(source_text, decode_diagnostics, resolved_options, file_name)
    return NxParseResult(
        source_text=source_text,
        parsed=parsed,
        options=resolved_options,
        file_name=file_name,
    )


def parse_file(
    path: str | PathLike[str],
    options: ParserOptions | None = None,
    *,
    mode: ParseMode | None = None,
) -> NxParseResult:
    """Parse a file from disk; its path labels the diagnostics."""
    file_path = Path(path)
    return parse_result(file_path.read_bytes(), options=options, mode=mode, file_name=str(file_path))
