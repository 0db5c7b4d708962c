#!/usr/bin/env python
"""Dump the token stream of an NX file, optionally together with its CST."""

from __future__ import annotations

import argparse
from pathlib import Path

from nxpy.cst import GreenNode, GreenToken
from nxpy.lexer import NORMAL_CONTEXT, TAG_CONTEXT, TEXT_CONTEXT, LexContext, Lexer, Token, dump_tokens, token_text
from nxpy.parser import decode_source, parse

_CONTEXTS: dict[str, LexContext] = {
    "normal": NORMAL_CONTEXT,
    "tag": TAG_CONTEXT,
    "text": TEXT_CONTEXT,
}


def format_token(idx: int, source: str, token: Token) -> str:
    start, end = token.range.as_tuple()
    line_break = " line_break" if token.has_preceding_line_break() else ""
    return f"[{idx}] kind={token.kind.name} text={token_text(source, token)!r} span=({start},{end}){line_break}"


def format_cst(node: GreenNode) -> list[str]:
    lines: list[str] = []

    def walk(current: GreenNode | GreenToken, field: str | None, depth: int) -> None:
        prefix = "  " * depth + (f"{field}: " if field else "")
        if isinstance(current, GreenToken):
            lines.append(f"{prefix}{current.kind.name} {current.text!r}")
            return
        lines.append(f"{prefix}{current.kind.name}")
        for index, child in enumerate(current.children):
            walk(child, current.field_of(index), depth + 1)

    walk(node, None, 0)
    return lines


def main() -> int:
    parser = argparse.ArgumentParser(description="Dump NX tokens (and optionally the CST) of a file")
    parser.add_argument("path", type=Path, help="NX source file")
    parser.add_argument(
        "--context",
        choices=sorted(_CONTEXTS),
        default="normal",
        help="Lexing context for the flat token dump (default: normal)",
    )
    parser.add_argument("--cst", action="store_true", help="Also dump the parsed CST")
    parser.add_argument("--output", type=Path, default=None, help="Write to this file instead of stdout")
    args = parser.parse_args()

    raw = args.path.read_bytes()
    source, decode_diagnostics = decode_source(raw, str(args.path))
    lexer = Lexer(source, file_name=str(args.path))
    tokens = lexer.lex(_CONTEXTS[args.context])
    diagnostics = [*decode_diagnostics, *lexer.diagnostics]

    cst_lines: list[str] = []
    if args.cst:
        parsed = parse(raw, file_name=str(args.path))
        cst_lines = format_cst(parsed.root)
        cst_lines.extend(
            f"! {d.severity.upper()} {d.code} range={d.range.as_tuple()} message={d.message}"
            for d in parsed.diagnostics
        )

    if args.output is None:
        dump_tokens(tokens, source, diagnostics)
        if cst_lines:
            print("\nCST:")
            print("\n".join(cst_lines))
        return 0

    lines = [format_token(idx, source, token) for idx, token in enumerate(tokens)]
    lines.extend(f"! {d.severity.upper()} {d.code} range={d.range.as_tuple()} message={d.message}" for d in diagnostics)
    lines.extend(cst_lines)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with args.output.open("w", encoding="utf-8") as f:
        f.write("\n".join(lines) + "\n")
    print(f"Wrote {len(tokens)} tokens to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
