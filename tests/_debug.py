"""Shared debug printers and tree helpers for lexer/parser/ast tests."""

from __future__ import annotations

import os

from nxpy.cst import GreenNode, GreenToken, SyntaxNode
from nxpy.diagnostics import Diagnostic
from nxpy.lexer import Token, token_text
from nxpy.syntax import NxSyntaxKind

PRINT_TOKENS = os.getenv("PRINT_TOKENS", "0").lower() in {"1", "true", "yes", "on"}
PRINT_CST = os.getenv("PRINT_CST", "0").lower() in {"1", "true", "yes", "on"}
PRINT_SOURCE = os.getenv("PRINT_SOURCE", "0").lower() in {"1", "true", "yes", "on"}
PRINT_DIAGNOSTICS = os.getenv("PRINT_DIAGNOSTICS", "0").lower() in {
    "1",
    "true",
    "yes",
    "on",
}


def debug_print_source(test_name: str, source: str) -> None:
    if not PRINT_SOURCE:
        return
    print(f"\n===== {test_name} SOURCE =====")
    print(source)


def debug_dump_tokens(test_name: str, source: str, tokens: list[Token]) -> None:
    if not PRINT_TOKENS:
        return
    debug_print_source(test_name, source)
    print(f"\n===== {test_name} TOKENS =====")
    for index, tok in enumerate(tokens):
        text = token_text(source, tok)
        print(f"{index:03d} {tok.kind.name:<24} range={tok.range.as_tuple()} flags={tok.flags} text={text!r}")


def debug_dump_cst(test_name: str, source: str, root: GreenNode) -> None:
    if not PRINT_CST:
        return
    if not PRINT_SOURCE:
        print(f"\n===== {test_name} SOURCE =====")
        print(source)
    else:
        debug_print_source(test_name, source)
    print(f"===== {test_name} CST =====")
    print(dump_cst(root))


def debug_dump_diagnostics(test_name: str, diagnostics: list[Diagnostic], source: str | None = None) -> None:
    if not PRINT_DIAGNOSTICS:
        return
    if source is not None:
        debug_print_source(test_name, source)
    print(f"===== {test_name} DIAGNOSTICS =====")
    if not diagnostics:
        print("(none)")
        return
    for diagnostic in diagnostics:
        print(diagnostic)


def dump_cst(node: GreenNode) -> str:
    lines: list[str] = []

    def walk_node(current: GreenNode, field: str | None, depth: int) -> None:
        indent = "  " * depth
        prefix = f"{field}: " if field else ""
        lines.append(f"{indent}{prefix}{current.kind.name}")
        for index, child in enumerate(current.children):
            child_field = current.field_of(index)
            if isinstance(child, GreenNode):
                walk_node(child, child_field, depth + 1)
            else:
                walk_token(child, child_field, depth + 1)

    def walk_token(token: GreenToken, field: str | None, depth: int) -> None:
        indent = "  " * depth
        prefix = f"{field}: " if field else ""
        text = token.text.replace("\n", "\\n").replace("\r", "\\r")
        lines.append(
            f"{indent}{prefix}{token.kind.name} text={text!r} "
            f"leading={len(token.leading_trivia)} trailing={len(token.trailing_trivia)}"
        )

    walk_node(node, None, 0)
    return "\n".join(lines)


def collect_node_kinds(root: GreenNode) -> list[NxSyntaxKind]:
    kinds: list[NxSyntaxKind] = []

    def walk(node: GreenNode) -> None:
        kinds.append(node.kind)
        for child in node.children:
            if isinstance(child, GreenNode):
                walk(child)

    walk(root)
    return kinds


def find_nodes(root: SyntaxNode, kind: NxSyntaxKind) -> list[SyntaxNode]:
    return [node for node in root.descendants() if node.kind == kind]


def find_node(root: SyntaxNode, kind: NxSyntaxKind) -> SyntaxNode:
    nodes = find_nodes(root, kind)
    assert nodes, f"no {kind.name} node in tree"
    return nodes[0]


def module_node(root: SyntaxNode) -> SyntaxNode:
    module = root.child_node_of_kind(NxSyntaxKind.MODULE_DEFINITION)
    assert module is not None
    return module
