"""Parse carrier mirroring Biome's Parse<T> ergonomics."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from nxpy.cst import from_green
from nxpy.diagnostics import has_errors
from nxpy.parser.options import ParserOptions
from nxpy.parser.tree_sink import ParsedGreenTree

if TYPE_CHECKING:
    from nxpy.ast import Module
    from nxpy.cst import GreenNode, SyntaxNode
    from nxpy.diagnostics import Diagnostic
    from nxpy.text import LineIndex


@dataclass(slots=True)
class NxParseResult:
    """Parse once, consume many times: red tree, module view and diagnostics."""

    source_text: str
    parsed: ParsedGreenTree
    options: ParserOptions
    file_name: str = "<input>"
    _syntax_root: SyntaxNode | None = field(default=None, init=False, repr=False)
    _module: Module | None = field(default=None, init=False, repr=False)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self.parsed.diagnostics

    @property
    def has_errors(self) -> bool:
        return has_errors(self.parsed.diagnostics)

    def green_root(self) -> GreenNode:
        return self.parsed.root

    def syntax_root(self) -> SyntaxNode:
        if self._syntax_root is None:
            self._syntax_root = from_green(self.parsed.root, self.source_text)
        return self._syntax_root

    def module(self) -> Module:
        if self._module is None:
            from nxpy.ast import module_of

            self._module = module_of(self.syntax_root())
        return self._module

    def line_index(self) -> LineIndex:
        return self.syntax_root().line_index

    def diagnostics_as_dicts(self) -> list[dict[str, Any]]:
        line_index = self.line_index()
        return [diagnostic.to_dict(line_index) for diagnostic in self.diagnostics]
