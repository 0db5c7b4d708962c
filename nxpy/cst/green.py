"""Minimal immutable green CST representation."""

from dataclasses import dataclass
from typing import TypeAlias

from nxpy.lexer import TriviaPiece
from nxpy.syntax import NxSyntaxKind
from nxpy.text import TextSize


@dataclass(frozen=True, slots=True)
class GreenToken:
    kind: NxSyntaxKind
    text: str
    leading_trivia: tuple[TriviaPiece, ...]
    trailing_trivia: tuple[TriviaPiece, ...]

    @property
    def text_len(self) -> TextSize:
        total = len(self.text)
        for piece in self.leading_trivia:
            total += piece.length.value
        for piece in self.trailing_trivia:
            total += piece.length.value
        return TextSize.from_int(total)


@dataclass(frozen=True, slots=True)
class GreenNode:
    """Immutable node; `fields[i]` names the field filled by `children[i]`."""

    kind: NxSyntaxKind
    children: tuple["GreenElement", ...]
    fields: tuple[str | None, ...] = ()

    @property
    def text_len(self) -> TextSize:
        total = 0
        for child in self.children:
            total += child.text_len.value
        return TextSize.from_int(total)

    def field_of(self, index: int) -> str | None:
        if index < len(self.fields):
            return self.fields[index]
        return None


GreenElement: TypeAlias = GreenNode | GreenToken


class TreeBuilder:
    """Biome-style tree builder with pythonic immutable outputs."""

    def __init__(self) -> None:
        self._stack: list[tuple[NxSyntaxKind, str | None, list[GreenElement], list[str | None]]] = []
        self._roots: list[GreenElement] = []

    def start_node(self, kind: NxSyntaxKind, field: str | None = None) -> None:
        self._stack.append((kind, field, [], []))

    def token_with_trivia(
        self,
        kind: NxSyntaxKind,
        text: str,
        leading: tuple[TriviaPiece, ...],
        trailing: tuple[TriviaPiece, ...],
        field: str | None = None,
    ) -> None:
        token = GreenToken(
            kind=kind,
            text=text,
            leading_trivia=leading,
            trailing_trivia=trailing,
        )
        self._push_element(token, field)

    def finish_node(self) -> None:
        if not self._stack:
            raise RuntimeError("finish_node called with empty builder stack")

        kind, field, children, fields = self._stack.pop()
        node = GreenNode(kind=kind, children=tuple(children), fields=tuple(fields))
        self._push_element(node, field)

    def finish(self) -> GreenNode:
        if self._stack:
            raise RuntimeError("Cannot finish tree: unclosed nodes remain on stack")

        if len(self._roots) == 1 and isinstance(self._roots[0], GreenNode):
            root = self._roots[0]
            if root.kind == NxSyntaxKind.ROOT:
                return root

        return GreenNode(
            kind=NxSyntaxKind.ROOT,
            children=tuple(self._roots),
            fields=(None,) * len(self._roots),
        )

    def _push_element(self, element: GreenElement, field: str | None) -> None:
        if self._stack:
            self._stack[-1][2].append(element)
            self._stack[-1][3].append(field)
            return
        self._roots.append(element)
