"""Red CST wrappers over immutable green nodes/tokens."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias

from nxpy.cst.green import GreenNode
from nxpy.lexer import TriviaKind, TriviaPiece
from nxpy.syntax import NxSyntaxKind
from nxpy.text import LineIndex, Span, TextRange


@dataclass(frozen=True, slots=True)
class SyntaxTriviaPiece:
    kind: TriviaKind
    text: str


class _TreeData:
    """Source text shared by every red element of one tree."""

    __slots__ = ("source", "_line_index")

    def __init__(self, source: str) -> None:
        self.source = source
        self._line_index: LineIndex | None = None

    @property
    def line_index(self) -> LineIndex:
        if self._line_index is None:
            self._line_index = LineIndex(self.source)
        return self._line_index


class SyntaxToken:
    __slots__ = (
        "kind",
        "text",
        "leading_trivia",
        "trailing_trivia",
        "parent",
        "index_in_parent",
        "field_name",
        "_tree",
        "_start",
        "_token_start",
        "_token_end",
        "_end",
    )

    def __init__(
        self,
        *,
        kind: NxSyntaxKind,
        text: str,
        leading_pieces: tuple[TriviaPiece, ...],
        trailing_pieces: tuple[TriviaPiece, ...],
        parent: SyntaxNode,
        index_in_parent: int,
        field_name: str | None,
        tree: _TreeData,
        start: int,
    ) -> None:
        self.kind = kind
        self.text = text
        self.parent = parent
        self.index_in_parent = index_in_parent
        self.field_name = field_name
        self._tree = tree
        self._start = start

        leading_len = sum(piece.length.value for piece in leading_pieces)
        trailing_len = sum(piece.length.value for piece in trailing_pieces)

        self._token_start = start + leading_len
        self._token_end = self._token_start + len(text)
        self._end = self._token_end + trailing_len

        self.leading_trivia = _build_trivia(
            source=tree.source,
            start=self._start,
            pieces=leading_pieces,
        )
        self.trailing_trivia = _build_trivia(
            source=tree.source,
            start=self._token_end,
            pieces=trailing_pieces,
        )

    def __repr__(self) -> str:
        return f"SyntaxToken({self.kind.name}, {self.text!r}, {self._token_start}..{self._token_end})"

    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int:
        return self._end

    @property
    def token_start(self) -> int:
        return self._token_start

    @property
    def token_end(self) -> int:
        return self._token_end

    @property
    def range(self) -> TextRange:
        return TextRange.from_offsets(self._start, self._end)

    @property
    def text_range(self) -> TextRange:
        return TextRange.from_offsets(self._token_start, self._token_end)

    @property
    def text_with_trivia(self) -> str:
        if not self._tree.source:
            return self.text
        return self._tree.source[self._start : self._end]

    @property
    def text_trimmed(self) -> str:
        return self.text

    @property
    def leading_trivia_text(self) -> str:
        return "".join(piece.text for piece in self.leading_trivia)

    @property
    def trailing_trivia_text(self) -> str:
        return "".join(piece.text for piece in self.trailing_trivia)

    @property
    def span(self) -> Span:
        return self._tree.line_index.span(self.range)

    @property
    def span_trimmed(self) -> Span:
        return self._tree.line_index.span(self.text_range)


class SyntaxNode:
    __slots__ = (
        "kind",
        "parent",
        "index_in_parent",
        "field_name",
        "_children",
        "_tree",
        "_start",
        "_end",
    )

    def __init__(
        self,
        *,
        kind: NxSyntaxKind,
        parent: SyntaxNode | None,
        index_in_parent: int,
        field_name: str | None,
        tree: _TreeData,
        start: int,
    ) -> None:
        self.kind = kind
        self.parent = parent
        self.index_in_parent = index_in_parent
        self.field_name = field_name
        self._tree = tree
        self._start = start
        self._end = start
        self._children: tuple[SyntaxElement, ...] = ()

    def __repr__(self) -> str:
        return f"SyntaxNode({self.kind.name}, {self._start}..{self._end})"

    @property
    def start(self) -> int:
        return self._start

    @property
    def end(self) -> int:
        return self._end

    @property
    def range(self) -> TextRange:
        return TextRange.from_offsets(self._start, self._end)

    @property
    def text(self) -> str:
        if not self._tree.source:
            return ""
        return self._tree.source[self._start : self._end]

    @property
    def text_range_trimmed(self) -> TextRange:
        first = self.first_token()
        last = self.last_token()
        if first is None or last is None:
            return TextRange.from_offsets(self._start, self._start)
        return TextRange.from_offsets(first.token_start, last.token_end)

    @property
    def text_trimmed(self) -> str:
        rng = self.text_range_trimmed
        return self._tree.source[rng.start.value : rng.end.value]

    @property
    def span(self) -> Span:
        return self._tree.line_index.span(self.range)

    @property
    def span_trimmed(self) -> Span:
        return self._tree.line_index.span(self.text_range_trimmed)

    @property
    def line_index(self) -> LineIndex:
        return self._tree.line_index

    @property
    def children(self) -> tuple[SyntaxElement, ...]:
        return self._children

    def child_nodes(self) -> tuple[SyntaxNode, ...]:
        return tuple(child for child in self._children if isinstance(child, SyntaxNode))

    def child_tokens(self) -> tuple[SyntaxToken, ...]:
        return tuple(child for child in self._children if isinstance(child, SyntaxToken))

    def child_by_field(self, name: str) -> SyntaxElement | None:
        for child in self._children:
            if child.field_name == name:
                return child
        return None

    def children_by_field(self, name: str) -> tuple[SyntaxElement, ...]:
        return tuple(child for child in self._children if child.field_name == name)

    def child_node_of_kind(self, kind: NxSyntaxKind) -> SyntaxNode | None:
        for child in self._children:
            if isinstance(child, SyntaxNode) and child.kind == kind:
                return child
        return None

    def child_token_of_kind(self, kind: NxSyntaxKind) -> SyntaxToken | None:
        for child in self._children:
            if isinstance(child, SyntaxToken) and child.kind == kind:
                return child
        return None

    def descendants(self) -> Iterator[SyntaxNode]:
        """Pre-order walk over this node and every descendant node."""
        stack: list[SyntaxNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.child_nodes()))

    def descendants_tokens(self) -> tuple[SyntaxToken, ...]:
        tokens: list[SyntaxToken] = []

        def walk(node: SyntaxNode) -> None:
            for child in node.children:
                if isinstance(child, SyntaxToken):
                    tokens.append(child)
                else:
                    walk(child)

        walk(self)
        return tuple(tokens)

    def first_token(self) -> SyntaxToken | None:
        for child in self._children:
            if isinstance(child, SyntaxToken):
                return child
            token = child.first_token()
            if token is not None:
                return token
        return None

    def last_token(self) -> SyntaxToken | None:
        for child in reversed(self._children):
            if isinstance(child, SyntaxToken):
                return child
            token = child.last_token()
            if token is not None:
                return token
        return None

    def node_at(self, offset: int) -> SyntaxNode:
        """Deepest node whose range covers `offset`."""
        node = self
        while True:
            for child in node.child_nodes():
                if child.start <= offset < child.end:
                    node = child
                    break
            else:
                return node

    def token_at(self, offset: int) -> SyntaxToken | None:
        for token in self.node_at(offset).descendants_tokens():
            if token.start <= offset < token.end:
                return token
        return None

    def next_sibling(self) -> SyntaxElement | None:
        if self.parent is None:
            return None
        index = self.index_in_parent + 1
        if index >= len(self.parent.children):
            return None
        return self.parent.children[index]

    def prev_sibling(self) -> SyntaxElement | None:
        if self.parent is None or self.index_in_parent == 0:
            return None
        return self.parent.children[self.index_in_parent - 1]


SyntaxElement: TypeAlias = SyntaxNode | SyntaxToken


def from_green(root: GreenNode, source: str = "") -> SyntaxNode:
    red_root, _ = _build_node(
        green=root,
        parent=None,
        index_in_parent=0,
        field_name=None,
        tree=_TreeData(source),
        start=0,
    )
    return red_root


def _build_node(
    *,
    green: GreenNode,
    parent: SyntaxNode | None,
    index_in_parent: int,
    field_name: str | None,
    tree: _TreeData,
    start: int,
) -> tuple[SyntaxNode, int]:
    node = SyntaxNode(
        kind=green.kind,
        parent=parent,
        index_in_parent=index_in_parent,
        field_name=field_name,
        tree=tree,
        start=start,
    )

    current = start
    children: list[SyntaxElement] = []
    for child_index, child in enumerate(green.children):
        child_field = green.field_of(child_index)
        if isinstance(child, GreenNode):
            red_child, next_offset = _build_node(
                green=child,
                parent=node,
                index_in_parent=child_index,
                field_name=child_field,
                tree=tree,
                start=current,
            )
            children.append(red_child)
            current = next_offset
            continue

        token = SyntaxToken(
            kind=child.kind,
            text=child.text,
            leading_pieces=child.leading_trivia,
            trailing_pieces=child.trailing_trivia,
            parent=node,
            index_in_parent=child_index,
            field_name=child_field,
            tree=tree,
            start=current,
        )
        children.append(token)
        current = token.end

    node._children = tuple(children)
    node._end = current
    return node, current


def _build_trivia(
    *,
    source: str,
    start: int,
    pieces: tuple[TriviaPiece, ...],
) -> tuple[SyntaxTriviaPiece, ...]:
    if not pieces:
        return ()

    out: list[SyntaxTriviaPiece] = []
    offset = start
    for piece in pieces:
        piece_end = offset + piece.length.value
        text = source[offset:piece_end] if source else ""
        out.append(SyntaxTriviaPiece(kind=piece.kind, text=text))
        offset = piece_end
    return tuple(out)


__all__ = [
    "SyntaxElement",
    "SyntaxNode",
    "SyntaxToken",
    "SyntaxTriviaPiece",
    "from_green",
]
