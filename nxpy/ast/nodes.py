"""Typed views over the NX CST.

Each view wraps one red `SyntaxNode` and exposes its named fields. Views hold
no state of their own, so building one is cheap and the CST stays the single
source of truth.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from nxpy.ast.literals import LiteralValue, literal_value, text_run_value
from nxpy.cst import SyntaxElement, SyntaxNode, SyntaxToken
from nxpy.parser.validation import element_name_text
from nxpy.syntax import NxSyntaxKind


def _node(element: SyntaxElement | None) -> SyntaxNode | None:
    return element if isinstance(element, SyntaxNode) else None


def _name(element: SyntaxElement | None) -> str | None:
    if element is None:
        return None
    return element_name_text(element)


@dataclass(frozen=True, slots=True)
class AstNode:
    syntax: SyntaxNode

    @property
    def kind(self) -> NxSyntaxKind:
        return self.syntax.kind

    @property
    def text(self) -> str:
        return self.syntax.text_trimmed


@dataclass(frozen=True, slots=True)
class Module(AstNode):
    @property
    def items(self) -> tuple[AstNode, ...]:
        return tuple(view for child in self.syntax.child_nodes() if (view := cast_node(child)) is not None)

    @property
    def imports(self) -> tuple[ImportStatement, ...]:
        return tuple(item for item in self.items if isinstance(item, ImportStatement))

    @property
    def definitions(self) -> tuple[AstNode, ...]:
        return tuple(item for item in self.items if isinstance(item, _DEFINITIONS))

    @property
    def element(self) -> Element | None:
        """The top-level element, which implicitly defines `root`."""
        node = _node(self.syntax.child_by_field("element"))
        return Element(node) if node is not None else None

    def definition(self, name: str) -> AstNode | None:
        for item in self.definitions:
            if getattr(item, "name", None) == name:
                return item
        return None


@dataclass(frozen=True, slots=True)
class ImportStatement(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))


@dataclass(frozen=True, slots=True)
class Type(AstNode):
    @property
    def name(self) -> str | None:
        primitive = self.syntax.child_node_of_kind(NxSyntaxKind.PRIMITIVE_TYPE)
        if primitive is not None:
            return primitive.text_trimmed
        user_defined = self.syntax.child_node_of_kind(NxSyntaxKind.USER_DEFINED_TYPE)
        if user_defined is not None:
            return _name(user_defined.child_by_field("name"))
        return None

    @property
    def is_primitive(self) -> bool:
        return self.syntax.child_node_of_kind(NxSyntaxKind.PRIMITIVE_TYPE) is not None

    @property
    def is_nullable(self) -> bool:
        return self.syntax.child_by_field("nullable") is not None

    @property
    def is_list(self) -> bool:
        return self.syntax.child_token_of_kind(NxSyntaxKind.LBRACKET) is not None


def _type(element: SyntaxElement | None) -> Type | None:
    node = _node(element)
    if node is None or node.kind != NxSyntaxKind.TYPE:
        return None
    return Type(node)


@dataclass(frozen=True, slots=True)
class TypeDefinition(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))

    @property
    def type(self) -> Type | None:
        return _type(self.syntax.child_by_field("type"))


@dataclass(frozen=True, slots=True)
class EnumDefinition(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))

    @property
    def members(self) -> tuple[str, ...]:
        member_list = _node(self.syntax.child_by_field("members"))
        if member_list is None:
            return ()
        return tuple(
            member_name
            for member in member_list.child_nodes()
            if (member_name := _name(member.child_by_field("name"))) is not None
        )


@dataclass(frozen=True, slots=True)
class ValueDefinition(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))

    @property
    def type(self) -> Type | None:
        return _type(self.syntax.child_by_field("type"))

    @property
    def value(self) -> AstNode | None:
        return cast_element(self.syntax.child_by_field("value"))


@dataclass(frozen=True, slots=True)
class PropertyDefinition(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))

    @property
    def type(self) -> Type | None:
        return _type(self.syntax.child_by_field("type"))

    @property
    def default(self) -> AstNode | None:
        return cast_element(self.syntax.child_by_field("default"))


@dataclass(frozen=True, slots=True)
class FunctionDefinition(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))

    @property
    def is_component(self) -> bool:
        """True for the `let <Name ... />` form."""
        return self.syntax.child_token_of_kind(NxSyntaxKind.LESS_THAN) is not None

    @property
    def parameters(self) -> tuple[PropertyDefinition, ...]:
        return tuple(
            PropertyDefinition(child)
            for child in self.syntax.children_by_field("parameter")
            if isinstance(child, SyntaxNode)
        )

    @property
    def return_type(self) -> Type | None:
        return _type(self.syntax.child_by_field("return_type"))

    @property
    def body(self) -> AstNode | None:
        return cast_element(self.syntax.child_by_field("body"))


@dataclass(frozen=True, slots=True)
class Element(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))

    @property
    def close_name(self) -> str | None:
        return _name(self.syntax.child_by_field("close_name"))

    @property
    def is_self_closing(self) -> bool:
        return self.syntax.child_token_of_kind(NxSyntaxKind.SLASH) is not None and self.close_name is None

    @property
    def is_embed(self) -> bool:
        return self.syntax.child_token_of_kind(NxSyntaxKind.COLON) is not None

    @property
    def text_type(self) -> str | None:
        return _name(self.syntax.child_by_field("text_type"))

    @property
    def is_raw(self) -> bool:
        return self.syntax.child_by_field("raw") is not None

    @property
    def properties(self) -> PropertyList | None:
        node = _node(self.syntax.child_by_field("properties"))
        return PropertyList(node) if node is not None else None

    @property
    def content(self) -> AstNode | None:
        return cast_element(self.syntax.child_by_field("content"))


@dataclass(frozen=True, slots=True)
class PropertyList(AstNode):
    @property
    def items(self) -> tuple[AstNode, ...]:
        return tuple(view for child in self.syntax.child_nodes() if (view := cast_node(child)) is not None)

    @property
    def values(self) -> tuple[PropertyValue, ...]:
        """Plain `name=value` properties, conditional ones excluded."""
        return tuple(item for item in self.items if isinstance(item, PropertyValue))

    def get(self, name: str) -> AstNode | None:
        for item in self.values:
            if item.name == name:
                return item.value
        return None


@dataclass(frozen=True, slots=True)
class PropertyValue(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))

    @property
    def value(self) -> AstNode | None:
        return cast_element(self.syntax.child_by_field("value"))


@dataclass(frozen=True, slots=True)
class Content(AstNode):
    """`ELEMENTS_EXPRESSION`, `MIXED_CONTENT`, `TEXT_CONTENT` or `EMBED_CONTENT`."""

    @property
    def items(self) -> tuple[AstNode, ...]:
        return tuple(view for child in self.syntax.child_nodes() if (view := cast_node(child)) is not None)

    @property
    def is_mixed(self) -> bool:
        return self.kind != NxSyntaxKind.ELEMENTS_EXPRESSION


@dataclass(frozen=True, slots=True)
class TextRun(AstNode):
    @property
    def value(self) -> str:
        return text_run_value(self.syntax)


@dataclass(frozen=True, slots=True)
class Interpolation(AstNode):
    @property
    def value(self) -> AstNode | None:
        return cast_element(self.syntax.child_by_field("value"))


@dataclass(frozen=True, slots=True)
class Literal(AstNode):
    @property
    def value(self) -> LiteralValue:
        return literal_value(self.syntax)


@dataclass(frozen=True, slots=True)
class Identifier(AstNode):
    @property
    def name(self) -> str | None:
        return _name(self.syntax.child_by_field("name"))


@dataclass(frozen=True, slots=True)
class Expression(AstNode):
    """Any other value expression; fields are reached through `field`."""

    def field(self, name: str) -> AstNode | None:
        return cast_element(self.syntax.child_by_field(name))

    def operator(self) -> str | None:
        token = self.syntax.child_by_field("operator")
        return token.text if isinstance(token, SyntaxToken) else None

    def arguments(self) -> tuple[AstNode, ...]:
        argument_list = _node(self.syntax.child_by_field("arguments"))
        if argument_list is None:
            return ()
        return tuple(
            view
            for child in argument_list.children_by_field("argument")
            if (view := cast_element(child)) is not None
        )


@dataclass(frozen=True, slots=True)
class ControlExpression(AstNode):
    """`if` or `for` in any of the three body domains."""

    def field(self, name: str) -> AstNode | None:
        return cast_element(self.syntax.child_by_field(name))

    @property
    def arms(self) -> tuple[ControlArm, ...]:
        return tuple(
            ControlArm(child)
            for child in self.syntax.child_nodes()
            if child.kind in _ARM_KINDS
        )

    @property
    def item_name(self) -> str | None:
        return _name(self.syntax.child_by_field("item"))

    @property
    def index_name(self) -> str | None:
        return _name(self.syntax.child_by_field("index"))


@dataclass(frozen=True, slots=True)
class ControlArm(AstNode):
    def field(self, name: str) -> AstNode | None:
        return cast_element(self.syntax.child_by_field(name))

    @property
    def patterns(self) -> tuple[str, ...]:
        return tuple(child.text_trimmed for child in self.syntax.children_by_field("pattern") if isinstance(child, SyntaxNode))


@dataclass(frozen=True, slots=True)
class ErrorNode(AstNode):
    pass


_DEFINITIONS = (TypeDefinition, EnumDefinition, ValueDefinition, FunctionDefinition)

_ARM_KINDS = frozenset(
    {
        NxSyntaxKind.VALUE_IF_MATCH_ARM,
        NxSyntaxKind.VALUE_IF_CONDITION_ARM,
        NxSyntaxKind.ELEMENTS_IF_MATCH_ARM,
        NxSyntaxKind.ELEMENTS_IF_CONDITION_ARM,
        NxSyntaxKind.PROPERTY_LIST_IF_MATCH_ARM,
        NxSyntaxKind.PROPERTY_LIST_IF_CONDITION_ARM,
    }
)

_VIEW_BY_KIND: dict[NxSyntaxKind, type[AstNode]] = {
    NxSyntaxKind.MODULE_DEFINITION: Module,
    NxSyntaxKind.IMPORT_STATEMENT: ImportStatement,
    NxSyntaxKind.TYPE_DEFINITION: TypeDefinition,
    NxSyntaxKind.ENUM_DEFINITION: EnumDefinition,
    NxSyntaxKind.VALUE_DEFINITION: ValueDefinition,
    NxSyntaxKind.FUNCTION_DEFINITION: FunctionDefinition,
    NxSyntaxKind.PROPERTY_DEFINITION: PropertyDefinition,
    NxSyntaxKind.TYPE: Type,
    NxSyntaxKind.ELEMENT: Element,
    NxSyntaxKind.PROPERTY_LIST: PropertyList,
    NxSyntaxKind.PROPERTY_VALUE: PropertyValue,
    NxSyntaxKind.ELEMENTS_EXPRESSION: Content,
    NxSyntaxKind.MIXED_CONTENT: Content,
    NxSyntaxKind.TEXT_CONTENT: Content,
    NxSyntaxKind.EMBED_CONTENT: Content,
    NxSyntaxKind.TEXT_RUN: TextRun,
    NxSyntaxKind.EMBED_TEXT_RUN: TextRun,
    NxSyntaxKind.RAW_TEXT_RUN: TextRun,
    NxSyntaxKind.INTERPOLATION_EXPRESSION: Interpolation,
    NxSyntaxKind.EMBED_INTERPOLATION_EXPRESSION: Interpolation,
    NxSyntaxKind.IDENTIFIER_EXPRESSION: Identifier,
    NxSyntaxKind.ERROR: ErrorNode,
}


def cast_node(node: SyntaxNode) -> AstNode | None:
    """Wrap `node` in its typed view, or None for nodes without one (names, patterns)."""
    view = _VIEW_BY_KIND.get(node.kind)
    if view is not None:
        return view(node)
    if node.kind.is_literal:
        return Literal(node)
    if node.kind in _ARM_KINDS:
        return ControlArm(node)
    if node.kind.is_control:
        return ControlExpression(node)
    if node.kind in _EXPRESSION_KINDS:
        return Expression(node)
    return None


_EXPRESSION_KINDS = frozenset(
    {
        NxSyntaxKind.BINARY_EXPRESSION,
        NxSyntaxKind.PREFIX_UNARY_EXPRESSION,
        NxSyntaxKind.CALL_EXPRESSION,
        NxSyntaxKind.MEMBER_ACCESS_EXPRESSION,
        NxSyntaxKind.CONDITIONAL_EXPRESSION,
        NxSyntaxKind.UNIT_LITERAL,
        NxSyntaxKind.PARENTHESIZED_EXPRESSION,
    }
)


def cast_element(element: SyntaxElement | None) -> AstNode | None:
    node = _node(element)
    return cast_node(node) if node is not None else None


def iter_elements(root: SyntaxNode) -> Iterator[Element]:
    """Every element in the tree, in source order."""
    for node in root.descendants():
        if node.kind == NxSyntaxKind.ELEMENT:
            yield Element(node)


def module_of(root: SyntaxNode) -> Module:
    """The module view of a parsed tree's ROOT (or MODULE_DEFINITION) node."""
    if root.kind == NxSyntaxKind.MODULE_DEFINITION:
        return Module(root)
    module = root.child_node_of_kind(NxSyntaxKind.MODULE_DEFINITION)
    if module is None:
        raise ValueError("Tree has no module node")
    return Module(module)
