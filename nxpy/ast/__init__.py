"""Typed views and literal decoding over the NX CST."""

from nxpy.ast.literals import (
    LiteralValue,
    decode_text_token,
    literal_value,
    text_run_value,
    unescape_string,
)
from nxpy.ast.nodes import (
    AstNode,
    Content,
    ControlArm,
    ControlExpression,
    Element,
    EnumDefinition,
    ErrorNode,
    Expression,
    FunctionDefinition,
    Identifier,
    ImportStatement,
    Interpolation,
    Literal,
    Module,
    PropertyDefinition,
    PropertyList,
    PropertyValue,
    TextRun,
    Type,
    TypeDefinition,
    ValueDefinition,
    cast_element,
    cast_node,
    iter_elements,
    module_of,
)

__all__ = [
    "AstNode",
    "Content",
    "ControlArm",
    "ControlExpression",
    "Element",
    "EnumDefinition",
    "ErrorNode",
    "Expression",
    "FunctionDefinition",
    "Identifier",
    "ImportStatement",
    "Interpolation",
    "Literal",
    "LiteralValue",
    "Module",
    "PropertyDefinition",
    "PropertyList",
    "PropertyValue",
    "TextRun",
    "Type",
    "TypeDefinition",
    "ValueDefinition",
    "cast_element",
    "cast_node",
    "decode_text_token",
    "iter_elements",
    "literal_value",
    "module_of",
    "text_run_value",
    "unescape_string",
]
