"""Green and red CST structures."""

from nxpy.cst.green import GreenElement, GreenNode, GreenToken, TreeBuilder
from nxpy.cst.red import (
    SyntaxElement,
    SyntaxNode,
    SyntaxToken,
    SyntaxTriviaPiece,
    from_green,
)

__all__ = [
    "GreenElement",
    "GreenNode",
    "GreenToken",
    "SyntaxElement",
    "SyntaxNode",
    "SyntaxToken",
    "SyntaxTriviaPiece",
    "TreeBuilder",
    "from_green",
]
