"""Syntax kinds."""

from nxpy.syntax.kind import NxSyntaxKind

__all__ = ["NxSyntaxKind"]
