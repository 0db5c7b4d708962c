"""Shared parse carrier."""

from nxpy.pipeline.result import NxParseResult

__all__ = ["NxParseResult"]
