"""NX grammar routines that emit CST events."""

from nxpy.parser.grammar.definitions import parse_module, parse_module_item
from nxpy.parser.grammar.control import (
    DOMAINS,
    ELEMENTS_DOMAIN,
    PROPERTY_LIST_DOMAIN,
    VALUE_DOMAIN,
    BodyDomain,
    parse_for_expression,
    parse_if_expression,
)
from nxpy.parser.grammar.expressions import parse_value_expression
from nxpy.parser.grammar.markup import parse_element, parse_elements_expression, parse_property_list

__all__ = [
    "DOMAINS",
    "ELEMENTS_DOMAIN",
    "PROPERTY_LIST_DOMAIN",
    "VALUE_DOMAIN",
    "BodyDomain",
    "parse_element",
    "parse_elements_expression",
    "parse_for_expression",
    "parse_if_expression",
    "parse_module",
    "parse_module_item",
    "parse_property_list",
    "parse_value_expression",
]
