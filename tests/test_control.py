import pytest

from nxpy.cst import SyntaxNode, SyntaxToken, from_green
from nxpy.parser import (
    ELEMENTS_DOMAIN,
    PROPERTY_LIST_DOMAIN,
    VALUE_DOMAIN,
    BodyDomain,
    ParserOptions,
    parse,
)
from nxpy.syntax import NxSyntaxKind
from tests._debug import debug_dump_cst, debug_dump_diagnostics, find_node, find_nodes


def _parse_red(name: str, source: str, options: ParserOptions | None = None) -> tuple[SyntaxNode, list]:
    parsed = parse(source, options)
    debug_dump_cst(name, source, parsed.root)
    debug_dump_diagnostics(name, parsed.diagnostics, source)
    return from_green(parsed.root, source), parsed.diagnostics


# The same control syntax written once per body family; only the bodies differ.
SIMPLE_IF_SOURCES: dict[str, str] = {
    "value": "let v = { if ok { 1 } else { 2 } }",
    "elements": "<a>if ok { <b/> } else { <i/> }</a>",
    "property_list": "<a if ok { x=1 } else { y=2 } />",
}
MATCH_SOURCES: dict[str, str] = {
    "value": 'let v = { if s is { A, B: 1 "x" => 2 else: 3 } }',
    "elements": '<a>if s is { A, B: <b/> "x" => <i/> else: <u/> }</a>',
    "property_list": '<a if s is { A, B: x=1 "x" => y=2 else: z=3 } />',
}
CONDITION_LIST_SOURCES: dict[str, str] = {
    "value": "let v = { if { a: 1 b => 2 else: 3 } }",
    "elements": "<a>if { a: <b/> b => <i/> else: <u/> }</a>",
    "property_list": "<a if { a: x=1 b => y=2 else: z=3 } />",
}
FOR_SOURCES: dict[str, str] = {
    "value": "let v = { for item, i in items { item } }",
    "elements": "<a>for item, i in items { <b/> }</a>",
    "property_list": "<a for item, i in items { x=1 } />",
}

DOMAIN_BY_NAME: dict[str, BodyDomain] = {
    "value": VALUE_DOMAIN,
    "elements": ELEMENTS_DOMAIN,
    "property_list": PROPERTY_LIST_DOMAIN,
}

BODY_KIND: dict[str, NxSyntaxKind] = {
    "value": NxSyntaxKind.INT_LITERAL,
    "elements": NxSyntaxKind.ELEMENTS_EXPRESSION,
    "property_list": NxSyntaxKind.PROPERTY_LIST,
}


def _field_node(node: SyntaxNode, field: str) -> SyntaxNode:
    child = node.child_by_field(field)
    assert isinstance(child, SyntaxNode), f"{node.kind.name}.{field} is not a node"
    return child


@pytest.mark.parametrize("domain_name", list(DOMAIN_BY_NAME))
def test_simple_if_has_same_shape_in_every_domain(domain_name: str) -> None:
    domain = DOMAIN_BY_NAME[domain_name]
    root, diagnostics = _parse_red(f"simple_if_{domain_name}", SIMPLE_IF_SOURCES[domain_name])
    assert diagnostics == []

    if_expression = find_node(root, domain.if_simple)
    assert _field_node(if_expression, "condition").text_trimmed == "ok"
    assert _field_node(if_expression, "then").kind == BODY_KIND[domain_name]
    assert _field_node(if_expression, "else").kind == BODY_KIND[domain_name]


@pytest.mark.parametrize("domain_name", list(DOMAIN_BY_NAME))
def test_match_form_has_same_shape_in_every_domain(domain_name: str) -> None:
    domain = DOMAIN_BY_NAME[domain_name]
    root, diagnostics = _parse_red(f"match_{domain_name}", MATCH_SOURCES[domain_name])
    assert diagnostics == []

    match_expression = find_node(root, domain.if_match)
    assert _field_node(match_expression, "scrutinee").text_trimmed == "s"

    arms = [node for node in match_expression.child_nodes() if node.kind == domain.match_arm]
    assert len(arms) == 2
    assert [pattern.text_trimmed for pattern in arms[0].children_by_field("pattern")] == ["A", "B"]
    assert [pattern.text_trimmed for pattern in arms[1].children_by_field("pattern")] == ['"x"']
    for arm in arms:
        assert _field_node(arm, "body").kind == BODY_KIND[domain_name]
    assert _field_node(match_expression, "else").kind == BODY_KIND[domain_name]


@pytest.mark.parametrize("domain_name", list(DOMAIN_BY_NAME))
def test_condition_list_has_same_shape_in_every_domain(domain_name: str) -> None:
    domain = DOMAIN_BY_NAME[domain_name]
    root, diagnostics = _parse_red(f"condition_list_{domain_name}", CONDITION_LIST_SOURCES[domain_name])
    assert diagnostics == []

    condition_list = find_node(root, domain.if_condition_list)
    assert condition_list.child_by_field("scrutinee") is None

    arms = [node for node in condition_list.child_nodes() if node.kind == domain.condition_arm]
    assert [_field_node(arm, "condition").text_trimmed for arm in arms] == ["a", "b"]
    assert _field_node(condition_list, "else").kind == BODY_KIND[domain_name]


@pytest.mark.parametrize("domain_name", list(DOMAIN_BY_NAME))
def test_for_has_same_shape_in_every_domain(domain_name: str) -> None:
    domain = DOMAIN_BY_NAME[domain_name]
    root, diagnostics = _parse_red(f"for_{domain_name}", FOR_SOURCES[domain_name])
    assert diagnostics == []

    for_expression = find_node(root, domain.for_expression)
    item = for_expression.child_by_field("item")
    index = for_expression.child_by_field("index")
    assert isinstance(item, SyntaxToken) and item.text == "item"
    assert isinstance(index, SyntaxToken) and index.text == "i"
    assert _field_node(for_expression, "iterable").text_trimmed == "items"
    body = _field_node(for_expression, "body")
    if domain_name == "value":
        assert body.kind == NxSyntaxKind.IDENTIFIER_EXPRESSION
    else:
        assert body.kind == BODY_KIND[domain_name]


def test_control_node_kinds_never_leak_across_domains() -> None:
    source = "<a if ok { x=1 }>if ok { <b/> }</a>\nlet v = { if ok { 1 } else { 2 } }\n"
    root, diagnostics = _parse_red("domain_isolation", source)
    assert diagnostics == []

    assert len(find_nodes(root, NxSyntaxKind.PROPERTY_LIST_IF_SIMPLE_EXPRESSION)) == 1
    assert len(find_nodes(root, NxSyntaxKind.ELEMENTS_IF_SIMPLE_EXPRESSION)) == 1
    assert len(find_nodes(root, NxSyntaxKind.VALUE_IF_SIMPLE_EXPRESSION)) == 1


def test_brace_with_arms_after_condition_is_a_condition_list_with_scrutinee() -> None:
    root, diagnostics = _parse_red("scrutinee_condition_list", 'let v = { if mode { "a": 1 else: 2 } }')
    assert diagnostics == []

    condition_list = find_node(root, NxSyntaxKind.VALUE_IF_CONDITION_LIST_EXPRESSION)
    assert _field_node(condition_list, "scrutinee").text_trimmed == "mode"
    assert find_nodes(root, NxSyntaxKind.VALUE_IF_SIMPLE_EXPRESSION) == []


def test_simple_if_without_else() -> None:
    root, diagnostics = _parse_red("if_without_else", "<a>if ok { <b/> }</a>")
    assert diagnostics == []

    if_expression = find_node(root, NxSyntaxKind.ELEMENTS_IF_SIMPLE_EXPRESSION)
    assert if_expression.child_by_field("else") is None


def test_property_list_bodies_may_be_empty() -> None:
    root, diagnostics = _parse_red("empty_property_body", "<a if ok { } else { y=2 } />")
    assert diagnostics == []

    if_expression = find_node(root, NxSyntaxKind.PROPERTY_LIST_IF_SIMPLE_EXPRESSION)
    assert if_expression.child_by_field("then") is None
    assert _field_node(if_expression, "else").kind == NxSyntaxKind.PROPERTY_LIST


def test_empty_value_body_is_an_error() -> None:
    _, diagnostics = _parse_red("empty_value_body", "let v = { if ok { } else { 2 } }")
    assert [diagnostic.code for diagnostic in diagnostics] == ["PARSER_EXPECTED_EXPRESSION"]


def test_if_without_body_is_malformed() -> None:
    _, diagnostics = _parse_red("if_without_body", "let v = { if ok }")
    assert diagnostics[0].code == "PARSER_MALFORMED_IF"


def test_match_without_arms_is_malformed() -> None:
    _, diagnostics = _parse_red("match_without_arms", "let v = { if s is { } }")
    assert [diagnostic.code for diagnostic in diagnostics] == ["PARSER_MALFORMED_IF"]


def test_arrow_arms_can_be_disabled() -> None:
    source = "let v = { if { a => 1 } }"
    _, default_diagnostics = _parse_red("arrow_arms_enabled", source)
    assert default_diagnostics == []

    _, diagnostics = _parse_red("arrow_arms_disabled", source, ParserOptions(allow_arrow_arms=False))
    assert diagnostics
    assert diagnostics[0].code == "PARSER_EXPECTED_TOKEN"


def test_nested_control_inside_arm_bodies() -> None:
    source = "<a>if s is { A: for x in xs { if x { <b/> } } else: <c/> }</a>"
    root, diagnostics = _parse_red("nested_control", source)
    assert diagnostics == []

    arm = find_node(root, NxSyntaxKind.ELEMENTS_IF_MATCH_ARM)
    body = _field_node(arm, "body")
    assert [node.kind for node in body.child_nodes()] == [NxSyntaxKind.ELEMENTS_FOR_EXPRESSION]
    assert len(find_nodes(root, NxSyntaxKind.ELEMENTS_IF_SIMPLE_EXPRESSION)) == 1
