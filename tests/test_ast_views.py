import pytest

from nxpy.ast import (
    ControlExpression,
    Element,
    EnumDefinition,
    Expression,
    FunctionDefinition,
    Identifier,
    Interpolation,
    Literal,
    TypeDefinition,
    ValueDefinition,
    cast_node,
    iter_elements,
    module_of,
    unescape_string,
)
from nxpy.parser import parse_result
from nxpy.syntax import NxSyntaxKind
from tests._shared_cases import case_by_name


def _module(source: str):
    result = parse_result(source)
    assert result.diagnostics == []
    return result.module()


def test_type_and_enum_definition_views() -> None:
    module = _module(case_by_name("imports_and_type_definitions").source)

    assert [item.name for item in module.imports] == ["ui.controls"]
    definitions = module.definitions
    assert [type(item) for item in definitions] == [
        TypeDefinition,
        TypeDefinition,
        TypeDefinition,
        EnumDefinition,
    ]

    name_type = module.definition("Name").type
    assert name_type is not None
    assert (name_type.name, name_type.is_primitive, name_type.is_list, name_type.is_nullable) == (
        "string",
        True,
        False,
        False,
    )

    tags_type = module.definition("Tags").type
    assert tags_type is not None and tags_type.is_list

    maybe_user = module.definition("MaybeUser").type
    assert maybe_user is not None
    assert maybe_user.name == "models.User"
    assert not maybe_user.is_primitive
    assert maybe_user.is_nullable

    color = module.definition("Color")
    assert isinstance(color, EnumDefinition)
    assert color.members == ("red", "green", "blue")


def test_value_definition_literal_values() -> None:
    module = _module(case_by_name("value_definitions_with_types").source)

    values = {}
    for definition in module.definitions:
        assert isinstance(definition, ValueDefinition)
        assert isinstance(definition.value, Literal)
        values[definition.name] = definition.value.value

    assert values == {
        "count": 3,
        "ratio": 0.5,
        "mask": 255,
        "label": "hi\n",
        "nothing": None,
        "flag": True,
    }
    count = module.definition("count")
    assert isinstance(count, ValueDefinition)
    assert count.type is not None and count.type.name == "int"


@pytest.mark.parametrize(
    ("token_text", "expected"),
    [
        ('"plain"', "plain"),
        ('"tab\\there"', "tab\there"),
        ('"brace \\{x\\}"', "brace {x}"),
        ('"quote \\" backslash \\\\"', 'quote " backslash \\'),
        ('"smile \\u{1F600}"', "smile \U0001f600"),
        ('"unknown \\q"', "unknown \\q"),
        ('"unterminated', "unterminated"),
    ],
)
def test_unescape_string(token_text: str, expected: str) -> None:
    assert unescape_string(token_text) == expected


def test_function_and_component_views() -> None:
    module = _module(case_by_name("component_and_function_definitions").source)

    button = module.definition("Button")
    assert isinstance(button, FunctionDefinition)
    assert button.is_component
    assert [parameter.name for parameter in button.parameters] == ["text", "on-click"]
    assert [parameter.type.name for parameter in button.parameters if parameter.type] == ["string", "string"]
    default = button.parameters[1].default
    assert isinstance(default, Literal) and default.value == "noop"
    assert isinstance(button.body, Element) and button.body.name == "button"

    total = module.definition("sum")
    assert isinstance(total, FunctionDefinition)
    assert not total.is_component
    assert total.return_type is not None and total.return_type.name == "int"
    assert isinstance(total.body, Interpolation)

    body_value = total.body.value
    assert isinstance(body_value, Expression)
    assert body_value.operator() == "+"
    left = body_value.field("left")
    assert isinstance(left, Identifier) and left.name == "a"


def test_call_expression_arguments() -> None:
    module = _module(case_by_name("value_conditional_and_calls").source)

    definition = module.definition("a")
    assert isinstance(definition, ValueDefinition)
    interpolation = definition.value
    assert isinstance(interpolation, Interpolation)

    conditional = interpolation.value
    assert isinstance(conditional, Expression)
    assert conditional.kind == NxSyntaxKind.CONDITIONAL_EXPRESSION
    call = conditional.field("consequent")
    assert isinstance(call, Expression)
    assert [argument.text for argument in call.arguments()] == ["user.name", "2"]
    fallback = conditional.field("alternative")
    assert isinstance(fallback, Expression) and fallback.arguments() == ()


def test_control_expression_views() -> None:
    module = _module(case_by_name("elements_level_control").source)

    element = module.element
    assert element is not None and element.content is not None
    controls = [item for item in element.content.items if isinstance(item, ControlExpression)]
    assert [control.kind for control in controls] == [
        NxSyntaxKind.ELEMENTS_IF_SIMPLE_EXPRESSION,
        NxSyntaxKind.ELEMENTS_FOR_EXPRESSION,
        NxSyntaxKind.ELEMENTS_IF_MATCH_EXPRESSION,
        NxSyntaxKind.ELEMENTS_IF_CONDITION_LIST_EXPRESSION,
    ]

    simple, loop, match, condition_list = controls
    assert simple.field("condition") is not None
    assert simple.field("else") is not None

    assert (loop.item_name, loop.index_name) == ("item", "index")

    assert [arm.patterns for arm in match.arms] == [("Active",), ("Inactive", "Unknown")]
    assert all(arm.field("body") is not None for arm in match.arms)

    assert len(condition_list.arms) == 1
    condition = condition_list.arms[0].field("condition")
    assert isinstance(condition, Identifier) and condition.name == "ready"
    assert condition_list.field("else") is not None


def test_iter_elements_walks_in_source_order() -> None:
    result = parse_result(case_by_name("nested_elements_with_properties").source)
    names = [element.name for element in iter_elements(result.syntax_root())]
    assert names == ["ui.Panel", "Row", "Row", "Label"]


def test_cast_node_skips_nodes_without_views() -> None:
    result = parse_result("<ui.Panel />")
    root = result.syntax_root()
    name = next(node for node in root.descendants() if node.kind == NxSyntaxKind.QUALIFIED_MARKUP_NAME)
    assert cast_node(name) is None

    with pytest.raises(ValueError):
        module_of(name)
