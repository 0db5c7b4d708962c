import pytest

from nxpy.cst import SyntaxNode, SyntaxToken, from_green
from nxpy.diagnostics import is_lex_error
from nxpy.lexer import BufferedLexer, Lexer
from nxpy.parser import (
    LosslessTreeSink,
    ParseMode,
    Parser,
    ParserOptions,
    TokenSource,
    parse,
    parse_module,
    process_events,
)
from nxpy.parser.validation import element_name_text
from nxpy.syntax import NxSyntaxKind
from tests._debug import (
    collect_node_kinds,
    debug_dump_cst,
    debug_dump_diagnostics,
    dump_cst,
    find_nodes,
    module_node,
)
from tests._shared_cases import PARSER_CASES, NxCase, case_id


def _parse_red(name: str, source: str, **kwargs) -> tuple[SyntaxNode, list]:
    parsed = parse(source, **kwargs)
    debug_dump_cst(name, source, parsed.root)
    debug_dump_diagnostics(name, parsed.diagnostics, source)
    return from_green(parsed.root, source), parsed.diagnostics


def _field_node(node: SyntaxNode, field: str) -> SyntaxNode:
    child = node.child_by_field(field)
    assert isinstance(child, SyntaxNode), f"{node.kind.name}.{field} is not a node"
    return child


def _field_token(node: SyntaxNode, field: str) -> SyntaxToken:
    child = node.child_by_field(field)
    assert isinstance(child, SyntaxToken), f"{node.kind.name}.{field} is not a token"
    return child


def _field_token_or_node(element, field: str):
    assert isinstance(element, SyntaxNode)
    child = element.child_by_field(field)
    assert child is not None
    return child


@pytest.mark.parametrize("case", PARSER_CASES, ids=case_id)
def test_shared_cases_strict_mode(case: NxCase) -> None:
    parsed = parse(case.source)
    debug_dump_cst(case.name, case.source, parsed.root)
    debug_dump_diagnostics(case.name, parsed.diagnostics, case.source)

    if case.strict_should_parse_cleanly:
        assert parsed.diagnostics == []
    else:
        assert parsed.diagnostics != []


@pytest.mark.parametrize("case", PARSER_CASES, ids=case_id)
def test_shared_cases_round_trip_losslessly(case: NxCase) -> None:
    parsed = parse(case.source)
    root = from_green(parsed.root, case.source)

    reconstructed = "".join(token.text_with_trivia for token in root.descendants_tokens())
    assert reconstructed == case.source
    assert parsed.root.text_len.value == len(case.source)


@pytest.mark.parametrize("case", PARSER_CASES, ids=case_id)
def test_shared_cases_reparse_is_structurally_equal(case: NxCase) -> None:
    first = parse(case.source)
    serialized = from_green(first.root, case.source).text
    second = parse(serialized)

    assert dump_cst(second.root) == dump_cst(first.root)


def test_tree_shape_is_root_module_and_eof() -> None:
    root, diagnostics = _parse_red("tree_shape", "let a = 1\n")
    assert diagnostics == []
    assert root.kind == NxSyntaxKind.ROOT

    module = module_node(root)
    assert module.child_tokens()[-1].kind == NxSyntaxKind.EOF
    assert [child.kind for child in module.child_nodes()] == [NxSyntaxKind.VALUE_DEFINITION]


def test_function_definition_with_interpolated_body() -> None:
    root, diagnostics = _parse_red("function_definition", "let root() = { 42 }")
    assert diagnostics == []

    module = module_node(root)
    definitions = module.child_nodes()
    assert [node.kind for node in definitions] == [NxSyntaxKind.FUNCTION_DEFINITION]

    function = definitions[0]
    assert _field_token(function, "name").text == "root"
    body = _field_node(function, "body")
    assert body.kind == NxSyntaxKind.INTERPOLATION_EXPRESSION
    value = _field_node(body, "value")
    assert value.kind == NxSyntaxKind.INT_LITERAL
    assert value.text_trimmed == "42"


def test_element_with_member_access_interpolation() -> None:
    root, diagnostics = _parse_red("member_access", "<div>{user.name}</div>")
    assert diagnostics == []

    element = _field_node(module_node(root), "element")
    assert element.kind == NxSyntaxKind.ELEMENT
    assert element_name_text(_field_node(element, "name")) == "div"

    content = _field_node(element, "content")
    assert content.kind == NxSyntaxKind.MIXED_CONTENT
    items = content.child_nodes()
    assert [item.kind for item in items] == [NxSyntaxKind.INTERPOLATION_EXPRESSION]

    member_access = _field_node(items[0], "value")
    assert member_access.kind == NxSyntaxKind.MEMBER_ACCESS_EXPRESSION
    target = _field_node(member_access, "target")
    assert target.kind == NxSyntaxKind.IDENTIFIER_EXPRESSION
    assert target.text_trimmed == "user"
    assert _field_token(member_access, "member").text == "name"


def test_top_level_value_if_simple_expression() -> None:
    root, diagnostics = _parse_red("value_if", "{ if x { 1 } else { 2 } }")
    assert diagnostics == []

    interpolation = _field_node(module_node(root), "value")
    if_expression = _field_node(interpolation, "value")
    assert if_expression.kind == NxSyntaxKind.VALUE_IF_SIMPLE_EXPRESSION

    condition = _field_node(if_expression, "condition")
    assert condition.kind == NxSyntaxKind.IDENTIFIER_EXPRESSION
    assert condition.text_trimmed == "x"
    assert _field_node(if_expression, "then").text_trimmed == "1"
    assert _field_node(if_expression, "else").text_trimmed == "2"


def test_missing_initializer_reports_once_and_keeps_definition() -> None:
    root, diagnostics = _parse_red("missing_initializer", "let x = ")

    assert [diagnostic.code for diagnostic in diagnostics] == ["PARSER_EXPECTED_VALUE"]
    definition = module_node(root).child_node_of_kind(NxSyntaxKind.VALUE_DEFINITION)
    assert definition is not None
    assert _field_token(definition, "name").text == "x"
    assert _field_node(definition, "value").kind == NxSyntaxKind.ERROR


def test_closing_tag_mismatch_keeps_both_names() -> None:
    root, diagnostics = _parse_red("tag_mismatch", "<a>text</b>\nlet y = 1\n")

    assert not any(is_lex_error(diagnostic) for diagnostic in diagnostics)
    assert [diagnostic.code for diagnostic in diagnostics] == ["PARSER_TAG_MISMATCH"]
    assert diagnostics[0].severity == "error"

    module = module_node(root)
    element = _field_node(module, "element")
    assert element_name_text(_field_node(element, "name")) == "a"
    assert element_name_text(_field_node(element, "close_name")) == "b"
    assert module.child_node_of_kind(NxSyntaxKind.VALUE_DEFINITION) is not None


def test_closing_tag_mismatch_is_a_warning_in_permissive_mode() -> None:
    _, diagnostics = _parse_red("tag_mismatch_permissive", "<a>text</b>", mode=ParseMode.PERMISSIVE)
    assert [(diagnostic.code, diagnostic.severity) for diagnostic in diagnostics] == [
        ("PARSER_TAG_MISMATCH", "warning")
    ]


def test_raw_embed_body_is_one_literal_run() -> None:
    source = "<p:uitext raw>{not interpolated}</p>"
    root, diagnostics = _parse_red("raw_embed", source)
    assert diagnostics == []

    element = _field_node(module_node(root), "element")
    assert _field_token(element, "text_type").text == "uitext"
    assert _field_token(element, "raw").kind == NxSyntaxKind.RAW_KW

    content = _field_node(element, "content")
    assert content.kind == NxSyntaxKind.RAW_TEXT_RUN
    assert content.text_trimmed == "{not interpolated}"
    assert [token.kind for token in content.descendants_tokens()] == [NxSyntaxKind.RAW_TEXT_CHUNK]
    assert find_nodes(root, NxSyntaxKind.INTERPOLATION_EXPRESSION) == []


def test_raw_embed_without_text_type() -> None:
    root, diagnostics = _parse_red("raw_without_type", "<script:raw>if (a < b) { go(); }</script>")
    assert diagnostics == []

    element = _field_node(module_node(root), "element")
    assert element.child_by_field("text_type") is None
    assert _field_node(element, "content").text_trimmed == "if (a < b) { go(); }"


def test_module_level_definitions() -> None:
    source = (
        "import ui.controls\n"
        "type Tags = string[]\n"
        "type MaybeUser = models.User?\n"
        "enum Color = | red | green | blue\n"
        "let count: int = 3\n"
    )
    root, diagnostics = _parse_red("module_definitions", source)
    assert diagnostics == []

    kinds = [node.kind for node in module_node(root).child_nodes()]
    assert kinds == [
        NxSyntaxKind.IMPORT_STATEMENT,
        NxSyntaxKind.TYPE_DEFINITION,
        NxSyntaxKind.TYPE_DEFINITION,
        NxSyntaxKind.ENUM_DEFINITION,
        NxSyntaxKind.VALUE_DEFINITION,
    ]

    enum = find_nodes(root, NxSyntaxKind.ENUM_DEFINITION)[0]
    members = _field_node(enum, "members")
    assert [member.text_trimmed for member in members.child_nodes()] == ["red", "green", "blue"]

    types = find_nodes(root, NxSyntaxKind.TYPE)
    assert [node.text_trimmed for node in types] == ["string[]", "models.User?", "int"]
    assert types[0].child_node_of_kind(NxSyntaxKind.PRIMITIVE_TYPE) is not None
    assert types[1].child_node_of_kind(NxSyntaxKind.USER_DEFINED_TYPE) is not None
    assert types[1].child_by_field("nullable") is not None


def test_component_definition_collects_parameters() -> None:
    source = 'let <Button text:string on-click:string = "noop" /> = <button>{text}</button>'
    root, diagnostics = _parse_red("component_definition", source)
    assert diagnostics == []

    function = find_nodes(root, NxSyntaxKind.FUNCTION_DEFINITION)[0]
    assert element_name_text(_field_node(function, "name")) == "Button"

    parameters = function.children_by_field("parameter")
    assert [element_name_text(_field_token_or_node(parameter, "name")) for parameter in parameters] == [
        "text",
        "on-click",
    ]
    assert isinstance(parameters[1], SyntaxNode)
    assert _field_node(parameters[1], "default").kind == NxSyntaxKind.STRING_LITERAL
    assert _field_node(function, "body").kind == NxSyntaxKind.ELEMENT


def test_function_definition_with_parameters_and_return_type() -> None:
    root, diagnostics = _parse_red("typed_function", "let sum(a: int, b: int): int = { a + b }")
    assert diagnostics == []

    function = find_nodes(root, NxSyntaxKind.FUNCTION_DEFINITION)[0]
    assert len(function.children_by_field("parameter")) == 2
    assert _field_node(function, "return_type").text_trimmed == "int"
    body_value = _field_node(_field_node(function, "body"), "value")
    assert body_value.kind == NxSyntaxKind.BINARY_EXPRESSION


def test_keyword_property_names_in_tags() -> None:
    root, diagnostics = _parse_red("keyword_properties", '<label for="name" type="text" />')
    assert diagnostics == []

    names = [
        element_name_text(_field_node(node, "name")) for node in find_nodes(root, NxSyntaxKind.PROPERTY_VALUE)
    ]
    assert names == ["for", "type"]


def test_top_level_element_and_definitions_coexist() -> None:
    root, diagnostics = _parse_red("element_and_definitions", "let title = \"Hi\"\n<App />\n")
    assert diagnostics == []

    kinds = collect_node_kinds(parse("let title = \"Hi\"\n<App />\n").root)
    assert NxSyntaxKind.VALUE_DEFINITION in kinds
    assert NxSyntaxKind.ELEMENT in kinds
    assert module_node(root).child_by_field("element") is not None


def test_parse_accepts_bytes_and_options() -> None:
    parsed = parse(b"<a/>", ParserOptions())
    assert parsed.diagnostics == []

    with pytest.raises(ValueError):
        parse("<a/>", ParserOptions(), mode=ParseMode.STRICT)


def test_invalid_utf8_is_kept_and_reported_once() -> None:
    source = b'let s = "\xff"'
    parsed = parse(source)

    assert [diagnostic.code for diagnostic in parsed.diagnostics] == ["LEXER_INVALID_UTF8"]
    assert parsed.diagnostics[0].range.as_tuple() == (9, 10)


def test_nesting_limit_reports_instead_of_recursing() -> None:
    source = "<a>" * 6 + "</a>" * 6
    parsed = parse(source, ParserOptions(max_nesting_depth=4))

    codes = [diagnostic.code for diagnostic in parsed.diagnostics]
    assert "PARSER_NESTING_TOO_DEEP" in codes
    root = from_green(parsed.root, source)
    assert "".join(token.text_with_trivia for token in root.descendants_tokens()) == source


def test_deep_nesting_within_default_limit_parses_cleanly() -> None:
    source = "<a>" * 40 + "</a>" * 40
    assert parse(source).diagnostics == []


def test_parser_events_replay_into_the_lossless_sink() -> None:
    source = "let a = 1 // note\n<p>hi</p>\n"
    token_source = TokenSource(BufferedLexer(Lexer(source)))
    parser = Parser(token_source)

    parse_module(parser)
    events, diagnostics = parser.finish()
    trivia, lexer_diagnostics = token_source.finish()
    assert diagnostics == []
    assert lexer_diagnostics == []

    sink = LosslessTreeSink(text=source, trivia=trivia)
    process_events(sink, events)
    root = sink.finish()

    assert root == parse(source).root
    assert from_green(root, source).text == source
