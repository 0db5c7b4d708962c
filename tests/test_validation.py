from nxpy.cst import from_green
from nxpy.parser import ParseMode, ParserOptions, parse, validate_tree
from nxpy.text import LineIndex
from tests._debug import debug_dump_diagnostics


def _diagnostics(name: str, source: str, **kwargs) -> list:
    parsed = parse(source, **kwargs)
    debug_dump_diagnostics(name, parsed.diagnostics, source)
    return parsed.diagnostics


def test_tag_mismatch_labels_both_names() -> None:
    diagnostics = _diagnostics("tag_mismatch", "<a>text</b>")

    assert len(diagnostics) == 1
    diagnostic = diagnostics[0]
    assert diagnostic.code == "PARSER_TAG_MISMATCH"
    assert diagnostic.range.as_tuple() == (9, 10)
    assert diagnostic.note == "Expected closing tag '</a>'"
    assert "'b'" in diagnostic.message and "'a'" in diagnostic.message

    primary, secondary = diagnostic.labels
    assert primary.primary and primary.range.as_tuple() == (9, 10)
    assert not secondary.primary and secondary.range.as_tuple() == (1, 2)


def test_tag_names_compare_without_interior_trivia() -> None:
    assert _diagnostics("dotted_names", "<ui.Panel>x</ui . Panel>") == []


def test_nested_mismatch_is_reported_once() -> None:
    diagnostics = _diagnostics("nested_mismatch", "<a><b></c></a>")
    assert [diagnostic.code for diagnostic in diagnostics] == ["PARSER_TAG_MISMATCH"]
    assert diagnostics[0].note == "Expected closing tag '</b>'"


def test_tag_mismatch_severity_follows_mode() -> None:
    strict = _diagnostics("mismatch_strict", "<a></b>")
    permissive = _diagnostics("mismatch_permissive", "<a></b>", mode=ParseMode.PERMISSIVE)

    assert [diagnostic.severity for diagnostic in strict] == ["error"]
    assert [diagnostic.severity for diagnostic in permissive] == ["warning"]


def test_tag_mismatch_check_can_be_disabled() -> None:
    options = ParserOptions(report_tag_mismatch=False)
    assert _diagnostics("mismatch_disabled", "<a></b>", options=options) == []


def test_duplicate_explicit_root_definitions() -> None:
    source = "let root = 1\nlet root = 2\n"
    diagnostics = _diagnostics("duplicate_root", source)

    assert [diagnostic.code for diagnostic in diagnostics] == ["PARSER_DUPLICATE_ROOT"]
    primary, secondary = diagnostics[0].labels
    assert primary.range.as_tuple() == (17, 21)
    assert secondary.range.as_tuple() == (4, 8)
    assert secondary.message == "first 'root' definition here"


def test_explicit_root_and_top_level_element_conflict() -> None:
    source = "let root() = { 1 }\n<App/>\n"
    diagnostics = _diagnostics("root_and_element", source)

    assert [diagnostic.code for diagnostic in diagnostics] == ["PARSER_DUPLICATE_ROOT"]
    assert diagnostics[0].range.as_tuple() == (19, 25)
    assert diagnostics[0].labels[1].range.as_tuple() == (4, 8)


def test_single_root_forms_are_accepted() -> None:
    assert _diagnostics("explicit_root", "let root = <App/>\n") == []
    assert _diagnostics("implicit_root", "let title = 1\n<App/>\n") == []


def test_duplicate_root_is_not_checked_in_permissive_mode() -> None:
    assert _diagnostics("duplicate_root_permissive", "let root = 1\nlet root = 2\n", mode=ParseMode.PERMISSIVE) == []


def test_validate_tree_runs_on_any_red_tree() -> None:
    source = "let root = 1\n<a></b>\n"
    parsed = parse(source, ParserOptions(report_tag_mismatch=False, report_duplicate_root=False))
    assert parsed.diagnostics == []

    diagnostics = validate_tree(from_green(parsed.root, source), ParserOptions(), "view.nx")
    assert sorted(diagnostic.code for diagnostic in diagnostics) == ["PARSER_DUPLICATE_ROOT", "PARSER_TAG_MISMATCH"]
    assert all(label.file == "view.nx" for diagnostic in diagnostics for label in diagnostic.labels)

    payload = diagnostics[0].to_dict(LineIndex(source))
    assert payload["labels"][0]["file"] == "view.nx"
