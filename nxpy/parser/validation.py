"""Post-parse syntax checks over the red tree.

These checks never change the tree. They only add diagnostics for constructs
that parse fine but are rejected at the syntax level: closing tags that do not
match their opening tag, and more than one `root` definition per module.
"""

from nxpy.cst import SyntaxElement, SyntaxNode, SyntaxToken
from nxpy.diagnostics import PARSER_DUPLICATE_ROOT, PARSER_TAG_MISMATCH, Diagnostic, Label
from nxpy.parser.options import ParserOptions
from nxpy.syntax import NxSyntaxKind
from nxpy.text import TextRange

ROOT_NAME = "root"


def validate_tree(root: SyntaxNode, options: ParserOptions, file_name: str) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    if options.report_tag_mismatch:
        diagnostics.extend(validate_element_tags(root, options, file_name))
    if options.report_duplicate_root:
        module = root.child_node_of_kind(NxSyntaxKind.MODULE_DEFINITION)
        if module is not None:
            diagnostics.extend(validate_root_definitions(module, file_name))
    return diagnostics


def validate_element_tags(root: SyntaxNode, options: ParserOptions, file_name: str) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for node in root.descendants():
        if node.kind != NxSyntaxKind.ELEMENT:
            continue
        name = node.child_by_field("name")
        close_name = node.child_by_field("close_name")
        if name is None or close_name is None:
            continue

        open_text = element_name_text(name)
        close_text = element_name_text(close_name)
        if open_text == close_text:
            continue

        diagnostics.append(
            PARSER_TAG_MISMATCH.at(
                _trimmed_range(close_name),
                file_name,
                message=f"Element closing tag '{close_text}' does not match opening tag '{open_text}'",
                label="closing tag here",
                secondary=(
                    Label(
                        file=file_name,
                        range=_trimmed_range(name),
                        message=f"opening tag '{open_text}' here",
                        primary=False,
                    ),
                ),
                note=f"Expected closing tag '</{open_text}>'",
                severity=options.tag_mismatch_severity,
            )
        )
    return diagnostics


def validate_root_definitions(module: SyntaxNode, file_name: str) -> list[Diagnostic]:
    """A module has at most one `root`: explicit `let root` or a top-level element."""
    explicit_roots: list[TextRange] = []
    implicit_root: TextRange | None = None

    for child in module.child_nodes():
        if child.kind in (NxSyntaxKind.FUNCTION_DEFINITION, NxSyntaxKind.VALUE_DEFINITION):
            name = child.child_by_field("name")
            if name is not None and element_name_text(name) == ROOT_NAME:
                explicit_roots.append(_trimmed_range(name))
        elif child.kind == NxSyntaxKind.ELEMENT:
            implicit_root = child.text_range_trimmed

    diagnostics: list[Diagnostic] = []
    if len(explicit_roots) > 1:
        diagnostics.append(
            PARSER_DUPLICATE_ROOT.at(
                explicit_roots[1],
                file_name,
                label="duplicate 'root' definition",
                secondary=(
                    Label(
                        file=file_name,
                        range=explicit_roots[0],
                        message="first 'root' definition here",
                        primary=False,
                    ),
                ),
                note="A module can have at most one 'root' definition",
            )
        )

    if explicit_roots and implicit_root is not None:
        diagnostics.append(
            PARSER_DUPLICATE_ROOT.at(
                implicit_root,
                file_name,
                label="top-level element implicitly defines 'root'",
                secondary=(
                    Label(
                        file=file_name,
                        range=explicit_roots[0],
                        message="explicit 'root' definition here",
                        primary=False,
                    ),
                ),
                note=(
                    "A module can have either a top-level element or an explicit 'root' "
                    "definition, but not both"
                ),
            )
        )
    return diagnostics


def element_name_text(element: SyntaxElement) -> str:
    """Name text with interior trivia removed: `a . b` and `a.b` compare equal."""
    if isinstance(element, SyntaxToken):
        return element.text
    return "".join(token.text for token in element.descendants_tokens())


def _trimmed_range(element: SyntaxElement) -> TextRange:
    if isinstance(element, SyntaxToken):
        return element.text_range
    return element.text_range_trimmed
