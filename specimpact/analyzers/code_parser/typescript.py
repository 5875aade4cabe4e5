"""TypeScript/JavaScript test block and import extraction.

Works on tree-sitter syntax trees. Test-defining calls are recognized by
the printed text of their callee, compared against a configured set of
dotted names such as "test" or "test.describe".
"""

from collections.abc import Iterable

from tree_sitter import Node

from specimpact.analyzers.code_parser.base import (
    _find_nodes,
    _get_child_by_field,
    _get_child_by_type,
    _node_text,
    _string_literal_value,
)
from specimpact.models.impact import TestBlock


def _call_arguments(call_node: Node) -> list[Node]:
    """Argument expressions of a call, comments excluded."""
    args = _get_child_by_field(call_node, "arguments")
    if args is None:
        return []
    return [child for child in args.named_children if child.type != "comment"]


def _test_name(name_node: Node) -> str:
    """Display name from a test call's first argument.

    String literals give their literal value. Anything else (template
    literals, identifiers, concatenations) falls back to the source text
    with quote characters removed.
    """
    if name_node.type == "string":
        return _string_literal_value(name_node)
    return _node_text(name_node).replace("'", "").replace('"', "")


def _extract_ts_test_blocks(tree: Node, callees: Iterable[str]) -> list[TestBlock]:
    """Extract test-defining calls from a parsed file.

    Args:
        tree: Root node of the parsed AST.
        callees: Printed callee texts that define a test or suite.

    Returns:
        One TestBlock per recognized call with at least two arguments,
        spanning the whole call expression including its callback.
    """
    callee_names = frozenset(callees)
    blocks = []

    for call in _find_nodes(tree, {"call_expression"}):
        func = _get_child_by_field(call, "function")
        if func is None or _node_text(func) not in callee_names:
            continue

        args = _call_arguments(call)
        if len(args) < 2:
            continue

        blocks.append(
            TestBlock(
                name=_test_name(args[0]),
                start_line=call.start_point[0] + 1,
                end_line=call.end_point[0] + 1,
            )
        )

    return blocks


def _extract_ts_imports(tree: Node) -> list[str]:
    """Extract module specifiers exactly as written.

    Covers import declarations (including side-effect imports),
    re-exports ('export ... from'), require() and dynamic import().
    """
    sources: list[str] = []

    for node in _find_nodes(tree, {"import_statement", "export_statement", "call_expression"}):
        if node.type == "import_statement":
            source_node = _get_child_by_field(node, "source") or _get_child_by_type(node, "string")
            if source_node is not None:
                sources.append(_string_literal_value(source_node))

        elif node.type == "export_statement":
            source_node = _get_child_by_field(node, "source")
            if source_node is not None:
                sources.append(_string_literal_value(source_node))

        else:
            func = _get_child_by_field(node, "function")
            if func is None or not (func.type == "import" or func.text == b"require"):
                continue
            args = _call_arguments(node)
            if args and args[0].type == "string":
                sources.append(_string_literal_value(args[0]))

    # Keep first occurrence order, drop repeats
    return list(dict.fromkeys(sources))
