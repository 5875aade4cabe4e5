"""Tree-sitter grammars and node helpers.

Provides the language bindings and the small set of tree walking helpers
used by the test block and import extractors.
"""

import codecs
from pathlib import PurePosixPath

import tree_sitter_javascript as ts_javascript
import tree_sitter_typescript as ts_typescript
from tree_sitter import Language, Node, Parser

# File extension to grammar mapping
EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
}

DEFAULT_LANGUAGE = "typescript"

_LANGUAGES: dict[str, Language] = {}
_PARSERS: dict[str, Parser] = {}


def _get_language(name: str) -> Language | None:
    """Lazily build tree-sitter language bindings."""
    if name in _LANGUAGES:
        return _LANGUAGES[name]

    if name == "typescript":
        _LANGUAGES[name] = Language(ts_typescript.language_typescript())
    elif name == "tsx":
        _LANGUAGES[name] = Language(ts_typescript.language_tsx())
    elif name == "javascript":
        _LANGUAGES[name] = Language(ts_javascript.language())
    else:
        return None

    return _LANGUAGES[name]


def language_for(file_identity: str) -> str:
    """Pick the grammar for a file name, TypeScript when unknown."""
    suffix = PurePosixPath(file_identity).suffix.lower()
    return EXTENSION_TO_LANGUAGE.get(suffix, DEFAULT_LANGUAGE)


def get_parser(language: str) -> Parser | None:
    """Return a cached parser for a grammar name."""
    if language in _PARSERS:
        return _PARSERS[language]
    ts_language = _get_language(language)
    if ts_language is None:
        return None
    _PARSERS[language] = Parser(ts_language)
    return _PARSERS[language]


# =============================================================================
# Tree-sitter Helper Functions
# =============================================================================


def _find_nodes(node: Node, types: set[str]) -> list[Node]:
    """Find all nodes of given types, in source order.

    Iterative so that deeply nested callbacks cannot hit the recursion limit.
    """
    results = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in types:
            results.append(current)
        stack.extend(reversed(current.children))
    return results


def _get_child_by_field(node: Node, field_name: str) -> Node | None:
    """Get child by field name."""
    return node.child_by_field_name(field_name)


def _get_child_by_type(node: Node, type_name: str) -> Node | None:
    """Get first child of a specific type."""
    for child in node.children:
        if child.type == type_name:
            return child
    return None


def _node_text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _string_literal_value(node: Node) -> str:
    """Literal value of a 'string' node with escape sequences decoded."""
    parts = []
    for child in node.named_children:
        if child.type == "escape_sequence":
            raw = _node_text(child)
            try:
                parts.append(codecs.decode(raw, "unicode_escape"))
            except UnicodeDecodeError:
                parts.append(raw)
        else:
            parts.append(_node_text(child))
    return "".join(parts)
