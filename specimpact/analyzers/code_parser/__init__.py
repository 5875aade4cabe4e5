"""Syntax-tree based extraction of test blocks and imports.

The analyzers only depend on the TestBlockParser capability
(``parse_to_test_blocks(text)``); TreeSitterTestBlockParser is the
tree-sitter implementation used by default.
"""

from collections.abc import Iterable
from typing import Protocol

from specimpact.analyzers.code_parser.base import (
    DEFAULT_LANGUAGE,
    EXTENSION_TO_LANGUAGE,
    get_parser,
    language_for,
)
from specimpact.analyzers.code_parser.typescript import (
    _extract_ts_imports,
    _extract_ts_test_blocks,
)
from specimpact.analyzers.constants import DEFAULT_TEST_CALLEES
from specimpact.logging import logger
from specimpact.models.impact import TestBlock


class TestBlockParser(Protocol):
    """Anything that can turn source text into test blocks."""

    def parse_to_test_blocks(self, text: str) -> list[TestBlock]: ...


class TreeSitterTestBlockParser:
    """TestBlockParser backed by a tree-sitter grammar."""

    __test__ = False

    def __init__(
        self,
        language: str = DEFAULT_LANGUAGE,
        callees: Iterable[str] = DEFAULT_TEST_CALLEES,
    ):
        self.language = language
        self.callees = frozenset(callees)

    def parse_to_test_blocks(self, text: str) -> list[TestBlock]:
        parser = get_parser(self.language)
        if parser is None:
            logger.debug("No tree-sitter grammar for %s", self.language)
            return []
        try:
            tree = parser.parse(text.encode("utf-8"))
        except UnicodeEncodeError as e:
            logger.debug("Could not encode source for parsing: %s", e)
            return []
        return _extract_ts_test_blocks(tree.root_node, self.callees)


def extract_test_blocks(
    file_identity: str,
    source_text: str,
    callees: Iterable[str] | None = None,
) -> list[TestBlock]:
    """Extract the test blocks of one file version.

    Args:
        file_identity: File name or path; only its extension is used, to
            pick the grammar.
        source_text: Full content of that file version.
        callees: Recognized test-call names (default: the five 'test' forms).

    Returns:
        TestBlocks in source order. Unparsable input yields an empty list.
    """
    parser = TreeSitterTestBlockParser(
        language_for(file_identity),
        DEFAULT_TEST_CALLEES if callees is None else callees,
    )
    blocks = parser.parse_to_test_blocks(source_text)
    logger.debug("Found %d test blocks in %s", len(blocks), file_identity)
    return blocks


def extract_imports(file_identity: str, source_text: str) -> list[str]:
    """Return the module specifiers imported by a source text, unresolved."""
    parser = get_parser(language_for(file_identity))
    if parser is None:
        return []
    try:
        tree = parser.parse(source_text.encode("utf-8"))
    except UnicodeEncodeError as e:
        logger.debug("Could not encode %s for parsing: %s", file_identity, e)
        return []
    return _extract_ts_imports(tree.root_node)


__all__ = [
    "EXTENSION_TO_LANGUAGE",
    "TestBlockParser",
    "TreeSitterTestBlockParser",
    "extract_imports",
    "extract_test_blocks",
    "language_for",
]
