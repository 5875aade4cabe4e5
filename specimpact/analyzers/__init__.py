"""Analyzers for commit impact detection."""

from specimpact.analyzers.code_parser import (
    TestBlockParser,
    TreeSitterTestBlockParser,
    extract_imports,
    extract_test_blocks,
)
from specimpact.analyzers.constants import (
    DEFAULT_SKIP_DIRS,
    DEFAULT_SOURCE_EXTENSION,
    DEFAULT_TEST_CALLEES,
    DEFAULT_TEST_SUFFIXES,
    AnalyzerConfig,
)
from specimpact.analyzers.diff_parser import parse_diff, parse_hunk_header
from specimpact.analyzers.git_history import (
    CommitNotFoundError,
    GitError,
    GitRepository,
    VersionControl,
)
from specimpact.analyzers.impact import (
    AnalysisError,
    ImpactAnalyzer,
    analyze_commit,
    classify_versions,
)
from specimpact.analyzers.imports import ImportResolver

__all__ = [
    "DEFAULT_SKIP_DIRS",
    "DEFAULT_SOURCE_EXTENSION",
    "DEFAULT_TEST_CALLEES",
    "DEFAULT_TEST_SUFFIXES",
    "AnalysisError",
    "AnalyzerConfig",
    "CommitNotFoundError",
    "GitError",
    "GitRepository",
    "ImpactAnalyzer",
    "ImportResolver",
    "TestBlockParser",
    "TreeSitterTestBlockParser",
    "VersionControl",
    "analyze_commit",
    "classify_versions",
    "extract_imports",
    "extract_test_blocks",
    "parse_diff",
    "parse_hunk_header",
]
