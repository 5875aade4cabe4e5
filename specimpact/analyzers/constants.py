"""File-kind configuration shared by the analyzers.

Defaults describe a Playwright TypeScript suite. Every value can be
overridden through SPECIMPACT_* environment variables (a .env file works
too) or by passing an AnalyzerConfig explicitly.
"""

import os
from dataclasses import dataclass, field, replace

# Suffixes marking a test file
DEFAULT_TEST_SUFFIXES: tuple[str, ...] = (".spec.ts", ".test.ts")

# Extension of helper/source files whose changes propagate through imports
DEFAULT_SOURCE_EXTENSION = ".ts"

# Printed callee text of test-defining calls
DEFAULT_TEST_CALLEES: frozenset[str] = frozenset({
    "test",
    "test.skip",
    "test.only",
    "test.describe",
    "test.fixme",
})

# Dependency directories never scanned for test files.
# Hidden directories (".git", ".cache", ...) are always skipped.
DEFAULT_SKIP_DIRS: frozenset[str] = frozenset({
    "node_modules",
    "bower_components",
    "jspm_packages",
})


def _split_env(name: str) -> list[str] | None:
    """Read a comma-separated environment variable, None when unset or empty."""
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass(frozen=True)
class AnalyzerConfig:
    """Recognized file kinds and test-call names."""

    test_suffixes: tuple[str, ...] = DEFAULT_TEST_SUFFIXES
    source_extension: str = DEFAULT_SOURCE_EXTENSION
    test_callees: frozenset[str] = field(default=DEFAULT_TEST_CALLEES)
    skip_dirs: frozenset[str] = field(default=DEFAULT_SKIP_DIRS)

    @classmethod
    def from_env(cls) -> "AnalyzerConfig":
        """Build a config from defaults plus SPECIMPACT_* overrides.

        Recognized variables:
            SPECIMPACT_TEST_SUFFIXES: e.g. ".spec.ts,.test.ts,.e2e.ts"
            SPECIMPACT_SOURCE_EXTENSION: e.g. ".ts"
            SPECIMPACT_TEST_CALLEES: e.g. "test,test.skip,it,describe"
            SPECIMPACT_SKIP_DIRS: e.g. "node_modules,dist"
        """
        config = cls()
        suffixes = _split_env("SPECIMPACT_TEST_SUFFIXES")
        if suffixes:
            config = replace(config, test_suffixes=tuple(suffixes))
        extension = os.getenv("SPECIMPACT_SOURCE_EXTENSION", "").strip()
        if extension:
            config = replace(config, source_extension=_normalize_extension(extension))
        callees = _split_env("SPECIMPACT_TEST_CALLEES")
        if callees:
            config = replace(config, test_callees=frozenset(callees))
        skip_dirs = _split_env("SPECIMPACT_SKIP_DIRS")
        if skip_dirs:
            config = replace(config, skip_dirs=frozenset(skip_dirs))
        return config

    def with_overrides(
        self,
        test_suffixes: tuple[str, ...] | list[str] | None = None,
        source_extension: str | None = None,
        test_callees: frozenset[str] | set[str] | list[str] | None = None,
    ) -> "AnalyzerConfig":
        """Return a copy with the given non-empty values replaced."""
        config = self
        if test_suffixes:
            config = replace(config, test_suffixes=tuple(test_suffixes))
        if source_extension:
            config = replace(config, source_extension=_normalize_extension(source_extension))
        if test_callees:
            config = replace(config, test_callees=frozenset(test_callees))
        return config

    def is_test_file(self, path: str) -> bool:
        return path.endswith(self.test_suffixes)

    def is_helper_file(self, path: str) -> bool:
        """Source files that are not tests; their changes propagate via imports."""
        return path.endswith(self.source_extension) and not self.is_test_file(path)


def _normalize_extension(extension: str) -> str:
    return extension if extension.startswith(".") else f".{extension}"
