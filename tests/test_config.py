"""Tests for AnalyzerConfig and environment overrides."""

import pytest

from specimpact.analyzers.constants import (
    DEFAULT_SKIP_DIRS,
    DEFAULT_TEST_CALLEES,
    DEFAULT_TEST_SUFFIXES,
    AnalyzerConfig,
)

_ENV_VARS = (
    "SPECIMPACT_TEST_SUFFIXES",
    "SPECIMPACT_SOURCE_EXTENSION",
    "SPECIMPACT_TEST_CALLEES",
    "SPECIMPACT_SKIP_DIRS",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestAnalyzerConfig:
    """Tests for file-kind configuration."""

    def test_defaults(self, clean_env):
        """Without overrides the Playwright TypeScript defaults apply."""
        config = AnalyzerConfig.from_env()

        assert config.test_suffixes == DEFAULT_TEST_SUFFIXES
        assert config.source_extension == ".ts"
        assert config.test_callees == DEFAULT_TEST_CALLEES
        assert config.skip_dirs == DEFAULT_SKIP_DIRS

    def test_env_overrides(self, clean_env):
        """Comma-separated variables replace the defaults."""
        clean_env.setenv("SPECIMPACT_TEST_SUFFIXES", ".e2e.ts, .spec.ts")
        clean_env.setenv("SPECIMPACT_SOURCE_EXTENSION", "mts")
        clean_env.setenv("SPECIMPACT_TEST_CALLEES", "it,describe,")
        clean_env.setenv("SPECIMPACT_SKIP_DIRS", "dist")

        config = AnalyzerConfig.from_env()

        assert config.test_suffixes == (".e2e.ts", ".spec.ts")
        assert config.source_extension == ".mts"
        assert config.test_callees == frozenset({"it", "describe"})
        assert config.skip_dirs == frozenset({"dist"})

    def test_blank_env_ignored(self, clean_env):
        """Empty variables keep the defaults."""
        clean_env.setenv("SPECIMPACT_TEST_SUFFIXES", "  ")

        assert AnalyzerConfig.from_env().test_suffixes == DEFAULT_TEST_SUFFIXES

    def test_with_overrides(self):
        """Only non-empty overrides replace values."""
        config = AnalyzerConfig().with_overrides(
            test_suffixes=(),
            source_extension="js",
            test_callees=["it"],
        )

        assert config.test_suffixes == DEFAULT_TEST_SUFFIXES
        assert config.source_extension == ".js"
        assert config.test_callees == frozenset({"it"})

    def test_file_kinds(self):
        """Test files and helpers are disjoint."""
        config = AnalyzerConfig()

        assert config.is_test_file("tests/login.spec.ts")
        assert config.is_test_file("tests/cart.test.ts")
        assert not config.is_test_file("helpers/login.ts")
        assert config.is_helper_file("helpers/login.ts")
        assert not config.is_helper_file("tests/login.spec.ts")
        assert not config.is_helper_file("README.md")
        assert not config.is_helper_file("helpers/login.tsx")
