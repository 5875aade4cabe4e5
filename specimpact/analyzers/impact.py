"""Commit impact classification.

Decides which tests a commit affects:

- Changed test files are compared version against version. Tests are
  matched by name: new names are 'added', vanished names are 'removed',
  and surviving tests whose new span covers an added line are 'modified'.
- Changed helper files mark every test in every test file importing them
  as 'modified' (indirect), since impact cannot be attributed below file
  granularity.

Missing file content or unparsable files only drop that file's
contribution. An unresolvable commit is the only fatal error.
"""

from pathlib import Path

from specimpact.analyzers.code_parser import TestBlockParser, TreeSitterTestBlockParser, language_for
from specimpact.analyzers.constants import AnalyzerConfig
from specimpact.analyzers.diff_parser import parse_diff
from specimpact.analyzers.git_history import GitError, GitRepository, VersionControl
from specimpact.analyzers.imports import ImportResolver
from specimpact.logging import log_operation, logger
from specimpact.models.impact import ChangedFile, ImpactReport, ImpactResult, TestBlock


class AnalysisError(Exception):
    """Commit analysis could not be performed."""

    def __init__(self, message: str, commit: str):
        super().__init__(message)
        self.commit = commit


class ImpactAnalyzer:
    """Classify the tests impacted by one commit.

    Args:
        repo_path: Repository root (working tree used for import lookup).
        git: Version-control backend (default: GitRepository on repo_path).
        config: Recognized file kinds (default: AnalyzerConfig.from_env()).
        resolver: Import resolver (default: one built on repo_path).
        depth: Import hops followed for helper changes (1 = direct importers).
    """

    def __init__(
        self,
        repo_path: str | Path,
        git: VersionControl | None = None,
        config: AnalyzerConfig | None = None,
        resolver: ImportResolver | None = None,
        depth: int = 1,
    ):
        self.repo_path = Path(repo_path).resolve()
        self.config = config or AnalyzerConfig.from_env()
        self.git = git or GitRepository(self.repo_path)
        self.resolver = resolver or ImportResolver(self.repo_path, self.config)
        self.depth = depth
        self._parsers: dict[str, TestBlockParser] = {}

    def _parser_for(self, path: str) -> TestBlockParser:
        language = language_for(path)
        if language not in self._parsers:
            self._parsers[language] = TreeSitterTestBlockParser(language, self.config.test_callees)
        return self._parsers[language]

    def _blocks(self, path: str, content: str | None) -> list[TestBlock]:
        if content is None:
            return []
        return self._parser_for(path).parse_to_test_blocks(content)

    def changed_files(self, commit: str) -> list[ChangedFile]:
        """Parse the commit's diff.

        Raises:
            CommitNotFoundError: If the commit cannot be resolved.
        """
        # diff_text resolves the commit and raises CommitNotFoundError itself
        return parse_diff(self.git.diff_text(commit))

    def analyze(self, commit: str) -> list[ImpactResult]:
        """Return every impacted test for a commit.

        Direct impacts (changed test files) come first, then indirect
        impacts (changed helpers). A test reached both ways is reported
        both ways.

        Raises:
            CommitNotFoundError: If the commit cannot be resolved.
        """
        changed = self.changed_files(commit)
        test_files = [f for f in changed if self.config.is_test_file(f.path)]
        helper_files = [f for f in changed if self.config.is_helper_file(f.path)]
        logger.info(
            "Commit %s: %d changed files, %d test files, %d helper files",
            commit,
            len(changed),
            len(test_files),
            len(helper_files),
        )

        impacts: list[ImpactResult] = []
        for changed_file in test_files:
            impacts.extend(self.analyze_test_file(changed_file, commit))
        for changed_file in helper_files:
            impacts.extend(self.analyze_helper_file(changed_file))
        return impacts

    def analyze_test_file(self, changed_file: ChangedFile, commit: str) -> list[ImpactResult]:
        """Direct impacts of a changed test file."""
        path = changed_file.path

        if changed_file.change_type == "added":
            after = self._blocks(path, self.git.content_at(commit, path))
            return [self._result(block, path, "added") for block in after]

        if changed_file.change_type == "deleted":
            before = self._blocks(path, self.git.content_before_commit(commit, path))
            return [self._result(block, path, "removed") for block in before]

        before_content = self.git.content_before_commit(commit, changed_file.before_path)
        after_content = self.git.content_at(commit, path)
        if before_content is None or after_content is None:
            logger.debug("Skipping %s: content unavailable on one side of %s", path, commit)
            return []

        return classify_versions(
            self._blocks(changed_file.before_path, before_content),
            self._blocks(path, after_content),
            changed_file.added_lines,
            path,
        )

    def analyze_helper_file(self, changed_file: ChangedFile) -> list[ImpactResult]:
        """Indirect impacts of a changed helper: every test of every importer."""
        importers = self.resolver.test_files_importing(
            self.repo_path / changed_file.path, depth=self.depth
        )
        if importers:
            logger.debug("%s is imported by %d test files", changed_file.path, len(importers))

        impacts = []
        for test_file in sorted(importers):
            try:
                content = test_file.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                logger.warning("Cannot read %s: %s", test_file, e)
                continue
            relative = self._relative(test_file)
            for block in self._blocks(relative, content):
                impacts.append(self._result(block, relative, "modified", is_indirect=True))
        return impacts

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.repo_path).as_posix()
        except ValueError:
            return path.as_posix()

    @staticmethod
    def _result(
        block: TestBlock,
        path: str,
        impact_type: str,
        is_indirect: bool = False,
    ) -> ImpactResult:
        return ImpactResult(
            test_name=block.name,
            file_path=path,
            impact_type=impact_type,
            is_indirect=is_indirect,
        )


def classify_versions(
    before: list[TestBlock],
    after: list[TestBlock],
    added_lines: frozenset[int] | set[int],
    file_path: str,
) -> list[ImpactResult]:
    """Compare the test blocks of two versions of one file.

    Tests are matched by exact name, so a renamed test is one removal plus
    one addition.

    Args:
        before: Blocks of the old version.
        after: Blocks of the new version.
        added_lines: New-version line numbers touched by the diff.
        file_path: Path reported in the results.

    Returns:
        Added, then removed, then modified results.
    """
    before_names = {block.name for block in before}
    after_names = {block.name for block in after}

    added = [block for block in after if block.name not in before_names]
    removed = [block for block in before if block.name not in after_names]

    added_names = {block.name for block in added}
    modified = [
        block
        for block in after
        if block.name in before_names
        and block.name not in added_names
        and block.overlaps(added_lines)
    ]

    return (
        [ImpactAnalyzer._result(block, file_path, "added") for block in added]
        + [ImpactAnalyzer._result(block, file_path, "removed") for block in removed]
        + [ImpactAnalyzer._result(block, file_path, "modified") for block in modified]
    )


def analyze_commit(
    repo_path: str | Path,
    commit: str,
    config: AnalyzerConfig | None = None,
    depth: int = 1,
) -> ImpactReport:
    """Analyze one commit of a git repository.

    Args:
        repo_path: Path to the repository root.
        commit: Commit reference (SHA, branch, tag, HEAD~1, ...).
        config: Recognized file kinds (default: from environment).
        depth: Import hops followed for helper changes.

    Returns:
        ImpactReport; an empty impact list means nothing is affected.

    Raises:
        ValueError: If repo_path is not a directory.
        AnalysisError: If the commit cannot be resolved or git fails.
    """
    repo_path = Path(repo_path).resolve()

    if not repo_path.is_dir():
        raise ValueError(f"Not a directory: {repo_path}")

    with log_operation("analyze_commit", {"commit": commit, "repo": repo_path}):
        analyzer = ImpactAnalyzer(repo_path, config=config, depth=depth)
        try:
            impacts = analyzer.analyze(commit)
        except GitError as e:
            raise AnalysisError(f"Failed to analyze commit {commit}: {e}", commit) from e

    return ImpactReport(commit=commit, repository=str(repo_path), impacts=impacts)
