"""Version-control access for commit analysis.

GitRepository runs the git executable to fetch a commit's diff and the
content of files at the commit and at its first parent. The impact
analyzer only relies on the VersionControl protocol, so tests can swap in
an in-memory implementation.
"""

import subprocess
from pathlib import Path
from typing import Protocol

from specimpact.logging import logger


class GitError(Exception):
    """Error running git commands."""

    pass


class CommitNotFoundError(GitError):
    """The commit reference cannot be resolved in the repository."""

    def __init__(self, commit: str, detail: str = ""):
        message = f"Cannot resolve commit {commit!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.commit = commit


class VersionControl(Protocol):
    """What the impact analyzer needs from a version-control backend."""

    def verify_commit(self, commit: str) -> str: ...

    def diff_text(self, commit: str) -> str:
        """Diff of a commit; raises CommitNotFoundError for unknown commits."""
        ...

    def content_at(self, commit: str, path: str) -> str | None: ...

    def content_before_commit(self, commit: str, path: str) -> str | None: ...


class GitRepository:
    """VersionControl implementation backed by the git CLI."""

    def __init__(self, repo_path: str | Path):
        self.repo_path = Path(repo_path).resolve()

    def _run(self, args: list[str], input_text: str | None = None) -> subprocess.CompletedProcess:
        """Run a git command in the repository.

        Raises:
            GitError: If the git executable cannot be started.
        """
        try:
            return subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                input=input_text,
                cwd=self.repo_path,
            )
        except OSError as e:
            raise GitError(f"Could not run git: {e}") from e

    def verify_commit(self, commit: str) -> str:
        """Resolve a commit reference to its full object name.

        Raises:
            CommitNotFoundError: If the reference does not name a commit.
        """
        result = self._run(["rev-parse", "--verify", "--quiet", f"{commit}^{{commit}}"])
        if result.returncode != 0 or not result.stdout.strip():
            raise CommitNotFoundError(commit, result.stderr.strip())
        return result.stdout.strip()

    def parent_of(self, commit: str) -> str | None:
        """First parent of a commit, None for a root commit."""
        result = self._run(["rev-parse", "--verify", "--quiet", f"{commit}^1"])
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def _empty_tree(self) -> str:
        result = self._run(["hash-object", "-t", "tree", "--stdin"], input_text="")
        if result.returncode != 0:
            raise GitError(f"git hash-object failed: {result.stderr}")
        return result.stdout.strip()

    def diff_text(self, commit: str) -> str:
        """Zero-context, unprefixed diff of a commit against its first parent.

        Root commits are diffed against the empty tree.

        Raises:
            CommitNotFoundError: If the commit cannot be resolved.
            GitError: If git diff fails.
        """
        sha = self.verify_commit(commit)
        base = self.parent_of(sha) or self._empty_tree()
        result = self._run([
            "diff",
            "--unified=0",
            "--no-prefix",
            "--no-color",
            "--no-ext-diff",
            base,
            sha,
        ])
        if result.returncode != 0:
            raise GitError(f"git diff failed for {commit}: {result.stderr}")
        return result.stdout

    def _show(self, revision: str, path: str) -> str | None:
        result = self._run(["show", f"{revision}:{path}"])
        if result.returncode != 0:
            logger.debug("No content for %s at %s", path, revision)
            return None
        return result.stdout

    def content_at(self, commit: str, path: str) -> str | None:
        """File content at a commit, None if the file does not exist there."""
        return self._show(commit, path)

    def content_before_commit(self, commit: str, path: str) -> str | None:
        """File content at the commit's first parent, None if absent."""
        return self._show(f"{commit}^", path)
