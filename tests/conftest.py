"""Pytest configuration and shared fixtures."""

import shutil
import subprocess
import tempfile
from pathlib import Path

import pytest

from specimpact.analyzers.git_history import CommitNotFoundError

SAMPLE_SPEC = """import { test, expect } from '@playwright/test';
import { login } from './helpers/login';

test('user can log in', async ({ page }) => {
    await login(page);
    await expect(page).toHaveURL('/home');
});

test.skip('skipped flow', async ({ page }) => {
    await page.goto('/skip');
});

test.describe('settings', () => {
    test('opens settings', async ({ page }) => {
        await page.goto('/settings');
    });
});
"""


class FakeGit:
    """In-memory VersionControl backend.

    Args:
        diff: Diff text returned for every known commit.
        before: path -> content at the parent commit.
        after: path -> content at the commit.
        commits: Commit references that resolve.
    """

    def __init__(
        self,
        diff: str,
        before: dict[str, str] | None = None,
        after: dict[str, str] | None = None,
        commits: tuple[str, ...] = ("abc123",),
    ):
        self.diff = diff
        self.before = before or {}
        self.after = after or {}
        self.commits = commits
        self.calls: list[tuple[str, ...]] = []

    def verify_commit(self, commit: str) -> str:
        if commit not in self.commits:
            raise CommitNotFoundError(commit)
        return commit

    def diff_text(self, commit: str) -> str:
        self.verify_commit(commit)
        self.calls.append(("diff", commit))
        return self.diff

    def content_at(self, commit: str, path: str) -> str | None:
        self.calls.append(("at", commit, path))
        return self.after.get(path)

    def content_before_commit(self, commit: str, path: str) -> str | None:
        self.calls.append(("before", commit, path))
        return self.before.get(path)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def fake_git() -> type[FakeGit]:
    """Factory for in-memory version-control backends."""
    return FakeGit


@pytest.fixture
def sample_spec_source() -> str:
    """A Playwright spec with plain, skipped and nested tests."""
    return SAMPLE_SPEC


@pytest.fixture
def helper_repo(temp_dir: Path) -> Path:
    """Repository tree where two specs import helpers/login.ts and one does not.

    Layout:
        helpers/login.ts         imported by auth.spec.ts and profile.spec.ts
        helpers/other.ts         imported by cart.test.ts
        helpers/session.ts       imports ./login
        helpers/nav/index.ts     imported as '../helpers/nav'
        tests/session.spec.ts    imports ../helpers/session
        node_modules/, .cache/   contain specs that must never be scanned
    """
    files = {
        "helpers/login.ts": "export async function login(page) {\n    await page.goto('/login');\n}\n",
        "helpers/other.ts": "export const other = 1;\n",
        "helpers/session.ts": "import { login } from './login';\nexport const session = login;\n",
        "helpers/nav/index.ts": "export const nav = () => {};\n",
        "tests/auth.spec.ts": (
            "import { test } from '@playwright/test';\n"
            "import { login } from '../helpers/login';\n"
            "\n"
            "test('logs in', async ({ page }) => {\n"
            "    await login(page);\n"
            "});\n"
            "\n"
            "test('logs out', async ({ page }) => {\n"
            "    await login(page);\n"
            "    await page.click('#logout');\n"
            "});\n"
        ),
        "tests/account/profile.spec.ts": (
            "import { test } from '@playwright/test';\n"
            "const { login } = require('../../helpers/login.ts');\n"
            "\n"
            "test('edits profile', async ({ page }) => {\n"
            "    await login(page);\n"
            "});\n"
        ),
        "tests/cart.test.ts": (
            "import { test } from '@playwright/test';\n"
            "import { other } from '../helpers/other';\n"
            "\n"
            "test('adds to cart', async () => {\n"
            "    other;\n"
            "});\n"
        ),
        "tests/nav.spec.ts": (
            "import { test } from '@playwright/test';\n"
            "import { nav } from '../helpers/nav';\n"
            "\n"
            "test('navigates', async () => {\n"
            "    nav();\n"
            "});\n"
        ),
        "tests/session.spec.ts": (
            "import { test } from '@playwright/test';\n"
            "import { session } from '../helpers/session';\n"
            "\n"
            "test('keeps session', async () => {\n"
            "    session;\n"
            "});\n"
        ),
        "node_modules/pkg/vendored.spec.ts": "import '../../helpers/login';\ntest('vendored', () => {});\n",
        ".cache/stale.spec.ts": "import '../helpers/login';\ntest('stale', () => {});\n",
    }
    for relative, content in files.items():
        path = temp_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return temp_dir


LOGIN_HELPER = "export async function login(page) {\n    await page.goto('/login');\n}\n"

AUTH_SPEC_V1 = """import { test } from '@playwright/test';
import { login } from '../helpers/login';

test('logs in', async ({ page }) => {
    await login(page);
});

test('logs out', async ({ page }) => {
    await page.click('#logout');
});
"""

AUTH_SPEC_V2 = """import { test } from '@playwright/test';
import { login } from '../helpers/login';

test('logs in', async ({ page }) => {
    await login(page);
    await page.waitForURL('/home');
});

test('resets password', async ({ page }) => {
    await page.click('#reset');
});
"""


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        [
            "git",
            "-c", "user.name=Test",
            "-c", "user.email=test@example.com",
            "-c", "commit.gpgsign=false",
            *args,
        ],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def _write(repo: Path, relative: str, content: str) -> None:
    path = repo / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture
def auth_spec_versions() -> tuple[str, str]:
    """tests/auth.spec.ts before and after the 'edit spec' commit."""
    return AUTH_SPEC_V1, AUTH_SPEC_V2


@pytest.fixture
def git_repo(temp_dir: Path) -> Path:
    """Repository with three commits: initial, spec edit, helper edit.

    HEAD~2  adds helpers/login.ts and tests/auth.spec.ts ('logs in', 'logs out')
    HEAD~1  edits 'logs in', removes 'logs out', adds 'resets password'
    HEAD    appends a line to helpers/login.ts
    """
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    _git(temp_dir, "init", "-q")
    _write(temp_dir, "helpers/login.ts", LOGIN_HELPER)
    _write(temp_dir, "tests/auth.spec.ts", AUTH_SPEC_V1)
    _git(temp_dir, "add", "-A")
    _git(temp_dir, "commit", "-q", "-m", "initial")

    _write(temp_dir, "tests/auth.spec.ts", AUTH_SPEC_V2)
    _git(temp_dir, "add", "-A")
    _git(temp_dir, "commit", "-q", "-m", "edit spec")

    _write(temp_dir, "helpers/login.ts", LOGIN_HELPER + "export const TIMEOUT = 5000;\n")
    _git(temp_dir, "add", "-A")
    _git(temp_dir, "commit", "-q", "-m", "edit helper")
    return temp_dir


@pytest.fixture
def empty_commit_repo(git_repo: Path) -> Path:
    """git_repo plus a commit touching only README.md."""
    _write(git_repo, "README.md", "# demo\n")
    _git(git_repo, "add", "-A")
    _git(git_repo, "commit", "-q", "-m", "docs")
    return git_repo
