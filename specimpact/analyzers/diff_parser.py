"""Unified diff parser.

Turns the zero-context, unprefixed diff of one commit into ChangedFile
records: the change type of each file plus the absolute line numbers its
hunks cover in the old and new versions.
"""

import re
from dataclasses import dataclass, field

from specimpact.logging import logger
from specimpact.models.impact import ChangedFile, ChangeType

DEV_NULL = "/dev/null"

HUNK_HEADER_PATTERN = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
OLD_FILE_PATTERN = re.compile(r"^---\s+(.+)$")
NEW_FILE_PATTERN = re.compile(r"^\+\+\+\s+(.+)$")


@dataclass
class _FileSection:
    """Accumulator for the file currently being read."""

    path: str | None = None
    old_path: str | None = None
    change_type: ChangeType = "modified"
    added_lines: set[int] = field(default_factory=set)
    deleted_lines: set[int] = field(default_factory=set)
    # False once the first hunk header has been seen
    in_header: bool = True
    # Set for sections opened by a "diff --git" line
    git_header: bool = False
    # Lines of the current hunk not yet read, old and new side
    old_remaining: int = 0
    new_remaining: int = 0

    def in_hunk(self) -> bool:
        return self.old_remaining > 0 or self.new_remaining > 0

    def consume(self, line: str) -> None:
        """Count one hunk body line against the current hunk."""
        if line.startswith("-"):
            self.old_remaining -= 1
        elif line.startswith("+"):
            self.new_remaining -= 1
        elif line == "" or line.startswith(" "):
            self.old_remaining -= 1
            self.new_remaining -= 1

    def to_changed_file(self) -> ChangedFile | None:
        if not self.path:
            return None
        added = frozenset() if self.change_type == "deleted" else frozenset(self.added_lines)
        deleted = frozenset() if self.change_type == "added" else frozenset(self.deleted_lines)
        old_path = self.old_path if self.old_path and self.old_path != self.path else None
        return ChangedFile(
            path=self.path,
            change_type=self.change_type,
            added_lines=added,
            deleted_lines=deleted,
            old_path=old_path,
        )


def _unquote_path(raw: str) -> str:
    """Undo git's C-style quoting and drop a trailing tab/timestamp."""
    path = raw.split("\t", 1)[0].rstrip()
    if len(path) >= 2 and path.startswith('"') and path.endswith('"'):
        inner = path[1:-1]
        try:
            # Octal escapes encode UTF-8 bytes
            return inner.encode("latin-1").decode("unicode_escape").encode("latin-1").decode("utf-8")
        except UnicodeError:
            return inner
    return path


def _path_from_git_header(rest: str) -> str | None:
    """Best-effort path from the text after 'diff --git '.

    Unprefixed headers repeat the path ("src/a.ts src/a.ts"), so an
    unchanged path is the first half of the line. Renamed files are
    resolved later from the 'rename to' line.
    """
    rest = rest.strip()
    half, remainder = divmod(len(rest), 2)
    if remainder == 1 and rest[half] == " " and rest[:half] == rest[half + 1 :]:
        return _unquote_path(rest[:half])
    if rest.startswith("a/") and " b/" in rest:
        old, new = rest[2:].split(" b/", 1)
        if old == new:
            return new
    return None


def parse_hunk_header(line: str) -> tuple[int, int, int, int] | None:
    """Decode '@@ -oldStart[,oldCount] +newStart[,newCount] @@'.

    Args:
        line: A line starting with '@@'.

    Returns:
        (old_start, old_count, new_start, new_count) with omitted counts
        defaulting to 1, or None if the header is malformed.
    """
    match = HUNK_HEADER_PATTERN.match(line)
    if not match:
        return None
    old_start = int(match.group(1))
    old_count = int(match.group(2)) if match.group(2) is not None else 1
    new_start = int(match.group(3))
    new_count = int(match.group(4)) if match.group(4) is not None else 1
    return old_start, old_count, new_start, new_count


def parse_diff(diff_text: str) -> list[ChangedFile]:
    """Parse a unified diff into per-file change records.

    Expects the output of a zero-context (--unified=0), unprefixed
    (--no-prefix) diff. Hunk bodies are counted against their header, so
    content lines beginning with '--' or '++' are never mistaken for
    file headers. Plain 'diff -u' output without 'diff --git' lines may
    hold several files; each '---' line after a finished hunk opens the
    next one.

    Args:
        diff_text: Diff of exactly one commit.

    Returns:
        ChangedFile records in diff order. Files without textual hunks
        (binary, pure renames, mode changes) are included with empty line
        sets.
    """
    changed_files: list[ChangedFile] = []
    section: _FileSection | None = None

    def flush() -> None:
        if section is None:
            return
        changed = section.to_changed_file()
        if changed is not None:
            changed_files.append(changed)

    for line in diff_text.splitlines():
        if line.startswith("diff --git "):
            flush()
            section = _FileSection(
                path=_path_from_git_header(line[len("diff --git "):]),
                git_header=True,
            )
            continue

        if (
            section is not None
            and section.in_hunk()
            and (line == "" or line.startswith(("-", "+", " ", "\\")))
        ):
            section.consume(line)
            continue

        header_area = section is None or section.in_header or not section.git_header

        if line.startswith("---") and header_area:
            match = OLD_FILE_PATTERN.match(line)
            if not match:
                continue
            if section is None or not section.in_header:
                # Plain 'diff -u' output: every '---' line opens a file
                flush()
                section = _FileSection()
            old = _unquote_path(match.group(1))
            if old == DEV_NULL:
                section.change_type = "added"
            else:
                section.path = old
                if section.old_path is None:
                    section.old_path = old
            continue

        if line.startswith("+++") and header_area and section is not None:
            match = NEW_FILE_PATTERN.match(line)
            if not match:
                continue
            new = _unquote_path(match.group(1))
            if new == DEV_NULL:
                section.change_type = "deleted"
            else:
                section.path = new
            continue

        if section is None:
            continue

        if section.in_header:
            if line.startswith("new file mode"):
                section.change_type = "added"
            elif line.startswith("deleted file mode"):
                section.change_type = "deleted"
            elif line.startswith("rename from "):
                section.old_path = _unquote_path(line[len("rename from "):])
            elif line.startswith("rename to "):
                section.path = _unquote_path(line[len("rename to "):])

        if line.startswith("@@"):
            section.in_header = False
            section.old_remaining = section.new_remaining = 0
            hunk = parse_hunk_header(line)
            if hunk is None:
                logger.debug("Skipping malformed hunk header in %s: %r", section.path, line)
                continue
            old_start, old_count, new_start, new_count = hunk
            section.deleted_lines.update(range(old_start, old_start + old_count))
            section.added_lines.update(range(new_start, new_start + new_count))
            section.old_remaining = old_count
            section.new_remaining = new_count

    flush()
    return changed_files
