"""Data models for commit impact analysis.

Pydantic models shared by the diff parser, the test block extractor and the
impact classifier, plus the report wrapper used for serialization.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

ChangeType = Literal["added", "modified", "deleted"]
ImpactType = Literal["added", "removed", "modified"]

# Display order for grouped output
IMPACT_TYPES: tuple[ImpactType, ...] = ("added", "removed", "modified")


class ChangedFile(BaseModel):
    """A file touched by a commit, with the line numbers its hunks cover."""

    path: str = Field(description="Repository-relative path in the new version")
    change_type: ChangeType = Field(default="modified", alias="changeType")
    added_lines: frozenset[int] = Field(
        default_factory=frozenset,
        alias="addedLines",
        description="Line numbers (1-based) present in the new version",
    )
    deleted_lines: frozenset[int] = Field(
        default_factory=frozenset,
        alias="deletedLines",
        description="Line numbers (1-based) present in the old version",
    )
    old_path: str | None = Field(
        default=None,
        alias="oldPath",
        description="Pre-rename path, set only for renamed files",
    )

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def _check_sides(self) -> "ChangedFile":
        if self.change_type == "deleted" and self.added_lines:
            raise ValueError(f"deleted file {self.path} cannot have added lines")
        if self.change_type == "added" and self.deleted_lines:
            raise ValueError(f"added file {self.path} cannot have deleted lines")
        return self

    @property
    def before_path(self) -> str:
        """Path of this file at the commit's parent."""
        return self.old_path or self.path


class TestBlock(BaseModel):
    """A test-defining call and the source lines it spans."""

    # Keep pytest from collecting this class
    __test__ = False

    name: str = Field(description="Display name from the call's first argument")
    start_line: int = Field(ge=1, alias="startLine")
    end_line: int = Field(ge=1, alias="endLine")

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="after")
    def _check_span(self) -> "TestBlock":
        if self.start_line > self.end_line:
            raise ValueError(
                f"test block {self.name!r} ends ({self.end_line}) before it starts ({self.start_line})"
            )
        return self

    def overlaps(self, lines: Iterable[int]) -> bool:
        """Return True if any of the line numbers falls inside this block."""
        return any(self.start_line <= line <= self.end_line for line in lines)


class ImpactResult(BaseModel):
    """One impacted test."""

    test_name: str = Field(alias="testName")
    file_path: str = Field(alias="filePath", description="Repository-relative test file path")
    impact_type: ImpactType = Field(alias="impactType")
    is_indirect: bool = Field(
        default=False,
        alias="isIndirect",
        description="True when the impact comes from a changed helper file",
    )

    model_config = {"populate_by_name": True, "frozen": True}


class ImpactReport(BaseModel):
    """All impacts found for one commit."""

    commit: str = Field(description="Commit reference that was analyzed")
    repository: str = Field(description="Absolute repository path")
    impacts: list[ImpactResult] = Field(default_factory=list)
    generated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), alias="generatedAt"
    )

    model_config = {"populate_by_name": True}

    def by_type(self, impact_type: ImpactType) -> list[ImpactResult]:
        """Return the impacts of one type, in analysis order."""
        return [i for i in self.impacts if i.impact_type == impact_type]

    @property
    def indirect_count(self) -> int:
        return sum(1 for i in self.impacts if i.is_indirect)
