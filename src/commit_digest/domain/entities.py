"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ChangeType(str, Enum):
    """Conventional-commit style classification of a single commit."""

    FEAT = "feat"
    FIX = "fix"
    REFACTOR = "refactor"
    DOCS = "docs"
    CHORE = "chore"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    PERF = "perf"
    STYLE = "style"
    OTHER = "other"


class Risk(str, Enum):
    """Estimated risk of shipping a commit."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True, slots=True)
class RepoMetadata:
    """High-level metadata about a GitHub repository."""

    owner: str
    name: str
    default_branch: str
    private: bool = False


@dataclass(frozen=True, slots=True)
class BranchListing:
    """Repository validity check plus its branch names."""

    repo: str
    default_branch: str
    private: bool
    branches: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CommitRef:
    """One commit as returned by the commit-listing API."""

    sha: str
    author: str
    message: str
    authored_at: str | None = None
    committed_at: str | None = None
    parents: tuple[str, ...] = ()

    @property
    def date(self) -> str | None:
        """Author timestamp, falling back to the committer timestamp."""
        return self.authored_at or self.committed_at

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def title(self) -> str:
        return self.message.split("\n", 1)[0]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1


@dataclass(frozen=True, slots=True)
class FileChange:
    """A single file touched by a commit."""

    filename: str
    status: str
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: str = ""  # empty for binary files or oversized diffs


@dataclass(frozen=True, slots=True)
class CommitDetail:
    """Full commit detail: per-file changes plus commit-level stats."""

    sha: str
    files: tuple[FileChange, ...] = ()
    additions: int = 0
    deletions: int = 0


@dataclass(frozen=True, slots=True)
class CommitSummary:
    """Structured, model-generated classification of one commit."""

    summary: str
    change_type: ChangeType = ChangeType.OTHER
    areas: tuple[str, ...] = ()
    risk: Risk = Risk.LOW
    test_impact: str = ""
    notable_files: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class EnrichedCommit:
    """A collected commit with its diff data and AI summary attached."""

    ref: CommitRef
    files: tuple[FileChange, ...]
    additions: int
    deletions: int
    ai: CommitSummary


@dataclass(frozen=True, slots=True)
class Aggregate:
    """Period-level fold over all enriched commits."""

    count: int = 0
    files: int = 0
    additions: int = 0
    deletions: int = 0
    type_counts: dict[str, int] = field(default_factory=dict)
    risk_counts: dict[str, int] = field(default_factory=dict)
    top_areas: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """One narrated progress line; ``timestamp`` is epoch milliseconds."""

    timestamp: int
    message: str


@dataclass(frozen=True, slots=True)
class AnalysisReport:
    """The final artifact of one analysis run."""

    repo: str
    since: str
    until: str
    summary_markdown: str
    commits: list[EnrichedCommit]
    aggregate: Aggregate
