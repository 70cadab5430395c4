"""Pydantic request / response DTOs for the API boundary.

Wire names are camelCase; Python attributes stay snake_case.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from commit_digest.domain.entities import (
    Aggregate,
    AnalysisReport,
    BranchListing,
    EnrichedCommit,
)
from commit_digest.services.analyze_commits import DEFAULT_MAX_COMMITS, AnalysisRequest


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AnalyzeRequest(_WireModel):
    """Request body for ``POST /api/analyze``.

    ``repo``, ``since`` and ``until`` are checked by the pipeline itself so
    a missing field is narrated on the progress channel like any failure.
    """

    repo: str | None = None
    since: str | None = None
    until: str | None = None
    branch: str | None = None
    include_merges: bool = Field(default=False, alias="includeMerges")
    max_commits: int = Field(default=DEFAULT_MAX_COMMITS, alias="maxCommits", ge=0)
    request_id: str | None = Field(default=None, alias="requestId")

    def to_domain(self) -> AnalysisRequest:
        return AnalysisRequest(
            repo=self.repo,
            since=self.since,
            until=self.until,
            branch=self.branch,
            include_merges=self.include_merges,
            max_commits=self.max_commits,
            request_id=self.request_id,
        )


class FileChangeOut(_WireModel):
    filename: str
    status: str
    additions: int
    deletions: int
    changes: int
    patch: str


class CommitStatsOut(_WireModel):
    additions: int
    deletions: int


class CommitSummaryOut(_WireModel):
    summary: str
    change_type: str
    areas: list[str]
    risk: str
    test_impact: str
    notable_files: list[str]


class EnrichedCommitOut(_WireModel):
    sha: str
    date: str | None
    author: str
    message: str
    files: list[FileChangeOut]
    stats: CommitStatsOut
    ai: CommitSummaryOut

    @classmethod
    def from_domain(cls, commit: EnrichedCommit) -> EnrichedCommitOut:
        ai = commit.ai
        return cls(
            sha=commit.ref.sha,
            date=commit.ref.date,
            author=commit.ref.author,
            message=commit.ref.message,
            files=[
                FileChangeOut(
                    filename=f.filename,
                    status=f.status,
                    additions=f.additions,
                    deletions=f.deletions,
                    changes=f.changes,
                    patch=f.patch,
                )
                for f in commit.files
            ],
            stats=CommitStatsOut(additions=commit.additions, deletions=commit.deletions),
            ai=CommitSummaryOut(
                summary=ai.summary,
                change_type=ai.change_type.value,
                areas=list(ai.areas),
                risk=ai.risk.value,
                test_impact=ai.test_impact,
                notable_files=list(ai.notable_files),
            ),
        )


class AggregateOut(_WireModel):
    count: int
    files: int
    additions: int
    deletions: int
    type_counts: dict[str, int] = Field(alias="typeCounts")
    risk_counts: dict[str, int] = Field(alias="riskCounts")
    top_areas: list[str] = Field(alias="topAreas")

    @classmethod
    def from_domain(cls, aggregate: Aggregate) -> AggregateOut:
        return cls(
            count=aggregate.count,
            files=aggregate.files,
            additions=aggregate.additions,
            deletions=aggregate.deletions,
            type_counts=dict(aggregate.type_counts),
            risk_counts=dict(aggregate.risk_counts),
            top_areas=list(aggregate.top_areas),
        )


class AnalyzeResponse(_WireModel):
    """Successful response from ``POST /api/analyze``."""

    repo: str
    since: str
    until: str
    summary_markdown: str = Field(alias="summaryMarkdown")
    commits: list[EnrichedCommitOut]
    aggregate: AggregateOut

    @classmethod
    def from_domain(cls, report: AnalysisReport) -> AnalyzeResponse:
        return cls(
            repo=report.repo,
            since=report.since,
            until=report.until,
            summary_markdown=report.summary_markdown,
            commits=[EnrichedCommitOut.from_domain(c) for c in report.commits],
            aggregate=AggregateOut.from_domain(report.aggregate),
        )


class BranchesResponse(_WireModel):
    """Successful response from ``GET /api/repo/branches``."""

    ok: bool = True
    repo: str
    default_branch: str = Field(alias="defaultBranch")
    private: bool
    branches: list[str]

    @classmethod
    def from_domain(cls, listing: BranchListing) -> BranchesResponse:
        return cls(
            repo=listing.repo,
            default_branch=listing.default_branch,
            private=listing.private,
            branches=list(listing.branches),
        )


class ConfigResponse(_WireModel):
    """Which credentials are configured, for UI indicators."""

    has_openai_key: bool = Field(alias="hasOpenAIKey")
    has_github_token: bool = Field(alias="hasGithubToken")
    openai_model: str = Field(alias="openaiModel")


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    ok: bool = False
    message: str
    error: str
