"""Commit enrichment — fetch diffs and summarise, one commit at a time."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from commit_digest.domain.entities import CommitRef, EnrichedCommit
from commit_digest.domain.ports.repo_fetcher import RepoFetcher
from commit_digest.domain.value_objects import RepoRef
from commit_digest.services.commit_summarizer import CommitSummarizer
from commit_digest.services.progress import Progress, silent

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentResult:
    """Enriched commits plus the running totals gathered along the way."""

    commits: list[EnrichedCommit] = field(default_factory=list)
    files: int = 0
    additions: int = 0
    deletions: int = 0


class CommitEnricher:
    """Attaches file changes and an AI summary to each collected commit.

    Commits are processed strictly in order with a single outstanding model
    call, so progress lines match real completion order.
    """

    def __init__(self, repo_fetcher: RepoFetcher, summarizer: CommitSummarizer) -> None:
        self._fetcher = repo_fetcher
        self._summarizer = summarizer

    async def enrich(
        self,
        repo: RepoRef,
        commits: Sequence[CommitRef],
        progress: Progress = silent,
    ) -> EnrichmentResult:
        result = EnrichmentResult()
        total = len(commits)

        for i, commit in enumerate(commits, start=1):
            progress(f"({i}/{total}) Fetching commit {commit.short_sha} details…")
            detail = await self._fetcher.fetch_commit(repo, commit.sha)

            result.files += len(detail.files)
            result.additions += detail.additions
            result.deletions += detail.deletions

            progress(f'({i}/{total}) Summarizing {commit.short_sha} "{commit.title}"…')
            ai = await self._summarizer.summarize(repo.full_name, commit, detail.files)

            result.commits.append(
                EnrichedCommit(
                    ref=commit,
                    files=detail.files,
                    additions=detail.additions,
                    deletions=detail.deletions,
                    ai=ai,
                )
            )

        logger.debug(
            "Enriched %d commits (%d files, +%d/-%d)",
            total,
            result.files,
            result.additions,
            result.deletions,
        )
        return result
