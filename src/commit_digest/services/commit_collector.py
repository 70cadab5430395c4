"""Commit collection — resolves a branch selection into an ordered commit list."""

from __future__ import annotations

import logging
from contextlib import aclosing
from datetime import datetime, timezone

from commit_digest.domain.entities import CommitRef
from commit_digest.domain.ports.repo_fetcher import RepoFetcher
from commit_digest.domain.value_objects import RepoRef
from commit_digest.services.progress import Progress, silent

logger = logging.getLogger(__name__)

ANY_BRANCH = "__ANY__"


class CommitCollector:
    """Lists commits for one branch, or for every branch with de-duplication."""

    def __init__(self, repo_fetcher: RepoFetcher) -> None:
        self._fetcher = repo_fetcher

    async def collect(
        self,
        repo: RepoRef,
        *,
        since: str,
        until: str,
        branch: str,
        include_merges: bool = False,
        max_commits: int = 60,
        progress: Progress = silent,
    ) -> list[CommitRef]:
        """Return at most *max_commits* commits for the selection."""
        if branch == ANY_BRANCH:
            return await self._collect_any_branch(
                repo, since, until, include_merges, max_commits, progress
            )
        return await self._collect_branch(
            repo, since, until, branch, include_merges, max_commits, progress
        )

    async def _collect_branch(
        self,
        repo: RepoRef,
        since: str,
        until: str,
        branch: str,
        include_merges: bool,
        max_commits: int,
        progress: Progress,
    ) -> list[CommitRef]:
        commits: list[CommitRef] = []
        progress(f'Listing commits for branch "{branch}"…')
        if max_commits > 0:
            pages = self._fetcher.iter_commits(repo, branch=branch, since=since, until=until)
            async with aclosing(pages):
                async for commit in pages:
                    if commit.is_merge and not include_merges:
                        continue
                    commits.append(commit)
                    if len(commits) >= max_commits:
                        break
        progress(f"Found {len(commits)} commits to analyze.")
        return commits

    async def _collect_any_branch(
        self,
        repo: RepoRef,
        since: str,
        until: str,
        include_merges: bool,
        max_commits: int,
        progress: Progress,
    ) -> list[CommitRef]:
        progress("Loading branches for ANY selection…")
        names = await self._fetcher.list_branches(repo)
        progress(f"Found {len(names)} branches. Aggregating commits across all…")

        # sha -> commit; the first branch to reach a commit keeps it
        seen: dict[str, CommitRef] = {}
        for name in names:
            if len(seen) >= max_commits:
                break
            progress(f'Listing commits for branch "{name}"…')
            pages = self._fetcher.iter_commits(repo, branch=name, since=since, until=until)
            async with aclosing(pages):
                async for commit in pages:
                    if commit.is_merge and not include_merges:
                        continue
                    if commit.sha in seen:
                        continue
                    seen[commit.sha] = commit
                    if len(seen) >= max_commits:
                        break

        commits = sorted(seen.values(), key=_recency_key, reverse=True)
        logger.debug("Collected %d unique commits from %d branches", len(commits), len(names))
        progress(
            f"Aggregated {len(commits)} unique commits across branches (cap {max_commits})."
        )
        return commits


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _recency_key(commit: CommitRef) -> datetime:
    """Sort key: author date, else committer date; undated commits sort last."""
    raw = commit.date
    if not raw:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
