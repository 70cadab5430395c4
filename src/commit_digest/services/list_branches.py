"""List-branches use case — validates a repo reference and lists its branches."""

from __future__ import annotations

import logging

from commit_digest.domain.entities import BranchListing
from commit_digest.domain.ports.repo_fetcher import RepoFetcher
from commit_digest.domain.value_objects import RepoRef

logger = logging.getLogger(__name__)


class ListBranchesUseCase:
    def __init__(self, repo_fetcher: RepoFetcher) -> None:
        self._fetcher = repo_fetcher

    async def execute(self, repo_text: str) -> BranchListing:
        """Return default branch, visibility and sorted branch names."""
        repo = RepoRef.from_string(repo_text)
        metadata = await self._fetcher.fetch_metadata(repo)
        names = await self._fetcher.list_branches(repo)
        logger.info("Listed %d branches for %s", len(names), repo.full_name)
        return BranchListing(
            repo=repo.full_name,
            default_branch=metadata.default_branch,
            private=metadata.private,
            branches=sorted(names, key=lambda n: (n.casefold(), n)),
        )
