"""Port: repository fetcher — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import AsyncGenerator, Protocol

from commit_digest.domain.entities import CommitDetail, CommitRef, RepoMetadata
from commit_digest.domain.value_objects import RepoRef


class RepoFetcher(Protocol):
    """Abstract contract for reading commit history from a hosting API."""

    async def fetch_metadata(self, repo: RepoRef) -> RepoMetadata:
        """Return default branch and visibility of the repository."""
        ...

    async def list_branches(self, repo: RepoRef) -> list[str]:
        """Return every branch name, in API enumeration order."""
        ...

    def iter_commits(
        self,
        repo: RepoRef,
        *,
        branch: str,
        since: str,
        until: str,
    ) -> AsyncGenerator[CommitRef, None]:
        """Yield commits on *branch* inside the window, newest first."""
        ...

    async def fetch_commit(self, repo: RepoRef, sha: str) -> CommitDetail:
        """Return per-file patch and stat data for one commit."""
        ...
