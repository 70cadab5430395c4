"""GitHub REST API adapter — implements the RepoFetcher port."""

from __future__ import annotations

import logging
from contextlib import aclosing
from datetime import datetime, timezone
from typing import Any, AsyncGenerator

import httpx

from commit_digest.domain.entities import (
    CommitDetail,
    CommitRef,
    FileChange,
    RepoMetadata,
)
from commit_digest.domain.exceptions import (
    GitHubApiError,
    GitHubRateLimitError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
)
from commit_digest.domain.value_objects import RepoRef

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"
_PER_PAGE = "100"


class GitHubRestAdapter:
    """Concrete RepoFetcher backed by the GitHub v3 REST API."""

    def __init__(self, client: httpx.AsyncClient, token: str | None = None) -> None:
        self._client = client
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "commit-digest/1.0",
        }
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"

    async def fetch_metadata(self, repo: RepoRef) -> RepoMetadata:
        """GET /repos/{owner}/{repo} → RepoMetadata."""
        resp = await self._api_get(f"{_GITHUB_API}/repos/{repo.owner}/{repo.name}")
        data = resp.json()
        return RepoMetadata(
            owner=repo.owner,
            name=repo.name,
            default_branch=data.get("default_branch") or "main",
            private=bool(data.get("private", False)),
        )

    async def list_branches(self, repo: RepoRef) -> list[str]:
        """GET /repos/{owner}/{repo}/branches (all pages) → [name]."""
        names: list[str] = []
        async for item in self._paginate(f"/repos/{repo.owner}/{repo.name}/branches"):
            names.append(item["name"])
        return names

    async def iter_commits(
        self,
        repo: RepoRef,
        *,
        branch: str,
        since: str,
        until: str,
    ) -> AsyncGenerator[CommitRef, None]:
        """GET /repos/{owner}/{repo}/commits?sha=&since=&until= (lazy pages)."""
        params = {"sha": branch, "since": since, "until": until}
        items = self._paginate(f"/repos/{repo.owner}/{repo.name}/commits", params=params)
        async with aclosing(items):
            async for item in items:
                yield _to_commit_ref(item)

    async def fetch_commit(self, repo: RepoRef, sha: str) -> CommitDetail:
        """GET /repos/{owner}/{repo}/commits/{sha} → CommitDetail."""
        resp = await self._api_get(
            f"{_GITHUB_API}/repos/{repo.owner}/{repo.name}/commits/{sha}"
        )
        data = resp.json()
        stats = data.get("stats") or {}
        files = tuple(
            FileChange(
                filename=f["filename"],
                status=f.get("status", "modified"),
                additions=f.get("additions") or 0,
                deletions=f.get("deletions") or 0,
                changes=f.get("changes") or 0,
                patch=f.get("patch") or "",
            )
            for f in data.get("files") or []
        )
        return CommitDetail(
            sha=data.get("sha", sha),
            files=files,
            additions=stats.get("additions") or 0,
            deletions=stats.get("deletions") or 0,
        )

    # ── HTTP plumbing ───────────────────────────────────────────────────

    async def _paginate(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> AsyncGenerator[dict[str, Any], None]:
        """Follow ``Link: rel="next"`` headers, yielding list items lazily."""
        url: str | None = f"{_GITHUB_API}{endpoint}"
        page_params: dict[str, str] | None = {**(params or {}), "per_page": _PER_PAGE}
        while url:
            resp = await self._api_get(url, params=page_params)
            for item in resp.json():
                yield item
            url = resp.links.get("next", {}).get("url")
            # the "next" URL already carries the query string
            page_params = None

    async def _api_get(
        self,
        url: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        try:
            resp = await self._client.get(url, headers=self._api_headers, params=params)
        except httpx.HTTPError as exc:
            raise GitHubApiError(f"Network error fetching {url}: {exc}") from exc

        if resp.status_code == 200:
            return resp

        message = _upstream_message(resp)

        if resp.status_code == 404:
            raise RepositoryNotFoundError(
                f"Repository not found: {message}", status_code=404
            )

        if resp.status_code == 403 and resp.headers.get("x-ratelimit-remaining") == "0":
            reset_raw = resp.headers.get("x-ratelimit-reset", "")
            try:
                reset_str = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
                    "%Y-%m-%d %H:%M:%S UTC"
                )
            except (ValueError, OSError):
                reset_str = reset_raw or "unknown"
            raise GitHubRateLimitError(
                f"GitHub API rate limit exceeded. Resets at {reset_str}. "
                "Set the GITHUB_TOKEN environment variable to increase the limit.",
                status_code=403,
            )

        if resp.status_code in (401, 403):
            raise RepositoryAccessDeniedError(
                f"Access denied: {message}", status_code=resp.status_code
            )

        if resp.status_code == 429:
            raise GitHubRateLimitError(
                "GitHub API rate limit exceeded (HTTP 429).", status_code=429
            )

        raise GitHubApiError(
            f"GitHub API returned HTTP {resp.status_code} for {url}: {message}"
        )


def _upstream_message(resp: httpx.Response) -> str:
    try:
        return str(resp.json().get("message") or resp.reason_phrase)
    except (ValueError, AttributeError):
        return resp.reason_phrase


def _to_commit_ref(item: dict[str, Any]) -> CommitRef:
    commit = item.get("commit") or {}
    author = commit.get("author") or {}
    committer = commit.get("committer") or {}
    return CommitRef(
        sha=item["sha"],
        author=author.get("name") or committer.get("name") or "unknown",
        message=commit.get("message") or "",
        authored_at=author.get("date"),
        committed_at=committer.get("date"),
        parents=tuple(p["sha"] for p in item.get("parents") or []),
    )
