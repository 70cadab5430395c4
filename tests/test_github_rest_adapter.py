"""Tests for the GitHub REST adapter against a mocked transport."""

import httpx
import pytest

from commit_digest.domain.exceptions import (
    GitHubApiError,
    GitHubRateLimitError,
    RepoNotAccessibleError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
)
from commit_digest.infrastructure.github_rest_adapter import GitHubRestAdapter


def _commit_item(sha, parents=1, author_date="2025-01-10T00:00:00Z"):
    return {
        "sha": sha,
        "commit": {
            "author": {"name": "Ada", "date": author_date},
            "committer": {"name": "GitHub", "date": "2025-01-11T00:00:00Z"},
            "message": f"Commit {sha}\n\nbody",
        },
        "parents": [{"sha": f"p{i}"} for i in range(parents)],
    }


def _adapter(handler, token=None):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GitHubRestAdapter(client=client, token=token)


class TestRequests:
    async def test_sends_headers_and_token(self, repo):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, json={"default_branch": "trunk", "private": True})

        meta = await _adapter(handler, token="s3cret").fetch_metadata(repo)
        assert meta.default_branch == "trunk"
        assert meta.private is True
        assert seen["authorization"] == "Bearer s3cret"
        assert seen["accept"] == "application/vnd.github.v3+json"

    async def test_no_token_no_authorization_header(self, repo):
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, json={"default_branch": "main"})

        await _adapter(handler).fetch_metadata(repo)
        assert "authorization" not in seen


class TestPagination:
    async def test_list_branches_follows_link_header(self, repo):
        def handler(request):
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json=[{"name": "dev"}])
            next_url = str(request.url.copy_merge_params({"page": "2"}))
            return httpx.Response(
                200,
                json=[{"name": "main"}, {"name": "feature/x"}],
                headers={"Link": f'<{next_url}>; rel="next"'},
            )

        names = await _adapter(handler).list_branches(repo)
        assert names == ["main", "feature/x", "dev"]

    async def test_iter_commits_passes_window_and_maps_fields(self, repo):
        captured = []

        def handler(request):
            captured.append(dict(request.url.params))
            return httpx.Response(200, json=[_commit_item("abc"), _commit_item("mmm", parents=2)])

        adapter = _adapter(handler)
        commits = [
            c
            async for c in adapter.iter_commits(
                repo, branch="main", since="2025-01-01T00:00:00Z", until="2025-01-31T00:00:00Z"
            )
        ]
        assert captured[0] == {
            "sha": "main",
            "since": "2025-01-01T00:00:00Z",
            "until": "2025-01-31T00:00:00Z",
            "per_page": "100",
        }
        assert [c.sha for c in commits] == ["abc", "mmm"]
        assert commits[0].author == "Ada"
        assert commits[0].date == "2025-01-10T00:00:00Z"
        assert commits[0].title == "Commit abc"
        assert not commits[0].is_merge
        assert commits[1].is_merge

    async def test_iter_commits_is_lazy(self, repo):
        pages = []

        def handler(request):
            page = request.url.params.get("page", "1")
            pages.append(page)
            next_url = str(request.url.copy_merge_params({"page": str(int(page) + 1)}))
            return httpx.Response(
                200,
                json=[_commit_item(f"sha{page}")],
                headers={"Link": f'<{next_url}>; rel="next"'},
            )

        adapter = _adapter(handler)
        async for _ in adapter.iter_commits(repo, branch="main", since="s", until="u"):
            break
        assert pages == ["1"]


class TestFetchCommit:
    async def test_shapes_file_changes(self, repo):
        def handler(request):
            assert request.url.path == "/repos/octo/demo/commits/abc"
            return httpx.Response(
                200,
                json={
                    "sha": "abc",
                    "stats": {"additions": 12, "deletions": 4},
                    "files": [
                        {
                            "filename": "a.py",
                            "status": "modified",
                            "additions": 12,
                            "deletions": 4,
                            "changes": 16,
                            "patch": "@@ -1 +1 @@",
                        },
                        {"filename": "logo.png", "status": "added"},
                    ],
                },
            )

        detail = await _adapter(handler).fetch_commit(repo, "abc")
        assert (detail.additions, detail.deletions) == (12, 4)
        assert detail.files[0].patch == "@@ -1 +1 @@"
        assert detail.files[1].patch == ""
        assert detail.files[1].additions == 0


class TestErrorTranslation:
    @pytest.mark.parametrize(
        ("status", "headers", "exc_type"),
        [
            (404, {}, RepositoryNotFoundError),
            (401, {}, RepositoryAccessDeniedError),
            (403, {}, RepositoryAccessDeniedError),
            (403, {"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1735689600"}, GitHubRateLimitError),
            (429, {}, GitHubRateLimitError),
        ],
    )
    async def test_access_errors(self, repo, status, headers, exc_type):
        def handler(request):
            return httpx.Response(status, json={"message": "nope"}, headers=headers)

        with pytest.raises(exc_type) as exc_info:
            await _adapter(handler).fetch_metadata(repo)
        assert isinstance(exc_info.value, RepoNotAccessibleError)
        assert exc_info.value.status_code == status

    async def test_rate_limit_message_mentions_reset(self, repo):
        def handler(request):
            return httpx.Response(
                403,
                json={"message": "API rate limit exceeded"},
                headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1735689600"},
            )

        with pytest.raises(GitHubRateLimitError, match="2025-01-01 00:00:00 UTC"):
            await _adapter(handler).list_branches(repo)

    async def test_server_error(self, repo):
        def handler(request):
            return httpx.Response(500, text="boom")

        with pytest.raises(GitHubApiError, match="HTTP 500"):
            await _adapter(handler).fetch_commit(repo, "abc")

    async def test_network_error(self, repo):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(GitHubApiError, match="Network error"):
            await _adapter(handler).fetch_metadata(repo)
