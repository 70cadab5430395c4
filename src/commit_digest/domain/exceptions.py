"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations


class CommitDigestError(Exception):
    """Base exception for the entire application."""


# ── Input validation ────────────────────────────────────────────────────────


class InvalidInputError(CommitDigestError):
    """A required request field is missing or malformed."""


class InvalidRepoFormatError(InvalidInputError):
    """The repository reference is neither ``owner/name`` nor a GitHub URL."""


# ── GitHub API errors ───────────────────────────────────────────────────────


class RepoNotAccessibleError(CommitDigestError):
    """The repository is missing, private, or the API refused the request.

    ``status_code`` carries the upstream HTTP status when one is known.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RepositoryNotFoundError(RepoNotAccessibleError):
    """The repository does not exist or is not visible (404)."""


class RepositoryAccessDeniedError(RepoNotAccessibleError):
    """Access to the repository was denied (401 / 403)."""


class GitHubRateLimitError(RepoNotAccessibleError):
    """GitHub API rate limit exceeded (429 / 403 with rate-limit header)."""


class GitHubApiError(CommitDigestError):
    """Any other failed GitHub API exchange (network error, 5xx, ...)."""


# ── LLM errors ──────────────────────────────────────────────────────────────


class LlmError(CommitDigestError):
    """Any error originating from the LLM provider."""


# ── Pipeline errors ─────────────────────────────────────────────────────────


class PipelineFailureError(CommitDigestError):
    """Unexpected failure inside an analysis run."""
