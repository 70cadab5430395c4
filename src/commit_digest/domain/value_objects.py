"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from commit_digest.domain.exceptions import InvalidRepoFormatError

_GITHUB_URL_RE = re.compile(
    r"github\.com/(?P<owner>[^/\s]+)/(?P<name>[^/.\s]+)(?:\.git)?",
    re.IGNORECASE,
)
_OWNER_NAME_RE = re.compile(r"^(?P<owner>[^/\s]+)/(?P<name>[^/\s]+)$")


@dataclass(frozen=True, slots=True)
class RepoRef:
    """Normalised ``owner/name`` pair for a GitHub repository.

    Accepts either the short form (``psf/requests``) or a repository URL
    such as ``https://github.com/psf/requests.git``.
    """

    owner: str
    name: str

    @classmethod
    def from_string(cls, text: str) -> RepoRef:
        """Parse a user-supplied repository reference."""
        text = (text or "").strip()
        match = _GITHUB_URL_RE.search(text) or _OWNER_NAME_RE.match(text)
        if not match:
            raise InvalidRepoFormatError(
                'Invalid repo format. Use "owner/repo" or a GitHub URL.'
            )
        return cls(owner=match["owner"], name=match["name"])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name
