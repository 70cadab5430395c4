"""Per-commit summarisation — prompt building and parse-or-fallback.

The model is an untrusted text generator: whatever it returns, the caller
always gets a well-formed :class:`CommitSummary` back.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Sequence

from commit_digest.domain.entities import (
    ChangeType,
    CommitRef,
    CommitSummary,
    FileChange,
    Risk,
)
from commit_digest.domain.ports.llm_gateway import LlmGateway
from commit_digest.services.model_options import completion_options

logger = logging.getLogger(__name__)

DEFAULT_PATCH_BUDGET = 4000
TRUNCATION_MARKER = "\n...[truncated]..."
FALLBACK_SUMMARY_TEXT = "Could not parse summary (model returned non-JSON)."

# ── Prompt template ─────────────────────────────────────────────────────────

_OUTPUT_SHAPE = """\
{
  "summary": "1-3 bullets, terse but informative. What changed and why (if inferable).",
  "change_type": "feat|fix|refactor|docs|chore|test|build|ci|perf|style|other",
  "areas": ["short tags like 'api', 'ui', 'build', 'infra', 'auth'"],
  "risk": "low|medium|high",
  "test_impact": "did tests change or are tests recommended?",
  "notable_files": ["top 3 relevant files"]
}"""


def truncate(text: str, limit: int) -> str:
    """Cut *text* to *limit* characters, appending a visible marker."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + TRUNCATION_MARKER


def build_commit_prompt(
    repo: str,
    commit: CommitRef,
    files: Sequence[FileChange],
    patch_budget: int = DEFAULT_PATCH_BUDGET,
) -> str:
    """Render the JSON-only summarisation prompt for one commit."""
    file_list = "\n".join(
        f"- {f.filename} (+{f.additions}/-{f.deletions})" for f in files
    )
    patches = "\n\n".join(
        f"FILE: {f.filename} ({f.status}, +{f.additions}/-{f.deletions})\n"
        f"{truncate(f.patch, patch_budget)}"
        for f in files
    )
    return "\n".join(
        [
            "You are a senior engineer writing concise, actionable commit summaries.",
            f"Repository: {repo}",
            f"Commit: {commit.short_sha} | Author: {commit.author or 'unknown'} "
            f"| Date: {commit.date or 'unknown'}",
            f"Title: {commit.title}",
            f"Files changed:\n{file_list or '(none)'}\n",
            f"Diff hunks (truncated as needed):\n{patches or '(no patch available)'}\n\n",
            "OUTPUT STRICT JSON with this shape (and nothing else):",
            _OUTPUT_SHAPE,
        ]
    )


# ── Parsing ─────────────────────────────────────────────────────────────────


def fallback_summary(files: Sequence[FileChange]) -> CommitSummary:
    """The fixed summary used whenever the model output cannot be used."""
    return CommitSummary(
        summary=FALLBACK_SUMMARY_TEXT,
        change_type=ChangeType.OTHER,
        areas=(),
        risk=Risk.LOW,
        test_impact="N/A",
        notable_files=tuple(f.filename for f in files[:3]),
    )


class _WrongShape(ValueError):
    pass


def _strip_fences(text: str) -> str:
    if text.startswith("```"):
        first_nl = text.index("\n") if "\n" in text else 3
        text = text[first_nl + 1 :]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


def _string_list(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise _WrongShape(f"expected a list, got {type(value).__name__}")
    return tuple(str(v) for v in value if v)


def _to_summary(data: Any) -> CommitSummary:
    if not isinstance(data, dict):
        raise _WrongShape("top-level value is not an object")

    summary = data.get("summary")
    if isinstance(summary, list):
        summary = "\n".join(str(s) for s in summary)
    if not isinstance(summary, str) or not summary.strip():
        raise _WrongShape("missing 'summary'")

    try:
        change_type = ChangeType(str(data.get("change_type", "other")).strip().lower())
        risk = Risk(str(data.get("risk", "low")).strip().lower())
    except ValueError as exc:
        raise _WrongShape(str(exc)) from exc

    test_impact = data.get("test_impact") or ""
    return CommitSummary(
        summary=summary.strip(),
        change_type=change_type,
        areas=_string_list(data.get("areas")),
        risk=risk,
        test_impact=str(test_impact),
        notable_files=_string_list(data.get("notable_files"))[:3],
    )


def parse_commit_summary(raw: str | None, files: Sequence[FileChange]) -> CommitSummary:
    """Parse model output into a CommitSummary; never raises."""
    text = _strip_fences((raw or "").strip())
    try:
        return _to_summary(json.loads(text))
    except (json.JSONDecodeError, _WrongShape) as exc:
        logger.warning("Unusable commit summary from model (%s); using fallback", exc)
        return fallback_summary(files)


# ── Service ─────────────────────────────────────────────────────────────────


class CommitSummarizer:
    """Turns one commit and its diffs into a :class:`CommitSummary`."""

    def __init__(self, llm_gateway: LlmGateway, patch_budget: int = DEFAULT_PATCH_BUDGET) -> None:
        self._llm = llm_gateway
        self._patch_budget = patch_budget

    async def summarize(
        self, repo: str, commit: CommitRef, files: Sequence[FileChange]
    ) -> CommitSummary:
        prompt = build_commit_prompt(repo, commit, files, self._patch_budget)
        raw = await self._llm.complete(prompt, **completion_options(self._llm.model))
        return parse_commit_summary(raw, files)
