"""Period rollup — one Markdown narrative over all commit summaries."""

from __future__ import annotations

import json
import logging
from typing import Sequence

from commit_digest.domain.entities import Aggregate, EnrichedCommit
from commit_digest.domain.ports.llm_gateway import LlmGateway
from commit_digest.services.model_options import completion_options

logger = logging.getLogger(__name__)

EMPTY_ROLLUP = "# Period Summary\n(No content)"

_SECTIONS = """\
# Period Summary
## Highlights
## Potential Risks / Breaking Changes
## Areas & Components Touched
## Suggested Next Steps (QA, docs, cleanup)
## Changelog (by commit)
"""


def build_period_prompt(
    repo: str,
    since: str,
    until: str,
    aggregate: Aggregate,
    commits: Sequence[EnrichedCommit],
) -> str:
    """Render the period-summary prompt; bullets follow collection order."""
    bullets = "\n".join(
        f"- {c.ref.short_sha}: {c.ai.summary or '(no summary)'}" for c in commits
    )
    return "\n".join(
        [
            "You are creating a crisp, executive-ready summary of code changes over a period.",
            f"Repository: {repo}",
            f"Window: {since} to {until}",
            f"Commits: {aggregate.count}, Files changed: {aggregate.files}, "
            f"LOC +{aggregate.additions}/-{aggregate.deletions}",
            f"Change-type counts: {json.dumps(aggregate.type_counts)}",
            f"Risk distribution: {json.dumps(aggregate.risk_counts)}",
            f"Areas touched (top): {', '.join(aggregate.top_areas) or '(n/a)'}",
            "Below are commit-level bullets:",
            bullets,
            "\nReturn MARKDOWN with these sections:\n" + _SECTIONS
            + "Render the changelog as a table with: short SHA, date, author, "
            "one-liner summary.",
        ]
    )


class PeriodRollupGenerator:
    """Produces the narrative report; the raw model text is the artifact."""

    def __init__(self, llm_gateway: LlmGateway) -> None:
        self._llm = llm_gateway

    async def generate(
        self,
        repo: str,
        since: str,
        until: str,
        aggregate: Aggregate,
        commits: Sequence[EnrichedCommit],
    ) -> str:
        prompt = build_period_prompt(repo, since, until, aggregate, commits)
        raw = await self._llm.complete(prompt, **completion_options(self._llm.model))
        text = (raw or "").strip()
        if not text:
            logger.warning("Period summary for %s came back empty", repo)
            return EMPTY_ROLLUP
        return text
