"""Period aggregation — pure fold over enriched commits."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from commit_digest.domain.entities import Aggregate, EnrichedCommit

TOP_AREAS_LIMIT = 10


def aggregate_commits(
    commits: Sequence[EnrichedCommit],
    top_areas_limit: int = TOP_AREAS_LIMIT,
) -> Aggregate:
    """Fold per-commit stats and summaries into period-level counts.

    ``top_areas`` is ordered by descending frequency; ties keep the order in
    which the area was first seen.
    """
    type_counts: Counter[str] = Counter()
    risk_counts: Counter[str] = Counter()
    area_counts: Counter[str] = Counter()
    files = additions = deletions = 0

    for commit in commits:
        files += len(commit.files)
        additions += commit.additions
        deletions += commit.deletions
        type_counts[commit.ai.change_type.value] += 1
        risk_counts[commit.ai.risk.value] += 1
        area_counts.update(commit.ai.areas)

    return Aggregate(
        count=len(commits),
        files=files,
        additions=additions,
        deletions=deletions,
        type_counts=dict(type_counts),
        risk_counts=dict(risk_counts),
        # most_common() keeps first-insertion order among equal counts
        top_areas=[area for area, _ in area_counts.most_common(top_areas_limit)],
    )
