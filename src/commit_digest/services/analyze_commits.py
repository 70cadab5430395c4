"""Analyze-commits use case — the main orchestration pipeline.

This is the single entry point for the business logic.  It depends only on
the two ports (:class:`RepoFetcher` and :class:`LlmGateway`), the progress
registry and the pure service modules.  The interface layer injects concrete
adapters at runtime.

Stages run strictly in sequence::

    VALIDATING → COLLECTING → ENRICHING → AGGREGATING → SUMMARIZING → DONE
                          (any failure) → FAILED
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum

from commit_digest.domain.entities import AnalysisReport
from commit_digest.domain.exceptions import (
    CommitDigestError,
    InvalidInputError,
    PipelineFailureError,
)
from commit_digest.domain.ports.llm_gateway import LlmGateway
from commit_digest.domain.ports.repo_fetcher import RepoFetcher
from commit_digest.domain.value_objects import RepoRef
from commit_digest.services.aggregator import aggregate_commits
from commit_digest.services.commit_collector import CommitCollector
from commit_digest.services.commit_enricher import CommitEnricher
from commit_digest.services.commit_summarizer import DEFAULT_PATCH_BUDGET, CommitSummarizer
from commit_digest.services.period_rollup import PeriodRollupGenerator
from commit_digest.services.progress import ProgressNarrator, ProgressRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_COMMITS = 60


class PipelineStage(str, Enum):
    VALIDATING = "validating"
    COLLECTING = "collecting"
    ENRICHING = "enriching"
    AGGREGATING = "aggregating"
    SUMMARIZING = "summarizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class AnalysisRequest:
    """Inputs of one analysis run, as received from the caller."""

    repo: str | None
    since: str | None
    until: str | None
    branch: str | None = None
    include_merges: bool = False
    max_commits: int = DEFAULT_MAX_COMMITS
    request_id: str | None = None


class AnalyzeCommitsUseCase:
    """Orchestrates collect → enrich → aggregate → period summary.

    Parameters
    ----------
    repo_fetcher:
        Adapter that lists branches/commits and fetches commit details.
    llm_gateway:
        Adapter that sends prompts to an LLM.
    progress_registry:
        Shared registry receiving the run's narration.
    patch_budget:
        Per-file character cap for diff bodies embedded in prompts.
    """

    def __init__(
        self,
        repo_fetcher: RepoFetcher,
        llm_gateway: LlmGateway,
        progress_registry: ProgressRegistry,
        patch_budget: int = DEFAULT_PATCH_BUDGET,
    ) -> None:
        self._fetcher = repo_fetcher
        self._registry = progress_registry
        self._collector = CommitCollector(repo_fetcher)
        self._enricher = CommitEnricher(
            repo_fetcher, CommitSummarizer(llm_gateway, patch_budget=patch_budget)
        )
        self._rollup = PeriodRollupGenerator(llm_gateway)

    # ── Public entry point ──────────────────────────────────────────────

    async def execute(self, request: AnalysisRequest) -> AnalysisReport:
        """Run the full pipeline; the progress channel is always completed."""
        progress = ProgressNarrator(self._registry, request.request_id)
        started = time.monotonic()
        stage = PipelineStage.VALIDATING

        try:
            repo = self._validate(request)
            progress(
                f"Starting analysis for {request.repo} "
                f"from {request.since} to {request.until}…"
            )
            since, until = str(request.since), str(request.until)

            stage = PipelineStage.COLLECTING
            branch = await self._resolve_branch(repo, request.branch)
            commits = await self._collector.collect(
                repo,
                since=since,
                until=until,
                branch=branch,
                include_merges=request.include_merges,
                max_commits=request.max_commits,
                progress=progress,
            )

            stage = PipelineStage.ENRICHING
            progress(f"Enriching {len(commits)} commits…")
            enriched = await self._enricher.enrich(repo, commits, progress=progress)

            stage = PipelineStage.AGGREGATING
            progress(
                f"Aggregating {len(enriched.commits)} commits "
                f"({enriched.files} files, +{enriched.additions}/-{enriched.deletions})…"
            )
            aggregate = aggregate_commits(enriched.commits)

            stage = PipelineStage.SUMMARIZING
            progress("Generating period summary…")
            summary_markdown = await self._rollup.generate(
                repo.full_name, since, until, aggregate, enriched.commits
            )
        except CommitDigestError as exc:
            self._fail(progress, stage, exc)
            raise
        except Exception as exc:
            logger.exception("Analysis failed during %s", stage.value)
            self._fail(progress, stage, exc)
            raise PipelineFailureError(str(exc) or type(exc).__name__) from exc

        logger.debug(
            "Analysis %s: %s -> %s",
            progress.request_id or "-",
            stage.value,
            PipelineStage.DONE.value,
        )
        progress(f"Done in {round(time.monotonic() - started)}s.")
        progress.complete()
        return AnalysisReport(
            repo=repo.full_name,
            since=since,
            until=until,
            summary_markdown=summary_markdown,
            commits=enriched.commits,
            aggregate=aggregate,
        )

    # ── Stages ──────────────────────────────────────────────────────────

    @staticmethod
    def _validate(request: AnalysisRequest) -> RepoRef:
        if not request.repo or not request.since or not request.until:
            raise InvalidInputError("repo, since, and until are required")
        if request.max_commits < 0:
            raise InvalidInputError("maxCommits must not be negative")
        return RepoRef.from_string(request.repo)

    async def _resolve_branch(self, repo: RepoRef, branch: str | None) -> str:
        """Blank selection means the repository's default branch."""
        if branch and branch.strip():
            return branch.strip()
        metadata = await self._fetcher.fetch_metadata(repo)
        logger.debug("Using default branch %r for %s", metadata.default_branch, repo)
        return metadata.default_branch

    @staticmethod
    def _fail(progress: ProgressNarrator, stage: PipelineStage, exc: Exception) -> None:
        logger.warning(
            "Analysis %s: %s -> %s: %s",
            progress.request_id or "-",
            stage.value,
            PipelineStage.FAILED.value,
            exc,
        )
        progress(f"Error: {exc}")
        progress.complete()
