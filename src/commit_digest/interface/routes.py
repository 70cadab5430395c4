"""API routes — thin controllers that delegate to the use cases."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from commit_digest.domain.exceptions import InvalidInputError
from commit_digest.infrastructure.config import Settings
from commit_digest.interface.dependencies import (
    get_analyze_use_case,
    get_app_settings,
    get_list_branches_use_case,
    get_progress_registry,
)
from commit_digest.interface.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    BranchesResponse,
    ConfigResponse,
)
from commit_digest.interface.sse import format_item, format_ping
from commit_digest.services.analyze_commits import AnalyzeCommitsUseCase
from commit_digest.services.list_branches import ListBranchesUseCase
from commit_digest.services.progress import ProgressMarker, ProgressRegistry

router = APIRouter(prefix="/api")

PING_INTERVAL_SECONDS = 15.0


@router.post(
    "/analyze",
    response_model=AnalyzeResponse,
    responses={
        400: {"description": "Missing fields or unparseable repo reference"},
        403: {"description": "Repository is private or access denied"},
        404: {"description": "Repository not found"},
        429: {"description": "GitHub API rate limit exceeded"},
        500: {"description": "Analysis pipeline failure"},
        502: {"description": "GitHub or LLM provider error"},
    },
)
async def analyze(
    body: AnalyzeRequest,
    use_case: AnalyzeCommitsUseCase = Depends(get_analyze_use_case),
) -> AnalyzeResponse:
    """Summarise the commits of a repository over a time window."""
    report = await use_case.execute(body.to_domain())
    return AnalyzeResponse.from_domain(report)


@router.get("/repo/branches", response_model=BranchesResponse)
async def repo_branches(
    repo: str | None = None,
    use_case: ListBranchesUseCase = Depends(get_list_branches_use_case),
) -> BranchesResponse:
    """Validate a repository reference and list its branches."""
    if not repo:
        raise InvalidInputError("Missing ?repo=owner/repo")
    listing = await use_case.execute(repo)
    return BranchesResponse.from_domain(listing)


@router.get("/progress/{request_id}")
async def progress_stream(
    request_id: str,
    registry: ProgressRegistry = Depends(get_progress_registry),
) -> StreamingResponse:
    """Stream a run's narration as Server-Sent Events."""
    subscription = registry.subscribe(request_id)

    async def _events() -> AsyncIterator[str]:
        try:
            while True:
                try:
                    item = await asyncio.wait_for(
                        subscription.get(), timeout=PING_INTERVAL_SECONDS
                    )
                except asyncio.TimeoutError:
                    yield format_ping()
                    continue
                yield format_item(item)
                if item is ProgressMarker.DONE:
                    return
        finally:
            # the run keeps going; its events stay buffered
            registry.unsubscribe(request_id, subscription)

    return StreamingResponse(
        _events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.get("/config", response_model=ConfigResponse)
async def config(settings: Settings = Depends(get_app_settings)) -> ConfigResponse:
    return ConfigResponse(
        has_openai_key=bool(settings.openai_api_key.get_secret_value()),
        has_github_token=settings.github_token is not None
        and bool(settings.github_token.get_secret_value()),
        openai_model=settings.openai_model,
    )


@router.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}
