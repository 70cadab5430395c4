"""FastAPI dependency injection wiring."""

from __future__ import annotations

import httpx

from commit_digest.infrastructure.config import Settings, get_settings
from commit_digest.infrastructure.github_rest_adapter import GitHubRestAdapter
from commit_digest.infrastructure.openai_adapter import OpenAIAdapter
from commit_digest.services.analyze_commits import AnalyzeCommitsUseCase
from commit_digest.services.list_branches import ListBranchesUseCase
from commit_digest.services.progress import ProgressRegistry

_http_client: httpx.AsyncClient | None = None
_openai_adapter: OpenAIAdapter | None = None
_progress_registry: ProgressRegistry | None = None


async def startup() -> None:
    """Initialise shared resources — called from the lifespan context manager."""
    global _http_client, _openai_adapter, _progress_registry  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds))
    _openai_adapter = OpenAIAdapter(
        api_key=settings.openai_api_key.get_secret_value(),
        model=settings.openai_model,
    )
    _progress_registry = ProgressRegistry(buffer_size=settings.progress_buffer_size)


async def shutdown() -> None:
    """Release shared resources."""
    global _http_client, _openai_adapter, _progress_registry  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None
    if _openai_adapter:
        await _openai_adapter.close()
        _openai_adapter = None
    _progress_registry = None


def get_app_settings() -> Settings:
    return get_settings()


def get_progress_registry() -> ProgressRegistry:
    assert _progress_registry is not None, "startup() was not called"
    return _progress_registry


def _github_adapter(settings: Settings) -> GitHubRestAdapter:
    assert _http_client is not None, "startup() was not called"
    token = settings.github_token.get_secret_value() if settings.github_token else None
    return GitHubRestAdapter(client=_http_client, token=token)


def get_analyze_use_case() -> AnalyzeCommitsUseCase:
    """Build the analysis use case with injected adapters."""
    settings = get_settings()
    assert _openai_adapter is not None, "startup() was not called"

    return AnalyzeCommitsUseCase(
        repo_fetcher=_github_adapter(settings),
        llm_gateway=_openai_adapter,
        progress_registry=get_progress_registry(),
        patch_budget=settings.patch_char_budget,
    )


def get_list_branches_use_case() -> ListBranchesUseCase:
    return ListBranchesUseCase(repo_fetcher=_github_adapter(get_settings()))
